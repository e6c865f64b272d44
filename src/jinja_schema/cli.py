"""Command-line entry point: print the sample data a template expects.

Usage:
    jinja-schema template.html
    jinja-schema template.html --lines 10:42 --shape
    cat template.html | jinja-schema - --merge previous.json

Exit status is 0 on success and 2 when the template or merge file cannot
be read, the line range is invalid, or the merge file is not a JSON object.
Template syntax problems are never fatal; with ``-v`` they are logged.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from jinja_schema import __version__
from jinja_schema.analysis import ExtractionConfig, analyze_template
from jinja_schema.exceptions import SchemaError
from jinja_schema.sample import merge_samples
from jinja_schema.utils.text import slice_lines

logger = logging.getLogger(__name__)


def _line_range(value: str) -> tuple[int, int | None]:
    """Parse ``A:B``, ``A:`` or ``A`` into a 1-based inclusive range."""
    start_text, sep, end_text = value.partition(":")
    try:
        start = int(start_text)
        if not sep:
            return start, start
        return start, int(end_text) if end_text.strip() else None
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid line range {value!r}; expected START:END, START: or LINE"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jinja-schema",
        description="Infer the variables a Jinja template expects and print sample data.",
    )
    parser.add_argument("template", help="Template file, or - to read standard input")
    parser.add_argument(
        "--lines",
        type=_line_range,
        metavar="START:END",
        help="Analyze only this 1-based inclusive line range",
    )
    parser.add_argument(
        "--shape",
        action="store_true",
        help="Print inferred shapes instead of sample data",
    )
    parser.add_argument(
        "--merge",
        type=Path,
        metavar="FILE",
        help="Keep edited values from an existing JSON sample",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument(
        "--keep-raw",
        action="store_true",
        help="Analyze markup inside {%% raw %%} blocks",
    )
    parser.add_argument(
        "--no-name-hints",
        action="store_true",
        help="Do not type unknown values from their names",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _read_template(name: str) -> str:
    if name == "-":
        return sys.stdin.read()
    return Path(name).read_text(encoding="utf-8")


def _read_sample(path: Path) -> dict:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SchemaError(f"{path}: merge file must contain a JSON object")
    return data


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        source = _read_template(args.template)
        if args.lines is not None:
            source = slice_lines(source, *args.lines)
        existing = _read_sample(args.merge) if args.merge is not None else None
    except (OSError, UnicodeDecodeError) as e:
        print(f"jinja-schema: cannot read input: {e}", file=sys.stderr)
        return 2
    except json.JSONDecodeError as e:
        print(f"jinja-schema: invalid merge file: {e}", file=sys.stderr)
        return 2
    except SchemaError as e:
        print(f"jinja-schema: {e}", file=sys.stderr)
        return 2

    config = ExtractionConfig(
        raw_is_inert=not args.keep_raw,
        name_hints=not args.no_name_hints,
    )
    analysis = analyze_template(source, config)
    for diagnostic in analysis.diagnostics:
        logger.info("%s", diagnostic)

    indent = args.indent if args.indent >= 0 else None
    if args.shape:
        output = analysis.schema.to_json(indent, shapes=True)
    else:
        sample = analysis.schema.to_sample()
        if existing is not None:
            sample = merge_samples(sample, existing)
        output = json.dumps(sample, indent=indent)
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
