"""Text helpers."""

from __future__ import annotations

from jinja_schema.exceptions import LineRangeError


def slice_lines(source: str, start: int, end: int | None = None) -> str:
    """Lines ``start`` through ``end`` of ``source``, 1-based and inclusive.

    ``end=None`` reads to the last line. Line endings are preserved.

    Raises:
        LineRangeError: If the range is empty or falls outside the source

    Example:
        >>> slice_lines("a\\nb\\nc\\n", 2, 3)
        'b\\nc\\n'
    """
    lines = source.splitlines(keepends=True)
    count = max(len(lines), 1)
    last = count if end is None else end
    if start < 1 or last < start or last > count:
        raise LineRangeError(start, end, count)
    return "".join(lines[start - 1 : last])
