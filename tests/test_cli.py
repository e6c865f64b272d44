"""Tests for the jinja-schema command line."""

from __future__ import annotations

import io
import json

import pytest

from jinja_schema import __version__
from jinja_schema.cli import main

TEMPLATE = "Hello {{ user.name }}\n{% for item in items %}{{ item.price }}{% endfor %}\n{{ age }}\n"


def run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestOutput:
    def test_prints_sample(self, capsys, template_file):
        code, out, _ = run(capsys, str(template_file(TEMPLATE)))
        assert code == 0
        assert json.loads(out) == {
            "user": {"name": ""},
            "items": [{"price": 0}],
            "age": 0,
        }

    def test_shapes(self, capsys, template_file):
        code, out, _ = run(capsys, str(template_file("{{ tags | join }}")), "--shape")
        assert code == 0
        assert json.loads(out) == {"tags": {"type": "array", "element": {"type": "unknown"}}}

    def test_line_range(self, capsys, template_file):
        code, out, _ = run(capsys, str(template_file(TEMPLATE)), "--lines", "3:3")
        assert code == 0
        assert json.loads(out) == {"age": 0}

    def test_single_line(self, capsys, template_file):
        code, out, _ = run(capsys, str(template_file(TEMPLATE)), "--lines", "1")
        assert json.loads(out) == {"user": {"name": ""}}

    def test_merge(self, capsys, template_file, tmp_path):
        previous = tmp_path / "previous.json"
        previous.write_text(json.dumps({"age": 42, "gone": True}), encoding="utf-8")
        code, out, _ = run(
            capsys, str(template_file("{{ name }}{{ age }}")), "--merge", str(previous)
        )
        assert code == 0
        assert json.loads(out) == {"name": "", "age": 42}

    def test_no_name_hints(self, capsys, template_file):
        _, out, _ = run(capsys, str(template_file("{{ age }}")), "--no-name-hints")
        assert json.loads(out) == {"age": ""}

    def test_keep_raw(self, capsys, template_file):
        path = str(template_file("{% raw %}{{ x }}{% endraw %}"))
        _, out, _ = run(capsys, path)
        assert json.loads(out) == {}
        _, out, _ = run(capsys, path, "--keep-raw")
        assert json.loads(out) == {"x": ""}

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("{{ title | upper }}"))
        code, out, _ = run(capsys, "-")
        assert code == 0
        assert json.loads(out) == {"title": ""}

    def test_malformed_template_is_not_an_error(self, capsys, template_file):
        code, out, _ = run(capsys, str(template_file("{% for x in %}{{ y")))
        assert code == 0
        assert json.loads(out) == {"y": ""}

    def test_indent(self, capsys, template_file):
        _, out, _ = run(capsys, str(template_file("{{ a }}")), "--indent", "4")
        assert out == '{\n    "a": ""\n}\n'


class TestErrors:
    def test_missing_file(self, capsys, tmp_path):
        code, out, err = run(capsys, str(tmp_path / "nope.html"))
        assert code == 2
        assert out == ""
        assert "cannot read input" in err

    def test_line_range_outside_source(self, capsys, template_file):
        code, _, err = run(capsys, str(template_file("{{ a }}\n")), "--lines", "3:1")
        assert code == 2
        assert "line range" in err.lower()

    def test_invalid_merge_json(self, capsys, template_file, tmp_path):
        previous = tmp_path / "previous.json"
        previous.write_text("{not json", encoding="utf-8")
        code, _, err = run(capsys, str(template_file("{{ a }}")), "--merge", str(previous))
        assert code == 2
        assert "invalid merge file" in err

    def test_merge_file_must_be_object(self, capsys, template_file, tmp_path):
        previous = tmp_path / "previous.json"
        previous.write_text("[1, 2]", encoding="utf-8")
        code, _, err = run(capsys, str(template_file("{{ a }}")), "--merge", str(previous))
        assert code == 2
        assert "JSON object" in err

    def test_unparsable_line_range(self, capsys, template_file):
        with pytest.raises(SystemExit) as exc_info:
            main([str(template_file("{{ a }}")), "--lines", "abc"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
