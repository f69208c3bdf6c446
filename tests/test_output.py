"""Tests for listing output (cli/output.py)."""

from __future__ import annotations

import io
import json
import sys
from datetime import datetime, timezone

import pytest
import yaml

from mcapp.cli.output import OutputWriter, format_cell, resolve_field
from mcapp.core.models import RevisionRow, VersionRow
from mcapp.exceptions import McappError

_COLUMNS = (("CURRENT", "current"), ("VERSION", "version"))


class TestResolveField:
    def test_attribute(self) -> None:
        assert resolve_field(VersionRow("1.0.0"), "version") == "1.0.0"

    def test_nested_mapping(self) -> None:
        assert resolve_field({"status": {"state": "active"}}, "status.state") == "active"

    def test_missing(self) -> None:
        assert resolve_field({"a": None}, "a.b") is None
        assert resolve_field(VersionRow("1.0.0"), "nope") is None

    def test_property(self) -> None:
        row = RevisionRow("rev1", datetime(2024, 5, 1, 9, 5, 3, tzinfo=timezone.utc))
        assert resolve_field(row, "human") == "01 May 2024 09:05:03 UTC"


class TestFormatCell:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, "*"), (False, ""), (None, ""), (("a", "b"), "a,b"), (3, "3"), ("x", "x")],
    )
    def test_values(self, value: object, expected: str) -> None:
        assert format_cell(value) == expected


class TestOutputWriter:
    def test_unknown_format(self) -> None:
        with pytest.raises(McappError):
            OutputWriter(_COLUMNS, "xml")

    def test_json_lines(self) -> None:
        stream = io.StringIO()
        with OutputWriter(_COLUMNS, "json", stream=stream) as writer:
            writer.write(VersionRow("1.0.0", current=True))
            writer.write(VersionRow("1.1.0"))
        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert lines == [
            {"CURRENT": "*", "VERSION": "1.0.0"},
            {"CURRENT": "", "VERSION": "1.1.0"},
        ]

    def test_yaml_documents(self) -> None:
        stream = io.StringIO()
        with OutputWriter(_COLUMNS, "yaml", stream=stream) as writer:
            writer.write(VersionRow("1.0.0"))
            writer.write(VersionRow("1.1.0"))
        docs = list(yaml.safe_load_all(stream.getvalue()))
        assert [d["VERSION"] for d in docs] == ["1.0.0", "1.1.0"]

    def test_table_rendered_on_close(self, capsys: pytest.CaptureFixture[str]) -> None:
        writer = OutputWriter(_COLUMNS)
        writer.write(VersionRow("1.0.0", current=True))
        assert capsys.readouterr().out == ""
        writer.close()
        writer.close()
        out = capsys.readouterr().out
        assert out.count("VERSION") == 1
        assert "1.0.0" in out

    def test_plain_table_without_rich(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "rich.table", None)
        stream = io.StringIO()
        with OutputWriter(_COLUMNS, stream=stream) as writer:
            writer.write(VersionRow("1.10.0", current=True))
        assert stream.getvalue().splitlines() == ["CURRENT  VERSION", "*        1.10.0"]
