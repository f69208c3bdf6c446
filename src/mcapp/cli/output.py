"""Tabular and structured output for listing commands.

A writer takes a column spec of ``(HEADER, "dotted.field.path")`` pairs
and a sequence of rows (dataclasses or mappings).  Table output is
buffered and rendered on :meth:`OutputWriter.close`, so the writer must
be closed, preferably through ``with``.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from typing import Any, TextIO

import yaml

from mcapp.cli.console import get_rich_console
from mcapp.exceptions import McappError, MissingDependencyError

FORMATS: tuple[str, ...] = ("table", "json", "yaml")

Column = tuple[str, str]


def resolve_field(row: object, path: str) -> Any:
    """Follow a dotted *path* through attributes and mapping keys."""
    value: Any = row
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def format_cell(value: Any) -> str:
    """Render a row value for display: ``True`` → ``*``, sequences joined by ``,``."""
    if value is None or value is False:
        return ""
    if value is True:
        return "*"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class OutputWriter:
    """Writes rows as a Rich table, JSON lines or YAML documents.

    Parameters
    ----------
    columns:
        Display header and field path for every column.
    fmt:
        One of :data:`FORMATS`.
    stream:
        Destination for structured formats; defaults to stdout.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        fmt: str = "table",
        *,
        stream: TextIO | None = None,
    ) -> None:
        if fmt not in FORMATS:
            raise McappError(
                f"Unknown output format: {fmt}",
                hint=f"Choose one of: {', '.join(FORMATS)}.",
            )
        self._columns = tuple(columns)
        self._fmt = fmt
        self._stream = stream or sys.stdout
        self._rows: list[list[str]] = []
        self._count = 0
        self._closed = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> OutputWriter:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, row: object) -> None:
        cells = {header: format_cell(resolve_field(row, path)) for header, path in self._columns}
        if self._fmt == "table":
            self._rows.append(list(cells.values()))
        elif self._fmt == "json":
            self._stream.write(json.dumps(cells) + "\n")
        else:
            if self._count:
                self._stream.write("---\n")
            self._stream.write(yaml.safe_dump(cells, sort_keys=False))
        self._count += 1

    def close(self) -> None:
        """Flush buffered table rows (idempotent)."""
        if self._closed:
            return
        self._closed = True
        if self._fmt == "table":
            self._render_table()

    def _render_table(self) -> None:
        headers = [header for header, _ in self._columns]
        try:
            from rich.table import Table

            rich_console = get_rich_console(stderr=False)
        except (ModuleNotFoundError, MissingDependencyError):
            self._render_plain(headers)
            return

        table = Table(show_header=True, header_style="bold cyan", box=None, pad_edge=False)
        for header in headers:
            table.add_column(header)
        for cells in self._rows:
            table.add_row(*cells)
        rich_console.print(table)

    def _render_plain(self, headers: list[str]) -> None:
        widths = [
            max([len(h)] + [len(cells[i]) for cells in self._rows])
            for i, h in enumerate(headers)
        ]
        for line in [headers, *self._rows]:
            self._stream.write(
                "  ".join(cell.ljust(width) for cell, width in zip(line, widths)).rstrip() + "\n"
            )
