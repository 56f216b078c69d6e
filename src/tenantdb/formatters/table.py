"""Rich table formatter for record results.

Columns whose values are all numbers are right-aligned, NULL shows as a
dimmed marker, and long cells are cut to ``width`` characters.
"""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from tenantdb.formatters.base import is_numeric, registry, render_value

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tenantdb.core.models import QueryResult

_EMPTY = "(0 rows)"
_NULL = "∅"


def _numeric_columns(result: QueryResult) -> set[int]:
    numeric: set[int] = set()
    for index in range(len(result.columns)):
        values = [row[index] for row in result.rows if row[index] is not None]
        if values and all(is_numeric(v) for v in values):
            numeric.add(index)
    return numeric


class TableFormatter:
    def __init__(self, width: int = 40) -> None:
        self.width = width

    def _cell(self, value: Any) -> Text | str:
        if value is None:
            return Text(_NULL, style="dim")
        text = render_value(value)
        if len(text) > self.width:
            text = text[: self.width - 1] + "…"
        return text

    def format(self, result: QueryResult) -> Iterator[str]:
        if not result.rows:
            yield _EMPTY
            return

        numeric = _numeric_columns(result)
        table = Table(show_edge=True, pad_edge=True)
        for index, col in enumerate(result.columns):
            table.add_column(
                col.name, no_wrap=True, justify="right" if index in numeric else "left"
            )
        for row in result.rows:
            table.add_row(*(self._cell(v) for v in row))

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        Console(file=buf, force_terminal=True, width=term_width).print(table)
        yield buf.getvalue().rstrip("\n")
        yield f"({result.row_count} row{'s' if result.row_count != 1 else ''})"


registry.register("table", TableFormatter)
