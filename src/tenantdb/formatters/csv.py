"""CSV formatter (RFC 4180) for record results.

Cells use the psql text notation from ``render_value``; SQL NULL is an
empty field, so ``null_text`` can tell it apart from an empty string when
that matters to the consumer.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING, Any

from tenantdb.formatters.base import registry, render_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tenantdb.core.models import QueryResult


class CSVFormatter:
    def __init__(self, no_header: bool = False, null_text: str = "") -> None:
        self.no_header = no_header
        self.null_text = null_text

    def _cell(self, value: Any) -> str:
        return self.null_text if value is None else render_value(value)

    def format(self, result: QueryResult) -> Iterator[str]:
        buf = StringIO()
        writer = csv.writer(buf, lineterminator="\n")

        def line(cells: Iterable[str]) -> str:
            buf.seek(0)
            buf.truncate()
            writer.writerow(list(cells))
            return buf.getvalue().removesuffix("\n")

        if not self.no_header:
            yield line(col.name for col in result.columns)
        for row in result.rows:
            yield line(self._cell(value) for value in row)


registry.register("csv", CSVFormatter)
