"""Output format selection, TTY auto-detection and result shaping."""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from tenantdb.core.models import ColumnMeta, QueryResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pydantic import BaseModel

    from tenantdb.formatters.base import Formatter


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def detect_tty() -> bool:
    return sys.stdout.isatty()


def resolve_format(format_flag: str | None, default: str | None = None) -> str:
    """Pick the output format.

    Explicit --format wins; otherwise table on a terminal and the
    configured default (csv when unset) for pipes.
    """
    if format_flag is not None:
        return format_flag
    if detect_tty():
        return "table"
    return default if default and default != "table" else "csv"


def get_formatter(
    format_flag: str | None = None,
    *,
    default: str | None = None,
    compact: bool = False,
    width: int = 40,
    no_header: bool = False,
) -> Formatter:
    # Importing the modules populates the registry.
    import tenantdb.formatters.csv  # noqa: F401
    import tenantdb.formatters.json  # noqa: F401
    import tenantdb.formatters.table  # noqa: F401
    from tenantdb.formatters.base import registry

    fmt_name = resolve_format(format_flag, default)

    kwargs: dict[str, object] = {}
    if fmt_name == "table":
        kwargs["width"] = width
    elif fmt_name == "json":
        kwargs["compact"] = compact
    elif fmt_name == "csv":
        kwargs["no_header"] = no_header

    return registry.get(fmt_name, **kwargs)


def write_output(formatter: Formatter, result: QueryResult) -> None:
    for line in formatter.format(result):
        sys.stdout.write(line + "\n")


def records_result(
    rows: Sequence[dict[str, Any]], names: Sequence[str] | None = None
) -> QueryResult:
    """Wrap record dicts (all with the same keys) as a QueryResult."""
    if names is None:
        names = list(rows[0]) if rows else []
    return QueryResult(
        columns=[ColumnMeta(name=name, type_oid=0, type_name="unknown") for name in names],
        rows=[tuple(row[name] for name in names) for row in rows],
        row_count=len(rows),
        status_message=f"SELECT {len(rows)}",
    )


def models_result(models: Sequence[BaseModel]) -> QueryResult:
    return records_result([model.model_dump() for model in models])
