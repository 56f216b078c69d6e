"""JSON formatter: one array of row objects."""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from tenantdb.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tenantdb.core.models import QueryResult


def _serialize_value(val: Any) -> Any:
    if isinstance(val, Decimal):
        return int(val) if val == val.to_integral_value() else float(val)
    if isinstance(val, (datetime, date, time)):
        return val.isoformat()
    if isinstance(val, UUID):
        return str(val)
    return val


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: QueryResult) -> Iterator[str]:
        rows = [
            {key: _serialize_value(val) for key, val in row.items()}
            for row in result.as_dicts()
        ]
        yield json.dumps(rows, indent=None if self.compact else 2, default=str)


registry.register("json", JSONFormatter)
