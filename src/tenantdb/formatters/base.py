"""Formatter protocol, name registry and record cell rendering."""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tenantdb.core.models import QueryResult


@runtime_checkable
class Formatter(Protocol):
    """Turns a QueryResult into output lines.

    Formatters yield lines so large tables stream to stdout.
    """

    def format(self, result: QueryResult) -> Iterator[str]: ...


def render_value(value: Any) -> str:
    """Text for one non-null record value in the notation psql prints.

    Booleans are ``true``/``false``, decimals never use exponents, json and
    jsonb values are compact JSON and bytea is ``\\x``-prefixed hex.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f") if value.is_finite() else str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    return str(value)


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class FormatterRegistry:
    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Instantiate the formatter registered as ``name``.

        Raises KeyError for unknown names.
        """
        try:
            formatter_class = self._formatters[name]
        except KeyError:
            msg = f"Unknown format {name!r}. Available: {', '.join(self.available)}"
            raise KeyError(msg) from None
        return formatter_class(**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


registry = FormatterRegistry()
