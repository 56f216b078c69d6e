"""Output formatters for tenantdb query and record results."""

from tenantdb.formatters.base import (
    Formatter,
    FormatterRegistry,
    registry,
    render_value,
)
from tenantdb.formatters.csv import CSVFormatter
from tenantdb.formatters.json import JSONFormatter
from tenantdb.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
    "render_value",
]
