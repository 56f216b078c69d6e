"""Runtime type compatibility between record values and catalog column types.

Record values arrive untyped (JSON or CLI input). Each value is classified
into a ``ValueKind`` once, checked against the family of the live column
type, and converted to the Python type psycopg should bind.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from dateutil import parser as dateutil_parser

from tenantdb.core.exceptions import InvalidType

if TYPE_CHECKING:
    from tenantdb.core.models import LiveColumnInfo


class ValueKind(StrEnum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"
    OTHER = "other"


class TypeFamily(StrEnum):
    WHOLE_NUMBER = "whole_number"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    TEMPORAL = "temporal"
    ANY = "any"


# Keyed by both information_schema data_type and udt_name.
_FAMILIES: dict[str, TypeFamily] = {
    "integer": TypeFamily.WHOLE_NUMBER,
    "smallint": TypeFamily.WHOLE_NUMBER,
    "bigint": TypeFamily.WHOLE_NUMBER,
    "int2": TypeFamily.WHOLE_NUMBER,
    "int4": TypeFamily.WHOLE_NUMBER,
    "int8": TypeFamily.WHOLE_NUMBER,
    "numeric": TypeFamily.NUMBER,
    "real": TypeFamily.NUMBER,
    "double precision": TypeFamily.NUMBER,
    "float4": TypeFamily.NUMBER,
    "float8": TypeFamily.NUMBER,
    "boolean": TypeFamily.BOOLEAN,
    "bool": TypeFamily.BOOLEAN,
    "text": TypeFamily.STRING,
    "character varying": TypeFamily.STRING,
    "varchar": TypeFamily.STRING,
    "character": TypeFamily.STRING,
    "char": TypeFamily.STRING,
    "bpchar": TypeFamily.STRING,
    "uuid": TypeFamily.STRING,
    "timestamp without time zone": TypeFamily.TEMPORAL,
    "timestamp with time zone": TypeFamily.TEMPORAL,
    "timestamp": TypeFamily.TEMPORAL,
    "timestamptz": TypeFamily.TEMPORAL,
    "date": TypeFamily.TEMPORAL,
    "time without time zone": TypeFamily.TEMPORAL,
    "time with time zone": TypeFamily.TEMPORAL,
    "time": TypeFamily.TEMPORAL,
    "timetz": TypeFamily.TEMPORAL,
}

_BOOLEAN_STRINGS = {"true": True, "false": False}

# Exclusive upper bound of each integer width; the lower bound is its negation.
_INTEGER_LIMITS: dict[str, int] = {
    "smallint": 2**15,
    "int2": 2**15,
    "integer": 2**31,
    "int4": 2**31,
    "bigint": 2**63,
    "int8": 2**63,
}


def classify_value(value: Any) -> ValueKind:
    # bool is checked before int: True is an int in Python.
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, (float, Decimal)):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.OTHER


def type_family(column: LiveColumnInfo) -> TypeFamily:
    family = _FAMILIES.get(column.type.lower())
    if family is None:
        family = _FAMILIES.get(column.udt_name.lower(), TypeFamily.ANY)
    return family


def _fits_integer(column: LiveColumnInfo, number: int) -> bool:
    limit = _INTEGER_LIMITS.get(column.udt_name.lower()) or _INTEGER_LIMITS.get(
        column.type.lower()
    )
    return limit is None or -limit <= number < limit


def _is_temporal_string(value: str) -> bool:
    try:
        dateutil_parser.parse(value)
    except (ValueError, OverflowError):
        return False
    return True


def is_compatible(column: LiveColumnInfo, value: Any) -> bool:
    """True when ``value`` may be written to ``column``."""
    kind = classify_value(value)
    if kind is ValueKind.NULL:
        return column.is_nullable

    family = type_family(column)
    if family is TypeFamily.WHOLE_NUMBER:
        if kind is ValueKind.INTEGER:
            return _fits_integer(column, value)
        if kind is ValueKind.FLOAT and float(value).is_integer():
            return _fits_integer(column, int(value))
        return False
    if family is TypeFamily.NUMBER:
        return kind in (ValueKind.INTEGER, ValueKind.FLOAT)
    if family is TypeFamily.BOOLEAN:
        return kind is ValueKind.BOOLEAN or (
            kind is ValueKind.STRING and value in _BOOLEAN_STRINGS
        )
    if family is TypeFamily.STRING:
        return kind is ValueKind.STRING
    if family is TypeFamily.TEMPORAL:
        return kind is ValueKind.STRING and _is_temporal_string(value)
    return True


def check_value(column: LiveColumnInfo, value: Any) -> None:
    """Raise InvalidType unless ``value`` fits ``column``."""
    if is_compatible(column, value):
        return
    if value is None:
        raise InvalidType(f"Column '{column.name}' does not accept null")
    raise InvalidType(
        f"Invalid value for column '{column.name}' ({column.type}): "
        f"{classify_value(value)} {value!r}"
    )


def coerce_value(column: LiveColumnInfo, value: Any) -> Any:
    """Convert a checked value to the type psycopg should bind for ``column``."""
    family = type_family(column)
    kind = classify_value(value)
    if family is TypeFamily.BOOLEAN and kind is ValueKind.STRING:
        return _BOOLEAN_STRINGS[value]
    if family is TypeFamily.WHOLE_NUMBER and kind is ValueKind.FLOAT:
        return int(value)
    return value
