"""Identifier and column-type validation.

Identifiers and types are the only caller-supplied text that is ever
spliced into SQL; everything else is bound as a parameter. Nothing reaches
a statement without passing through this module first.
"""

from __future__ import annotations

import re

from tenantdb.core.exceptions import InvalidIdentifier, InvalidType

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Narrower than what PostgreSQL accepts; type expressions such as
# varchar(10) or text[] are rejected on purpose.
ALLOWED_TYPES: frozenset[str] = frozenset(
    {
        "text",
        "int",
        "integer",
        "smallint",
        "bigint",
        "numeric",
        "real",
        "double precision",
        "boolean",
        "uuid",
        "serial",
    }
)


def validate_name(name: str) -> str:
    """Return ``name`` unchanged or raise InvalidIdentifier."""
    if not isinstance(name, str) or not IDENTIFIER_RE.fullmatch(name):
        raise InvalidIdentifier(f"Invalid identifier: {name!r}")
    return name


def validate_type(type_name: str) -> str:
    """Return the lowercase type name or raise InvalidType."""
    if not isinstance(type_name, str):
        raise InvalidType(f"Invalid type: {type_name!r}")
    normalized = type_name.lower()
    if normalized not in ALLOWED_TYPES:
        allowed = ", ".join(sorted(ALLOWED_TYPES))
        raise InvalidType(f"Invalid type: {type_name!r}. Allowed types: {allowed}")
    return normalized


def quote_ident(name: str) -> str:
    """Validate ``name`` and return it double-quoted for use in SQL text."""
    return f'"{validate_name(name)}"'
