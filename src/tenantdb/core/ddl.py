"""DDL operations: create table, add/drop/rename column, change column type.

Statements are assembled from identifiers and types that have passed
tenantdb.core.validation; default values are the only other text spliced
in, and they go through format_default(). Driver failures surface as
DdlFailure; connection problems and timeouts keep their own types.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, Any

import structlog

from tenantdb.core.exceptions import (
    ConflictError,
    DdlFailure,
    DuplicateColumn,
    DuplicatePrimaryKey,
    EngineError,
    NetworkError,
)
from tenantdb.core.introspection import column_exists, has_primary_key
from tenantdb.core.validation import quote_ident, validate_name, validate_type

if TYPE_CHECKING:
    from tenantdb.core.client import PgClient
    from tenantdb.core.models import ColumnDescriptor, TableDescriptor

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
# now(), uuid_generate_v4(), nextval(orders_id_seq): a bare function name
# with unquoted, non-nested arguments.
_FUNCTION_CALL_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\([\w\s,.]*\)$")
_KEYWORDS = {"true", "false", "null"}
# float and numeric accept these spellings as quoted input.
_NON_FINITE = {math.inf: "Infinity", -math.inf: "-Infinity"}


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def format_default(value: Any) -> str:
    """Render a DEFAULT expression.

    Numbers, true/false/null and call-like expressions pass through;
    anything else becomes a quoted string literal. Infinite and NaN
    floats are quoted in the spelling PostgreSQL parses.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        return quote_literal(_NON_FINITE.get(value, "NaN"))
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value).strip()
    if (
        _NUMBER_RE.match(text)
        or text.lower() in _KEYWORDS
        or _FUNCTION_CALL_RE.match(text)
    ):
        return text
    return quote_literal(str(value))


def _qualified(schema: str, table: str) -> str:
    return f"{quote_ident(schema)}.{quote_ident(table)}"


def column_clause(column: ColumnDescriptor) -> str:
    """``"name" type [DEFAULT x] [NOT NULL]`` for a validated column."""
    clause = f"{quote_ident(column.name)} {validate_type(column.type)}"
    if column.default_value is not None:
        clause += f" DEFAULT {format_default(column.default_value)}"
    if column.is_nullable is False:
        clause += " NOT NULL"
    return clause


def _execute_ddl(client: PgClient, sql: str, action: str) -> None:
    try:
        client.execute_query(sql)
    except NetworkError:
        raise
    except EngineError as e:
        raise DdlFailure(f"Failed to {action}: {e.message}") from e


def build_create_table(descriptor: TableDescriptor, schema: str = "public") -> str:
    table_sql = _qualified(schema, descriptor.name)
    clauses = [column_clause(col) for col in descriptor.columns]

    primary = [col.name for col in descriptor.columns if col.is_primary]
    if len(primary) > 1:
        msg = (
            f"Table '{descriptor.name}' declares more than one primary key column: "
            f"{', '.join(primary)}"
        )
        raise DuplicatePrimaryKey(msg)
    if primary:
        clauses.append(f"PRIMARY KEY ({quote_ident(primary[0])})")

    body = ",\n  ".join(clauses)
    return f"CREATE TABLE IF NOT EXISTS {table_sql} (\n  {body}\n)"


def create_table(
    client: PgClient, descriptor: TableDescriptor, schema: str = "public"
) -> None:
    """Create the table if absent and attach its description as a comment.

    Repeating the call with the same descriptor is a no-op apart from
    rewriting the comment.
    """
    validate_name(schema)
    sql = build_create_table(descriptor, schema)
    _execute_ddl(client, sql, f"create table '{descriptor.name}'")

    if descriptor.description:
        comment_sql = (
            f"COMMENT ON TABLE {_qualified(schema, descriptor.name)} "
            f"IS {quote_literal(descriptor.description)}"
        )
        _execute_ddl(client, comment_sql, f"comment on table '{descriptor.name}'")

    structlog.get_logger().info(
        "table created", table=descriptor.name, columns=len(descriptor.columns)
    )


def add_column(
    client: PgClient, table: str, column: ColumnDescriptor, schema: str = "public"
) -> None:
    """Add a column, and optionally make it the primary key, atomically.

    The table is locked for the whole transaction so the existence checks
    cannot race with other DDL on it. Any failure rolls everything back.
    """
    table_sql = _qualified(schema, table)
    clause = column_clause(column)
    log = structlog.get_logger()

    try:
        with client.transaction() as tx:
            tx.execute_query(f"LOCK TABLE {table_sql} IN ACCESS EXCLUSIVE MODE")
            if column_exists(tx, schema, table, column.name):
                raise DuplicateColumn(
                    f"Column '{column.name}' already exists in table '{table}'"
                )
            tx.execute_query(f"ALTER TABLE {table_sql} ADD COLUMN {clause}")

            if column.is_primary:
                if has_primary_key(tx, schema, table):
                    raise DuplicatePrimaryKey(
                        f"Table '{table}' already has a primary key"
                    )
                tx.execute_query(
                    f"ALTER TABLE {table_sql} ADD PRIMARY KEY ({quote_ident(column.name)})"
                )
    except ConflictError as e:
        log.warning("add column rejected", table=table, column=column.name, error=e.message)
        raise
    except NetworkError:
        raise
    except EngineError as e:
        msg = f"Failed to add column '{column.name}' to '{table}': {e.message}"
        raise DdlFailure(msg) from e

    log.info("column added", table=table, column=column.name, primary=column.is_primary)


def drop_column(
    client: PgClient, table: str, column_name: str, schema: str = "public"
) -> None:
    sql = f"ALTER TABLE {_qualified(schema, table)} DROP COLUMN {quote_ident(column_name)}"
    _execute_ddl(client, sql, f"drop column '{column_name}' from '{table}'")
    structlog.get_logger().info("column dropped", table=table, column=column_name)


def rename_column(
    client: PgClient,
    table: str,
    old_name: str,
    new_name: str,
    schema: str = "public",
) -> None:
    sql = (
        f"ALTER TABLE {_qualified(schema, table)} "
        f"RENAME COLUMN {quote_ident(old_name)} TO {quote_ident(new_name)}"
    )
    _execute_ddl(client, sql, f"rename column '{old_name}' in '{table}'")
    structlog.get_logger().info(
        "column renamed", table=table, column=old_name, new_name=new_name
    )


def alter_column_type(
    client: PgClient,
    table: str,
    column_name: str,
    new_type: str,
    schema: str = "public",
) -> None:
    """Change a column's type, casting existing values explicitly.

    The USING cast is needed whenever stored values have no implicit
    coercion to the new type (text to integer, for example).
    """
    column_sql = quote_ident(column_name)
    type_sql = validate_type(new_type)
    sql = (
        f"ALTER TABLE {_qualified(schema, table)} "
        f"ALTER COLUMN {column_sql} TYPE {type_sql} USING {column_sql}::{type_sql}"
    )
    _execute_ddl(client, sql, f"change type of column '{column_name}' in '{table}'")
    structlog.get_logger().info(
        "column type changed", table=table, column=column_name, new_type=type_sql
    )
