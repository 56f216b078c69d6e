"""Live schema introspection.

Reads column metadata, primary-key membership and table statistics from
information_schema and pg_catalog. The results drive both DDL checks and
record validation, so they are always read fresh, never cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tenantdb.core.exceptions import InvalidIdentifier, SchemaNotFound
from tenantdb.core.models import LiveColumnInfo, TableInfo
from tenantdb.core.validation import quote_ident, validate_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tenantdb.core.client import PgClient

_COLUMNS_SQL = """
SELECT
    c.column_name,
    c.data_type,
    c.udt_name,
    c.is_nullable = 'YES' AS is_nullable,
    pk.column_name IS NOT NULL AS is_primary
FROM information_schema.columns c
LEFT JOIN (
    SELECT kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON tc.constraint_name = kcu.constraint_name
     AND tc.table_schema = kcu.table_schema
     AND tc.table_name = kcu.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
      AND tc.table_schema = %(schema)s
      AND tc.table_name = %(table)s
) pk ON pk.column_name = c.column_name
WHERE c.table_schema = %(schema)s AND c.table_name = %(table)s
ORDER BY c.ordinal_position
"""

_COLUMN_EXISTS_SQL = """
SELECT 1
FROM information_schema.columns
WHERE table_schema = %(schema)s AND table_name = %(table)s AND column_name = %(column)s
"""

_PRIMARY_KEY_SQL = """
SELECT 1
FROM information_schema.table_constraints
WHERE table_schema = %(schema)s AND table_name = %(table)s
  AND constraint_type = 'PRIMARY KEY'
"""

_TABLES_SQL = """
SELECT table_name
FROM information_schema.tables
WHERE table_schema = %(schema)s
  AND table_type = 'BASE TABLE'
  AND table_name NOT LIKE %(internal)s
ORDER BY table_name
"""

_TABLE_STATS_SQL = """
SELECT
    obj_description(c.oid, 'pg_class') AS description,
    GREATEST(c.reltuples, 0)::bigint AS rows_estimated,
    pg_size_pretty(pg_total_relation_size(c.oid)) AS size,
    (SELECT COUNT(*) FROM information_schema.columns
      WHERE table_schema = %(schema)s AND table_name = %(table)s) AS columns_count
FROM pg_catalog.pg_class c
JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = %(schema)s AND c.relname = %(table)s
"""


def get_columns(client: PgClient, schema: str, table: str) -> list[LiveColumnInfo]:
    """Columns of ``schema.table`` in declaration order.

    Raises SchemaNotFound when the table has no visible columns.
    """
    validate_name(schema)
    validate_name(table)
    result = client.execute_query(_COLUMNS_SQL, {"schema": schema, "table": table})
    if not result.rows:
        raise SchemaNotFound(f"Table '{schema}.{table}' not found")
    return [
        LiveColumnInfo(
            name=name,
            type=data_type,
            udt_name=udt_name,
            is_nullable=bool(is_nullable),
            is_primary=bool(is_primary),
        )
        for name, data_type, udt_name, is_nullable, is_primary in result.rows
    ]


def column_exists(client: PgClient, schema: str, table: str, column: str) -> bool:
    result = client.execute_query(
        _COLUMN_EXISTS_SQL, {"schema": schema, "table": table, "column": column}
    )
    return bool(result.rows)


def has_primary_key(client: PgClient, schema: str, table: str) -> bool:
    result = client.execute_query(_PRIMARY_KEY_SQL, {"schema": schema, "table": table})
    return bool(result.rows)


def get_all_tables_info(
    client: PgClient,
    schema: str = "public",
    reserved: Iterable[str] = ("users",),
) -> list[TableInfo]:
    """Summaries of every user table in ``schema``.

    Migration bookkeeping tables and ``reserved`` names are skipped. Each
    table gets an ANALYZE first so the row estimate is current; this is one
    round of statements per table and meant for on-demand use.
    """
    validate_name(schema)
    reserved_names = set(reserved)
    result = client.execute_query(
        _TABLES_SQL, {"schema": schema, "internal": "%migrations%"}
    )

    tables: list[TableInfo] = []
    for (name,) in result.rows:
        if name in reserved_names:
            continue
        # Tables created outside tenantdb may carry names we refuse to quote.
        try:
            qualified = f"{quote_ident(schema)}.{quote_ident(name)}"
        except InvalidIdentifier:
            continue
        client.execute_query(f"ANALYZE {qualified}")
        stats = client.execute_query(_TABLE_STATS_SQL, {"schema": schema, "table": name})
        if not stats.rows:
            continue
        description, rows_estimated, size, columns_count = stats.rows[0]
        tables.append(
            TableInfo(
                name=name,
                description=description,
                rows_estimated=rows_estimated or 0,
                size=size,
                columns_count=columns_count,
            )
        )
    return tables
