"""Generic single-table record operations.

Table and column names are validated and quoted; every record value is
bound as a named parameter (``%(p0)s``, ``%(p1)s``, ...). Only insert
introspects the live table: unknown keys, nulls and value shapes are
rejected there before the statement is sent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tenantdb.core.compat import check_value, coerce_value
from tenantdb.core.exceptions import EngineError, InvalidColumn
from tenantdb.core.introspection import get_columns
from tenantdb.core.models import LiveColumnInfo, Record, TableData
from tenantdb.core.validation import quote_ident

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tenantdb.core.client import PgClient


def _bind(params: dict[str, Any], value: Any) -> str:
    name = f"p{len(params)}"
    params[name] = value
    return f"%({name})s"


def _qualified(schema: str, table: str) -> str:
    return f"{quote_ident(schema)}.{quote_ident(table)}"


def _equals(
    filters: Mapping[str, Any], params: dict[str, Any], separator: str
) -> str:
    return separator.join(
        f"{quote_ident(key)} = {_bind(params, value)}" for key, value in filters.items()
    )


def _first(client: PgClient, sql: str, params: dict[str, Any]) -> Record | None:
    rows = client.execute_query(sql, params).as_dicts()
    return rows[0] if rows else None


def insert_record(
    client: PgClient, table: str, record: Mapping[str, Any], schema: str = "public"
) -> Record:
    """Insert one row after checking it against the live columns.

    Raises InvalidColumn for keys the table lacks and InvalidType for
    nulls in NOT NULL columns or values of the wrong shape. An empty
    record inserts a row of defaults.
    """
    table_sql = _qualified(schema, table)
    live: dict[str, LiveColumnInfo] = {
        col.name: col for col in get_columns(client, schema, table)
    }

    unknown = [key for key in record if key not in live]
    if unknown:
        raise InvalidColumn(f"Invalid columns for '{table}': {', '.join(unknown)}")

    params: dict[str, Any] = {}
    names: list[str] = []
    placeholders: list[str] = []
    for key, value in record.items():
        column = live[key]
        check_value(column, value)
        names.append(quote_ident(key))
        placeholders.append(_bind(params, coerce_value(column, value)))

    if names:
        sql = (
            f"INSERT INTO {table_sql} ({', '.join(names)}) "
            f"VALUES ({', '.join(placeholders)}) RETURNING *"
        )
    else:
        sql = f"INSERT INTO {table_sql} DEFAULT VALUES RETURNING *"

    row = _first(client, sql, params)
    if row is None:
        raise EngineError(f"Insert into '{table}' returned no row")
    return row


def read_records(
    client: PgClient,
    table: str,
    filters: Mapping[str, Any] | None = None,
    schema: str = "public",
) -> list[Record]:
    """Rows matching every ``column = value`` pair; all rows when unfiltered."""
    sql = f"SELECT * FROM {_qualified(schema, table)}"
    params: dict[str, Any] = {}
    if filters:
        sql += f" WHERE {_equals(filters, params, ' AND ')}"
    return client.execute_query(sql, params or None).as_dicts()


def update_record(
    client: PgClient,
    table: str,
    id_column: str,
    id_value: Any,
    updates: Mapping[str, Any],
    schema: str = "public",
) -> Record | None:
    """Update the row(s) where ``id_column = id_value``.

    Returns the first updated row, or None when nothing matched.
    """
    if not updates:
        raise InvalidColumn(f"No columns to update in '{table}'")
    table_sql = _qualified(schema, table)
    params: dict[str, Any] = {}
    set_clause = _equals(updates, params, ", ")
    where_clause = _equals({id_column: id_value}, params, "")
    sql = f"UPDATE {table_sql} SET {set_clause} WHERE {where_clause} RETURNING *"
    return _first(client, sql, params)


def delete_record(
    client: PgClient,
    table: str,
    id_column: str,
    id_value: Any,
    schema: str = "public",
) -> Record | None:
    """Delete where ``id_column = id_value``; None when nothing matched."""
    params: dict[str, Any] = {}
    where_clause = _equals({id_column: id_value}, params, "")
    sql = f"DELETE FROM {_qualified(schema, table)} WHERE {where_clause} RETURNING *"
    return _first(client, sql, params)


def get_columns_list(client: PgClient, schema: str, table: str) -> list[LiveColumnInfo]:
    return get_columns(client, schema, table)


def get_table_with_columns_and_data(
    client: PgClient, schema: str, table: str
) -> TableData:
    columns = get_columns(client, schema, table)
    rows = read_records(client, table, schema=schema)
    return TableData(columns=columns, rows=rows)
