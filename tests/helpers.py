"""Builders for fake query results and live column metadata."""

from tenantdb.core.models import ColumnMeta, LiveColumnInfo, QueryResult

_UDT_NAMES = {
    "integer": "int4",
    "smallint": "int2",
    "bigint": "int8",
    "numeric": "numeric",
    "real": "float4",
    "double precision": "float8",
    "boolean": "bool",
    "text": "text",
    "character varying": "varchar",
    "uuid": "uuid",
    "timestamp with time zone": "timestamptz",
    "date": "date",
    "jsonb": "jsonb",
}


def make_result(rows, names=None, status_message="SELECT 1"):
    """QueryResult with text-typed columns named ``names`` (or col0, col1...)."""
    if names is None:
        width = len(rows[0]) if rows else 1
        names = [f"col{i}" for i in range(width)]
    return QueryResult(
        columns=[ColumnMeta(name=n, type_oid=25, type_name="text") for n in names],
        rows=rows,
        row_count=len(rows),
        status_message=status_message,
    )


def live_column(name, type_="integer", nullable=True, primary=False):
    return LiveColumnInfo(
        name=name,
        type=type_,
        udt_name=_UDT_NAMES.get(type_, type_),
        is_nullable=nullable,
        is_primary=primary,
    )


def column_rows(*columns):
    """Result of the introspection query describing ``columns``."""
    return make_result(
        [(c.name, c.type, c.udt_name, c.is_nullable, c.is_primary) for c in columns]
    )


def executed_sql(client):
    """SQL text of every execute_query call, whitespace-normalized."""
    return [" ".join(c.args[0].split()) for c in client.execute_query.call_args_list]


def executed_params(client):
    return [
        c.args[1] if len(c.args) > 1 else c.kwargs.get("params")
        for c in client.execute_query.call_args_list
    ]
