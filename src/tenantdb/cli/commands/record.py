"""Record commands: insert, read, update, delete."""

from __future__ import annotations

from typing import Annotated

import typer

from tenantdb.cli.commands._shared import (
    get_service,
    output_result,
    parse_json_object,
    parse_scalar,
)
from tenantdb.cli.output import records_result

record_app = typer.Typer(help="Insert, read, update and delete rows", no_args_is_help=True)

TenantArg = Annotated[str, typer.Argument(help="Tenant database name")]
TableArg = Annotated[str, typer.Argument(help="Table name")]
IdColumnArg = Annotated[str, typer.Argument(help="Column identifying the row")]
IdValueArg = Annotated[
    str, typer.Argument(help="Value of the id column (JSON scalar or string)")
]


@record_app.command("insert")
def insert_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    record: Annotated[
        str,
        typer.Argument(help="JSON object of column values. Use @file or - for stdin."),
    ] = "{}",
) -> None:
    """Insert a row; prints the stored row including generated values."""
    values = parse_json_object(record, "record")
    with get_service(ctx) as service:
        row = service.insert_record(tenant, table, values)
    output_result(ctx, records_result([row]))


@record_app.command("read")
def read_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    filter: Annotated[
        str | None,
        typer.Option(
            "--filter", "-w", help='Equality filter as JSON, e.g. \'{"status": "open"}\''
        ),
    ] = None,
) -> None:
    """Print rows, optionally only those matching every filter pair."""
    filters = parse_json_object(filter, "filter") if filter else None
    with get_service(ctx) as service:
        rows = service.read_records(tenant, table, filters)
    output_result(ctx, records_result(rows))


@record_app.command("update")
def update_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    id_column: IdColumnArg,
    id_value: IdValueArg,
    updates: Annotated[
        str, typer.Argument(help="JSON object of new values. Use @file or - for stdin.")
    ],
) -> None:
    """Update the row(s) with the given id; prints the updated row."""
    values = parse_json_object(updates, "updates")
    with get_service(ctx) as service:
        row = service.update_record(
            tenant, table, id_column, parse_scalar(id_value), values
        )
    output_result(ctx, records_result([row] if row else []))


@record_app.command("delete")
def delete_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    id_column: IdColumnArg,
    id_value: IdValueArg,
) -> None:
    """Delete the row(s) with the given id; prints the deleted row."""
    with get_service(ctx) as service:
        row = service.delete_record(tenant, table, id_column, parse_scalar(id_value))
    output_result(ctx, records_result([row] if row else []))
