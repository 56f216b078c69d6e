"""Table commands: create, list, columns, data."""

from __future__ import annotations

from typing import Annotated

import typer

from tenantdb.cli.commands._shared import (
    get_service,
    output_result,
    parse_json_arg,
)
from tenantdb.cli.output import models_result, records_result
from tenantdb.core.exceptions import InputError

table_app = typer.Typer(help="Create and inspect tenant tables", no_args_is_help=True)

TenantArg = Annotated[str, typer.Argument(help="Tenant database name")]
TableArg = Annotated[str, typer.Argument(help="Table name")]
SchemaOpt = Annotated[
    str | None, typer.Option("--schema", "-s", help="Schema (default: configured)")
]


@table_app.command("create")
def create_command(
    ctx: typer.Context,
    tenant: TenantArg,
    name: TableArg,
    columns: Annotated[
        str,
        typer.Option(
            "--columns",
            "-c",
            help='JSON list of columns, e.g. \'[{"name": "id", "type": "serial", '
            '"isPrimary": true}]\'. Use @file or - for stdin.',
        ),
    ],
    description: Annotated[
        str | None, typer.Option("--description", help="Table comment")
    ] = None,
) -> None:
    """Create a table if it does not exist."""
    column_list = parse_json_arg(columns, "columns")
    if not isinstance(column_list, list) or not column_list:
        raise InputError("columns must be a non-empty JSON list")

    with get_service(ctx) as service:
        service.create_table(tenant, name, description, column_list)
    typer.echo(f"Table '{name}' created in database '{tenant}'")


@table_app.command("list")
def list_command(ctx: typer.Context, tenant: TenantArg) -> None:
    """List user tables with row estimates, size and column counts."""
    with get_service(ctx) as service:
        tables = service.get_all_tables_info(tenant)
    output_result(ctx, models_result(tables))


@table_app.command("columns")
def columns_command(
    ctx: typer.Context, tenant: TenantArg, table: TableArg, schema: SchemaOpt = None
) -> None:
    """Show live column metadata for a table."""
    with get_service(ctx) as service:
        columns = service.get_table_columns(tenant, schema or service.schema, table)
    output_result(ctx, models_result(columns))


@table_app.command("data")
def data_command(
    ctx: typer.Context, tenant: TenantArg, table: TableArg, schema: SchemaOpt = None
) -> None:
    """Show every row of a table."""
    with get_service(ctx) as service:
        data = service.get_table_with_columns_and_data(
            tenant, schema or service.schema, table
        )
    output_result(ctx, records_result(data.rows, [col.name for col in data.columns]))
