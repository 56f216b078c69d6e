"""Column commands: add, drop, rename, alter-type."""

from __future__ import annotations

from typing import Annotated

import typer

from tenantdb.cli.commands._shared import get_service, parse_json_object

column_app = typer.Typer(help="Change the columns of a tenant table", no_args_is_help=True)

TenantArg = Annotated[str, typer.Argument(help="Tenant database name")]
TableArg = Annotated[str, typer.Argument(help="Table name")]
ColumnArg = Annotated[str, typer.Argument(help="Column name")]


@column_app.command("add")
def add_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    column: Annotated[
        str,
        typer.Argument(
            help='JSON column definition, e.g. \'{"name": "email", "type": "text", '
            '"isNullable": false}\'. Use @file or - for stdin.'
        ),
    ],
) -> None:
    """Add a column (and optionally a primary key) in one transaction."""
    definition = parse_json_object(column, "column")
    with get_service(ctx) as service:
        service.add_column(tenant, table, definition)
    typer.echo(f"Column '{definition.get('name')}' added to '{table}'")


@column_app.command("drop")
def drop_command(
    ctx: typer.Context, tenant: TenantArg, table: TableArg, name: ColumnArg
) -> None:
    """Drop a column."""
    with get_service(ctx) as service:
        service.drop_column(tenant, table, name)
    typer.echo(f"Column '{name}' dropped from '{table}'")


@column_app.command("rename")
def rename_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    old_name: ColumnArg,
    new_name: Annotated[str, typer.Argument(help="New column name")],
) -> None:
    """Rename a column."""
    with get_service(ctx) as service:
        service.rename_column(tenant, table, old_name, new_name)
    typer.echo(f"Column '{old_name}' renamed to '{new_name}' in '{table}'")


@column_app.command("alter-type")
def alter_type_command(
    ctx: typer.Context,
    tenant: TenantArg,
    table: TableArg,
    name: ColumnArg,
    new_type: Annotated[str, typer.Argument(help="New column type")],
) -> None:
    """Change a column's type, casting existing values."""
    with get_service(ctx) as service:
        service.alter_column_type(tenant, table, name, new_type)
    typer.echo(f"Column '{name}' in '{table}' is now {new_type.lower()}")
