"""tenantdb entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import structlog
import typer

from tenantdb.__about__ import __version__
from tenantdb.cli.commands._shared import get_config
from tenantdb.cli.commands.column import column_app
from tenantdb.cli.commands.config import config_app
from tenantdb.cli.commands.record import record_app
from tenantdb.cli.commands.table import table_app
from tenantdb.cli.output import OutputFormat  # noqa: TC001
from tenantdb.core.exceptions import EngineError, TenantDbError
from tenantdb.core.logging import setup_logging
from tenantdb.core.monitoring import setup_sentry

app = typer.Typer(
    help="tenantdb - manage tables and records in per-tenant PostgreSQL databases",
    no_args_is_help=True,
)

app.add_typer(table_app, name="table")
app.add_typer(column_app, name="column")
app.add_typer(record_app, name="record")
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tenantdb {__version__}")
        raise typer.Exit()


def _start_monitoring(ctx: typer.Context) -> None:
    config = get_config(ctx)
    if not setup_sentry(config.sentry_dsn, config.environment):
        return

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "tenantdb"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log every statement"),
    ] = False,
    log_json: Annotated[
        bool,
        typer.Option("--log-json", help="Write logs as JSON lines"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named server profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="PostgreSQL port"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Statement timeout in seconds"),
    ] = None,
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Schema holding tenant tables"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """tenantdb - manage tables and records in per-tenant PostgreSQL databases."""
    setup_logging(verbose, json_output=log_json)

    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "profile": profile,
            "host": host,
            "port": port,
            "user": user,
            "password": password,
            "timeout": timeout,
            "schema": schema,
            "config_file": config_file,
            "format": format.value if format else None,
            "compact": compact,
            "width": width,
            "no_header": no_header,
        }
    )
    _start_monitoring(ctx)


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except TenantDbError as e:
        if isinstance(e, EngineError):
            structlog.get_logger().error("engine error", error=e.message, detail=e.detail)
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
