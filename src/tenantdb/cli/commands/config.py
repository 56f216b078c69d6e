"""Configuration CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from tenantdb.cli.commands._shared import get_config
from tenantdb.core.config import DEFAULT_CONFIG_PATH, load_config

if TYPE_CHECKING:
    from pathlib import Path

config_app = typer.Typer(help="Configuration commands", no_args_is_help=True)


def _mask(value: str | None) -> str:
    return "not set" if value is None else "***"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved settings with where each one came from."""
    resolved = get_config(ctx)
    sources = resolved.sources

    sections = {
        "Server": [
            ("host", resolved.host),
            ("port", resolved.port),
            ("user", resolved.user or "not set"),
            ("password", _mask(resolved.password)),
            ("sslmode", resolved.sslmode),
            ("connect_timeout", f"{resolved.connect_timeout}s"),
        ],
        "Pools": [
            ("pool_min_size", resolved.pool_min_size),
            ("pool_max_size", resolved.pool_max_size),
            ("pool_timeout", f"{resolved.pool_timeout}s"),
            ("statement_timeout", f"{resolved.statement_timeout}s"),
        ],
        "Schema": [
            ("default_schema", resolved.default_schema),
            ("reserved_tables", ", ".join(resolved.reserved_tables) or "none"),
        ],
        "General": [
            ("default_format", resolved.default_format),
            ("sentry", "enabled" if resolved.sentry_dsn else "disabled"),
            ("environment", resolved.environment),
        ],
    }
    for title, fields in sections.items():
        typer.echo(f"{title}:")
        for name, value in fields:
            source_key = "sentry_dsn" if name == "sentry" else name
            typer.echo(f"  {name}: {value} ({sources.get(source_key, 'default')})")
        typer.echo("")

    typer.echo(f"Active Profile: {resolved.active_profile or 'none'}")
    config_path: Path | None = ctx.ensure_object(dict).get("config_file")
    typer.echo(f"Config File: {config_path or DEFAULT_CONFIG_PATH}")


@config_app.command("profiles")
def config_profiles(ctx: typer.Context) -> None:
    """List server profiles from the config file."""
    obj = ctx.ensure_object(dict)
    config_path: Path | None = obj.get("config_file")
    app_config = load_config(config_path)

    if not app_config.profiles:
        typer.echo("No profiles configured.")
        typer.echo(f"Add profiles to: {config_path or DEFAULT_CONFIG_PATH}")
        return

    active = obj.get("profile") or app_config.default_profile
    for name, profile in sorted(app_config.profiles.items()):
        marker = "* " if name == active else "  "
        user = f"{profile.user}@" if profile.user else ""
        typer.echo(f"{marker}{name}: {user}{profile.host}:{profile.port}")
