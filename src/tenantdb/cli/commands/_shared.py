"""Shared CLI plumbing for command modules.

Service construction from resolved config, JSON argument parsing and
output helpers.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tenantdb.cli.output import get_formatter, write_output
from tenantdb.core.config import ResolvedConfig, load_config, resolve_config
from tenantdb.core.exceptions import InputError
from tenantdb.core.service import TenantDatabaseService

if TYPE_CHECKING:
    import typer

    from tenantdb.core.models import QueryResult


def get_config(ctx: typer.Context) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    cached = obj.get("resolved_config")
    if isinstance(cached, ResolvedConfig):
        return cached

    cli_overrides: dict[str, Any] = {}
    for key in ("host", "port", "user", "password", "timeout", "schema"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val

    resolved = resolve_config(
        load_config(obj.get("config_file")),
        profile_name=obj.get("profile"),
        **cli_overrides,
    )
    obj["resolved_config"] = resolved
    return resolved


def get_service(ctx: typer.Context) -> TenantDatabaseService:
    return TenantDatabaseService(get_config(ctx))


def parse_json_arg(value: str, what: str) -> Any:
    """Parse a JSON argument; ``@path`` reads a file and ``-`` reads stdin."""
    if value == "-":
        text = sys.stdin.read()
    elif value.startswith("@"):
        path = Path(value[1:])
        if not path.exists():
            raise InputError(f"{what} file not found: {path}")
        text = path.read_text()
    else:
        text = value

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON for {what}: {e}") from e


def parse_json_object(value: str, what: str) -> dict[str, Any]:
    data = parse_json_arg(value, what)
    if not isinstance(data, dict):
        raise InputError(f"{what} must be a JSON object")
    return data


def parse_scalar(value: str) -> Any:
    """CLI id values: JSON scalars (``42``, ``true``) or bare strings."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return value
    return parsed if isinstance(parsed, (int, float, bool, str)) else value


def output_result(ctx: typer.Context, result: QueryResult) -> None:
    obj = ctx.ensure_object(dict)
    formatter = get_formatter(
        obj.get("format"),
        default=get_config(ctx).default_format,
        compact=obj.get("compact", False),
        width=obj.get("width", 40),
        no_header=obj.get("no_header", False),
    )
    write_output(formatter, result)
