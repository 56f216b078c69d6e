"""Configuration management for tenantdb.

Server settings shared by every tenant pool come from a TOML file,
environment variables and CLI flags. The tenant database name is never
configured here; it arrives with each operation.

Precedence order (highest to lowest):
1. CLI flags (--host, --port, ...)
2. Environment variables (PGHOST, PGPORT, PGUSER, PGPASSWORD, TENANTDB_SENTRY_DSN)
3. Named profile (--profile or TENANTDB_PROFILE env var)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from tenantdb.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "tenantdb" / "config.toml"

_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
    "TENANTDB_SENTRY_DSN": "sentry_dsn",
}

_INT_FIELDS = {"port", "connect_timeout", "pool_min_size", "pool_max_size"}

_VALID_SSLMODES = {
    "disable",
    "allow",
    "prefer",
    "require",
    "verify-ca",
    "verify-full",
}


class ServerProfile(BaseModel):
    """Connection settings for one PostgreSQL server hosting tenant databases."""

    host: str = "localhost"
    port: int = 5432
    user: str | None = None
    password: str | None = None
    sslmode: str = "prefer"
    connect_timeout: int = 10
    application_name: str = "tenantdb"

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        if v not in _VALID_SSLMODES:
            msg = f"Invalid sslmode: '{v}'. Must be one of: {', '.join(sorted(_VALID_SSLMODES))}"
            raise ValueError(msg)
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (1 <= v <= 65535):
            msg = f"Invalid port: {v}. Must be 1-65535"
            raise ValueError(msg)
        return v


class AppConfig(BaseModel):
    statement_timeout: float = 30.0
    pool_min_size: int = 1
    pool_max_size: int = 10
    pool_timeout: float = 30.0
    default_schema: str = "public"
    reserved_tables: list[str] = ["users"]
    default_format: str = "table"
    default_profile: str | None = None
    sentry_dsn: str | None = None
    environment: str = "local"
    profiles: dict[str, ServerProfile] = {}


class ResolvedConfig(BaseModel):
    host: str = "localhost"
    port: int = 5432
    user: str | None = None
    password: str | None = None
    sslmode: str = "prefer"
    connect_timeout: int = 10
    application_name: str = "tenantdb"
    statement_timeout: float = 30.0
    pool_min_size: int = 1
    pool_max_size: int = 10
    pool_timeout: float = 30.0
    default_schema: str = "public"
    reserved_tables: list[str] = ["users"]
    default_format: str = "table"
    sentry_dsn: str | None = None
    environment: str = "local"
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @model_validator(mode="after")
    def check_pool_bounds(self) -> ResolvedConfig:
        if self.pool_min_size < 0 or self.pool_max_size < 1:
            msg = "Pool sizes must be positive"
            raise ValueError(msg)
        if self.pool_min_size > self.pool_max_size:
            msg = (
                f"pool_min_size ({self.pool_min_size}) exceeds "
                f"pool_max_size ({self.pool_max_size})"
            )
            raise ValueError(msg)
        return self

    def conninfo(self, dbname: str) -> str:
        """libpq connection string for one tenant database."""
        params: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": dbname,
            "sslmode": self.sslmode,
            "connect_timeout": self.connect_timeout,
            "application_name": self.application_name,
        }
        if self.user:
            params["user"] = self.user
        if self.password:
            params["password"] = self.password
        return make_conninfo(**params)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config file > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = ResolvedConfig().model_dump(
        exclude={"active_profile", "sources"}
    )
    for key in resolved:
        sources[key] = "default"

    for key in config.model_fields_set:
        if key in resolved:
            resolved[key] = getattr(config, key)
            sources[key] = "config"

    effective_profile = (
        profile_name or os.environ.get("TENANTDB_PROFILE") or config.default_profile
    )
    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            resolved[key] = getattr(profile, key)
            sources[key] = f"profile: {effective_profile}"

    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if field_name in _INT_FIELDS:
            try:
                resolved[field_name] = int(value)
            except ValueError:
                msg = f"Invalid {env_var} value: '{value}'. Must be an integer"
                raise ConfigError(msg) from None
        else:
            resolved[field_name] = value
        sources[field_name] = f"env: {env_var}"

    cli_to_field = {
        "host": "host",
        "port": "port",
        "user": "user",
        "password": "password",  # pragma: allowlist secret
        "sslmode": "sslmode",
        "timeout": "statement_timeout",
        "schema": "default_schema",
        "pool_size": "pool_max_size",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    try:
        return ResolvedConfig(**resolved)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
