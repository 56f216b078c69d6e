"""Shared test fixtures for tenantdb."""

from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import MagicMock

import pytest
import structlog
from typer.testing import CliRunner

from tenantdb.cli.main import app


@pytest.fixture
def mock_client():
    """MagicMock PgClient whose transaction() records begin/commit/rollback."""
    client = MagicMock()
    client.events = []

    @contextmanager
    def transaction():
        client.events.append("begin")
        try:
            yield client
        except Exception:
            client.events.append("rollback")
            raise
        client.events.append("commit")

    client.transaction.side_effect = transaction
    return client


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the caller's PG*/TENANTDB_* settings and config file out of unit tests."""
    monkeypatch.setattr(
        "tenantdb.core.config.DEFAULT_CONFIG_PATH", tmp_path / "config.toml"
    )
    for var in (
        "PGHOST",
        "PGPORT",
        "PGUSER",
        "PGPASSWORD",
        "TENANTDB_PROFILE",
        "TENANTDB_SENTRY_DSN",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo setup_logging() and bound context left behind by earlier tests."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
