"""PostgreSQL client for one tenant database.

Runs statements on connections borrowed from the tenant's pool, applies the
statement timeout, and maps driver exceptions onto the tenantdb hierarchy.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import psycopg
import psycopg.errors
import sentry_sdk
import structlog

from tenantdb.core.exceptions import EngineError, NetworkError, TimeoutError
from tenantdb.core.models import ColumnMeta, QueryResult

if TYPE_CHECKING:
    from collections.abc import Iterator

    from psycopg_pool import ConnectionPool

    from tenantdb.core.config import ResolvedConfig

# Mapping from psycopg type OIDs to human-readable names.
# Unknown OIDs fall back to "unknown".
_TYPE_NAMES: dict[int, str] = {
    16: "bool",
    20: "int8",
    21: "int2",
    23: "int4",
    25: "text",
    26: "oid",
    114: "json",
    700: "float4",
    701: "float8",
    1042: "bpchar",
    1043: "varchar",
    1082: "date",
    1083: "time",
    1114: "timestamp",
    1184: "timestamptz",
    1266: "timetz",
    1700: "numeric",
    2950: "uuid",
    3802: "jsonb",
}


def _public_message(error: psycopg.Error) -> str:
    """Driver message without connection details or statement text."""
    diag = getattr(error, "diag", None)
    primary = diag.message_primary if diag is not None else None
    return primary or type(error).__name__


class PgClient:
    """Executes SQL for one tenant, either per-statement or inside a transaction."""

    def __init__(
        self,
        pool: ConnectionPool,
        config: ResolvedConfig,
        connection: psycopg.Connection[Any] | None = None,
    ) -> None:
        self.pool = pool
        self.config = config
        self._connection = connection

    @property
    def tenant(self) -> str:
        return self.pool.name

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None

    @contextmanager
    def _checkout(self) -> Iterator[psycopg.Connection[Any]]:
        if self._connection is not None:
            yield self._connection
            return
        with self.pool.connection(timeout=self.config.pool_timeout) as conn:
            yield conn

    def _driver_error(self, e: psycopg.Error, sql: str) -> EngineError:
        log = structlog.get_logger()
        if isinstance(e, psycopg.errors.QueryCanceled):
            log.error("query timeout", sql=sql, error=str(e))
            return TimeoutError(
                f"Query timed out after {self.config.statement_timeout}s", detail=str(e)
            )
        if isinstance(e, psycopg.OperationalError):
            log.error("database unavailable", sql=sql, error=str(e))
            return NetworkError(
                f"Database '{self.tenant}' is unavailable", detail=str(e)
            )
        log.error("database error", sql=sql, error=str(e))
        return EngineError(f"Database error: {_public_message(e)}", detail=str(e))

    def execute_query(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> QueryResult:
        """Execute SQL with bound parameters and return a QueryResult."""
        log = structlog.get_logger()
        timeout_ms = int(self.config.statement_timeout * 1000)

        sql_normalized = " ".join(sql.split())
        log.debug("executing query", sql=sql_normalized)
        with sentry_sdk.start_span(
            op="db.query", description=sql_normalized[:100]
        ) as span:
            start_time = time.monotonic()
            try:
                with self._checkout() as conn, conn.cursor() as cur:
                    cur.execute(f"SET statement_timeout = {timeout_ms}")
                    cur.execute(sql, params)

                    columns: list[ColumnMeta] = []
                    rows: list[tuple[Any, ...]] = []
                    if cur.description:
                        columns = [
                            ColumnMeta(
                                name=desc.name,
                                type_oid=desc.type_code,
                                type_name=_TYPE_NAMES.get(desc.type_code, "unknown"),
                            )
                            for desc in cur.description
                        ]
                        rows = cur.fetchall()

                    duration_ms = (time.monotonic() - start_time) * 1000
                    span.set_data("row_count", len(rows))
                    span.set_data("duration_ms", duration_ms)
                    log.debug(
                        "query complete",
                        duration_ms=f"{duration_ms:.1f}",
                        row_count=len(rows),
                    )
                    return QueryResult(
                        columns=columns,
                        rows=rows,
                        row_count=len(rows),
                        status_message=cur.statusmessage or "",
                    )
            except psycopg.Error as e:
                span.set_status("internal_error")
                raise self._driver_error(e, sql_normalized) from e

    @contextmanager
    def transaction(self) -> Iterator[PgClient]:
        """Run the block on one connection inside BEGIN/COMMIT.

        An exception escaping the block rolls the transaction back before
        it propagates. Nested use opens a savepoint on the same connection.
        """
        if self._connection is not None:
            with self._connection.transaction():
                yield self
            return

        try:
            with (
                self.pool.connection(timeout=self.config.pool_timeout) as conn,
                conn.transaction(),
            ):
                yield PgClient(self.pool, self.config, connection=conn)
        except psycopg.Error as e:
            raise self._driver_error(e, "COMMIT") from e
