"""Per-tenant connection pool registry.

One ``psycopg_pool.ConnectionPool`` per tenant database, opened on first
use and kept until ``close()``/``shutdown()``. There is no eviction: a
process serving many tenants holds ``pool_min_size`` idle connections per
tenant it has seen.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog
from psycopg_pool import ConnectionPool

from tenantdb.core.client import PgClient
from tenantdb.core.validation import validate_name

if TYPE_CHECKING:
    from tenantdb.core.config import ResolvedConfig


class TenantPoolRegistry:
    """Process-wide map of tenant database name to connection pool."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self._pools: dict[str, ConnectionPool] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> TenantPoolRegistry:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, tenant: object) -> bool:
        return tenant in self._pools

    @property
    def tenants(self) -> list[str]:
        return sorted(self._pools)

    def _open_pool(self, tenant: str) -> ConnectionPool:
        return ConnectionPool(
            conninfo=self.config.conninfo(tenant),
            min_size=self.config.pool_min_size,
            max_size=self.config.pool_max_size,
            timeout=self.config.pool_timeout,
            kwargs={"autocommit": True},
            name=tenant,
            open=True,
        )

    def get_or_create(self, tenant: str) -> ConnectionPool:
        """Return the tenant's pool, opening it on first use.

        The whole lookup-or-create runs under the registry lock so racing
        first requests for one tenant share a single pool.
        """
        validate_name(tenant)
        with self._lock:
            pool = self._pools.get(tenant)
            if pool is None:
                pool = self._open_pool(tenant)
                self._pools[tenant] = pool
                structlog.get_logger().info(
                    "tenant pool opened",
                    tenant=tenant,
                    max_size=self.config.pool_max_size,
                    pools=len(self._pools),
                )
            return pool

    def client(self, tenant: str) -> PgClient:
        return PgClient(self.get_or_create(tenant), self.config)

    def close(self, tenant: str) -> bool:
        """Close and forget one tenant's pool. Returns False if none was open."""
        with self._lock:
            pool = self._pools.pop(tenant, None)
        if pool is None:
            return False
        pool.close()
        structlog.get_logger().info("tenant pool closed", tenant=tenant)
        return True

    def shutdown(self) -> None:
        """Close every pool. The registry can be reused afterwards."""
        with self._lock:
            pools = list(self._pools.items())
            self._pools.clear()
        for tenant, pool in pools:
            pool.close()
            structlog.get_logger().debug("tenant pool closed", tenant=tenant)
