"""Tenant database service: the operations offered to transport layers.

Resolves the tenant's pool, binds ``tenant``/``table`` into the log context
and delegates to the DDL, introspection and record modules. Callers (the
CLI, or an HTTP layer) get plain models and dicts back and translate
TenantDbError subclasses by ``kind``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from tenantdb.core import ddl, introspection, records
from tenantdb.core.exceptions import InvalidColumn
from tenantdb.core.models import ColumnDescriptor, TableDescriptor
from tenantdb.core.pool import TenantPoolRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from tenantdb.core.client import PgClient
    from tenantdb.core.config import ResolvedConfig
    from tenantdb.core.models import LiveColumnInfo, Record, TableData, TableInfo


def _column(column: ColumnDescriptor | Mapping[str, Any]) -> ColumnDescriptor:
    if isinstance(column, ColumnDescriptor):
        return column
    try:
        return ColumnDescriptor.model_validate(column)
    except ValidationError as e:
        raise InvalidColumn(f"Invalid column definition: {e}") from e


class TenantDatabaseService:
    """Schema and record operations for any tenant database."""

    def __init__(
        self, config: ResolvedConfig, registry: TenantPoolRegistry | None = None
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else TenantPoolRegistry(config)

    def __enter__(self) -> TenantDatabaseService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self.registry.shutdown()

    @property
    def schema(self) -> str:
        return self.config.default_schema

    def _client(self, tenant: str) -> PgClient:
        return self.registry.client(tenant)

    # -- DDL --

    def create_table(
        self,
        tenant: str,
        table_name: str,
        description: str | None,
        columns: Iterable[ColumnDescriptor | Mapping[str, Any]],
    ) -> None:
        descriptor = TableDescriptor(
            name=table_name,
            description=description,
            columns=[_column(col) for col in columns],
        )
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table_name):
            ddl.create_table(self._client(tenant), descriptor, self.schema)

    def add_column(
        self, tenant: str, table: str, column: ColumnDescriptor | Mapping[str, Any]
    ) -> None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            ddl.add_column(self._client(tenant), table, _column(column), self.schema)

    def drop_column(self, tenant: str, table: str, column_name: str) -> None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            ddl.drop_column(self._client(tenant), table, column_name, self.schema)

    def rename_column(
        self, tenant: str, table: str, old_name: str, new_name: str
    ) -> None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            ddl.rename_column(
                self._client(tenant), table, old_name, new_name, self.schema
            )

    def alter_column_type(
        self, tenant: str, table: str, column_name: str, new_type: str
    ) -> None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            ddl.alter_column_type(
                self._client(tenant), table, column_name, new_type, self.schema
            )

    # -- Introspection --

    def get_all_tables_info(self, tenant: str) -> list[TableInfo]:
        with structlog.contextvars.bound_contextvars(tenant=tenant):
            return introspection.get_all_tables_info(
                self._client(tenant), self.schema, self.config.reserved_tables
            )

    def get_table_columns(
        self, tenant: str, schema: str, table: str
    ) -> list[LiveColumnInfo]:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            return records.get_columns_list(self._client(tenant), schema, table)

    def get_table_with_columns_and_data(
        self, tenant: str, schema: str, table: str
    ) -> TableData:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            return records.get_table_with_columns_and_data(
                self._client(tenant), schema, table
            )

    # -- Records --

    def insert_record(
        self, tenant: str, table: str, record: Mapping[str, Any]
    ) -> Record:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            row = records.insert_record(self._client(tenant), table, record, self.schema)
            structlog.get_logger().info("record inserted", columns=sorted(record))
            return row

    def read_records(
        self, tenant: str, table: str, filters: Mapping[str, Any] | None = None
    ) -> list[Record]:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            return records.read_records(
                self._client(tenant), table, filters, self.schema
            )

    def update_record(
        self,
        tenant: str,
        table: str,
        id_column: str,
        id_value: Any,
        updates: Mapping[str, Any],
    ) -> Record | None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            row = records.update_record(
                self._client(tenant), table, id_column, id_value, updates, self.schema
            )
            structlog.get_logger().info(
                "record updated", id_column=id_column, matched=row is not None
            )
            return row

    def delete_record(
        self, tenant: str, table: str, id_column: str, id_value: Any
    ) -> Record | None:
        with structlog.contextvars.bound_contextvars(tenant=tenant, table=table):
            row = records.delete_record(
                self._client(tenant), table, id_column, id_value, self.schema
            )
            structlog.get_logger().info(
                "record deleted", id_column=id_column, matched=row is not None
            )
            return row
