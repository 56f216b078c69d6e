"""Data models for tenantdb.

Query results as returned by PgClient.execute_query(), caller-supplied
table/column descriptors for DDL, and catalog-derived column and table
metadata.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RecordValue = int | float | bool | str | None
Record = dict[str, Any]


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    name: str
    type_oid: int
    type_name: str


class QueryResult(BaseModel):
    """Result of a SQL statement execution."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[ColumnMeta]
    rows: list[tuple[Any, ...]]
    row_count: int
    status_message: str

    def as_dicts(self) -> list[Record]:
        names = [col.name for col in self.columns]
        return [dict(zip(names, row, strict=True)) for row in self.rows]


class ColumnDescriptor(BaseModel):
    """Column definition supplied by the caller for create/alter operations.

    Accepts both snake_case and the camelCase keys used by JSON payloads
    (``defaultValue``, ``isNullable``, ``isPrimary``).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    default_value: str | int | float | bool | None = Field(
        default=None, alias="defaultValue"
    )
    is_nullable: bool | None = Field(default=None, alias="isNullable")
    is_primary: bool = Field(default=False, alias="isPrimary")


class TableDescriptor(BaseModel):
    name: str
    description: str | None = None
    columns: list[ColumnDescriptor]


class LiveColumnInfo(BaseModel):
    """Column metadata read from information_schema.

    ``type`` is the SQL-standard data_type (``integer``, ``character varying``),
    ``udt_name`` the internal name (``int4``, ``varchar``).
    """

    name: str
    type: str
    udt_name: str
    is_nullable: bool
    is_primary: bool


class TableInfo(BaseModel):
    name: str
    description: str | None
    rows_estimated: int
    size: str
    columns_count: int


class TableData(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[LiveColumnInfo]
    rows: list[Record]
