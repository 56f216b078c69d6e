"""Tests for DDL statement building and execution (core.ddl)."""

import pytest

from tenantdb.core.ddl import (
    add_column,
    alter_column_type,
    build_create_table,
    column_clause,
    create_table,
    drop_column,
    format_default,
    quote_literal,
    rename_column,
)
from tenantdb.core.exceptions import (
    DdlFailure,
    DuplicateColumn,
    DuplicatePrimaryKey,
    EngineError,
    InvalidIdentifier,
    InvalidType,
    NetworkError,
)
from tenantdb.core.models import ColumnDescriptor, TableDescriptor
from tests.helpers import executed_sql, make_result


def _orders():
    return TableDescriptor(
        name="orders",
        columns=[
            ColumnDescriptor(name="id", type="serial", is_primary=True),
            ColumnDescriptor(name="amount", type="numeric"),
        ],
    )


# ---------------------------------------------------------------------------
# format_default
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestFormatDefault:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("42", "42"),
            ("-3.5", "-3.5"),
            ("true", "true"),
            ("FALSE", "FALSE"),
            ("null", "null"),
            ("now()", "now()"),
            ("uuid_generate_v4()", "uuid_generate_v4()"),
            ("nextval(orders_id_seq)", "nextval(orders_id_seq)"),
            (7, "7"),
            (1.25, "1.25"),
            (True, "true"),
            (False, "false"),
        ],
    )
    def test_passes_through(self, value, expected):
        assert format_default(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pending", "'pending'"),
            ("it's", "'it''s'"),
            ("", "''"),
            ("1e5x", "'1e5x'"),
            ("now() ; DROP TABLE orders", "'now() ; DROP TABLE orders'"),
            ("f('x')", "'f(''x'')'"),
            ("now()) NOT NULL, x text DEFAULT f(", "'now()) NOT NULL, x text DEFAULT f('"),
        ],
    )
    def test_quotes_everything_else(self, value, expected):
        assert format_default(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (float("inf"), "'Infinity'"),
            (float("-inf"), "'-Infinity'"),
            (float("nan"), "'NaN'"),
        ],
    )
    def test_non_finite_floats_are_quoted(self, value, expected):
        assert format_default(value) == expected

    def test_non_finite_default_in_column_clause(self):
        column = ColumnDescriptor.model_validate(
            {"name": "ratio", "type": "real", "defaultValue": float("inf")}
        )
        assert column_clause(column) == "\"ratio\" real DEFAULT 'Infinity'"

    def test_quote_literal_doubles_quotes(self):
        assert quote_literal("a'b''c") == "'a''b''''c'"


# ---------------------------------------------------------------------------
# column_clause / build_create_table
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestColumnClause:
    def test_plain(self):
        assert column_clause(ColumnDescriptor(name="note", type="text")) == '"note" text'

    def test_default_and_not_null(self):
        column = ColumnDescriptor(
            name="status", type="TEXT", default_value="new", is_nullable=False
        )
        assert column_clause(column) == "\"status\" text DEFAULT 'new' NOT NULL"

    def test_nullable_true_adds_nothing(self):
        column = ColumnDescriptor(name="n", type="int", is_nullable=True)
        assert column_clause(column) == '"n" int'

    def test_camel_case_aliases(self):
        column = ColumnDescriptor.model_validate(
            {"name": "created", "type": "bigint", "defaultValue": "0", "isNullable": False}
        )
        assert column_clause(column) == '"created" bigint DEFAULT 0 NOT NULL'

    def test_invalid_type(self):
        with pytest.raises(InvalidType):
            column_clause(ColumnDescriptor(name="c", type="varchar(5)"))

    def test_invalid_name(self):
        with pytest.raises(InvalidIdentifier):
            column_clause(ColumnDescriptor(name="c c", type="text"))


@pytest.mark.unit
class TestBuildCreateTable:
    def test_with_primary_key(self):
        sql = " ".join(build_create_table(_orders()).split())
        assert sql == (
            'CREATE TABLE IF NOT EXISTS "public"."orders" '
            '( "id" serial, "amount" numeric, PRIMARY KEY ("id") )'
        )

    def test_without_primary_key(self):
        descriptor = TableDescriptor(
            name="notes", columns=[ColumnDescriptor(name="body", type="text")]
        )
        assert "PRIMARY KEY" not in build_create_table(descriptor)

    def test_custom_schema(self):
        assert '"tenant_data"."orders"' in build_create_table(_orders(), "tenant_data")

    def test_rejects_two_primary_columns(self):
        descriptor = TableDescriptor(
            name="pairs",
            columns=[
                ColumnDescriptor(name="a", type="int", is_primary=True),
                ColumnDescriptor(name="b", type="int", is_primary=True),
            ],
        )
        with pytest.raises(DuplicatePrimaryKey, match="a, b"):
            build_create_table(descriptor)


# ---------------------------------------------------------------------------
# create_table
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_create_table_executes_single_statement(mock_client):
    mock_client.execute_query.return_value = make_result([])

    create_table(mock_client, _orders())

    sql = executed_sql(mock_client)
    assert len(sql) == 1
    assert sql[0].startswith('CREATE TABLE IF NOT EXISTS "public"."orders"')


@pytest.mark.unit
def test_create_table_attaches_escaped_description(mock_client):
    mock_client.execute_query.return_value = make_result([])
    descriptor = _orders().model_copy(update={"description": "Customer's orders"})

    create_table(mock_client, descriptor)

    assert executed_sql(mock_client)[1] == (
        "COMMENT ON TABLE \"public\".\"orders\" IS 'Customer''s orders'"
    )


@pytest.mark.unit
def test_create_table_is_repeatable(mock_client):
    mock_client.execute_query.return_value = make_result([])

    create_table(mock_client, _orders())
    create_table(mock_client, _orders())

    first, second = executed_sql(mock_client)
    assert first == second
    assert "IF NOT EXISTS" in first


@pytest.mark.unit
def test_create_table_validates_before_executing(mock_client):
    descriptor = TableDescriptor(
        name="orders",
        columns=[
            ColumnDescriptor(name="id", type="int"),
            ColumnDescriptor(name="data", type="jsonb"),
        ],
    )
    with pytest.raises(InvalidType):
        create_table(mock_client, descriptor)
    mock_client.execute_query.assert_not_called()


@pytest.mark.unit
def test_create_table_wraps_driver_error(mock_client):
    mock_client.execute_query.side_effect = EngineError(
        "Database error: permission denied", detail="raw"
    )
    with pytest.raises(DdlFailure, match="permission denied"):
        create_table(mock_client, _orders())


@pytest.mark.unit
def test_create_table_keeps_network_errors(mock_client):
    mock_client.execute_query.side_effect = NetworkError("down")
    with pytest.raises(NetworkError):
        create_table(mock_client, _orders())


# ---------------------------------------------------------------------------
# add_column
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_add_column_runs_in_transaction(mock_client):
    mock_client.execute_query.side_effect = [
        make_result([]),  # LOCK
        make_result([]),  # column_exists -> no
        make_result([]),  # ADD COLUMN
    ]

    add_column(mock_client, "orders", ColumnDescriptor(name="note", type="text"))

    assert mock_client.events == ["begin", "commit"]
    sql = executed_sql(mock_client)
    assert sql[0] == 'LOCK TABLE "public"."orders" IN ACCESS EXCLUSIVE MODE'
    assert sql[2] == 'ALTER TABLE "public"."orders" ADD COLUMN "note" text'


@pytest.mark.unit
def test_add_column_with_primary_key(mock_client):
    mock_client.execute_query.side_effect = [
        make_result([]),  # LOCK
        make_result([]),  # column_exists -> no
        make_result([]),  # ADD COLUMN
        make_result([]),  # has_primary_key -> no
        make_result([]),  # ADD PRIMARY KEY
    ]

    add_column(
        mock_client, "orders", ColumnDescriptor(name="id", type="serial", is_primary=True)
    )

    assert mock_client.events == ["begin", "commit"]
    assert executed_sql(mock_client)[-1] == (
        'ALTER TABLE "public"."orders" ADD PRIMARY KEY ("id")'
    )


@pytest.mark.unit
def test_add_column_duplicate_rolls_back(mock_client):
    mock_client.execute_query.side_effect = [
        make_result([]),  # LOCK
        make_result([(1,)]),  # column_exists -> yes
    ]

    with pytest.raises(DuplicateColumn, match="amount"):
        add_column(mock_client, "orders", ColumnDescriptor(name="amount", type="numeric"))

    assert mock_client.events == ["begin", "rollback"]
    assert not any("ADD COLUMN" in s for s in executed_sql(mock_client))


@pytest.mark.unit
def test_add_column_existing_primary_key_rolls_back(mock_client):
    mock_client.execute_query.side_effect = [
        make_result([]),  # LOCK
        make_result([]),  # column_exists -> no
        make_result([]),  # ADD COLUMN
        make_result([(1,)]),  # has_primary_key -> yes
    ]

    with pytest.raises(DuplicatePrimaryKey):
        add_column(
            mock_client,
            "orders",
            ColumnDescriptor(name="code", type="text", is_primary=True),
        )

    assert mock_client.events == ["begin", "rollback"]
    assert not any("ADD PRIMARY KEY" in s for s in executed_sql(mock_client))


@pytest.mark.unit
def test_add_column_driver_failure_becomes_ddl_failure(mock_client):
    mock_client.execute_query.side_effect = [
        make_result([]),
        make_result([]),
        EngineError("Database error: relation does not exist", detail="raw"),
    ]

    with pytest.raises(DdlFailure, match="relation does not exist"):
        add_column(mock_client, "orders", ColumnDescriptor(name="note", type="text"))

    assert mock_client.events == ["begin", "rollback"]


@pytest.mark.unit
def test_add_column_validates_before_transaction(mock_client):
    with pytest.raises(InvalidType):
        add_column(mock_client, "orders", ColumnDescriptor(name="x", type="money"))
    with pytest.raises(InvalidIdentifier):
        add_column(mock_client, "or ders", ColumnDescriptor(name="x", type="text"))

    assert mock_client.events == []
    mock_client.execute_query.assert_not_called()


# ---------------------------------------------------------------------------
# drop / rename / alter type
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_drop_column(mock_client):
    drop_column(mock_client, "orders", "note")
    assert executed_sql(mock_client) == [
        'ALTER TABLE "public"."orders" DROP COLUMN "note"'
    ]


@pytest.mark.unit
def test_rename_column(mock_client):
    rename_column(mock_client, "orders", "amount", "total")
    assert executed_sql(mock_client) == [
        'ALTER TABLE "public"."orders" RENAME COLUMN "amount" TO "total"'
    ]


@pytest.mark.unit
def test_rename_column_validates_new_name(mock_client):
    with pytest.raises(InvalidIdentifier):
        rename_column(mock_client, "orders", "amount", "total amount")
    mock_client.execute_query.assert_not_called()


@pytest.mark.unit
def test_alter_column_type_uses_cast(mock_client):
    alter_column_type(mock_client, "orders", "amount", "BIGINT")
    assert executed_sql(mock_client) == [
        'ALTER TABLE "public"."orders" ALTER COLUMN "amount" '
        'TYPE bigint USING "amount"::bigint'
    ]


@pytest.mark.unit
def test_alter_column_type_rejects_expressions(mock_client):
    with pytest.raises(InvalidType):
        alter_column_type(mock_client, "orders", "amount", "int USING 1")
    mock_client.execute_query.assert_not_called()


@pytest.mark.unit
def test_drop_column_failure_is_ddl_failure(mock_client):
    mock_client.execute_query.side_effect = EngineError(
        'Database error: column "nope" does not exist'
    )
    with pytest.raises(DdlFailure, match="nope"):
        drop_column(mock_client, "orders", "nope")
