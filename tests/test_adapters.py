"""
Tests for dialect adapters: quoting, type classification and query text
"""

import pytest

from schema_profiler.database.adapters import (
    MySQLAdapter,
    PostgreSQLAdapter,
    get_adapter,
    is_numeric_type,
    is_temporal_type,
    quote_identifier,
    supported_dialects,
)
from schema_profiler.database.errors import UnsupportedDialectError


@pytest.mark.parametrize("dialect,expected", [
    ("mysql", "`orders`"),
    ("postgres", '"orders"'),
    ("postgresql", '"orders"'),
    ("sqlite", "orders"),
    ("oracle", "orders"),
])
def test_quote_identifier_per_dialect(dialect, expected):
    assert quote_identifier(dialect, "orders") == expected


def test_quote_identifier_doubles_embedded_quotes():
    assert PostgreSQLAdapter().quote_identifier('we"ird') == '"we""ird"'
    assert MySQLAdapter().quote_identifier("we`ird") == "`we``ird`"


@pytest.mark.parametrize("declared_type", [
    "int", "integer", "bigint", "decimal", "numeric", "float", "double",
    "INTEGER", "Double Precision", "decimal(10,2)", "tinyint(1)",
])
def test_numeric_types(declared_type):
    assert is_numeric_type(declared_type)
    assert PostgreSQLAdapter().is_numeric_type(declared_type)


@pytest.mark.parametrize("declared_type", ["varchar", "text", "timestamp", "character varying(255)", "", None])
def test_non_numeric_types(declared_type):
    assert not is_numeric_type(declared_type)


def test_numeric_heuristic_matches_substrings():
    # Known limitation of the substring check
    assert is_numeric_type("interval")
    assert is_numeric_type("point")


@pytest.mark.parametrize("declared_type", [
    "timestamp", "TIMESTAMP WITH TIME ZONE", "timestamp without time zone",
    "datetime", "date", "time", "datetime(6)",
])
def test_temporal_types(declared_type):
    assert is_temporal_type(declared_type)
    assert MySQLAdapter().is_temporal_type(declared_type)


@pytest.mark.parametrize("declared_type", ["integer", "varchar(32)", "boolean", "json"])
def test_non_temporal_types(declared_type):
    assert not is_temporal_type(declared_type)


def test_get_adapter_resolves_aliases():
    assert isinstance(get_adapter("postgres"), PostgreSQLAdapter)
    assert isinstance(get_adapter("PostgreSQL"), PostgreSQLAdapter)
    assert isinstance(get_adapter("mysql"), MySQLAdapter)
    assert supported_dialects() == ("postgres", "mysql")


def test_get_adapter_rejects_unknown_dialect():
    with pytest.raises(UnsupportedDialectError) as exc_info:
        get_adapter("sqlite")
    assert exc_info.value.dialect == "sqlite"
    assert "sqlite" in str(exc_info.value)
    assert isinstance(exc_info.value, ValueError)


def test_version_is_truncated_for_display():
    adapter = PostgreSQLAdapter()
    long_version = "PostgreSQL 15.4 on x86_64-pc-linux-gnu, compiled by gcc 12.2.0"
    assert adapter.format_version(long_version) == long_version[:50] + "..."
    assert adapter.format_version("8.0.35") == "8.0.35"
    assert adapter.format_version(None) == ""


@pytest.mark.parametrize("raw,expected", [
    (["id", "email"], ["id", "email"]),
    (("a",), ["a"]),
    ("{user_id,total}", ["user_id", "total"]),
    ('{"Mixed Case",id}', ["Mixed Case", "id"]),
    ("user_id,total", ["user_id", "total"]),
    ("id", ["id"]),
    (None, []),
])
def test_parse_index_columns(raw, expected):
    assert PostgreSQLAdapter.parse_index_columns(raw) == expected


def test_postgres_data_queries_quote_schema_and_identifiers():
    adapter = PostgreSQLAdapter()

    sql, params = adapter.record_count_query("orders")
    assert sql == 'SELECT COUNT(*) FROM "public"."orders"'
    assert params == {}

    sql, _ = adapter.numeric_stats_query("orders", "total")
    assert sql == ('SELECT MIN("total"), MAX("total"), AVG("total") '
                   'FROM "public"."orders" WHERE "total" IS NOT NULL')

    sql, _ = adapter.ordered_sample_query("orders", "total", "created_at", 5)
    assert sql.endswith('WHERE "total" IS NOT NULL ORDER BY "created_at" DESC LIMIT 5')

    sql, _ = adapter.distinct_sample_query("orders", "total", 5)
    assert sql.startswith('SELECT DISTINCT "total" FROM "public"."orders"')


def test_mysql_data_queries_use_backticks():
    adapter = MySQLAdapter()

    sql, _ = adapter.not_null_count_query("orders", "total")
    assert sql == "SELECT COUNT(*) FROM `orders` WHERE `total` IS NOT NULL"

    sql, _ = adapter.distinct_count_query("orders", "total")
    assert sql == "SELECT COUNT(DISTINCT `total`) FROM `orders`"


def test_structural_queries_bind_table_names():
    pg = PostgreSQLAdapter()
    sql, params = pg.columns_query("users")
    assert ":table_name" in sql
    assert params == {"table_name": "users", "schema_name": "public"}

    sql, params = pg.primary_key_query("Users")
    assert params == {"qualified_name": '"public"."Users"'}

    sql, params = pg.tables_query()
    assert "pg_tables" in sql and "pg_views" in sql
    assert params == {"schema_name": "public"}

    mysql = MySQLAdapter()
    sql, params = mysql.indexes_query("users")
    assert "GROUP_CONCAT" in sql
    assert params == {"table_name": "users"}

    sql, params = mysql.relationships_query()
    assert "referential_constraints" in sql
    assert params == {}


def test_postgres_adapter_uses_configured_schema():
    adapter = PostgreSQLAdapter(schema="sales")
    assert adapter.quote_table("orders") == '"sales"."orders"'
    assert adapter.relationships_query()[1] == {"schema_name": "sales"}
