"""
Tests for the command-line entry point, wired to a scripted database
"""

import json
from decimal import Decimal

import pytest

from schema_profiler.cli.main_cli import build_parser, main
from schema_profiler.database.errors import ConnectionFailure
from schema_profiler.database.factory import DatabaseFactory

from .fakes import FakeEngine, make_postgres_shop


@pytest.fixture
def db_env(clean_env):
    clean_env.setenv("DB_TYPE", "postgres")
    clean_env.setenv("DB_USER", "reader")
    clean_env.setenv("DB_PASSWORD", "secret")
    clean_env.setenv("DB_NAME", "shop")
    return clean_env


def _install(monkeypatch, connection):
    engine = FakeEngine(connection)
    monkeypatch.setattr(DatabaseFactory, "create_engine", lambda db_type, config: engine)
    monkeypatch.setattr(DatabaseFactory, "connect", lambda eng: eng.connect())
    return engine


def _analyzable_shop():
    conn = make_postgres_shop()
    conn.on("SELECT MIN(", rows=[(1, 2, Decimal("1.5"))], first=True)
    conn.on("SELECT COUNT(", rows=[(2,)])
    return conn


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_collect_writes_schema(db_env, tmp_path, capsys):
    conn = make_postgres_shop()
    engine = _install(db_env, conn)

    assert main(["collect", "-o", "snapshot.json"]) == 0

    data = json.loads((tmp_path / "snapshot.json").read_text(encoding="utf-8"))
    assert data["database_info"]["name"] == "shop"
    assert [t["name"] for t in data["tables"]] == ["users", "orders", "recent_orders"]
    assert conn.rolled_back and conn.closed
    assert engine.disposed
    assert "Found 3 tables, 7 columns" in capsys.readouterr().out


def test_collect_uses_configured_output(db_env, tmp_path):
    db_env.setenv("SCHEMA_OUTPUT_FILE", "from_env.json")
    _install(db_env, make_postgres_shop())

    assert main(["collect"]) == 0
    assert (tmp_path / "from_env.json").exists()


def test_analyze_writes_both_documents(db_env, tmp_path):
    _install(db_env, _analyzable_shop())

    assert main(["analyze"]) == 0

    assert (tmp_path / "schema.json").exists()
    analysis = json.loads((tmp_path / "analysis.json").read_text(encoding="utf-8"))
    assert analysis["database_name"] == "shop"
    assert analysis["summary"]["total_tables"] == 3
    assert analysis["summary"]["total_records"] == 6
    assert analysis["summary"]["largest_table"] == "users"
    total = analysis["table_analyses"][1]["column_analyses"][2]
    assert total["column_name"] == "total"
    assert total["avg_value"] == 1.5


def test_analyze_from_saved_schema_skips_collection(db_env, tmp_path):
    _install(db_env, make_postgres_shop())
    assert main(["collect"]) == 0

    conn = _analyzable_shop()
    _install(db_env, conn)
    assert main(["analyze", "--schema-file", "schema.json", "-o", "profile.json"]) == 0

    assert conn.queries_containing("FROM pg_tables") == []
    assert (tmp_path / "profile.json").exists()


def test_relationships_command(db_env, capsys):
    _install(db_env, make_postgres_shop())

    assert main(["relationships"]) == 0

    out = capsys.readouterr().out
    assert "orders.user_id -> users.id" in out
    assert "users, orders, recent_orders" in out


def test_missing_configuration(clean_env, monkeypatch, capsys):
    clean_env.setenv("DB_USER", "reader")

    def fail(*args, **kwargs):
        raise AssertionError("engine must not be created")

    monkeypatch.setattr(DatabaseFactory, "create_engine", fail)

    assert main(["collect"]) == 1
    assert "password, database" in capsys.readouterr().out


def test_connection_failure_exit_code(db_env, capsys):
    engine = FakeEngine(make_postgres_shop())
    db_env.setattr(DatabaseFactory, "create_engine", lambda db_type, config: engine)

    def refuse(eng):
        raise ConnectionFailure("postgresql connection failed: refused")

    db_env.setattr(DatabaseFactory, "connect", refuse)

    assert main(["collect"]) == 1
    assert "refused" in capsys.readouterr().out
    assert engine.disposed


def test_unsupported_type_exit_code(db_env, capsys):
    assert main(["--db-type", "oracle", "collect"]) == 1
    assert "Unsupported database type: oracle" in capsys.readouterr().out


def test_malformed_port_exit_code(db_env, capsys):
    db_env.setenv("DB_PORT", "abc")

    assert main(["collect"]) == 1
    assert "DB_PORT must be an integer" in capsys.readouterr().out


def test_schema_file_from_another_dialect_is_rejected(db_env, tmp_path, capsys):
    schema_file = tmp_path / "mysql_schema.json"
    schema_file.write_text(json.dumps({
        "database_info": {"type": "mysql", "version": "8.0.35", "name": "crm"},
        "tables": [],
        "relationships": [],
        "metadata": {
            "collected_at": "2024-01-01T00:00:00+00:00",
            "collection_duration_ms": 1,
            "total_tables": 0,
            "total_columns": 0,
        },
    }), encoding="utf-8")

    def fail(*args, **kwargs):
        raise AssertionError("engine must not be created")

    db_env.setattr(DatabaseFactory, "create_engine", fail)

    assert main(["analyze", "--schema-file", str(schema_file)]) == 1
    out = capsys.readouterr().out
    assert "describes a mysql database" in out
    assert not (tmp_path / "analysis.json").exists()
