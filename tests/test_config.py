"""
Tests for environment configuration
"""

import logging

import pytest

from schema_profiler.config import (
    Config,
    DatabaseConfig,
    ProfilerSettings,
    setup_logging,
)
from schema_profiler.database.errors import ConfigurationError, UnsupportedDialectError
from schema_profiler.database.sampling import DEFAULT_SORT_CANDIDATES


def test_defaults_without_environment(clean_env):
    config = Config.from_env()

    assert config.database.type == "postgres"
    assert config.database.host == "localhost"
    assert config.database.port == 5432
    assert config.profiler.max_samples == 5
    assert config.profiler.sort_candidates == DEFAULT_SORT_CANDIDATES
    assert config.profiler.schema_output == "schema.json"
    assert config.profiler.analysis_output == "analysis.json"
    assert config.profiler.log_level == "INFO"


def test_database_settings_from_environment(clean_env):
    clean_env.setenv("DB_TYPE", "MySQL")
    clean_env.setenv("DB_HOST", "db.internal")
    clean_env.setenv("DB_USER", "reader")
    clean_env.setenv("DB_PASSWORD", "s3cret")
    clean_env.setenv("DB_NAME", "crm")

    db = Config.from_env().database

    assert db.type == "mysql"
    assert db.port == 3306
    assert db.to_dict() == {
        "host": "db.internal", "port": 3306, "user": "reader",
        "password": "s3cret", "database": "crm",
    }
    assert db.missing_keys() == []


def test_explicit_port_and_alias(clean_env):
    clean_env.setenv("DB_PORT", "6543")

    db = DatabaseConfig.from_env(db_type="postgresql")

    assert db.type == "postgres"
    assert db.port == 6543


def test_profiler_settings_from_environment(clean_env):
    clean_env.setenv("SCHEMA_MAX_SAMPLES", "3")
    clean_env.setenv("SCHEMA_SORT_CANDIDATES", " event_time, created_at ,,")
    clean_env.setenv("SCHEMA_OUTPUT_FILE", "out/schema.json")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = ProfilerSettings.from_env()

    assert settings.max_samples == 3
    assert settings.sort_candidates == ("event_time", "created_at")
    assert settings.schema_output == "out/schema.json"
    assert settings.log_level == "DEBUG"


def test_missing_keys_per_dialect(clean_env):
    postgres = DatabaseConfig(type="postgres", user="u")
    assert postgres.missing_keys() == ["password", "database"]

    mysql = DatabaseConfig(type="mysql", host="", user="u", password="p", database="d")
    assert mysql.missing_keys() == ["host"]


def test_unknown_database_type_is_rejected(clean_env):
    clean_env.setenv("DB_TYPE", "oracle")
    with pytest.raises(UnsupportedDialectError):
        Config.from_env()


def test_env_file_is_loaded(clean_env, tmp_path):
    env_file = tmp_path / "profiler.env"
    env_file.write_text("DB_TYPE=mysql\nDB_NAME=from_file\nSCHEMA_MAX_SAMPLES=2\n", encoding="utf-8")
    clean_env.setenv("DB_NAME", "from_environment")

    config = Config.from_env(str(env_file))

    assert config.database.type == "mysql"
    # existing environment variables win over the file
    assert config.database.database == "from_environment"
    assert config.profiler.max_samples == 2


def test_dotenv_in_working_directory_is_found(clean_env, tmp_path):
    (tmp_path / ".env").write_text("DB_HOST=dotenv-host\n", encoding="utf-8")

    assert Config.from_env().database.host == "dotenv-host"


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    handlers = list(logger.handlers)

    again = setup_logging("warning")

    assert again is logger
    assert logger.handlers == handlers
    assert logger.level == logging.WARNING
    assert logger.name == "schema_profiler"


@pytest.mark.parametrize("key,value", [
    ("DB_PORT", "five-four-three-two"),
    ("SCHEMA_MAX_SAMPLES", "3.5"),
])
def test_malformed_integers_are_configuration_errors(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ConfigurationError, match=key):
        Config.from_env()
