import pytest


ENV_KEYS = (
    "DB_TYPE", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME",
    "SCHEMA_MAX_SAMPLES", "SCHEMA_SORT_CANDIDATES", "SCHEMA_OUTPUT_FILE",
    "ANALYSIS_OUTPUT_FILE", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty profiler environment inside a scratch directory.

    Each key is set before being removed so monkeypatch restores it even
    when a .env file loaded during the test writes to os.environ.
    """
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
