"""
Configuration loaded from the environment and an optional .env file
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .database.adapters import normalize_dialect, supported_dialects
from .database.errors import ConfigurationError, UnsupportedDialectError
from .database.sampling import DEFAULT_SORT_CANDIDATES


DEFAULT_PORTS = {
    'postgres': 5432,
    'mysql': 3306,
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class DatabaseConfig:
    """Connection settings for the database being profiled"""
    type: str = 'postgres'
    host: str = 'localhost'
    port: Optional[int] = None
    user: str = ''
    password: str = ''
    database: str = ''

    def __post_init__(self):
        dialect = normalize_dialect(self.type)
        if dialect not in supported_dialects():
            raise UnsupportedDialectError(self.type)
        self.type = dialect
        if self.port is None:
            self.port = DEFAULT_PORTS.get(self.type)

    @classmethod
    def from_env(cls, db_type: Optional[str] = None) -> 'DatabaseConfig':
        port = os.getenv('DB_PORT')
        return cls(
            type=db_type or os.getenv('DB_TYPE', 'postgres'),
            host=os.getenv('DB_HOST', 'localhost'),
            port=_parse_int('DB_PORT', port) if port else None,
            user=os.getenv('DB_USER', ''),
            password=os.getenv('DB_PASSWORD', ''),
            database=os.getenv('DB_NAME', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
        }

    def missing_keys(self) -> List[str]:
        """Required keys that have no value"""
        from .database.factory import DatabaseFactory

        values = self.to_dict()
        return [key for key in DatabaseFactory.get_required_config(self.type) if not values.get(key)]


@dataclass
class ProfilerSettings:
    """Knobs for sampling and output"""
    max_samples: int = 5
    sample_max_length: int = 100
    sort_candidates: Tuple[str, ...] = DEFAULT_SORT_CANDIDATES
    schema_output: str = 'schema.json'
    analysis_output: str = 'analysis.json'
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'ProfilerSettings':
        candidates = os.getenv('SCHEMA_SORT_CANDIDATES')
        return cls(
            max_samples=_parse_int('SCHEMA_MAX_SAMPLES', os.getenv('SCHEMA_MAX_SAMPLES', '5')),
            sort_candidates=_parse_list(candidates) if candidates else DEFAULT_SORT_CANDIDATES,
            schema_output=os.getenv('SCHEMA_OUTPUT_FILE', 'schema.json'),
            analysis_output=os.getenv('ANALYSIS_OUTPUT_FILE', 'analysis.json'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )


@dataclass
class Config:
    """Application configuration"""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    profiler: ProfilerSettings = field(default_factory=ProfilerSettings)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, db_type: Optional[str] = None) -> 'Config':
        """Load .env (existing environment variables win) and build the config"""
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv(find_dotenv(usecwd=True))
        return cls(database=DatabaseConfig.from_env(db_type), profiler=ProfilerSettings.from_env())


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _parse_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(',') if item.strip())


def setup_logging(level: str = 'INFO') -> logging.Logger:
    """Setup logging"""
    logger = logging.getLogger('schema_profiler')
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
