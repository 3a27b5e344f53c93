"""
Database factory for creating engines and connections per dialect
"""

import logging
from typing import Dict, Any, List

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .adapters import normalize_dialect
from .errors import ConnectionFailure, UnsupportedDialectError


logger = logging.getLogger(__name__)

# dialect tag -> SQLAlchemy driver name
_DRIVERS = {
    'postgres': 'postgresql+psycopg2',
    'mysql': 'mysql+pymysql',
}

SNAPSHOT_ISOLATION = 'REPEATABLE READ'

_REQUIRED_CONFIG = {
    'postgres': ['host', 'port', 'user', 'password', 'database'],
    'mysql': ['host', 'user', 'password', 'database'],
}


class DatabaseFactory:
    """Factory class to create engines and connections for a dialect"""

    @staticmethod
    def build_url(db_type: str, config: Dict[str, Any]) -> URL:
        """Build a connection URL; credentials are escaped by SQLAlchemy"""
        tag = normalize_dialect(db_type)
        driver = _DRIVERS.get(tag)
        if driver is None:
            raise UnsupportedDialectError(db_type)

        port = config.get('port')
        return URL.create(
            drivername=driver,
            username=config.get('user') or None,
            password=config.get('password') or None,
            host=config.get('host') or None,
            port=int(port) if port else None,
            database=config.get('database') or None,
        )

    @staticmethod
    def create_engine(db_type: str, config: Dict[str, Any], connect_timeout: int = 10) -> Engine:
        """Create a SQLAlchemy engine for the dialect"""
        url = DatabaseFactory.build_url(db_type, config)
        return create_engine(
            url,
            pool_pre_ping=True,
            connect_args={"connect_timeout": connect_timeout},
        )

    @staticmethod
    def connect(engine: Engine) -> Connection:
        """Open a read connection, raising ConnectionFailure when it cannot be made"""
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            logger.error(f"Connection to {engine.url.render_as_string(hide_password=True)} failed: {e}")
            raise ConnectionFailure(f"{engine.dialect.name} connection failed: {e}") from e
        # Counts taken by separate statements must see one snapshot
        return connection.execution_options(isolation_level=SNAPSHOT_ISOLATION)

    @staticmethod
    def get_supported_types() -> List[str]:
        """Get list of supported database types"""
        return list(_DRIVERS.keys())

    @staticmethod
    def get_required_config(db_type: str) -> List[str]:
        """Get required configuration keys for database type"""
        return list(_REQUIRED_CONFIG.get(normalize_dialect(db_type), []))
