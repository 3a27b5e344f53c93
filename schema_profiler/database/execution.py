"""
Query execution helpers shared by the collector and the analyzer
"""

from typing import Dict, List, Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .errors import ConnectionFailure, StructuralQueryError


def run_query(connection: Connection, sql: str, params: Dict[str, Any], step: str,
              table: Optional[str] = None, column: Optional[str] = None) -> List[Any]:
    """Run a query whose failure aborts the run, naming the step that failed"""
    try:
        return list(connection.execute(text(sql), params).fetchall())
    except DBAPIError as e:
        if e.connection_invalidated:
            raise ConnectionFailure(f"Connection lost while trying to {step}: {e}") from e
        raise StructuralQueryError(step, table, column, cause=e) from e
    except SQLAlchemyError as e:
        raise StructuralQueryError(step, table, column, cause=e) from e


def run_scalar(connection: Connection, sql: str, params: Dict[str, Any], step: str,
               table: Optional[str] = None, column: Optional[str] = None) -> Any:
    rows = run_query(connection, sql, params, step, table, column)
    if not rows:
        return None
    return rows[0][0]


def run_best_effort(connection: Connection, sql: str, params: Dict[str, Any]) -> List[Any]:
    """Run a read query inside a savepoint so a failure leaves the outer transaction usable.

    A lost connection is never best effort: it raises ConnectionFailure so the
    run aborts instead of degrading.
    """
    try:
        with connection.begin_nested():
            return list(connection.execute(text(sql), params).fetchall())
    except DBAPIError as e:
        if e.connection_invalidated:
            raise ConnectionFailure(f"Connection lost while running an optional query: {e}") from e
        raise
