"""
Exceptions raised while collecting and profiling a database
"""

from typing import Optional


class SchemaProfilerError(Exception):
    """Base class for every error raised by the profiler"""


class UnsupportedDialectError(SchemaProfilerError, ValueError):
    """Dialect tag is not in the adapter registry"""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Unsupported database type: {dialect}")


class ConnectionFailure(SchemaProfilerError, ConnectionError):
    """The connection cannot execute queries (network, auth, liveness)"""


class StructuralQueryError(SchemaProfilerError):
    """A structural query failed; the whole run is aborted"""

    def __init__(self, step: str, table: Optional[str] = None,
                 column: Optional[str] = None, cause: Optional[BaseException] = None):
        self.step = step
        self.table = table
        self.column = column
        self.cause = cause

        where = step
        if table:
            where += f" for table {table}"
        if column:
            where += f" (column {column})"
        message = f"Failed to {where}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class SampleQueryError(SchemaProfilerError):
    """Sample values or the sort-column probe could not be fetched"""


class NumericAggregateError(SchemaProfilerError):
    """MIN/MAX/AVG could not be computed for a numeric column"""


class ConfigurationError(SchemaProfilerError, ValueError):
    """A setting is malformed or contradicts the rest of the run"""
