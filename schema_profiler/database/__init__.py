"""
Database adapters, schema collection and schema models
"""

from .models import Column, DatabaseInfo, DatabaseSchema, Index, Metadata, Relationship, Table
from .adapters import DialectAdapter, PostgreSQLAdapter, MySQLAdapter, get_adapter, quote_identifier
from .factory import DatabaseFactory
from .collector import SchemaCollector, collect_schema
from .errors import (
    SchemaProfilerError,
    UnsupportedDialectError,
    ConnectionFailure,
    StructuralQueryError,
    SampleQueryError,
    NumericAggregateError,
    ConfigurationError,
)

__all__ = [
    'Column',
    'DatabaseInfo',
    'DatabaseSchema',
    'Index',
    'Metadata',
    'Relationship',
    'Table',
    'DialectAdapter',
    'PostgreSQLAdapter',
    'MySQLAdapter',
    'get_adapter',
    'quote_identifier',
    'DatabaseFactory',
    'SchemaCollector',
    'collect_schema',
    'SchemaProfilerError',
    'UnsupportedDialectError',
    'ConnectionFailure',
    'StructuralQueryError',
    'SampleQueryError',
    'NumericAggregateError',
    'ConfigurationError',
]
