"""
Database adapters for different database types

Each adapter knows how to phrase the introspection and profiling queries for
one backend. Query builders return ``(sql, params)`` pairs using SQLAlchemy
named binds; identifiers that cannot be bound are quoted by the adapter.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Optional, Any

from .errors import UnsupportedDialectError


Query = Tuple[str, Dict[str, Any]]

NUMERIC_TYPE_MARKERS = ("int", "decimal", "numeric", "float", "double")

TEMPORAL_TYPE_MARKERS = (
    "timestamp", "datetime", "date", "time",
    "timestamp without time zone", "timestamp with time zone",
)

VERSION_DISPLAY_LIMIT = 50


def is_numeric_type(declared_type: str) -> bool:
    """Substring heuristic; a type name that merely contains "int" also matches"""
    declared_type = (declared_type or "").lower()
    return any(marker in declared_type for marker in NUMERIC_TYPE_MARKERS)


def is_temporal_type(declared_type: str) -> bool:
    declared_type = (declared_type or "").lower()
    return any(marker in declared_type for marker in TEMPORAL_TYPE_MARKERS)


class DialectAdapter(ABC):
    """Abstract base class for database adapters"""

    name = ""
    quote_char = ""

    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier (table or column)"""
        if not self.quote_char:
            return name
        escaped = name.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def quote_table(self, table_name: str) -> str:
        """Quote a table name for use in FROM clauses"""
        return self.quote_identifier(table_name)

    def is_numeric_type(self, declared_type: str) -> bool:
        return is_numeric_type(declared_type)

    def is_temporal_type(self, declared_type: str) -> bool:
        return is_temporal_type(declared_type)

    def format_version(self, version: str) -> str:
        """Shorten the server version banner for display"""
        version = version or ""
        if len(version) > VERSION_DISPLAY_LIMIT:
            return version[:VERSION_DISPLAY_LIMIT] + "..."
        return version

    @staticmethod
    def parse_index_columns(raw: Any) -> List[str]:
        """Normalize an aggregated index column list into names"""
        if raw is None:
            return []
        if isinstance(raw, (list, tuple)):
            return [str(col) for col in raw]
        text = str(raw)
        if len(text) >= 2 and text[0] == '{' and text[-1] == '}':
            text = text[1:-1]
        return [col.strip().strip('"') for col in text.split(',') if col.strip()]

    # Structural queries

    @abstractmethod
    def database_info_query(self) -> Query:
        """Return (version, database name)"""
        pass

    @abstractmethod
    def tables_query(self) -> Query:
        """Return (table name, table type, estimated rows) for tables and views"""
        pass

    @abstractmethod
    def columns_query(self, table_name: str) -> Query:
        """Return (name, type, nullable, default, is_pk, is_fk, references)"""
        pass

    @abstractmethod
    def indexes_query(self, table_name: str) -> Query:
        """Return (index name, ordered columns, method, is_unique)"""
        pass

    @abstractmethod
    def relationships_query(self) -> Query:
        """Return foreign keys as (name, from table, from column, to table,
        to column, relationship type, on delete, on update)"""
        pass

    @abstractmethod
    def primary_key_query(self, table_name: str) -> Query:
        """Return the first primary key column of a table"""
        pass

    # Data queries

    def record_count_query(self, table_name: str) -> Query:
        return f"SELECT COUNT(*) FROM {self.quote_table(table_name)}", {}

    def not_null_count_query(self, table_name: str, column_name: str) -> Query:
        col = self.quote_identifier(column_name)
        return f"SELECT COUNT(*) FROM {self.quote_table(table_name)} WHERE {col} IS NOT NULL", {}

    def distinct_count_query(self, table_name: str, column_name: str) -> Query:
        col = self.quote_identifier(column_name)
        return f"SELECT COUNT(DISTINCT {col}) FROM {self.quote_table(table_name)}", {}

    def numeric_stats_query(self, table_name: str, column_name: str) -> Query:
        col = self.quote_identifier(column_name)
        return (
            f"SELECT MIN({col}), MAX({col}), AVG({col}) "
            f"FROM {self.quote_table(table_name)} WHERE {col} IS NOT NULL",
            {},
        )

    def ordered_sample_query(self, table_name: str, column_name: str,
                             sort_column: str, limit: int) -> Query:
        col = self.quote_identifier(column_name)
        sort = self.quote_identifier(sort_column)
        return (
            f"SELECT {col} FROM {self.quote_table(table_name)} "
            f"WHERE {col} IS NOT NULL ORDER BY {sort} DESC LIMIT {int(limit)}",
            {},
        )

    def distinct_sample_query(self, table_name: str, column_name: str, limit: int) -> Query:
        col = self.quote_identifier(column_name)
        return (
            f"SELECT DISTINCT {col} FROM {self.quote_table(table_name)} "
            f"WHERE {col} IS NOT NULL LIMIT {int(limit)}",
            {},
        )


class PostgreSQLAdapter(DialectAdapter):
    """PostgreSQL database adapter"""

    name = "postgres"
    quote_char = '"'

    def __init__(self, schema: str = "public"):
        self.schema = schema

    def quote_table(self, table_name: str) -> str:
        return f"{self.quote_identifier(self.schema)}.{self.quote_identifier(table_name)}"

    def database_info_query(self) -> Query:
        return "SELECT version(), current_database()", {}

    def tables_query(self) -> Query:
        return """
            SELECT
                t.tablename AS table_name,
                'BASE TABLE' AS table_type,
                COALESCE(GREATEST(c.reltuples, 0), 0)::bigint AS estimated_rows
            FROM pg_tables t
            LEFT JOIN pg_namespace n ON n.nspname = t.schemaname
            LEFT JOIN pg_class c ON c.relname = t.tablename AND c.relnamespace = n.oid
            WHERE t.schemaname = :schema_name
            UNION ALL
            SELECT
                viewname AS table_name,
                'VIEW' AS table_type,
                0 AS estimated_rows
            FROM pg_views
            WHERE schemaname = :schema_name
        """, {"schema_name": self.schema}

    def columns_query(self, table_name: str) -> Query:
        return """
            SELECT
                c.column_name,
                c.data_type || COALESCE('(' || c.character_maximum_length::text || ')', '') AS column_type,
                c.is_nullable = 'YES' AS nullable,
                c.column_default,
                EXISTS (
                    SELECT 1
                    FROM information_schema.table_constraints tc
                    JOIN information_schema.key_column_usage kcu
                      ON kcu.constraint_name = tc.constraint_name
                     AND kcu.table_schema = tc.table_schema
                     AND kcu.table_name = tc.table_name
                    WHERE tc.constraint_type = 'PRIMARY KEY'
                      AND tc.table_schema = c.table_schema
                      AND tc.table_name = c.table_name
                      AND kcu.column_name = c.column_name
                ) AS is_primary_key,
                EXISTS (
                    SELECT 1
                    FROM information_schema.table_constraints tc
                    JOIN information_schema.key_column_usage kcu
                      ON kcu.constraint_name = tc.constraint_name
                     AND kcu.table_schema = tc.table_schema
                     AND kcu.table_name = tc.table_name
                    WHERE tc.constraint_type = 'FOREIGN KEY'
                      AND tc.table_schema = c.table_schema
                      AND tc.table_name = c.table_name
                      AND kcu.column_name = c.column_name
                ) AS is_foreign_key,
                NULL AS references_to
            FROM information_schema.columns c
            WHERE c.table_name = :table_name AND c.table_schema = :schema_name
            ORDER BY c.ordinal_position
        """, {"table_name": table_name, "schema_name": self.schema}

    def indexes_query(self, table_name: str) -> Query:
        return """
            SELECT
                i.indexname AS index_name,
                array_agg(a.attname ORDER BY array_position(idx.indkey::int2[], a.attnum)) AS index_columns,
                am.amname AS index_type,
                idx.indisunique AS is_unique
            FROM pg_indexes i
            JOIN pg_namespace n ON n.nspname = i.schemaname
            JOIN pg_class c ON c.relname = i.indexname AND c.relnamespace = n.oid
            JOIN pg_index idx ON idx.indexrelid = c.oid
            JOIN pg_am am ON am.oid = c.relam
            JOIN pg_attribute a ON a.attrelid = idx.indrelid AND a.attnum = ANY(idx.indkey)
            WHERE i.tablename = :table_name AND i.schemaname = :schema_name
            GROUP BY i.indexname, am.amname, idx.indisunique
            ORDER BY i.indexname
        """, {"table_name": table_name, "schema_name": self.schema}

    def relationships_query(self) -> Query:
        return """
            SELECT
                con.conname AS constraint_name,
                child.relname AS from_table,
                child_att.attname AS from_column,
                parent.relname AS to_table,
                parent_att.attname AS to_column,
                'many_to_one' AS relationship_type,
                CASE con.confdeltype
                    WHEN 'r' THEN 'RESTRICT' WHEN 'c' THEN 'CASCADE'
                    WHEN 'n' THEN 'SET NULL' WHEN 'd' THEN 'SET DEFAULT'
                    ELSE 'NO ACTION' END AS on_delete,
                CASE con.confupdtype
                    WHEN 'r' THEN 'RESTRICT' WHEN 'c' THEN 'CASCADE'
                    WHEN 'n' THEN 'SET NULL' WHEN 'd' THEN 'SET DEFAULT'
                    ELSE 'NO ACTION' END AS on_update
            FROM pg_constraint con
            JOIN pg_class child ON child.oid = con.conrelid
            JOIN pg_class parent ON parent.oid = con.confrelid
            JOIN pg_namespace n ON n.oid = child.relnamespace
            CROSS JOIN LATERAL unnest(con.conkey, con.confkey) AS k(child_attnum, parent_attnum)
            JOIN pg_attribute child_att ON child_att.attrelid = child.oid AND child_att.attnum = k.child_attnum
            JOIN pg_attribute parent_att ON parent_att.attrelid = parent.oid AND parent_att.attnum = k.parent_attnum
            WHERE con.contype = 'f' AND n.nspname = :schema_name
            ORDER BY child.relname, con.conname
        """, {"schema_name": self.schema}

    def primary_key_query(self, table_name: str) -> Query:
        return """
            SELECT a.attname AS column_name
            FROM pg_index i
            JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
            WHERE i.indrelid = CAST(:qualified_name AS regclass) AND i.indisprimary
            ORDER BY array_position(i.indkey::int2[], a.attnum)
            LIMIT 1
        """, {"qualified_name": self.quote_table(table_name)}


class MySQLAdapter(DialectAdapter):
    """MySQL database adapter"""

    name = "mysql"
    quote_char = '`'

    def database_info_query(self) -> Query:
        return "SELECT VERSION(), DATABASE()", {}

    def tables_query(self) -> Query:
        return """
            SELECT
                table_name,
                table_type,
                COALESCE(table_rows, 0) AS estimated_rows
            FROM information_schema.tables
            WHERE table_schema = DATABASE()
        """, {}

    def columns_query(self, table_name: str) -> Query:
        return """
            SELECT
                c.column_name,
                c.column_type,
                c.is_nullable = 'YES' AS nullable,
                c.column_default,
                c.column_key = 'PRI' AS is_primary_key,
                EXISTS (
                    SELECT 1
                    FROM information_schema.key_column_usage k
                    WHERE k.table_schema = c.table_schema
                      AND k.table_name = c.table_name
                      AND k.column_name = c.column_name
                      AND k.referenced_table_name IS NOT NULL
                ) AS is_foreign_key,
                NULL AS references_to
            FROM information_schema.columns c
            WHERE c.table_name = :table_name AND c.table_schema = DATABASE()
            ORDER BY c.ordinal_position
        """, {"table_name": table_name}

    def indexes_query(self, table_name: str) -> Query:
        return """
            SELECT
                index_name,
                GROUP_CONCAT(column_name ORDER BY seq_in_index) AS index_columns,
                index_type,
                non_unique = 0 AS is_unique
            FROM information_schema.statistics
            WHERE table_name = :table_name AND table_schema = DATABASE()
            GROUP BY index_name, index_type, non_unique
            ORDER BY index_name
        """, {"table_name": table_name}

    def relationships_query(self) -> Query:
        return """
            SELECT
                kcu.constraint_name,
                kcu.table_name AS from_table,
                kcu.column_name AS from_column,
                kcu.referenced_table_name AS to_table,
                kcu.referenced_column_name AS to_column,
                'many_to_one' AS relationship_type,
                rc.delete_rule AS on_delete,
                rc.update_rule AS on_update
            FROM information_schema.key_column_usage kcu
            JOIN information_schema.referential_constraints rc
              ON rc.constraint_schema = kcu.constraint_schema
             AND rc.constraint_name = kcu.constraint_name
            WHERE kcu.table_schema = DATABASE() AND kcu.referenced_table_name IS NOT NULL
            ORDER BY kcu.table_name, kcu.constraint_name, kcu.ordinal_position
        """, {}

    def primary_key_query(self, table_name: str) -> Query:
        return """
            SELECT column_name
            FROM information_schema.key_column_usage
            WHERE table_name = :table_name AND table_schema = DATABASE()
              AND constraint_name = 'PRIMARY'
            ORDER BY ordinal_position
            LIMIT 1
        """, {"table_name": table_name}


_ADAPTERS = {
    'postgres': PostgreSQLAdapter,
    'mysql': MySQLAdapter,
}

_ALIASES = {
    'postgresql': 'postgres',
}


def normalize_dialect(dialect: str) -> str:
    """Map a dialect tag or alias onto its canonical name"""
    tag = (dialect or "").strip().lower()
    return _ALIASES.get(tag, tag)


def get_adapter(dialect: str) -> DialectAdapter:
    """Get the adapter for a dialect tag, raising for unknown tags"""
    adapter_cls = _ADAPTERS.get(normalize_dialect(dialect))
    if adapter_cls is None:
        raise UnsupportedDialectError(dialect)
    return adapter_cls()


def supported_dialects() -> tuple:
    return tuple(_ADAPTERS.keys())


def quote_identifier(dialect: str, name: str) -> str:
    """Quote for a dialect; unknown dialects get the name back unquoted"""
    adapter_cls = _ADAPTERS.get(normalize_dialect(dialect))
    if adapter_cls is None:
        return name
    return adapter_cls().quote_identifier(name)
