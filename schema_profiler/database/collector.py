"""
Schema collection: a point-in-time structural snapshot of a database
"""

import time
import logging
from datetime import datetime, timezone
from typing import Dict, List, Tuple, Optional, Any, Iterable, TYPE_CHECKING

from sqlalchemy.engine import Connection

from .adapters import DialectAdapter, get_adapter
from .execution import run_query
from .models import (
    Column, DatabaseInfo, DatabaseSchema, Index, Metadata, Relationship, Table,
)
from .sampling import DEFAULT_SORT_CANDIDATES, SampleSelector

if TYPE_CHECKING:
    from ..config import ProfilerSettings


class SchemaCollector:
    """Collect tables, columns, indexes and relationships over one connection

    Every structural query failure aborts the run with a
    StructuralQueryError; only sample values degrade (to an empty list).
    """

    def __init__(self, connection: Connection, dialect: str,
                 sort_candidates: Iterable[str] = DEFAULT_SORT_CANDIDATES,
                 max_samples: int = 5, sample_max_length: int = 100):
        self.connection = connection
        self.adapter: DialectAdapter = get_adapter(dialect)
        self.sampler = SampleSelector(
            connection, self.adapter,
            sort_candidates=sort_candidates,
            max_samples=max_samples,
            max_length=sample_max_length,
        )
        self.logger = logging.getLogger(__name__)

    def collect(self) -> DatabaseSchema:
        """Read the complete database structure"""
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()

        db_info = self._get_database_info()
        self.logger.info(f"Collecting schema of {db_info.type} database '{db_info.name}'")

        table_rows = self._get_tables()

        collected = []
        total_columns = 0
        for table_name, table_type, estimated_rows in table_rows:
            self.logger.debug(f"Reading table {table_name}")
            columns = self._get_columns(table_name)
            indexes = self._get_indexes(table_name)
            total_columns += len(columns)
            collected.append((table_name, table_type, estimated_rows, columns, indexes))

        relationships = self._get_relationships()
        references = self._reference_targets(relationships)

        tables = tuple(
            Table(
                name=table_name,
                type=table_type,
                estimated_rows=estimated_rows,
                columns=tuple(self._build_column(table_name, col, references) for col in columns),
                indexes=tuple(indexes),
            )
            for table_name, table_type, estimated_rows, columns, indexes in collected
        )

        duration_ms = int((time.perf_counter() - start) * 1000)
        schema = DatabaseSchema(
            database_info=db_info,
            tables=tables,
            relationships=tuple(relationships),
            metadata=Metadata(
                collected_at=started_at,
                collection_duration_ms=duration_ms,
                total_tables=len(tables),
                total_columns=total_columns,
            ),
        )

        self.logger.info(
            f"Schema collected: {len(tables)} tables, {total_columns} columns, "
            f"{len(relationships)} relationships in {duration_ms} ms"
        )
        return schema

    def _get_database_info(self) -> DatabaseInfo:
        sql, params = self.adapter.database_info_query()
        rows = run_query(self.connection, sql, params, "get database info")
        version, name = (rows[0][0], rows[0][1]) if rows else ("", "")
        return DatabaseInfo(
            type=self.adapter.name,
            version=self.adapter.format_version(str(version or "")),
            name=str(name or ""),
        )

    def _get_tables(self) -> List[Tuple[str, str, int]]:
        sql, params = self.adapter.tables_query()
        rows = run_query(self.connection, sql, params, "get tables")
        return [(str(row[0]), str(row[1]), int(row[2] or 0)) for row in rows]

    def _get_columns(self, table_name: str) -> List[Dict[str, Any]]:
        sql, params = self.adapter.columns_query(table_name)
        rows = run_query(self.connection, sql, params, "get columns", table=table_name)

        column_types = {str(row[0]): str(row[1]) for row in rows}
        columns = []
        for row in rows:
            name = str(row[0])
            columns.append({
                'name': name,
                'type': str(row[1]),
                'nullable': bool(row[2]),
                'default_value': None if row[3] is None else str(row[3]),
                'is_primary_key': bool(row[4]),
                'is_foreign_key': bool(row[5]),
                'references': None if row[6] is None else str(row[6]),
                'sample_values': tuple(
                    self.sampler.collect_samples(table_name, name, column_types)
                ),
            })
        return columns

    def _get_indexes(self, table_name: str) -> List[Index]:
        sql, params = self.adapter.indexes_query(table_name)
        rows = run_query(self.connection, sql, params, "get indexes", table=table_name)
        return [
            Index(
                name=str(row[0]),
                columns=tuple(self.adapter.parse_index_columns(row[1])),
                type=str(row[2]),
                unique=bool(row[3]),
            )
            for row in rows
        ]

    def _get_relationships(self) -> List[Relationship]:
        sql, params = self.adapter.relationships_query()
        rows = run_query(self.connection, sql, params, "get relationships")
        return [
            Relationship(
                name=str(row[0]),
                from_table=str(row[1]),
                from_column=str(row[2]),
                to_table=str(row[3]),
                to_column=str(row[4]),
                relationship_type=str(row[5]),
                on_delete=str(row[6]),
                on_update=str(row[7]),
            )
            for row in rows
        ]

    @staticmethod
    def _reference_targets(relationships: List[Relationship]) -> Dict[Tuple[str, str], str]:
        targets: Dict[Tuple[str, str], str] = {}
        for rel in relationships:
            targets.setdefault((rel.from_table, rel.from_column), f"{rel.to_table}.{rel.to_column}")
        return targets

    @staticmethod
    def _build_column(table_name: str, data: Dict[str, Any],
                      references: Dict[Tuple[str, str], str]) -> Column:
        target = data['references'] or references.get((table_name, data['name']))
        return Column(
            name=data['name'],
            type=data['type'],
            nullable=data['nullable'],
            default_value=data['default_value'],
            is_primary_key=data['is_primary_key'],
            is_foreign_key=data['is_foreign_key'] or target is not None,
            references=target,
            sample_values=data['sample_values'],
        )


def collect_schema(connection: Connection, dialect: str,
                   settings: Optional['ProfilerSettings'] = None) -> DatabaseSchema:
    """Collect a DatabaseSchema for the database behind ``connection``"""
    if settings is None:
        collector = SchemaCollector(connection, dialect)
    else:
        collector = SchemaCollector(
            connection, dialect,
            sort_candidates=settings.sort_candidates,
            max_samples=settings.max_samples,
            sample_max_length=settings.sample_max_length,
        )
    return collector.collect()
