"""
Sample value selection

Samples should show recent, identifiable rows rather than whatever the
storage engine returns first. Each table gets one sort column:

1. the first candidate name (in priority order) that exists on the table
   with a temporal type,
2. otherwise the table's first primary key column,
3. otherwise none, and samples are plain DISTINCT values.

Sampling issues one query per column (N+1 round-trips per table).
"""

import logging
from typing import Dict, List, Optional, Any, Iterable, Mapping, Tuple

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from .adapters import DialectAdapter
from .errors import SampleQueryError
from .execution import run_best_effort


logger = logging.getLogger(__name__)

DEFAULT_SORT_CANDIDATES: Tuple[str, ...] = (
    "created_at", "updated_at", "timestamp", "created_date", "updated_date",
    "create_time", "update_time", "date_created", "date_updated",
    "inserted_at", "modified_at",
)

TRUNCATION_MARKER = "..."


def truncate_sample(value: Any, max_length: int = 100) -> str:
    """Stringify a sample value, cutting it at max_length characters"""
    if isinstance(value, (bytes, bytearray, memoryview)):
        sample = bytes(value).decode('utf-8', errors='replace')
    else:
        sample = str(value)
    if len(sample) > max_length:
        return sample[:max_length] + TRUNCATION_MARKER
    return sample


class SampleSelector:
    """Pick sort columns and fetch sample values for one collection run"""

    def __init__(self, connection: Connection, adapter: DialectAdapter,
                 sort_candidates: Iterable[str] = DEFAULT_SORT_CANDIDATES,
                 max_samples: int = 5, max_length: int = 100):
        self.connection = connection
        self.adapter = adapter
        self.sort_candidates = tuple(sort_candidates)
        self.max_samples = max_samples
        self.max_length = max_length
        self._sort_columns: Dict[str, Optional[str]] = {}

    def find_sort_column(self, table_name: str, column_types: Mapping[str, str]) -> Optional[str]:
        """Sort column for a table, resolved once and reused for all its columns"""
        if table_name in self._sort_columns:
            return self._sort_columns[table_name]

        sort_column = self.find_temporal_column(column_types)
        if sort_column is None:
            sort_column = self.find_primary_key_column(table_name)

        if sort_column:
            logger.debug(f"Sampling {table_name} ordered by {sort_column}")
        else:
            logger.debug(f"No sort column for {table_name}; sampling distinct values")
        self._sort_columns[table_name] = sort_column
        return sort_column

    def find_temporal_column(self, column_types: Mapping[str, str]) -> Optional[str]:
        """First candidate, in priority order, present with a temporal type"""
        for candidate in self.sort_candidates:
            declared_type = column_types.get(candidate)
            if declared_type is not None and self.adapter.is_temporal_type(declared_type):
                return candidate
        return None

    def find_primary_key_column(self, table_name: str) -> Optional[str]:
        sql, params = self.adapter.primary_key_query(table_name)
        try:
            rows = run_best_effort(self.connection, sql, params)
        except SQLAlchemyError as e:
            logger.debug(f"Primary key lookup failed for {table_name}: {e}")
            return None
        if not rows or rows[0][0] is None:
            return None
        return str(rows[0][0])

    def sample_values(self, table_name: str, column_name: str,
                      sort_column: Optional[str]) -> List[str]:
        """Up to max_samples non-null values, newest first when a sort column exists"""
        if sort_column:
            sql, params = self.adapter.ordered_sample_query(
                table_name, column_name, sort_column, self.max_samples)
        else:
            sql, params = self.adapter.distinct_sample_query(
                table_name, column_name, self.max_samples)

        try:
            rows = run_best_effort(self.connection, sql, params)
        except SQLAlchemyError as e:
            raise SampleQueryError(
                f"Failed to sample {table_name}.{column_name}: {e}") from e

        samples = []
        for row in rows:
            if row[0] is None:
                continue
            samples.append(truncate_sample(row[0], self.max_length))
            if len(samples) >= self.max_samples:
                break
        return samples

    def collect_samples(self, table_name: str, column_name: str,
                        column_types: Mapping[str, str]) -> List[str]:
        """Sample a column, degrading to an empty list on failure"""
        sort_column = self.find_sort_column(table_name, column_types)
        try:
            return self.sample_values(table_name, column_name, sort_column)
        except SampleQueryError as e:
            logger.warning(str(e))
            return []
