"""
Statistical profiling of a collected schema
"""

import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Dict, Any, Optional, Sequence, Tuple, TYPE_CHECKING

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from ..database.adapters import DialectAdapter, get_adapter
from ..database.errors import NumericAggregateError
from ..database.execution import run_best_effort, run_scalar
from ..database.models import Column, DatabaseSchema, Table
from ..database.sampling import DEFAULT_SORT_CANDIDATES, SampleSelector
from .analysis_models import (
    AnalysisResult, ColumnAnalysis, DatabaseSummary, TableAnalysis, TableSummary,
)

if TYPE_CHECKING:
    from ..config import ProfilerSettings


logger = logging.getLogger(__name__)


def normalize_stat(value: Any) -> Any:
    """Make an aggregate value JSON friendly"""
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def build_column_analysis(column_name: str, column_type: str, total_count: int,
                          not_null_count: int, unique_count: int,
                          sample_values: Sequence[str] = (),
                          numeric_stats: Optional[Tuple[Any, Any, Any]] = None) -> ColumnAnalysis:
    # Non-transactional tables (MyISAM) can change between the two counts
    null_count = max(total_count - not_null_count, 0)
    null_ratio = null_count / total_count if total_count > 0 else 0.0

    min_value = max_value = avg_value = None
    if numeric_stats is not None:
        min_value, max_value, avg_value = (normalize_stat(v) for v in numeric_stats)

    return ColumnAnalysis(
        column_name=column_name,
        column_type=column_type,
        total_count=total_count,
        not_null_count=not_null_count,
        null_count=null_count,
        null_ratio=null_ratio,
        unique_count=unique_count,
        min_value=min_value,
        max_value=max_value,
        avg_value=avg_value,
        sample_values=tuple(sample_values),
    )


def generate_table_summary(table: Table, column_analyses: Sequence[ColumnAnalysis],
                           record_count: int) -> TableSummary:
    """Key counts come from schema metadata, ratios from the column statistics"""
    total_columns = len(column_analyses)
    primary_keys = sum(1 for col in table.columns if col.is_primary_key)
    foreign_keys = sum(1 for col in table.columns if col.is_foreign_key)

    nullable_count = 0
    total_completeness = 0.0
    for analysis in column_analyses:
        if analysis.null_count > 0:
            nullable_count += 1
        if record_count > 0:
            total_completeness += analysis.not_null_count / record_count

    nullable_ratio = 0.0
    data_completeness = 0.0
    if total_columns > 0:
        nullable_ratio = nullable_count / total_columns
        data_completeness = total_completeness / total_columns

    return TableSummary(
        total_columns=total_columns,
        primary_keys=primary_keys,
        foreign_keys=foreign_keys,
        nullable_ratio=nullable_ratio,
        data_completeness=data_completeness,
    )


def generate_database_summary(table_analyses: Sequence[TableAnalysis]) -> DatabaseSummary:
    """Totals plus largest/smallest table.

    A single scan seeded with the first table using strict comparisons, so
    on equal record counts the earliest table wins for both largest and
    smallest.
    """
    total_tables = len(table_analyses)
    total_records = sum(analysis.record_count for analysis in table_analyses)
    if total_tables == 0:
        return DatabaseSummary()

    max_records = min_records = table_analyses[0].record_count
    largest = smallest = table_analyses[0].table_name
    for analysis in table_analyses:
        if analysis.record_count > max_records:
            max_records = analysis.record_count
            largest = analysis.table_name
        if analysis.record_count < min_records:
            min_records = analysis.record_count
            smallest = analysis.table_name

    return DatabaseSummary(
        total_tables=total_tables,
        total_records=total_records,
        avg_records_per_table=total_records / total_tables,
        largest_table=largest,
        smallest_table=smallest,
    )


class DataAnalyzer:
    """Run live aggregate queries against a collected schema"""

    def __init__(self, connection: Connection, dialect: str,
                 sort_candidates=DEFAULT_SORT_CANDIDATES,
                 max_samples: int = 5, sample_max_length: int = 100):
        self.connection = connection
        self.adapter: DialectAdapter = get_adapter(dialect)
        self.sampler = SampleSelector(
            connection, self.adapter,
            sort_candidates=sort_candidates,
            max_samples=max_samples,
            max_length=sample_max_length,
        )

    def analyze(self, schema: DatabaseSchema) -> AnalysisResult:
        """Analyze every table of the schema, in collection order"""
        analysis_time = datetime.now(timezone.utc)
        logger.info(f"Analyzing {len(schema.tables)} tables of '{schema.database_info.name}'")

        table_analyses = [self.analyze_table(table) for table in schema.tables]
        summary = generate_database_summary(table_analyses)

        logger.info(
            f"Analysis complete: {summary.total_records} records, "
            f"largest table '{summary.largest_table}'"
        )
        return AnalysisResult(
            database_name=schema.database_info.name,
            analysis_time=analysis_time,
            table_analyses=tuple(table_analyses),
            summary=summary,
        )

    def analyze_table(self, table: Table) -> TableAnalysis:
        record_count = self.get_record_count(table.name)
        column_types = {col.name: col.type for col in table.columns}

        column_analyses = [
            self.analyze_column(table.name, column, record_count, column_types)
            for column in table.columns
        ]
        logger.debug(f"Analyzed {table.name}: {record_count} records")

        return TableAnalysis(
            table_name=table.name,
            record_count=record_count,
            column_analyses=tuple(column_analyses),
            summary=generate_table_summary(table, column_analyses, record_count),
        )

    def get_record_count(self, table_name: str) -> int:
        sql, params = self.adapter.record_count_query(table_name)
        count = run_scalar(self.connection, sql, params, "get record count", table=table_name)
        return int(count or 0)

    def analyze_column(self, table_name: str, column: Column, total_records: int,
                       column_types: Optional[Dict[str, str]] = None) -> ColumnAnalysis:
        sql, params = self.adapter.not_null_count_query(table_name, column.name)
        not_null_count = int(run_scalar(
            self.connection, sql, params, "count non-null values",
            table=table_name, column=column.name) or 0)

        sql, params = self.adapter.distinct_count_query(table_name, column.name)
        unique_count = int(run_scalar(
            self.connection, sql, params, "count distinct values",
            table=table_name, column=column.name) or 0)

        samples = self.sampler.collect_samples(
            table_name, column.name, column_types or {column.name: column.type})

        numeric_stats = None
        if self.adapter.is_numeric_type(column.type) and not_null_count > 0:
            try:
                numeric_stats = self.get_numeric_stats(table_name, column.name)
            except NumericAggregateError as e:
                logger.warning(str(e))

        return build_column_analysis(
            column.name, column.type, total_records, not_null_count, unique_count,
            samples, numeric_stats,
        )

    def get_numeric_stats(self, table_name: str, column_name: str) -> Tuple[Any, Any, Any]:
        """MIN, MAX and AVG in one query"""
        sql, params = self.adapter.numeric_stats_query(table_name, column_name)
        try:
            rows = run_best_effort(self.connection, sql, params)
        except SQLAlchemyError as e:
            raise NumericAggregateError(
                f"Failed to compute numeric stats for {table_name}.{column_name}: {e}") from e
        if not rows:
            raise NumericAggregateError(f"No numeric stats returned for {table_name}.{column_name}")
        row = rows[0]
        return row[0], row[1], row[2]


def analyze_database(connection: Connection, schema: DatabaseSchema,
                     settings: Optional['ProfilerSettings'] = None) -> AnalysisResult:
    """Analyze a collected schema using the dialect recorded in it"""
    dialect = schema.database_info.type
    if settings is None:
        analyzer = DataAnalyzer(connection, dialect)
    else:
        analyzer = DataAnalyzer(
            connection, dialect,
            sort_candidates=settings.sort_candidates,
            max_samples=settings.max_samples,
            sample_max_length=settings.sample_max_length,
        )
    return analyzer.analyze(schema)
