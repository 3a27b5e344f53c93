"""
Data models for statistical analysis results
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Optional, Tuple, Union


Number = Union[int, float]

# Omitted from JSON when they could not be computed
OPTIONAL_STATS = ('min_value', 'max_value', 'avg_value')


@dataclass(frozen=True)
class ColumnAnalysis:
    """Statistics for one column"""
    column_name: str
    column_type: str
    total_count: int
    not_null_count: int
    null_count: int
    null_ratio: float
    unique_count: int
    min_value: Optional[Any] = None
    max_value: Optional[Any] = None
    avg_value: Optional[Number] = None
    sample_values: Tuple[str, ...] = ()

    @property
    def has_numeric_stats(self) -> bool:
        return self.min_value is not None or self.max_value is not None or self.avg_value is not None


@dataclass(frozen=True)
class TableSummary:
    total_columns: int = 0
    primary_keys: int = 0
    foreign_keys: int = 0
    nullable_ratio: float = 0.0
    data_completeness: float = 0.0


@dataclass(frozen=True)
class TableAnalysis:
    table_name: str
    record_count: int
    column_analyses: Tuple[ColumnAnalysis, ...]
    summary: TableSummary


@dataclass(frozen=True)
class DatabaseSummary:
    total_tables: int = 0
    total_records: int = 0
    avg_records_per_table: float = 0.0
    largest_table: str = ""
    smallest_table: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    """Statistical profile of a database, detached from its schema document"""
    database_name: str
    analysis_time: datetime
    table_analyses: Tuple[TableAnalysis, ...]
    summary: DatabaseSummary

    def get_table(self, name: str) -> Optional[TableAnalysis]:
        for analysis in self.table_analyses:
            if analysis.table_name == name:
                return analysis
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['analysis_time'] = self.analysis_time.isoformat()
        for table in data['table_analyses']:
            for column in table['column_analyses']:
                for key in OPTIONAL_STATS:
                    if column[key] is None:
                        del column[key]
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save_to_file(self, filename: str) -> None:
        """Serialize and write the analysis, overwriting any existing file"""
        json_data = self.to_json()
        with open(filename, 'w', encoding='utf-8') as f:
            f.write(json_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisResult':
        table_analyses = tuple(
            TableAnalysis(
                table_name=t['table_name'],
                record_count=t['record_count'],
                column_analyses=tuple(
                    ColumnAnalysis(**{**c, 'sample_values': tuple(c.get('sample_values') or ())})
                    for c in t.get('column_analyses') or []
                ),
                summary=TableSummary(**t['summary']),
            )
            for t in data.get('table_analyses') or []
        )
        return cls(
            database_name=data['database_name'],
            analysis_time=datetime.fromisoformat(data['analysis_time']),
            table_analyses=table_analyses,
            summary=DatabaseSummary(**data['summary']),
        )

    @classmethod
    def from_json(cls, text: str) -> 'AnalysisResult':
        return cls.from_dict(json.loads(text))
