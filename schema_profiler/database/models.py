"""
Data models for database schema representation
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class DatabaseInfo:
    """Identity of the profiled database"""
    type: str
    version: str
    name: str


@dataclass(frozen=True)
class Column:
    """Information about a table column"""
    name: str
    type: str
    nullable: bool
    default_value: Optional[str] = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    references: Optional[str] = None
    sample_values: Tuple[str, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class Index:
    """Information about a table index"""
    name: str
    columns: Tuple[str, ...]
    type: str
    unique: bool


@dataclass(frozen=True)
class Table:
    """Information about a database table or view"""
    name: str
    type: str
    estimated_rows: int
    columns: Tuple[Column, ...] = ()
    indexes: Tuple[Index, ...] = ()

    @property
    def primary_keys(self) -> List[str]:
        return [col.name for col in self.columns if col.is_primary_key]

    @property
    def foreign_keys(self) -> List[str]:
        return [col.name for col in self.columns if col.is_foreign_key]

    def get_column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


@dataclass(frozen=True)
class Relationship:
    """Foreign key relationship between two tables"""
    name: str
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    relationship_type: str = "many_to_one"
    on_delete: str = "NO ACTION"
    on_update: str = "NO ACTION"


@dataclass(frozen=True)
class Metadata:
    """Collection run metadata"""
    collected_at: datetime
    collection_duration_ms: int
    total_tables: int
    total_columns: int


@dataclass(frozen=True)
class DatabaseSchema:
    """Complete database schema information"""
    database_info: DatabaseInfo
    tables: Tuple[Table, ...]
    relationships: Tuple[Relationship, ...]
    metadata: Metadata

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['metadata']['collected_at'] = self.metadata.collected_at.isoformat()
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save_to_file(self, filename: str) -> None:
        """Serialize and write the schema, overwriting any existing file"""
        json_data = self.to_json()
        with open(filename, 'w', encoding='utf-8') as f:
            f.write(json_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DatabaseSchema':
        tables = tuple(
            Table(
                name=t['name'],
                type=t['type'],
                estimated_rows=t.get('estimated_rows', 0),
                columns=tuple(
                    Column(**{**c, 'sample_values': tuple(c.get('sample_values') or ())})
                    for c in t.get('columns') or []
                ),
                indexes=tuple(
                    Index(name=i['name'], columns=tuple(i['columns']), type=i['type'], unique=i['unique'])
                    for i in t.get('indexes') or []
                ),
            )
            for t in data.get('tables') or []
        )
        meta = data['metadata']
        return cls(
            database_info=DatabaseInfo(**data['database_info']),
            tables=tables,
            relationships=tuple(Relationship(**r) for r in data.get('relationships') or []),
            metadata=Metadata(
                collected_at=datetime.fromisoformat(meta['collected_at']),
                collection_duration_ms=meta['collection_duration_ms'],
                total_tables=meta['total_tables'],
                total_columns=meta['total_columns'],
            ),
        )

    @classmethod
    def from_json(cls, text: str) -> 'DatabaseSchema':
        return cls.from_dict(json.loads(text))

    @classmethod
    def load_from_file(cls, filename: str) -> 'DatabaseSchema':
        with open(filename, encoding='utf-8') as f:
            return cls.from_json(f.read())
