"""
Database schema collection and statistical profiling
"""

from .database import collect_schema, DatabaseSchema
from .utils import analyze_database, AnalysisResult

__version__ = "0.1.0"

__all__ = [
    'collect_schema',
    'analyze_database',
    'DatabaseSchema',
    'AnalysisResult',
]
