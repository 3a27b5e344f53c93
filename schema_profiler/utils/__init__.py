"""
Statistical analysis and relationship utilities
"""

from .analysis_models import AnalysisResult, ColumnAnalysis, TableAnalysis, TableSummary, DatabaseSummary
from .data_analyzer import DataAnalyzer, analyze_database
from .schema_analyzer import SchemaAnalyzer

__all__ = [
    'AnalysisResult',
    'ColumnAnalysis',
    'TableAnalysis',
    'TableSummary',
    'DatabaseSummary',
    'DataAnalyzer',
    'analyze_database',
    'SchemaAnalyzer'
]
