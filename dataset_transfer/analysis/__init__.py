from dataset_transfer.analysis.analyzer import SchemaAnalyzer, parse_record
from dataset_transfer.analysis.models import AnalysisOptions, AnalysisResult

__all__ = ["AnalysisOptions", "AnalysisResult", "SchemaAnalyzer", "parse_record"]
