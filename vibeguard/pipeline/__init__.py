"""Per-document analysis orchestration."""

from .analyzer import AnalysisPipeline
from .structures import AnalysisOutcome, AnalysisStatus

__all__ = ["AnalysisPipeline", "AnalysisOutcome", "AnalysisStatus"]
