"""Analysis result caching."""

from .analysis_cache import AnalysisCache, AnalysisResult, Fingerprint

__all__ = ["AnalysisCache", "AnalysisResult", "Fingerprint"]
