"""VibeGuard - regex-based security pattern detection for source text."""

from pathlib import Path

from vibeguard.cache import AnalysisCache
from vibeguard.config_runtime import VibeGuardSettings
from vibeguard.pipeline import AnalysisPipeline
from vibeguard.rules import RuleEngine, RuleRegistry, build_default_registry

__version__ = "0.3.0"


def build_engine(
    settings: VibeGuardSettings | None = None,
    registry: RuleRegistry | None = None,
    rules_file: Path | str | None = None,
) -> AnalysisPipeline:
    """Wire a registry, rule engine, cache and pipeline.

    Args:
        settings: Runtime settings; defaults are used when omitted.
        registry: Registry to share; a fresh one with the built-in catalog
            (plus ``rules_file``, when it exists) is created otherwise.
        rules_file: Custom YAML rules; defaults to ``settings.rules_file``.

    Returns:
        A pipeline exposing ``.engine`` (and ``.engine.registry``) and ``.cache``.
    """
    settings = settings or VibeGuardSettings()
    if registry is None:
        registry = build_default_registry(rules_file or settings.rules_file)

    engine = RuleEngine(registry, max_matches_per_rule=settings.analysis.max_matches_per_rule)
    cache = AnalysisCache(
        ttl=settings.cache.ttl_seconds,
        capacity=settings.cache.capacity,
        sweep_interval=settings.cache.sweep_interval_seconds,
    )
    return AnalysisPipeline(engine, cache, settings.analysis)


__all__ = ["__version__", "build_engine"]
