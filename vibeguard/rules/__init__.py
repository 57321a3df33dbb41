"""VibeGuard detection rules, registry and engine."""

from pathlib import Path

from vibeguard.utils.logging import logger

from . import config_errors, credentials, frameworks, injection, python, sql
from .base import (
    Category,
    EffortLevel,
    Finding,
    FindingMetadata,
    ImpactLevel,
    LiteralFix,
    Location,
    QuickFix,
    Rule,
    Severity,
    TransformFix,
)
from .engine import RuleEngine
from .loader import RuleLoader
from .registry import RegistryStatistics, RuleRegistry
from .whitelist import SuppressionDirectives, WhitelistFilter

_CATALOG = (credentials, sql, injection, frameworks, config_errors, python)


def default_rules() -> list[Rule]:
    """Built-in rule catalog in registration order."""
    rules: list[Rule] = []
    for module in _CATALOG:
        rules.extend(module.rules())
    return rules


def build_default_registry(rules_file: Path | str | None = None) -> RuleRegistry:
    """A fresh registry with the built-in catalog plus optional custom rules."""
    registry = RuleRegistry(default_rules())

    if rules_file is not None and Path(rules_file).exists():
        custom = RuleLoader(rules_file).load()
        registry.register_all(custom)
        logger.info(f"Registered {len(custom)} custom rules from {rules_file}")

    return registry


__all__ = [
    "Category",
    "EffortLevel",
    "Finding",
    "FindingMetadata",
    "ImpactLevel",
    "LiteralFix",
    "Location",
    "QuickFix",
    "RegistryStatistics",
    "Rule",
    "RuleEngine",
    "RuleLoader",
    "RuleRegistry",
    "Severity",
    "SuppressionDirectives",
    "TransformFix",
    "WhitelistFilter",
    "build_default_registry",
    "default_rules",
]
