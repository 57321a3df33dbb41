"""Custom rule loader for project-specific YAML rule files."""

import re
from pathlib import Path
from typing import Any

import yaml

from vibeguard.errors import InvalidRuleDefinition
from vibeguard.utils.logging import logger

from .base import WILDCARD_LANGUAGE, Category, EffortLevel, LiteralFix, Rule, Severity

_FLAG_NAMES = {
    "ignorecase": re.IGNORECASE,
    "dotall": re.DOTALL,
    "verbose": re.VERBOSE,
}


class RuleLoader:
    """Loads detection rules from YAML files.

    A rule file has a top-level ``rules:`` list::

        rules:
          - id: INTERNAL_HOSTNAME
            category: config-error
            severity: warning
            pattern: 'corp\\.internal'
            message: Internal hostname in source
            languages: ["*"]
            quick_fix:
              title: Use the public hostname
              replacement: api.example.com
    """

    def __init__(self, rules_file: Path | str | None = None):
        self.rules_file = Path(rules_file) if rules_file else None
        self.errors: list[str] = []

    def load(self, rules_file: Path | str | None = None) -> list[Rule]:
        """Load rules from a single YAML file.

        Args:
            rules_file: Path to the YAML file. Defaults to the loader's file.

        Returns:
            Valid rules in file order. Invalid entries are skipped and recorded
            in ``self.errors``.
        """
        path = Path(rules_file) if rules_file else self.rules_file
        if path is None:
            raise ValueError("No rules file given")
        if not path.exists():
            raise FileNotFoundError(f"Rules file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
            raise InvalidRuleDefinition(f"Invalid rules file format in {path}")

        rules = []
        for position, entry in enumerate(data["rules"]):
            try:
                rules.append(self._build_rule(entry))
            except (KeyError, TypeError, ValueError, InvalidRuleDefinition) as e:
                message = f"Skipping invalid rule #{position} in {path}: {e}"
                self.errors.append(message)
                logger.warning(message)

        logger.debug(f"Loaded {len(rules)} custom rules from {path}")
        return rules

    def _build_rule(self, entry: dict[str, Any]) -> Rule:
        if not isinstance(entry, dict):
            raise TypeError("rule entry must be a mapping")

        flags = re.MULTILINE
        for name in entry.get("flags", []):
            flags |= _FLAG_NAMES[name.lower()]

        quick_fix = None
        fix = entry.get("quick_fix")
        if fix:
            quick_fix = LiteralFix(
                replacement=str(fix["replacement"]),
                title=str(fix.get("title", "Apply suggested replacement")),
            )

        return Rule(
            id=str(entry["id"]),
            category=Category(entry["category"]),
            severity=Severity(entry.get("severity", "warning")),
            pattern=str(entry["pattern"]),
            message=str(entry["message"]),
            description=str(entry.get("description", "")),
            quick_fix=quick_fix,
            whitelist=tuple(entry.get("whitelist", ())),
            languages=frozenset(lang.lower() for lang in entry.get("languages", [WILDCARD_LANGUAGE])),
            flags=flags,
            effort=EffortLevel(entry["effort"]) if "effort" in entry else EffortLevel.EASY,
            confidence=float(entry.get("confidence", 0.9)),
            tags=tuple(entry.get("tags", ())),
            enabled=bool(entry.get("enabled", True)),
        )
