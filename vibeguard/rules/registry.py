"""Rule registry - the single owner of every registered rule."""

import threading
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from vibeguard.errors import DuplicateRuleId, RuleNotFound
from vibeguard.utils.logging import logger

from .base import Rule

log = logger.bind(component="registry")


@dataclass(frozen=True)
class RegistryStatistics:
    """Counts describing the registry contents."""

    total: int
    enabled: int
    by_category: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)

    @property
    def disabled(self) -> int:
        return self.total - self.enabled

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "enabled": self.enabled,
            "disabled": self.disabled,
            "by_category": dict(self.by_category),
            "by_severity": dict(self.by_severity),
        }


class RuleView:
    """Lazy, restartable view over the registry in registration order.

    Each iteration takes a fresh snapshot, so rules registered later show up on
    the next pass and concurrent registration never breaks an iteration.
    """

    def __init__(self, registry: "RuleRegistry"):
        self._registry = registry

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._registry._snapshot())

    def __len__(self) -> int:
        return len(self._registry)


class RuleRegistry:
    """Holds the rule catalog and each rule's enabled flag.

    Reads and writes are serialized with a re-entrant lock; rules themselves
    are immutable, so readers only ever see complete definitions.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._lock = threading.RLock()
        self._rules: dict[str, Rule] = {}
        self._order: dict[str, int] = {}
        self._enabled: dict[str, bool] = {}
        self._next_index = 0

        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Add a rule; raises DuplicateRuleId if the id is taken."""
        with self._lock:
            if rule.id in self._rules:
                raise DuplicateRuleId(rule.id)
            self._rules[rule.id] = rule
            self._order[rule.id] = self._next_index
            self._enabled[rule.id] = rule.enabled
            self._next_index += 1
        log.debug(f"Registered rule {rule.id} ({rule.category.value})")

    def register_all(self, rules: Iterable[Rule]) -> int:
        """Register several rules, returning how many were added."""
        count = 0
        for rule in rules:
            self.register(rule)
            count += 1
        return count

    def get(self, rule_id: str) -> Rule:
        """Return the rule with this id; raises RuleNotFound."""
        with self._lock:
            try:
                return self._rules[rule_id]
            except KeyError:
                raise RuleNotFound(rule_id) from None

    def all(self) -> RuleView:
        return RuleView(self)

    def set_enabled(self, rule_id: str, enabled: bool) -> None:
        with self._lock:
            if rule_id not in self._rules:
                raise RuleNotFound(rule_id)
            self._enabled[rule_id] = bool(enabled)
        log.debug(f"Rule {rule_id} {'enabled' if enabled else 'disabled'}")

    def is_enabled(self, rule_id: str) -> bool:
        with self._lock:
            if rule_id not in self._rules:
                raise RuleNotFound(rule_id)
            return self._enabled[rule_id]

    def registration_index(self, rule_id: str) -> int:
        with self._lock:
            if rule_id not in self._order:
                raise RuleNotFound(rule_id)
            return self._order[rule_id]

    def active_rules(self, language_id: str) -> list[tuple[int, Rule]]:
        """Enabled rules for a language, paired with their registration index."""
        with self._lock:
            return [
                (self._order[rule_id], rule)
                for rule_id, rule in self._rules.items()
                if self._enabled[rule_id] and rule.applies_to(language_id)
            ]

    def statistics(self) -> RegistryStatistics:
        with self._lock:
            rules = list(self._rules.values())
            enabled = sum(1 for flag in self._enabled.values() if flag)

        by_category = Counter(rule.category.value for rule in rules)
        by_severity = Counter(rule.severity.value for rule in rules)
        return RegistryStatistics(
            total=len(rules),
            enabled=enabled,
            by_category=dict(by_category),
            by_severity=dict(by_severity),
        )

    def clear(self) -> None:
        """Drop every rule; used when the host shuts down."""
        with self._lock:
            self._rules.clear()
            self._order.clear()
            self._enabled.clear()

    def _snapshot(self) -> tuple[Rule, ...]:
        with self._lock:
            return tuple(self._rules.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        with self._lock:
            return rule_id in self._rules
