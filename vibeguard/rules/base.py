"""Base contracts for detection rules and the findings they produce."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vibeguard.errors import InvalidRuleDefinition

WILDCARD_LANGUAGE = "*"

# Upper-case rule ids, as written in vibeguard-disable comments
RULE_ID = re.compile(r"\b[A-Z][A-Z0-9_]*\b")

# Longest matched text interpolated into a message
MAX_MESSAGE_MATCH_CHARS = 80


class Severity(Enum):
    """Finding severity, ordered from most to least severe."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"error": 0, "warning": 1, "info": 2}[self.value]


class Category(Enum):
    """Family of dangerous construct a rule detects."""

    CREDENTIAL_EXPOSURE = "credential-exposure"
    DESTRUCTIVE_SQL = "destructive-sql"
    CODE_INJECTION = "code-injection"
    FRAMEWORK_RISK = "framework-risk"
    CONFIG_ERROR = "config-error"


class ImpactLevel(Enum):
    """Damage if the finding is exploited."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EffortLevel(Enum):
    """Work needed to remediate a finding."""

    TRIVIAL = "trivial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DEFAULT_IMPACT = {
    Category.CREDENTIAL_EXPOSURE: ImpactLevel.CRITICAL,
    Category.DESTRUCTIVE_SQL: ImpactLevel.CRITICAL,
    Category.CODE_INJECTION: ImpactLevel.HIGH,
    Category.FRAMEWORK_RISK: ImpactLevel.MEDIUM,
    Category.CONFIG_ERROR: ImpactLevel.MEDIUM,
}


@dataclass(frozen=True)
class LiteralFix:
    """Quick fix that replaces the match with fixed text."""

    replacement: str
    title: str = "Replace with a safe alternative"

    def apply(self, matched_text: str) -> str:
        return self.replacement


@dataclass(frozen=True)
class TransformFix:
    """Quick fix computed from the matched text by a pure function."""

    transform: Callable[[str], str]
    title: str = "Rewrite with a safe alternative"

    def apply(self, matched_text: str) -> str:
        return self.transform(matched_text)


QuickFix = LiteralFix | TransformFix


@dataclass(frozen=True)
class Rule:
    """Immutable detection rule definition.

    ``enabled`` is only the initial state; the registry owns the runtime flag.
    """

    id: str
    category: Category
    severity: Severity
    pattern: str
    message: str
    description: str = ""
    quick_fix: QuickFix | None = None
    whitelist: tuple[str, ...] = ()
    languages: frozenset[str] = frozenset({WILDCARD_LANGUAGE})
    flags: int = re.MULTILINE
    impact: ImpactLevel | None = None
    effort: EffortLevel = EffortLevel.EASY
    confidence: float = 0.9
    tags: tuple[str, ...] = ()
    enabled: bool = True
    compiled: re.Pattern = field(init=False, repr=False, compare=False)
    compiled_whitelist: tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate the definition and compile its patterns."""
        if not self.id:
            raise InvalidRuleDefinition("Rule id must not be empty")
        if not RULE_ID.fullmatch(self.id):
            raise InvalidRuleDefinition(f"Rule id '{self.id}' must look like UPPER_SNAKE_CASE")
        if not self.languages:
            raise InvalidRuleDefinition(f"Rule '{self.id}' applies to no language")
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidRuleDefinition(f"Rule '{self.id}' confidence must be within 0..1")

        if not isinstance(self.languages, frozenset):
            object.__setattr__(self, "languages", frozenset(self.languages))
        if not isinstance(self.whitelist, tuple):
            object.__setattr__(self, "whitelist", tuple(self.whitelist))
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

        try:
            object.__setattr__(self, "compiled", re.compile(self.pattern, self.flags))
            object.__setattr__(
                self,
                "compiled_whitelist",
                tuple(re.compile(p, re.IGNORECASE) for p in self.whitelist),
            )
        except re.error as e:
            raise InvalidRuleDefinition(f"Invalid regex in rule '{self.id}': {e}") from e

    @property
    def impact_level(self) -> ImpactLevel:
        return self.impact or DEFAULT_IMPACT[self.category]

    def applies_to(self, language_id: str) -> bool:
        """Check if rule applies to given language."""
        return WILDCARD_LANGUAGE in self.languages or language_id.lower() in self.languages

    def format_message(self, matched_text: str) -> str:
        """Fill the ``{match}`` placeholder with the raw matched text."""
        if "{match}" not in self.message:
            return self.message
        shown = matched_text
        if len(shown) > MAX_MESSAGE_MATCH_CHARS:
            shown = shown[: MAX_MESSAGE_MATCH_CHARS - 3] + "..."
        return self.message.replace("{match}", shown)


@dataclass(frozen=True)
class Location:
    """Position of a match in the analysed text, 0-based lines and columns."""

    line: int
    column: int
    length: int
    start_offset: int
    end_offset: int
    end_line: int
    end_column: int

    def to_dict(self) -> dict[str, int]:
        return {
            "line": self.line,
            "column": self.column,
            "length": self.length,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }


@dataclass(frozen=True)
class FindingMetadata:
    """Confidence and remediation hints attached to a finding."""

    confidence: float
    impact: ImpactLevel
    effort: EffortLevel | None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Finding:
    """A single non-whitelisted rule match."""

    rule_id: str
    category: Category
    severity: Severity
    message: str
    location: Location
    matched_text: str
    metadata: FindingMetadata
    description: str = ""
    quick_fix: QuickFix | None = None

    @property
    def id(self) -> str:
        return f"{self.rule_id}_{self.location.line}_{self.location.column}"

    def fix_text(self) -> str | None:
        """Evaluate the quick fix against the matched text."""
        if self.quick_fix is None:
            return None
        return self.quick_fix.apply(self.matched_text)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "rule": self.rule_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location.to_dict(),
            "matched_text": self.matched_text,
            "confidence": self.metadata.confidence,
            "impact": self.metadata.impact.value,
            "effort": self.metadata.effort.value if self.metadata.effort else None,
            "tags": list(self.metadata.tags),
        }
        if self.quick_fix is not None:
            result["quick_fix"] = {"title": self.quick_fix.title, "replacement": self.fix_text()}
        return result
