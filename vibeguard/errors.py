"""Error taxonomy for VibeGuard.

Every error carries a stable ``code``, a coarse ``category`` and whether the
caller can keep going after it (``recoverable``). Only registration errors are
fatal; everything raised while analysing a document is recovered by the
engine or converted into an ``AnalysisOutcome`` by the pipeline.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vibeguard.rules.base import Finding


class ErrorCategory(Enum):
    """Subsystem an error originated from."""

    RULE = "rule"
    ANALYSIS = "analysis"
    CACHE = "cache"
    SCHEDULER = "scheduler"
    CONFIGURATION = "configuration"


class VibeGuardError(Exception):
    """Base class for all VibeGuard errors."""

    code = "VIBEGUARD_ERROR"
    category = ErrorCategory.ANALYSIS
    recoverable = True

    def __init__(self, message: str, *, code: str | None = None, recoverable: bool | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class DuplicateRuleId(VibeGuardError):
    """A rule with the same id is already registered."""

    code = "DUPLICATE_RULE_ID"
    category = ErrorCategory.RULE
    recoverable = False

    def __init__(self, rule_id: str):
        super().__init__(f"Rule '{rule_id}' is already registered")
        self.rule_id = rule_id


class RuleNotFound(VibeGuardError, KeyError):
    """No rule is registered under the requested id."""

    code = "RULE_NOT_FOUND"
    category = ErrorCategory.RULE

    def __init__(self, rule_id: str):
        super().__init__(f"Rule '{rule_id}' is not registered")
        self.rule_id = rule_id

    def __str__(self) -> str:
        return self.message


class InvalidRuleDefinition(VibeGuardError):
    """A rule definition cannot be compiled or is incomplete."""

    code = "INVALID_RULE"
    category = ErrorCategory.RULE
    recoverable = False


class RuleExecutionError(VibeGuardError):
    """A single rule faulted or exceeded its match cap while executing."""

    code = "RULE_EXECUTION_ERROR"
    category = ErrorCategory.RULE

    def __init__(self, rule_id: str, reason: str):
        super().__init__(f"Rule '{rule_id}' failed: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class FileTooLarge(VibeGuardError):
    """Document exceeds the configured size ceiling; no rule was run."""

    code = "FILE_TOO_LARGE"

    def __init__(self, size: int, limit: int):
        super().__init__(f"Document is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit


class AnalysisTimeout(VibeGuardError):
    """Analysis exceeded its wall-clock budget."""

    code = "ANALYSIS_TIMEOUT"

    def __init__(self, budget: float, partial_findings: "list[Finding] | None" = None):
        super().__init__(f"Analysis exceeded {budget:.2f}s budget")
        self.budget = budget
        self.partial_findings = list(partial_findings or [])


class AnalysisCancelled(VibeGuardError):
    """Analysis was superseded by a newer request for the same document."""

    code = "ANALYSIS_CANCELLED"

    def __init__(self, document_id: str):
        super().__init__(f"Analysis of '{document_id}' was superseded")
        self.document_id = document_id


class ConfigError(VibeGuardError):
    """Configuration value is missing or malformed."""

    code = "CONFIG_ERROR"
    category = ErrorCategory.CONFIGURATION
    recoverable = False
