"""Finding presenter - turns raw findings into user-facing diagnostics."""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from vibeguard.config_runtime import PresentationSettings
from vibeguard.rules.base import Category, EffortLevel, Finding, Location, Severity

DIAGNOSTIC_SOURCE = "VibeGuard"

CATEGORY_TIPS = {
    Category.CREDENTIAL_EXPOSURE: "store the key in an environment variable",
    Category.DESTRUCTIVE_SQL: "add a WHERE clause to limit the affected rows",
    Category.CODE_INJECTION: "handle user input with a safe alternative",
    Category.FRAMEWORK_RISK: "use the framework's built-in safe APIs",
    Category.CONFIG_ERROR: "review the production configuration",
}

SEVERITY_PREFIXES = {
    Severity.ERROR: "Fix now",
    Severity.WARNING: "Suggestion",
    Severity.INFO: "Tip",
}

EFFORT_NOTES = {
    EffortLevel.TRIVIAL: "trivial (one-click fix)",
    EffortLevel.EASY: "easy (one-click fix)",
    EffortLevel.MEDIUM: "medium (needs small changes)",
    EffortLevel.HARD: "hard (needs refactoring)",
}


class DiagnosticTag(Enum):
    UNNECESSARY = "unnecessary"


@dataclass(frozen=True)
class RelatedInformation:
    message: str
    location: Location


@dataclass(frozen=True)
class PresentedDiagnostic:
    """A finding ready for display.

    Grouped diagnostics keep the first member's location and metadata;
    ``occurrences`` counts every finding folded into it.
    """

    code: str
    severity: Severity
    message: str
    location: Location
    finding: Finding
    related: tuple[RelatedInformation, ...] = ()
    tags: tuple[DiagnosticTag, ...] = ()
    occurrences: int = 1
    members: tuple[Finding, ...] = field(default=(), repr=False)
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
            "location": self.location.to_dict(),
            "related": [
                {"message": info.message, "location": info.location.to_dict()}
                for info in self.related
            ],
            "tags": [tag.value for tag in self.tags],
            "occurrences": self.occurrences,
        }


def group_annotation(count: int) -> str:
    return f"({count} identical findings in this file)"


class FindingPresenter:
    """Cap, enrich, tag and group findings, in that order."""

    def __init__(
        self,
        category_tips: dict[Category, str] | None = None,
        effort_notes: dict[EffortLevel, str] | None = None,
    ):
        self.category_tips = CATEGORY_TIPS if category_tips is None else category_tips
        self.effort_notes = EFFORT_NOTES if effort_notes is None else effort_notes

    def present(
        self,
        findings: Sequence[Finding],
        settings: PresentationSettings | None = None,
    ) -> list[PresentedDiagnostic]:
        settings = settings or PresentationSettings()

        # The cap applies before grouping
        capped = list(findings)[: max(settings.max_diagnostics_per_file, 0)]
        diagnostics = [self.enrich(finding) for finding in capped]

        if settings.group_similar:
            diagnostics = self.group(diagnostics)
        return diagnostics

    def enrich(self, finding: Finding) -> PresentedDiagnostic:
        return PresentedDiagnostic(
            code=finding.rule_id,
            severity=finding.severity,
            message=self.enhance_message(finding),
            location=finding.location,
            finding=finding,
            related=self.related_information(finding),
            tags=self.tags_for(finding),
            members=(finding,),
        )

    def enhance_message(self, finding: Finding) -> str:
        lines = [finding.message]
        tip = self.category_tips.get(finding.category)
        if tip:
            lines.append(f"{SEVERITY_PREFIXES[finding.severity]}: {tip}")
        effort = finding.metadata.effort
        if effort is not None and effort in self.effort_notes:
            lines.append(f"Fix effort: {self.effort_notes[effort]}")
        return "\n".join(lines)

    @staticmethod
    def related_information(finding: Finding) -> tuple[RelatedInformation, ...]:
        related = []
        if finding.description and finding.description != finding.message:
            related.append(RelatedInformation(f"Details: {finding.description}", finding.location))
        if finding.quick_fix is not None:
            related.append(
                RelatedInformation(f"Quick fix available: {finding.quick_fix.title}", finding.location)
            )
        return tuple(related)

    @staticmethod
    def tags_for(finding: Finding) -> tuple[DiagnosticTag, ...]:
        if (
            finding.category is Category.CREDENTIAL_EXPOSURE
            and finding.severity is Severity.ERROR
        ):
            return (DiagnosticTag.UNNECESSARY,)
        return ()

    @staticmethod
    def group(diagnostics: list[PresentedDiagnostic]) -> list[PresentedDiagnostic]:
        """Collapse diagnostics sharing a rule id, in first-appearance order."""
        buckets: dict[str, list[PresentedDiagnostic]] = {}
        for diagnostic in diagnostics:
            buckets.setdefault(diagnostic.code, []).append(diagnostic)

        grouped = []
        for bucket in buckets.values():
            first = bucket[0]
            if len(bucket) == 1:
                grouped.append(first)
                continue
            grouped.append(
                replace(
                    first,
                    message=f"{first.message}\n{group_annotation(len(bucket))}",
                    occurrences=len(bucket),
                    members=tuple(d.finding for d in bucket),
                )
            )
        return grouped
