"""Rule engine - runs registered rules over a text buffer."""

import bisect
import re
import threading
import time
from collections.abc import Callable

from vibeguard.errors import AnalysisCancelled, AnalysisTimeout, RuleExecutionError
from vibeguard.utils.constants import DEFAULT_MAX_MATCHES_PER_RULE
from vibeguard.utils.logging import logger

from .base import Finding, FindingMetadata, Location, Rule
from .registry import RuleRegistry
from .whitelist import SuppressionDirectives, WhitelistFilter

log = logger.bind(component="engine")

_NEWLINE = re.compile("\n")


class LineIndex:
    """Newline offsets of a text, for offset to (line, column) conversion.

    The line of an offset is the number of newline characters before it; the
    column is the distance from the character after the last such newline.
    """

    def __init__(self, text: str):
        self._newlines = [m.start() for m in _NEWLINE.finditer(text)]

    def position(self, offset: int) -> tuple[int, int]:
        line = bisect.bisect_left(self._newlines, offset)
        line_start = self._newlines[line - 1] + 1 if line else 0
        return line, offset - line_start

    def locate(self, start: int, end: int) -> Location:
        line, column = self.position(start)
        end_line, end_column = self.position(end)
        return Location(
            line=line,
            column=column,
            length=end - start,
            start_offset=start,
            end_offset=end,
            end_line=end_line,
            end_column=end_column,
        )


class _Budget:
    """Wall-clock deadline and cancellation flag for one execute() call."""

    def __init__(
        self,
        timeout: float | None,
        cancel_event: threading.Event | None,
        clock: Callable[[], float],
        document_id: str,
    ):
        self.timeout = timeout
        self.deadline = clock() + timeout if timeout is not None else None
        self.cancel_event = cancel_event
        self.clock = clock
        self.document_id = document_id

    def check(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise AnalysisCancelled(self.document_id)
        if self.deadline is not None and self.clock() >= self.deadline:
            raise AnalysisTimeout(self.timeout)


class RuleEngine:
    """Executes every enabled, applicable rule against a document.

    Output is a pure function of ``(text, language_id)`` and the registry's
    enabled flags: findings are ordered by start offset, then by rule
    registration order.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        whitelist: WhitelistFilter | None = None,
        max_matches_per_rule: int = DEFAULT_MAX_MATCHES_PER_RULE,
        honor_directives: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.whitelist = whitelist or WhitelistFilter()
        self.max_matches_per_rule = max_matches_per_rule
        self.honor_directives = honor_directives
        self._clock = clock

    def execute(
        self,
        text: str,
        language_id: str,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        document_id: str = "<buffer>",
    ) -> list[Finding]:
        """Run all applicable rules and return ordered findings.

        Raises:
            AnalysisTimeout: ``timeout`` seconds elapsed; carries the findings
                of rules that completed so far.
            AnalysisCancelled: ``cancel_event`` was set.
        """
        budget = _Budget(timeout, cancel_event, self._clock, document_id)
        directives = (
            SuppressionDirectives.parse(text) if self.honor_directives else SuppressionDirectives()
        )
        lines = LineIndex(text)
        collected: list[tuple[int, int, Finding]] = []

        try:
            for index, rule in self.registry.active_rules(language_id):
                budget.check()

                if directives.disables(rule.id):
                    continue

                try:
                    rule_findings = self._run_rule(
                        rule, text, language_id, lines, directives, budget
                    )
                except RuleExecutionError as e:
                    log.warning(f"{e.message}; rule skipped for this document")
                    continue

                collected.extend(
                    (finding.location.start_offset, index, finding) for finding in rule_findings
                )
        except AnalysisTimeout as e:
            # Only rules that ran to completion contribute to partial results
            e.partial_findings = self._ordered(collected)
            log.warning(
                f"{document_id}: {e.message}, returning {len(e.partial_findings)} partial findings"
            )
            raise

        findings = self._ordered(collected)
        log.debug(f"{document_id}: {len(findings)} findings ({language_id})")
        return findings

    def _run_rule(
        self,
        rule: Rule,
        text: str,
        language_id: str,
        lines: LineIndex,
        directives: SuppressionDirectives,
        budget: _Budget,
    ) -> list[Finding]:
        """Findings for one rule; faults surface as RuleExecutionError."""
        findings: list[Finding] = []
        matches = 0

        try:
            for match in rule.compiled.finditer(text):
                if match.end() == match.start():
                    continue

                matches += 1
                if matches > self.max_matches_per_rule:
                    raise RuleExecutionError(
                        rule.id, f"more than {self.max_matches_per_rule} matches"
                    )

                budget.check()

                if self.whitelist.is_suppressed(text, match, rule, language_id):
                    continue

                location = lines.locate(match.start(), match.end())
                if directives.ignores_line(location.line):
                    continue

                findings.append(self._build_finding(rule, match.group(0), location, language_id))
        except (re.error, RecursionError, ValueError) as e:
            raise RuleExecutionError(rule.id, str(e)) from e

        return findings

    @staticmethod
    def _build_finding(rule: Rule, matched_text: str, location: Location, language_id: str) -> Finding:
        return Finding(
            rule_id=rule.id,
            category=rule.category,
            severity=rule.severity,
            message=rule.format_message(matched_text),
            location=location,
            matched_text=matched_text,
            description=rule.description,
            quick_fix=rule.quick_fix,
            metadata=FindingMetadata(
                confidence=rule.confidence,
                impact=rule.impact_level,
                effort=rule.effort,
                tags=(rule.category.value, language_id, *rule.tags),
            ),
        )

    @staticmethod
    def _ordered(collected: list[tuple[int, int, Finding]]) -> list[Finding]:
        return [finding for _, _, finding in sorted(collected, key=lambda item: item[:2])]
