"""Quick-fix synthesis for findings."""

import re
from collections.abc import Iterable, Sequence

from vibeguard.protocols import CodeAction, Position, Range, TextEdit
from vibeguard.rules.base import Finding
from vibeguard.rules.languages import HASH_COMMENT_LANGUAGES
from vibeguard.rules.whitelist import DISABLE, IGNORE_NEXT_LINE
from vibeguard.utils.constants import DEFAULT_MAX_BATCH_FIXES
from vibeguard.utils.logging import logger

log = logger.bind(component="quickfix")

# Languages that get an "ignore next line" action, with their comment prefix
IGNORE_COMMENT_PREFIXES = {
    "python": "#",
    "sql": "--",
    "javascript": "//",
    "typescript": "//",
    "javascriptreact": "//",
    "typescriptreact": "//",
    "vue": "//",
}

DISABLE_COMMENT_PREFIXES = {"sql": "--", **dict.fromkeys(HASH_COMMENT_LANGUAGES, "#")}
DEFAULT_COMMENT_PREFIX = "//"

# Batch titles per rule id prefix
FIX_GROUP_LABELS = {
    "API": "API key",
    "SQL": "SQL",
    "CODE": "code injection",
    "FRAMEWORK": "framework",
    "CONFIG": "configuration",
    "PY": "Python",
}

FIX_ALL_KIND = "source.fixAll"

_INDENT = re.compile(r"^[ \t]*")


def finding_range(finding: Finding) -> Range:
    loc = finding.location
    return Range(Position(loc.line, loc.column), Position(loc.end_line, loc.end_column))


def fix_group(rule_id: str) -> str:
    """Leading segment of a rule id: ``API_KEY_OPENAI`` -> ``API``."""
    return rule_id.split("_", 1)[0]


def select_fixes(text: str, findings: Iterable[Finding]) -> list[tuple[Finding, str]]:
    """Pick the findings whose own fixes can be applied to ``text`` together.

    Findings are walked from the end of the text backwards; one that overlaps
    a fix already picked, or reaches past the end of ``text``, is skipped.

    Returns:
        ``(finding, replacement)`` pairs in bottom-up order.
    """
    selected: list[tuple[Finding, str]] = []
    boundary = len(text)
    for finding in sorted(findings, key=lambda f: f.location.start_offset, reverse=True):
        if finding.quick_fix is None:
            continue
        start, end = finding.location.start_offset, finding.location.end_offset
        if end > boundary:
            continue
        try:
            replacement = finding.fix_text()
        except Exception as e:
            log.opt(exception=e).warning(f"Quick fix for {finding.rule_id} failed to evaluate")
            continue
        selected.append((finding, replacement))
        boundary = start
    return selected


class QuickFixSynthesizer:
    """Builds code actions for a finding.

    Every finding gets up to three actions: the rule's own fix (when it has
    one and it evaluates cleanly), an "ignore next line" comment for
    languages with a known comment syntax, and a file-level "disable rule"
    comment. ``batch_actions`` bundles the rule fixes of several findings.
    """

    def actions_for(self, finding: Finding, text: str, language_id: str) -> list[CodeAction]:
        actions = []
        primary = self.primary_fix(finding)
        if primary is not None:
            actions.append(primary)
        ignore = self.ignore_line_action(finding, text, language_id)
        if ignore is not None:
            actions.append(ignore)
        actions.append(self.disable_rule_action(finding, language_id))
        return actions

    def primary_fix(self, finding: Finding) -> CodeAction | None:
        if finding.quick_fix is None:
            return None
        try:
            new_text = finding.fix_text()
        except Exception as e:
            log.opt(exception=e).warning(f"Quick fix for {finding.rule_id} failed to evaluate")
            return None
        return CodeAction(
            title=finding.quick_fix.title,
            edits=(TextEdit(finding_range(finding), new_text),),
            diagnostic_code=finding.rule_id,
            is_preferred=True,
        )

    def ignore_line_action(self, finding: Finding, text: str, language_id: str) -> CodeAction | None:
        prefix = IGNORE_COMMENT_PREFIXES.get(language_id)
        if prefix is None:
            return None

        lines = text.split("\n")
        line = finding.location.line
        line_text = lines[line] if line < len(lines) else ""
        indentation = _INDENT.match(line_text).group(0)
        return CodeAction(
            title="Ignore this finding",
            edits=(TextEdit(Range.point(line), f"{indentation}{prefix} {IGNORE_NEXT_LINE}\n"),),
            diagnostic_code=finding.rule_id,
        )

    def disable_rule_action(self, finding: Finding, language_id: str) -> CodeAction:
        prefix = DISABLE_COMMENT_PREFIXES.get(language_id, DEFAULT_COMMENT_PREFIX)
        return CodeAction(
            title=f"Disable rule {finding.rule_id} in this file",
            edits=(TextEdit(Range.point(0), f"{prefix} {DISABLE} {finding.rule_id}\n"),),
            diagnostic_code=finding.rule_id,
        )

    def batch_actions(
        self,
        findings: Sequence[Finding],
        text: str,
        max_batch_size: int = DEFAULT_MAX_BATCH_FIXES,
    ) -> list[CodeAction]:
        """One action per rule group with several fixes, then a "fix all" action.

        Only the first ``max_batch_size`` findings are considered. Each action
        carries the preferred fix of every finding it covers, as bottom-up,
        non-overlapping edits.
        """
        limited = list(findings)[:max_batch_size]
        if len(limited) < 2:
            return []

        groups: dict[str, list[Finding]] = {}
        for finding in limited:
            groups.setdefault(fix_group(finding.rule_id), []).append(finding)

        actions = []
        for group, members in groups.items():
            selected = select_fixes(text, members)
            if len(selected) < 2:
                continue
            label = FIX_GROUP_LABELS.get(group, group)
            actions.append(_batch_action(f"Fix all {label} issues ({len(selected)})", selected, group))

        selected = select_fixes(text, limited)
        if len(selected) > 1:
            actions.append(_batch_action(
                f"Fix all security issues ({len(selected)})", selected, "*", kind=FIX_ALL_KIND
            ))
        return actions


def _batch_action(
    title: str, selected: list[tuple[Finding, str]], code: str, kind: str = "quickfix"
) -> CodeAction:
    return CodeAction(
        title=title,
        edits=tuple(TextEdit(finding_range(f), new_text) for f, new_text in selected),
        diagnostic_code=code,
        kind=kind,
        covered_codes=tuple(f.rule_id for f, _ in reversed(selected)),
    )


def apply_fixes(text: str, findings: Iterable[Finding]) -> tuple[str, list[Finding]]:
    """Apply each finding's own quick fix to ``text``.

    Edits are applied from the end of the text backwards so earlier offsets
    stay valid; a finding overlapping one already applied is skipped.

    Returns:
        The rewritten text and the findings whose fix was applied.
    """
    applied: list[Finding] = []
    for finding, replacement in select_fixes(text, findings):
        loc = finding.location
        text = text[:loc.start_offset] + replacement + text[loc.end_offset:]
        applied.append(finding)
    applied.reverse()
    return text, applied
