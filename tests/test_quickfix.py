"""Quick-fix synthesis and batch fix application tests."""

from vibeguard.presentation import QuickFixSynthesizer, apply_fixes
from vibeguard.protocols import Position, Range
from vibeguard.rules import LiteralFix, RuleEngine, RuleRegistry, TransformFix

from conftest import OPENAI_KEY_LINE


def offset_of(text, position):
    lines = text.splitlines(keepends=True)
    return sum(len(line) for line in lines[: position.line]) + position.character


def apply_edit(text, edit):
    start = offset_of(text, edit.range.start)
    end = offset_of(text, edit.range.end)
    return text[:start] + edit.new_text + text[end:]


def broken_fix(matched):
    raise ValueError("cannot rewrite")


class TestActions:

    def test_three_actions_for_fixable_finding(self, engine):
        finding = engine.execute(OPENAI_KEY_LINE, "javascript")[0]

        actions = QuickFixSynthesizer().actions_for(finding, OPENAI_KEY_LINE, "javascript")

        primary, ignore, disable = actions
        assert primary.is_preferred
        assert primary.kind == "quickfix"
        assert primary.diagnostic_code == "API_KEY_OPENAI"
        assert primary.edits[0].range == Range(Position(0, 15), Position(0, 65))
        assert apply_edit(OPENAI_KEY_LINE, primary.edits[0]) == (
            "const apiKey = process.env.OPENAI_API_KEY;"
        )
        assert not ignore.is_preferred
        assert disable.title == "Disable rule API_KEY_OPENAI in this file"

    def test_ignore_comment_keeps_indentation(self, engine):
        text = "if (x) {\n    " + OPENAI_KEY_LINE + "\n}"
        finding = engine.execute(text, "javascript")[0]

        action = QuickFixSynthesizer().ignore_line_action(finding, text, "javascript")

        edit = action.edits[0]
        assert edit.range.is_empty
        assert edit.range.start == Position(1, 0)
        assert edit.new_text == "    // vibeguard-ignore-next-line\n"

    def test_applied_ignore_comment_silences_finding(self, engine):
        text = "x = 1\nresult = eval(data)\n"
        finding = engine.execute(text, "python")[0]
        action = QuickFixSynthesizer().ignore_line_action(finding, text, "python")

        fixed = apply_edit(text, action.edits[0])

        assert fixed == "x = 1\n# vibeguard-ignore-next-line\nresult = eval(data)\n"
        assert engine.execute(fixed, "python") == []

    def test_applied_disable_comment_silences_rule(self, engine):
        text = "FROM node:20\nUSER root\n"
        finding = engine.execute(text, "dockerfile")[0]

        actions = QuickFixSynthesizer().actions_for(finding, text, "dockerfile")
        fixed = apply_edit(text, actions[-1].edits[0])

        assert [a.title for a in actions] == [
            "Run as an unprivileged user",
            "Disable rule CONFIG_DOCKER_ROOT_USER in this file",
        ]
        assert fixed.startswith("# vibeguard-disable CONFIG_DOCKER_ROOT_USER\n")
        assert engine.execute(fixed, "dockerfile") == []

    def test_sql_uses_double_dash(self, engine):
        finding = engine.execute("DELETE FROM users;", "sql")[0]

        ignore = QuickFixSynthesizer().ignore_line_action(finding, "DELETE FROM users;", "sql")

        assert ignore.edits[0].new_text == "-- vibeguard-ignore-next-line\n"

    def test_failing_fix_is_dropped(self, make_rule):
        """A fix that raises yields no primary action; the others remain."""
        rule = make_rule("BROKEN_FIX", quick_fix=TransformFix(broken_fix))
        finding = RuleEngine(RuleRegistry([rule])).execute("danger", "javascript")[0]

        actions = QuickFixSynthesizer().actions_for(finding, "danger", "javascript")

        assert [a.title for a in actions] == [
            "Ignore this finding",
            "Disable rule BROKEN_FIX in this file",
        ]


class TestApplyFixes:

    def test_all_fixes_applied(self, engine):
        text = OPENAI_KEY_LINE + "\nelement.innerHTML = html;\n"
        findings = engine.execute(text, "javascript")

        fixed, applied = apply_fixes(text, findings)

        assert fixed == (
            "const apiKey = process.env.OPENAI_API_KEY;\nelement.textContent = html;\n"
        )
        assert [f.rule_id for f in applied] == ["API_KEY_OPENAI", "CODE_INJECTION_INNERHTML"]
        assert engine.execute(fixed, "javascript") == []

    def test_overlapping_fix_is_skipped(self, make_rule):
        """Edits run from the end; an overlapping earlier edit is dropped."""
        registry = RuleRegistry([
            make_rule("WIDE", r"danger zone", quick_fix=LiteralFix("safe")),
            make_rule("NARROW", r"zone", quick_fix=LiteralFix("area")),
        ])
        findings = RuleEngine(registry).execute("danger zone", "javascript")

        fixed, applied = apply_fixes("danger zone", findings)

        assert fixed == "danger area"
        assert [f.rule_id for f in applied] == ["NARROW"]

    def test_findings_without_fix_are_left(self, engine):
        text = "data = pickle.loads(blob)"

        fixed, applied = apply_fixes(text, engine.execute(text, "python"))

        assert fixed == text
        assert applied == []


class TestBatchActions:
    """Grouped "fix all" actions built from the preferred fixes."""

    TEXT = f"{OPENAI_KEY_LINE}\n{OPENAI_KEY_LINE}\nelement.innerHTML = html;\n"
    FIXED = (
        "const apiKey = process.env.OPENAI_API_KEY;\n"
        "const apiKey = process.env.OPENAI_API_KEY;\n"
        "element.textContent = html;\n"
    )

    def test_group_and_fix_all(self, engine):
        findings = engine.execute(self.TEXT, "javascript")

        group, fix_all = QuickFixSynthesizer().batch_actions(findings, self.TEXT)

        assert group.title == "Fix all API key issues (2)"
        assert group.kind == "quickfix"
        assert group.diagnostic_code == "API"
        assert group.covered_codes == ("API_KEY_OPENAI", "API_KEY_OPENAI")
        assert fix_all.title == "Fix all security issues (3)"
        assert fix_all.kind == "source.fixAll"
        assert fix_all.covered_codes == (
            "API_KEY_OPENAI",
            "API_KEY_OPENAI",
            "CODE_INJECTION_INNERHTML",
        )

    def test_edits_run_bottom_up(self, engine):
        """Applying the edits in order gives the same text as apply_fixes."""
        findings = engine.execute(self.TEXT, "javascript")
        fix_all = QuickFixSynthesizer().batch_actions(findings, self.TEXT)[-1]

        starts = [edit.range.start.line for edit in fix_all.edits]
        fixed = self.TEXT
        for edit in fix_all.edits:
            fixed = apply_edit(fixed, edit)

        assert starts == [2, 1, 0]
        assert fixed == self.FIXED == apply_fixes(self.TEXT, findings)[0]

    def test_batch_size_cap(self, engine):
        findings = engine.execute(self.TEXT, "javascript")

        actions = QuickFixSynthesizer().batch_actions(findings, self.TEXT, max_batch_size=2)

        assert [a.title for a in actions] == [
            "Fix all API key issues (2)",
            "Fix all security issues (2)",
        ]
        assert all(e.range.start.line < 2 for a in actions for e in a.edits)

    def test_single_finding_has_no_batch(self, engine):
        findings = engine.execute(OPENAI_KEY_LINE, "javascript")

        assert QuickFixSynthesizer().batch_actions(findings, OPENAI_KEY_LINE) == []

    def test_overlapping_fixes_are_dropped(self, make_rule):
        registry = RuleRegistry([
            make_rule("TEST_WIDE", r"danger zone", quick_fix=LiteralFix("safe")),
            make_rule("TEST_NARROW", r"zone", quick_fix=LiteralFix("area")),
        ])
        text = "danger zone; zone"
        findings = RuleEngine(registry).execute(text, "javascript")

        group, fix_all = QuickFixSynthesizer().batch_actions(findings, text)

        assert group.title == "Fix all TEST issues (2)"
        assert group.covered_codes == ("TEST_NARROW", "TEST_NARROW")
        assert fix_all.edits == group.edits

    def test_findings_without_fix_are_not_counted(self, engine):
        text = "data = pickle.loads(blob)\nresult = eval(data)\n"
        findings = engine.execute(text, "python")

        assert len(findings) == 2
        assert QuickFixSynthesizer().batch_actions(findings, text) == []
