"""Command-line tests for scan, rules and fix."""

import json
from dataclasses import replace

import pytest
from click.testing import CliRunner

from vibeguard import __version__
from vibeguard.cli import cli
from vibeguard.commands.scan import exit_code_for
from vibeguard.rules import default_rules
from vibeguard.rules.base import Severity

from conftest import OPENAI_KEY_LINE


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Empty project directory used as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def scan_json(runner, *args):
    result = runner.invoke(cli, ["scan", "--json", *args])
    return result, json.loads(result.stdout)


class TestScan:

    def test_clean_project(self, runner, project):
        (project / "app.js").write_text("const apiKey = process.env.OPENAI_API_KEY;\n")

        result, data = scan_json(runner)

        assert result.exit_code == 0
        assert data["summary"]["files"] == 1
        assert data["summary"]["findings"] == 0
        assert data["files"][0]["status"] == "ok"

    def test_error_findings_fail(self, runner, project):
        (project / "app.js").write_text(OPENAI_KEY_LINE + "\n")

        result, data = scan_json(runner)

        assert result.exit_code == 2
        assert data["exit_code"] == 2
        report = data["files"][0]
        assert report["path"] == "app.js"
        assert report["language"] == "javascript"
        assert [d["code"] for d in report["diagnostics"]] == ["API_KEY_OPENAI"]
        assert data["summary"]["by_severity"] == {"error": 1, "warning": 0, "info": 0}

    def test_warnings_respect_fail_on(self, runner, project):
        """Warnings pass by default and fail with --fail-on warning."""
        (project / "page.js").write_text("document.write(content);\n")

        assert runner.invoke(cli, ["scan", "--json"]).exit_code == 0
        assert runner.invoke(cli, ["scan", "--json", "--fail-on", "warning"]).exit_code == 1

    def test_excluded_folders_and_unknown_files_skipped(self, runner, project):
        (project / "node_modules").mkdir()
        (project / "node_modules" / "lib.js").write_text(OPENAI_KEY_LINE)
        (project / "notes.md").write_text(OPENAI_KEY_LINE)
        (project / "schema.sql").write_text("DELETE FROM users;\n")

        result, data = scan_json(runner)

        assert [f["path"] for f in data["files"]] == ["schema.sql"]
        assert result.exit_code == 2

    def test_language_override(self, runner, project):
        (project / "queries.txt").write_text("DELETE FROM users;\n")

        _, data = scan_json(runner, "queries.txt", "--language", "sql")

        assert data["files"][0]["language"] == "sql"
        assert data["summary"]["findings"] == 1

    def test_grouping_flags(self, runner, project):
        (project / "cleanup.sql").write_text(
            "DELETE FROM a;\nDELETE FROM b;\nDELETE FROM c;\n"
        )

        _, grouped = scan_json(runner)
        _, ungrouped = scan_json(runner, "--no-group")
        _, capped = scan_json(runner, "--no-group", "--max-diagnostics", "2")

        assert [d["occurrences"] for d in grouped["files"][0]["diagnostics"]] == [3]
        assert len(ungrouped["files"][0]["diagnostics"]) == 3
        assert len(capped["files"][0]["diagnostics"]) == 2

    def test_custom_rules_file(self, runner, project):
        (project / "rules.yml").write_text(
            "rules:\n"
            "  - id: NO_STAGING_HOST\n"
            "    category: config-error\n"
            "    severity: error\n"
            "    pattern: 'staging\\.corp'\n"
            "    message: Staging host in source\n"
        )
        (project / "app.py").write_text('URL = "https://staging.corp/api"\n')

        result, data = scan_json(runner, "app.py", "--rules-file", "rules.yml")

        assert [d["code"] for d in data["files"][0]["diagnostics"]] == ["NO_STAGING_HOST"]
        assert result.exit_code == 2

    def test_table_output(self, runner, project):
        (project / "app.js").write_text(OPENAI_KEY_LINE + "\n")

        result = runner.invoke(cli, ["scan"])

        assert result.exit_code == 2
        assert "API_KEY_OPENAI" in result.output


class TestExitCodes:

    @pytest.mark.parametrize("severities,fail_on,expected", [
        ([], "error", 0),
        (["error"], "never", 0),
        (["error"], "error", 2),
        (["warning"], "error", 0),
        (["warning"], "warning", 1),
        (["info"], "warning", 0),
        (["info"], "info", 1),
        (["info", "error"], "info", 2),
    ])
    def test_exit_code_for(self, engine, severities, fail_on, expected):
        template = engine.execute(OPENAI_KEY_LINE, "javascript")[0]
        findings = [
            replace(template, severity=Severity(severity)) for severity in severities
        ]

        assert exit_code_for(findings, fail_on) == expected


class TestRules:

    def test_lists_catalog_with_summary(self, runner, project):
        result = runner.invoke(cli, ["rules"])

        total = len(default_rules())
        assert result.exit_code == 0
        assert f"{total} shown, {total} registered" in result.output

    def test_json_filters(self, runner, project):
        result = runner.invoke(cli, ["rules", "--json", "--category", "destructive-sql"])

        data = json.loads(result.stdout)
        assert data["rules"]
        assert {r["category"] for r in data["rules"]} == {"destructive-sql"}
        assert data["statistics"]["total"] == len(default_rules())

    def test_language_filter(self, runner, project):
        """Rules scoped to other languages are left out; wildcard rules stay."""
        result = runner.invoke(cli, ["rules", "--json", "--language", "dockerfile"])

        ids = [r["id"] for r in json.loads(result.stdout)["rules"]]
        assert "CONFIG_DOCKER_ROOT_USER" in ids
        assert "SQL_DELETE_NO_WHERE" in ids
        assert "CODE_INJECTION_EVAL" not in ids
        assert "FRAMEWORK_VUE_V_HTML" not in ids


class TestFix:

    def test_dry_run_shows_diff(self, runner, project):
        target = project / "app.js"
        target.write_text(OPENAI_KEY_LINE + "\n")

        result = runner.invoke(cli, ["fix", "app.js", "--dry-run"])

        assert result.exit_code == 0
        assert "+const apiKey = process.env.OPENAI_API_KEY;" in result.output
        assert target.read_text() == OPENAI_KEY_LINE + "\n"

    def test_fix_rewrites_file(self, runner, project):
        target = project / "app.js"
        target.write_text(OPENAI_KEY_LINE + "\nel.innerHTML = html;\n")

        result = runner.invoke(cli, ["fix", "app.js"])

        assert result.exit_code == 0
        assert target.read_text() == (
            "const apiKey = process.env.OPENAI_API_KEY;\nel.textContent = html;\n"
        )

    def test_rule_filter(self, runner, project):
        target = project / "app.js"
        target.write_text(OPENAI_KEY_LINE + "\nel.innerHTML = html;\n")

        runner.invoke(cli, ["fix", "app.js", "--rule", "CODE_INJECTION_INNERHTML"])

        assert target.read_text() == OPENAI_KEY_LINE + "\nel.textContent = html;\n"

    def test_nothing_to_fix(self, runner, project):
        (project / "data.py").write_text("data = pickle.loads(blob)\n")

        result = runner.invoke(cli, ["fix", "data.py"])

        assert result.exit_code == 0
        assert "No applicable quick fixes found" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_log_dir_receives_debug_log(runner, project):
    result = runner.invoke(cli, ["--log-dir", "logs", "rules", "--json"])

    log_file = project / "logs" / "vibeguard.log"
    assert result.exit_code == 0
    assert log_file.exists()
    assert "Registered rule API_KEY_OPENAI" in log_file.read_text()


def test_invalid_config_is_reported(runner, project):
    (project / ".vibeguard").mkdir()
    (project / ".vibeguard" / "config.json").write_text('{"cache": {"capacity": 0}}')

    result = runner.invoke(cli, ["scan", "--json"])

    assert result.exit_code == 1
    assert "cache.capacity must be at least 1" in result.output
    assert (project / ".vibeguard" / "error.log").exists()
