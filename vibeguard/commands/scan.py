"""Scan files for dangerous patterns."""

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.table import Table

from vibeguard import build_engine
from vibeguard.config_runtime import VibeGuardSettings
from vibeguard.pipeline import AnalysisPipeline, AnalysisStatus
from vibeguard.presentation import FindingPresenter
from vibeguard.rules.base import Finding, Severity
from vibeguard.ui import (
    console,
    print_error,
    print_header,
    print_summary_panel,
    print_warning,
    severity_markup,
)
from vibeguard.utils.error_handler import handle_exceptions
from vibeguard.utils.exit_codes import ExitCodes

from ._common import iter_source_files, load_settings, read_source

FAIL_ON_CHOICES = ["error", "warning", "info", "never"]


def exit_code_for(findings: list[Finding], fail_on: str) -> int:
    """Map findings to an exit code given the failure threshold."""
    if fail_on == "never" or not findings:
        return ExitCodes.SUCCESS

    threshold = Severity(fail_on).rank
    if any(f.severity is Severity.ERROR for f in findings):
        return ExitCodes.ERROR_FINDINGS
    if any(f.severity.rank <= threshold for f in findings):
        return ExitCodes.WARNING_FINDINGS
    return ExitCodes.SUCCESS


async def scan_files(
    pipeline: AnalysisPipeline,
    presenter: FindingPresenter,
    settings: VibeGuardSettings,
    files: list[tuple[Path, str]],
) -> list[dict]:
    """Analyze each file in turn and present its findings."""
    reports = []
    for path, language_id in files:
        text = read_source(path)
        outcome = await pipeline.analyze(str(path), text, language_id)
        diagnostics = presenter.present(outcome.findings, settings.presentation)
        reports.append({
            "path": path,
            "language": language_id,
            "outcome": outcome,
            "diagnostics": diagnostics,
        })
    return reports


def _render_table(reports: list[dict]) -> None:
    table = Table(show_lines=False)
    table.add_column("Location", style="path", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Rule", style="rule", no_wrap=True)
    table.add_column("Message")

    for report in reports:
        for diagnostic in report["diagnostics"]:
            loc = diagnostic.location
            table.add_row(
                f"{report['path']}:{loc.line + 1}:{loc.column + 1}",
                severity_markup(diagnostic.severity),
                diagnostic.code,
                diagnostic.message.split("\n")[0]
                + (f" (x{diagnostic.occurrences})" if diagnostic.occurrences > 1 else ""),
            )
    console.print(table)


@click.command("scan")
@handle_exceptions
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--language", help="Analyze every file as this language id")
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON")
@click.option("--no-group", is_flag=True, help="Show every finding instead of grouping by rule")
@click.option("--max-diagnostics", type=int, help="Maximum findings shown per file")
@click.option(
    "--rules-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML file with custom rules (default: .vibeguard/rules.yml)",
)
@click.option(
    "--fail-on",
    type=click.Choice(FAIL_ON_CHOICES),
    default="error",
    show_default=True,
    help="Lowest severity that produces a failing exit code",
)
def scan(paths, language, as_json, no_group, max_diagnostics, rules_file, fail_on):
    """Scan source files for hardcoded secrets, destructive SQL and injection sinks.

    Every file is run through the same pipeline the editor integration uses:
    content-keyed cache, size ceiling, per-analysis time budget, then the
    finding presenter (per-file cap and grouping of identical findings).

    Files are selected by extension or well-known name (Dockerfile, .env,
    .npmrc). Folders listed in scan.excluded_folders are skipped.

    EXAMPLES:
      vibeguard scan src/
      vibeguard scan app.js --json
      vibeguard scan . --fail-on warning --no-group
      vibeguard scan queries.txt --language sql

    INLINE SUPPRESSION:
      // vibeguard-ignore-next-line      Skip findings on the next line
      # vibeguard-disable RULE_ID        Disable a rule for the whole file

    EXIT CODES:
      0 = No findings at or above --fail-on
      1 = Warning (or info) findings at or above --fail-on
      2 = Error severity findings
      3 = No failing findings, but a file timed out or failed to analyze
    """
    settings = load_settings(
        rules_file=rules_file,
        max_diagnostics=max_diagnostics,
        group=False if no_group else None,
    )
    targets = list(paths) or [Path(".")]
    files = list(
        iter_source_files(
            targets,
            settings.excluded_folders,
            settings.analysis.supported_languages,
            language=language,
        )
    )

    pipeline = build_engine(settings)
    try:
        reports = asyncio.run(scan_files(pipeline, FindingPresenter(), settings, files))
    finally:
        pipeline.dispose()

    findings = [f for report in reports for f in report["outcome"].findings]
    exit_code = exit_code_for(findings, fail_on)
    incomplete = [
        report for report in reports
        if report["outcome"].status in (AnalysisStatus.FAILED, AnalysisStatus.TIMEOUT)
    ]
    if incomplete and exit_code == ExitCodes.SUCCESS:
        exit_code = ExitCodes.TASK_INCOMPLETE

    if as_json:
        payload = {
            "files": [
                {
                    "path": str(report["path"]),
                    "language": report["language"],
                    "status": report["outcome"].status.value,
                    "diagnostics": [d.to_dict() for d in report["diagnostics"]],
                }
                for report in reports
            ],
            "summary": {
                "files": len(reports),
                "findings": len(findings),
                "by_severity": {
                    severity.value: sum(1 for f in findings if f.severity is severity)
                    for severity in Severity
                },
            },
            "exit_code": exit_code,
        }
        click.echo(json.dumps(payload, indent=2))
        sys.exit(exit_code)

    print_header("VIBEGUARD SCAN")
    for report in reports:
        status = report["outcome"].status
        if status is AnalysisStatus.FILE_TOO_LARGE:
            print_warning(f"{report['path']}: skipped, file exceeds the size limit")
        elif status is AnalysisStatus.TIMEOUT:
            print_warning(f"{report['path']}: analysis timed out, results are partial")
        elif status is AnalysisStatus.FAILED:
            print_error(f"{report['path']}: analysis failed, see the log for details")

    if findings:
        _render_table(reports)
        errors = sum(1 for f in findings if f.severity is Severity.ERROR)
        print_summary_panel(
            "FINDINGS",
            [
                f"{len(findings)} findings in {len(files)} files ({errors} errors)",
                ExitCodes.get_description(exit_code),
            ],
            level="error" if errors else "warning",
        )
    else:
        print_summary_panel("CLEAN", [f"No findings in {len(files)} files"], level="success")

    sys.exit(exit_code)
