"""Apply quick fixes to files."""

import asyncio
import difflib
from pathlib import Path

import click

from vibeguard import build_engine
from vibeguard.pipeline import AnalysisPipeline
from vibeguard.presentation import apply_fixes
from vibeguard.ui import console, print_header, print_success, print_warning
from vibeguard.utils.error_handler import handle_exceptions

from ._common import iter_source_files, load_settings, read_source


async def _fix_files(pipeline: AnalysisPipeline, files, rule_id: str | None) -> list[dict]:
    results = []
    for path, language_id in files:
        text = read_source(path)
        outcome = await pipeline.analyze(str(path), text, language_id)
        findings = [
            f for f in outcome.findings if rule_id is None or f.rule_id == rule_id
        ]
        fixed, applied = apply_fixes(text, findings)
        results.append({"path": path, "original": text, "fixed": fixed, "applied": applied})
    return results


@click.command("fix")
@handle_exceptions
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--rule", "rule_id", help="Only apply fixes for this rule id")
@click.option("--dry-run", is_flag=True, help="Show a diff instead of writing files")
@click.option("--language", help="Analyze every file as this language id")
def fix(path, rule_id, dry_run, language):
    """Apply each finding's own quick fix in place.

    Fixes are applied from the end of each file backwards so earlier
    positions stay valid; overlapping fixes are skipped. Findings without a
    quick fix are left alone and still reported by 'vibeguard scan'.

    EXAMPLES:
      vibeguard fix src/config.js --dry-run
      vibeguard fix db/ --rule SQL_DELETE_NO_WHERE
    """
    settings = load_settings()
    files = list(
        iter_source_files(
            [path],
            settings.excluded_folders,
            settings.analysis.supported_languages,
            language=language,
        )
    )

    pipeline = build_engine(settings)
    try:
        results = asyncio.run(_fix_files(pipeline, files, rule_id))
    finally:
        pipeline.dispose()

    print_header("VIBEGUARD FIX")
    total = 0
    for result in results:
        applied = result["applied"]
        if not applied:
            continue
        total += len(applied)

        if dry_run:
            diff = difflib.unified_diff(
                result["original"].splitlines(keepends=True),
                result["fixed"].splitlines(keepends=True),
                fromfile=str(result["path"]),
                tofile=str(result["path"]),
            )
            console.print("".join(diff), markup=False, highlight=False)
        else:
            with open(result["path"], "w", encoding="utf-8", newline="") as f:
                f.write(result["fixed"])

        rules = ", ".join(sorted({f.rule_id for f in applied}))
        console.print(f"[path]{result['path']}[/path]: {len(applied)} fixes ({rules})", highlight=False)

    if total == 0:
        print_warning("No applicable quick fixes found")
    elif dry_run:
        print_success(f"{total} fixes available (dry run, no files written)")
    else:
        print_success(f"Applied {total} fixes")
