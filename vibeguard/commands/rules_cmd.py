"""List the detection rule catalog."""

import json

import click
from rich.table import Table

from vibeguard.rules import build_default_registry
from vibeguard.rules.base import Category
from vibeguard.ui import console, print_header, severity_markup
from vibeguard.utils.error_handler import handle_exceptions

from ._common import load_settings


@click.command("rules")
@handle_exceptions
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    help="Only list rules of this category",
)
@click.option("--language", help="Only list rules that apply to this language id")
@click.option("--json", "as_json", is_flag=True, help="Print the catalog as JSON")
def rules_command(category, language, as_json):
    """List built-in and custom detection rules with registry statistics.

    Custom rules are read from .vibeguard/rules.yml (or scan.rules_file in
    .vibeguard/config.json) and listed after the built-in catalog.

    EXAMPLES:
      vibeguard rules
      vibeguard rules --category destructive-sql
      vibeguard rules --language python --json
    """
    settings = load_settings()
    registry = build_default_registry(settings.rules_file)

    selected = [
        rule
        for rule in registry.all()
        if (category is None or rule.category.value == category)
        and (language is None or rule.applies_to(language))
    ]
    stats = registry.statistics()

    if as_json:
        click.echo(json.dumps({
            "rules": [
                {
                    "id": rule.id,
                    "category": rule.category.value,
                    "severity": rule.severity.value,
                    "languages": sorted(rule.languages),
                    "enabled": registry.is_enabled(rule.id),
                    "quick_fix": rule.quick_fix.title if rule.quick_fix else None,
                }
                for rule in selected
            ],
            "statistics": stats.to_dict(),
        }, indent=2))
        return

    print_header("VIBEGUARD RULES")
    table = Table()
    table.add_column("Rule", style="rule", no_wrap=True)
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Languages", style="dim")
    table.add_column("Quick fix")

    for rule in selected:
        table.add_row(
            rule.id,
            rule.category.value,
            severity_markup(rule.severity),
            ", ".join(sorted(rule.languages)),
            rule.quick_fix.title if rule.quick_fix else "-",
        )
    console.print(table)
    console.print(
        f"{len(selected)} shown, {stats.total} registered, {stats.enabled} enabled",
        highlight=False,
    )
