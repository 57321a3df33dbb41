"""Shared Rich console for VibeGuard commands.

Commands print through ``console`` and the helpers below so that severity
colours and message prefixes stay the same everywhere:

    from vibeguard.ui import console, severity_markup

    console.print(f"{severity_markup(finding.severity)} {finding.rule_id}")
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from vibeguard.rules.base import Severity

VIBEGUARD_THEME = Theme({
    "severity.error": "bold red",
    "severity.warning": "bold yellow",
    "severity.info": "bold cyan",
    "success": "bold green",
    "rule": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# Panel border per outcome level
_PANEL_STYLES = {
    "error": "red",
    "warning": "yellow",
    "success": "green",
    "info": "cyan",
}

console = Console(
    theme=VIBEGUARD_THEME,
    force_terminal=sys.stdout.isatty()
)


def severity_markup(severity: Severity | str) -> str:
    """Upper-case severity label wrapped in its theme style."""
    value = severity.value if isinstance(severity, Severity) else severity
    return f"[severity.{value}]{value.upper()}[/severity.{value}]"


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"{severity_markup(Severity.ERROR)}: {msg}", highlight=False)


def print_warning(msg: str) -> None:
    console.print(f"{severity_markup(Severity.WARNING)}: {msg}", highlight=False)


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}", highlight=False)


def print_summary_panel(title: str, lines: list[str], level: str = "info") -> None:
    """Print a bordered summary box after a command finishes.

    Args:
        title: Panel title (e.g., "FINDINGS", "CLEAN")
        lines: Body lines, printed in order
        level: One of "error", "warning", "success", "info"
    """
    border = _PANEL_STYLES.get(level, "white")
    console.print(
        Panel(
            Text("\n".join(lines), style=border),
            title=f"[bold]{title}[/bold]",
            title_align="left",
            border_style=border,
            expand=False,
        )
    )
