"""VibeGuard CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

from pathlib import Path

import click

from vibeguard import __version__
from vibeguard.utils.logging import configure_file_logging, logger


@click.group()
@click.version_option(version=__version__, prog_name="vibeguard")
@click.help_option("-h", "--help")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Also write a rotating debug log (vibeguard.log) to this directory",
)
@click.pass_context
def cli(ctx, log_dir):
    """VibeGuard - catch leaked keys, destructive SQL and injection sinks before they ship.

    \b
    QUICK START:
      vibeguard scan .            # Scan the current project
      vibeguard rules             # List the rule catalog
      vibeguard fix app.js        # Apply quick fixes

    \b
    Configuration: .vibeguard/config.json, overridden by VIBEGUARD_<SECTION>_<KEY>
    Custom rules:  .vibeguard/rules.yml"""
    if log_dir is not None:
        handler_id = configure_file_logging(log_dir)
        ctx.call_on_close(lambda: logger.remove(handler_id))


from vibeguard.commands.fix import fix
from vibeguard.commands.rules_cmd import rules_command
from vibeguard.commands.scan import scan

cli.add_command(scan)
cli.add_command(rules_command)
cli.add_command(fix)


def main():
    cli()


if __name__ == "__main__":
    main()
