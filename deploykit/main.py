#!/usr/bin/env python3
"""DeployKit CLI - Main entry point"""

from rich.console import Console

# Rich-Click: CLI help with colors
import rich_click as click

from deploykit import __version__
from deploykit.commands.cleanup import cleanup
from deploykit.commands.deploy import deploy
from deploykit.commands.parse_options import parse_options

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS / OPTIONS
click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

# HEADERS / USAGE
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

# PANEL BORDERS
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    DeployKit - Run Deployer with an ephemeral SSH identity.

    \b
    Quick Start:
      deploykit deploy --environment production --revision $SHA \\
        --private-key-file deploy_key --ssh-known-hosts "$(cat known_hosts)"
      deploykit cleanup             # Remove leftover SSH artifacts
      deploykit parse-options "..."  # Preview option tokenization

    \b
    Inputs can also come from deploykit.yml, DEPLOYKIT_* variables
    or GitHub Actions INPUT_* variables.
    """
    if ctx.invoked_subcommand is None:
        console.print("[yellow]Run 'deploykit --help' for usage[/yellow]\n")


# Register commands
cli.add_command(deploy)
cli.add_command(cleanup)
cli.add_command(parse_options)


def main():
    cli()


if __name__ == "__main__":
    main()
