"""Parse-options command - Preview how an options string is tokenized"""

import click
from rich.markup import escape

from deploykit.base import BaseCommand
from deploykit.services.argument_parser import parse_options as tokenize


class ParseOptionsCommand(BaseCommand):
    """Show the argv tokens Deployer would receive."""

    def execute(self, options: str) -> None:
        tokens = tokenize(options)
        if self.json_output:
            self.output_json({"tokens": tokens})
            return
        for token in tokens:
            self.console.print(f"  [cyan]{escape(repr(token))}[/cyan]", highlight=False)


@click.command(name="parse-options")
@click.argument("options")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def parse_options(options, json_output):
    """
    Show how OPTIONS is split into Deployer arguments

    Examples:
        deploykit parse-options '--tag="v1.0" --flag'
    """
    ParseOptionsCommand(json_output=json_output).run(options=options)
