"""Cleanup command - Remove SSH artifacts left by a deployment run"""

import asyncio
from dataclasses import asdict

import click

from deploykit.base import BaseCommand
from deploykit.services.session_cleaner import SessionCleaner
from deploykit.services.ssh_session import context_from_environment


class CleanupCommand(BaseCommand):
    """Run the session cleaner outside of a deployment."""

    def execute(self) -> None:
        logger = self.init_logger("cleanup")
        self.show_header("Cleanup", subtitle="Removing SSH session artifacts")

        context = context_from_environment()
        report = asyncio.run(SessionCleaner(logger).cleanup(context))

        if self.json_output:
            self.output_json(asdict(report))


@click.command(name="cleanup")
@click.option("--verbose", is_flag=True, help="Verbose output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def cleanup(verbose, json_output):
    """
    Remove the SSH key, known hosts, control sockets and ssh-agent

    Safe to run any number of times, e.g. from a post-job hook.
    The agent is found through SSH_AGENT_PID.
    """
    CleanupCommand(verbose=verbose, json_output=json_output).run()
