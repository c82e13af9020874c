"""Deploy command - Run Deployer against an environment over an ephemeral SSH session"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from deploykit.base import BaseCommand
from deploykit.config import DeploymentInputs, resolve_inputs
from deploykit.constants import CONFIG_FILENAME, ENV_PREFIX
from deploykit.exceptions import ConfigurationError
from deploykit.logger import DeployLogger
from deploykit.models.results import RunResult, RunStatus
from deploykit.orchestrator import Orchestrator
from deploykit.outputs import OutputWriter
from deploykit.services.deployment_runner import DeploymentRunner


class RunDeploymentCommand(BaseCommand):
    """Collect inputs, run the orchestrator and report its outcome."""

    def __init__(
        self,
        cli_values: dict,
        config_path: Optional[Path] = None,
        private_key_file: Optional[Path] = None,
        verbose: bool = False,
        json_output: bool = False,
        log_file: Optional[Path] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output, log_file=log_file)
        self.cli_values = dict(cli_values)
        self.config_path = config_path
        self.private_key_file = private_key_file

    def load_inputs(self) -> DeploymentInputs:
        values = dict(self.cli_values)
        if self.private_key_file is not None:
            if values.get("ssh_private_key"):
                raise ConfigurationError(
                    "Pass either --ssh-private-key or --private-key-file, not both"
                )
            values["ssh_private_key"] = self.private_key_file.read_text().rstrip("\n")

        config_path = self.config_path
        if config_path is None and Path(CONFIG_FILENAME).exists():
            config_path = Path(CONFIG_FILENAME)

        return resolve_inputs(values, config_path=config_path)

    def build_orchestrator(self, logger: DeployLogger, outputs: OutputWriter) -> Orchestrator:
        # In JSON mode stdout holds only the result document
        stdout = sys.stderr if self.json_output else None
        runner = DeploymentRunner(logger, stdout=stdout)
        return Orchestrator(logger, runner=runner, outputs=outputs)

    def execute(self) -> None:
        outputs = OutputWriter()
        try:
            inputs = self.load_inputs()
        except (ConfigurationError, OSError) as e:
            # Outputs are always set, even when inputs never resolved
            outputs.write(RunResult(status=RunStatus.FAILED, error=str(e)))
            raise

        logger = self.init_logger("deploy")

        self.show_header(
            "Deploy",
            details={"Environment": inputs.environment, "Revision": inputs.revision},
        )

        orchestrator = self.build_orchestrator(logger, outputs)
        result = asyncio.run(orchestrator.run(inputs))

        if self.json_output:
            self.output_json(result.to_dict(), exit_code=0 if result.is_success else 1)
            return

        if not result.is_success:
            raise SystemExit(1)


def _input_option(name: str, help_text: str, **kwargs):
    """Option whose value may also come from DEPLOYKIT_<NAME>."""
    envvar = f"{ENV_PREFIX}_{name.upper().replace('-', '_')}"
    return click.option(f"--{name}", envvar=envvar, default=None, help=help_text, **kwargs)


@click.command(name="deploy")
@_input_option("ssh-private-key", "SSH private key content", show_envvar=False)
@click.option(
    "--private-key-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the SSH private key from a file",
)
@_input_option("environment", "Deployer environment/stage (e.g. production)")
@_input_option("revision", "Revision to deploy (commit SHA, tag, branch)")
@_input_option("deployer-binary", "Deployer binary relative to the working directory [default: vendor/bin/dep]")
@_input_option("ssh-known-hosts", "known_hosts content for git over the session config; omit to disable host key checking there")
@_input_option("ssh-port", "SSH port [default: 22]")
@_input_option("working-directory", "Directory Deployer runs in [default: .]")
@_input_option("verbosity", "Deployer verbosity", type=click.Choice(["v", "vv", "vvv"]))
@_input_option("options", "Extra Deployer options, e.g. '--parallel --limit=5'")
@_input_option("timeout", "Deployment timeout in milliseconds")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=f"YAML file with inputs [default: ./{CONFIG_FILENAME} if present]",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the run log to this file",
)
@click.option("--verbose", is_flag=True, help="Verbose output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def deploy(
    ssh_private_key,
    private_key_file,
    environment,
    revision,
    deployer_binary,
    ssh_known_hosts,
    ssh_port,
    working_directory,
    verbosity,
    options,
    timeout,
    config_path,
    log_file,
    verbose,
    json_output,
):
    """
    Deploy a revision with Deployer over an ephemeral SSH session

    This command will:
    1. Write the SSH key, known hosts and a per-run SSH config
    2. Start ssh-agent and add the key
    3. Verify the Deployer binary (--version)
    4. Run: dep deploy <environment> --revision=<revision> [options]
    5. Remove every SSH artifact, whatever the outcome

    The session config (known hosts, port, host key checking) applies to git
    through GIT_SSH_COMMAND. Deployer's own host connections use plain ssh:
    they get the key from the agent but check hosts against ~/.ssh/known_hosts.

    Examples:
        deploykit deploy --environment production --revision abc123 --private-key-file key
        deploykit deploy -c deploykit.yml --timeout 600000
        deploykit deploy --environment staging --revision main --verbosity vv --options "--parallel"
    """
    cli_values = {
        "ssh_private_key": ssh_private_key,
        "environment": environment,
        "revision": revision,
        "deployer_binary": deployer_binary,
        "ssh_known_hosts": ssh_known_hosts,
        "ssh_port": ssh_port,
        "working_directory": working_directory,
        "verbosity": verbosity,
        "options": options,
        "timeout": timeout,
    }
    cmd = RunDeploymentCommand(
        cli_values,
        config_path=config_path,
        private_key_file=private_key_file,
        verbose=verbose,
        json_output=json_output,
        log_file=log_file,
    )
    cmd.run()
