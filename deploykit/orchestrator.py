"""
Deployment orchestrator

Sequences SSH setup, binary verification and the deployer run, and always
cleans the SSH session up before reporting the outcome.
"""

from typing import Optional

from deploykit.config import DeploymentInputs, parse_timeout
from deploykit.exceptions import DeployerRunError
from deploykit.logger import DeployLogger
from deploykit.models.results import RunResult, RunStatus
from deploykit.models.ssh import SessionContext
from deploykit.outputs import OutputWriter
from deploykit.services.binary_verifier import BinaryVerifier
from deploykit.services.deployment_runner import DeploymentRunner
from deploykit.services.session_cleaner import SessionCleaner
from deploykit.services.ssh_session import SessionCredentialManager


class Orchestrator:
    """Runs one deployment end to end."""

    def __init__(
        self,
        logger: DeployLogger,
        credentials: Optional[SessionCredentialManager] = None,
        verifier: Optional[BinaryVerifier] = None,
        runner: Optional[DeploymentRunner] = None,
        cleaner: Optional[SessionCleaner] = None,
        outputs: Optional[OutputWriter] = None,
    ):
        self.logger = logger
        self.credentials = credentials or SessionCredentialManager(logger)
        self.verifier = verifier or BinaryVerifier(logger)
        self.runner = runner or DeploymentRunner(logger)
        self.cleaner = cleaner or SessionCleaner(logger)
        self.outputs = outputs or OutputWriter()

    async def run(self, inputs: DeploymentInputs) -> RunResult:
        """
        Run the deployment.

        Never raises for failures of the run itself: they are reported as a
        failed RunResult whose ``error`` carries the primary failure message.

        Args:
            inputs: Run inputs

        Returns:
            RunResult with status, exit code and combined deployer output
        """
        context = self.credentials.new_context()
        try:
            try:
                result = await self._deploy(inputs, context)
                self.logger.success("Deployment completed successfully!")
            except Exception as e:
                # Only a deployer that actually ran has output to report
                ran = isinstance(e, DeployerRunError)
                result = RunResult(
                    status=RunStatus.FAILED,
                    exit_code=getattr(e, "exit_code", None),
                    output=e.output if ran else "",
                    error=str(e),
                )
                self.logger.log_error(f"Deployment failed: {e}")
            self.outputs.write(result)
        finally:
            await self._cleanup(context)

        return result

    async def _deploy(self, inputs: DeploymentInputs, context: SessionContext) -> RunResult:
        self.logger.add_mask(inputs.ssh_private_key)
        self.logger.title(f"Deploying to environment: {inputs.environment}")
        self.logger.info(f"Revision: {inputs.revision}")

        inputs.validate()

        await self.credentials.begin(
            context, inputs.ssh_private_key, inputs.ssh_known_hosts, inputs.port
        )

        binary = await self.verifier.verify(
            inputs.deployer_binary, inputs.working_directory, context
        )

        timeout_ms = parse_timeout(inputs.timeout)

        return await self.runner.run(
            binary.path,
            inputs.environment,
            inputs.revision,
            inputs.working_directory,
            verbosity=inputs.verbosity or None,
            options=inputs.options,
            timeout_ms=timeout_ms,
            context=context,
        )

    async def _cleanup(self, context: SessionContext) -> None:
        try:
            await self.cleaner.cleanup(context)
        except Exception as e:
            self.logger.debug(f"Cleanup error: {e}")
