"""Deployment runner: executes the deployer with live, captured output."""

import asyncio
import codecs
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union

from deploykit.constants import (
    EXIT_POLL_SECONDS,
    READ_CHUNK_SIZE,
    STREAM_DRAIN_SECONDS,
    TERMINATE_GRACE_SECONDS,
)
from deploykit.exceptions import DeploymentFailedError, DeploymentTimeoutError
from deploykit.logger import DeployLogger
from deploykit.models.deployment import DeployCommand
from deploykit.models.results import RunResult, RunStatus
from deploykit.models.ssh import SessionContext
from deploykit.services.argument_parser import parse_options


class DeploymentRunner:
    """
    Runs ``<deployer> deploy <env> --revision=<rev> [flags...]``.

    stdout and stderr are read by two independent listeners. Each chunk is
    appended to a shared buffer in arrival order and forwarded immediately
    to this process's matching stream.

    The run ends when the deployer exits. Listeners then get a bounded
    drain period, so a background child that keeps the pipes open cannot
    hold the run.
    """

    def __init__(
        self,
        logger: DeployLogger,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        terminate_grace: float = TERMINATE_GRACE_SECONDS,
        drain_timeout: float = STREAM_DRAIN_SECONDS,
    ):
        self.logger = logger
        self.stdout = stdout
        self.stderr = stderr
        self.terminate_grace = terminate_grace
        self.drain_timeout = drain_timeout

    async def run(
        self,
        binary: Union[str, Path],
        environment: str,
        revision: str,
        working_dir: Union[str, Path],
        verbosity: Optional[str] = None,
        options: str = "",
        timeout_ms: Optional[int] = None,
        context: Optional[SessionContext] = None,
    ) -> RunResult:
        """
        Execute the deployment.

        Args:
            binary: Deployer executable
            environment: Target environment (e.g. production)
            revision: Revision to deploy
            working_dir: Directory to run the deployer in
            verbosity: One of v, vv, vvv
            options: Free-form extra options string
            timeout_ms: Optional bound on the deployer's runtime
            context: SSH session whose environment the deployer inherits

        Returns:
            Successful RunResult with the combined output

        Raises:
            DeploymentFailedError: If the deployer exits non-zero
            DeploymentTimeoutError: If the deployer outlives timeout_ms
        """
        command = DeployCommand.build(
            environment, revision, verbosity, parse_options(options or "")
        )

        with self.logger.group(f"Deploying to {environment}"):
            self.logger.info(f"Executing: {command.display(str(binary))}")
            self.logger.info(f"Environment: {environment}")
            self.logger.info(f"Revision: {revision}")
            self.logger.info(f"Working directory: {working_dir}")

            process = await asyncio.create_subprocess_exec(
                str(binary),
                *command.args,
                cwd=str(working_dir),
                env=context.subprocess_env() if context else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )

            buffer: List[str] = []
            listeners = [
                asyncio.ensure_future(
                    self._pump(process.stdout, self.stdout or sys.stdout, "stdout", buffer)
                ),
                asyncio.ensure_future(
                    self._pump(process.stderr, self.stderr or sys.stderr, "stderr", buffer)
                ),
            ]

            try:
                if timeout_ms is None:
                    exit_code = await self._wait_for_exit(process)
                else:
                    exit_code = await asyncio.wait_for(
                        self._wait_for_exit(process), timeout_ms / 1000
                    )
                await self._drain(listeners)
            except asyncio.TimeoutError:
                await self._terminate(process)
                await self._drain(listeners)
                raise DeploymentTimeoutError(timeout_ms, "".join(buffer)) from None
            finally:
                for listener in listeners:
                    listener.cancel()

            output = "".join(buffer)
            if exit_code != 0:
                raise DeploymentFailedError(exit_code, output)

            self.logger.success(f"Successfully deployed to {environment}")

        return RunResult(status=RunStatus.SUCCESS, exit_code=exit_code, output=output)

    async def _wait_for_exit(self, process) -> int:
        # process.wait() also waits for the pipes to close, which a
        # background child of the deployer may hold open
        while process.returncode is None:
            await asyncio.sleep(EXIT_POLL_SECONDS)
        return process.returncode

    async def _drain(self, listeners) -> None:
        pending = [listener for listener in listeners if not listener.done()]
        if not pending:
            return
        done, _ = await asyncio.wait(pending, timeout=self.drain_timeout)
        for listener in done:
            listener.result()

    async def _pump(
        self,
        reader: asyncio.StreamReader,
        stream: TextIO,
        name: str,
        buffer: List[str],
    ) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await reader.read(READ_CHUNK_SIZE)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                buffer.append(text)
                stream.write(text)
                stream.flush()
                self.logger.log_output(text, name)
            if not chunk:
                break

    async def _terminate(self, process) -> None:
        """Stop a deployer that outlived its timeout: SIGTERM, then SIGKILL."""
        if process.returncode is not None:
            return
        self.logger.warning(f"Terminating deployer process {process.pid}")
        try:
            process.terminate()
            try:
                await asyncio.wait_for(self._wait_for_exit(process), self.terminate_grace)
            except asyncio.TimeoutError:
                process.kill()
                await self._wait_for_exit(process)
        except ProcessLookupError:
            pass
