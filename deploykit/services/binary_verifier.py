"""Deployer binary verification service."""

import os
from pathlib import Path
from typing import Optional, Union

from deploykit.constants import EXECUTABLE_PERMISSIONS, VERSION_PROBE_ARG
from deploykit.exceptions import (
    BinaryNotFoundError,
    BinaryPermissionError,
    VerificationFailedError,
)
from deploykit.logger import DeployLogger
from deploykit.models.deployment import VerifiedBinary
from deploykit.models.ssh import SessionContext
from deploykit.services.path_guard import resolve_within
from deploykit.services.process import run_process


class BinaryVerifier:
    """Confirms the deployer binary exists, is executable and answers --version."""

    def __init__(self, logger: DeployLogger):
        self.logger = logger

    async def verify(
        self,
        binary_path: str,
        working_dir: Union[str, Path],
        context: Optional[SessionContext] = None,
    ) -> VerifiedBinary:
        """
        Verify the deployer binary.

        Args:
            binary_path: Binary path, relative to working_dir or absolute inside it
            working_dir: Directory the deployer runs in
            context: SSH session whose environment the version check inherits

        Returns:
            VerifiedBinary with the resolved path and trimmed version string

        Raises:
            PathEscapeError: If the binary lies outside working_dir
            BinaryNotFoundError: If the binary does not exist
            BinaryPermissionError: If it cannot be made executable
            VerificationFailedError: If the version check fails
        """
        with self.logger.group("Verifying Deployer"):
            resolved = resolve_within(working_dir, binary_path)

            if not resolved.exists():
                raise BinaryNotFoundError(binary_path)

            if not os.access(resolved, os.X_OK):
                self.logger.info(f"Making {binary_path} executable...")
                try:
                    os.chmod(resolved, EXECUTABLE_PERMISSIONS)
                except OSError as e:
                    raise BinaryPermissionError(binary_path, str(e)) from e

            env = context.subprocess_env() if context else None
            try:
                result = await run_process(
                    str(resolved), VERSION_PROBE_ARG, cwd=working_dir, env=env
                )
            except OSError as e:
                raise VerificationFailedError(binary_path, str(e)) from e

            if result.is_failure:
                raise VerificationFailedError(
                    binary_path,
                    f"'{binary_path} {VERSION_PROBE_ARG}' exited with code {result.returncode}",
                )
            version = result.stdout.strip()
            if not version:
                raise VerificationFailedError(
                    binary_path, f"'{binary_path} {VERSION_PROBE_ARG}' printed nothing"
                )

            self.logger.success(version)

        return VerifiedBinary(path=resolved, version=version)
