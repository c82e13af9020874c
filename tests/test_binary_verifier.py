"""Tests for deployer binary verification."""

import os

import pytest

from deploykit.exceptions import (
    BinaryNotFoundError,
    BinaryPermissionError,
    PathEscapeError,
    VerificationFailedError,
)
from deploykit.services.binary_verifier import BinaryVerifier


class TestBinaryVerifier:
    """Test the deployer binary checks and version check."""

    @pytest.mark.asyncio
    async def test_verified_binary(self, logger, make_deployer, workdir, console_output):
        dep = make_deployer()

        verified = await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

        assert verified.path == dep.resolve()
        assert verified.version == "Deployer 7.3.1"
        assert "Deployer 7.3.1" in console_output.getvalue()

    @pytest.mark.asyncio
    async def test_missing_binary(self, logger, workdir):
        with pytest.raises(BinaryNotFoundError):
            await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

    @pytest.mark.asyncio
    async def test_escaping_path(self, logger, workdir):
        with pytest.raises(PathEscapeError):
            await BinaryVerifier(logger).verify("../dep", workdir)

    @pytest.mark.asyncio
    async def test_non_executable_binary_is_fixed(self, logger, make_script, workdir):
        dep = make_script(
            "app/vendor/bin/dep", 'echo "Deployer 7.3.1"', executable=False
        )

        await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

        assert os.access(dep, os.X_OK)

    @pytest.mark.asyncio
    async def test_chmod_failure(self, logger, make_script, workdir, monkeypatch):
        make_script("app/vendor/bin/dep", 'echo "Deployer"', executable=False)

        def deny(*args, **kwargs):
            raise PermissionError("Operation not permitted")

        monkeypatch.setattr(os, "access", lambda *args: False)
        monkeypatch.setattr(os, "chmod", deny)

        with pytest.raises(BinaryPermissionError, match="Operation not permitted"):
            await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

    @pytest.mark.asyncio
    async def test_non_zero_version_exit(self, logger, make_deployer, workdir):
        make_deployer(version="exit 3")

        with pytest.raises(VerificationFailedError, match="code 3"):
            await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

    @pytest.mark.asyncio
    async def test_empty_version_output(self, logger, make_deployer, workdir):
        make_deployer(version=":")

        with pytest.raises(VerificationFailedError, match="printed nothing"):
            await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

    @pytest.mark.asyncio
    async def test_version_check_runs_in_working_directory(self, logger, make_deployer, workdir):
        make_deployer(version="pwd")

        verified = await BinaryVerifier(logger).verify("vendor/bin/dep", workdir)

        assert verified.version == str(workdir.resolve())
