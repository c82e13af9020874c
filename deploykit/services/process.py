"""Async subprocess helpers."""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Union

from deploykit.models.results import ExecutionResult


async def run_process(
    *args: str,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
) -> ExecutionResult:
    """
    Run a command to completion and capture its output.

    Args:
        *args: Program and arguments, passed as discrete argv elements
        cwd: Working directory
        env: Full environment for the child (inherits ours if None)

    Returns:
        ExecutionResult with decoded stdout/stderr
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd) if cwd is not None else None,
        env=env,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()

    return ExecutionResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        command=" ".join(args),
    )
