"""
Result Models

Dataclass models for operation results and command outputs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from deploykit.constants import STATUS_FAILED, STATUS_SUCCESS


class RunStatus(Enum):
    """Terminal status of a deployment run."""

    SUCCESS = STATUS_SUCCESS
    FAILED = STATUS_FAILED


@dataclass
class ExecutionResult:
    """Result of a command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class RunResult:
    """Outcome of a deployment run."""

    status: RunStatus
    exit_code: Optional[int] = None
    output: str = ""
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if the run succeeded."""
        return self.status == RunStatus.SUCCESS

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "output": self.output,
            "error": self.error,
        }

    def __repr__(self) -> str:
        return f"RunResult(status={self.status.value}, exit_code={self.exit_code})"
