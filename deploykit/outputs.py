"""Run outputs: deployment-status and deployer-output."""

import os
import uuid
from pathlib import Path
from typing import Dict, Optional

from deploykit.constants import OUTPUT_DEPLOYER, OUTPUT_STATUS
from deploykit.models.results import RunResult


class OutputWriter:
    """
    Records run outputs and, under GitHub Actions, appends them to the
    file named by ``GITHUB_OUTPUT`` using the multi-line delimiter syntax.
    """

    def __init__(self, output_path: Optional[Path] = None):
        if output_path is None and os.environ.get("GITHUB_OUTPUT"):
            output_path = Path(os.environ["GITHUB_OUTPUT"])
        self.output_path = output_path
        self.values: Dict[str, str] = {}

    def set_output(self, name: str, value: str) -> None:
        self.values[name] = value
        if self.output_path is None:
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with open(self.output_path, "a") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def write(self, result: RunResult) -> None:
        """Set both outputs from a run result."""
        self.set_output(OUTPUT_STATUS, result.status.value)
        self.set_output(OUTPUT_DEPLOYER, result.output)
