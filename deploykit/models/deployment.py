"""
Deployment Models

Dataclass models describing a deployer invocation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from deploykit.constants import DEPLOY_SUBCOMMAND, VERBOSITY_LEVELS
from deploykit.exceptions import ValidationError


@dataclass(frozen=True)
class DeployCommand:
    """
    Argument vector for ``<deployer> deploy <env> --revision=<rev>``.

    The vector is passed to the deployer as discrete argv elements and is
    never joined back into a shell string.
    """

    args: Tuple[str, ...]

    @classmethod
    def build(
        cls,
        environment: str,
        revision: str,
        verbosity: Optional[str] = None,
        options: Sequence[str] = (),
    ) -> "DeployCommand":
        """Build the vector in fixed order: deploy, env, revision, verbosity, options."""
        if not environment:
            raise ValidationError("Environment must not be empty")
        if not revision:
            raise ValidationError("Revision must not be empty")
        if verbosity and verbosity not in VERBOSITY_LEVELS:
            raise ValidationError(
                f"Invalid verbosity '{verbosity}'",
                context=f"Expected one of: {', '.join(VERBOSITY_LEVELS)}",
            )

        args = [DEPLOY_SUBCOMMAND, environment, f"--revision={revision}"]
        if verbosity:
            args.append(f"-{verbosity}")
        args.extend(options)
        return cls(args=tuple(args))

    def as_list(self) -> list[str]:
        return list(self.args)

    def display(self, binary: str) -> str:
        """Human-readable form for logs only."""
        return " ".join([binary, *self.args])


@dataclass(frozen=True)
class VerifiedBinary:
    """Deployer binary that passed the version check."""

    path: Path
    version: str
