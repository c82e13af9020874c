"""Run configuration: inputs from config file, action inputs and CLI"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from deploykit.constants import (
    ACTION_INPUT_PREFIX,
    DEFAULT_DEPLOYER_BINARY,
    DEFAULT_SSH_PORT,
    DEFAULT_WORKING_DIRECTORY,
    VERBOSITY_LEVELS,
)
from deploykit.exceptions import ConfigurationError, InvalidTimeoutError


@dataclass
class DeploymentInputs:
    """
    Inputs of a deployment run.

    All values are strings at the boundary, as they arrive from the
    environment or a workflow file; typed accessors validate them.
    """

    ssh_private_key: str = ""
    environment: str = ""
    revision: str = ""
    deployer_binary: str = DEFAULT_DEPLOYER_BINARY
    ssh_known_hosts: str = ""
    ssh_port: str = DEFAULT_SSH_PORT
    working_directory: str = DEFAULT_WORKING_DIRECTORY
    verbosity: str = ""
    options: str = ""
    timeout: str = ""

    @staticmethod
    def input_names() -> Dict[str, str]:
        """Map of hyphenated input name (e.g. ``ssh-private-key``) to field name."""
        return {f.name.replace("_", "-"): f.name for f in fields(DeploymentInputs)}

    def validate(self) -> None:
        """
        Validate required inputs and value formats.

        The timeout is parsed separately by the orchestrator
        once the deployer is verified.

        Raises:
            ConfigurationError: If a value is missing or malformed
        """
        for name in ("ssh_private_key", "environment", "revision"):
            if not getattr(self, name).strip():
                raise ConfigurationError(
                    f"Missing required input: '{name.replace('_', '-')}'"
                )

        if self.verbosity and self.verbosity not in VERBOSITY_LEVELS:
            raise ConfigurationError(
                f"Invalid verbosity: '{self.verbosity}'",
                context=f"Expected one of: {', '.join(VERBOSITY_LEVELS)}",
            )

        parse_port(self.ssh_port)

    @property
    def port(self) -> int:
        return parse_port(self.ssh_port)

    def __repr__(self) -> str:
        # Never include the key
        return (
            f"DeploymentInputs(environment={self.environment}, "
            f"revision={self.revision}, binary={self.deployer_binary})"
        )


def parse_port(value: Any) -> int:
    """Parse an SSH port (1..65535)."""
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid SSH port: '{value}'") from None
    if not 0 < port < 65536:
        raise ConfigurationError(
            f"Invalid SSH port: '{value}'", context="Port must be between 1 and 65535"
        )
    return port


def parse_timeout(value: Any) -> Optional[int]:
    """
    Parse an optional timeout in milliseconds.

    Args:
        value: Raw value; None or an empty string means no timeout

    Returns:
        Positive integer milliseconds, or None

    Raises:
        InvalidTimeoutError: If the value is not a positive integer
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidTimeoutError(value)
    if isinstance(value, int):
        timeout = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if not (text.isascii() and text.isdigit()):
            raise InvalidTimeoutError(value)
        timeout = int(text)

    if timeout <= 0:
        raise InvalidTimeoutError(value)
    return timeout


def load_config_file(path: Path) -> Dict[str, str]:
    """
    Load inputs from a YAML config file.

    Keys use the hyphenated input names, e.g.::

        environment: production
        deployer-binary: vendor/bin/dep
        timeout: 600000

    Returns:
        Dict keyed by field name

    Raises:
        ConfigurationError: If the file is missing, unreadable or has unknown keys
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", context=str(e)) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    names = DeploymentInputs.input_names()
    values = {}
    for key, value in raw.items():
        field_name = names.get(str(key)) or (
            str(key) if str(key) in names.values() else None
        )
        if field_name is None:
            raise ConfigurationError(
                f"Unknown key '{key}' in {path}",
                context=f"Valid keys: {', '.join(sorted(names))}",
            )
        values[field_name] = "" if value is None else str(value)
    return values


def action_inputs_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Read GitHub Actions style inputs (``INPUT_SSH-PRIVATE-KEY`` ...).

    Empty values are treated as unset.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for input_name, field_name in DeploymentInputs.input_names().items():
        value = environ.get(f"{ACTION_INPUT_PREFIX}{input_name.upper()}", "")
        if value.strip():
            values[field_name] = value.strip() if field_name != "ssh_private_key" else value
    return values


def resolve_inputs(
    cli_values: Mapping[str, Optional[str]],
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentInputs:
    """
    Merge input sources, lowest to highest precedence:
    config file, action inputs, CLI options.

    Args:
        cli_values: Values from CLI options (None means not given)
        config_path: Optional YAML config file
        environ: Environment to read action inputs from

    Returns:
        Merged DeploymentInputs (not yet validated)
    """
    merged: Dict[str, str] = {}
    if config_path is not None:
        merged.update(load_config_file(config_path))
    merged.update(action_inputs_from_env(environ))
    merged.update({k: str(v) for k, v in cli_values.items() if v is not None})

    known = {f.name for f in fields(DeploymentInputs)}
    return DeploymentInputs(**{k: v for k, v in merged.items() if k in known})
