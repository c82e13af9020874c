"""
DeployKit Exception Hierarchy

Clean exception hierarchy for consistent error handling across a run.
"""

from typing import Optional


class DeployKitError(Exception):
    """Base exception for all DeployKit errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(DeployKitError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(DeployKitError):
    """Raised when validation fails."""

    pass


class SSHError(DeployKitError):
    """Raised when SSH operations fail."""

    pass


class DeploymentError(DeployKitError):
    """Raised when deployment operations fail."""

    pass


class InvalidTimeoutError(ConfigurationError):
    """Raised when the deployment timeout is not a positive integer."""

    def __init__(self, value: object):
        self.value = value
        message = f"Invalid timeout '{value}'"
        context = "Timeout must be a positive integer number of milliseconds"
        super().__init__(message, context)


class PathEscapeError(ValidationError):
    """Raised when a path resolves outside its base directory."""

    def __init__(self, path: str, base: str):
        self.path = path
        self.base = base
        message = f"Path '{path}' escapes base directory '{base}'"
        super().__init__(message)


class AgentParseError(SSHError):
    """Raised when ssh-agent output does not announce a socket and PID."""

    def __init__(self, missing: str, output: str):
        self.missing = missing
        self.agent_output = output
        message = f"Could not parse {missing} from ssh-agent output"
        super().__init__(message, context=output.strip() or "(no output)")


class DeployerBinaryError(DeploymentError):
    """Raised when the deployer binary cannot be used."""

    pass


class BinaryNotFoundError(DeployerBinaryError):
    """Raised when the deployer binary does not exist."""

    def __init__(self, path: str):
        self.path = path
        message = f"Deployer binary not found at '{path}'"
        context = "Install Deployer via Composer or provide the correct path"
        super().__init__(message, context)


class BinaryPermissionError(DeployerBinaryError):
    """Raised when the deployer binary cannot be made executable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        message = f"Could not make '{path}' executable: {reason}"
        super().__init__(message)


class VerificationFailedError(DeployerBinaryError):
    """Raised when the deployer version check fails."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        message = f"Failed to verify Deployer binary at '{path}'"
        context = (
            f"{reason}. "
            "Make sure Deployer is installed via Composer or provide the correct path."
        )
        super().__init__(message, context)


class DeployerRunError(DeploymentError):
    """Raised when a started deployer run does not succeed."""

    def __init__(self, message: str, output: str = ""):
        self.output = output
        super().__init__(message)


class DeploymentFailedError(DeployerRunError):
    """Raised when the deployer exits with a non-zero code."""

    def __init__(self, exit_code: int, output: str = ""):
        self.exit_code = exit_code
        message = f"Deployer command failed with exit code {exit_code}"
        super().__init__(message, output)


class DeploymentTimeoutError(DeployerRunError):
    """Raised when the deployer outlives the configured timeout."""

    def __init__(self, timeout_ms: int, output: str = ""):
        self.timeout_ms = timeout_ms
        message = f"Deployment timed out after {timeout_ms}ms"
        super().__init__(message, output)
