"""
DeployKit Services

Each service owns one stage of a deployment run.
"""

from .argument_parser import parse_options
from .binary_verifier import BinaryVerifier
from .deployment_runner import DeploymentRunner
from .path_guard import resolve_within
from .session_cleaner import CleanupReport, SessionCleaner
from .ssh_session import (
    SessionCredentialManager,
    context_from_environment,
    new_session_context,
    parse_agent_output,
)

__all__ = [
    "parse_options",
    "resolve_within",
    "SessionCredentialManager",
    "new_session_context",
    "context_from_environment",
    "parse_agent_output",
    "BinaryVerifier",
    "DeploymentRunner",
    "SessionCleaner",
    "CleanupReport",
]
