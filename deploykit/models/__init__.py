"""
DeployKit Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    ExecutionResult,
    RunResult,
    RunStatus,
)
from .deployment import DeployCommand, VerifiedBinary
from .ssh import (
    AgentHandle,
    SessionConfig,
    SessionContext,
)

__all__ = [
    # Results
    "ExecutionResult",
    "RunResult",
    "RunStatus",
    # Deployment
    "DeployCommand",
    "VerifiedBinary",
    # SSH
    "AgentHandle",
    "SessionConfig",
    "SessionContext",
]
