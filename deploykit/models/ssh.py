"""
SSH Session Models

Dataclass models for the ephemeral SSH identity of a single run.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from deploykit.constants import (
    CONTROL_PERSIST_SECONDS,
    ENV_AGENT_PID,
    ENV_AUTH_SOCK,
    ENV_SSH_COMMAND,
    NULL_KNOWN_HOSTS,
    SERVER_ALIVE_COUNT_MAX,
    SERVER_ALIVE_INTERVAL,
)


@dataclass(frozen=True)
class SessionConfig:
    """SSH client configuration derived for one run."""

    identity_file: Path
    port: int
    control_path: str
    known_hosts_file: Optional[Path] = None
    control_persist: int = CONTROL_PERSIST_SECONDS
    server_alive_interval: int = SERVER_ALIVE_INTERVAL
    server_alive_count_max: int = SERVER_ALIVE_COUNT_MAX

    @property
    def strict_host_key_checking(self) -> bool:
        """Strict checking is only enabled when known hosts were supplied."""
        return self.known_hosts_file is not None

    def render(self) -> str:
        """Render as an ssh_config(5) document."""
        known_hosts = (
            str(self.known_hosts_file) if self.known_hosts_file else NULL_KNOWN_HOSTS
        )
        return (
            "Host *\n"
            f"  StrictHostKeyChecking {'yes' if self.strict_host_key_checking else 'no'}\n"
            f"  UserKnownHostsFile {known_hosts}\n"
            f"  IdentityFile {self.identity_file}\n"
            f"  Port {self.port}\n"
            "  ControlMaster auto\n"
            f"  ControlPath {self.control_path}\n"
            f"  ControlPersist {self.control_persist}\n"
            f"  ServerAliveInterval {self.server_alive_interval}\n"
            f"  ServerAliveCountMax {self.server_alive_count_max}\n"
        )


@dataclass(frozen=True)
class AgentHandle:
    """Socket path and PID announced by a started ssh-agent."""

    auth_sock: str
    pid: int

    def __repr__(self) -> str:
        return f"AgentHandle(pid={self.pid})"


@dataclass
class SessionContext:
    """
    Artifacts and environment of one SSH session.

    Every path is recorded as soon as the artifact exists, so a context
    left behind by a failed setup can still be cleaned up.
    """

    ssh_dir: Path
    key_path: Path
    known_hosts_path: Path
    config_path: Optional[Path] = None
    agent: Optional[AgentHandle] = None
    env: Dict[str, str] = field(default_factory=dict)

    def bind_config(self, config_path: Path) -> None:
        """Record the session config and expose it as the ssh command override."""
        self.config_path = config_path
        self.env[ENV_SSH_COMMAND] = f"ssh -F {config_path}"

    def bind_agent(self, agent: AgentHandle) -> None:
        """Record the agent and expose its socket and PID."""
        self.agent = agent
        self.env[ENV_AUTH_SOCK] = agent.auth_sock
        self.env[ENV_AGENT_PID] = str(agent.pid)

    def release_agent(self) -> None:
        """Forget the agent once it has been terminated."""
        self.agent = None
        self.env.pop(ENV_AUTH_SOCK, None)
        self.env.pop(ENV_AGENT_PID, None)

    def subprocess_env(self) -> Dict[str, str]:
        """Environment for subprocesses that may shell out over SSH."""
        return {**os.environ, **self.env}

    def __repr__(self) -> str:
        return f"SessionContext(key={self.key_path}, agent={self.agent!r})"
