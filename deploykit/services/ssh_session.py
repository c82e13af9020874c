"""
SSH session service: ephemeral identity, client config and agent.

The session config (key, port, known hosts, multiplexing) is applied through
GIT_SSH_COMMAND, so it governs git and anything run with ``ssh -F``.
Deployer opens its own host connections with plain ``ssh``, which ignores
GIT_SSH_COMMAND: those connections authenticate through the agent but use
~/.ssh/known_hosts and the user's ssh config, not deploykit_known_hosts.
"""

import os
import re
import tempfile
import time
from pathlib import Path
from typing import Optional, Tuple

from deploykit.constants import (
    CONTROL_SOCKET_TEMPLATE,
    ENV_AGENT_PID,
    ENV_AUTH_SOCK,
    KNOWN_HOSTS_PERMISSIONS,
    SSH_ADD_COMMAND,
    SSH_AGENT_COMMAND,
    SSH_CONFIG_PERMISSIONS,
    SSH_CONFIG_PREFIX,
    SSH_DIR_NAME,
    SSH_DIR_PERMISSIONS,
    SSH_KEY_FILENAME,
    SSH_KEY_PERMISSIONS,
    SSH_KNOWN_HOSTS_FILENAME,
)
from deploykit.exceptions import AgentParseError, SSHError
from deploykit.logger import DeployLogger
from deploykit.models.ssh import AgentHandle, SessionConfig, SessionContext
from deploykit.services.process import run_process

# Accepts both sh (`VAR=value;`) and csh (`setenv VAR value;`) announcements
AUTH_SOCK_PATTERN = re.compile(r"SSH_AUTH_SOCK[= ]([^;\s]+)")
AGENT_PID_PATTERN = re.compile(r"SSH_AGENT_PID[= ](\d+)")


def default_ssh_dir() -> Path:
    return Path.home() / SSH_DIR_NAME


def new_session_context(ssh_dir: Optional[Path] = None) -> SessionContext:
    """Create an empty context pointing at the session-scoped file names."""
    ssh_dir = ssh_dir or default_ssh_dir()
    return SessionContext(
        ssh_dir=ssh_dir,
        key_path=ssh_dir / SSH_KEY_FILENAME,
        known_hosts_path=ssh_dir / SSH_KNOWN_HOSTS_FILENAME,
    )


def parse_agent_output(output: str) -> AgentHandle:
    """
    Extract socket path and PID from ``ssh-agent -s`` output.

    Raises:
        AgentParseError: If either value is missing
    """
    sock_match = AUTH_SOCK_PATTERN.search(output)
    if not sock_match:
        raise AgentParseError("SSH_AUTH_SOCK", output)

    pid_match = AGENT_PID_PATTERN.search(output)
    if not pid_match:
        raise AgentParseError("SSH_AGENT_PID", output)

    return AgentHandle(auth_sock=sock_match.group(1), pid=int(pid_match.group(1)))


def write_private_file(path: Path, content: str, mode: int) -> None:
    """Write ``content`` to ``path`` replacing any previous file, with ``mode``."""
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    # O_CREAT's mode is ignored for pre-existing files
    os.chmod(path, mode)


class SessionCredentialManager:
    """Materializes the SSH identity of a run and starts its agent."""

    def __init__(
        self,
        logger: DeployLogger,
        ssh_dir: Optional[Path] = None,
        temp_dir: Optional[Path] = None,
        agent_command: str = SSH_AGENT_COMMAND,
        add_command: str = SSH_ADD_COMMAND,
    ):
        """
        Initialize the credential manager.

        Args:
            logger: Run logger
            ssh_dir: SSH directory (defaults to ~/.ssh)
            temp_dir: Directory for the session config and control sockets
            agent_command: ssh-agent executable
            add_command: ssh-add executable
        """
        self.logger = logger
        self.ssh_dir = ssh_dir or default_ssh_dir()
        self.temp_dir = temp_dir or Path(tempfile.gettempdir())
        self.agent_command = agent_command
        self.add_command = add_command

    def new_context(self) -> SessionContext:
        return new_session_context(self.ssh_dir)

    async def begin(
        self,
        context: SessionContext,
        private_key: str,
        known_hosts: Optional[str],
        port: int,
    ) -> Tuple[Path, AgentHandle]:
        """
        Set up the SSH session, recording every artifact on ``context``.

        The caller owns cleanup of ``context`` whether or not this succeeds.

        Args:
            context: Context returned by new_context()
            private_key: Private key content
            known_hosts: known_hosts content, or empty to disable checking
            port: SSH port

        Returns:
            Tuple of (session config path, agent handle)
        """
        with self.logger.group("Setting up SSH"):
            context.ssh_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(context.ssh_dir, SSH_DIR_PERMISSIONS)

            write_private_file(context.key_path, private_key + "\n", SSH_KEY_PERMISSIONS)
            self.logger.success("SSH private key configured")

            known_hosts_file = None
            if known_hosts:
                write_private_file(
                    context.known_hosts_path, known_hosts + "\n", KNOWN_HOSTS_PERMISSIONS
                )
                known_hosts_file = context.known_hosts_path
                self.logger.success("SSH known hosts configured")
            else:
                self.logger.warning(
                    "No known_hosts provided. Using StrictHostKeyChecking=no "
                    "(not recommended for production)"
                )

            session_config = SessionConfig(
                identity_file=context.key_path,
                port=port,
                control_path=str(self.temp_dir / CONTROL_SOCKET_TEMPLATE),
                known_hosts_file=known_hosts_file,
            )
            config_path = self._write_session_config(context, session_config)
            self.logger.success("SSH config created with connection multiplexing")

            agent = await self._start_agent()
            context.bind_agent(agent)
            self.logger.debug(f"ssh-agent started with PID {agent.pid}")

            await self._add_key(context)
            self.logger.success("SSH agent started and key added")

        return config_path, agent

    def _write_session_config(
        self, context: SessionContext, session_config: SessionConfig
    ) -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=f"{SSH_CONFIG_PREFIX}{time.time_ns()}_", dir=str(self.temp_dir)
        )
        config_path = Path(name)
        context.bind_config(config_path)

        with os.fdopen(fd, "w") as f:
            f.write(session_config.render())
        os.chmod(config_path, SSH_CONFIG_PERMISSIONS)

        return config_path

    async def _start_agent(self) -> AgentHandle:
        result = await run_process(self.agent_command, "-s")
        if result.is_failure:
            raise SSHError(
                f"ssh-agent exited with code {result.returncode}",
                context=result.stderr.strip() or None,
            )
        return parse_agent_output(result.stdout)

    async def _add_key(self, context: SessionContext) -> None:
        result = await run_process(
            self.add_command, str(context.key_path), env=context.subprocess_env()
        )
        if result.is_failure:
            raise SSHError(
                f"ssh-add failed with exit code {result.returncode}",
                context=self.logger.mask(result.stderr.strip()) or None,
            )


def context_from_environment(
    ssh_dir: Optional[Path] = None, environ: Optional[dict] = None
) -> SessionContext:
    """
    Rebuild a context for a standalone cleanup from an exported agent.

    Used when the run that created the session is no longer around, e.g.
    from a post-job hook that only sees SSH_AUTH_SOCK/SSH_AGENT_PID.
    """
    environ = os.environ if environ is None else environ
    context = new_session_context(ssh_dir)
    pid = environ.get(ENV_AGENT_PID, "")
    if pid.isdigit():
        context.bind_agent(
            AgentHandle(auth_sock=environ.get(ENV_AUTH_SOCK, ""), pid=int(pid))
        )
    return context
