"""SSH session cleanup service."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from deploykit.constants import CONTROL_SOCKET_PREFIX, ENV_AGENT_PID, SSH_AGENT_COMMAND
from deploykit.logger import DeployLogger
from deploykit.models.ssh import SessionContext
from deploykit.services.process import run_process


@dataclass
class CleanupReport:
    """What a cleanup pass removed and what it could not."""

    removed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    sockets_removed: int = 0
    agent_terminated: bool = False

    def __repr__(self) -> str:
        return (
            f"CleanupReport(removed={len(self.removed)}, skipped={len(self.skipped)}, "
            f"sockets={self.sockets_removed})"
        )


class SessionCleaner:
    """
    Removes everything a SSH session may have left behind.

    Every step runs independently and failures are only logged at debug
    level, so cleanup is safe after a partial setup and safe to repeat.
    """

    def __init__(
        self,
        logger: DeployLogger,
        temp_dir: Optional[Path] = None,
        agent_command: str = SSH_AGENT_COMMAND,
    ):
        self.logger = logger
        self.temp_dir = temp_dir or Path(tempfile.gettempdir())
        self.agent_command = agent_command

    async def cleanup(
        self, context: SessionContext, config_path: Optional[Path] = None
    ) -> CleanupReport:
        """
        Clean up the session.

        Args:
            context: Session context (possibly only partially initialized)
            config_path: Session config to delete (defaults to the context's)

        Returns:
            CleanupReport describing what was removed
        """
        report = CleanupReport()
        config_path = config_path or context.config_path

        with self.logger.group("Cleaning up SSH"):
            self._remove_file(context.key_path, "private key", report)
            self._remove_file(context.known_hosts_path, "known hosts file", report)
            if config_path is not None:
                self._remove_file(config_path, "session config", report)
            self._remove_control_sockets(report)
            await self._kill_agent(context, report)

        return report

    def _remove_file(self, path: Path, label: str, report: CleanupReport) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            self.logger.debug(f"No {label} to remove at {path}")
            report.skipped.append(str(path))
        except OSError as e:
            self.logger.debug(f"Could not remove {label}: {e}")
            report.skipped.append(str(path))
        else:
            self.logger.success(f"Removed {label}")
            report.removed.append(str(path))

    def _remove_control_sockets(self, report: CleanupReport) -> None:
        try:
            entries = [
                entry
                for entry in os.scandir(self.temp_dir)
                if entry.name.startswith(CONTROL_SOCKET_PREFIX)
            ]
        except OSError as e:
            self.logger.debug(f"Could not clean control sockets: {e}")
            return

        for entry in entries:
            try:
                os.unlink(entry.path)
            except OSError as e:
                self.logger.debug(f"Could not remove control socket {entry.name}: {e}")
            else:
                report.sockets_removed += 1
                report.removed.append(entry.path)

        if report.sockets_removed > 0:
            self.logger.success(f"Removed {report.sockets_removed} SSH control socket(s)")

    async def _kill_agent(self, context: SessionContext, report: CleanupReport) -> None:
        if context.agent is None:
            self.logger.debug("No ssh-agent to terminate")
            return

        env = context.subprocess_env()
        env[ENV_AGENT_PID] = str(context.agent.pid)
        try:
            # Exit code is irrelevant; the agent may already be gone
            await run_process(self.agent_command, "-k", env=env)
        except Exception as e:
            self.logger.debug(f"Could not kill ssh-agent: {e}")
            return

        context.release_agent()
        report.agent_terminated = True
        self.logger.success("SSH agent terminated")
