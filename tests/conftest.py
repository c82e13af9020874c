"""
Shared pytest fixtures for DeployKit tests.

This module provides:
- A quiet DeployLogger writing to an in-memory console
- make_script: write executable shell scripts into tmp_path
- Fake ssh-agent / ssh-add / deployer binaries
"""

import io
import os
import sys
from pathlib import Path
from typing import Callable

import pytest
from rich.console import Console

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from deploykit.logger import DeployLogger  # noqa: E402


AGENT_PID = 4242


@pytest.fixture(autouse=True)
def clean_ci_environment(monkeypatch):
    """Tests never run as if inside a GitHub Actions job."""
    for name in list(os.environ):
        if name.startswith("INPUT_") or name.startswith("DEPLOYKIT_"):
            monkeypatch.delenv(name, raising=False)
    for name in ("GITHUB_ACTIONS", "GITHUB_OUTPUT", "RUNNER_DEBUG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def console_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(console_output) -> DeployLogger:
    console = Console(file=console_output, width=200, color_system=None)
    return DeployLogger("test", console=console)


@pytest.fixture
def make_script(tmp_path) -> Callable[..., Path]:
    """
    Write an executable /bin/sh script.

    Usage:
        def test_x(make_script):
            path = make_script("bin/dep", 'echo "Deployer 7.0"')
    """

    def _make(relative: str, body: str, executable: bool = True) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n")
        mode = 0o755 if executable else 0o644
        path.chmod(mode)
        return path

    return _make


@pytest.fixture
def agent_marker(tmp_path) -> Path:
    """File the fake ssh-agent writes SSH_AGENT_PID to when killed."""
    return tmp_path / "agent-killed"


@pytest.fixture
def fake_agent(make_script, tmp_path, agent_marker) -> Path:
    """ssh-agent stand-in: announces a socket and PID, records -k calls."""
    sock = tmp_path / "agent.sock"
    return make_script(
        "fakebin/ssh-agent",
        f"""
if [ "$1" = "-k" ]; then
  echo "$SSH_AGENT_PID" > "{agent_marker}"
  echo "unset SSH_AUTH_SOCK; unset SSH_AGENT_PID;"
  exit 0
fi
echo "SSH_AUTH_SOCK={sock}; export SSH_AUTH_SOCK;"
echo "SSH_AGENT_PID={AGENT_PID}; export SSH_AGENT_PID;"
echo "echo Agent pid {AGENT_PID};"
""",
    )


@pytest.fixture
def add_log(tmp_path) -> Path:
    """File the fake ssh-add appends its key argument and socket to."""
    return tmp_path / "ssh-add.log"


@pytest.fixture
def fake_add(make_script, add_log) -> Path:
    """ssh-add stand-in: records the key path and SSH_AUTH_SOCK it saw."""
    return make_script(
        "fakebin/ssh-add",
        f"""
echo "$1 $SSH_AUTH_SOCK" >> "{add_log}"
echo "Identity added: $1" >&2
""",
    )


@pytest.fixture
def workdir(tmp_path) -> Path:
    path = tmp_path / "app"
    path.mkdir()
    return path


@pytest.fixture
def make_deployer(make_script, workdir) -> Callable[..., Path]:
    """
    Write a fake Deployer under workdir/vendor/bin/dep.

    ``--version`` prints a version string; any other invocation runs ``body``.
    """

    def _make(body: str = 'echo "OK"', version: str = 'echo "Deployer 7.3.1"') -> Path:
        return make_script(
            "app/vendor/bin/dep",
            f"""
if [ "$1" = "--version" ]; then
  {version}
  exit $?
fi
{body}
""",
        )

    return _make
