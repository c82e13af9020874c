"""
Logging system for DeployKit
Provides real-time logging to files with clean console output
"""

import os
import re
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from deploykit.constants import LOG_TIME_FORMAT


ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def running_in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


class DeployLogger:
    """
    Manages logging for a deployment run
    - Writes all output to an optional log file in real-time
    - Shows clean progress UI in console (unless verbose)
    - Wraps steps in collapsible groups when running under GitHub Actions
    - Masks registered secrets everywhere it writes
    """

    def __init__(
        self,
        operation: str,
        verbose: bool = False,
        log_path: Optional[Path] = None,
        console: Optional[Console] = None,
        command_stream: Optional[TextIO] = None,
    ):
        """
        Initialize logger

        Args:
            operation: Operation name (e.g., 'deploy', 'cleanup')
            verbose: If True, show all output (including debug) in console
            log_path: Optional file that receives every log line
            console: Rich console to print to (new console if None)
            command_stream: Stream for workflow commands (stdout if None)
        """
        self.operation = operation
        self.verbose = verbose or os.environ.get("RUNNER_DEBUG") == "1"
        self.console = console if console is not None else Console()
        self.command_stream = command_stream
        self.github_actions = running_in_github_actions()
        self.log_path = log_path
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False
        self._secrets: List[str] = []
        self._open_groups = 0

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self.log_file = open(log_path, "a", buffering=1)
            self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
DeployKit Log
{"=" * 80}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def add_mask(self, secret: str) -> None:
        """Register a secret so it never appears in console or log file."""
        for line in secret.splitlines():
            line = line.strip()
            if not line:
                continue
            self._secrets.append(line)
            if self.github_actions:
                self._emit(f"::add-mask::{line}")

    def mask(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, "***")
        return text

    def _workflow_command(self, command: str, message: str) -> None:
        if self.github_actions:
            self._emit(f"::{command}::{message}")

    def _emit(self, line: str) -> None:
        print(line, file=self.command_stream or sys.stdout, flush=True)

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        message = self.mask(message)
        timestamp = datetime.now().strftime(LOG_TIME_FORMAT)

        if self.log_file:
            self.log_file.write(f"[{timestamp}] [{level}] {message}\n")
            self.log_file.flush()

        if self.verbose:
            if level == "ERROR":
                self.console.print(f"[red]{escape(message)}[/red]")
            elif level == "WARNING":
                self.console.print(f"[yellow]{escape(message)}[/yellow]")
            elif level == "DEBUG":
                self.console.print(f"[dim]{escape(message)}[/dim]")
            else:
                self.console.print(escape(message))

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output to the log file only

        Console output of deployer streams is handled by the caller, which
        forwards chunks as they arrive.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output or not self.log_file:
            return

        clean_output = ANSI_ESCAPE.sub("", self.mask(output))
        try:
            for line in clean_output.splitlines():
                self.log_file.write(f"  [{stream}] {line}\n")
            self.log_file.flush()
        except OSError:
            # Terminal responsiveness matters more than the log file
            pass

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True
        error = self.mask(error)

        if self.log_file:
            error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
            if context:
                error_block += f"\nContext: {context}\n"
            error_block += f"{'!' * 80}\n\n"
            self.log_file.write(error_block)
            self.log_file.flush()

        self._workflow_command("error", error.replace("\n", "%0A"))

        self.console.print(f"[bold red]✗ {escape(error)}[/bold red]")
        if context:
            self.console.print(f"  [color(208)]{escape(context)}[/color(208)]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        # Spacing between steps, but not before the first one
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{escape(step_name)}[/white]"
            )

    @contextmanager
    def group(self, title: str) -> Iterator["DeployLogger"]:
        """
        Wrap a step in a logical group that is closed on success and failure.

        Args:
            title: Group title
        """
        self._workflow_command("group", title)
        self._open_groups += 1
        self.step(title)
        try:
            yield self
        finally:
            self._open_groups -= 1
            self._workflow_command("endgroup", "")

    @property
    def open_groups(self) -> int:
        return self._open_groups

    def title(self, message: str):
        """Log a headline message"""
        self.log(message, "INFO")
        if not self.verbose:
            self.console.print(f"[bold cyan]{escape(self.mask(message))}[/bold cyan]")

    def info(self, message: str):
        """Log an informational message"""
        self.log(message, "INFO")
        if not self.verbose:
            self.console.print(f"  [blue]{escape(self.mask(message))}[/blue]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")
        if not self.verbose:
            self.console.print(f"  [dim]✓ {escape(self.mask(message))}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")
        self._workflow_command("warning", self.mask(message))
        if not self.verbose:
            self.console.print(
                f"  [yellow]⚠[/yellow] [dim]{escape(self.mask(message))}[/dim]"
            )

    def debug(self, message: str):
        """Log a debug message (console only when verbose)"""
        self.log(message, "DEBUG")
        self._workflow_command("debug", self.mask(message))

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and exc_type != SystemExit:
            self.log_error(
                str(exc_val) if exc_val else "Operation failed",
                context=f"{exc_type.__name__}",
            )
        self.close()
        return False  # Don't suppress exceptions
