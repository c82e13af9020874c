"""
Base Command Class

Abstract base for all DeployKit CLI commands.
Provides common functionality and structure.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
import json
import sys

from rich.console import Console
from rich.markup import escape

from deploykit.exceptions import DeployKitError
from deploykit.logger import DeployLogger
from deploykit.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling and exit codes
    - JSON output support
    """

    def __init__(
        self,
        verbose: bool = False,
        json_output: bool = False,
        log_file: Optional[Path] = None,
    ):
        self.verbose = verbose
        self.json_output = json_output
        self.log_file = log_file
        # stdout carries only the JSON document in JSON mode
        self.console = Console(stderr=json_output)
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, command_name: str) -> DeployLogger:
        """
        Initialize command logger.

        Args:
            command_name: Command name

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            command_name,
            verbose=self.verbose,
            log_path=self.log_file,
            console=self.console,
            command_stream=sys.stderr if self.json_output else None,
        )
        return self.logger

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(json.dumps(data, indent=2))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def output_json_error(
        self, error: str, details: Optional[Dict[str, Any]] = None, exit_code: int = 1
    ) -> None:
        """
        Output error as JSON and exit.

        Args:
            error: Error message
            details: Optional error details
            exit_code: Exit code
        """
        error_data = {"error": error}
        if details:
            error_data["details"] = details
        self.output_json(error_data, exit_code=exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def _log_location(self) -> None:
        if self.logger and self.logger.log_path:
            self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self._log_location()
            raise SystemExit(130)
        except SystemExit:
            raise
        except DeployKitError as e:
            if self.json_output:
                self.output_json_error(e.message, details={"context": e.context})
            self.console.print(f"\n[bold red]✗ {escape(e.message)}[/bold red]")
            if e.context:
                self.console.print(f"  [dim]{escape(e.context)}[/dim]\n")
            self._log_location()
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            if self.json_output:
                self.output_json_error(f"{error_type}: {e}")
            self.console.print(f"\n[bold red]✗ {error_type}:[/bold red] {escape(str(e))}\n")
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
            self._log_location()
            raise SystemExit(1)
        finally:
            if self.logger:
                self.logger.close()
