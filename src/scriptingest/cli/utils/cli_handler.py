"""Unified CLI handler for standardized error handling and output."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from scriptingest.cli.formatters.json_formatter import JsonFormatter
from scriptingest.config import get_logger
from scriptingest.exceptions import ScriptIngestError

logger = get_logger(__name__)


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output
        """
        self.console = console or Console()
        self.json_formatter = JsonFormatter()

    def handle_error(
        self, error: Exception, json_output: bool = False, exit_code: int = 1
    ) -> None:
        """Report an error and exit.

        ScriptIngest errors print their message and hint; anything else is
        logged with its traceback first.

        Args:
            error: Exception to handle
            json_output: Whether to output JSON
            exit_code: Exit code to use

        Raises:
            typer.Exit: Always
        """
        if isinstance(error, ScriptIngestError):
            logger.info("Command failed", error=error.message)
        else:
            logger.error(f"Command failed: {error}", exc_info=error)

        if json_output:
            print(self.json_formatter.format_error_response(error, exit_code))
        elif isinstance(error, ScriptIngestError):
            self.console.print(f"[red]Error: {escape(error.message)}[/red]")
            if error.hint:
                self.console.print(f"[dim]Hint: {escape(error.hint)}[/dim]")
        else:
            self.console.print(f"[red]Error: {escape(str(error))}[/red]")

        raise typer.Exit(exit_code)
