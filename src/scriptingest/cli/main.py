"""Main CLI entry point."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from scriptingest import __version__
from scriptingest.cli.commands import parse_command
from scriptingest.cli.formatters.json_formatter import JsonFormatter
from scriptingest.config import configure_logging, get_logger, get_settings_for_cli

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="scriptingest",
    help="Parse Fountain, Final Draft and PDF screenplays into structured data",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="parse")(parse_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show ScriptIngest version."""
    version_info = {
        "name": "ScriptIngest",
        "version": __version__,
        "description": "Screenplay ingestion for Fountain, FDX and PDF",
    }

    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"ScriptIngest v{version_info['version']}")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug", help="Enable debug logging", envvar="SCRIPTINGEST_DEBUG"
        ),
    ] = False,
) -> None:
    """Configure global options."""
    if debug:
        settings = get_settings_for_cli(
            cli_overrides={"debug": True, "log_level": "DEBUG"}
        )
        configure_logging(settings)
        logger.debug("Debug mode enabled")
    elif verbose:
        settings = get_settings_for_cli(cli_overrides={"log_level": "INFO"})
        configure_logging(settings)
        logger.info("Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
