"""Parse a screenplay file and report the result."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from scriptingest.cli.formatters.json_formatter import JsonFormatter
from scriptingest.cli.formatters.script_formatter import ScriptFormatter
from scriptingest.cli.utils.cli_handler import CLIHandler
from scriptingest.config import get_logger, get_settings_for_cli
from scriptingest.models import ParserConfig
from scriptingest.parser.dispatcher import parse_script_sync

logger = get_logger(__name__)
console = Console()


def parse_command(
    file: Annotated[
        Path,
        typer.Argument(
            help="Screenplay file (.fountain, .fdx or .pdf)",
            exists=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    json_output: Annotated[
        bool, typer.Option("--json", help="Output the full result as JSON")
    ] = False,
    elements: Annotated[
        bool,
        typer.Option("--elements", "-e", help="List every parsed element"),
    ] = False,
    password: Annotated[
        str | None,
        typer.Option("--password", help="Password for encrypted PDFs"),
    ] = None,
    no_ocr: Annotated[
        bool,
        typer.Option("--no-ocr", help="Never fall back to OCR for scanned PDFs"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
        ),
    ] = None,
) -> None:
    """Parse a screenplay into scenes, elements and characters.

    The parser is chosen from the file extension. Scanned PDFs fall back to
    OCR unless --no-ocr is given. Exits with status 1 when parsing fails.
    """
    handler = CLIHandler(console)

    try:
        settings = get_settings_for_cli(
            config_file=config,
            cli_overrides={"ocr_enabled": False if no_ocr else None},
        )
        result = parse_script_sync(
            file.read_bytes(),
            file.name,
            config=ParserConfig.from_settings(settings),
            password=password,
        )
    except Exception as e:
        handler.handle_error(e, json_output)
        return

    if json_output:
        # Pure JSON on stdout, no rich markup
        print(JsonFormatter().format(result))
    else:
        ScriptFormatter(console, show_elements=elements).print_result(result)

    if not result.success:
        raise typer.Exit(1)
