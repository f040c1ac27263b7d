"""Output formatters for ScriptIngest CLI."""

from __future__ import annotations

from scriptingest.cli.formatters.base import OutputFormat, OutputFormatter
from scriptingest.cli.formatters.json_formatter import JsonFormatter
from scriptingest.cli.formatters.script_formatter import ScriptFormatter

__all__ = [
    "JsonFormatter",
    "OutputFormat",
    "OutputFormatter",
    "ScriptFormatter",
]
