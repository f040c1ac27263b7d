"""ScriptIngest CLI commands."""

from __future__ import annotations

from scriptingest.cli.commands.parse import parse_command

__all__ = ["parse_command"]
