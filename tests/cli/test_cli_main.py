"""Tests for the CLI application wiring."""

import json
import logging

import pytest
import typer
from typer.testing import CliRunner

from scriptingest import __version__
from scriptingest.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging changes made by the --verbose and --debug flags."""
    root_logger = logging.getLogger()
    level, handlers = root_logger.level, root_logger.handlers[:]
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestApp:
    def test_app_metadata(self):
        assert isinstance(app, typer.Typer)
        assert app.info.name == "scriptingest"

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "parse" in result.stdout
        assert "version" in result.stdout


class TestVersion:
    def test_plain(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"ScriptIngest v{__version__}" in result.stdout

    def test_json(self):
        result = runner.invoke(app, ["version", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "ScriptIngest"
        assert data["version"] == __version__


class TestLoggingFlags:
    def test_verbose(self):
        result = runner.invoke(app, ["--verbose", "version"])

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.INFO

    def test_debug_from_environment(self):
        result = runner.invoke(app, ["version"], env={"SCRIPTINGEST_DEBUG": "1"})

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG
