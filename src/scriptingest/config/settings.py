"""ScriptIngest configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptingest.exceptions import ConfigurationError, check_config_keys


class ScriptIngestSettings(BaseSettings):
    """ScriptIngest configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
       Example: scriptingest parse script.pdf --no-ocr

    2. Config file values (YAML, TOML, or JSON)
       Example: scriptingest parse script.pdf --config ingest.yaml
       Multiple files: Later files override earlier ones

    3. Environment variables (prefixed with SCRIPTINGEST_)
       Example: export SCRIPTINGEST_OCR_TIMEOUT=300

    4. .env file (in current directory or specified path)
       Example: SCRIPTINGEST_LOG_LEVEL=DEBUG in .env file

    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTINGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # Page geometry
    lines_per_page: int = Field(
        default=55,
        description="Line budget per rendered screenplay page",
        ge=10,
    )
    scene_heading_width: int = Field(
        default=60,
        description="Column width for scene headings",
        ge=10,
    )
    action_width: int = Field(
        default=60,
        description="Column width for action blocks",
        ge=10,
    )
    transition_width: int = Field(
        default=60,
        description="Column width for transitions",
        ge=10,
    )
    dialogue_width: int = Field(
        default=35,
        description="Column width for dialogue",
        ge=10,
    )
    parenthetical_width: int = Field(
        default=30,
        description="Column width for parentheticals",
        ge=10,
    )
    character_cue_max_length: int = Field(
        default=40,
        description="Longest line still considered a character cue",
        ge=1,
    )
    title_page_scan_lines: int = Field(
        default=30,
        description="Number of leading lines scanned for title page metadata",
        ge=1,
    )
    fdx_elements_per_page: int = Field(
        default=50,
        description="Paragraphs per page when approximating FDX pagination",
        ge=1,
    )

    # PDF heuristics
    pdf_header_footer_ratio: float = Field(
        default=0.6,
        description="Share of pages a boundary line must repeat on to be stripped",
        gt=0.0,
        le=1.0,
    )

    # OCR settings
    ocr_enabled: bool = Field(
        default=True,
        description="Fall back to OCR for PDFs without a usable text layer",
    )
    ocr_timeout: float = Field(
        default=120.0,
        description="Maximum seconds to wait for OCR of a scanned PDF",
        gt=0.0,
    )
    ocr_language: str = Field(
        default="eng",
        description="Tesseract language code",
    )
    ocr_dpi: int = Field(
        default=300,
        description="Resolution used to rasterize PDF pages for OCR",
        ge=72,
    )
    tesseract_cmd: str | None = Field(
        default=None,
        description="Optional path to the tesseract executable",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and resolve path.

        Accepts None, str (with env vars and ~ expansion) and Path objects.
        Collections are rejected.
        """
        if v is None:
            return None
        if isinstance(v, str):
            expanded = os.path.expandvars(v)
            return Path(expanded).expanduser().resolve()
        if isinstance(v, Path):
            return v.resolve()
        if isinstance(v, dict | list | set | tuple):
            raise ValueError(
                f"Path fields cannot accept {type(v).__name__} types. "
                f"Expected str or Path, got: {v!r}"
            )
        return Path(str(v)).resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @classmethod
    def from_env(cls) -> ScriptIngestSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> ScriptIngestSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()

        if suffix in {".yml", ".yaml"}:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
                details={
                    "file": str(config_path),
                    "detected_format": suffix,
                    "supported_formats": [".yml", ".yaml", ".toml", ".json"],
                },
            )

        check_config_keys(data)

        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> ScriptIngestSettings:
        """Load settings with proper precedence from multiple sources.

        Precedence (highest to lowest):
        1. CLI arguments
        2. Config files (last file wins)
        3. Environment variables
        4. .env file
        5. Default values

        Args:
            config_files: List of config files to load (later files override earlier).
            env_file: Path to .env file (default: .env in current directory).
            cli_args: Dictionary of CLI arguments.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}

        if config_files:
            for config_file in config_files:
                try:
                    file_settings = cls.from_file(config_file)
                    # Only keep what the file actually set
                    data.update(file_settings.model_dump(exclude_unset=True))
                except FileNotFoundError:
                    # Imported here to avoid a cycle during module initialization
                    from scriptingest.config.logging import get_logger

                    get_logger(__name__).warning(
                        "Configuration file not found, using defaults",
                        config_file=str(config_file),
                    )

        if env_file:
            settings = cast(
                "ScriptIngestSettings", cast(Any, cls)(_env_file=env_file, **data)
            )
        else:
            settings = cls(**data)

        if cli_args:
            cli_data = {k: v for k, v in cli_args.items() if v is not None}
            if cli_data:
                updated_data = settings.model_dump()
                updated_data.update(cli_data)
                settings = cls(**updated_data)

        return settings


# Global settings instance
_settings: ScriptIngestSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get list of existing config file paths, in override order."""
    potential_paths = [
        Path.home() / ".config" / "scriptingest" / "config.yaml",
        Path.home() / ".config" / "scriptingest" / "config.toml",
        Path.home() / ".config" / "scriptingest" / "config.json",
        Path.cwd() / "scriptingest.yaml",
        Path.cwd() / "scriptingest.toml",
        Path.cwd() / "scriptingest.json",
    ]

    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> ScriptIngestSettings:
    """Get the global settings instance.

    Loads configuration from config files in the user and project
    directories, then the environment, then defaults.

    Returns:
        Global ScriptIngestSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = ScriptIngestSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = ScriptIngestSettings.from_env()
    return _settings


def set_settings(settings: ScriptIngestSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset the global settings instance.

    Forces recreation of settings on next call to get_settings(),
    useful for tests that modify environment variables.
    """
    global _settings
    _settings = None


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> ScriptIngestSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load. If not provided,
                    uses standard config locations.
        cli_overrides: Dictionary of CLI argument overrides.
                      Only non-None values are applied.

    Returns:
        ScriptIngestSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return ScriptIngestSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    if cli_overrides:
        filtered = {k: v for k, v in cli_overrides.items() if v is not None}
        if filtered:
            data = settings.model_dump()
            data.update(filtered)
            settings = ScriptIngestSettings(**data)
    return settings
