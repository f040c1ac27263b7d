"""Custom exception hierarchy for ScriptIngest with helpful error messages."""

from __future__ import annotations

from typing import Any


class ScriptIngestError(Exception):
    """Base exception with helpful formatting for all ScriptIngest errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class FormatValidationError(ScriptIngestError):
    """Input does not carry the magic bytes or root structure of its format."""

    pass


class UnsupportedFormatError(ScriptIngestError):
    """File extension does not map to any known screenplay parser."""

    pass


class OcrRequiredError(ScriptIngestError):
    """Scanned PDF without a usable text layer and no successful OCR pass."""

    pass


class GenericParseError(ScriptIngestError):
    """Unexpected failure while tokenizing, classifying or paginating."""

    pass


class ConfigurationError(ScriptIngestError):
    """Configuration errors including invalid settings and missing config files."""

    pass


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "page_lines": "lines_per_page",
        "lines_per_pages": "lines_per_page",
        "dialog_width": "dialogue_width",
        "ocr_timeout_seconds": "ocr_timeout",
        "ocr_lang": "ocr_language",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
