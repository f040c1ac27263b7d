"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from typing import Any

from scriptingest.cli.formatters.base import OutputFormat, OutputFormatter


class JsonFormatter(OutputFormatter[Any]):
    """Generic JSON formatter for CLI output."""

    def format(
        self,
        data: Any,
        format_type: OutputFormat = OutputFormat.JSON,  # noqa: ARG002
    ) -> str:
        """Format data as JSON.

        Pydantic models are dumped with their camelCase wire aliases.

        Args:
            data: Data to format
            format_type: Output format type (ignored, always JSON)

        Returns:
            JSON string
        """
        if hasattr(data, "model_dump"):
            return json.dumps(
                data.model_dump(by_alias=True, mode="json"), default=str, indent=2
            )
        if isinstance(data, dict | list | tuple):
            return json.dumps(data, default=str, indent=2)
        return json.dumps({"value": data}, default=str, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        error_msg = getattr(error, "message", None) or str(error)
        response = {
            "success": False,
            "error": error_msg,
            "errorType": type(error).__name__ if isinstance(error, Exception) else None,
            "code": code,
        }
        return json.dumps(response, indent=2)
