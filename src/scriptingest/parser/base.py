"""Helpers shared by the format parsers."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

from scriptingest.config import get_logger
from scriptingest.exceptions import GenericParseError, ScriptIngestError
from scriptingest.models import (
    Element,
    ElementCounts,
    ParserResult,
    QualityIndicators,
    ScriptMetadata,
)

logger = get_logger(__name__)


def decode_text(data: bytes) -> str:
    """Decode script bytes as UTF-8 with universal newlines.

    A byte order mark is dropped and undecodable bytes are replaced.
    """
    text = data.decode("utf-8-sig", errors="replace")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def build_metadata(
    data: bytes,
    filename: str,
    elements: list[Element],
    *,
    rendering_method: str,
    title_page_detected: bool,
    body_pages: int,
    title_page: dict[str, str] | None = None,
    extras: dict[str, Any] | None = None,
    quality: QualityIndicators | None = None,
) -> ScriptMetadata:
    """Assemble script metadata common to every format."""
    counts = ElementCounts.from_elements(elements)
    return ScriptMetadata(
        original_filename=filename,
        file_size=len(data),
        sha256=hashlib.sha256(data).hexdigest(),
        title_page_detected=title_page_detected,
        body_pages=body_pages,
        rendering_method=rendering_method,
        element_counts=counts,
        quality_indicators=quality or QualityIndicators.from_counts(counts),
        title_page=dict(title_page or {}),
        extras=dict(extras or {}),
    )


def failure_from(
    exc: Exception, format_label: str, warnings: list[str] | None = None
) -> ParserResult:
    """Convert an exception raised while parsing into a failed result.

    Known ScriptIngest errors keep their message and class name. Anything
    else is logged with its traceback and reported as a GenericParseError.
    """
    if isinstance(exc, ScriptIngestError):
        logger.info(
            f"{format_label} parsing failed",
            error_type=type(exc).__name__,
            error=exc.message,
        )
        return ParserResult.fail(
            error=exc.message,
            error_type=type(exc).__name__,
            warnings=warnings,
        )

    logger.error(f"Unexpected {format_label} parsing error", exc_info=exc)
    return ParserResult.fail(
        error=f"{format_label} parsing error: {exc}",
        error_type=GenericParseError.__name__,
        warnings=warnings,
    )


def read_script_file(file_path: Path) -> bytes:
    """Read a script from disk, reporting OS errors as GenericParseError."""
    try:
        return file_path.read_bytes()
    except OSError as e:
        raise GenericParseError(
            message=f"Cannot read {file_path.name}: {e.strerror or e}",
            hint="Check that the file exists and is readable.",
            details={"path": str(file_path)},
        ) from e
