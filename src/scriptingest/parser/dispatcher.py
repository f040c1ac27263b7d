"""Select a screenplay parser from the file extension."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pdfplumber

from scriptingest.config import get_logger
from scriptingest.exceptions import GenericParseError, UnsupportedFormatError
from scriptingest.models import ParserConfig, ParserResult, ScriptFormat
from scriptingest.parser.base import failure_from, read_script_file
from scriptingest.parser.fdx_parser import parse_fdx
from scriptingest.parser.fountain_parser import parse_fountain
from scriptingest.parser.ocr import OcrEngine
from scriptingest.parser.pdf_parser import parse_pdf

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = tuple(fmt.value for fmt in ScriptFormat)


def detect_format(filename: str) -> ScriptFormat | None:
    """Map a filename to its script format by extension, case-insensitively."""
    extension = Path(filename).suffix.lower().lstrip(".")
    try:
        return ScriptFormat(extension)
    except ValueError:
        return None


def unsupported(filename: str) -> ParserResult:
    extension = Path(filename).suffix.lower().lstrip(".")
    error = UnsupportedFormatError(
        message=f"Unsupported file format: {extension}",
        hint=f"Supported extensions: {', '.join(SUPPORTED_EXTENSIONS)}",
    )
    logger.info("Rejected unsupported file", filename=filename, extension=extension)
    return ParserResult.fail(error.message, type(error).__name__)


async def parse_script(
    data: bytes,
    filename: str,
    mime_type: str | None = None,
    *,
    config: ParserConfig | None = None,
    ocr_engine: OcrEngine | None = None,
    password: str | None = None,
    pdf_open: Callable[..., Any] = pdfplumber.open,
) -> ParserResult:
    """Parse a screenplay buffer with the parser its extension selects.

    The MIME type is advisory and never overrides the extension. Files with
    an unknown extension are rejected without inspecting their bytes.

    Args:
        data: Raw file contents
        filename: Original filename; its extension picks the parser
        mime_type: Declared content type, logged only
        config: Parser configuration, defaults when None
        ocr_engine: OCR engine for scanned PDFs
        password: Password for encrypted PDFs
        pdf_open: Callable opening a PDF stream

    Returns:
        ParserResult with the parsed script or the failure
    """
    script_format = detect_format(filename)
    if script_format is None:
        return unsupported(filename)

    config = config or ParserConfig()
    logger.info(
        "Parsing script",
        filename=filename,
        format=script_format.value,
        mime_type=mime_type,
        size=len(data),
    )

    if script_format == ScriptFormat.FOUNTAIN:
        return parse_fountain(data, filename, config)
    if script_format == ScriptFormat.FDX:
        return parse_fdx(data, filename, config)
    return await parse_pdf(
        data,
        filename,
        config,
        ocr_engine=ocr_engine,
        password=password,
        pdf_open=pdf_open,
    )


def parse_script_sync(
    data: bytes,
    filename: str,
    mime_type: str | None = None,
    **kwargs: Any,
) -> ParserResult:
    """Blocking wrapper around :func:`parse_script`.

    Must not be called from a running event loop.
    """
    return asyncio.run(parse_script(data, filename, mime_type, **kwargs))


async def parse_file(path: Path | str, **kwargs: Any) -> ParserResult:
    """Read a script from disk and parse it."""
    path = Path(path)
    if detect_format(path.name) is None:
        return unsupported(path.name)
    try:
        data = await asyncio.to_thread(read_script_file, path)
    except GenericParseError as e:
        return failure_from(e, "File")
    return await parse_script(data, path.name, **kwargs)
