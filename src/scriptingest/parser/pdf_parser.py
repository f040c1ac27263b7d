"""Heuristic screenplay parser for PDF exports.

Text comes from the PDF text layer (pdfplumber, layout mode so indentation
survives) or, for scanned documents, from an OCR engine. Glyph coordinates
are discarded by extraction, so every line gets an estimated horizontal
position from its shape and indentation, and elements are classified from
those positions the way a reader scans a printed screenplay page.
"""

from __future__ import annotations

import asyncio
import io
import math
import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect

from scriptingest.config import get_logger
from scriptingest.exceptions import FormatValidationError, OcrRequiredError
from scriptingest.models import (
    BlockKind,
    ParsedScript,
    ParserConfig,
    ParserResult,
    ScriptFormat,
)
from scriptingest.parser.base import build_metadata, failure_from, read_script_file
from scriptingest.parser.characters import extract_characters
from scriptingest.parser.elements import ElementBuilder
from scriptingest.parser.ocr import OcrEngine, default_engine
from scriptingest.parser.pdf_analysis import (
    AUTHOR_PATTERN,
    SCENE_PATTERN,
    TRANSITION_KEYWORDS,
    PdfLine,
    analyze_structure,
    assess_quality,
    extract_inline_title,
    extract_title_author,
    is_transition_text,
    is_upper_line,
    screenplay_format,
)
from scriptingest.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"
PAGE_BREAK_MARKER = "=== PAGE BREAK ==="
OCR_WARNING = "PDF appears scanned — OCR path used (lower reliability)"
OCR_REMEDIATION = (
    "Convert the script to a text-based PDF, or upload it as .fdx or .fountain"
)

# Offsets from the left margin, in points
HEADING_OFFSET = 0.0
TRANSITION_OFFSET = 360.0
CUE_OFFSET = 180.0
PARENTHETICAL_OFFSET = 150.0
INDENTED_OFFSET = 108.0
ACTION_OFFSET_CAP = 24.0
INDENT_THRESHOLD = 8

PAGE_NUMBER_PATTERN = re.compile(r"^(?:page\s+)?\d{1,4}\.?(?:\s+of\s+\d+)?$", re.I)
MORE_PATTERN = re.compile(r"^\(\s*MORE\s*\)$", re.I)
BLANK_RUN_PATTERN = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
SPEAKER_KINDS = (BlockKind.CHARACTER, BlockKind.DIALOGUE, BlockKind.PARENTHETICAL)


@dataclass
class RawLine:
    """An extracted line before position estimation."""

    text: str
    indent: int
    page: int


@dataclass
class ClassifiedLine:
    """A PDF line assigned to a block kind."""

    kind: BlockKind
    content: str
    page: int
    line_number: int
    character: str | None = None


def is_password_error(exc: BaseException) -> bool:
    """True when an extraction failure was caused by PDF encryption.

    pdfplumber wraps pdfminer errors, so the whole chain is inspected.
    """
    pending: list[BaseException] = [exc]
    seen: set[int] = set()
    while pending:
        err = pending.pop()
        if id(err) in seen:
            continue
        seen.add(id(err))
        if isinstance(err, PDFPasswordIncorrect | PDFEncryptionError):
            return True
        linked = (err.__cause__, err.__context__, *err.args)
        pending.extend(e for e in linked if isinstance(e, BaseException))
    return False


def ocr_failure(reason: str, **details: Any) -> OcrRequiredError:
    """Build an OCR error whose message tells the user what to upload instead."""
    return OcrRequiredError(
        message=f"{reason}. {OCR_REMEDIATION}.",
        hint=OCR_REMEDIATION,
        details=details or None,
    )


def has_usable_text(text: str, min_chars: int = 50, min_tokens: int = 10) -> bool:
    """A text layer counts when it has enough characters and words."""
    stripped = text.strip()
    return len(stripped) > min_chars and len(stripped.split()) > min_tokens


def split_pages(text: str, known_pages: int | None = None) -> list[str]:
    """Split extracted text into per-page chunks.

    Form feeds and explicit page-break markers win. Without either, runs of
    two or more blank lines are treated as page gaps unless the document is
    known to be a single page.
    """
    if "\f" in text:
        return text.split("\f")
    if PAGE_BREAK_MARKER in text:
        marker = re.escape(PAGE_BREAK_MARKER)
        return re.split(rf"^[ \t]*{marker}[ \t]*$", text, flags=re.M)
    if known_pages == 1:
        return [text]
    return BLANK_RUN_PATTERN.split(text)


class PDFParser:
    """Parse screenplay PDFs into the canonical element stream."""

    def __init__(
        self,
        config: ParserConfig | None = None,
        *,
        ocr_engine: OcrEngine | None = None,
        pdf_open: Callable[..., Any] = pdfplumber.open,
    ) -> None:
        """Initialize the PDF parser.

        Args:
            config: Parser configuration
            ocr_engine: OCR engine for scanned PDFs; built from config if None
            pdf_open: Callable opening a PDF stream, ``pdfplumber.open`` by default
        """
        self.config = config or ParserConfig()
        self.ocr_engine = ocr_engine
        self.pdf_open = pdf_open

    @staticmethod
    def validate(data: bytes) -> None:
        if not data.startswith(PDF_MAGIC):
            raise FormatValidationError(
                message="Invalid PDF file format",
                hint="The file does not start with the %PDF- signature",
                details={"header": data[:8].decode("latin-1", errors="replace")},
            )

    def extract_text(self, data: bytes, password: str | None = None) -> tuple[str, int]:
        """Extract the text layer, one form-feed separated chunk per page.

        Returns:
            Tuple of (text, page count); empty text when extraction fails

        Raises:
            FormatValidationError: If the PDF is encrypted and the password
                is missing or wrong
        """
        try:
            with self.pdf_open(io.BytesIO(data), password=password) as pdf:
                pages = [page.extract_text(layout=True) or "" for page in pdf.pages]
        except Exception as e:
            if is_password_error(e):
                raise FormatValidationError(
                    message=(
                        "PDF is password-protected. "
                        "Please provide the correct password."
                    ),
                    hint="Pass the document password with --password",
                    details={"password_supplied": password is not None},
                ) from e
            logger.warning("PDF text extraction failed", error=str(e))
            return "", 0

        return "\f".join(pages), len(pages)

    async def recognize(
        self, data: bytes, password: str | None = None
    ) -> tuple[str, int]:
        """Run OCR within the configured timeout.

        Raises:
            OcrRequiredError: If OCR is unavailable, fails, times out or
                yields too little text
        """
        pdf_config = self.config.pdf
        engine = default_engine(pdf_config, password=password, pdf_open=self.pdf_open)
        if engine is not None and self.ocr_engine is not None:
            engine = self.ocr_engine
        if engine is None:
            raise ocr_failure(
                "PDF appears to be image-based and requires OCR",
                ocr_enabled=pdf_config.ocr_enabled,
            )

        logger.warning("No usable text layer, falling back to OCR")
        try:
            result = await asyncio.wait_for(
                engine.recognize(data), timeout=pdf_config.ocr_timeout
            )
        except TimeoutError as e:
            raise ocr_failure(
                f"OCR timed out after {pdf_config.ocr_timeout:g} seconds"
            ) from e
        except Exception as e:
            raise ocr_failure(
                f"OCR processing failed: {e}", engine=type(engine).__name__
            ) from e

        if len(result.text.strip()) < pdf_config.min_ocr_chars:
            raise ocr_failure(
                "OCR produced no usable text", characters=len(result.text.strip())
            )
        return result.text, result.page_count

    def reconstruct_lines(
        self, text: str, known_pages: int | None = None
    ) -> list[RawLine]:
        """Split text into non-blank lines tagged with page and indentation."""
        lines: list[RawLine] = []
        for page_index, chunk in enumerate(split_pages(text, known_pages)):
            for raw in chunk.split("\n"):
                raw = raw.rstrip()
                stripped = raw.strip()
                if not stripped:
                    continue
                indent = len(raw) - len(raw.lstrip())
                lines.append(RawLine(text=stripped, indent=indent, page=page_index + 1))
        return lines

    def remove_headers_footers(self, lines: list[RawLine]) -> list[RawLine]:
        """Drop running headers and footers, page numbers and (MORE) markers.

        The first and last line of each page are candidates. Candidate text
        seen on at least the configured share of pages is removed everywhere.
        """
        pdf_config = self.config.pdf
        by_page: dict[int, list[RawLine]] = {}
        for line in lines:
            by_page.setdefault(line.page, []).append(line)

        occurrences: Counter[str] = Counter()
        boundary_ids: set[int] = set()
        for page_lines in by_page.values():
            first, last = page_lines[0], page_lines[-1]
            boundary = {id(first): first, id(last): last}
            boundary_ids.update(boundary)
            candidates = {
                line.text
                for line in boundary.values()
                if len(line.text) <= pdf_config.header_footer_max_length
            }
            occurrences.update(candidates)

        threshold = max(
            pdf_config.header_footer_min_occurrences,
            math.ceil(len(by_page) * pdf_config.header_footer_ratio - 1e-9),
        )
        repeated = {text for text, count in occurrences.items() if count >= threshold}
        if repeated:
            logger.debug("Stripping running headers/footers", texts=sorted(repeated))

        kept = []
        for line in lines:
            if line.text in repeated:
                continue
            if id(line) in boundary_ids and PAGE_NUMBER_PATTERN.match(line.text):
                continue
            if MORE_PATTERN.match(line.text):
                continue
            kept.append(line)
        return kept

    def position_lines(self, lines: list[RawLine]) -> list[PdfLine]:
        """Estimate each line's horizontal position in points."""
        left = self.config.pdf.left_margin
        indents = [line.indent for line in lines]
        min_indent = min(indents, default=0)
        has_signal = any(i - min_indent >= INDENT_THRESHOLD for i in indents)
        max_chars = self.config.layout.character_cue_max_length

        positioned = []
        for line in lines:
            text = line.text
            offset_cols = line.indent - min_indent
            if SCENE_PATTERN.match(text) and text == text.upper():
                x = left + HEADING_OFFSET
            elif is_transition_text(text):
                x = left + TRANSITION_OFFSET
            elif is_upper_line(text) and len(text) <= max_chars:
                x = left + CUE_OFFSET
            elif text.startswith("(") and text.endswith(")"):
                x = left + PARENTHETICAL_OFFSET
            elif not has_signal or offset_cols >= INDENT_THRESHOLD:
                x = left + INDENTED_OFFSET
            else:
                x = left + min(offset_cols * 6.0, ACTION_OFFSET_CAP)
            positioned.append(PdfLine(text=text, x=x, page=line.page))
        return positioned

    def drop_title_page(
        self, lines: list[PdfLine], title: str | None, author: str | None
    ) -> list[PdfLine]:
        """Remove a leading page that holds nothing but the title block.

        Page one is skipped only when every line on it is the title, the
        author or a credit line. Any other line keeps the page, so a cold
        open before the first slug survives. Single-page documents are left
        alone.
        """
        if not lines:
            return lines
        first_page = lines[0].page
        first = [line for line in lines if line.page == first_page]
        if len(first) == len(lines):
            return lines
        block = {text for text in (title, author) if text}
        if not all(
            line.text in block or AUTHOR_PATTERN.search(line.text) for line in first
        ):
            return lines
        logger.debug("Skipping PDF title page", page=first_page, lines=len(first))
        return lines[len(first) :]

    def classify(self, lines: list[PdfLine]) -> list[ClassifiedLine]:
        """Classify positioned lines, inserting a marker at each page change."""
        max_chars = self.config.layout.character_cue_max_length
        classified: list[ClassifiedLine] = []
        pending: str | None = None
        current_page = lines[0].page if lines else 1

        for index, line in enumerate(lines):
            text = line.text
            line_number = index + 1

            if line.page != current_page:
                classified.append(
                    ClassifiedLine(BlockKind.PAGE_BREAK, "", current_page, line_number)
                )
                current_page = line.page

            upper = is_upper_line(text)
            if SCENE_PATTERN.match(text) and text == text.upper():
                kind = BlockKind.SCENE_HEADING
                pending = None
            elif is_transition_text(text) and (
                line.x > 300 or text in TRANSITION_KEYWORDS
            ):
                kind = BlockKind.TRANSITION
                pending = None
            elif upper and len(text) <= max_chars and 200 < line.x < 350:
                kind = BlockKind.CHARACTER
                pending = ScreenplayUtils.strip_dialogue_extensions(text) or None
            elif text.startswith("(") and text.endswith(")") and 150 < line.x < 250:
                kind = BlockKind.PARENTHETICAL
            elif 100 < line.x < 300 and pending:
                kind = BlockKind.DIALOGUE
            else:
                kind = BlockKind.ACTION
                pending = None

            character = pending if kind in SPEAKER_KINDS else None
            content = pending if kind == BlockKind.CHARACTER and pending else text
            classified.append(
                ClassifiedLine(kind, content, line.page, line_number, character)
            )

        return classified

    async def parse(
        self, data: bytes, filename: str = "script.pdf", password: str | None = None
    ) -> tuple[ParsedScript, list[str]]:
        """Parse PDF bytes.

        Args:
            data: Raw file contents
            filename: Original filename, recorded in metadata
            password: Password for encrypted PDFs

        Returns:
            Tuple of (parsed script, warnings)
        """
        self.validate(data)
        pdf_config = self.config.pdf
        warnings: list[str] = []

        text, page_count = self.extract_text(data, password)
        has_text_layer = has_usable_text(
            text, pdf_config.min_text_layer_chars, pdf_config.min_text_layer_tokens
        )
        if not has_text_layer:
            text, page_count = await self.recognize(data, password)
            warnings.append(OCR_WARNING)

        title, author = extract_title_author(text, pdf_config.metadata_scan_lines)
        title = title or extract_inline_title(text)
        title_page_detected = bool(title or author)

        raw_lines = self.reconstruct_lines(text, page_count or None)
        page_count = max(1, page_count, raw_lines[-1].page if raw_lines else 1)
        lines = self.position_lines(self.remove_headers_footers(raw_lines))
        if title_page_detected:
            lines = self.drop_title_page(lines, title, author)

        builder = ElementBuilder()
        for item in self.classify(lines):
            builder.add(
                item.kind,
                item.content,
                page_number=item.page,
                line_number=item.line_number,
                character=item.character,
            )
        elements = builder.elements

        script = ParsedScript(
            title=title,
            author=author,
            format=ScriptFormat.PDF,
            page_count=page_count,
            scenes=elements,
            characters=extract_characters(elements),
            metadata=build_metadata(
                data,
                filename,
                elements,
                rendering_method=(
                    "pdf-text-extraction" if has_text_layer else "pdf-ocr"
                ),
                title_page_detected=title_page_detected,
                body_pages=page_count - (1 if title_page_detected else 0),
                quality=assess_quality(elements, lines, has_text_layer),
                extras={
                    "screenplay_format": screenplay_format(lines),
                    "structural_analysis": analyze_structure(elements),
                    "has_text_layer": has_text_layer,
                },
            ),
        )
        return script, warnings

    async def parse_file(
        self, file_path: Path, password: str | None = None
    ) -> ParsedScript:
        """Parse a PDF file from disk."""
        script, _ = await self.parse(
            read_script_file(file_path), file_path.name, password
        )
        return script


async def parse_pdf(
    data: bytes,
    filename: str,
    config: ParserConfig | None = None,
    *,
    ocr_engine: OcrEngine | None = None,
    password: str | None = None,
    pdf_open: Callable[..., Any] = pdfplumber.open,
) -> ParserResult:
    """Parse PDF bytes, reporting failures in the result envelope."""
    parser = PDFParser(config, ocr_engine=ocr_engine, pdf_open=pdf_open)
    try:
        script, warnings = await parser.parse(data, filename, password)
    except Exception as e:
        return failure_from(e, "PDF")

    logger.info(
        "Parsed PDF script",
        filename=filename,
        elements=len(script.scenes),
        page_count=script.page_count,
        ocr=bool(warnings),
    )
    return ParserResult.ok(script, warnings=warnings)
