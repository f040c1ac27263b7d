"""OCR integration for scanned PDFs.

OCR itself is delegated to an engine behind the ``OcrEngine`` protocol. The
bundled ``TesseractOcrEngine`` rasterizes pages with pdfplumber and reads
them with pytesseract, one page at a time in a worker thread, so cancelling
the awaiting task stops recognition before the next page starts. Tesseract
calls are serialized process-wide because pytesseract keeps the binary path
in a module global.
"""

from __future__ import annotations

import asyncio
import io
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import pdfplumber
import pytesseract

from scriptingest.config import get_logger
from scriptingest.models import PdfConfig

logger = get_logger(__name__)

_TESSERACT_LOCK = threading.Lock()


@dataclass(frozen=True)
class OcrResult:
    """Recognized text, pages separated by form feeds."""

    text: str
    page_count: int


@runtime_checkable
class OcrEngine(Protocol):
    """Anything that can turn PDF bytes into text."""

    async def recognize(self, data: bytes) -> OcrResult:
        """Recognize the text of every page of a PDF."""
        ...


class TesseractOcrEngine:
    """OCR engine backed by the Tesseract command line tool."""

    def __init__(
        self,
        language: str = "eng",
        dpi: int = 300,
        tesseract_cmd: str | None = None,
        password: str | None = None,
        pdf_open: Callable[..., Any] = pdfplumber.open,
    ) -> None:
        self.language = language
        self.dpi = dpi
        self.tesseract_cmd = tesseract_cmd
        self.password = password
        self.pdf_open = pdf_open

    @classmethod
    def from_config(
        cls,
        config: PdfConfig,
        password: str | None = None,
        pdf_open: Callable[..., Any] = pdfplumber.open,
    ) -> TesseractOcrEngine:
        """Create an engine from PDF parser configuration."""
        return cls(
            language=config.ocr_language,
            dpi=config.ocr_dpi,
            tesseract_cmd=config.tesseract_cmd,
            password=password,
            pdf_open=pdf_open,
        )

    def _recognize_page(self, page: Any) -> str:
        image = page.to_image(resolution=self.dpi).original
        # pytesseract reads the binary path from a module global
        with _TESSERACT_LOCK:
            previous = pytesseract.pytesseract.tesseract_cmd
            if self.tesseract_cmd:
                pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
            try:
                return pytesseract.image_to_string(image, lang=self.language)
            finally:
                pytesseract.pytesseract.tesseract_cmd = previous

    async def recognize(self, data: bytes) -> OcrResult:
        """Rasterize and recognize each page in turn.

        Args:
            data: PDF bytes

        Returns:
            OcrResult with one form-feed separated chunk per page

        Raises:
            pytesseract.TesseractNotFoundError: If tesseract is not installed
        """
        texts: list[str] = []
        with self.pdf_open(io.BytesIO(data), password=self.password) as pdf:
            for number, page in enumerate(pdf.pages, start=1):
                text = await asyncio.to_thread(self._recognize_page, page)
                logger.debug("OCR page recognized", page=number, chars=len(text))
                texts.append(text)

        return OcrResult(text="\f".join(texts), page_count=len(texts))


def default_engine(
    config: PdfConfig,
    password: str | None = None,
    pdf_open: Callable[..., Any] = pdfplumber.open,
) -> OcrEngine | None:
    """The configured OCR engine, or None when OCR is disabled."""
    if not config.ocr_enabled:
        return None
    return TesseractOcrEngine.from_config(config, password=password, pdf_open=pdf_open)
