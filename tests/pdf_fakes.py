"""In-memory stand-ins for pdfplumber documents and OCR engines."""

from __future__ import annotations

import asyncio
from typing import Any

from pdfminer.pdfdocument import PDFPasswordIncorrect

from scriptingest.parser.ocr import OcrResult

TITLE_PAGE = """\



                         THE LONG NIGHT

                           Written by

                          Jane Writer
"""

PAGE_ONE = """\
                                                          1.
INT. KITCHEN - DAY

John enters the kitchen and looks around carefully.

                         JOHN
               Hello there, is anyone home?

                         MARY (O.S.)
               In the garden!
"""

PAGE_TWO = """\
                                                          2.
EXT. GARDEN - NIGHT

Mary waters the roses under the moonlight.

                         MARY
                    (smiling)
               You found me.

                                              CUT TO:
"""

COLD_OPEN = """\
A dark warehouse. Rain hammers the tin roof.

                         JOHN
               Is anyone here?
"""

PDF_PAGES = [TITLE_PAGE, PAGE_ONE, PAGE_TWO]
PDF_BYTES = b"%PDF-1.4\n% fake document body\n"


class FakeImage:
    def __init__(self, text: str):
        self.original = text


class FakePage:
    def __init__(self, text: str):
        self._text = text
        self.extract_calls: list[dict[str, Any]] = []

    def extract_text(self, **kwargs: Any) -> str:
        self.extract_calls.append(kwargs)
        return self._text

    def to_image(self, resolution: int = 72) -> FakeImage:
        return FakeImage(f"page rendered at {resolution} dpi")


class FakePDF:
    def __init__(self, pages: list[FakePage]):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def fake_pdf_opener(pages: list[FakePage], password: str | None = None):
    """Build a ``pdf_open`` replacement serving ``pages``.

    When ``password`` is set the document behaves as encrypted: any other
    password fails the way pdfplumber reports pdfminer errors.
    """

    def pdf_open(_stream, password: str | None = None) -> FakePDF:
        if expected is not None and password != expected:
            raise RuntimeError("Unable to open PDF") from PDFPasswordIncorrect()
        return FakePDF(pages)

    expected = password
    return pdf_open


def broken_pdf_open(_stream, password: str | None = None):  # noqa: ARG001
    raise ValueError("No /Root object! - Is this really a PDF?")


class FakeOcrEngine:
    """OCR engine returning canned text, optionally slowly or with an error."""

    def __init__(
        self,
        text: str,
        page_count: int = 1,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        self.text = text
        self.page_count = page_count
        self.delay = delay
        self.error = error
        self.calls = 0

    async def recognize(self, data: bytes) -> OcrResult:  # noqa: ARG002
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return OcrResult(text=self.text, page_count=self.page_count)
