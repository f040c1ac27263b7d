"""Screenplay parsers for Fountain, Final Draft and PDF scripts."""

from __future__ import annotations

from .dispatcher import (
    detect_format,
    parse_file,
    parse_script,
    parse_script_sync,
)
from .fdx_parser import FDXParser, parse_fdx
from .fountain_parser import FountainParser, parse_fountain
from .ocr import OcrEngine, OcrResult, TesseractOcrEngine
from .pdf_parser import PDFParser, parse_pdf

__all__ = [
    "FDXParser",
    "FountainParser",
    "OcrEngine",
    "OcrResult",
    "PDFParser",
    "TesseractOcrEngine",
    "detect_format",
    "parse_fdx",
    "parse_file",
    "parse_fountain",
    "parse_pdf",
    "parse_script",
    "parse_script_sync",
]
