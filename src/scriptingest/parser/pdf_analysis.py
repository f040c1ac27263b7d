"""Metadata, structure and formatting-quality analysis for PDF scripts.

Glyph coordinates are not available after text extraction, so line geometry
is approximated: each line sits at its estimated x position, is 12pt high and
6pt per character wide on a 612pt (US Letter) page.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any

from scriptingest.models import Element, ElementType, QualityIndicators

PAGE_WIDTH = 612.0
CHAR_WIDTH = 6.0
LINE_HEIGHT = 12.0

SCENE_PATTERN = re.compile(
    r"^\s*(?:\d+[A-Z]?\.?\s+)?(?:INT|EXT|I/E|INT/EXT|EST)\b", re.IGNORECASE
)
TRANSITION_PATTERN = re.compile(r"^[A-Z0-9 \-._]+ TO:\s*$")
UPPER_PATTERN = re.compile(r"^[A-Z0-9 @#\-.()'\"’]+$")
TRANSITION_KEYWORDS = frozenset(
    {
        "FADE OUT.",
        "FADE IN.",
        "FADE IN:",
        "FADE TO BLACK.",
        "CUT TO BLACK.",
        "CUT TO:",
        "SMASH CUT:",
        "SMASH CUT TO:",
        "DISSOLVE TO:",
        "WIPE TO:",
    }
)
AUTHOR_PATTERN = re.compile(r"(?:written\s+by|^by\b|author:)\s*(.*)", re.IGNORECASE)


@dataclass(frozen=True)
class PdfLine:
    """A reconstructed PDF text line with its estimated position."""

    text: str
    x: float
    page: int

    @property
    def width(self) -> float:
        return len(self.text) * CHAR_WIDTH

    @property
    def height(self) -> float:
        return LINE_HEIGHT


def is_upper_line(text: str) -> bool:
    """All-caps line built from cue-like characters and holding a letter."""
    return bool(UPPER_PATTERN.match(text)) and any(c.isalpha() for c in text)


def is_transition_text(text: str) -> bool:
    """Upper-case "... TO:" line or a known fade or cut keyword."""
    if text != text.upper():
        return False
    return bool(TRANSITION_PATTERN.match(text)) or text in TRANSITION_KEYWORDS


def _title_candidate(line: str, max_length: int) -> bool:
    return (
        3 < len(line) < max_length
        and is_upper_line(line)
        and not SCENE_PATTERN.match(line)
        and "FADE" not in line
    )


def extract_title_author(
    text: str, scan_lines: int = 30
) -> tuple[str | None, str | None]:
    """Best-effort title and author from the top of the document.

    The title is the first short all-caps line that is neither a slug nor a
    fade. The author follows "written by", "by" or "author:", or sits on the
    line after a bare "Written by".
    """
    lines = [line.strip() for line in text.split("\n")[:scan_lines]]
    lines = [line for line in lines if line and line != "\f"]

    title: str | None = None
    author: str | None = None
    for index, line in enumerate(lines):
        if title is None and _title_candidate(line, 100) and len(line.split()) <= 8:
            title = line
        if author is None and (match := AUTHOR_PATTERN.search(line)):
            name = match.group(1).strip()
            if not name and index + 1 < len(lines):
                name = lines[index + 1]
            author = name or None

    return title, author


def extract_inline_title(text: str) -> str | None:
    """Fallback title from the first ten lines."""
    for line in text.split("\n")[:10]:
        clean = line.strip()
        if _title_candidate(clean, 80):
            return clean
    return None


def analyze_margins(lines: list[PdfLine]) -> dict[str, float]:
    """Approximate page margins in points."""
    if not lines:
        return {"left": 72.0, "right": 72.0, "top": 72.0, "bottom": 72.0}
    lefts = [line.x for line in lines if line.x > 0]
    right_edge = max(line.x + line.width for line in lines)
    return {
        "left": min(lefts) if lefts else 72.0,
        "right": (PAGE_WIDTH - right_edge) or 72.0,
        "top": 72.0,
        "bottom": 72.0,
    }


def analyze_font(lines: list[PdfLine]) -> dict[str, Any]:
    """Guess the font from average character width and line height."""
    if lines:
        widths = [line.width / max(1, len(line.text)) for line in lines]
        char_width = sum(widths) / len(widths)
        font_size = round(sum(line.height for line in lines) / len(lines))
    else:
        char_width = CHAR_WIDTH
        font_size = 12

    likely_courier = 6 <= char_width <= 8
    return {
        "detected_font": "Courier" if likely_courier else "Unknown",
        "average_font_size": font_size,
        "likely_courier": likely_courier,
        "proper_spacing": 11 <= font_size <= 13,
    }


def is_consistent_margins(margins: dict[str, float]) -> bool:
    return margins["left"] > 50 and margins["right"] > 30


def is_standard_format(margins: dict[str, float], font: dict[str, Any]) -> bool:
    return (
        100 <= margins["left"] <= 120
        and 60 <= margins["right"] <= 90
        and font["likely_courier"]
        and font["proper_spacing"]
    )


def screenplay_format(lines: list[PdfLine]) -> dict[str, Any]:
    """Summarize the physical layout of the page."""
    margins = analyze_margins(lines)
    font = analyze_font(lines)
    return {
        "font_family": font["detected_font"],
        "font_size": font["average_font_size"],
        "margins": margins,
        "page_layout": {
            "standard_format": is_standard_format(margins, font),
            "courier_font": font["likely_courier"],
            "proper_spacing": font["proper_spacing"],
        },
    }


def analyze_structure(elements: list[Element]) -> dict[str, Any]:
    """Structural analytics over the classified element stream.

    Runtime is a rough proxy: one minute per fifty scenes, inflated by 20%
    for dialogue-heavy scripts.
    """
    counts = Counter(element.type for element in elements)
    headings = counts[ElementType.SCENE]
    dialogue = counts[ElementType.DIALOGUE]
    action = counts[ElementType.ACTION]

    ratio = dialogue / (dialogue + action) if dialogue + action else 0.0
    runtime = math.floor(max(1, headings) / 50 * (1.2 if ratio > 0.6 else 1.0) + 0.5)

    distribution = Counter(
        element.character
        for element in elements
        if element.type == ElementType.DIALOGUE and element.character
    )
    top_character = distribution.most_common(1)[0][0] if distribution else None

    return {
        "estimated_runtime": runtime,
        "average_scene_length": action / headings if headings else float(action),
        "dialogue_to_action_ratio": ratio,
        "character_distribution": dict(distribution),
        "top_character": top_character,
    }


def assess_quality(
    elements: list[Element], lines: list[PdfLine], has_text_layer: bool
) -> QualityIndicators:
    """Formatting-quality indicators for a PDF script."""
    present = {element.type for element in elements}
    has_headings = ElementType.SCENE in present
    has_cues = ElementType.CHARACTER in present
    has_dialogue = ElementType.DIALOGUE in present
    has_action = ElementType.ACTION in present

    return QualityIndicators(
        has_proper_formatting=has_headings and has_cues and has_dialogue and has_action,
        has_standard_elements=has_headings and (has_cues or has_dialogue),
        has_consistent_margins=is_consistent_margins(analyze_margins(lines)),
        ocr_confidence=1.0 if has_text_layer else 0.7,
    )
