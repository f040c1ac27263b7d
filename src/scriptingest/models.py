"""ScriptIngest data models.

This module defines the canonical, format-independent representation of a
parsed screenplay. Every parser (Fountain, FDX, PDF) produces the same
``ParsedScript`` so downstream consumers never need to know which source
format a script came from.

Public models are immutable and serialize with camelCase aliases
(``model_dump(by_alias=True)``) while exposing snake_case attributes to
Python callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from scriptingest.config.settings import ScriptIngestSettings


class ScriptFormat(str, Enum):
    """Supported screenplay source formats."""

    FDX = "fdx"
    FOUNTAIN = "fountain"
    PDF = "pdf"


class ElementType(str, Enum):
    """Element kinds exposed in the unified element stream."""

    SCENE = "scene"
    ACTION = "action"
    CHARACTER = "character"
    DIALOGUE = "dialogue"
    PARENTHETICAL = "parenthetical"
    TRANSITION = "transition"


class BlockKind(str, Enum):
    """Pipeline-internal element kinds, including layout-only markers."""

    SCENE_HEADING = "scene_heading"
    ACTION = "action"
    CHARACTER = "character"
    DIALOGUE = "dialogue"
    PARENTHETICAL = "parenthetical"
    TRANSITION = "transition"
    PAGE_BREAK = "page_break"

    @property
    def element_type(self) -> ElementType | None:
        """Public element type for this kind, None for layout-only markers."""
        return _BLOCK_TO_ELEMENT[self]


_BLOCK_TO_ELEMENT: dict[BlockKind, ElementType | None] = {
    BlockKind.SCENE_HEADING: ElementType.SCENE,
    BlockKind.ACTION: ElementType.ACTION,
    BlockKind.CHARACTER: ElementType.CHARACTER,
    BlockKind.DIALOGUE: ElementType.DIALOGUE,
    BlockKind.PARENTHETICAL: ElementType.PARENTHETICAL,
    BlockKind.TRANSITION: ElementType.TRANSITION,
    BlockKind.PAGE_BREAK: None,
}


class _Model(BaseModel):
    """Frozen base model with camelCase serialization aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class SlugInfo(_Model):
    """Components of a scene heading (slug line)."""

    int_ext: str | None = None
    location: str | None = None
    time_of_day: str | None = None


class Element(_Model):
    """One entry of the ordered screenplay element stream."""

    id: str
    type: ElementType
    content: str
    page_number: int = Field(ge=1)
    line_number: int = Field(ge=0)
    character: str | None = None
    scene_number: str | None = None
    slug: SlugInfo | None = None


class ElementCounts(_Model):
    """Number of elements per kind."""

    scene_headings: int = 0
    action_blocks: int = 0
    character_cues: int = 0
    dialogue_lines: int = 0
    parentheticals: int = 0
    transitions: int = 0

    @classmethod
    def from_elements(cls, elements: list[Element]) -> ElementCounts:
        """Count elements by type."""
        field_for = {
            ElementType.SCENE: "scene_headings",
            ElementType.ACTION: "action_blocks",
            ElementType.CHARACTER: "character_cues",
            ElementType.DIALOGUE: "dialogue_lines",
            ElementType.PARENTHETICAL: "parentheticals",
            ElementType.TRANSITION: "transitions",
        }
        counts = dict.fromkeys(field_for.values(), 0)
        for element in elements:
            counts[field_for[element.type]] += 1
        return cls(**counts)


class QualityIndicators(_Model):
    """Formatting-quality hints about the parsed document."""

    has_proper_formatting: bool
    has_standard_elements: bool
    has_consistent_margins: bool
    ocr_confidence: float | None = None

    @classmethod
    def from_counts(
        cls,
        counts: ElementCounts,
        *,
        has_consistent_margins: bool = True,
        ocr_confidence: float | None = None,
    ) -> QualityIndicators:
        """Derive quality flags from element counts.

        Formats without physical layout (Fountain, FDX) report consistent
        margins since there is nothing to measure.
        """
        has_scenes = counts.scene_headings > 0
        has_cues = counts.character_cues > 0
        has_dialogue = counts.dialogue_lines > 0
        return cls(
            has_proper_formatting=has_scenes and has_cues and has_dialogue,
            has_standard_elements=has_scenes and (has_cues or has_dialogue),
            has_consistent_margins=has_consistent_margins,
            ocr_confidence=ocr_confidence,
        )


class ScriptMetadata(_Model):
    """Provenance and format-specific facts about a parsed script."""

    parsed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    original_filename: str
    file_size: int = Field(ge=0)
    sha256: str
    title_page_detected: bool = False
    body_pages: int = Field(default=1, ge=0)
    rendering_method: str
    element_counts: ElementCounts = Field(default_factory=ElementCounts)
    quality_indicators: QualityIndicators | None = None
    title_page: dict[str, str] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)


class ParsedScript(_Model):
    """A screenplay normalized into the canonical element stream."""

    title: str | None = None
    author: str | None = None
    format: ScriptFormat
    page_count: int = Field(ge=1)
    scenes: list[Element] = Field(default_factory=list)
    characters: list[str] = Field(default_factory=list)
    metadata: ScriptMetadata

    def elements_of(self, element_type: ElementType) -> list[Element]:
        """Return the elements of a given type, in document order."""
        return [e for e in self.scenes if e.type == element_type]


class ParserResult(_Model):
    """Success/failure envelope returned by every parser entry point."""

    success: bool
    data: ParsedScript | None = None
    error: str | None = None
    error_type: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: ParsedScript, warnings: list[str] | None = None) -> ParserResult:
        """Build a successful result."""
        return cls(success=True, data=data, warnings=list(warnings or []))

    @classmethod
    def fail(
        cls,
        error: str,
        error_type: str | None = None,
        warnings: list[str] | None = None,
    ) -> ParserResult:
        """Build a failed result."""
        return cls(
            success=False,
            error=error,
            error_type=error_type,
            warnings=list(warnings or []),
        )


@dataclass
class RenderedElement:
    """A classified block with its text wrapped to its column width."""

    kind: BlockKind
    content: str
    lines: list[str] = field(default_factory=list)
    character: str | None = None

    @property
    def cost(self) -> int:
        """Line budget consumed on a page, including the trailing blank line."""
        return len(self.lines) + 1


class LayoutConfig(_Model):
    """Page geometry used by the layout renderer and paginator."""

    lines_per_page: int = Field(default=55, ge=1)
    scene_heading_width: int = Field(default=60, ge=1)
    action_width: int = Field(default=60, ge=1)
    transition_width: int = Field(default=60, ge=1)
    dialogue_width: int = Field(default=35, ge=1)
    parenthetical_width: int = Field(default=30, ge=1)
    character_cue_max_length: int = Field(default=40, ge=1)
    title_page_scan_lines: int = Field(default=30, ge=1)
    fdx_elements_per_page: int = Field(default=50, ge=1)

    def width_for(self, kind: BlockKind) -> int | None:
        """Column width for a block kind, None when the kind is never wrapped."""
        widths = {
            BlockKind.SCENE_HEADING: self.scene_heading_width,
            BlockKind.ACTION: self.action_width,
            BlockKind.TRANSITION: self.transition_width,
            BlockKind.DIALOGUE: self.dialogue_width,
            BlockKind.PARENTHETICAL: self.parenthetical_width,
        }
        return widths.get(kind)


class PdfConfig(_Model):
    """Thresholds for the PDF layout-inference heuristics."""

    left_margin: float = 72.0
    min_text_layer_chars: int = 50
    min_text_layer_tokens: int = 10
    min_ocr_chars: int = 10
    header_footer_max_length: int = 50
    header_footer_ratio: float = Field(default=0.6, gt=0.0, le=1.0)
    header_footer_min_occurrences: int = 2
    metadata_scan_lines: int = 30
    ocr_enabled: bool = True
    ocr_timeout: float = Field(default=120.0, gt=0.0)
    ocr_language: str = "eng"
    ocr_dpi: int = 300
    tesseract_cmd: str | None = None


class ParserConfig(_Model):
    """Explicit configuration passed to every parser entry point."""

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    pdf: PdfConfig = Field(default_factory=PdfConfig)

    @classmethod
    def from_settings(cls, settings: ScriptIngestSettings) -> ParserConfig:
        """Build a parser config from application settings."""
        layout = LayoutConfig(
            lines_per_page=settings.lines_per_page,
            scene_heading_width=settings.scene_heading_width,
            action_width=settings.action_width,
            transition_width=settings.transition_width,
            dialogue_width=settings.dialogue_width,
            parenthetical_width=settings.parenthetical_width,
            character_cue_max_length=settings.character_cue_max_length,
            title_page_scan_lines=settings.title_page_scan_lines,
            fdx_elements_per_page=settings.fdx_elements_per_page,
        )
        pdf = PdfConfig(
            header_footer_ratio=settings.pdf_header_footer_ratio,
            ocr_enabled=settings.ocr_enabled,
            ocr_timeout=settings.ocr_timeout,
            ocr_language=settings.ocr_language,
            ocr_dpi=settings.ocr_dpi,
            tesseract_cmd=settings.tesseract_cmd,
        )
        return cls(layout=layout, pdf=pdf)
