"""Final Draft XML (.fdx) parser.

Paragraphs are read with ``defusedxml`` so entity expansion and external
resources in untrusted uploads are refused. FDX carries no layout the
parser can measure, so page numbers are approximated from paragraph counts.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from pathlib import Path
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeElementTree

from scriptingest.config import get_logger
from scriptingest.exceptions import FormatValidationError
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
from scriptingest.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

RENDERING_METHOD = "fdx-paragraph-count"

PARAGRAPH_TYPES: dict[str, BlockKind] = {
    "scene heading": BlockKind.SCENE_HEADING,
    "scene_heading": BlockKind.SCENE_HEADING,
    "sceneheading": BlockKind.SCENE_HEADING,
    "character": BlockKind.CHARACTER,
    "dialogue": BlockKind.DIALOGUE,
    "parenthetical": BlockKind.PARENTHETICAL,
    "transition": BlockKind.TRANSITION,
}

TITLE_TAGS = ("Title", "_Title")
AUTHOR_TAGS = ("Author", "WrittenBy", "_Author", "_WrittenBy")
BYLINE_MARKERS = ("written by", "by", "screenplay by", "teleplay by")


def approximation_warning(elements_per_page: int) -> str:
    return (
        "FDX parsing uses a lightweight XML pass; page numbers are approximated "
        f"at {elements_per_page} elements per page"
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find_first(root: Element, tag: str) -> Element | None:
    for node in root.iter():
        if _local_name(node.tag) == tag:
            return node
    return None


def paragraph_text(paragraph: Element) -> str:
    """Plain text of a ``<Paragraph>``, with nested markup dropped.

    Styled runs are separate ``<Text>`` children and are concatenated as-is.
    Paragraphs without ``<Text>`` children fall back to all nested text.
    """
    runs = [child for child in paragraph if _local_name(child.tag) == "Text"]
    if runs:
        return "".join("".join(run.itertext()) for run in runs).strip()
    return "".join(paragraph.itertext()).strip()


def paragraph_kind(paragraph: Element) -> BlockKind:
    """Map a paragraph's Type attribute (or nested ``<Type>``) to a block kind."""
    type_name = paragraph.get("Type")
    if type_name is None:
        for child in paragraph:
            if _local_name(child.tag) == "Type" and child.text:
                type_name = child.text
                break
    return PARAGRAPH_TYPES.get((type_name or "").strip().lower(), BlockKind.ACTION)


def _expand(paragraph: Element) -> Iterator[Element]:
    """Yield a paragraph, or the speeches inside a dual dialogue block."""
    for child in paragraph:
        if _local_name(child.tag) == "DualDialogue":
            yield from (p for p in child if _local_name(p.tag) == "Paragraph")
            return
    yield paragraph


def iter_paragraphs(root: Element) -> Iterator[Element]:
    """Yield body paragraphs in document order.

    Paragraphs come from the top-level ``<Content>``; without one, every
    paragraph outside the title page is used.
    """
    content = next((c for c in root if _local_name(c.tag) == "Content"), None)
    if content is not None:
        for child in content:
            if _local_name(child.tag) == "Paragraph":
                yield from _expand(child)
        return

    title_page = _find_first(root, "TitlePage")
    excluded: set[int] = set()
    if title_page is not None:
        excluded = {
            id(p) for p in title_page.iter() if _local_name(p.tag) == "Paragraph"
        }
    for node in root.iter():
        if _local_name(node.tag) == "Paragraph" and id(node) not in excluded:
            if any(_local_name(c.tag) == "DualDialogue" for c in node):
                continue
            yield node


def _title_page_lines(root: Element) -> list[str]:
    title_page = _find_first(root, "TitlePage")
    if title_page is None:
        return []
    lines = []
    for node in title_page.iter():
        if _local_name(node.tag) == "Paragraph":
            text = paragraph_text(node)
            if text:
                lines.append(text)
    return lines


def _tag_text(root: Element, tags: tuple[str, ...]) -> str | None:
    for tag in tags:
        node = _find_first(root, tag)
        if node is not None:
            text = "".join(node.itertext()).strip()
            if text:
                return text
    return None


def extract_title(root: Element) -> str | None:
    """Title from ``<Title>``/``<_Title>``, else the first title page line."""
    if title := _tag_text(root, TITLE_TAGS):
        return title
    lines = _title_page_lines(root)
    return lines[0] if lines else None


def extract_author(root: Element) -> str | None:
    """Author from author tags, else the title page line after a byline."""
    if author := _tag_text(root, AUTHOR_TAGS):
        return author
    lines = _title_page_lines(root)
    for index, line in enumerate(lines[:-1]):
        if line.strip().lower().rstrip(":") in BYLINE_MARKERS:
            return lines[index + 1]
    return None


class FDXParser:
    """Parser for Final Draft XML (.fdx) screenplay files."""

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or ParserConfig()

    @staticmethod
    def load(data: bytes) -> Element:
        """Validate and parse FDX bytes into an XML tree.

        Raises:
            FormatValidationError: If the bytes are not a Final Draft document
        """
        text = data.decode("utf-8", errors="replace")
        if "<?xml" not in text or "<FinalDraft" not in text:
            raise FormatValidationError(
                message="Invalid FDX file format",
                hint="Export the script from Final Draft as .fdx",
                details={"missing": "XML declaration or <FinalDraft> root"},
            )
        try:
            root = SafeElementTree.fromstring(data)
        except (ParseError, DefusedXmlException) as e:
            raise FormatValidationError(
                message="Invalid FDX file format",
                hint="The XML is malformed or uses forbidden constructs",
                details={"parser_error": str(e)},
            ) from e

        if _local_name(root.tag) != "FinalDraft":
            raise FormatValidationError(
                message="Invalid FDX file format",
                hint="Expected a <FinalDraft> root element",
                details={"root_tag": root.tag},
            )
        return root

    def parse(self, data: bytes, filename: str = "script.fdx") -> ParsedScript:
        """Parse FDX bytes into a ParsedScript.

        Args:
            data: Raw file contents
            filename: Original filename, recorded in metadata

        Returns:
            The parsed script
        """
        root = self.load(data)
        per_page = self.config.layout.fdx_elements_per_page

        builder = ElementBuilder()
        speaker: str | None = None
        line_number = 0

        for paragraph in iter_paragraphs(root):
            line_number += 1
            text = paragraph_text(paragraph)
            if not text:
                continue

            kind = paragraph_kind(paragraph)
            character: str | None = None
            if kind == BlockKind.SCENE_HEADING:
                speaker = None
            elif kind == BlockKind.CHARACTER:
                speaker = ScreenplayUtils.strip_character_extension(text) or None
                character = speaker
            elif kind in (BlockKind.DIALOGUE, BlockKind.PARENTHETICAL):
                character = speaker

            builder.add(
                kind,
                text,
                page_number=1 + len(builder.elements) // per_page,
                line_number=line_number,
                character=character,
                scene_number=paragraph.get("Number"),
            )

        elements = builder.elements
        page_count = max(1, math.ceil(len(elements) / per_page))

        return ParsedScript(
            title=extract_title(root),
            author=extract_author(root),
            format=ScriptFormat.FDX,
            page_count=page_count,
            scenes=elements,
            characters=extract_characters(elements),
            metadata=build_metadata(
                data,
                filename,
                elements,
                rendering_method=RENDERING_METHOD,
                title_page_detected=bool(_title_page_lines(root)),
                body_pages=page_count,
                extras={
                    "paragraph_count": line_number,
                    "demoted_elements": builder.demoted,
                },
            ),
        )

    def parse_file(self, file_path: Path) -> ParsedScript:
        """Parse an FDX file from disk."""
        return self.parse(read_script_file(file_path), file_path.name)


def parse_fdx(
    data: bytes, filename: str, config: ParserConfig | None = None
) -> ParserResult:
    """Parse FDX bytes, reporting failures in the result envelope."""
    config = config or ParserConfig()
    try:
        script = FDXParser(config).parse(data, filename)
    except Exception as e:
        return failure_from(e, "FDX")

    logger.info(
        "Parsed FDX script",
        filename=filename,
        elements=len(script.scenes),
        page_count=script.page_count,
    )
    return ParserResult.ok(
        script,
        warnings=[approximation_warning(config.layout.fdx_elements_per_page)],
    )
