"""Conversion of classified blocks into the canonical element stream."""

from __future__ import annotations

from scriptingest.config import get_logger
from scriptingest.exceptions import GenericParseError
from scriptingest.models import BlockKind, Element, ElementType, RenderedElement
from scriptingest.parser.layout import Pagination
from scriptingest.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

ID_SUFFIXES: dict[BlockKind, str] = {
    BlockKind.CHARACTER: "char",
    BlockKind.DIALOGUE: "dlg",
    BlockKind.PARENTHETICAL: "par",
    BlockKind.TRANSITION: "trn",
    BlockKind.ACTION: "act",
}

_SPEAKER_KINDS = (BlockKind.DIALOGUE, BlockKind.PARENTHETICAL)


class ElementBuilder:
    """Accumulate elements in document order with stable ids.

    Scene headings are numbered ``scene-1``, ``scene-2``...; every other
    element is keyed by the current scene and its line position. Dialogue
    and parentheticals without a speaker are demoted to action so that
    every speaking element names its character.
    """

    def __init__(self) -> None:
        self.elements: list[Element] = []
        self.scene_counter = 0
        self.demoted = 0

    def add(
        self,
        kind: BlockKind,
        content: str,
        *,
        page_number: int,
        line_number: int,
        character: str | None = None,
        scene_number: str | None = None,
    ) -> Element | None:
        """Append an element for a classified block.

        Page breaks carry no content and are skipped.

        Returns:
            The appended element, or None for page breaks
        """
        if kind == BlockKind.PAGE_BREAK:
            return None

        if kind in _SPEAKER_KINDS and not character:
            logger.warning(
                "Demoting speakerless element to action",
                kind=kind.value,
                line_number=line_number,
            )
            self.demoted += 1
            kind = BlockKind.ACTION

        if kind == BlockKind.SCENE_HEADING:
            element = self._scene_heading(
                content, page_number, line_number, scene_number
            )
        else:
            if kind == BlockKind.CHARACTER:
                character = character or content
            elif kind not in _SPEAKER_KINDS:
                character = None
            element_type = kind.element_type
            if element_type is None:
                raise GenericParseError(
                    message=f"No element type for {kind.value} blocks",
                    details={"line_number": line_number},
                )
            element = Element(
                id=f"sc-{self.scene_counter}-{line_number}-{ID_SUFFIXES[kind]}",
                type=element_type,
                content=content,
                page_number=page_number,
                line_number=line_number,
                character=character,
            )

        self.elements.append(element)
        return element

    def _scene_heading(
        self,
        content: str,
        page_number: int,
        line_number: int,
        scene_number: str | None,
    ) -> Element:
        self.scene_counter += 1
        number = ScreenplayUtils.extract_scene_number(content) or scene_number
        heading = ScreenplayUtils.strip_scene_numbers(content)
        return Element(
            id=f"scene-{self.scene_counter}",
            type=ElementType.SCENE,
            content=heading,
            page_number=page_number,
            line_number=line_number,
            scene_number=number,
            slug=ScreenplayUtils.parse_scene_heading(heading),
        )


def convert_rendered(
    rendered: list[RenderedElement], pagination: Pagination
) -> list[Element]:
    """Flatten paginated Fountain elements into the element stream.

    Line numbers start at 1 and advance by each element's rendered height
    plus its separator line, page breaks included.
    """
    builder = ElementBuilder()
    line_number = 1
    last_page = 1

    for element, page in zip(rendered, pagination.page_numbers, strict=True):
        page_number = page if page is not None else last_page
        builder.add(
            element.kind,
            element.content,
            page_number=page_number,
            line_number=line_number,
            character=element.character,
        )
        last_page = page_number
        line_number += len(element.lines) + 1

    return builder.elements
