"""Character roster extraction."""

from __future__ import annotations

from collections.abc import Iterable

from scriptingest.models import Element, ElementType
from scriptingest.utils.screenplay import ScreenplayUtils


def extract_characters(elements: Iterable[Element]) -> list[str]:
    """Collect distinct speaking characters in order of first appearance.

    The cue's resolved speaker is preferred over its raw text. Names keep
    their authored case; CONT'D, MORE, O.S. and V.O. extensions are removed
    before deduplication.

    Args:
        elements: Parsed elements in document order

    Returns:
        Deduplicated character names
    """
    seen: dict[str, None] = {}
    for element in elements:
        if element.type != ElementType.CHARACTER:
            continue
        name = ScreenplayUtils.strip_dialogue_extensions(
            element.character or element.content
        )
        if name:
            seen.setdefault(name, None)
    return list(seen)
