"""Screenplay layout rendering and pagination.

Elements are word-wrapped to their standard column widths and packed onto
pages under a fixed line budget. Every element is followed by one blank
separator line, so an element costs ``len(lines) + 1`` budget units.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field, replace

from scriptingest.exceptions import GenericParseError
from scriptingest.models import BlockKind, LayoutConfig, RenderedElement

PAGE_BREAK_SENTINEL = "==="


@dataclass
class Page:
    """One paginated page."""

    number: int
    elements: list[RenderedElement] = field(default_factory=list)
    lines_used: int = 0


@dataclass
class Pagination:
    """Pages plus the page each input element landed on.

    ``page_numbers`` is parallel to the paginated input; page breaks map to
    None because they never occupy a page.
    """

    pages: list[Page]
    page_numbers: list[int | None]

    @property
    def total_pages(self) -> int:
        return len(self.pages)


def wrap_text(text: str, width: int) -> list[str]:
    """Greedy word wrap that never splits a word.

    Whitespace runs are collapsed first. Empty text yields one empty line so
    every element occupies at least one line.
    """
    normalized = " ".join(text.split())
    if not normalized:
        return [""]
    return textwrap.wrap(
        normalized,
        width=width,
        break_long_words=False,
        break_on_hyphens=False,
    ) or [""]


def render_element(
    element: RenderedElement, config: LayoutConfig | None = None
) -> RenderedElement:
    """Wrap one element's content to its column width."""
    config = config or LayoutConfig()
    if element.kind == BlockKind.PAGE_BREAK:
        lines = [PAGE_BREAK_SENTINEL]
    elif element.kind == BlockKind.CHARACTER:
        lines = [element.content]
    else:
        width = config.width_for(element.kind)
        if width is None:
            raise GenericParseError(
                message=f"No column width for {element.kind.value} elements"
            )
        lines = wrap_text(element.content, width)
    return replace(element, lines=lines)


def render_elements(
    elements: list[RenderedElement], config: LayoutConfig | None = None
) -> list[RenderedElement]:
    """Render every element to screenplay layout, preserving order."""
    config = config or LayoutConfig()
    return [render_element(element, config) for element in elements]


def paginate(
    elements: list[RenderedElement], config: LayoutConfig | None = None
) -> Pagination:
    """Pack rendered elements onto pages.

    A page break flushes the current page when it holds anything; repeated
    breaks never produce empty pages. An element that alone exceeds the
    budget gets a page to itself and is never split.

    Args:
        elements: Rendered elements in document order
        config: Layout configuration supplying the line budget

    Returns:
        Pagination with the pages and per-element page numbers
    """
    config = config or LayoutConfig()
    budget = config.lines_per_page

    pages: list[Page] = []
    page_numbers: list[int | None] = []
    current = Page(number=1)

    def flush() -> None:
        nonlocal current
        pages.append(current)
        current = Page(number=current.number + 1)

    for element in elements:
        if element.kind == BlockKind.PAGE_BREAK:
            if current.elements:
                flush()
            page_numbers.append(None)
            continue

        cost = element.cost
        if current.lines_used + cost > budget and current.elements:
            flush()

        current.elements.append(element)
        current.lines_used += cost
        page_numbers.append(current.number)

    if current.elements:
        pages.append(current)

    return Pagination(pages=pages, page_numbers=page_numbers)


def page_count(pagination: Pagination, has_title_page: bool) -> int:
    """Final page count, counting a title page and never less than one."""
    return max(1, pagination.total_pages + (1 if has_title_page else 0))
