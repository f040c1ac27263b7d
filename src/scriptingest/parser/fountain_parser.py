"""Fountain screenplay format parser."""

from __future__ import annotations

from pathlib import Path

from scriptingest.config import get_logger
from scriptingest.models import (
    BlockKind,
    ParsedScript,
    ParserConfig,
    ParserResult,
    RenderedElement,
    ScriptFormat,
)
from scriptingest.parser.base import (
    build_metadata,
    decode_text,
    failure_from,
    read_script_file,
)
from scriptingest.parser.characters import extract_characters
from scriptingest.parser.elements import convert_rendered
from scriptingest.parser.layout import page_count, paginate, render_elements
from scriptingest.parser.rules import (
    LineContext,
    is_forced_action,
    is_forced_transition,
    is_non_printing,
    is_parenthetical,
    match_rule,
    starts_structural_element,
)
from scriptingest.parser.title_page import (
    detect_title_page,
    extract_extras,
    extract_title_author,
)
from scriptingest.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

RENDERING_METHOD = "fountain-layout"


class FountainParser:
    """Parse Fountain text into the canonical element stream."""

    def __init__(self, config: ParserConfig | None = None) -> None:
        """Initialize the fountain parser.

        Args:
            config: Parser configuration; defaults to standard page geometry
        """
        self.config = config or ParserConfig()

    def tokenize(self, lines: list[str]) -> list[RenderedElement]:
        """Classify body lines into blocks.

        Args:
            lines: Body lines following any title page

        Returns:
            Unrendered blocks in document order
        """
        layout = self.config.layout
        blocks: list[RenderedElement] = []
        i = 0

        while i < len(lines):
            ctx = LineContext.at(lines, i, layout)
            rule = match_rule(ctx)
            line = ctx.line

            if rule is not None and rule.kind is None:
                i += 1
                continue

            if rule is not None and rule.kind == BlockKind.PAGE_BREAK:
                blocks.append(RenderedElement(BlockKind.PAGE_BREAK, line))
                i += 1
                continue

            if rule is not None and rule.kind == BlockKind.SCENE_HEADING:
                blocks.append(RenderedElement(BlockKind.SCENE_HEADING, line))
                i += 1
                continue

            if rule is not None and rule.kind == BlockKind.TRANSITION:
                content = line[1:].strip() if is_forced_transition(line) else line
                blocks.append(RenderedElement(BlockKind.TRANSITION, content))
                i += 1
                continue

            if rule is not None and rule.kind == BlockKind.CHARACTER:
                i = self._consume_dialogue(lines, i, blocks)
                continue

            i = self._consume_action(lines, i, blocks)

        return blocks

    def _consume_dialogue(
        self, lines: list[str], start: int, blocks: list[RenderedElement]
    ) -> int:
        """Emit a cue and the dialogue under it, returning the next index."""
        cue = lines[start].strip()
        if cue.startswith("@"):
            cue = cue[1:]
        name = ScreenplayUtils.strip_character_extension(cue)
        blocks.append(RenderedElement(BlockKind.CHARACTER, name, character=name))

        i = start + 1
        while i < len(lines):
            line = lines[i].strip()
            if not line:
                i += 1
                break
            if is_non_printing(line):
                i += 1
                continue
            ctx = LineContext.at(lines, i, self.config.layout)
            if starts_structural_element(ctx):
                break
            if is_parenthetical(line):
                kind = BlockKind.PARENTHETICAL
            else:
                kind = BlockKind.DIALOGUE
            blocks.append(RenderedElement(kind, line, character=name))
            i += 1
        return i

    def _consume_action(
        self, lines: list[str], start: int, blocks: list[RenderedElement]
    ) -> int:
        """Join consecutive plain lines into one action block."""
        action_lines: list[str] = []
        i = start
        while i < len(lines):
            ctx = LineContext.at(lines, i, self.config.layout)
            line = ctx.line
            if not line:
                i += 1
                break
            if action_lines and starts_structural_element(ctx):
                break
            i += 1
            if is_non_printing(line):
                continue
            if is_forced_action(line):
                line = line[1:].strip()
            if line:
                action_lines.append(line)

        if action_lines:
            blocks.append(RenderedElement(BlockKind.ACTION, " ".join(action_lines)))
        return i

    def parse(self, data: bytes, filename: str = "script.fountain") -> ParsedScript:
        """Parse Fountain bytes into a ParsedScript.

        Args:
            data: Raw file contents
            filename: Original filename, recorded in metadata

        Returns:
            The parsed script
        """
        text = ScreenplayUtils.strip_boneyard(decode_text(data))
        lines = text.split("\n")

        title_page = detect_title_page(lines, self.config.layout)
        blocks = self.tokenize(lines[title_page.body_start :])
        rendered = render_elements(blocks, self.config.layout)
        pagination = paginate(rendered, self.config.layout)

        elements = convert_rendered(rendered, pagination)
        title, author = extract_title_author(title_page.metadata)

        logger.debug(
            "Fountain layout computed",
            title_page=title_page.detected,
            blocks=len(blocks),
            body_pages=pagination.total_pages,
        )

        return ParsedScript(
            title=title,
            author=author,
            format=ScriptFormat.FOUNTAIN,
            page_count=page_count(pagination, title_page.detected),
            scenes=elements,
            characters=extract_characters(elements),
            metadata=build_metadata(
                data,
                filename,
                elements,
                rendering_method=RENDERING_METHOD,
                title_page_detected=title_page.detected,
                body_pages=pagination.total_pages,
                title_page=title_page.metadata,
                extras=extract_extras(title_page.metadata),
            ),
        )

    def parse_file(self, file_path: Path) -> ParsedScript:
        """Parse a Fountain file from disk."""
        logger.debug(f"Parsing fountain file: {file_path}")
        return self.parse(read_script_file(file_path), file_path.name)


def parse_fountain(
    data: bytes, filename: str, config: ParserConfig | None = None
) -> ParserResult:
    """Parse Fountain bytes, reporting failures in the result envelope."""
    try:
        script = FountainParser(config).parse(data, filename)
    except Exception as e:
        return failure_from(e, "Fountain")

    logger.info(
        "Parsed Fountain script",
        filename=filename,
        elements=len(script.scenes),
        page_count=script.page_count,
    )
    return ParserResult.ok(script)
