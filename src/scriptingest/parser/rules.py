"""Prioritized line-classification rules for Fountain text.

Each rule is a named predicate over a line and its lookahead. Rules are
tried in the order of ``RULES``; the first match wins and anything no rule
claims is action. Cue and action *consumption* (gathering dialogue under a
cue, joining action lines) lives in the Fountain tokenizer; the rules only
decide what kind of element a line starts.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from scriptingest.models import BlockKind, LayoutConfig

PAGE_BREAK_PATTERN = re.compile(r"^={3,}$")
SCENE_PREFIX_PATTERN = re.compile(
    r"^(?:INT\./EXT\.|INT/EXT\.|INT\.|EXT\.|I/E\.|EST\.|INT |EXT )",
    re.IGNORECASE,
)
FORCED_HEADING_PATTERN = re.compile(r"^\.[^.]")
CUE_CHARSET_PATTERN = re.compile(r"^[\w\s.'’\-#&/(),^]+$")
LETTER_PATTERN = re.compile(r"[^\W\d_]")

# All-caps lines that read like cues but are stage directions
ACTION_PHRASES = frozenset(
    {
        "BACK TO SCENE",
        "BLACK.",
        "BLACKOUT.",
        "CONTINUED",
        "CUT TO BLACK.",
        "END FLASHBACK",
        "END MONTAGE",
        "END OF ACT",
        "END OF FLASHBACK",
        "FADE IN",
        "FADE OUT",
        "FADE OUT.",
        "FADE TO BLACK.",
        "INTERCUT",
        "MONTAGE",
        "SERIES OF SHOTS",
        "THE END",
        "THE END.",
    }
)


@dataclass(frozen=True)
class LineContext:
    """A line under classification together with its immediate lookahead."""

    line: str
    next_line: str | None
    config: LayoutConfig

    @classmethod
    def at(
        cls, lines: Sequence[str], index: int, config: LayoutConfig
    ) -> LineContext:
        """Build the context for ``lines[index]``."""
        next_line = lines[index + 1].strip() if index + 1 < len(lines) else None
        return cls(line=lines[index].strip(), next_line=next_line, config=config)


@dataclass(frozen=True)
class Rule:
    """A named classification predicate.

    ``kind`` is None for rules that mark non-printing lines.
    """

    name: str
    kind: BlockKind | None
    matches: Callable[[LineContext], bool]


def is_upper(text: str) -> bool:
    """True when the text has a letter and no lower-case characters."""
    return text == text.upper() and LETTER_PATTERN.search(text) is not None


def is_non_printing(line: str) -> bool:
    """Blank lines, notes, boneyard openers, sections and synopses."""
    if not line:
        return True
    if line.startswith(("[[", "/*")):
        return True
    if line.startswith("#"):
        return True
    return line.startswith("=") and not PAGE_BREAK_PATTERN.match(line)


def is_page_break(line: str) -> bool:
    return PAGE_BREAK_PATTERN.match(line) is not None


def is_forced_action(line: str) -> bool:
    return line.startswith("!")


def is_forced_heading(line: str) -> bool:
    return FORCED_HEADING_PATTERN.match(line) is not None


def is_scene_heading(line: str) -> bool:
    """Forced ``.HEADING`` or a line opening with an INT/EXT style prefix."""
    if is_forced_heading(line):
        return True
    return SCENE_PREFIX_PATTERN.match(line) is not None


def is_forced_transition(line: str) -> bool:
    """``> CUT TO:`` forces a transition; ``> centered <`` does not."""
    return line.startswith(">") and not line.endswith("<")


def is_transition(line: str) -> bool:
    if is_forced_transition(line):
        return True
    return is_upper(line) and line.endswith(" TO:")


def is_parenthetical(line: str) -> bool:
    return len(line) >= 2 and line.startswith("(") and line.endswith(")")


def is_character_cue(
    line: str, next_line: str | None, config: LayoutConfig | None = None
) -> bool:
    """Decide whether a line names the next speaker.

    A cue must be an all-caps name followed by a non-blank line that reads
    as dialogue: either a parenthetical or something not in all caps. A
    leading ``@`` forces a cue regardless of case.
    """
    config = config or LayoutConfig()
    if not next_line:
        return False

    if line.startswith("@"):
        return len(line) > 1

    if not is_upper(line) or len(line) > config.character_cue_max_length:
        return False
    if is_scene_heading(line) or is_transition(line):
        return False
    if not CUE_CHARSET_PATTERN.match(line):
        return False
    if line in ACTION_PHRASES or line.endswith(":"):
        return False

    return is_parenthetical(next_line) or not is_upper(next_line)


RULES: tuple[Rule, ...] = (
    Rule("non_printing", None, lambda ctx: is_non_printing(ctx.line)),
    Rule("page_break", BlockKind.PAGE_BREAK, lambda ctx: is_page_break(ctx.line)),
    Rule("forced_action", BlockKind.ACTION, lambda ctx: is_forced_action(ctx.line)),
    Rule(
        "scene_heading",
        BlockKind.SCENE_HEADING,
        lambda ctx: is_scene_heading(ctx.line),
    ),
    Rule("transition", BlockKind.TRANSITION, lambda ctx: is_transition(ctx.line)),
    Rule(
        "character_cue",
        BlockKind.CHARACTER,
        lambda ctx: is_character_cue(ctx.line, ctx.next_line, ctx.config),
    ),
)


def match_rule(ctx: LineContext) -> Rule | None:
    """Return the first rule claiming the line, or None for plain action."""
    for rule in RULES:
        if rule.matches(ctx):
            return rule
    return None


def starts_structural_element(ctx: LineContext) -> bool:
    """True when the line opens an element that ends an action or cue run."""
    rule = match_rule(ctx)
    return rule is not None and rule.kind not in (None, BlockKind.ACTION)
