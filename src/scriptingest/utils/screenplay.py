"""Screenplay-specific utility functions."""

from __future__ import annotations

import re

from scriptingest.models import SlugInfo


class ScreenplayUtils:
    """Utility functions for screenplay text processing."""

    # Boneyard comments and notes, possibly spanning lines
    BONEYARD_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
    NOTE_PATTERN = re.compile(r"\[\[.*?\]\]", re.DOTALL)

    # Fountain scene number marker, e.g. "INT. HOUSE - DAY #12A#"
    SCENE_NUMBER_MARKER = re.compile(r"\s*#([\w.\-]+)#\s*$")
    LEADING_SCENE_NUMBER = re.compile(r"^(\d+[A-Z]?)\.?\s+")
    TRAILING_SCENE_NUMBER = re.compile(r"\s+(\d+[A-Z]?)$")

    CHARACTER_EXTENSION = re.compile(r"\s*\([^()]*\)\s*$")
    DIALOGUE_EXTENSIONS = re.compile(
        r"\s*\((?:CONT'D|CONT’D|MORE|O\.S\.|V\.O\.)\)\s*$", re.IGNORECASE
    )

    # Longest prefixes first so "INT./EXT." wins over "INT."
    _SLUG_PREFIXES: tuple[tuple[str, str], ...] = (
        ("INT./EXT.", "INT/EXT"),
        ("INT/EXT.", "INT/EXT"),
        ("EXT./INT.", "INT/EXT"),
        ("INT/EXT ", "INT/EXT"),
        ("I/E.", "INT/EXT"),
        ("I/E ", "INT/EXT"),
        ("INT.", "INT"),
        ("EXT.", "EXT"),
        ("EST.", "EXT"),
        ("INT ", "INT"),
        ("EXT ", "EXT"),
        ("EST ", "EXT"),
    )

    _TIME_INDICATORS = (
        "MOMENTS LATER",
        "CONTINUOUS",
        "AFTERNOON",
        "MORNING",
        "EVENING",
        "SUNRISE",
        "SUNSET",
        "NIGHT",
        "LATER",
        "DAWN",
        "DUSK",
        "NOON",
        "DAY",
    )

    @staticmethod
    def strip_boneyard(text: str) -> str:
        """Remove boneyard comments and notes, keeping line structure.

        Lines that held nothing but comment text are dropped entirely so
        they never count as blank or body lines.

        Args:
            text: Raw Fountain text

        Returns:
            Text with comments removed
        """
        marker = "\ufdd0"

        def _blank(match: re.Match[str]) -> str:
            return marker + ("\n" + marker) * match.group(0).count("\n")

        stripped = ScreenplayUtils.BONEYARD_PATTERN.sub(_blank, text)
        stripped = ScreenplayUtils.NOTE_PATTERN.sub(_blank, stripped)

        lines = []
        for line in stripped.split("\n"):
            if marker in line:
                line = line.replace(marker, "")
                if not line.strip():
                    continue
            lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def _split_prefix(heading: str) -> tuple[str | None, str]:
        """Split a heading into its normalized INT/EXT prefix and the rest."""
        heading_upper = heading.upper()
        for prefix, int_ext in ScreenplayUtils._SLUG_PREFIXES:
            if heading_upper.startswith(prefix):
                return int_ext, heading[len(prefix) :].strip()
        return None, heading.strip()

    @staticmethod
    def _clean_heading(heading: str) -> str:
        heading = ScreenplayUtils.SCENE_NUMBER_MARKER.sub("", heading.strip())
        heading = ScreenplayUtils.LEADING_SCENE_NUMBER.sub("", heading)
        heading = ScreenplayUtils.TRAILING_SCENE_NUMBER.sub("", heading)
        if heading.startswith(".") and not heading.startswith(".."):
            heading = heading[1:]
        return heading.strip()

    @staticmethod
    def extract_location(heading: str) -> str | None:
        """Extract location from scene heading.

        Args:
            heading: Scene heading text (e.g., "INT. COFFEE SHOP - DAY")

        Returns:
            Extracted location or None
        """
        if not heading:
            return None

        _, rest = ScreenplayUtils._split_prefix(ScreenplayUtils._clean_heading(heading))

        if " - " in rest:
            location, _ = rest.rsplit(" - ", 1)
            location = location.strip()
            return location if location else None

        # Time only, no location
        if rest.startswith("- "):
            return None

        return rest if rest else None

    @staticmethod
    def extract_time(heading: str) -> str | None:
        """Extract time of day from scene heading.

        Args:
            heading: Scene heading text (e.g., "INT. COFFEE SHOP - DAY")

        Returns:
            Extracted time or None
        """
        if not heading:
            return None

        cleaned = ScreenplayUtils._clean_heading(heading).upper()
        if " - " not in cleaned and not cleaned.startswith("- "):
            return None
        last_part = cleaned.rsplit("- ", 1)[-1]
        if re.search(r"\bMIDNIGHT\b", last_part):
            return "NIGHT"

        for indicator in ScreenplayUtils._TIME_INDICATORS:
            if re.search(rf"\b{re.escape(indicator)}\b", last_part):
                return indicator

        # Non-standard times ("SAME", "1985") are kept verbatim
        return last_part.strip() or None

    @staticmethod
    def parse_scene_heading(heading: str) -> SlugInfo:
        """Parse a scene heading into its components.

        EST. (establishing) headings are reported as exterior.

        Args:
            heading: Scene heading text (e.g., "INT. COFFEE SHOP - DAY")

        Returns:
            SlugInfo with the INT/EXT marker, location and time of day
        """
        if not heading:
            return SlugInfo()

        int_ext, _ = ScreenplayUtils._split_prefix(
            ScreenplayUtils._clean_heading(heading)
        )
        return SlugInfo(
            int_ext=int_ext,
            location=ScreenplayUtils.extract_location(heading),
            time_of_day=ScreenplayUtils.extract_time(heading),
        )

    @staticmethod
    def extract_scene_number(heading: str) -> str | None:
        """Extract a scene number from heading text.

        Recognizes the Fountain ``#12A#`` marker as well as production
        numbers printed before or after the slug ("12 INT. HOUSE - DAY 12").
        """
        text = heading.strip()
        if match := ScreenplayUtils.SCENE_NUMBER_MARKER.search(text):
            return match.group(1)
        if match := ScreenplayUtils.LEADING_SCENE_NUMBER.match(text):
            return match.group(1)
        if match := ScreenplayUtils.TRAILING_SCENE_NUMBER.search(text):
            return match.group(1)
        return None

    @staticmethod
    def strip_scene_number_marker(heading: str) -> str:
        """Remove a trailing Fountain ``#n#`` scene number marker."""
        return ScreenplayUtils.SCENE_NUMBER_MARKER.sub("", heading).strip()

    @staticmethod
    def strip_scene_numbers(heading: str) -> str:
        """Remove scene numbering so the heading opens with its slug.

        Drops the Fountain ``#n#`` marker and a leading production number.
        A trailing number goes only when it repeats the leading one, since
        a bare trailing number may belong to the location ("ROOM 101").
        """
        text = ScreenplayUtils.strip_scene_number_marker(heading)
        leading = ScreenplayUtils.LEADING_SCENE_NUMBER.match(text)
        if not leading:
            return text
        text = text[leading.end() :]
        trailing = ScreenplayUtils.TRAILING_SCENE_NUMBER.search(text)
        if trailing and trailing.group(1) == leading.group(1):
            text = text[: trailing.start()]
        return text.strip()

    @staticmethod
    def strip_character_extension(cue: str) -> str:
        """Reduce a character cue to the bare name.

        Drops any trailing parenthetical extension and a dual dialogue caret.
        """
        name = cue.strip().rstrip("^").strip()
        while True:
            shorter = ScreenplayUtils.CHARACTER_EXTENSION.sub("", name)
            if shorter == name or not shorter:
                break
            name = shorter
        return name.rstrip("^").strip()

    @staticmethod
    def strip_dialogue_extensions(cue: str) -> str:
        """Remove the CONT'D, MORE, O.S. and V.O. cue extensions."""
        name = cue.strip()
        while True:
            shorter = ScreenplayUtils.DIALOGUE_EXTENSIONS.sub("", name)
            if shorter == name:
                break
            name = shorter
        return name.strip()
