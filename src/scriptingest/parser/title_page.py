"""Title page detection for Fountain documents."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from scriptingest.models import LayoutConfig
from scriptingest.parser.rules import is_scene_heading

KEY_VALUE_PATTERN = re.compile(r"^([A-Za-z][\w \-.]*?)\s*:\s*(.*)$")

AUTHOR_FIELDS = ("author", "authors", "writer", "writers", "written by")


@dataclass
class TitlePageResult:
    """Outcome of scanning the head of a document for title page fields.

    ``body_start`` is the index of the first line after the title page; it is
    0 when no title page was found.
    """

    metadata: dict[str, str] = field(default_factory=dict)
    body_start: int = 0

    @property
    def detected(self) -> bool:
        return bool(self.metadata)


def _is_comment(line: str) -> bool:
    return line.startswith(("[[", "/*"))


def _is_indented(raw: str) -> bool:
    return raw[:1] in (" ", "\t")


def detect_title_page(
    lines: list[str], config: LayoutConfig | None = None
) -> TitlePageResult:
    """Scan the leading lines for ``key: value`` title page metadata.

    Lines without a key/value shape are passed over until the first pair is
    found and end the title page after it. A scene heading always ends the
    scan. Blank and comment lines never end the title page, and a scan that
    found no metadata yields no title page.

    Args:
        lines: Document lines with boneyard comments already removed
        config: Layout configuration supplying the scan window

    Returns:
        TitlePageResult with lower-cased keys in document order
    """
    config = config or LayoutConfig()
    limit = min(len(lines), config.title_page_scan_lines)
    result = TitlePageResult()

    i = 0
    while i < limit:
        line = lines[i].strip()
        if not line or _is_comment(line):
            i += 1
            continue

        if is_scene_heading(line):
            break

        match = KEY_VALUE_PATTERN.match(line)
        if not match:
            if result.metadata:
                break
            i += 1
            continue

        key = match.group(1).strip().lower()
        value = match.group(2).strip()

        if not value:
            # Multi-line value: indented lines directly below the key
            continuation: list[str] = []
            j = i + 1
            while j < len(lines) and lines[j].strip() and _is_indented(lines[j]):
                continuation.append(lines[j].strip())
                j += 1
            if not continuation:
                if result.metadata:
                    break
                i += 1
                continue
            value = " ".join(continuation)
            i = j
        else:
            i += 1

        result.metadata[key] = value
        result.body_start = i

    return result


def extract_title_author(metadata: dict[str, str]) -> tuple[str | None, str | None]:
    """Pick the title and author out of title page metadata."""
    title = metadata.get("title")

    author = None
    for key in AUTHOR_FIELDS:
        if key in metadata:
            author = metadata[key]
            break

    return title, author


def extract_extras(metadata: dict[str, str]) -> dict[str, Any]:
    """Derive TV and project fields from title page metadata.

    Episode and season become integers when numeric.
    """
    extras: dict[str, Any] = {}

    for key in ("episode", "season"):
        if key in metadata:
            try:
                extras[key] = int(metadata[key])
            except ValueError:
                extras[key] = metadata[key]

    for key in ("series", "series_title", "show"):
        if key in metadata:
            extras["series_title"] = metadata[key]
            break

    for key in ("project", "project_title"):
        if key in metadata:
            extras["project_title"] = metadata[key]
            break

    return extras
