"""Tests for PDF metadata, structure and layout analysis."""

import pytest

from scriptingest.models import Element, ElementType
from scriptingest.parser.pdf_analysis import (
    PdfLine,
    analyze_font,
    analyze_margins,
    analyze_structure,
    assess_quality,
    extract_inline_title,
    extract_title_author,
    is_transition_text,
    is_upper_line,
    screenplay_format,
)
from tests.pdf_fakes import PDF_PAGES


def element(index, element_type, content, character=None):
    return Element(
        id=f"element_{index}",
        type=element_type,
        content=content,
        page_number=1,
        line_number=index,
        character=character,
    )


@pytest.fixture
def elements():
    return [
        element(1, ElementType.SCENE, "INT. KITCHEN - DAY"),
        element(2, ElementType.ACTION, "John waits."),
        element(3, ElementType.CHARACTER, "JOHN", "JOHN"),
        element(4, ElementType.DIALOGUE, "Hello.", "JOHN"),
        element(5, ElementType.DIALOGUE, "Anyone?", "JOHN"),
        element(6, ElementType.SCENE, "EXT. GARDEN - NIGHT"),
        element(7, ElementType.CHARACTER, "MARY", "MARY"),
        element(8, ElementType.DIALOGUE, "Here.", "MARY"),
    ]


class TestLineShapes:
    @pytest.mark.parametrize(
        "text", ["CUT TO:", "SMASH CUT TO:", "FADE OUT.", "FADE IN:", "DISSOLVE TO:"]
    )
    def test_transitions(self, text):
        assert is_transition_text(text)

    @pytest.mark.parametrize("text", ["cut to:", "JOHN", "Back to: the house"])
    def test_not_transitions(self, text):
        assert not is_transition_text(text)

    def test_upper_line_needs_a_letter(self):
        assert is_upper_line("MARY (O.S.)")
        assert not is_upper_line("123.")
        assert not is_upper_line("Mary")

    def test_line_geometry(self):
        line = PdfLine(text="JOHN", x=252.0, page=1)
        assert line.width == 24.0
        assert line.height == 12.0


class TestTitleAuthor:
    def test_title_page(self):
        title, author = extract_title_author("\f".join(PDF_PAGES))
        assert title == "THE LONG NIGHT"
        assert author == "Jane Writer"

    def test_inline_author(self):
        title, author = extract_title_author("BROKEN ARROW\nby Sam Jones\n")
        assert title == "BROKEN ARROW"
        assert author == "Sam Jones"

    def test_author_prefix(self):
        _, author = extract_title_author("Author: Ann Lee\n")
        assert author == "Ann Lee"

    def test_slugs_and_fades_are_not_titles(self):
        assert extract_title_author("INT. HOUSE - DAY\nFADE IN\n") == (None, None)

    def test_scan_limit(self):
        text = "\n".join(["some action."] * 5 + ["LATE TITLE"])
        assert extract_title_author(text, scan_lines=5) == (None, None)

    def test_inline_title(self):
        assert extract_inline_title("notes here\nMY SCRIPT\n") == "MY SCRIPT"
        assert extract_inline_title("nothing upper here") is None


class TestStructure:
    def test_counts(self, elements):
        analysis = analyze_structure(elements)
        assert analysis["dialogue_to_action_ratio"] == pytest.approx(0.75)
        assert analysis["average_scene_length"] == 0.5
        assert analysis["character_distribution"] == {"JOHN": 2, "MARY": 1}
        assert analysis["top_character"] == "JOHN"
        assert analysis["estimated_runtime"] == 0

    def test_runtime_scales_with_scenes(self):
        scenes = [element(i, ElementType.SCENE, "INT. ROOM") for i in range(1, 101)]
        analysis = analyze_structure(scenes)
        assert analysis["estimated_runtime"] == 2
        assert analysis["average_scene_length"] == 0.0

    def test_empty(self):
        analysis = analyze_structure([])
        assert analysis["dialogue_to_action_ratio"] == 0.0
        assert analysis["top_character"] is None
        assert analysis["character_distribution"] == {}


class TestQuality:
    def test_well_formed(self, elements):
        lines = [PdfLine("INT. KITCHEN - DAY", 72.0, 1), PdfLine("JOHN", 252.0, 1)]
        quality = assess_quality(elements, lines, has_text_layer=True)
        assert quality.has_proper_formatting
        assert quality.has_standard_elements
        assert quality.has_consistent_margins
        assert quality.ocr_confidence == 1.0

    def test_ocr_confidence(self, elements):
        quality = assess_quality(elements, [], has_text_layer=False)
        assert quality.ocr_confidence == 0.7

    def test_action_only(self):
        quality = assess_quality(
            [element(1, ElementType.ACTION, "Rain.")], [], has_text_layer=True
        )
        assert not quality.has_proper_formatting
        assert not quality.has_standard_elements

    def test_narrow_margin(self, elements):
        quality = assess_quality(elements, [PdfLine("Text", 10.0, 1)], True)
        assert not quality.has_consistent_margins


class TestLayout:
    def test_default_margins(self):
        assert analyze_margins([]) == {
            "left": 72.0,
            "right": 72.0,
            "top": 72.0,
            "bottom": 72.0,
        }

    def test_courier_guess(self):
        font = analyze_font([PdfLine("JOHN", 252.0, 1)])
        assert font["detected_font"] == "Courier"
        assert font["average_font_size"] == 12
        assert font["proper_spacing"]

    def test_standard_format(self):
        lines = [PdfLine("A" * 70, 108.0, 1)]
        layout = screenplay_format(lines)
        assert layout["margins"]["left"] == 108.0
        assert layout["margins"]["right"] == 84.0
        assert layout["page_layout"]["standard_format"]

    def test_non_standard_format(self):
        layout = screenplay_format([PdfLine("Short", 72.0, 1)])
        assert layout["font_family"] == "Courier"
        assert not layout["page_layout"]["standard_format"]
