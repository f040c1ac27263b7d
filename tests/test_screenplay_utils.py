"""Tests for screenplay utilities."""

import pytest

from scriptingest.models import SlugInfo
from scriptingest.utils.screenplay import ScreenplayUtils


class TestSceneHeadings:
    """Slug line parsing."""

    def test_extract_location(self):
        assert ScreenplayUtils.extract_location("INT. COFFEE SHOP - DAY") == (
            "COFFEE SHOP"
        )
        assert ScreenplayUtils.extract_location("EXT STREET - DAWN") == "STREET"
        assert ScreenplayUtils.extract_location("INT. OFFICE") == "OFFICE"
        assert ScreenplayUtils.extract_location("") is None

    def test_extract_location_multiple_dashes(self):
        assert (
            ScreenplayUtils.extract_location("INT. RESTAURANT - MAIN ROOM - NIGHT")
            == "RESTAURANT - MAIN ROOM"
        )

    @pytest.mark.parametrize(
        ("heading", "expected"),
        [
            ("INT. COFFEE SHOP - DAY", "DAY"),
            ("EXT. ROOF - MIDNIGHT", "NIGHT"),
            ("INT. HALL - MOMENTS LATER", "MOMENTS LATER"),
            ("INT. HALL - EARLY MORNING", "MORNING"),
            ("INT. HALL - SAME", "SAME"),
            ("INT. HALL", None),
        ],
    )
    def test_extract_time(self, heading, expected):
        assert ScreenplayUtils.extract_time(heading) == expected

    @pytest.mark.parametrize(
        ("heading", "expected"),
        [
            (
                "INT./EXT. CAR - NIGHT",
                SlugInfo(int_ext="INT/EXT", location="CAR", time_of_day="NIGHT"),
            ),
            ("I/E GARAGE", SlugInfo(int_ext="INT/EXT", location="GARAGE")),
            (
                "EST. CITY SKYLINE - DUSK",
                SlugInfo(int_ext="EXT", location="CITY SKYLINE", time_of_day="DUSK"),
            ),
            (".FLASHBACK", SlugInfo(location="FLASHBACK")),
            ("", SlugInfo()),
        ],
    )
    def test_parse_scene_heading(self, heading, expected):
        assert ScreenplayUtils.parse_scene_heading(heading) == expected

    def test_scene_numbers(self):
        assert ScreenplayUtils.extract_scene_number("INT. HOUSE - DAY #12A#") == "12A"
        assert ScreenplayUtils.extract_scene_number("12 INT. HOUSE - DAY 12") == "12"
        assert ScreenplayUtils.extract_scene_number("INT. HOUSE - DAY") is None

    def test_numbers_do_not_leak_into_slug(self):
        slug = ScreenplayUtils.parse_scene_heading("12 INT. HOUSE - DAY 12")
        assert slug.location == "HOUSE"
        assert slug.time_of_day == "DAY"

    def test_strip_scene_number_marker(self):
        assert (
            ScreenplayUtils.strip_scene_number_marker("INT. HOUSE - DAY #1#")
            == "INT. HOUSE - DAY"
        )

    @pytest.mark.parametrize(
        ("heading", "stripped"),
        [
            ("12 INT. HOUSE - DAY 12", "INT. HOUSE - DAY"),
            ("12A. EXT. PIER - NIGHT", "EXT. PIER - NIGHT"),
            ("INT. HOUSE - DAY #3#", "INT. HOUSE - DAY"),
            ("INT. ROOM 101 - DAY", "INT. ROOM 101 - DAY"),
            ("INT. ROOM 101", "INT. ROOM 101"),
        ],
    )
    def test_strip_scene_numbers(self, heading, stripped):
        assert ScreenplayUtils.strip_scene_numbers(heading) == stripped


class TestCues:
    """Character cue normalization."""

    @pytest.mark.parametrize(
        ("cue", "name"),
        [
            ("JOHN (V.O.) (CONT'D)", "JOHN"),
            ("MARY ^", "MARY"),
            ("BOB^", "BOB"),
            ("  SARAH  ", "SARAH"),
        ],
    )
    def test_strip_character_extension(self, cue, name):
        assert ScreenplayUtils.strip_character_extension(cue) == name

    @pytest.mark.parametrize(
        ("cue", "name"),
        [
            ("JOHN (CONT'D)", "JOHN"),
            ("JOHN (CONT’D)", "JOHN"),
            ("MARY (O.S.)", "MARY"),
            ("jim (v.o.)", "jim"),
            ("JOHN (ON PHONE)", "JOHN (ON PHONE)"),
        ],
    )
    def test_strip_dialogue_extensions(self, cue, name):
        assert ScreenplayUtils.strip_dialogue_extensions(cue) == name


class TestBoneyard:
    """Comment and note removal."""

    def test_inline_comment(self):
        assert ScreenplayUtils.strip_boneyard("Line /* hidden */ stays") == (
            "Line  stays"
        )

    def test_comment_only_lines_are_dropped(self):
        text = "Line one\n/* whole\nblock */\nLine two"
        assert ScreenplayUtils.strip_boneyard(text) == "Line one\nLine two"

    def test_multiline_note(self):
        assert ScreenplayUtils.strip_boneyard("A\n[[note\nmore]]\nB") == "A\nB"

    def test_blank_lines_survive(self):
        assert ScreenplayUtils.strip_boneyard("A\n\nB") == "A\n\nB"
