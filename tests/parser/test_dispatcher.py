"""Tests for format detection and parser dispatch."""

import asyncio

import pytest

from scriptingest.models import ScriptFormat
from scriptingest.parser import (
    detect_format,
    parse_file,
    parse_script,
    parse_script_sync,
)


class TestDetectFormat:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("pilot.fountain", ScriptFormat.FOUNTAIN),
            ("PILOT.FOUNTAIN", ScriptFormat.FOUNTAIN),
            ("draft.v2.fdx", ScriptFormat.FDX),
            ("Shooting Script.PDF", ScriptFormat.PDF),
            ("notes.txt", None),
            ("README", None),
        ],
    )
    def test_extension(self, filename, expected):
        assert detect_format(filename) is expected


class TestParseScript:
    @pytest.mark.asyncio
    async def test_unsupported_extension(self, sample_fountain):
        result = await parse_script(sample_fountain, "script.docx")

        assert not result.success
        assert result.error == "Unsupported file format: docx"
        assert result.error_type == "UnsupportedFormatError"

    @pytest.mark.asyncio
    async def test_fountain(self, sample_fountain):
        result = await parse_script(sample_fountain, "night.fountain", "text/plain")

        assert result.success
        assert result.data.format == ScriptFormat.FOUNTAIN
        assert result.data.title == "The Long Night"

    @pytest.mark.asyncio
    async def test_mime_type_is_advisory(self, sample_fdx):
        result = await parse_script(sample_fdx, "night.fdx", "application/pdf")

        assert result.success
        assert result.data.format == ScriptFormat.FDX

    @pytest.mark.asyncio
    async def test_uppercase_extension(self, sample_fountain):
        result = await parse_script(sample_fountain, "NIGHT.FOUNTAIN")
        assert result.success

    @pytest.mark.asyncio
    async def test_pdf(self, pdf_bytes, text_pdf_open):
        result = await parse_script(pdf_bytes, "night.pdf", pdf_open=text_pdf_open)

        assert result.success
        assert result.data.format == ScriptFormat.PDF
        assert result.data.author == "Jane Writer"

    @pytest.mark.asyncio
    async def test_content_not_sniffed(self, pdf_bytes):
        result = await parse_script(pdf_bytes, "night.fdx")

        assert not result.success
        assert result.error_type == "FormatValidationError"

    @pytest.mark.asyncio
    async def test_config_forwarded(self, pdf_bytes, scanned_pdf_open, no_ocr_config):
        result = await parse_script(
            pdf_bytes, "scan.pdf", config=no_ocr_config, pdf_open=scanned_pdf_open
        )

        assert not result.success
        assert result.error_type == "OcrRequiredError"

    @pytest.mark.asyncio
    async def test_concurrent_parses(self, sample_fountain, sample_fdx):
        results = await asyncio.gather(
            parse_script(sample_fountain, "a.fountain"),
            parse_script(sample_fdx, "b.fdx"),
        )
        assert [r.data.format for r in results] == [
            ScriptFormat.FOUNTAIN,
            ScriptFormat.FDX,
        ]


def test_parse_script_sync(sample_fountain):
    result = parse_script_sync(sample_fountain, "night.fountain")
    assert result.success
    assert result.data.metadata.original_filename == "night.fountain"


class TestParseFile:
    @pytest.mark.asyncio
    async def test_reads_from_disk(self, tmp_path, sample_fdx):
        path = tmp_path / "night.fdx"
        path.write_bytes(sample_fdx)

        result = await parse_file(path)

        assert result.success
        assert result.data.metadata.original_filename == "night.fdx"
        assert result.data.metadata.file_size == len(sample_fdx)

    @pytest.mark.asyncio
    async def test_unsupported_file_not_read(self, tmp_path):
        result = await parse_file(tmp_path / "missing.docx")

        assert not result.success
        assert result.error_type == "UnsupportedFormatError"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        result = await parse_file(tmp_path / "missing.fountain")

        assert not result.success
        assert result.error_type == "GenericParseError"
        assert result.error.startswith("Cannot read missing.fountain")
