"""Pytest configuration and fixtures."""

import pytest

from scriptingest.config import ScriptIngestSettings, reset_settings, set_settings
from scriptingest.models import LayoutConfig, ParserConfig, PdfConfig
from tests.pdf_fakes import (
    PDF_BYTES,
    PDF_PAGES,
    FakeOcrEngine,
    FakePage,
    fake_pdf_opener,
)

SAMPLE_FOUNTAIN = """\
Title: The Long Night
Credit: Written by
Author: Jane Writer
Draft date: 2024-05-01
Episode: 3

/* An opening note that never prints */

FADE IN:

INT. KITCHEN - DAY #1#

John enters, looking around.

JOHN (CONT'D)
(quietly)
Hello there.

MARY (O.S.)
In the garden!

CUT TO:

EXT. GARDEN - NIGHT

Mary waters the roses.

===

.FLASHBACK

> SMASH CUT TO:

@McCLANE
Yippee ki-yay.
"""

SAMPLE_FDX = """\
<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<FinalDraft DocumentType="Script" Template="No" Version="5">
  <TitlePage>
    <Content>
      <Paragraph Type="Text"><Text>The Long Night</Text></Paragraph>
      <Paragraph Type="Text"><Text>Written by</Text></Paragraph>
      <Paragraph Type="Text"><Text>Jane Writer</Text></Paragraph>
    </Content>
  </TitlePage>
  <Content>
    <Paragraph Number="1" Type="Scene Heading">
      <Text>INT. KITCHEN - DAY</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>John enters. He sees </Text><Text Style="Bold">Mary</Text><Text>.</Text>
    </Paragraph>
    <Paragraph Type="Character"><Text>JOHN (CONT'D)</Text></Paragraph>
    <Paragraph Type="Parenthetical"><Text>(quietly)</Text></Paragraph>
    <Paragraph Type="Dialogue"><Text>Salt &amp; pepper?</Text></Paragraph>
    <Paragraph Type="Transition"><Text>CUT TO:</Text></Paragraph>
    <Paragraph Type="Scene Heading"><Text>EXT. GARDEN - NIGHT</Text></Paragraph>
    <Paragraph Type="Dialogue"><Text>Orphan line.</Text></Paragraph>
    <Paragraph Type="General"><Text></Text></Paragraph>
    <Paragraph>
      <DualDialogue>
        <Paragraph Type="Character"><Text>MARY</Text></Paragraph>
        <Paragraph Type="Dialogue"><Text>Over here!</Text></Paragraph>
        <Paragraph Type="Character"><Text>JOHN</Text></Paragraph>
        <Paragraph Type="Dialogue"><Text>Coming!</Text></Paragraph>
      </DualDialogue>
    </Paragraph>
  </Content>
</FinalDraft>
"""


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test against default settings with no ambient config."""
    import os

    for var in [k for k in os.environ if k.startswith("SCRIPTINGEST_")]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    reset_settings()
    set_settings(ScriptIngestSettings())
    yield
    reset_settings()


@pytest.fixture
def parser_config():
    """Default parser configuration."""
    return ParserConfig()


@pytest.fixture
def small_page_config():
    """Configuration with a tiny page so pagination is easy to exercise."""
    return ParserConfig(layout=LayoutConfig(lines_per_page=6, fdx_elements_per_page=5))


@pytest.fixture
def no_ocr_config():
    """Configuration with the OCR fallback disabled."""
    return ParserConfig(pdf=PdfConfig(ocr_enabled=False))


@pytest.fixture
def sample_fountain() -> bytes:
    return SAMPLE_FOUNTAIN.encode("utf-8")


@pytest.fixture
def sample_fdx() -> bytes:
    return SAMPLE_FDX.encode("utf-8")


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture
def text_pdf_open():
    """pdf_open stand-in serving a three page screenplay with a text layer."""
    return fake_pdf_opener([FakePage(text) for text in PDF_PAGES])


@pytest.fixture
def scanned_pdf_open():
    """pdf_open stand-in serving pages with no text layer."""
    return fake_pdf_opener([FakePage(""), FakePage(""), FakePage("")])


@pytest.fixture
def ocr_engine():
    """OCR engine that recognizes the sample screenplay."""
    return FakeOcrEngine("\f".join(PDF_PAGES), page_count=len(PDF_PAGES))
