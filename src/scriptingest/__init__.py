"""ScriptIngest: screenplay ingestion for Fountain, Final Draft and PDF.

Every entry point takes raw bytes plus the original filename and returns a
``ParserResult`` envelope holding either a ``ParsedScript`` or an error.
"""

from .config import ScriptIngestSettings, get_logger, get_settings
from .exceptions import (
    FormatValidationError,
    GenericParseError,
    OcrRequiredError,
    ScriptIngestError,
    UnsupportedFormatError,
)
from .models import (
    Element,
    ElementType,
    ParsedScript,
    ParserConfig,
    ParserResult,
    ScriptFormat,
    ScriptMetadata,
)
from .parser import parse_file, parse_script, parse_script_sync

__version__ = "0.1.0"

__all__ = [
    "Element",
    "ElementType",
    "FormatValidationError",
    "GenericParseError",
    "OcrRequiredError",
    "ParsedScript",
    "ParserConfig",
    "ParserResult",
    "ScriptFormat",
    "ScriptIngestError",
    "ScriptIngestSettings",
    "ScriptMetadata",
    "UnsupportedFormatError",
    "__version__",
    "get_logger",
    "get_settings",
    "parse_file",
    "parse_script",
    "parse_script_sync",
]
