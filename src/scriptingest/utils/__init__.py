"""ScriptIngest utilities module."""

from scriptingest.utils.screenplay import ScreenplayUtils

__all__ = ["ScreenplayUtils"]
