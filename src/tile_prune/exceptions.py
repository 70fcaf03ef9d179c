"""
Style loading errors.

Evaluation never raises for missing feature data; an absent property is the
first-class ``FilterResult.UNKNOWN``. These exceptions only cover failures to
build a ``StyleDocument`` in the first place.
"""

from pathlib import Path
from typing import Optional, Union


class StyleError(Exception):
    """Base class for all style loading failures."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class StyleReadError(StyleError):
    """The style file could not be read from disk."""


class StyleParseError(StyleError, ValueError):
    """The style file is not well-formed JSON or lacks a ``layers`` array."""


class MissingLayersError(StyleError):
    """The style declares no layer bound to a source-layer."""
