"""
Exception types raised by the document engine.
"""

from typing import Optional


class DocumentEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(DocumentEngineError):
    """
    The document description is malformed or out of range.

    Raised before any totals are computed; ``errors`` lists every failing
    rule code (e.g. ``range_error:quantity``).
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors: list[str] = list(errors or [])


class RenderError(DocumentEngineError):
    """A single output format failed to render."""

    def __init__(self, format: str, message: str):
        super().__init__(f"{format}: {message}")
        self.format = format
