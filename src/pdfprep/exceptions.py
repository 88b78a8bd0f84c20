"""Unified exception hierarchy for pdfprep.

All pdfprep exceptions inherit from PdfPrepError, enabling:
- Catching all pdfprep errors with `except PdfPrepError`
- Error context preservation via the `context` attribute
- Causality chains via `raise ... from e` patterns
"""

from typing import Any


class PdfPrepError(Exception):
    """Base exception for all pdfprep errors.

    Args:
        message: Human-readable error description
        context: Optional dict of contextual information (page, file, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} [{details}]"
        return base


class ConfigError(PdfPrepError):
    """Raised when configuration or an edit script is invalid.

    Args:
        message: The error message
        field: Name of the field with the error (if applicable)
        suggestion: Suggested fix for the error (if applicable)
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        suggestion: str | None = None,
    ):
        self.field = field
        self.suggestion = suggestion
        context = {"field": field} if field else None
        super().__init__(message, context)

    def __str__(self) -> str:
        base = super().__str__()
        if self.suggestion:
            return f"{base}\nSuggestion: {self.suggestion}"
        return base


class DocumentError(PdfPrepError):
    """Raised when a document cannot be opened or read."""


class RenderError(PdfPrepError):
    """Raised when rasterizing a page fails."""


class RecipeError(PdfPrepError):
    """Raised when a recipe cannot be generated."""


class PageSelectionError(PdfPrepError):
    """Raised when a page selection specification is invalid."""
