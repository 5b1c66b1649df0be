"""Exception hierarchy for template extraction and document synthesis."""

from __future__ import annotations


class TemplateEngineError(Exception):
    """Base exception for the template engine.

    Attributes:
        message: Human-readable error description
        detail: Additional technical details (optional)
    """

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class MalformedTemplate(TemplateEngineError):
    """Raised when an uploaded template does not have the shape its type requires."""

    def __init__(self, expected_sheets: int, found_sheets: int):
        self.expected_sheets = expected_sheets
        self.found_sheets = found_sheets
        super().__init__(
            message="Malformed template",
            detail=f"expected {expected_sheets} sheets, found {found_sheets}",
        )


class UnsupportedCellShape(TemplateEngineError):
    """Raised for a single style, merge or image the cell model cannot represent.

    Always handled locally: the element is logged and skipped.
    """


class NoExportableData(TemplateEngineError):
    """Raised when no record passes the document type's eligibility filter."""


class SerializationFailure(TemplateEngineError):
    """Raised when a synthesized workbook cannot be written to bytes."""


class TemplateNotFound(TemplateEngineError):
    """Raised when the store holds no template for an id or document type."""


class InvalidExportOptions(TemplateEngineError):
    """Raised when an export lacks a context value its form requires."""
