"""
Domain exceptions for scanned PDF redaction.
"""
from typing import Optional


class RedactionError(Exception):
    """Base exception for redaction pipeline errors."""
    stage = "redact"


class InvalidInputError(RedactionError):
    """Exception raised when the source document or queries cannot be used."""
    stage = "input"


class InputTooLargeError(InvalidInputError):
    """Exception raised when the source document exceeds the size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Document is {size} bytes, larger than the {limit} byte limit"
        )


class PageConversionError(RedactionError):
    """Exception raised when a page cannot be rasterized."""
    stage = "rasterize"

    def __init__(self, page_number: int, cause: Optional[BaseException] = None):
        self.page_number = page_number
        self.cause = cause
        super().__init__(f"Failed to convert page {page_number} to image: {cause}")


class RecognitionError(RedactionError):
    """Exception raised when OCR fails on a page."""
    stage = "recognize"

    def __init__(self, page_number: int, cause: Optional[BaseException] = None):
        self.page_number = page_number
        self.cause = cause
        super().__init__(f"OCR failed on page {page_number}: {cause}")


class RedactionCancelledError(RedactionError):
    """Exception raised when a run is cancelled between pages."""
    stage = "cancelled"


class DrawingError(RedactionError):
    """Exception raised when a single redaction rectangle cannot be drawn."""


class GeometryRejection(Exception):
    """
    Signal that a redaction box was rejected by the geometry checks.
    Never surfaced past the redaction stage.
    """

    def __init__(self, reason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class FileStorageError(Exception):
    """Exception raised when file storage operations fail."""
    pass


class ValidationError(Exception):
    """Exception raised when validation fails."""
    pass
