"""
Validation of raw document buffers handed to the pipeline.
"""
from typing import Union

from ..exceptions import InvalidInputError

PdfBuffer = Union[bytes, bytearray, memoryview]


def require_pdf_buffer(buffer: PdfBuffer, purpose: str = "processing") -> bytes:
    """
    Return an independent ``bytes`` copy of a document buffer.

    Args:
        buffer: Document content
        purpose: What the buffer is for, used in error messages

    Returns:
        Immutable copy of the content

    Raises:
        InvalidInputError: If the buffer is missing, released or empty
    """
    if buffer is None:
        raise InvalidInputError(f"No PDF buffer provided for {purpose}")
    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        raise InvalidInputError(
            f"PDF buffer for {purpose} must be bytes, got {type(buffer).__name__}"
        )
    try:
        content = bytes(buffer)
    except ValueError as e:
        # Raised by a memoryview whose underlying buffer was released
        raise InvalidInputError(f"PDF buffer for {purpose} has been released") from e
    if not content:
        raise InvalidInputError(f"Empty PDF buffer provided for {purpose}")
    return content
