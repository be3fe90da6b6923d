"""
Port for PDF document mutation.
Defines how the redaction stage loads, draws on and saves PDF documents.
"""
from abc import ABC, abstractmethod
from typing import Tuple

BLACK = (0.0, 0.0, 0.0)


class PdfDocumentHandle(ABC):
    """
    An open, owned PDF document.

    Coordinates passed to ``draw_filled_rect`` are in PDF drawing space:
    points, origin at the bottom-left corner of the page.
    """

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""
        pass

    @abstractmethod
    def page_size(self, page_index: int) -> Tuple[float, float]:
        """
        Get the (width, height) of a page in points.

        Raises:
            IndexError: If the page does not exist
        """
        pass

    @abstractmethod
    def draw_filled_rect(
        self,
        page_index: int,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Tuple[float, float, float] = BLACK
    ) -> None:
        """
        Draw an opaque filled rectangle on a page.

        Raises:
            DrawingError: If the rectangle cannot be drawn
        """
        pass

    @abstractmethod
    def save(self) -> bytes:
        """Serialize the document, including everything drawn so far."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the document."""
        pass

    def __enter__(self) -> "PdfDocumentHandle":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class PdfDocumentPort(ABC):
    """Interface for opening PDF documents for mutation."""

    @abstractmethod
    def load(self, pdf_bytes: bytes) -> PdfDocumentHandle:
        """
        Open a PDF document from its content.

        Raises:
            Exception: Any library error if the content is not a PDF
        """
        pass

    @abstractmethod
    def get_engine_info(self) -> dict:
        """Get information about the PDF library."""
        pass
