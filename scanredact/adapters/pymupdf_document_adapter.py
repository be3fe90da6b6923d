try:
    import fitz  # PyMuPDF
except ImportError:
    raise ImportError("PyMuPDF is required. Install with: pip install PyMuPDF")

from typing import Tuple

from ..domain.exceptions import DrawingError
from ..ports.pdf_document_port import BLACK, PdfDocumentHandle, PdfDocumentPort


class PyMuPdfDocumentHandle(PdfDocumentHandle):
    """A PyMuPDF document opened for drawing redaction rectangles."""

    def __init__(self, pdf_doc: "fitz.Document"):
        self._pdf_doc = pdf_doc

    @property
    def page_count(self) -> int:
        return self._pdf_doc.page_count

    def page_size(self, page_index: int) -> Tuple[float, float]:
        page = self._page(page_index)
        return page.rect.width, page.rect.height

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
        Draw an opaque rectangle given in bottom-left drawing space.

        MuPDF measures from the top-left corner, so the rectangle is flipped
        back before drawing, and de-rotated on rotated pages.
        """
        page = self._page(page_index)
        try:
            page_height = page.rect.height
            rect = fitz.Rect(x, page_height - y - height, x + width, page_height - y)
            if page.rotation:
                rect = rect * page.derotation_matrix
            page.draw_rect(rect, color=None, fill=color, width=0, overlay=True)
        except Exception as e:
            raise DrawingError(
                f"Failed to draw rectangle on page {page_index + 1}: {str(e)}"
            ) from e

    def save(self) -> bytes:
        return self._pdf_doc.tobytes(garbage=4, deflate=True)

    def close(self) -> None:
        if not self._pdf_doc.is_closed:
            self._pdf_doc.close()

    def _page(self, page_index: int) -> "fitz.Page":
        if page_index < 0 or page_index >= self._pdf_doc.page_count:
            raise IndexError(
                f"Page index {page_index} out of range for {self._pdf_doc.page_count} page(s)"
            )
        return self._pdf_doc[page_index]


class PyMuPdfDocumentAdapter(PdfDocumentPort):
    """PyMuPDF adapter for drawing redaction rectangles on PDF documents."""

    def load(self, pdf_bytes: bytes) -> PyMuPdfDocumentHandle:
        pdf_doc = fitz.open(stream=bytes(pdf_bytes), filetype="pdf")
        return PyMuPdfDocumentHandle(pdf_doc)

    def get_engine_info(self) -> dict:
        return {
            "name": "pymupdf",
            "version": fitz.VersionBind,
            "description": "PyMuPDF - opaque rectangle overlay on the original pages",
            "features": [
                "Filled rectangle overlay",
                "Multi-page support",
                "Page geometry preserved"
            ],
            "supported_formats": ["PDF"]
        }
