"""
Rasterizer adapter built on PyMuPDF.
"""
import fitz  # PyMuPDF
from PIL import Image

from ..domain.entities import PixelBuffer
from ..ports.rasterizer_port import RasterizerPort


class PyMuPdfRasterizer(RasterizerPort):
    """Renders pages with MuPDF into Pillow images."""

    def page_count(self, pdf_bytes: bytes) -> int:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            return pdf_doc.page_count

    def render_page(self, pdf_bytes: bytes, page_index: int, scale: float) -> PixelBuffer:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            page = pdf_doc[page_index]
            pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            image = Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)

        return PixelBuffer(
            page_index=page_index,
            width=image.width,
            height=image.height,
            image=image
        )

    def get_engine_info(self) -> dict:
        return {
            "name": "pymupdf",
            "version": fitz.VersionBind,
            "license": "AGPL-3.0",
            "description": "MuPDF-based page rendering"
        }
