"""
Rasterizer adapter built on pypdfium2 (Google PDFium bindings).
"""
import pypdfium2 as pdfium

from ..domain.entities import PixelBuffer
from ..ports.rasterizer_port import RasterizerPort


class PyPdfium2Rasterizer(RasterizerPort):
    """Renders pages with PDFium into Pillow images."""

    def page_count(self, pdf_bytes: bytes) -> int:
        pdf = pdfium.PdfDocument(pdf_bytes)
        try:
            return len(pdf)
        finally:
            pdf.close()

    def render_page(self, pdf_bytes: bytes, page_index: int, scale: float) -> PixelBuffer:
        """
        Render one page with PDFium.

        The document is reopened for every page so that no PDFium handle
        outlives a single call.
        """
        pdf = pdfium.PdfDocument(pdf_bytes)
        try:
            page = pdf[page_index]
            try:
                bitmap = page.render(scale=scale, optimize_mode="print")
                try:
                    # Copy out of the PDFium bitmap before it is released
                    image = bitmap.to_pil().convert("RGB")
                finally:
                    bitmap.close()
            finally:
                page.close()
        finally:
            pdf.close()

        width, height = image.size
        return PixelBuffer(page_index=page_index, width=width, height=height, image=image)

    def get_engine_info(self) -> dict:
        return {
            "name": "pypdfium2",
            "version": getattr(pdfium, "__version__", "unknown"),
            "license": "Apache 2.0",
            "description": "Google PDFium-based page rendering"
        }
