"""
Rasterizer adapter built on pdf2image (Poppler's pdftoppm).
"""
from pdf2image import convert_from_bytes, pdfinfo_from_bytes

from ..domain.entities import PixelBuffer
from ..ports.rasterizer_port import RasterizerPort

POINTS_PER_INCH = 72


class Pdf2ImageRasterizer(RasterizerPort):
    """
    Renders pages through Poppler. Requires the ``pdftoppm`` and
    ``pdfinfo`` binaries on the PATH.
    """

    def __init__(self, poppler_path=None):
        self._poppler_path = poppler_path

    def page_count(self, pdf_bytes: bytes) -> int:
        info = pdfinfo_from_bytes(pdf_bytes, poppler_path=self._poppler_path)
        return int(info["Pages"])

    def render_page(self, pdf_bytes: bytes, page_index: int, scale: float) -> PixelBuffer:
        # A scale of 1.0 is one pixel per point, i.e. 72 dpi
        images = convert_from_bytes(
            pdf_bytes,
            dpi=POINTS_PER_INCH * scale,
            first_page=page_index + 1,
            last_page=page_index + 1,
            poppler_path=self._poppler_path
        )
        if len(images) != 1:
            raise ValueError(f"Poppler returned {len(images)} images for page {page_index + 1}")

        image = images[0].convert("RGB")
        return PixelBuffer(
            page_index=page_index,
            width=image.width,
            height=image.height,
            image=image
        )

    def get_engine_info(self) -> dict:
        return {
            "name": "pdf2image",
            "version": "unknown",
            "license": "MIT",
            "description": "Poppler-based page rendering through pdf2image"
        }
