import logging
from typing import Callable, Optional

from ..domain.entities import RasterizedDocument
from ..domain.exceptions import InvalidInputError, PageConversionError, RedactionCancelledError
from ..domain.services.input_validation_service import PdfBuffer, require_pdf_buffer
from ..ports.rasterizer_port import RasterizerPort

logger = logging.getLogger(__name__)


class RasterizeDocumentUseCase:
    """Use case for rendering every page of a document at one render scale."""

    def __init__(self, rasterizer: RasterizerPort):
        self._rasterizer = rasterizer

    def get_engine_name(self) -> str:
        """Get the name of the rasterizer backing this stage."""
        return self._rasterizer.get_engine_info().get("name", "unknown")

    def execute(
        self,
        pdf_bytes: PdfBuffer,
        render_scale: float,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> RasterizedDocument:
        """
        Render all pages, in page order.

        Args:
            pdf_bytes: Source document content
            render_scale: Scale applied to every page
            should_cancel: Checked before each page; returning True aborts the run

        Returns:
            RasterizedDocument: Rendered pages plus the render scale used

        Raises:
            InvalidInputError: If the buffer is empty or released, or the scale is not positive
            PageConversionError: If any page fails; no partial result is returned
        """
        content = require_pdf_buffer(pdf_bytes, "rasterization")
        if render_scale <= 0:
            raise InvalidInputError(f"Render scale must be positive, got {render_scale}")

        try:
            page_count = self._rasterizer.page_count(content)
        except Exception as e:
            raise PageConversionError(page_number=1, cause=e) from e

        if page_count == 0:
            raise InvalidInputError("No pages found in PDF")

        pages = []
        for page_index in range(page_count):
            if should_cancel is not None and should_cancel():
                raise RedactionCancelledError(
                    f"Rasterization cancelled before page {page_index + 1}"
                )
            try:
                pixel_buffer = self._rasterizer.render_page(content, page_index, render_scale)
            except Exception as e:
                logger.error(
                    "Error converting page %d: %s", page_index + 1, e,
                    extra={"event": "rasterize.failed", "page": page_index}
                )
                raise PageConversionError(page_number=page_index + 1, cause=e) from e

            logger.debug(
                "Page %d rendered at %dx%d", page_index + 1, pixel_buffer.width, pixel_buffer.height,
                extra={
                    "event": "rasterize.page",
                    "page": page_index,
                    "width": pixel_buffer.width,
                    "height": pixel_buffer.height
                }
            )
            pages.append(pixel_buffer)

        logger.info(
            "Rasterized %d page(s) at scale %s", page_count, render_scale,
            extra={"event": "rasterize.done", "pages": page_count, "render_scale": render_scale}
        )
        return RasterizedDocument(pages=pages, render_scale=render_scale)
