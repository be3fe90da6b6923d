import logging
from typing import Callable, List, Optional

from ..domain.entities import PixelBuffer, RasterizedDocument, RecognizedFragment
from ..domain.exceptions import RecognitionError, RedactionCancelledError
from ..ports.ocr_engine_port import OcrEngineFactoryPort, OcrEnginePort, OcrPageResult

logger = logging.getLogger(__name__)


def flatten_lines(page_result: OcrPageResult, render_scale: float) -> List[RecognizedFragment]:
    """
    Walk block -> paragraph -> line and return one fragment per line.

    Lines without words are dropped. Boxes are divided by the render scale
    so every fragment lives in reference space.
    """
    return [
        RecognizedFragment(
            text=line.text,
            bbox=line.bbox.descaled(render_scale),
            confidence=line.confidence
        )
        for block in page_result.blocks
        for paragraph in block.paragraphs
        for line in paragraph.lines
        if line.word_count > 0
    ]


class RecognizePagesUseCase:
    """Use case for running OCR over every rendered page."""

    def __init__(self, engine_factory: OcrEngineFactoryPort):
        self._engine_factory = engine_factory

    def get_engine_name(self) -> str:
        return self._engine_factory.get_engine_info().get("name", "unknown")

    def execute(
        self,
        document: RasterizedDocument,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> List[List[RecognizedFragment]]:
        """
        Recognize all pages with a single engine instance.

        The engine is acquired before the first page and terminated after
        the last one, on every exit path.

        Args:
            document: Rendered pages and their render scale
            should_cancel: Checked before each page; returning True aborts the run

        Returns:
            One list of fragments per page, in page order

        Raises:
            RecognitionError: If OCR fails or returns an unusable result for a page
        """
        results = []
        engine = self._engine_factory.create_engine()
        try:
            for pixel_buffer in document.pages:
                page_number = pixel_buffer.page_index + 1
                if should_cancel is not None and should_cancel():
                    raise RedactionCancelledError(f"OCR cancelled before page {page_number}")
                results.append(self._recognize_page(engine, pixel_buffer, document.render_scale))
        finally:
            self._release(engine)

        logger.info(
            "Recognized %d line(s) on %d page(s)", sum(len(page) for page in results), len(results),
            extra={"event": "ocr.done", "pages": len(results)}
        )
        return results

    def _recognize_page(
        self,
        engine: OcrEnginePort,
        pixel_buffer: PixelBuffer,
        render_scale: float
    ) -> List[RecognizedFragment]:
        page_number = pixel_buffer.page_index + 1
        logger.debug(
            "OCR started on page %d", page_number,
            extra={"event": "ocr.page_started", "page": pixel_buffer.page_index}
        )
        try:
            page_result = engine.recognize(pixel_buffer)
        except Exception as e:
            logger.error(
                "OCR error on page %d: %s", page_number, e,
                extra={"event": "ocr.failed", "page": pixel_buffer.page_index}
            )
            raise RecognitionError(page_number=page_number, cause=e) from e

        if not isinstance(page_result, OcrPageResult):
            raise RecognitionError(
                page_number=page_number,
                cause=ValueError(f"OCR returned no data ({type(page_result).__name__})")
            )

        fragments = flatten_lines(page_result, render_scale)
        logger.debug(
            "OCR finished on page %d: %d line(s)", page_number, len(fragments),
            extra={"event": "ocr.page_finished", "page": pixel_buffer.page_index, "lines": len(fragments)}
        )
        return fragments

    def _release(self, engine: OcrEnginePort) -> None:
        try:
            engine.terminate()
        except Exception as e:
            # Never mask the error that ended the page loop
            logger.warning(
                "Error terminating OCR engine: %s", e,
                extra={"event": "ocr.terminate_failed"}
            )
