import logging
from typing import Callable, List, Optional, Sequence

from ..domain.entities import RedactionReport, RedactionRunResult, RedactionTarget, RunStatus
from ..domain.exceptions import InputTooLargeError, InvalidInputError
from ..domain.services.configuration_service import MAX_INPUT_BYTES
from ..domain.services.input_validation_service import PdfBuffer, require_pdf_buffer
from ..domain.services.target_matching_service import TargetMatchingService
from .apply_redactions import ApplyRedactionsUseCase
from .rasterize_document import RasterizeDocumentUseCase
from .recognize_pages import RecognizePagesUseCase

logger = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 2.0


class RedactDocumentUseCase:
    """
    Use case running the whole pipeline over one document:
    rasterize, recognize, match, redact.

    Redacted output can be fed straight back into ``execute``; it is
    treated exactly like a freshly supplied document.
    """

    def __init__(
        self,
        rasterize: RasterizeDocumentUseCase,
        recognize: RecognizePagesUseCase,
        apply_redactions: ApplyRedactionsUseCase,
        matching_service: Optional[TargetMatchingService] = None,
        render_scale: float = DEFAULT_RENDER_SCALE,
        max_input_bytes: int = MAX_INPUT_BYTES
    ):
        self._rasterize = rasterize
        self._recognize = recognize
        self._apply_redactions = apply_redactions
        self._matching_service = matching_service or TargetMatchingService()
        self._render_scale = render_scale
        self._max_input_bytes = min(max_input_bytes, MAX_INPUT_BYTES)

    def execute(
        self,
        pdf_bytes: PdfBuffer,
        queries: Sequence[str],
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> RedactionRunResult:
        """
        Redact every confident OCR line containing any of the queries.

        Args:
            pdf_bytes: Source document content
            queries: Phrases to redact (case-insensitive, OR-ed)
            should_cancel: Checked between pages; returning True aborts the run

        Returns:
            RedactionRunResult: ``REDACTED`` with the new document and counts, or
            ``NOTHING_TO_REDACT`` with the original bytes untouched

        Raises:
            InputTooLargeError: If the document exceeds the size limit
            InvalidInputError: If the document buffer or queries are unusable
            PageConversionError: If a page cannot be rasterized
            RecognitionError: If OCR fails on a page
            RedactionCancelledError: If ``should_cancel`` asked to stop
        """
        original = require_pdf_buffer(pdf_bytes, "redaction")
        self._check_size(len(original))
        self._matching_service.validate_queries(queries)
        engines = self.get_engine_names()
        logger.info(
            "Starting redaction run: %d byte(s), %d query(ies), rasterizer=%s, ocr=%s, writer=%s",
            len(original), len(queries), engines["rasterizer"], engines["ocr"], engines["writer"],
            extra={"event": "run.start", **engines}
        )

        # Rasterization gets its own copy; ``original`` stays untouched for drawing
        rasterized = self._rasterize.execute(
            bytearray(original), self._render_scale, should_cancel=should_cancel
        )
        fragments_by_page = self._recognize.execute(rasterized, should_cancel=should_cancel)
        targets = self._matching_service.find_targets(fragments_by_page, queries)

        if not targets:
            logger.info(
                "No instances found to redact",
                extra={"event": "run.nothing_to_redact", "pages": rasterized.page_count}
            )
            return RedactionRunResult(
                status=RunStatus.NOTHING_TO_REDACT,
                pdf_bytes=original,
                targets=[],
                report=RedactionReport(),
                page_count=rasterized.page_count,
                render_scale=rasterized.render_scale,
                fragments_by_page=fragments_by_page
            )

        output = self._apply_redactions.execute(
            original,
            targets,
            rasterized.raster_dimensions,
            rasterized.render_scale
        )
        return RedactionRunResult(
            status=RunStatus.REDACTED,
            pdf_bytes=output.pdf_bytes,
            targets=targets,
            report=output.report,
            page_count=rasterized.page_count,
            render_scale=rasterized.render_scale,
            fragments_by_page=fragments_by_page
        )

    def execute_passes(
        self,
        pdf_bytes: PdfBuffer,
        queries: Sequence[str],
        max_passes: int = 2,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> List[RedactionRunResult]:
        """
        Run the pipeline repeatedly, feeding each redacted output back in.

        Stops after a pass that finds nothing or applies nothing, or after
        ``max_passes`` passes.

        Returns:
            The result of every pass, in order
        """
        if max_passes < 1:
            raise InvalidInputError(f"At least one pass is required, got {max_passes}")

        results = []
        current = pdf_bytes
        for pass_number in range(1, max_passes + 1):
            result = self.execute(current, queries, should_cancel=should_cancel)
            results.append(result)
            logger.info(
                "Pass %d: %s, %d applied, %d skipped",
                pass_number, result.status.value, result.applied_count, result.skipped_count,
                extra={
                    "event": "run.pass",
                    "pass": pass_number,
                    "status": result.status.value,
                    "applied": result.applied_count,
                    "skipped": result.skipped_count
                }
            )
            if not result.found_targets or result.applied_count == 0:
                break
            current = result.pdf_bytes
        return results

    def find_residual_targets(
        self,
        pdf_bytes: PdfBuffer,
        queries: Sequence[str],
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> List[RedactionTarget]:
        """
        Rasterize, recognize and match without drawing anything.

        Used to check that a redacted document no longer exposes the queries.
        """
        original = require_pdf_buffer(pdf_bytes, "verification")
        self._check_size(len(original))
        self._matching_service.validate_queries(queries)

        rasterized = self._rasterize.execute(original, self._render_scale, should_cancel=should_cancel)
        fragments_by_page = self._recognize.execute(rasterized, should_cancel=should_cancel)
        return self._matching_service.find_targets(fragments_by_page, queries)

    def get_engine_names(self) -> dict:
        """Names of the engines behind each stage, keyed by role."""
        return {
            "rasterizer": self._rasterize.get_engine_name(),
            "ocr": self._recognize.get_engine_name(),
            "writer": self._apply_redactions.get_engine_name()
        }

    def _check_size(self, size: int) -> None:
        if size > self._max_input_bytes:
            raise InputTooLargeError(size=size, limit=self._max_input_bytes)
