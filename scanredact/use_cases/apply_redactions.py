import logging
from typing import Sequence, Tuple

from ..domain.entities import (
    PageGeometry, RedactionOutput, RedactionReport, RedactionTarget,
    RejectionReason, TargetDecision
)
from ..domain.exceptions import GeometryRejection, InvalidInputError, RedactionError
from ..domain.services.input_validation_service import PdfBuffer, require_pdf_buffer
from ..domain.services.redaction_geometry_service import RedactionGeometryService
from ..ports.pdf_document_port import BLACK, PdfDocumentHandle, PdfDocumentPort

logger = logging.getLogger(__name__)


class ApplyRedactionsUseCase:
    """Use case for drawing redaction rectangles on the original document."""

    def __init__(
        self,
        pdf_document: PdfDocumentPort,
        geometry_service: RedactionGeometryService = None
    ):
        self._pdf_document = pdf_document
        self._geometry_service = geometry_service or RedactionGeometryService()

    def get_engine_name(self) -> str:
        return self._pdf_document.get_engine_info().get("name", "unknown")

    def execute(
        self,
        original_pdf: PdfBuffer,
        targets: Sequence[RedactionTarget],
        raster_dimensions: Sequence[Tuple[int, int]],
        render_scale: float
    ) -> RedactionOutput:
        """
        Cover every acceptable target with an opaque black rectangle.

        Targets are handled independently: a rejected box or a failed draw
        is recorded in the report and the run continues. With no targets
        the unmodified document is saved and returned.

        Args:
            original_pdf: The source document, not consumed by rasterization
            targets: Boxes to cover, in reference space
            raster_dimensions: Pixel (width, height) of each rendered page
            render_scale: Scale the pages were rendered at

        Returns:
            RedactionOutput: Redacted document bytes and per-target decisions

        Raises:
            InvalidInputError: If the buffer is empty or released
            RedactionError: If the document cannot be loaded or saved
        """
        content = require_pdf_buffer(original_pdf, "redaction")
        if render_scale <= 0:
            raise InvalidInputError(f"Render scale must be positive, got {render_scale}")

        try:
            handle = self._pdf_document.load(content)
        except Exception as e:
            raise RedactionError(f"Failed to load PDF for redaction: {str(e)}") from e

        with handle:
            decisions = [
                self._redact_target(handle, target, raster_dimensions, render_scale)
                for target in targets
            ]
            try:
                pdf_bytes = handle.save()
            except Exception as e:
                raise RedactionError(f"Failed to create redacted PDF: {str(e)}") from e

        report = RedactionReport(decisions=decisions)
        logger.info(
            "Applied %d redaction(s), skipped %d", report.applied_count, report.skipped_count,
            extra={
                "event": "redact.done",
                "applied": report.applied_count,
                "skipped": report.skipped_count,
                "skipped_by_reason": {
                    reason.value: count for reason, count in report.skipped_by_reason().items()
                }
            }
        )
        return RedactionOutput(pdf_bytes=pdf_bytes, report=report)

    def _redact_target(
        self,
        handle: PdfDocumentHandle,
        target: RedactionTarget,
        raster_dimensions: Sequence[Tuple[int, int]],
        render_scale: float
    ) -> TargetDecision:
        if not (0 <= target.page < handle.page_count and target.page < len(raster_dimensions)):
            return self._reject(
                target,
                RejectionReason.PAGE_OUT_OF_RANGE,
                f"document has {handle.page_count} page(s)"
            )

        pdf_width, pdf_height = handle.page_size(target.page)
        pixel_width, pixel_height = raster_dimensions[target.page]
        geometry = PageGeometry(
            pdf_width=pdf_width,
            pdf_height=pdf_height,
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            render_scale=render_scale
        )

        try:
            rect = self._geometry_service.compute_rect(target.bbox, geometry)
        except GeometryRejection as rejection:
            return self._reject(target, rejection.reason, rejection.detail)

        try:
            handle.draw_filled_rect(target.page, rect.x, rect.y, rect.width, rect.height, BLACK)
        except Exception as e:
            logger.warning(
                "Error redacting word %r on page %d: %s", target.word, target.page + 1, e,
                extra={"event": "redact.draw_failed", "page": target.page}
            )
            return TargetDecision(
                target=target,
                applied=False,
                rect=rect,
                reason=RejectionReason.DRAWING_FAILED,
                detail=str(e)
            )

        logger.debug(
            "Redacted %r on page %d at (%.1f, %.1f, %.1f x %.1f)",
            target.word, target.page + 1, rect.x, rect.y, rect.width, rect.height,
            extra={"event": "redact.target_applied", "page": target.page}
        )
        return TargetDecision(target=target, applied=True, rect=rect)

    def _reject(self, target: RedactionTarget, reason: RejectionReason, detail: str) -> TargetDecision:
        logger.info(
            "Skipping %r on page %d: %s (%s)", target.word, target.page + 1, reason.value, detail,
            extra={"event": "redact.target_rejected", "page": target.page, "reason": reason.value}
        )
        return TargetDecision(target=target, applied=False, reason=reason, detail=detail)
