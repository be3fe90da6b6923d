"""
Redaction geometry service.
Maps reference-space OCR boxes onto PDF pages and bounds the damage a
malformed box can do.
"""
from ..entities import BoundingBox, PageGeometry, RedactionRect, RejectionReason
from ..exceptions import GeometryRejection

# Boxes reaching past this multiple of the raster size are treated as corrupt.
OUT_OF_BOUNDS_FACTOR = 5
# Largest share of the page area a single rectangle may cover.
MAX_COVERAGE = 0.80
# Largest share of the page width a single rectangle may span.
MAX_WIDTH_RATIO = 0.95
# Largest share of the page height a single rectangle may span.
MAX_HEIGHT_RATIO = 0.50
# Smallest rectangle side in PDF points before clamping.
MIN_RECT_SIDE = 1.0


def validate_bbox(bbox: BoundingBox, geometry: PageGeometry) -> None:
    """
    Reject structurally invalid or grossly out-of-bounds boxes.

    Raises:
        GeometryRejection: With ``INVALID_BOX`` or ``OUT_OF_BOUNDS``
    """
    if bbox.x0 < 0 or bbox.y0 < 0 or bbox.x1 < bbox.x0 or bbox.y1 < bbox.y0:
        raise GeometryRejection(
            RejectionReason.INVALID_BOX,
            f"box ({bbox.x0}, {bbox.y0}, {bbox.x1}, {bbox.y1}) is malformed"
        )

    if (bbox.x1 > geometry.pixel_width * OUT_OF_BOUNDS_FACTOR or
            bbox.y1 > geometry.pixel_height * OUT_OF_BOUNDS_FACTOR):
        raise GeometryRejection(
            RejectionReason.OUT_OF_BOUNDS,
            f"box ({bbox.x1}, {bbox.y1}) exceeds {OUT_OF_BOUNDS_FACTOR}x the "
            f"{geometry.pixel_width}x{geometry.pixel_height} raster"
        )


def to_pdf_rect(bbox: BoundingBox, geometry: PageGeometry) -> RedactionRect:
    """
    Transform a reference-space box into PDF drawing space and clamp it to
    the page.

    OCR boxes have their origin at the top-left corner while PDF drawing
    space starts at the bottom-left, hence the Y flip.
    """
    scale_x = geometry.scale_x
    scale_y = geometry.scale_y

    x = max(0.0, bbox.x0 * scale_x)
    rect_width = max(MIN_RECT_SIDE, (bbox.x1 - bbox.x0) * scale_x)
    rect_height = max(MIN_RECT_SIDE, (bbox.y1 - bbox.y0) * scale_y)
    y = max(0.0, geometry.pdf_height - bbox.y0 * scale_y - rect_height)

    return RedactionRect(
        x=x,
        y=y,
        width=min(rect_width, geometry.pdf_width - x),
        height=min(rect_height, geometry.pdf_height - y)
    )


def check_blast_radius(rect: RedactionRect, geometry: PageGeometry) -> None:
    """
    Reject rectangles too large to come from a single line of text.

    Raises:
        GeometryRejection: With ``EXCESSIVE_COVERAGE``, ``EXCESSIVE_WIDTH``,
            ``EXCESSIVE_HEIGHT`` or ``EMPTY_RECT``
    """
    coverage = rect.area / geometry.page_area
    if coverage > MAX_COVERAGE:
        raise GeometryRejection(
            RejectionReason.EXCESSIVE_COVERAGE,
            f"rectangle covers {coverage:.1%} of the page"
        )

    if rect.width > geometry.pdf_width * MAX_WIDTH_RATIO:
        raise GeometryRejection(
            RejectionReason.EXCESSIVE_WIDTH,
            f"rectangle width {rect.width:.1f} exceeds {MAX_WIDTH_RATIO:.0%} of the page"
        )

    if rect.height > geometry.pdf_height * MAX_HEIGHT_RATIO:
        raise GeometryRejection(
            RejectionReason.EXCESSIVE_HEIGHT,
            f"rectangle height {rect.height:.1f} exceeds {MAX_HEIGHT_RATIO:.0%} of the page"
        )

    if rect.width <= 0 or rect.height <= 0:
        raise GeometryRejection(
            RejectionReason.EMPTY_RECT,
            f"rectangle {rect.width:.1f}x{rect.height:.1f} is empty after clamping"
        )


def compute_redaction_rect(bbox: BoundingBox, geometry: PageGeometry) -> RedactionRect:
    """
    Compute the PDF rectangle covering ``bbox``, or reject it.

    Args:
        bbox: Box in reference space (render scale 1.0)
        geometry: Page and raster dimensions for the target page

    Returns:
        The rectangle to draw, in PDF drawing space

    Raises:
        GeometryRejection: If any safety check fails
    """
    validate_bbox(bbox, geometry)
    rect = to_pdf_rect(bbox, geometry)
    check_blast_radius(rect, geometry)
    return rect


class RedactionGeometryService:
    """Domain service for the raster-to-PDF transform."""

    def compute_rect(self, bbox: BoundingBox, geometry: PageGeometry) -> RedactionRect:
        """Compute the rectangle for a box. See ``compute_redaction_rect``."""
        return compute_redaction_rect(bbox, geometry)
