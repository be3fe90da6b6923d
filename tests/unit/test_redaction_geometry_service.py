import pytest

from scanredact.domain.entities import BoundingBox, PageGeometry, RedactionRect, RejectionReason
from scanredact.domain.exceptions import GeometryRejection
from scanredact.domain.services.redaction_geometry_service import (
    RedactionGeometryService,
    check_blast_radius,
    compute_redaction_rect,
    to_pdf_rect,
    validate_bbox
)


def geometry(pdf=(500, 700), reference=(500, 700), scale=2.0):
    return PageGeometry(
        pdf_width=pdf[0],
        pdf_height=pdf[1],
        pixel_width=reference[0] * scale,
        pixel_height=reference[1] * scale,
        render_scale=scale
    )


def rejection_reason(bbox, page):
    with pytest.raises(GeometryRejection) as exc_info:
        compute_redaction_rect(bbox, page)
    return exc_info.value.reason


class TestPageGeometry:

    def test_scale_factors(self):
        page = geometry(pdf=(612, 792), reference=(1224, 1584), scale=2.0)

        assert page.original_image_width == 1224
        assert page.scale_x == pytest.approx(0.5)
        assert page.scale_y == pytest.approx(0.5)


class TestComputeRedactionRect:
    """Unit tests for the raster to PDF transform and its guards."""

    def test_single_line_maps_with_y_flip(self):
        rect = compute_redaction_rect(BoundingBox(100, 100, 250, 120), geometry())

        assert rect == RedactionRect(x=100, y=580, width=150, height=20)

    def test_scaled_pdf_page(self):
        # Reference image twice the size of the page
        page = geometry(pdf=(500, 700), reference=(1000, 1400), scale=1.0)

        rect = compute_redaction_rect(BoundingBox(200, 200, 500, 240), page)

        assert rect.x == pytest.approx(100)
        assert rect.y == pytest.approx(580)
        assert rect.width == pytest.approx(150)
        assert rect.height == pytest.approx(20)

    def test_inverted_box_rejected(self):
        assert rejection_reason(BoundingBox(100, 100, 90, 120), geometry()) is RejectionReason.INVALID_BOX

    def test_negative_origin_rejected(self):
        assert rejection_reason(BoundingBox(-1, 100, 90, 120), geometry()) is RejectionReason.INVALID_BOX

    def test_far_out_of_bounds_rejected(self):
        # Raster is 1000 px wide; more than 5x that is corrupt
        bbox = BoundingBox(10, 10, 5001, 20)

        assert rejection_reason(bbox, geometry()) is RejectionReason.OUT_OF_BOUNDS

    def test_coverage_guard(self):
        # 500 x 595 of a 500 x 700 page is 85 %
        bbox = BoundingBox(0, 0, 500, 595)

        assert rejection_reason(bbox, geometry()) is RejectionReason.EXCESSIVE_COVERAGE

    def test_width_guard(self):
        bbox = BoundingBox(0, 100, 490, 130)

        assert rejection_reason(bbox, geometry()) is RejectionReason.EXCESSIVE_WIDTH

    def test_height_guard(self):
        bbox = BoundingBox(100, 0, 150, 400)

        assert rejection_reason(bbox, geometry()) is RejectionReason.EXCESSIVE_HEIGHT

    def test_box_beyond_page_clamped(self):
        # Within 5x of the raster but past the right edge of the page
        rect = compute_redaction_rect(BoundingBox(480, 100, 560, 120), geometry())

        assert rect.x == 480
        assert rect.x + rect.width == pytest.approx(500)

    def test_box_starting_beyond_page_is_empty(self):
        assert rejection_reason(
            BoundingBox(600, 100, 700, 120), geometry()
        ) is RejectionReason.EMPTY_RECT

    def test_degenerate_box_gets_minimum_size(self):
        rect = to_pdf_rect(BoundingBox(100, 100, 100, 100), geometry())

        assert rect.width == 1.0
        assert rect.height == 1.0

    @pytest.mark.parametrize("scale", [1.0, 1.5, 2.0, 3.0])
    def test_round_trip_preserves_area_fraction(self, scale):
        page = geometry(pdf=(612, 792), reference=(612, 792), scale=scale)
        # A box in pixel space, descaled to reference space as OCR output is
        pixel_box = BoundingBox(120 * scale, 300 * scale, 420 * scale, 330 * scale)
        bbox = pixel_box.descaled(scale)

        rect = compute_redaction_rect(bbox, page)

        pixel_fraction = (pixel_box.width * pixel_box.height) / (page.pixel_width * page.pixel_height)
        assert rect.area / page.page_area == pytest.approx(pixel_fraction)
        assert rect.y == pytest.approx(792 - 330)


class TestGuardHelpers:

    def test_validate_bbox_accepts_good_box(self):
        validate_bbox(BoundingBox(0, 0, 10, 10), geometry())

    def test_blast_radius_checks_coverage_first(self):
        page = geometry()
        rect = RedactionRect(x=0, y=0, width=500, height=700)

        with pytest.raises(GeometryRejection) as exc_info:
            check_blast_radius(rect, page)

        assert exc_info.value.reason is RejectionReason.EXCESSIVE_COVERAGE

    def test_service_delegates(self):
        rect = RedactionGeometryService().compute_rect(BoundingBox(100, 100, 250, 120), geometry())
        assert rect.height == 20
