"""
Domain entities for scanned PDF redaction.
Business objects shared by every stage of the pipeline.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum
from pydantic import BaseModel


class RunStatus(Enum):
    """Outcome of a successful redaction run."""
    REDACTED = "redacted"
    NOTHING_TO_REDACT = "nothing_to_redact"


class RejectionReason(Enum):
    """Why a redaction target was skipped."""
    PAGE_OUT_OF_RANGE = "page_out_of_range"
    INVALID_BOX = "invalid_box"
    OUT_OF_BOUNDS = "out_of_bounds"
    EXCESSIVE_COVERAGE = "excessive_coverage"
    EXCESSIVE_WIDTH = "excessive_width"
    EXCESSIVE_HEIGHT = "excessive_height"
    EMPTY_RECT = "empty_rect"
    DRAWING_FAILED = "drawing_failed"


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box with a top-left origin, as reported by OCR.

    Ordering of the corners is NOT validated here: OCR engines may return
    inverted or negative boxes and the redaction stage decides what to do
    with them.
    """
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def descaled(self, factor: float) -> "BoundingBox":
        """Divide every coordinate by ``factor``."""
        return BoundingBox(
            x0=self.x0 / factor,
            y0=self.y0 / factor,
            x1=self.x1 / factor,
            y1=self.y1 / factor
        )


@dataclass(frozen=True)
class PixelBuffer:
    """A rendered page. ``image`` is a Pillow image of ``width`` x ``height`` pixels."""
    page_index: int
    width: int
    height: int
    image: Any = field(repr=False, compare=False)


@dataclass(frozen=True)
class RasterizedDocument:
    """All pages of a document rendered at one render scale."""
    pages: List[PixelBuffer]
    render_scale: float

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def raster_dimensions(self) -> List[Tuple[int, int]]:
        """Pixel (width, height) of every page, in page order."""
        return [(page.width, page.height) for page in self.pages]


@dataclass(frozen=True)
class RecognizedFragment:
    """One OCR line. ``bbox`` is in reference space (render scale 1.0)."""
    text: str
    bbox: BoundingBox
    confidence: float


@dataclass(frozen=True)
class RedactionTarget:
    """A matched fragment to be covered. ``page`` is 0-based."""
    word: str
    bbox: BoundingBox
    page: int


@dataclass(frozen=True)
class PageGeometry:
    """Dimensions needed to map reference-space boxes onto one PDF page."""
    pdf_width: float
    pdf_height: float
    pixel_width: float
    pixel_height: float
    render_scale: float

    @property
    def original_image_width(self) -> float:
        return self.pixel_width / self.render_scale

    @property
    def original_image_height(self) -> float:
        return self.pixel_height / self.render_scale

    @property
    def scale_x(self) -> float:
        return self.pdf_width / self.original_image_width

    @property
    def scale_y(self) -> float:
        return self.pdf_height / self.original_image_height

    @property
    def page_area(self) -> float:
        return self.pdf_width * self.pdf_height


@dataclass(frozen=True)
class RedactionRect:
    """Rectangle in PDF drawing space (origin at the bottom-left corner)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class TargetDecision:
    """What the redaction stage did with one target."""
    target: RedactionTarget
    applied: bool
    rect: Optional[RedactionRect] = None
    reason: Optional[RejectionReason] = None
    detail: str = ""


@dataclass(frozen=True)
class RedactionReport:
    """Per-target decisions for one redaction pass."""
    decisions: List[TargetDecision] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return sum(1 for decision in self.decisions if decision.applied)

    @property
    def skipped_count(self) -> int:
        return sum(1 for decision in self.decisions if not decision.applied)

    def skipped_by_reason(self) -> Dict[RejectionReason, int]:
        """Number of skipped targets for each rejection reason."""
        counts: Dict[RejectionReason, int] = {}
        for decision in self.decisions:
            if not decision.applied and decision.reason is not None:
                counts[decision.reason] = counts.get(decision.reason, 0) + 1
        return counts


@dataclass(frozen=True)
class RedactionOutput:
    """Redacted document bytes plus the report that produced them."""
    pdf_bytes: bytes
    report: RedactionReport


@dataclass(frozen=True)
class RedactionRunResult:
    """Result of one full pipeline run over a document."""
    status: RunStatus
    pdf_bytes: bytes
    targets: List[RedactionTarget]
    report: RedactionReport
    page_count: int
    render_scale: float
    fragments_by_page: List[List[RecognizedFragment]] = field(default_factory=list, repr=False)

    @property
    def applied_count(self) -> int:
        return self.report.applied_count

    @property
    def skipped_count(self) -> int:
        return self.report.skipped_count

    @property
    def found_targets(self) -> bool:
        return self.status == RunStatus.REDACTED


@dataclass(frozen=True)
class Document:
    """A document to be processed."""
    path: str

    def __post_init__(self):
        if not self.path or not self.path.strip():
            raise ValueError("Document path cannot be empty")


@dataclass(frozen=True)
class RedactionResult:
    """Result of redacting a document stored at a path."""
    success: bool
    status: Optional[RunStatus]
    output_document: Optional[Document]
    targets: List[RedactionTarget]
    applied_count: int
    skipped_count: int
    message: str
    passes: int = 0
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    failed_page: Optional[int] = None

    @property
    def has_errors(self) -> bool:
        """Whether the run stopped on a fatal error."""
        return not self.success or self.error is not None


# API Models for FastAPI
class RedactionRequestAPI(BaseModel):
    """Redaction request via JSON."""
    source_path: str
    queries: List[str]
    destination_path: Optional[str] = None
    engine: Optional[str] = None
    passes: int = 1


class VerificationRequestAPI(BaseModel):
    """Verification request via JSON."""
    source_path: str
    queries: List[str]
    engine: Optional[str] = None


class RedactionTargetResponse(BaseModel):
    """Redaction target in a response."""
    word: str
    page: int
    bbox: List[float]


class RedactionResponse(BaseModel):
    """Redaction response."""
    success: bool
    message: str
    status: Optional[str] = None
    output_document: Optional[str] = None
    applied_count: int = 0
    skipped_count: int = 0
    passes: int = 0
    targets: List[RedactionTargetResponse] = []
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    failed_page: Optional[int] = None


class VerificationResponse(BaseModel):
    """Residual matches found in an already redacted document."""
    clean: bool
    residual_targets: List[RedactionTargetResponse] = []
