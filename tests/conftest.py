import pytest
import fitz  # PyMuPDF
from PIL import Image

from scanredact.domain.entities import BoundingBox, PixelBuffer
from scanredact.ports.ocr_engine_port import (
    OcrBlock, OcrEngineFactoryPort, OcrEnginePort, OcrLine, OcrPageResult, OcrParagraph
)
from scanredact.ports.rasterizer_port import RasterizerPort
from scanredact.adapters.pymupdf_document_adapter import PyMuPdfDocumentAdapter
from scanredact.use_cases.apply_redactions import ApplyRedactionsUseCase
from scanredact.use_cases.rasterize_document import RasterizeDocumentUseCase
from scanredact.use_cases.recognize_pages import RecognizePagesUseCase
from scanredact.use_cases.redact_document import RedactDocumentUseCase


def build_ocr_line(text, bbox, confidence=95.0):
    """OCR line with its box given as an (x0, y0, x1, y1) tuple in pixels."""
    return OcrLine(
        text=text,
        bbox=BoundingBox(*bbox),
        confidence=confidence,
        word_count=len(text.split())
    )


class ScriptedOcrEngine(OcrEnginePort):
    """OCR engine returning prepared lines per page index."""

    def __init__(self, lines_by_page, fail_on_page=None, fail_on_terminate=False):
        self.lines_by_page = lines_by_page
        self.fail_on_page = fail_on_page
        self.fail_on_terminate = fail_on_terminate
        self.recognized_pages = []
        self.terminate_calls = 0

    def recognize(self, pixel_buffer):
        if self.terminate_calls:
            raise RuntimeError("engine used after terminate")
        self.recognized_pages.append(pixel_buffer.page_index)
        if pixel_buffer.page_index == self.fail_on_page:
            raise RuntimeError("tesseract crashed")
        lines = self.visible_lines(pixel_buffer)
        return OcrPageResult(
            text="\n".join(line.text for line in lines),
            blocks=[OcrBlock(paragraphs=[OcrParagraph(lines=lines)])] if lines else []
        )

    def visible_lines(self, pixel_buffer):
        return list(self.lines_by_page.get(pixel_buffer.page_index, []))

    def terminate(self):
        self.terminate_calls += 1
        if self.fail_on_terminate:
            raise RuntimeError("worker already gone")


class InkAwareOcrEngine(ScriptedOcrEngine):
    """
    Only reports a line when the pixel at the centre of its box is not black,
    so text hidden under a redaction rectangle is no longer recognized.
    """

    def visible_lines(self, pixel_buffer):
        image = pixel_buffer.image.convert("RGB")
        visible = []
        for line in self.lines_by_page.get(pixel_buffer.page_index, []):
            centre = (
                int((line.bbox.x0 + line.bbox.x1) / 2),
                int((line.bbox.y0 + line.bbox.y1) / 2)
            )
            if image.getpixel(centre) != (0, 0, 0):
                visible.append(line)
        return visible


class ScriptedOcrEngineFactory(OcrEngineFactoryPort):
    """Factory handing out scripted engines and remembering them."""

    def __init__(self, lines_by_page=None, engine_class=ScriptedOcrEngine, **engine_kwargs):
        self.lines_by_page = lines_by_page or {}
        self.engine_class = engine_class
        self.engine_kwargs = engine_kwargs
        self.engines = []

    def create_engine(self):
        engine = self.engine_class(self.lines_by_page, **self.engine_kwargs)
        self.engines.append(engine)
        return engine

    def get_engine_info(self):
        return {"name": "scripted"}


class BlankRasterizer(RasterizerPort):
    """Renders white pages of the given point sizes without reading the PDF."""

    def __init__(self, page_sizes=((500, 700),), fail_on_page=None):
        self.page_sizes = list(page_sizes)
        self.fail_on_page = fail_on_page
        self.rendered_pages = []

    def page_count(self, pdf_bytes):
        return len(self.page_sizes)

    def render_page(self, pdf_bytes, page_index, scale):
        if page_index == self.fail_on_page:
            raise RuntimeError("renderer exploded")
        self.rendered_pages.append(page_index)
        width, height = self.page_sizes[page_index]
        size = (int(round(width * scale)), int(round(height * scale)))
        image = Image.new("RGB", size, "white")
        return PixelBuffer(page_index=page_index, width=size[0], height=size[1], image=image)

    def get_engine_info(self):
        return {"name": "blank"}


def build_pdf(pages=1, width=500, height=700, text=None):
    """Create an in-memory PDF with ``pages`` pages of the given size."""
    doc = fitz.open()
    for _ in range(pages):
        page = doc.new_page(width=width, height=height)
        if text:
            page.insert_text((100, 115), text, fontsize=14)
    content = doc.tobytes()
    doc.close()
    return content


@pytest.fixture
def make_pdf():
    """Factory for in-memory PDFs."""
    return build_pdf


@pytest.fixture
def sample_pdf_bytes():
    """One 500x700 pt page."""
    return build_pdf()


@pytest.fixture
def sample_pdf(tmp_path, sample_pdf_bytes):
    """Path to a one page PDF on disk."""
    path = tmp_path / "scan.pdf"
    path.write_bytes(sample_pdf_bytes)
    return str(path)


@pytest.fixture
def ocr_line():
    """Factory for OCR lines with pixel boxes."""
    return build_ocr_line


@pytest.fixture
def confidential_line():
    """
    The line used by most pipeline tests: reference box (100, 100, 250, 120)
    as seen on a page rendered at scale 2.0.
    """
    return build_ocr_line("ConfidentialCo", (200, 200, 500, 240), confidence=95.0)


@pytest.fixture
def ocr_factory():
    return ScriptedOcrEngineFactory


@pytest.fixture
def ink_aware_ocr_factory():
    def create(lines_by_page):
        return ScriptedOcrEngineFactory(lines_by_page, engine_class=InkAwareOcrEngine)
    return create


@pytest.fixture
def blank_rasterizer():
    return BlankRasterizer


@pytest.fixture
def build_pipeline():
    """Assemble the full pipeline around the given rasterizer and OCR factory."""
    def build(rasterizer, engine_factory, pdf_document=None, render_scale=2.0, **kwargs):
        return RedactDocumentUseCase(
            rasterize=RasterizeDocumentUseCase(rasterizer),
            recognize=RecognizePagesUseCase(engine_factory),
            apply_redactions=ApplyRedactionsUseCase(pdf_document or PyMuPdfDocumentAdapter()),
            render_scale=render_scale,
            **kwargs
        )
    return build
