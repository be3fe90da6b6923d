"""
Tesseract OCR adapter.
Uses pytesseract's TSV output to rebuild the block/paragraph/line tree.
"""
import logging
from typing import Dict, List, Optional, Tuple

import pytesseract

from ..domain.entities import BoundingBox, PixelBuffer
from ..ports.ocr_engine_port import (
    OcrBlock, OcrEngineFactoryPort, OcrEnginePort, OcrLine, OcrPageResult, OcrParagraph
)

logger = logging.getLogger(__name__)

# Tesseract TSV levels
LEVEL_LINE = 4
LEVEL_WORD = 5


class _LineAccumulator:
    """Words and box of one TSV line while the tree is being rebuilt."""

    def __init__(self):
        self.bbox: Optional[BoundingBox] = None
        self.words: List[Tuple[str, float, BoundingBox]] = []

    def to_line(self) -> OcrLine:
        bbox = self.bbox
        if bbox is None and self.words:
            boxes = [word_bbox for _, _, word_bbox in self.words]
            bbox = BoundingBox(
                x0=min(b.x0 for b in boxes),
                y0=min(b.y0 for b in boxes),
                x1=max(b.x1 for b in boxes),
                y1=max(b.y1 for b in boxes)
            )
        confidences = [conf for _, conf, _ in self.words]
        return OcrLine(
            text=" ".join(text for text, _, _ in self.words),
            bbox=bbox or BoundingBox(0, 0, 0, 0),
            confidence=sum(confidences) / len(confidences) if confidences else 0.0,
            word_count=len(self.words)
        )


def build_page_result(data: Dict[str, list]) -> OcrPageResult:
    """
    Rebuild the OCR tree from ``pytesseract.image_to_data`` DICT output.

    Line confidence is the mean of the line's word confidences. Words with
    a negative confidence or blank text are not counted.
    """
    tree: Dict[int, Dict[int, Dict[int, _LineAccumulator]]] = {}

    for i in range(len(data["level"])):
        level = int(data["level"][i])
        if level not in (LEVEL_LINE, LEVEL_WORD):
            continue

        key_block = int(data["block_num"][i])
        key_par = int(data["par_num"][i])
        key_line = int(data["line_num"][i])
        line = tree.setdefault(key_block, {}).setdefault(key_par, {}).setdefault(
            key_line, _LineAccumulator()
        )

        left = float(data["left"][i])
        top = float(data["top"][i])
        bbox = BoundingBox(
            x0=left,
            y0=top,
            x1=left + float(data["width"][i]),
            y1=top + float(data["height"][i])
        )

        if level == LEVEL_LINE:
            line.bbox = bbox
            continue

        text = str(data["text"][i]).strip()
        confidence = float(data["conf"][i])
        if text and confidence >= 0:
            line.words.append((text, confidence, bbox))

    blocks = []
    for paragraphs in tree.values():
        blocks.append(OcrBlock(paragraphs=[
            OcrParagraph(lines=[accumulator.to_line() for accumulator in lines.values()])
            for lines in paragraphs.values()
        ]))

    page_text = "\n".join(
        line.text
        for block in blocks
        for paragraph in block.paragraphs
        for line in paragraph.lines
        if line.word_count
    )
    return OcrPageResult(text=page_text, blocks=blocks)


class TesseractOcrEngine(OcrEnginePort):
    """One Tesseract engine instance. Not safe for concurrent use."""

    def __init__(self, language: str = "eng", config: str = "", timeout: int = 0):
        self._language = language
        self._config = config
        self._timeout = timeout
        self._terminated = False

    def recognize(self, pixel_buffer: PixelBuffer) -> OcrPageResult:
        if self._terminated:
            raise RuntimeError("Tesseract engine has been terminated")

        data = pytesseract.image_to_data(
            pixel_buffer.image,
            lang=self._language,
            config=self._config,
            timeout=self._timeout,
            output_type=pytesseract.Output.DICT
        )
        return build_page_result(data)

    def terminate(self) -> None:
        # pytesseract runs one subprocess per call; nothing stays open between pages
        self._terminated = True

    @property
    def terminated(self) -> bool:
        return self._terminated


class TesseractOcrEngineFactory(OcrEngineFactoryPort):
    """Creates Tesseract engines sharing one configuration."""

    def __init__(self, language: str = "eng", config: str = "", timeout: int = 0):
        self._language = language
        self._config = config
        self._timeout = timeout

    def create_engine(self) -> TesseractOcrEngine:
        logger.debug(
            "Acquiring Tesseract engine (lang=%s)", self._language,
            extra={"event": "ocr.engine_acquired", "language": self._language}
        )
        return TesseractOcrEngine(
            language=self._language,
            config=self._config,
            timeout=self._timeout
        )

    def get_engine_info(self) -> dict:
        try:
            version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError:
            version = "not installed"
        return {
            "name": "tesseract",
            "version": version,
            "language": self._language,
            "description": "Tesseract OCR through pytesseract, line-level output"
        }
