from unittest.mock import patch

import pytest
from PIL import Image

from scanredact.adapters.tesseract_ocr_engine import (
    TesseractOcrEngine,
    TesseractOcrEngineFactory,
    build_page_result
)
from scanredact.domain.entities import BoundingBox, PixelBuffer


def tsv(*rows):
    """Build an ``image_to_data`` DICT from (level, block, par, line, left, top, w, h, conf, text) rows."""
    keys = ["level", "block_num", "par_num", "line_num", "left", "top", "width", "height", "conf", "text"]
    data = {key: [] for key in keys}
    for row in rows:
        for key, value in zip(keys, row):
            data[key].append(value)
    return data


SAMPLE = tsv(
    (1, 0, 0, 0, 0, 0, 1000, 1400, -1, ""),
    (2, 1, 0, 0, 190, 190, 400, 120, -1, ""),
    (3, 1, 1, 0, 190, 190, 400, 120, -1, ""),
    (4, 1, 1, 1, 200, 200, 300, 40, -1, ""),
    (5, 1, 1, 1, 200, 200, 180, 40, 96, "Confidential"),
    (5, 1, 1, 1, 390, 200, 110, 40, 90, "Co."),
    (4, 1, 1, 2, 200, 260, 200, 40, -1, ""),
    (5, 1, 1, 2, 200, 260, 200, 40, 40, "smudge"),
    (4, 1, 1, 3, 200, 320, 10, 10, -1, ""),
    (5, 1, 1, 3, 200, 320, 10, 10, -1, " "),
)


class TestBuildPageResult:
    """Unit tests for rebuilding the OCR tree from TSV output."""

    def test_groups_words_into_lines(self):
        result = build_page_result(SAMPLE)

        lines = result.blocks[0].paragraphs[0].lines
        assert [line.text for line in lines] == ["Confidential Co.", "smudge", ""]
        assert lines[0].bbox == BoundingBox(200, 200, 500, 240)
        assert lines[0].confidence == pytest.approx(93.0)
        assert lines[0].word_count == 2

    def test_blank_words_not_counted(self):
        lines = build_page_result(SAMPLE).blocks[0].paragraphs[0].lines

        assert lines[2].word_count == 0
        assert lines[2].confidence == 0.0

    def test_page_text_skips_empty_lines(self):
        assert build_page_result(SAMPLE).text == "Confidential Co.\nsmudge"

    def test_empty_page(self):
        result = build_page_result(tsv((1, 0, 0, 0, 0, 0, 1000, 1400, -1, "")))

        assert result.blocks == []
        assert result.text == ""

    def test_line_box_from_words_when_missing(self):
        result = build_page_result(tsv(
            (5, 1, 1, 1, 10, 20, 30, 10, 80, "a"),
            (5, 1, 1, 1, 50, 18, 20, 14, 70, "b"),
        ))

        line = result.blocks[0].paragraphs[0].lines[0]
        assert line.bbox == BoundingBox(10, 18, 70, 32)


class TestTesseractOcrEngine:

    @pytest.fixture
    def pixel_buffer(self):
        return PixelBuffer(page_index=0, width=100, height=100, image=Image.new("RGB", (100, 100), "white"))

    def test_recognize_calls_pytesseract(self, pixel_buffer):
        engine = TesseractOcrEngine(language="fra", config="--psm 6", timeout=30)

        with patch("scanredact.adapters.tesseract_ocr_engine.pytesseract.image_to_data",
                   return_value=SAMPLE) as image_to_data:
            result = engine.recognize(pixel_buffer)

        assert result.text.startswith("Confidential Co.")
        _, kwargs = image_to_data.call_args
        assert kwargs["lang"] == "fra"
        assert kwargs["config"] == "--psm 6"
        assert kwargs["timeout"] == 30

    def test_recognize_after_terminate_fails(self, pixel_buffer):
        engine = TesseractOcrEngine()
        with engine:
            pass

        assert engine.terminated
        with pytest.raises(RuntimeError):
            engine.recognize(pixel_buffer)

    def test_factory_creates_configured_engines(self):
        factory = TesseractOcrEngineFactory(language="deu", config="--oem 1", timeout=5)

        first = factory.create_engine()
        second = factory.create_engine()

        assert first is not second
        assert first._language == "deu"
        assert second._config == "--oem 1"

    def test_engine_info_without_binary(self):
        import pytesseract

        with patch("scanredact.adapters.tesseract_ocr_engine.pytesseract.get_tesseract_version",
                   side_effect=pytesseract.TesseractNotFoundError()):
            info = TesseractOcrEngineFactory().get_engine_info()

        assert info["name"] == "tesseract"
        assert info["version"] == "not installed"
