import logging

import pytest
from PIL import Image

from scanredact.domain.entities import BoundingBox, PixelBuffer, RasterizedDocument
from scanredact.domain.exceptions import RecognitionError, RedactionCancelledError
from scanredact.ports.ocr_engine_port import OcrBlock, OcrPageResult, OcrParagraph
from scanredact.use_cases.recognize_pages import RecognizePagesUseCase, flatten_lines


def rasterized(pages=1, scale=2.0):
    buffers = [
        PixelBuffer(page_index=i, width=1000, height=1400, image=Image.new("RGB", (1000, 1400), "white"))
        for i in range(pages)
    ]
    return RasterizedDocument(pages=buffers, render_scale=scale)


class TestFlattenLines:

    def test_walks_blocks_paragraphs_lines_in_order(self, ocr_line):
        result = OcrPageResult(text="", blocks=[
            OcrBlock(paragraphs=[
                OcrParagraph(lines=[ocr_line("first", (0, 0, 10, 10))]),
                OcrParagraph(lines=[ocr_line("second", (0, 20, 10, 30))])
            ]),
            OcrBlock(paragraphs=[OcrParagraph(lines=[ocr_line("third", (0, 40, 10, 50))])])
        ])

        fragments = flatten_lines(result, 1.0)

        assert [f.text for f in fragments] == ["first", "second", "third"]

    def test_boxes_descaled_to_reference_space(self, confidential_line):
        result = OcrPageResult(text="", blocks=[OcrBlock(paragraphs=[OcrParagraph(lines=[confidential_line])])])

        fragments = flatten_lines(result, 2.0)

        assert fragments[0].bbox == BoundingBox(100, 100, 250, 120)
        assert fragments[0].confidence == 95.0

    def test_empty_lines_dropped(self, ocr_line):
        result = OcrPageResult(text="", blocks=[OcrBlock(paragraphs=[OcrParagraph(lines=[
            ocr_line("", (0, 0, 10, 10))
        ])])])

        assert flatten_lines(result, 1.0) == []


class TestRecognizePagesUseCase:
    """Unit tests for the recognition stage."""

    def test_one_list_per_page(self, ocr_factory, confidential_line):
        factory = ocr_factory({1: [confidential_line]})

        pages = RecognizePagesUseCase(factory).execute(rasterized(pages=3))

        assert [len(page) for page in pages] == [0, 1, 0]
        assert pages[1][0].text == "ConfidentialCo"

    def test_single_engine_released_once(self, ocr_factory):
        factory = ocr_factory()

        RecognizePagesUseCase(factory).execute(rasterized(pages=3))

        assert len(factory.engines) == 1
        assert factory.engines[0].recognized_pages == [0, 1, 2]
        assert factory.engines[0].terminate_calls == 1

    def test_engine_failure_names_page_and_releases(self, ocr_factory):
        factory = ocr_factory(fail_on_page=1)

        with pytest.raises(RecognitionError) as exc_info:
            RecognizePagesUseCase(factory).execute(rasterized(pages=3))

        assert exc_info.value.page_number == 2
        assert factory.engines[0].recognized_pages == [0, 1]
        assert factory.engines[0].terminate_calls == 1

    def test_unusable_result_is_recognition_error(self, ocr_factory):
        factory = ocr_factory()
        engine = factory.create_engine()
        engine.recognize = lambda pixel_buffer: None
        factory.create_engine = lambda: engine

        with pytest.raises(RecognitionError) as exc_info:
            RecognizePagesUseCase(factory).execute(rasterized())

        assert exc_info.value.page_number == 1

    def test_terminate_failure_does_not_mask_error(self, ocr_factory, caplog):
        factory = ocr_factory(fail_on_page=0, fail_on_terminate=True)

        with caplog.at_level(logging.WARNING):
            with pytest.raises(RecognitionError):
                RecognizePagesUseCase(factory).execute(rasterized())

        assert any(getattr(r, "event", None) == "ocr.terminate_failed" for r in caplog.records)

    def test_terminate_failure_after_success_is_only_logged(self, ocr_factory):
        factory = ocr_factory(fail_on_terminate=True)

        pages = RecognizePagesUseCase(factory).execute(rasterized(pages=2))

        assert pages == [[], []]

    def test_cancellation_releases_engine(self, ocr_factory):
        factory = ocr_factory()

        with pytest.raises(RedactionCancelledError):
            RecognizePagesUseCase(factory).execute(rasterized(pages=2), should_cancel=lambda: True)

        assert factory.engines[0].recognized_pages == []
        assert factory.engines[0].terminate_calls == 1

    def test_page_events_logged(self, ocr_factory, caplog):
        with caplog.at_level(logging.DEBUG, logger="scanredact"):
            RecognizePagesUseCase(ocr_factory()).execute(rasterized(pages=2))

        events = [getattr(r, "event", None) for r in caplog.records]
        assert events.count("ocr.page_started") == 2
        assert events.count("ocr.page_finished") == 2
        assert "ocr.done" in events
