"""Tests for segmenting text extraction and the Tesseract recognizer (mocked)."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from foodbank.config import load_config
from foodbank.errors import ExtractionFailure, FailureKind
from foodbank.ocr import TextExtractor, TextRecognizer, create_recognizer
from foodbank.ocr.extractor import overlap_size
from foodbank.ocr.pdf import pdf_text, render_pdf_page, render_pdf_pages
from foodbank.ocr.tesseract import TesseractRecognizer


class ScriptedRecognizer(TextRecognizer):
    """Returns canned lines keyed by the crop's height, recording calls."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.shapes = []

    def recognize(self, bitmap):
        self.shapes.append(bitmap.shape)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _bitmap(height, width):
    return np.zeros((height, width, 3), dtype=np.uint8)


@pytest.fixture
def mock_cv2():
    """Inject a mock cv2 module into sys.modules."""
    mock = MagicMock()
    with patch.dict(sys.modules, {"cv2": mock}):
        yield mock


class TestSegmentBounds:
    def test_tall_image_three_segments(self):
        extractor = TextExtractor(ScriptedRecognizer([]))
        assert extractor.segment_bounds(9000) == [
            (0, 4000), (3800, 7800), (7600, 9000),
        ]

    def test_is_long(self):
        extractor = TextExtractor(ScriptedRecognizer([]))
        assert extractor.is_long(9000, 1800) is True   # ratio 5.0
        assert extractor.is_long(9000, 3000) is False  # ratio 3.0
        assert extractor.is_long(3900, 500) is False   # short

    def test_overlap_must_be_smaller_than_segment(self):
        with pytest.raises(ValueError):
            TextExtractor(ScriptedRecognizer([]), segment_height=200, segment_overlap=200)

    def test_from_config(self):
        config = load_config()
        config.ocr.segment_height = 1000
        config.ocr.segment_overlap = 100
        extractor = TextExtractor.from_config(ScriptedRecognizer([]), config.ocr)
        assert extractor.segment_bounds(2500) == [(0, 1000), (900, 1900), (1800, 2500)]


class TestOverlapSize:
    def test_largest_match_wins(self):
        assert overlap_size(["a", "b", "c"], ["b", "c", "d"]) == 2

    def test_no_match(self):
        assert overlap_size(["a", "b"], ["c", "d"]) == 0

    def test_window_limits_search(self):
        prev = [str(i) for i in range(20)]
        cur = prev[5:] + ["x"]
        assert overlap_size(prev, cur, window=10) == 0


class TestExtract:
    def test_short_image_single_pass(self):
        recognizer = ScriptedRecognizer([["  STORE  ", "", "Milk 1.99"]])
        text = TextExtractor(recognizer).extract(_bitmap(1000, 500))
        assert text == "STORE\nMilk 1.99"
        assert recognizer.shapes == [(1000, 500, 3)]

    def test_nothing_recognized(self):
        assert TextExtractor(ScriptedRecognizer([None])).extract(_bitmap(100, 100)) is None
        assert TextExtractor(ScriptedRecognizer([[" "]])).extract(_bitmap(100, 100)) is None

    def test_zero_size_bitmap(self):
        assert TextExtractor(ScriptedRecognizer([])).extract(_bitmap(0, 100)) is None

    def test_single_pass_failure_raises(self):
        recognizer = ScriptedRecognizer([RuntimeError("engine crashed")])
        with pytest.raises(ExtractionFailure) as exc:
            TextExtractor(recognizer).extract(_bitmap(100, 100))
        assert exc.value.kind is FailureKind.RECOGNITION

    def test_tall_image_dedups_boundary(self):
        recognizer = ScriptedRecognizer([
            ["Store", "Apples 2.00", "Bread 3.00", "Eggs 4.00"],
            ["Apples 2.00", "Bread 3.00", "Eggs 4.00", "Milk 1.50", "Tea 2.50"],
            ["Tea 2.50", "TOTAL 13.00"],
        ])
        text = TextExtractor(recognizer).extract(_bitmap(9000, 1800))
        assert text.split("\n") == [
            "Store", "Apples 2.00", "Bread 3.00", "Eggs 4.00",
            "Milk 1.50", "Tea 2.50", "TOTAL 13.00",
        ]
        assert [s[0] for s in recognizer.shapes] == [4000, 4000, 1400]
        for line in ("Apples 2.00", "Bread 3.00", "Eggs 4.00"):
            assert text.split("\n").count(line) == 1

    def test_no_overlap_keeps_segment(self):
        recognizer = ScriptedRecognizer([["a", "b"], ["c", "d"], ["e"]])
        text = TextExtractor(recognizer).extract(_bitmap(9000, 1800))
        assert text == "a\nb\nc\nd\ne"

    def test_failed_segment_skipped_and_dedup_uses_last_nonempty(self):
        recognizer = ScriptedRecognizer([
            ["a", "b", "c"],
            RuntimeError("segment failed"),
            ["b", "c", "d"],
        ])
        text = TextExtractor(recognizer).extract(_bitmap(9000, 1800))
        assert text == "a\nb\nc\nd"

    def test_empty_segment_does_not_reset_dedup(self):
        recognizer = ScriptedRecognizer([["a", "b"], None, ["b", "c"]])
        text = TextExtractor(recognizer).extract(_bitmap(9000, 1800))
        assert text == "a\nb\nc"

    def test_all_segments_fail(self):
        recognizer = ScriptedRecognizer([RuntimeError("x")] * 3)
        assert TextExtractor(recognizer).extract(_bitmap(9000, 1800)) is None


class TestAugmentPrompt:
    def test_appends_labeled_block(self):
        extractor = TextExtractor(ScriptedRecognizer([["Milk 1.99"]]))
        prompt = extractor.augment_prompt("Extract items.", _bitmap(100, 100))
        assert prompt.startswith("Extract items.\n\n---\nOCR-extracted text")
        assert "Milk 1.99" in prompt
        assert prompt.endswith("---")

    def test_unchanged_when_nothing_recognized(self):
        extractor = TextExtractor(ScriptedRecognizer([None]))
        assert extractor.augment_prompt("Extract.", _bitmap(100, 100)) == "Extract."

    def test_unchanged_when_recognition_fails(self):
        extractor = TextExtractor(ScriptedRecognizer([OSError("no tesseract")]))
        assert extractor.augment_prompt("Extract.", _bitmap(100, 100)) == "Extract."


class TestTesseractRecognizer:
    def test_create_recognizer(self):
        config = load_config()
        config.ocr.language = "deu"
        recognizer = create_recognizer(config)
        assert isinstance(recognizer, TesseractRecognizer)

    def test_recognize_mocked(self, mock_cv2):
        mock_tess = MagicMock()
        mock_tess.image_to_string.return_value = "  Milk 1.99 \n\nBread 2.50\n"
        bitmap = _bitmap(50, 50)
        mock_cv2.cvtColor.return_value = bitmap

        with patch.dict(sys.modules, {"pytesseract": mock_tess}):
            lines = TesseractRecognizer(language="eng").recognize(bitmap)

        assert lines == ["Milk 1.99", "Bread 2.50"]
        mock_cv2.cvtColor.assert_called_once()
        _, kwargs = mock_tess.image_to_string.call_args
        assert kwargs["lang"] == "eng"
        assert "--oem 1" in kwargs["config"]
        assert "--psm 4" in kwargs["config"]

    def test_recognize_empty(self, mock_cv2):
        mock_tess = MagicMock()
        mock_tess.image_to_string.return_value = "   \n"
        with patch.dict(sys.modules, {"pytesseract": mock_tess}):
            assert TesseractRecognizer().recognize(np.zeros((10, 10), dtype=np.uint8)) is None
        mock_cv2.cvtColor.assert_not_called()

    def test_custom_binary_path(self, mock_cv2):
        mock_tess = MagicMock()
        mock_tess.image_to_string.return_value = "x"
        with patch.dict(sys.modules, {"pytesseract": mock_tess}):
            TesseractRecognizer(tesseract_cmd="/opt/tesseract").recognize(_bitmap(5, 5))
        assert mock_tess.pytesseract.tesseract_cmd == "/opt/tesseract"


def _fake_fitz(page_texts, width=3, height=2):
    """A mock PyMuPDF module whose document has one page per text."""
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.get_text.return_value = text
        page.get_pixmap.return_value = SimpleNamespace(
            samples=bytes(range(width * height * 3)), width=width, height=height, n=3
        )
        pages.append(page)
    doc = MagicMock()
    doc.page_count = len(pages)
    doc.load_page.side_effect = lambda i: pages[i]
    fitz = MagicMock()
    fitz.open.return_value = doc
    return fitz


@pytest.fixture
def mock_fitz():
    fitz = _fake_fitz(["  Corner Shop \n\nMilk 1.99\n", "TOTAL 1.99"])
    with patch.dict(sys.modules, {"fitz": fitz}):
        yield fitz


@pytest.fixture
def scanned_fitz():
    fitz = _fake_fitz(["", "  \n"])
    with patch.dict(sys.modules, {"fitz": fitz}):
        yield fitz


class TestPdf:
    def test_text_layer(self, mock_fitz):
        assert pdf_text(b"%PDF") == "Corner Shop\nMilk 1.99\nTOTAL 1.99"
        mock_fitz.open.assert_called_once_with(stream=b"%PDF", filetype="pdf")
        mock_fitz.open.return_value.close.assert_called_once()

    def test_scanned_pdf_has_no_text(self, scanned_fitz):
        assert pdf_text(b"%PDF") is None

    def test_render_first_page_as_bgr(self, mock_fitz):
        bitmap = render_pdf_page(b"%PDF")
        assert bitmap.shape == (2, 3, 3)
        assert bitmap[0, 0].tolist() == [2, 1, 0]
        mock_fitz.Matrix.assert_called_once_with(2.0, 2.0)

    def test_render_missing_page(self, mock_fitz):
        with pytest.raises(ExtractionFailure) as exc:
            render_pdf_page(b"%PDF", page=5)
        assert exc.value.kind is FailureKind.RECOGNITION
        mock_fitz.open.return_value.close.assert_called_once()

    def test_render_all_pages(self, mock_fitz):
        assert len(render_pdf_pages(b"%PDF")) == 2

    def test_unreadable_pdf(self):
        fitz = MagicMock()
        fitz.open.side_effect = RuntimeError("cannot open broken document")
        with patch.dict(sys.modules, {"fitz": fitz}):
            with pytest.raises(ExtractionFailure) as exc:
                pdf_text(b"not a pdf")
        assert exc.value.kind is FailureKind.RECOGNITION


class TestExtractPdf:
    def test_prefers_text_layer(self, mock_fitz):
        recognizer = ScriptedRecognizer([])
        text = TextExtractor(recognizer).extract_pdf(b"%PDF")
        assert text.startswith("Corner Shop")
        assert recognizer.shapes == []

    def test_falls_back_to_ocr_of_pages(self, scanned_fitz):
        recognizer = ScriptedRecognizer([["Milk 1.99"], ["TOTAL 1.99"]])
        text = TextExtractor(recognizer).extract_pdf(b"%PDF")
        assert text == "Milk 1.99\nTOTAL 1.99"
        assert recognizer.shapes == [(2, 3, 3), (2, 3, 3)]

    def test_augment_pdf_prompt(self, mock_fitz):
        prompt = TextExtractor(ScriptedRecognizer([])).augment_pdf_prompt("Extract.", b"%PDF")
        assert "OCR-extracted text" in prompt
        assert "Milk 1.99" in prompt

    def test_augment_pdf_prompt_unreadable(self):
        fitz = MagicMock()
        fitz.open.side_effect = RuntimeError("broken")
        with patch.dict(sys.modules, {"fitz": fitz}):
            extractor = TextExtractor(ScriptedRecognizer([]))
            assert extractor.augment_pdf_prompt("Extract.", b"x") == "Extract."
