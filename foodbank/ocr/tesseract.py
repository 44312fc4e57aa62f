"""Tesseract text recognizer."""

from __future__ import annotations

import logging

from . import TextRecognizer

logger = logging.getLogger(__name__)

# LSTM engine, single column of variable-size text
_TESSERACT_CONFIG = "--oem 1 --psm 4"


class TesseractRecognizer(TextRecognizer):
    """Recognize text with the Tesseract OCR engine via pytesseract."""

    def __init__(self, language: str = "eng", tesseract_cmd: str = "") -> None:
        self._language = language
        self._tesseract_cmd = tesseract_cmd

    def recognize(self, bitmap) -> list[str] | None:
        try:
            import cv2
        except ImportError:
            raise ImportError(
                "opencv-python is required: pip install opencv-python"
            ) from None
        try:
            import pytesseract
        except ImportError:
            raise ImportError(
                "pytesseract is required: pip install pytesseract"
            ) from None

        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd

        image = bitmap
        if bitmap.ndim == 3:
            image = cv2.cvtColor(bitmap, cv2.COLOR_BGR2RGB)

        text = pytesseract.image_to_string(
            image, lang=self._language, config=_TESSERACT_CONFIG
        )
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        logger.debug("Tesseract read %d line(s)", len(lines))
        return lines or None
