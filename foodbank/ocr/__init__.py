"""Text recognition contract, recognizer factory and segmenting extractor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .extractor import TextExtractor

if TYPE_CHECKING:
    import numpy as np

    from ..config import IngestConfig


class TextRecognizer(ABC):
    """Abstract base for recognizing text lines in a bitmap."""

    @abstractmethod
    def recognize(self, bitmap: np.ndarray) -> list[str] | None:
        """Return recognized lines top to bottom, or None if nothing was read.

        Implementations raise on recognition errors; callers decide whether
        a failure is fatal.
        """
        ...


def create_recognizer(config: IngestConfig) -> TextRecognizer:
    """Create the text recognizer described by the configuration."""
    from .tesseract import TesseractRecognizer

    return TesseractRecognizer(
        language=config.ocr.language,
        tesseract_cmd=config.ocr.tesseract_cmd,
    )


__all__ = ["TextExtractor", "TextRecognizer", "create_recognizer"]
