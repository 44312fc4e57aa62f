"""Segment-and-deduplicate text extraction for tall receipt images."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import ExtractionFailure, FailureKind
from .pdf import pdf_text, render_pdf_pages

if TYPE_CHECKING:
    import numpy as np

    from ..config import OCRConfig
    from . import TextRecognizer

logger = logging.getLogger(__name__)


@dataclass
class RawSegment:
    """A full-width horizontal band of the source bitmap."""

    top: int
    height: int
    pixels: np.ndarray


def _clean(lines: list[str] | None) -> list[str]:
    if not lines:
        return []
    return [line.strip() for line in lines if line and line.strip()]


def overlap_size(previous: list[str], current: list[str], window: int = 10) -> int:
    """Largest N <= *window* where previous[-N:] equals current[:N], else 0."""
    for n in range(min(window, len(previous), len(current)), 0, -1):
        if previous[-n:] == current[:n]:
            return n
    return 0


class TextExtractor:
    """Recognize text in a bitmap, slicing tall images into overlapping bands.

    Long receipts lose accuracy when recognized in one pass, so any image
    taller than *segment_height* whose height/width ratio exceeds
    *long_image_ratio* is cut into bands that overlap by *segment_overlap*
    pixels. Lines repeated across a cut are dropped from the later band.
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        segment_height: int = 4000,
        segment_overlap: int = 200,
        long_image_ratio: float = 3.0,
        dedup_window: int = 10,
    ) -> None:
        if segment_overlap >= segment_height:
            raise ValueError(
                f"segment_overlap ({segment_overlap}) must be smaller than "
                f"segment_height ({segment_height})"
            )
        self._recognizer = recognizer
        self.segment_height = segment_height
        self.segment_overlap = segment_overlap
        self.long_image_ratio = long_image_ratio
        self.dedup_window = dedup_window

    @classmethod
    def from_config(cls, recognizer: TextRecognizer, config: OCRConfig) -> TextExtractor:
        return cls(
            recognizer,
            segment_height=config.segment_height,
            segment_overlap=config.segment_overlap,
            long_image_ratio=config.long_image_ratio,
            dedup_window=config.dedup_window,
        )

    def is_long(self, height: int, width: int) -> bool:
        return height / width > self.long_image_ratio and height > self.segment_height

    def segment_bounds(self, height: int) -> list[tuple[int, int]]:
        """(top, bottom) pixel rows of every band for an image *height* tall."""
        step = self.segment_height - self.segment_overlap
        bounds = []
        y = 0
        while y < height:
            bounds.append((y, min(y + self.segment_height, height)))
            y += step
        return bounds

    def segments(self, bitmap: np.ndarray) -> list[RawSegment]:
        return [
            RawSegment(top=top, height=bottom - top, pixels=bitmap[top:bottom])
            for top, bottom in self.segment_bounds(bitmap.shape[0])
        ]

    def extract(self, bitmap: np.ndarray) -> str | None:
        """Return all recognized text joined by newlines, or None.

        Raises:
            ExtractionFailure: single-pass recognition failed.
        """
        height, width = bitmap.shape[:2]
        if height == 0 or width == 0:
            return None

        if not self.is_long(height, width):
            try:
                lines = _clean(self._recognizer.recognize(bitmap))
            except ExtractionFailure:
                raise
            except Exception as e:
                raise ExtractionFailure(FailureKind.RECOGNITION, str(e)) from e
            return "\n".join(lines) or None

        kept: list[str] = []
        previous: list[str] = []
        for segment in self.segments(bitmap):
            try:
                lines = _clean(self._recognizer.recognize(segment.pixels))
            except Exception as e:
                logger.warning(
                    "Skipping segment at y=%d (height %d): %s",
                    segment.top, segment.height, e,
                )
                continue
            if not lines:
                continue

            drop = overlap_size(previous, lines, self.dedup_window) if previous else 0
            if drop:
                logger.debug("Dropped %d overlapping line(s) at y=%d", drop, segment.top)
            kept.extend(lines[drop:])
            previous = lines

        return "\n".join(kept) or None

    def extract_pdf(self, data: bytes) -> str | None:
        """Return a PDF's embedded text, or OCR its rendered pages.

        Raises:
            ExtractionFailure: the PDF could not be read or recognized.
        """
        text = pdf_text(data)
        if text:
            return text
        logger.debug("PDF has no text layer; recognizing rendered pages")
        pages = [self.extract(page) for page in render_pdf_pages(data)]
        return "\n".join(p for p in pages if p) or None

    def augment_prompt(self, prompt: str, bitmap: np.ndarray) -> str:
        """Append recognized text to *prompt*, or return it unchanged."""
        return self._augment(prompt, self.extract, bitmap)

    def augment_pdf_prompt(self, prompt: str, data: bytes) -> str:
        return self._augment(prompt, self.extract_pdf, data)

    @staticmethod
    def _augment(prompt: str, read, source) -> str:
        try:
            text = read(source)
        except ExtractionFailure as e:
            logger.warning("Text recognition failed, sending the file only: %s", e)
            return prompt
        if not text:
            return prompt
        return (
            f"{prompt}\n\n"
            "---\n"
            "OCR-extracted text (may contain recognition errors; "
            "use the image as the source of truth):\n"
            f"{text}\n"
            "---"
        )
