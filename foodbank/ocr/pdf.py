"""PDF text-layer reading and page rendering (PyMuPDF)."""

from __future__ import annotations

import logging

import numpy as np

from ..errors import ExtractionFailure, FailureKind

logger = logging.getLogger(__name__)


def _fitz():
    try:
        import fitz  # PyMuPDF
    except ImportError:
        raise ImportError("PyMuPDF is required: pip install pymupdf") from None
    return fitz


def _open(fitz, data: bytes):
    try:
        return fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ExtractionFailure(
            FailureKind.RECOGNITION, f"Could not open PDF: {e}"
        ) from e


def pdf_text(data: bytes) -> str | None:
    """Return the embedded text of every page, or None for scanned PDFs."""
    fitz = _fitz()
    doc = _open(fitz, data)
    try:
        pages = [doc.load_page(i).get_text("text") for i in range(doc.page_count)]
    finally:
        doc.close()
    lines = [line.strip() for page in pages for line in page.splitlines()]
    text = "\n".join(line for line in lines if line)
    return text or None


def _render(fitz, doc, page: int, scale: float) -> np.ndarray:
    pix = doc.load_page(page).get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
    rgb = np.frombuffer(pix.samples, dtype=np.uint8).reshape(
        pix.height, pix.width, pix.n
    )
    logger.debug("Rendered PDF page %d at %dx%d", page + 1, pix.width, pix.height)
    return np.ascontiguousarray(rgb[:, :, ::-1])


def render_pdf_page(data: bytes, page: int = 0, scale: float = 2.0) -> np.ndarray:
    """Render one PDF page to a BGR bitmap at *scale* times 72 dpi."""
    fitz = _fitz()
    doc = _open(fitz, data)
    try:
        if not 0 <= page < doc.page_count:
            raise ExtractionFailure(
                FailureKind.RECOGNITION,
                f"PDF has {doc.page_count} page(s); cannot render page {page + 1}",
            )
        return _render(fitz, doc, page, scale)
    finally:
        doc.close()


def render_pdf_pages(data: bytes, scale: float = 2.0) -> list[np.ndarray]:
    fitz = _fitz()
    doc = _open(fitz, data)
    try:
        return [_render(fitz, doc, i, scale) for i in range(doc.page_count)]
    finally:
        doc.close()
