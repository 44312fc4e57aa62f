"""Image loading and encoding helpers (OpenCV)."""

from __future__ import annotations

from pathlib import Path

import numpy as np


def _cv2():
    try:
        import cv2
    except ImportError:
        raise ImportError(
            "opencv-python is required: pip install opencv-python"
        ) from None
    return cv2


def load_bitmap(path: str | Path) -> np.ndarray:
    """Read an image file into a BGR ndarray."""
    cv2 = _cv2()
    image = cv2.imread(str(path))
    if image is None:
        raise FileNotFoundError(f"Could not read image: {path}")
    return image


def decode_bitmap(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (JPEG, PNG, ...) into a BGR ndarray."""
    cv2 = _cv2()
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError("Could not decode image data")
    return image


def encode_jpeg(bitmap: np.ndarray, quality: int = 80) -> bytes:
    """Encode a bitmap as JPEG bytes for upload."""
    cv2 = _cv2()
    ok, buffer = cv2.imencode(".jpg", bitmap, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ValueError("JPEG encoding failed")
    return buffer.tobytes()
