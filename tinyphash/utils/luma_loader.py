"""Decode image files into row-major 8-bit luma buffers."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from tinyphash import config
from tinyphash.errors import DecodeFailure, UnsupportedFormat

LumaImage = Tuple[bytes, int, int]

logger = logging.getLogger(__name__)


def rgba_to_luma(rgba: np.ndarray) -> np.ndarray:
    """Convert (H, W, 4) uint8 RGBA pixels to (H, W) uint8 luma.

    Colour channels are premultiplied by alpha, then
    ``(66r + 129g + 25b + 128) / 256 + 16`` is clamped to [0, 255] and truncated.
    """
    if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.dtype != np.uint8:
        raise DecodeFailure(f"Expected (H, W, 4) uint8 RGBA pixels, got shape={rgba.shape} dtype={rgba.dtype}.")

    pixels = rgba.astype(np.float32)
    alpha = pixels[:, :, 3]
    r = pixels[:, :, 0] * alpha / np.float32(255)
    g = pixels[:, :, 1] * alpha / np.float32(255)
    b = pixels[:, :, 2] * alpha / np.float32(255)

    luma = (np.float32(66) * r + np.float32(129) * g + np.float32(25) * b + np.float32(128)) / np.float32(256)
    luma = luma + np.float32(16)
    return np.clip(luma, 0, 255).astype(np.uint8)


def _decode_with_opencv(raw_bytes: bytes) -> Optional[np.ndarray]:
    """Decode to RGBA with OpenCV, or return None if OpenCV cannot handle the data."""
    arr = np.frombuffer(raw_bytes, dtype=np.uint8)
    image = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if image is None:
        return None

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    if image.dtype != np.uint8:
        return None

    if image.ndim == 2 or image.shape[2] == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return None


def _reduce_wide_gray(pil_img: Image.Image) -> np.ndarray:
    """Reduce an ``I``/``I;16*`` image to RGBA, keeping the high byte like the OpenCV path."""
    wide = np.clip(np.asarray(pil_img).astype(np.int64), 0, 0xFFFF)
    gray = (wide >> 8).astype(np.uint8)
    opaque = np.full_like(gray, 255)
    return np.dstack([gray, gray, gray, opaque])


def _decode_with_pillow(raw_bytes: bytes) -> np.ndarray:
    """Decode to RGBA with Pillow."""
    try:
        with Image.open(BytesIO(raw_bytes)) as pil_img:
            if pil_img.mode == "I" or pil_img.mode.startswith("I;16"):
                return _reduce_wide_gray(pil_img)
            rgba = pil_img.convert("RGBA")
    except UnidentifiedImageError as exc:
        raise UnsupportedFormat("Unrecognized image format.") from exc
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeFailure(f"Failed to decode image bytes: {exc}") from exc
    return np.asarray(rgba, dtype=np.uint8)


def decode_luma(raw_bytes: bytes) -> LumaImage:
    """Decode encoded image bytes and return ``(luma_bytes, width, height)``."""
    if not raw_bytes:
        raise UnsupportedFormat("Empty image data.")

    rgba: Optional[np.ndarray] = None
    if config.DECODER == "opencv":
        try:
            rgba = _decode_with_opencv(raw_bytes)
        except cv2.error as exc:
            logger.warning("OpenCV decode failed, falling back to Pillow: %s", exc)
        if rgba is None:
            logger.debug("OpenCV could not decode %s bytes, trying Pillow", len(raw_bytes))

    if rgba is None:
        rgba = _decode_with_pillow(raw_bytes)

    luma = rgba_to_luma(rgba)
    height, width = luma.shape
    return luma.tobytes(), width, height


def load_luma(path: Union[str, Path]) -> LumaImage:
    """Read an image file and return ``(luma_bytes, width, height)``."""
    try:
        raw_bytes = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeFailure(f"Failed to read image file: {path}") from exc
    return decode_luma(raw_bytes)
