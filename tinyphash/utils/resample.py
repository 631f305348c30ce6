"""Downsampling of luma bitmaps to the fixed working square."""

from __future__ import annotations

import logging
from typing import Union

import numpy as np

from tinyphash.errors import InvalidDimensions

SQUARE = 32
SMEAR_RADIUS = 3
SMEAR_DIAMETER = SMEAR_RADIUS * 2 + 1
# The fast path applies once both sides reach this size.
FAST_PATH_MIN_SIZE = SQUARE * SMEAR_DIAMETER

BitmapLike = Union[bytes, bytearray, memoryview, np.ndarray]

logger = logging.getLogger(__name__)


def as_luma_array(bitmap: BitmapLike, width: int, height: int) -> np.ndarray:
    """Return the first ``width * height`` samples of `bitmap` as a (height, width) uint8 view.

    Raises:
        InvalidDimensions: dimensions are not positive integers or the bitmap is too short.
        TypeError: a numpy bitmap does not hold uint8 samples.
    """
    if isinstance(width, bool) or not isinstance(width, (int, np.integer)):
        raise InvalidDimensions(f"Width must be an integer, got {width!r}.")
    if isinstance(height, bool) or not isinstance(height, (int, np.integer)):
        raise InvalidDimensions(f"Height must be an integer, got {height!r}.")
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Bitmap dimensions must be positive, got {width}x{height}.")

    if isinstance(bitmap, np.ndarray):
        if bitmap.dtype != np.uint8:
            raise TypeError(f"Bitmap must hold uint8 samples, got dtype={bitmap.dtype}.")
        samples = bitmap.reshape(-1)
    else:
        samples = np.frombuffer(bitmap, dtype=np.uint8)

    expected = width * height
    if samples.size < expected:
        raise InvalidDimensions(
            f"Bitmap holds {samples.size} samples but {width}x{height} needs {expected}."
        )
    return samples[:expected].reshape(height, width)


def box_blur(image: np.ndarray, smear_radius: int = SMEAR_RADIUS) -> np.ndarray:
    """Blur horizontally then vertically with a clamp-to-edge box of the given radius.

    Values are left as unnormalized window sums.
    """
    height, width = image.shape
    diameter = smear_radius * 2 + 1

    padded = np.pad(image.astype(np.float32), ((0, 0), (smear_radius, smear_radius)), mode="edge")
    horizontal = np.zeros((height, width), dtype=np.float32)
    for offset in range(diameter):
        horizontal += padded[:, offset:offset + width]

    padded = np.pad(horizontal, ((smear_radius, smear_radius), (0, 0)), mode="edge")
    blurred = np.zeros((height, width), dtype=np.float32)
    for offset in range(diameter):
        blurred += padded[offset:offset + height, :]
    return blurred


def shrink_to_square(image: np.ndarray, size: int = SQUARE) -> np.ndarray:
    """Nearest-sample `image` down to a size x size square."""
    height, width = image.shape
    ys = (height * np.arange(size, dtype=np.int64)) // size
    xs = (width * np.arange(size, dtype=np.int64)) // size
    return image[np.ix_(ys, xs)].astype(np.float32)


def smear_and_shrink(image: np.ndarray, smear_radius: int = SMEAR_RADIUS, square: int = SQUARE) -> np.ndarray:
    """Sum the clamped neighbourhood around each destination sample point.

    Equivalent to ``shrink_to_square(box_blur(image))`` but only touches
    ``square**2 * (2 * smear_radius + 1)**2`` source samples.
    """
    height, width = image.shape
    offsets = np.arange(-smear_radius, smear_radius + 1, dtype=np.int64)
    ys = (height * np.arange(square, dtype=np.int64)) // square
    xs = (width * np.arange(square, dtype=np.int64)) // square
    rows = np.clip(ys[:, None] + offsets, 0, height - 1)
    cols = np.clip(xs[:, None] + offsets, 0, width - 1)

    # (square, diameter, square, diameter) indexed as [y, i, x, j]
    neighbourhoods = image[rows[:, :, None, None], cols[None, None, :, :]]
    return neighbourhoods.sum(axis=(1, 3), dtype=np.int64).astype(np.float32)


def resample(bitmap: BitmapLike, width: int, height: int) -> np.ndarray:
    """Reduce a width x height luma bitmap to the SQUARE x SQUARE float32 working square."""
    image = as_luma_array(bitmap, width, height)
    if width >= FAST_PATH_MIN_SIZE and height >= FAST_PATH_MIN_SIZE:
        logger.debug("Resampling %sx%s bitmap with smear-and-shrink", width, height)
        return smear_and_shrink(image)

    logger.debug("Resampling %sx%s bitmap with full blur", width, height)
    return shrink_to_square(box_blur(image))
