"""Coefficient selection and median thresholding into a 64-bit hash."""

from __future__ import annotations

import numpy as np

CROP = 8
HASH_BITS = 64


def select_block(coeffs: np.ndarray, crop: int = CROP) -> np.ndarray:
    """Return the crop x crop coefficient block starting at (1, 1).

    Row/column 0 (the DC term) and every coefficient past index `crop` are dropped.
    """
    if crop >= coeffs.shape[0] or crop >= coeffs.shape[1]:
        raise ValueError(f"Crop {crop} does not fit inside a {coeffs.shape} coefficient matrix.")
    return coeffs[1:1 + crop, 1:1 + crop].copy()


def block_median(values: np.ndarray) -> np.float32:
    """Median in float32; even counts average the two central values."""
    ordered = np.sort(values.reshape(-1).astype(np.float32))
    n = ordered.size // 2
    if ordered.size % 2:
        return ordered[n]
    return (ordered[n] + ordered[n - 1]) / np.float32(2)


def threshold(block: np.ndarray) -> int:
    """Pack one bit per coefficient (value > median) into an integer.

    The flattened block is walked from last to first while shifting left, so
    flattened element 0 ends up in bit 0 and element 63 in bit 63.
    """
    values = block.reshape(-1).astype(np.float32)
    median = block_median(values)
    bits = values[:HASH_BITS] > median

    result = 0
    for bit in bits[::-1]:
        result = (result << 1) | int(bit)
    return result
