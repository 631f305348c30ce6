"""Two-dimensional DCT-II via a precomputed orthogonal basis matrix."""

from __future__ import annotations

import math

import numpy as np

from tinyphash.utils.resample import SQUARE


def build_dct_basis(size: int = SQUARE) -> np.ndarray:
    """Return the size x size float32 DCT-II basis.

    Row 0 is the constant ``1/sqrt(size)``; row y >= 1, column x is
    ``sqrt(2/size) * cos(pi / 2 / size * y * (2x + 1))``.
    """
    basis = np.full((size, size), np.float32(1) / np.sqrt(np.float32(size)), dtype=np.float32)
    c1 = np.float32(math.sqrt(2.0 / size))
    m = math.pi / 2 / size
    rows = np.arange(1, size, dtype=np.float64)[:, None]
    cols = (2 * np.arange(size, dtype=np.float64) + 1)[None, :]
    basis[1:, :] = c1 * np.cos(m * rows * cols).astype(np.float32)
    return basis


def matrix_multiplication(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Multiply two square float32 matrices.

    Each product is taken in float32 and summed in float64 in ascending index
    order, so results do not depend on the BLAS in use.
    """
    size = left.shape[0]
    if left.shape != (size, size) or right.shape != (size, size):
        raise ValueError(f"Expected two {size}x{size} matrices, got {left.shape} and {right.shape}.")

    left = left.astype(np.float32, copy=False)
    right = right.astype(np.float32, copy=False)
    accum = np.zeros((size, size), dtype=np.float64)
    for i in range(size):
        accum += np.multiply.outer(left[:, i], right[i, :])
    return accum.astype(np.float32)


def dct2d(square: np.ndarray, basis: np.ndarray, basis_t: np.ndarray) -> np.ndarray:
    """Return ``basis @ square @ basis_t`` with the fixed accumulation order."""
    return matrix_multiplication(matrix_multiplication(basis, square), basis_t)
