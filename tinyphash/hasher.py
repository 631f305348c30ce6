"""DCT perceptual hashing of luma bitmaps."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from tinyphash.errors import AllocationError
from tinyphash.utils.dct import build_dct_basis, dct2d
from tinyphash.utils.luma_loader import load_luma
from tinyphash.utils.resample import SQUARE, BitmapLike, resample
from tinyphash.utils.threshold import CROP, select_block, threshold

logger = logging.getLogger(__name__)


class TinyPHash:
    """Holds the DCT basis and its transpose; hashes any number of bitmaps.

    Instances are never mutated after construction, so one hasher can be
    shared between threads.
    """

    def __init__(self) -> None:
        basis = build_dct_basis(SQUARE)
        basis_t = np.ascontiguousarray(basis.T)
        basis.flags.writeable = False
        basis_t.flags.writeable = False
        self._basis = basis
        self._basis_t = basis_t
        logger.debug("Built %sx%s DCT basis", SQUARE, SQUARE)

    @property
    def basis(self) -> np.ndarray:
        return self._basis

    @property
    def basis_transpose(self) -> np.ndarray:
        return self._basis_t

    def dct_imagehash(self, bitmap: BitmapLike, width: int, height: int) -> int:
        """Return the 64-bit perceptual hash of a width x height luma bitmap."""
        try:
            square = resample(bitmap, width, height)
            coeffs = dct2d(square, self._basis, self._basis_t)
            return threshold(select_block(coeffs, CROP))
        except MemoryError as exc:
            raise AllocationError(f"Failed to allocate buffers for {width}x{height} bitmap") from exc


def new_hasher() -> TinyPHash:
    """Build a hasher with a precomputed DCT basis."""
    return TinyPHash()


def hash_with(hasher: TinyPHash, bitmap: BitmapLike, width: int, height: int) -> int:
    """Hash a bitmap reusing `hasher`'s precomputed basis."""
    return hasher.dct_imagehash(bitmap, width, height)


def hash_bitmap(bitmap: BitmapLike, width: int, height: int) -> int:
    """Hash a bitmap with a transient hasher."""
    return TinyPHash().dct_imagehash(bitmap, width, height)


def hash_file(path: Union[str, Path], hasher: Optional[TinyPHash] = None) -> int:
    """Decode an image file to luma and hash it."""
    luma, width, height = load_luma(path)
    return (hasher or TinyPHash()).dct_imagehash(luma, width, height)
