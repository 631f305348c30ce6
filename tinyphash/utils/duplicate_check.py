"""Hash comparison helpers: Hamming distance and near-duplicate checks."""

from __future__ import annotations

import string
from typing import Optional

import imagehash
import numpy as np

from tinyphash import config
from tinyphash.utils.threshold import HASH_BITS

HashType = imagehash.ImageHash

_HASH_MASK = (1 << HASH_BITS) - 1


def hamming_distance(a: int, b: int) -> int:
    """Return the number of differing bits between two 64-bit hashes."""
    return bin((a ^ b) & _HASH_MASK).count("1")


def is_duplicate(a: int, b: int, threshold: Optional[int] = None) -> bool:
    """Return True if two hashes are within `threshold` bits of each other.

    Args:
        a: First hash.
        b: Second hash.
        threshold: Max Hamming distance considered duplicate. Defaults to
            ``TINYPHASH_DUPLICATE_DISTANCE``.
    """
    if threshold is None:
        threshold = config.DUPLICATE_HASH_DISTANCE
    return hamming_distance(a, b) <= threshold


def format_hash(value: int) -> str:
    """Render a hash as 16 lowercase hex digits."""
    return f"{value & _HASH_MASK:016x}"


def parse_hash(text: str) -> int:
    """Parse a hex hash as produced by `format_hash` (``0x`` prefix allowed)."""
    clean = text.strip().lower()
    if clean.startswith("0x"):
        clean = clean[2:]
    if not clean or len(clean) > HASH_BITS // 4 or not all(c in string.hexdigits for c in clean):
        raise ValueError(f"Invalid hash string: {text!r}")
    return int(clean, 16)


def as_image_hash(value: int) -> HashType:
    """Wrap a hash as an ``imagehash.ImageHash`` (MSB first, 8x8)."""
    side = int(HASH_BITS ** 0.5)
    bits = [(value >> (HASH_BITS - 1 - i)) & 1 for i in range(HASH_BITS)]
    return imagehash.ImageHash(np.array(bits, dtype=bool).reshape(side, side))


def from_image_hash(image_hash: HashType) -> int:
    """Inverse of `as_image_hash`."""
    result = 0
    for bit in image_hash.hash.flatten():
        result = (result << 1) | int(bit)
    return result
