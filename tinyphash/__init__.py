"""tinyphash: 64-bit DCT perceptual hashes of luma bitmaps."""

from __future__ import annotations

import logging

from tinyphash.errors import (
    AllocationError,
    DecodeFailure,
    InvalidDimensions,
    LoadError,
    TinyPHashError,
    UnsupportedFormat,
)
from tinyphash.hasher import TinyPHash, hash_bitmap, hash_file, hash_with, new_hasher
from tinyphash.utils.duplicate_check import (
    as_image_hash,
    format_hash,
    from_image_hash,
    hamming_distance,
    is_duplicate,
    parse_hash,
)
from tinyphash.utils.luma_loader import decode_luma, load_luma

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"

__all__ = [
    "AllocationError",
    "DecodeFailure",
    "InvalidDimensions",
    "LoadError",
    "TinyPHash",
    "TinyPHashError",
    "UnsupportedFormat",
    "as_image_hash",
    "decode_luma",
    "format_hash",
    "from_image_hash",
    "hamming_distance",
    "hash_bitmap",
    "hash_file",
    "hash_with",
    "is_duplicate",
    "load_luma",
    "new_hasher",
    "parse_hash",
]
