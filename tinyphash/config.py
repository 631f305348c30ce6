"""Environment-driven defaults for tinyphash."""

from __future__ import annotations

import logging
import os
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DECODER_CHOICES: Tuple[str, ...] = ("opencv", "pillow")


def _read_int_env(name: str, default: int, min_value: int, max_value: int) -> int:
    """Return bounded integer env value with safe fallback."""
    raw = (os.getenv(name, str(default)) or "").strip()
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r. Using default=%s", name, raw, default)
        return default
    return max(min_value, min(max_value, value))


def _read_choice_env(name: str, default: str, choices: Tuple[str, ...]) -> str:
    """Return a lower-cased env value restricted to `choices`."""
    raw = (os.getenv(name, default) or "").strip().lower()
    if raw not in choices:
        logger.warning("Invalid value for %s=%r. Using default=%s", name, raw, default)
        return default
    return raw


DUPLICATE_HASH_DISTANCE = _read_int_env("TINYPHASH_DUPLICATE_DISTANCE", default=8, min_value=0, max_value=64)
DECODER = _read_choice_env("TINYPHASH_DECODER", default="opencv", choices=DECODER_CHOICES)
