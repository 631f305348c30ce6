"""Exception types raised by tinyphash."""

from __future__ import annotations


class TinyPHashError(Exception):
    """Base class for all tinyphash errors."""


class AllocationError(TinyPHashError):
    """A working buffer could not be allocated."""


class InvalidDimensions(TinyPHashError, ValueError):
    """Width/height are not positive or the bitmap is too short for them."""


class LoadError(TinyPHashError):
    """Base class for Bitmap Loader failures."""


class UnsupportedFormat(LoadError):
    """The input bytes are not a recognized image format."""


class DecodeFailure(LoadError):
    """The image could not be read or decoded into luma samples."""
