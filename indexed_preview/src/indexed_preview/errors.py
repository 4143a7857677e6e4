"""Exception types shared by the preview pipeline."""

from __future__ import annotations


class PreviewError(Exception):
    """Base class for every error raised by the preview pipeline."""


class FormatError(PreviewError, ValueError):
    """Source pixels are not packed 24-bit RGB."""


class DimensionMismatchError(PreviewError, ValueError):
    """A buffer's byte length does not match its stated dimensions."""


class RangeError(PreviewError, ValueError):
    """A palette index or lighting level is outside its allowed range."""


class DecodeError(PreviewError):
    """The image source could not produce a pixel buffer."""


class PaletteError(PreviewError):
    """A palette asset is malformed or does not hold 256 entries."""


class PresentationError(PreviewError):
    """A frame could not be rendered or written."""
