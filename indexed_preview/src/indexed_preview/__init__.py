"""Indexed color preview with simulated lighting.

Quantizes a truecolor image against a fixed 256-entry palette and re-lights
the result in the index domain (darkness level and underwater tint). Use the
CLI (``python -m indexed_preview``) or drive :class:`PipelineController`
directly.
"""

from .buffers import IndexedBuffer, RGBBuffer
from .controller import ControllerState, PipelineController
from .errors import (
    DecodeError,
    DimensionMismatchError,
    FormatError,
    PaletteError,
    PresentationError,
    PreviewError,
    RangeError,
)
from .lighting import LightingState, apply_brightness, apply_underwater_tint, light
from .palette import DEFAULT_PALETTE, PaletteTable, load_palette
from .quantizer import nearest_palette_index, quantize, quantize_image

__all__ = [
    "ControllerState",
    "DEFAULT_PALETTE",
    "DecodeError",
    "DimensionMismatchError",
    "FormatError",
    "IndexedBuffer",
    "LightingState",
    "PaletteError",
    "PaletteTable",
    "PipelineController",
    "PresentationError",
    "PreviewError",
    "RGBBuffer",
    "RangeError",
    "apply_brightness",
    "apply_underwater_tint",
    "light",
    "load_palette",
    "nearest_palette_index",
    "quantize",
    "quantize_image",
]
