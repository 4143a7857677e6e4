"""Nearest-entry color quantization against a fixed palette."""

from __future__ import annotations

from typing import Dict, Sequence

from PIL import Image

from .buffers import IndexedBuffer, RGBBuffer
from .imaging import to_rgb
from .palette import Color, PaletteTable

# Green dominates perceived brightness, blue contributes least.
CHANNEL_WEIGHTS = (0.30, 0.59, 0.11)


def nearest_palette_index(rgb: Color, palette: Sequence[Color]) -> int:
    """
    Return the palette index closest to ``rgb``.

    Every entry is scored with the luminance-weighted squared distance and the
    scan keeps an entry only when it is strictly closer than the current best,
    so among equally close entries the lowest index wins.
    """
    r, g, b = rgb
    wr, wg, wb = CHANNEL_WEIGHTS
    best_idx = 0
    best_dist = float("inf")
    for i, (pr, pg, pb) in enumerate(palette):
        dist = (pr - r) * (pr - r) * wr + (pg - g) * (pg - g) * wg + (pb - b) * (pb - b) * wb
        if dist < best_dist:
            best_idx = i
            best_dist = dist
    return best_idx


def quantize(source: RGBBuffer, palette: PaletteTable) -> IndexedBuffer:
    """Map every pixel of ``source`` to its nearest entry in ``palette``."""

    colors = palette.colors
    resolved: Dict[Color, int] = {}
    out = bytearray(source.pixel_count)
    for i, rgb in enumerate(source.pixels()):
        index = resolved.get(rgb)
        if index is None:
            index = nearest_palette_index(rgb, colors)
            resolved[rgb] = index
        out[i] = index

    return IndexedBuffer(source.width, source.height, out)


def quantize_image(image: Image.Image, palette: PaletteTable) -> IndexedBuffer:
    return quantize(RGBBuffer.from_image(to_rgb(image)), palette)
