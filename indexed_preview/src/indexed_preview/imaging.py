"""Pillow-backed image source and presentation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Tuple

from PIL import Image

from .buffers import IndexedBuffer, RGBBuffer
from .errors import DecodeError, PresentationError
from .palette import PaletteTable

Viewport = Tuple[int, int]

# 16-bit sample modes; Pillow's RGB conversion clips these instead of scaling.
WIDE_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


class Presenter(Protocol):
    def present(self, buffer: IndexedBuffer, palette: PaletteTable) -> None:
        ...


def to_rgb(image: Image.Image) -> Image.Image:
    if image.mode in WIDE_MODES:
        image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    return image.convert("RGB")


def decode_image(path: str | Path) -> RGBBuffer:
    """Read an image file and return its pixels as packed RGB, alpha dropped."""

    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            rgb = to_rgb(img)
    except FileNotFoundError as exc:
        raise DecodeError(f"Input file not found: {path}") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(f"Image is too large to load: {path}") from exc
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Failed to read image: {path}") from exc
    return RGBBuffer.from_image(rgb)


def render_indexed(buffer: IndexedBuffer, palette: PaletteTable) -> Image.Image:
    image = Image.frombytes("P", buffer.size, bytes(buffer.data))
    image.putpalette(palette.to_flat())
    return image


def scale_to_viewport(image: Image.Image, viewport: Viewport) -> Image.Image:
    """Scale with nearest-neighbour sampling to fit ``viewport``, keeping aspect ratio.

    Images that fit at least once are enlarged by a whole factor so pixels
    stay square; larger images are shrunk to fit.
    """
    view_w, view_h = viewport
    if view_w <= 0 or view_h <= 0:
        raise PresentationError(f"Invalid viewport {view_w}x{view_h}")
    width, height = image.size
    ratio = min(view_w / width, view_h / height)
    if ratio >= 1:
        factor = int(ratio)
        if factor == 1:
            return image
        new_size = (width * factor, height * factor)
    else:
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
    return image.resize(new_size, Image.NEAREST)


class ImagePresenter:
    """Renders indexed frames through the palette and keeps the latest one."""

    def __init__(self, viewport: Optional[Viewport] = None) -> None:
        self.viewport = viewport
        self.last_frame: Optional[Image.Image] = None

    def present(self, buffer: IndexedBuffer, palette: PaletteTable) -> None:
        frame = render_indexed(buffer, palette)
        if self.viewport is not None:
            frame = scale_to_viewport(frame, self.viewport)
        self.last_frame = frame

    def save(self, path: str | Path) -> Path:
        if self.last_frame is None:
            raise PresentationError("Nothing has been presented yet")
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.last_frame.save(path)
        except (OSError, ValueError) as exc:
            raise PresentationError(f"Failed to write {path}: {exc}") from exc
        return path
