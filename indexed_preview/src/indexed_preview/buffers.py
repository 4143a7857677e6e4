"""Pixel buffer value types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from PIL import Image

from .errors import DimensionMismatchError, FormatError

BYTES_PER_RGB_PIXEL = 3


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise DimensionMismatchError(f"Invalid buffer size {width}x{height}")


@dataclass(frozen=True)
class RGBBuffer:
    """A decoded source image: ``width * height`` packed RGB triples, no alpha."""

    width: int
    height: int
    data: bytes
    bits_per_pixel: int = 24

    def __post_init__(self) -> None:
        if self.bits_per_pixel != 24:
            raise FormatError(
                f"Source must be 24-bit RGB, got {self.bits_per_pixel} bits per pixel"
            )
        _check_dimensions(self.width, self.height)
        expected = self.width * self.height * BYTES_PER_RGB_PIXEL
        if len(self.data) != expected:
            raise DimensionMismatchError(
                f"RGB buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height}"
            )

    @classmethod
    def from_image(cls, image: Image.Image) -> "RGBBuffer":
        if image.mode != "RGB":
            raise FormatError(f"Expected an RGB image, got mode {image.mode}")
        width, height = image.size
        return cls(width, height, image.tobytes())

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixels(self) -> Iterator[Tuple[int, int, int]]:
        data = self.data
        for offset in range(0, len(data), BYTES_PER_RGB_PIXEL):
            yield data[offset], data[offset + 1], data[offset + 2]


class IndexedBuffer:
    """``width * height`` palette indices, one byte per pixel."""

    __slots__ = ("width", "height", "data")

    def __init__(self, width: int, height: int, data: bytes | bytearray | None = None) -> None:
        _check_dimensions(width, height)
        if data is None:
            data = bytearray(width * height)
        elif len(data) != width * height:
            raise DimensionMismatchError(
                f"Indexed buffer holds {len(data)} pixels, expected {width * height} "
                f"for {width}x{height}"
            )
        self.width = width
        self.height = height
        self.data = bytearray(data)

    @classmethod
    def from_list(cls, width: int, height: int, values: List[int]) -> "IndexedBuffer":
        return cls(width, height, bytes(values))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def copy(self) -> "IndexedBuffer":
        return IndexedBuffer(self.width, self.height, self.data)

    def to_list(self) -> List[int]:
        return list(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedBuffer):
            return NotImplemented
        return self.size == other.size and self.data == other.data

    def __repr__(self) -> str:
        return f"IndexedBuffer({self.width}x{self.height})"
