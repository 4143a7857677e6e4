"""Index-domain lighting: darkness level and underwater tint."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .buffers import IndexedBuffer
from .errors import RangeError
from .palette import STEP_SIZE, UNDERWATER_BIT

MIN_DARK_LEVEL = 0
MAX_DARK_LEVEL = 8
MAX_INDEX = 255


def _check_level(level: int) -> None:
    if not (MIN_DARK_LEVEL <= level <= MAX_DARK_LEVEL):
        raise RangeError(
            f"Dark level must be between {MIN_DARK_LEVEL} and {MAX_DARK_LEVEL}, got {level}"
        )


@dataclass(frozen=True)
class LightingState:
    """Darkness level and underwater flag, always read together."""

    dark_level: int = 0
    underwater: bool = False

    def __post_init__(self) -> None:
        _check_level(self.dark_level)

    def with_dark_delta(self, delta: int) -> "LightingState":
        level = max(MIN_DARK_LEVEL, min(MAX_DARK_LEVEL, self.dark_level + delta))
        return replace(self, dark_level=level)

    def toggled_underwater(self) -> "LightingState":
        return replace(self, underwater=not self.underwater)

    def describe(self) -> str:
        return f"dark {self.dark_level}/{MAX_DARK_LEVEL}, underwater {'on' if self.underwater else 'off'}"


def brightness_table(level: int) -> bytes:
    """Lookup table mapping every index to its value at ``level``."""

    _check_level(level)
    offset = STEP_SIZE * level
    table = bytearray(256)
    for value in range(256):
        if level == MAX_DARK_LEVEL or value > MAX_INDEX - offset:
            table[value] = MAX_INDEX
        else:
            table[value] = value + offset
    return bytes(table)


_TINT_TABLE = bytes(value | UNDERWATER_BIT for value in range(256))


def apply_brightness(indices: IndexedBuffer, level: int) -> IndexedBuffer:
    """Return a new buffer with every index moved ``level`` steps brighter, saturating at 255."""

    table = brightness_table(level)
    return IndexedBuffer(indices.width, indices.height, indices.data.translate(table))


def apply_underwater_tint(indices: IndexedBuffer, enabled: bool) -> None:
    """Set the underwater bank bit on every index in place.

    The bit is never cleared, so this must only run on a buffer fresh from
    :func:`apply_brightness`.
    """
    if enabled:
        indices.data[:] = indices.data.translate(_TINT_TABLE)


def light(canonical: IndexedBuffer, state: LightingState) -> IndexedBuffer:
    """Derive the lit buffer for ``state`` from the canonical buffer."""

    lit = apply_brightness(canonical, state.dark_level)
    apply_underwater_tint(lit, state.underwater)
    return lit
