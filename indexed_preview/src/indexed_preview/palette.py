"""The fixed 256-entry palette and palette asset loading."""

# Layout of the built-in palette (and of any palette the lighting transforms
# are meaningful for):
#
# Bits    | Meaning
# --------|-------------------------------------------------------------
# 7..5    | brightness step 0-7, adding 32 moves one step brighter
# 4       | bank: 0 = normal, 1 = underwater variant of the same color
# 3..0    | base hue 0-15
#
# Index 0 is black and index 255 is the brightest underwater entry.

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from PIL import Image

from .errors import PaletteError, RangeError

Color = Tuple[int, int, int]

PALETTE_SIZE = 256
STEP_SIZE = 32
UNDERWATER_BIT = 0x10

BASE_HUES: List[Color] = [
    (255, 255, 255),  # gray ramp, black at step 0
    (224, 40, 40),
    (240, 128, 32),
    (240, 224, 48),
    (160, 232, 48),
    (48, 184, 64),
    (40, 168, 144),
    (64, 224, 232),
    (96, 168, 240),
    (48, 72, 224),
    (136, 72, 224),
    (216, 64, 200),
    (248, 144, 176),
    (136, 88, 48),
    (216, 184, 136),
    (255, 255, 255),
]

UNDERWATER_COLOR: Color = (0, 72, 112)
UNDERWATER_WEIGHT = 0.45


class PaletteTable:
    """Immutable table of exactly 256 RGB colors."""

    __slots__ = ("_colors",)

    def __init__(self, colors: Iterable[Sequence[int]]) -> None:
        entries = []
        for index, color in enumerate(colors):
            if len(color) != 3:
                raise PaletteError(f"Palette entry {index} must have three components")
            if any(not (0 <= int(c) <= 255) for c in color):
                raise PaletteError(f"Palette entry {index} has a component outside 0-255")
            entries.append((int(color[0]), int(color[1]), int(color[2])))
        if len(entries) != PALETTE_SIZE:
            raise PaletteError(
                f"Palette must contain exactly {PALETTE_SIZE} colors, got {len(entries)}"
            )
        self._colors: Tuple[Color, ...] = tuple(entries)

    def color_at(self, index: int) -> Color:
        if not (0 <= index < PALETTE_SIZE):
            raise RangeError(f"Palette index {index} is out of range")
        return self._colors[index]

    __getitem__ = color_at

    def __len__(self) -> int:
        return PALETTE_SIZE

    def __iter__(self) -> Iterator[Color]:
        return iter(self._colors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaletteTable):
            return NotImplemented
        return self._colors == other._colors

    def __hash__(self) -> int:
        return hash(self._colors)

    @property
    def colors(self) -> Tuple[Color, ...]:
        return self._colors

    def to_flat(self) -> List[int]:
        """Return ``[r0, g0, b0, r1, ...]`` as expected by ``Image.putpalette``."""

        return [component for color in self._colors for component in color]


def _scale(color: Color, factor: float) -> Color:
    return tuple(max(0, min(255, int(round(c * factor)))) for c in color)  # type: ignore[return-value]


def _blend(color_a: Color, color_b: Color, weight_b: float) -> Color:
    weight_a = 1.0 - weight_b
    return tuple(  # type: ignore[return-value]
        max(0, min(255, int(round(a * weight_a + b * weight_b))))
        for a, b in zip(color_a, color_b)
    )


def build_default_colors() -> List[Color]:
    colors: List[Color] = []
    for step in range(PALETTE_SIZE // STEP_SIZE):
        for bank in range(2):
            for hue, base in enumerate(BASE_HUES):
                if hue == 0:
                    color = _scale(base, step / 7)
                else:
                    color = _scale(base, (step + 1) / 8)
                if bank:
                    color = _blend(color, UNDERWATER_COLOR, UNDERWATER_WEIGHT)
                colors.append(color)
    return colors


DEFAULT_PALETTE = PaletteTable(build_default_colors())


def parse_color(text: str) -> Color:
    """Parse ``#RRGGBB``, ``RRGGBB`` or ``R,G,B``."""

    text = text.strip()
    if text.startswith("#"):
        text = text[1:]
    if "," in text:
        parts = text.split(",")
        base = 10
    else:
        if len(text) != 6:
            raise PaletteError(f"Invalid color: {text}")
        parts = [text[i : i + 2] for i in range(0, 6, 2)]
        base = 16
    if len(parts) != 3:
        raise PaletteError("Color must have exactly three components")
    values = []
    for part in parts:
        try:
            values.append(int(part.strip(), base))
        except ValueError as exc:
            raise PaletteError(f"Invalid color component: {part}") from exc
    if any(not (0 <= v <= 255) for v in values):
        raise PaletteError("Color components must be between 0 and 255")
    return values[0], values[1], values[2]


def _parse_triplet(line: str, source: Path, line_no: int) -> Color:
    fields = line.split()
    if len(fields) < 3:
        raise PaletteError(f"{source}:{line_no}: expected three color components")
    try:
        values = [int(field) for field in fields[:3]]
    except ValueError as exc:
        raise PaletteError(f"{source}:{line_no}: invalid color component") from exc
    if any(not (0 <= v <= 255) for v in values):
        raise PaletteError(f"{source}:{line_no}: color components must be between 0 and 255")
    return values[0], values[1], values[2]


def _parse_jasc(lines: List[str], source: Path) -> List[Color]:
    # JASC-PAL / version / count / entries
    if len(lines) < 3:
        raise PaletteError(f"{source}: truncated JASC palette")
    try:
        count = int(lines[2])
    except ValueError as exc:
        raise PaletteError(f"{source}: invalid JASC color count") from exc
    colors = [_parse_triplet(line, source, n) for n, line in enumerate(lines[3:], start=4) if line]
    if len(colors) != count:
        raise PaletteError(f"{source}: header declares {count} colors, found {len(colors)}")
    return colors


def _parse_gimp(lines: List[str], source: Path) -> List[Color]:
    colors = []
    for line_no, line in enumerate(lines[1:], start=2):
        if not line or line.startswith("#") or line.startswith(("Name:", "Columns:")):
            continue
        colors.append(_parse_triplet(line, source, line_no))
    return colors


def _parse_plain(lines: List[str], source: Path) -> List[Color]:
    colors = []
    for line_no, line in enumerate(lines, start=1):
        if not line or line.startswith(";"):
            continue
        try:
            colors.append(parse_color(line))
        except PaletteError as exc:
            raise PaletteError(f"{source}:{line_no}: {exc}") from exc
    return colors


def _load_image_palette(path: Path) -> List[Color]:
    try:
        with Image.open(path) as img:
            if img.mode != "P":
                raise PaletteError(f"{path}: image is not paletted (mode {img.mode})")
            flat = img.getpalette() or []
    except FileNotFoundError as exc:
        raise PaletteError(f"Palette file not found: {path}") from exc
    except OSError as exc:
        raise PaletteError(f"Failed to read palette image: {path}") from exc
    return [tuple(flat[i : i + 3]) for i in range(0, len(flat) - 2, 3)]  # type: ignore[misc]


def load_palette(path: str | Path) -> PaletteTable:
    """Load a 256-color palette from a JASC, GIMP, plain text or paletted image file."""

    path = Path(path)
    if path.suffix.lower() not in (".pal", ".gpl", ".txt", ".hex"):
        return PaletteTable(_load_image_palette(path))

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PaletteError(f"Palette file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise PaletteError(f"Failed to read palette: {path}") from exc

    lines = [line.strip() for line in text.splitlines()]
    if lines and lines[0] == "JASC-PAL":
        colors = _parse_jasc(lines, path)
    elif lines and lines[0] == "GIMP Palette":
        colors = _parse_gimp(lines, path)
    else:
        colors = _parse_plain(lines, path)
    return PaletteTable(colors)


def format_palette_text(palette: Iterable[Color]) -> str:
    return "\n".join(f"{idx}: ({r},{g},{b})" for idx, (r, g, b) in enumerate(palette))
