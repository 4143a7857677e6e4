"""Owns the canonical and lit buffers and recomputes them on input."""

from __future__ import annotations

import warnings
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .buffers import IndexedBuffer, RGBBuffer
from .errors import PresentationError
from .imaging import Presenter, decode_image
from .lighting import LightingState, light
from .palette import DEFAULT_PALETTE, PaletteTable
from .quantizer import quantize

Decoder = Callable[[Path], RGBBuffer]


class ControllerState(Enum):
    NO_IMAGE = "no-image"
    IMAGE_LOADED = "image-loaded"


class PipelineController:
    """
    Quantizes loaded images once and re-lights them on every state change.

    The lit buffer is always ``light(canonical, lighting)``; it is replaced as
    a whole and never patched. Lighting state survives image loads. A failed
    load leaves the canonical buffer, lit buffer and lighting untouched.
    """

    def __init__(
        self,
        palette: PaletteTable = DEFAULT_PALETTE,
        presenter: Optional[Presenter] = None,
        decoder: Decoder = decode_image,
        lighting: LightingState | None = None,
    ) -> None:
        self.palette = palette
        self.presenter = presenter
        self.decoder = decoder
        self._lighting = lighting or LightingState()
        self._canonical: Optional[IndexedBuffer] = None
        self._lit: Optional[IndexedBuffer] = None
        self._source_path: Optional[Path] = None

    @property
    def state(self) -> ControllerState:
        if self._canonical is None:
            return ControllerState.NO_IMAGE
        return ControllerState.IMAGE_LOADED

    @property
    def canonical(self) -> Optional[IndexedBuffer]:
        return self._canonical

    @property
    def lit(self) -> Optional[IndexedBuffer]:
        return self._lit

    @property
    def lighting(self) -> LightingState:
        return self._lighting

    @property
    def source_path(self) -> Optional[Path]:
        return self._source_path

    def load_path(self, path: str | Path) -> IndexedBuffer:
        path = Path(path)
        source = self.decoder(path)
        canonical = self.load_image(source)
        self._source_path = path
        return canonical

    def load_image(self, source: RGBBuffer) -> IndexedBuffer:
        canonical = quantize(source, self.palette)
        lit = light(canonical, self._lighting)
        self._canonical = canonical
        self._source_path = None
        self._install(lit)
        return canonical

    def set_dark_level(self, delta: int) -> None:
        self._update(self._lighting.with_dark_delta(delta))

    def toggle_underwater(self) -> None:
        self._update(self._lighting.toggled_underwater())

    def set_lighting(self, lighting: LightingState) -> None:
        self._update(lighting)

    def _update(self, lighting: LightingState) -> None:
        if self._canonical is None:
            return
        lit = light(self._canonical, lighting)
        self._lighting = lighting
        self._install(lit)

    def _install(self, lit: IndexedBuffer) -> None:
        self._lit = lit
        self.refresh()

    def refresh(self) -> None:
        """Hand the current lit buffer to the presenter, if any."""

        if self.presenter is None or self._lit is None:
            return
        try:
            self.presenter.present(self._lit, self.palette)
        except (PresentationError, OSError) as exc:
            warnings.warn(f"Could not present frame: {exc}", RuntimeWarning)

    def status_line(self) -> str:
        if self._canonical is None:
            return f"no image, {self._lighting.describe()}"
        name = self._source_path.name if self._source_path is not None else "image"
        width, height = self._canonical.size
        return f"{name} {width}x{height}, {self._lighting.describe()}"
