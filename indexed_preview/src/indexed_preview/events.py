"""Input events and their mapping onto controller operations."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, TextIO, Union

from .controller import PipelineController
from .errors import PreviewError


@dataclass(frozen=True)
class ImageDropped:
    path: Path


@dataclass(frozen=True)
class KeyUp:
    pass


@dataclass(frozen=True)
class KeyDown:
    pass


@dataclass(frozen=True)
class KeySpace:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Event = Union[ImageDropped, KeyUp, KeyDown, KeySpace, Quit]

KEY_NAMES = {
    "up": KeyUp,
    "down": KeyDown,
    "space": KeySpace,
    "quit": Quit,
}


def dispatch(controller: PipelineController, event: Event, errors: TextIO | None = None) -> bool:
    """Apply one event. Returns False once the event loop should stop.

    A failed image load is reported as a single line and does not stop the
    loop; the previous image stays on screen.
    """
    if isinstance(event, Quit):
        return False
    if isinstance(event, ImageDropped):
        try:
            controller.load_path(event.path)
        except PreviewError as exc:
            print(f"Could not load image: {exc}", file=errors or sys.stderr)
    elif isinstance(event, KeyUp):
        controller.set_dark_level(-1)
    elif isinstance(event, KeyDown):
        controller.set_dark_level(+1)
    elif isinstance(event, KeySpace):
        controller.toggle_underwater()
    else:
        raise PreviewError(f"Unknown event: {event!r}")
    return True


def parse_key_script(text: str) -> List[Event]:
    events: List[Event] = []
    for raw in text.split(","):
        name = raw.strip().lower()
        if not name:
            continue
        try:
            events.append(KEY_NAMES[name]())
        except KeyError as exc:
            choices = ", ".join(KEY_NAMES)
            raise PreviewError(f"Unknown key '{raw.strip()}' (expected one of: {choices})") from exc
    return events


def run_events(controller: PipelineController, events: List[Event], errors: TextIO | None = None) -> int:
    """Feed events in order until exhausted or a Quit arrives; return how many were applied."""

    applied = 0
    for event in events:
        if not dispatch(controller, event, errors):
            break
        applied += 1
    return applied
