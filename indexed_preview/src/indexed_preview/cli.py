"""Command line interface for the indexed color preview."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .controller import PipelineController
from .errors import PreviewError
from .events import parse_key_script, run_events
from .imaging import ImagePresenter, Viewport
from .lighting import MAX_DARK_LEVEL, LightingState
from .palette import DEFAULT_PALETTE, PaletteTable, format_palette_text, load_palette


@dataclass
class PreviewOptions:
    """Settings for a single preview run."""

    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    palette_path: Optional[Path] = None
    viewport: Optional[Viewport] = None
    dark_level: int = 0
    underwater: bool = False
    keys: str = ""
    all_levels_dir: Optional[Path] = None
    force: bool = False


def parse_viewport(text: str) -> Viewport:
    parts = text.lower().split("x")
    if len(parts) != 2:
        raise PreviewError(f"Viewport must look like WIDTHxHEIGHT, got {text}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise PreviewError(f"Viewport must look like WIDTHxHEIGHT, got {text}") from exc
    if width <= 0 or height <= 0:
        raise PreviewError("Viewport dimensions must be positive")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Preview how an image renders through a fixed 256-color palette, "
            "with darkness and underwater lighting applied."
        )
    )
    parser.add_argument("input", nargs="?", help="Image to preview (any format Pillow reads)")
    parser.add_argument(
        "-o",
        "--output",
        help="Where to write the preview PNG (default: <input>_preview.png)",
    )
    parser.add_argument(
        "--palette",
        help="256-color palette file (.pal, .gpl, .txt/.hex or a paletted image)",
    )
    parser.add_argument(
        "--dark",
        type=int,
        default=0,
        help=f"Initial dark level, 0-{MAX_DARK_LEVEL}",
    )
    parser.add_argument(
        "--underwater",
        action="store_true",
        help="Start with the underwater tint enabled",
    )
    parser.add_argument(
        "--keys",
        default="",
        help="Comma separated key presses to replay after loading (up, down, space, quit)",
    )
    parser.add_argument(
        "--viewport",
        help="Scale the preview to fit WIDTHxHEIGHT (whole-number enlargement, shrinks if larger)",
    )
    parser.add_argument(
        "--all-levels",
        metavar="DIR",
        help="Write one PNG per lighting state into DIR instead of a single preview",
    )
    parser.add_argument(
        "--dump-palette",
        action="store_true",
        help="Print the palette entries and exit",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing files",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> PreviewOptions:
    options = PreviewOptions()
    options.input_path = Path(args.input) if args.input else None
    options.output_path = Path(args.output) if args.output else None
    options.palette_path = Path(args.palette) if args.palette else None
    options.viewport = parse_viewport(args.viewport) if args.viewport else None
    options.dark_level = args.dark
    options.underwater = args.underwater
    options.keys = args.keys
    options.all_levels_dir = Path(args.all_levels) if args.all_levels else None
    options.force = args.force
    return options


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}_preview.png")


def level_file_name(stem: str, lighting: LightingState) -> str:
    suffix = "_water" if lighting.underwater else ""
    return f"{stem}_dark{lighting.dark_level}{suffix}.png"


def all_lighting_states() -> List[LightingState]:
    return [
        LightingState(level, underwater)
        for underwater in (False, True)
        for level in range(MAX_DARK_LEVEL + 1)
    ]


def check_conflicts(targets: List[Path], force: bool) -> None:
    if force:
        return
    conflicts = [str(target) for target in targets if target.exists()]
    if conflicts:
        raise PreviewError(
            "Output files already exist (use --force to overwrite):\n" + "\n".join(conflicts)
        )


def write_preview(options: PreviewOptions, palette: PaletteTable) -> Path:
    assert options.input_path is not None
    output = options.output_path or default_output_path(options.input_path)
    check_conflicts([output], options.force)

    events = parse_key_script(options.keys)
    presenter = ImagePresenter(viewport=options.viewport)
    controller = PipelineController(
        palette,
        presenter,
        lighting=LightingState(options.dark_level, options.underwater),
    )
    controller.load_path(options.input_path)
    run_events(controller, events)

    presenter.save(output)
    print(f"wrote {output} ({controller.status_line()})")
    return output


def write_all_levels(options: PreviewOptions, palette: PaletteTable) -> List[Path]:
    assert options.input_path is not None and options.all_levels_dir is not None
    ignored = []
    if options.output_path is not None:
        ignored.append("-o")
    if options.dark_level != 0:
        ignored.append("--dark")
    if options.underwater:
        ignored.append("--underwater")
    if options.keys:
        ignored.append("--keys")
    if ignored:
        raise PreviewError("--all-levels cannot be combined with " + ", ".join(ignored))

    stem = options.input_path.stem
    states = all_lighting_states()
    targets = [options.all_levels_dir / level_file_name(stem, state) for state in states]
    check_conflicts(targets, options.force)

    presenter = ImagePresenter(viewport=options.viewport)
    controller = PipelineController(palette, presenter)
    controller.load_path(options.input_path)

    for state, target in zip(states, targets):
        controller.set_lighting(state)
        presenter.save(target)
        print(f"wrote {target}")
    return targets


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = options_from_args(args)
        palette = load_palette(options.palette_path) if options.palette_path else DEFAULT_PALETTE

        if args.dump_palette:
            print(format_palette_text(palette))
            return 0

        if options.input_path is None:
            raise PreviewError("An input image is required")

        if options.all_levels_dir is not None:
            write_all_levels(options, palette)
        else:
            write_preview(options, palette)
        return 0
    except PreviewError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
