from pathlib import Path
import sys

import pytest
from PIL import Image

sys.path.append(str(Path(__file__).resolve().parents[1] / "indexed_preview/src"))

from indexed_preview.cli import main, parse_viewport
from indexed_preview.buffers import IndexedBuffer, RGBBuffer
from indexed_preview.controller import ControllerState, PipelineController
from indexed_preview.errors import DecodeError, PresentationError, PreviewError
from indexed_preview.imaging import ImagePresenter, decode_image, render_indexed, scale_to_viewport
from indexed_preview.palette import DEFAULT_PALETTE
from indexed_preview.quantizer import quantize


def _write_sample_bmp(path: Path) -> Path:
    image = Image.new("RGB", (4, 2))
    for x in range(4):
        image.putpixel((x, 0), (x * 80, 255 - x * 80, 40))
        image.putpixel((x, 1), (255, 255, 255) if x % 2 else (0, 0, 0))
    image.save(path)
    return path


def test_decode_image_reads_rgb(tmp_path: Path) -> None:
    source = decode_image(_write_sample_bmp(tmp_path / "sample.bmp"))
    assert (source.width, source.height) == (4, 2)
    assert len(source.data) == 4 * 2 * 3


def test_decode_image_errors(tmp_path: Path) -> None:
    with pytest.raises(PreviewError, match="not found"):
        decode_image(tmp_path / "missing.bmp")

    garbage = tmp_path / "garbage.bmp"
    garbage.write_bytes(b"not an image")
    with pytest.raises(PreviewError, match="Failed to read"):
        decode_image(garbage)


def test_render_and_scale() -> None:
    buffer = IndexedBuffer.from_list(2, 1, [0, 255])
    frame = render_indexed(buffer, DEFAULT_PALETTE)

    assert frame.mode == "P"
    assert frame.getpixel((1, 0)) == 255
    assert scale_to_viewport(frame, (10, 10)).size == (10, 5)
    assert scale_to_viewport(frame, (1, 1)).size == (1, 1)
    assert scale_to_viewport(frame, (2, 2)).size == (2, 1)


def test_scale_shrinks_images_larger_than_viewport() -> None:
    frame = Image.new("P", (100, 50))

    assert scale_to_viewport(frame, (40, 40)).size == (40, 20)
    assert scale_to_viewport(frame, (150, 10)).size == (20, 10)


def test_decode_image_scales_16_bit_samples(tmp_path: Path) -> None:
    path = tmp_path / "dark16.png"
    Image.new("I", (2, 2), 1000).save(path)

    source = decode_image(path)

    assert max(source.data) < 8
    assert quantize(source, DEFAULT_PALETTE).to_list() == [0, 0, 0, 0]


def test_decode_image_rejects_oversized_images(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "big.png"
    Image.new("RGB", (64, 64)).save(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(DecodeError, match="too large"):
        decode_image(path)


def test_presenter_keeps_latest_frame(tmp_path: Path) -> None:
    presenter = ImagePresenter(viewport=(4, 4))
    presenter.present(IndexedBuffer.from_list(2, 1, [0, 255]), DEFAULT_PALETTE)
    presenter.present(IndexedBuffer.from_list(2, 1, [32, 32]), DEFAULT_PALETTE)

    assert presenter.last_frame.size == (4, 2)
    assert set(presenter.last_frame.getdata()) == {32}

    saved = presenter.save(tmp_path / "nested" / "frame.png")
    with Image.open(saved) as img:
        assert img.size == (4, 2)


def test_presenter_save_failure_is_a_preview_error(tmp_path: Path) -> None:
    presenter = ImagePresenter()
    presenter.present(IndexedBuffer.from_list(1, 1, [0]), DEFAULT_PALETTE)
    blocker = tmp_path / "file.txt"
    blocker.write_text("x")

    with pytest.raises(PresentationError, match="Failed to write"):
        presenter.save(blocker / "frame.png")


def test_controller_warns_when_presenter_fails() -> None:
    controller = PipelineController(presenter=ImagePresenter(viewport=(0, 0)))

    with pytest.warns(RuntimeWarning, match="Invalid viewport"):
        controller.load_image(RGBBuffer(1, 1, bytes([0, 0, 0])))

    assert controller.state is ControllerState.IMAGE_LOADED
    assert controller.lit.to_list() == [0]


def test_presenter_requires_a_frame_before_saving(tmp_path: Path) -> None:
    with pytest.raises(PreviewError):
        ImagePresenter().save(tmp_path / "out.png")


def test_parse_viewport() -> None:
    assert parse_viewport("640x480") == (640, 480)
    with pytest.raises(PreviewError):
        parse_viewport("640")
    with pytest.raises(PreviewError):
        parse_viewport("0x10")


def test_cli_writes_indexed_preview(tmp_path: Path, capsys) -> None:
    source = _write_sample_bmp(tmp_path / "sample.bmp")
    output = tmp_path / "out" / "preview.png"

    assert main([str(source), "-o", str(output), "--keys", "down,space", "--viewport", "8x8"]) == 0

    with Image.open(output) as img:
        assert img.mode == "P"
        assert img.size == (8, 4)
        # Black quantizes to index 0; one step brighter plus the bank bit gives 48.
        assert img.getpixel((0, 2)) == 48
    assert "dark 1/8, underwater on" in capsys.readouterr().out


def test_cli_default_output_and_force(tmp_path: Path, capsys) -> None:
    source = _write_sample_bmp(tmp_path / "sample.bmp")

    assert main([str(source)]) == 0
    assert (tmp_path / "sample_preview.png").exists()

    assert main([str(source)]) == 1
    assert "already exist" in capsys.readouterr().err

    assert main([str(source), "--force", "--dark", "8"]) == 0
    with Image.open(tmp_path / "sample_preview.png") as img:
        assert set(img.getdata()) == {255}


def test_cli_all_levels(tmp_path: Path) -> None:
    source = _write_sample_bmp(tmp_path / "art.bmp")
    out_dir = tmp_path / "levels"

    assert main([str(source), "--all-levels", str(out_dir)]) == 0

    names = sorted(p.name for p in out_dir.iterdir())
    assert len(names) == 18
    assert "art_dark0.png" in names
    assert "art_dark8_water.png" in names


def test_cli_reports_errors(tmp_path: Path, capsys) -> None:
    source = _write_sample_bmp(tmp_path / "sample.bmp")

    assert main([str(tmp_path / "missing.bmp")]) == 1
    assert "not found" in capsys.readouterr().err

    assert main([str(source), "--dark", "9"]) == 1
    assert "Dark level" in capsys.readouterr().err

    assert main([str(source), "--keys", "left"]) == 1
    assert "Unknown key" in capsys.readouterr().err

    assert main([]) == 1
    assert "input image is required" in capsys.readouterr().err


def test_cli_dump_palette(capsys) -> None:
    assert main(["--dump-palette"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 256
    assert lines[0] == "0: (0,0,0)"


def test_cli_all_levels_rejects_single_preview_options(tmp_path: Path, capsys) -> None:
    source = _write_sample_bmp(tmp_path / "art.bmp")
    out_dir = tmp_path / "levels"

    args = [str(source), "--all-levels", str(out_dir), "--dark", "2", "--keys", "space"]
    assert main(args) == 1
    assert "cannot be combined with --dark, --keys" in capsys.readouterr().err
    assert not out_dir.exists()

    assert main([str(source), "--all-levels", str(out_dir), "-o", "x.png", "--underwater"]) == 1
    assert "-o, --underwater" in capsys.readouterr().err
