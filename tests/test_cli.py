import numpy as np
import pytest
from PIL import Image

from palette_post.cli import build_parser, main

from .conftest import checker


@pytest.fixture
def source_png(tmp_path):
    path = tmp_path / "in.png"
    Image.fromarray(checker(8, 6)).save(path)
    return path


def test_png_run_writes_file(tmp_path, source_png):
    out = tmp_path / "out.png"
    rc = main(
        ["-i", str(source_png), "-o", str(out), "-p", "black white",
         "-r", "indigo limegreen", "-u", "2"]
    )
    assert rc == 0
    with Image.open(out) as im:
        assert im.size == (16, 12)
        px = np.array(im.convert("RGB"))
    assert px[0, 0].tolist() == [75, 0, 130]
    assert px[0, 2].tolist() == [50, 205, 50]


def test_glob_inputs_into_animation(tmp_path, source_png):
    Image.fromarray(checker(8, 6)[:, ::-1].copy()).save(tmp_path / "in2.png")
    out = tmp_path / "anim.gif"
    rc = main(
        ["-i", str(tmp_path / "in*.png"), "-o", str(out), "-p", "black white",
         "--fps", "5", "-m", "none"]
    )
    assert rc == 0
    with Image.open(out) as im:
        assert im.n_frames == 2
        assert im.info["duration"] == 200


def test_missing_fps_reports_error(tmp_path, source_png, capsys):
    out = tmp_path / "anim.gif"
    rc = main(
        ["-i", str(source_png), "-i", str(source_png), "-o", str(out),
         "-p", "black white"]
    )
    assert rc == 1
    err = capsys.readouterr().err
    assert "[error]" in err
    assert "--fps" in err
    assert not out.exists()


def test_bad_colour_reports_error(tmp_path, source_png, capsys):
    rc = main(["-i", str(source_png), "-o", str(tmp_path / "o.png"), "-p", "black nope"])
    assert rc == 1
    assert "palette" in capsys.readouterr().err


def test_missing_input_is_load_error(tmp_path, capsys):
    rc = main(["-i", str(tmp_path / "nope.png"), "-o", str(tmp_path / "o.png"),
               "-p", "black white"])
    assert rc == 1
    assert "error loading" in capsys.readouterr().err


def test_parser_defaults():
    args = build_parser().parse_args(["-i", "a.png", "-o", "-", "-p", "black white"])
    assert args.method == "floyd-steinberg"
    assert args.compression == "default"
    assert args.upscale == 1
    assert args.loop == 0
    assert args.fmt is None


def test_sample_palette_from_first_input(tmp_path, source_png, capsys):
    out = tmp_path / "out.png"
    rc = main(["-i", str(source_png), "-o", str(out), "-p", "sample", "-m", "none"])
    assert rc == 0
    assert "Extracted palette" in capsys.readouterr().err
    with Image.open(out) as im:
        colours = {tuple(c) for c in np.array(im.convert("RGB")).reshape(-1, 3).tolist()}
    assert colours == {(0, 0, 0), (255, 255, 255)}


def test_sample_rejects_stdin(tmp_path, capsys):
    rc = main(["-i", "-", "-o", str(tmp_path / "o.png"), "-p", "sample"])
    assert rc == 1
    assert "'sample' needs a file" in capsys.readouterr().err
