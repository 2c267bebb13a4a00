import pytest

from palette_post.config import (
    LoadOptions,
    build_run_config,
    expand_inputs,
    is_animated,
    resolve_output_format,
)
from palette_post.errors import ConfigurationError
from palette_post.output import OutputTarget

from .conftest import BLACK, INDIGO, LIMEGREEN, RED, WHITE

BW = [BLACK, WHITE]


class TestOutputFormat:
    def test_flag_wins_over_extension(self, tmp_path):
        target = OutputTarget("file", tmp_path / "x.png")
        assert resolve_output_format(target, "gif") == "gif"

    def test_detected_from_extension(self, tmp_path):
        assert resolve_output_format(OutputTarget("file", tmp_path / "x.GIF"), None) == "gif"
        assert resolve_output_format(OutputTarget("file", tmp_path / "x"), None) == "png"

    def test_unknown_extension_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            resolve_output_format(OutputTarget("file", tmp_path / "x.jpg"), None)

    def test_stream_and_directory_default_to_png(self, tmp_path):
        assert resolve_output_format(OutputTarget("stream"), None) == "png"
        assert resolve_output_format(OutputTarget("directory", tmp_path), None) == "png"


class TestMode:
    def test_animated_only_for_many_gif_inputs_to_file(self, tmp_path):
        f = OutputTarget("file", tmp_path / "a.gif")
        d = OutputTarget("directory", tmp_path)
        assert is_animated(2, "gif", f)
        assert is_animated(2, "gif", OutputTarget("stream"))
        assert not is_animated(1, "gif", f)
        assert not is_animated(2, "png", f)
        assert not is_animated(2, "gif", d)


class TestBuildRunConfig:
    def test_minimal(self, tmp_path):
        cfg = build_run_config(["a.png"], str(tmp_path / "out.png"), BW)
        assert cfg.output_format == "png"
        assert cfg.recolor is None
        assert cfg.upscale == 1
        assert not cfg.animated
        assert not cfg.post_processing_needed

    def test_recolor_length_mismatch(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_run_config(["a.png"], str(tmp_path / "o.png"), BW, [INDIGO])

    def test_palette_needs_two_colours(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_run_config(["a.png"], str(tmp_path / "o.png"), [BLACK])

    def test_gif_palette_limit(self, tmp_path):
        big = [(i % 256, i // 256, 0, 255) for i in range(257)]
        with pytest.raises(ConfigurationError):
            build_run_config(["a.png"], str(tmp_path / "o.gif"), big)
        # PNG has no such limit
        build_run_config(["a.png"], str(tmp_path / "o.png"), big)

    def test_animation_requires_fps(self, tmp_path):
        with pytest.raises(ConfigurationError, match="fps"):
            build_run_config(["a.png", "b.png"], str(tmp_path / "o.gif"), BW)
        cfg = build_run_config(["a.png", "b.png"], str(tmp_path / "o.gif"), BW, fps=10)
        assert cfg.animated

    def test_multiple_inputs_need_gif_or_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_run_config(["a.png", "b.png"], str(tmp_path / "o.png"), BW)
        cfg = build_run_config(["a.png", "b.png"], str(tmp_path), BW)
        assert cfg.output.is_directory
        assert not cfg.animated

    def test_upscale_zero_means_one(self, tmp_path):
        cfg = build_run_config(["a.png"], str(tmp_path / "o.png"), BW, upscale=0)
        assert cfg.upscale == 1

    def test_post_processing_needed(self, tmp_path):
        out = str(tmp_path / "o.png")
        assert build_run_config(["a.png"], out, BW, upscale=2).post_processing_needed
        assert build_run_config(
            ["a.png"], out, BW, [INDIGO, LIMEGREEN]
        ).post_processing_needed

    def test_invalid_compression(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_run_config(["a.png"], str(tmp_path / "o.png"), BW, compression="max")

    def test_grayscale_palette_forces_grayscale_load(self, tmp_path):
        out = str(tmp_path / "o.png")
        assert build_run_config(["a.png"], out, BW).load.grayscale
        assert not build_run_config(["a.png"], out, [BLACK, RED]).load.grayscale

    def test_full_desaturation_means_grayscale(self, tmp_path):
        cfg = build_run_config(
            ["a.png"],
            str(tmp_path / "o.png"),
            [BLACK, RED],
            load=LoadOptions(saturation=-100),
        )
        assert cfg.load.grayscale
        assert cfg.load.saturation == 0


class TestExpandInputs:
    def test_glob_sorted_and_literal_kept(self, tmp_path):
        for name in ("b.png", "a.png", "c.txt"):
            (tmp_path / name).write_bytes(b"")
        out = expand_inputs([str(tmp_path / "*.png"), "-"])
        assert out == [str(tmp_path / "a.png"), str(tmp_path / "b.png"), "-"]

    def test_empty_result_is_an_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_run_config([str(tmp_path / "*.png")], str(tmp_path / "o.png"), BW)
