# palette_post/pipeline.py
from __future__ import annotations

"""
Frame pipeline and output router.

Inputs are processed one at a time, in order, with exactly one engine call
per frame. Two modes, picked once from the RunConfig:

  independent : every input is dithered, post-processed and written at once
  animated    : frames are collected into an AnimationBuffer and written as
                one GIF after the last input

Failure policy: the first error aborts the run. Files written earlier stay on
disk and a destination that fails mid-write may be left truncated.
"""

import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .animation import AnimationBuffer, delay_centiseconds, translate_loop_count
from .config import RunConfig
from .core_types import Frame, ImageConfig, PalettedFrame, U8Image
from .encode import encode_animation, encode_gif, encode_png
from .engine import DitheringEngine
from .image_io import load_image_rgba
from .output import STREAM_NAME, destination_for, open_destination
from .postprocess import post_process
from .quantize import DeriveFromEngine, FixedPalette
from .utils import (
    colour_usage_report,
    debug_log,
    format_seconds_compact,
    format_total_duration_compact,
    log,
    print_config_line,
)

ImageLoader = Callable[[str], U8Image]


class FramePipeline:
    """Drive dithering, post-processing and output for every configured input."""

    def __init__(
        self,
        config: RunConfig,
        engine: DitheringEngine,
        loader: Optional[ImageLoader] = None,
    ) -> None:
        self.config = config
        self.engine = engine
        self.loader: ImageLoader = loader or (
            lambda name: load_image_rgba(name, config.load)
        )
        self.written: List[str] = []

    @property
    def animated(self) -> bool:
        return self.config.animated

    def _post(self, frame: Frame) -> Frame:
        return post_process(frame, self.config.recolor, self.config.upscale)

    def run(self) -> List[str]:
        """Process every input. Returns the destinations written, in order."""
        cfg = self.config
        t_start = time.perf_counter()
        print_config_line(
            "run",
            [
                ("Inputs", len(cfg.inputs)),
                ("Format", cfg.output_format),
                ("Animated", self.animated),
                ("Recolor", cfg.recolor is not None),
                ("Upscale", cfg.upscale),
            ],
            debug=cfg.debug,
        )
        if self.animated:
            self._run_animated()
        else:
            for name in cfg.inputs:
                self._write_independent(name)
        if cfg.debug:
            debug_log(
                f"Total {format_total_duration_compact(time.perf_counter() - t_start)}"
            )
        return list(self.written)

    # Animated mode

    def _first_frame(self, rgba: U8Image) -> Tuple[PalettedFrame, ImageConfig]:
        frame, config = self.engine.dither_paletted(rgba)
        frame = self._post(frame)
        assert isinstance(frame, PalettedFrame)
        w, h = frame.size
        if self.config.recolor is not None:
            config = ImageConfig(self.config.recolor.recolor.copy(), w, h)
        elif (config.width, config.height) != (w, h):
            # Upscaled: the engine's colour table with the final bounds.
            config = ImageConfig(config.palette, w, h)
        return frame, config

    def _run_animated(self) -> None:
        cfg = self.config
        assert cfg.fps is not None
        buffer = AnimationBuffer(
            delay=delay_centiseconds(cfg.fps),
            loop_count=translate_loop_count(cfg.loop),
        )
        if cfg.debug:
            debug_log(
                f"animation: delay={buffer.delay}cs  loop field={buffer.loop_count}"
            )

        for i, name in enumerate(cfg.inputs):
            rgba = self.loader(name)
            if i == 0:
                frame, config = self._first_frame(rgba)
                buffer.start(frame, config, name)
                continue

            if cfg.upscale == 1:
                # Without upscaling the source bounds are the frame bounds.
                buffer.check_bounds((rgba.shape[1], rgba.shape[0]), name)
            frame, _config = self.engine.dither_paletted(rgba)
            frame = self._post(frame)
            assert isinstance(frame, PalettedFrame)
            buffer.append(frame, name)

        path = destination_for(cfg.output, cfg.inputs[0], cfg.output_format)
        dest = str(path) if path is not None else STREAM_NAME
        with open_destination(path, cfg.no_overwrite) as fh:
            encode_animation(fh, buffer, dest)
        self.written.append(dest)
        w, h = buffer.bounds or (0, 0)
        log(f"Wrote {dest} | frames={len(buffer.frames)} | size={w}x{h}")

    # Independent mode

    def _write_independent(self, name: str) -> None:
        cfg = self.config
        t0 = time.perf_counter()
        rgba = self.loader(name)

        path: Optional[Path] = destination_for(cfg.output, name, cfg.output_format)
        dest = str(path) if path is not None else STREAM_NAME

        with open_destination(path, cfg.no_overwrite) as fh:
            if cfg.output_format == "png":
                frame = self._post(self.engine.dither(rgba))
                encode_png(fh, frame, cfg.compress_level, dest)
            elif not cfg.post_processing_needed:
                # The encoder asks the engine for palette and pixels.
                frame = None
                encode_gif(fh, rgba, DeriveFromEngine(self.engine), dest)
            else:
                paletted, _config = self.engine.dither_paletted(rgba)
                frame = self._post(paletted)
                assert isinstance(frame, PalettedFrame)
                encode_gif(fh, frame, FixedPalette(frame.palette), dest)

        self.written.append(dest)
        if frame is not None:
            w, h = frame.size
        else:
            h, w = rgba.shape[0], rgba.shape[1]
        log(f"Wrote {dest} | size={w}x{h}")
        if cfg.debug:
            debug_log(f"{name}: {format_seconds_compact(time.perf_counter() - t0)}")
            if frame is not None:
                self._log_usage(frame)

    @staticmethod
    def _log_usage(frame: Frame) -> None:
        usage = colour_usage_report(frame.to_rgba())
        debug_log("colours: " + "  ".join(f"{hx}={n}" for hx, n in usage))


def run_pipeline(
    config: RunConfig, engine: DitheringEngine, loader: Optional[ImageLoader] = None
) -> List[str]:
    return FramePipeline(config, engine, loader).run()


__all__ = ["ImageLoader", "FramePipeline", "run_pipeline"]
