# palette_post/__init__.py
"""
palette_post package.

Purpose:
  Finish dithered images: recolor to a parallel palette, upscale losslessly,
  and write PNG files, static GIFs, or one animated GIF. See cli.py for the
  command line.

Public API:
  recolor        : positional palette substitution (paletted fast path, pixel slow path).
  post_process   : recolor followed by nearest-neighbour integer upscale.
  FramePipeline  : mode selection, frame consistency, output routing and encoding.
  PaletteDitherer: reference dithering engine (nearest, Floyd-Steinberg, Bayer).
  build_run_config / RunConfig : validated, frozen run settings.

Quick start:
  from palette_post import build_run_config, PaletteDitherer, run_pipeline
  cfg = build_run_config(["in.png"], "out.png", [(0, 0, 0, 255), (255, 255, 255, 255)])
  run_pipeline(cfg, PaletteDitherer(cfg.palette))
"""

__version__ = "0.1.0"

from .config import RunConfig, build_run_config  # noqa: E402,F401
from .engine import PaletteDitherer  # noqa: E402,F401
from .pipeline import FramePipeline, run_pipeline  # noqa: E402,F401
from .postprocess import post_process  # noqa: E402,F401
from .recolor import RecolorBinding, recolor  # noqa: E402,F401

__all__ = [
    "__version__",
    "RunConfig",
    "build_run_config",
    "PaletteDitherer",
    "FramePipeline",
    "run_pipeline",
    "post_process",
    "RecolorBinding",
    "recolor",
]
