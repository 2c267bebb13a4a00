# palette_post/config.py
from __future__ import annotations

"""
Run configuration: validated once, frozen, passed explicitly to every stage.

Exports:
  OutputFormat, FORMATS
  LoadOptions, DitherOptions, RunConfig
  expand_inputs(patterns) -> list[str]
  resolve_output_format(target, fmt_flag) -> OutputFormat
  is_animated(n_inputs, fmt, target) -> bool
  build_run_config(...) -> RunConfig

All validation failures raise ConfigurationError before any image is read.
"""

import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional, Sequence, Tuple

from .colours import is_grayscale_palette
from .core_types import RGBATuple, U8Palette, palette_from_colours
from .encode import COMPRESSION_LEVELS
from .engine import METHODS
from .errors import ConfigurationError
from .output import OutputTarget, resolve_output_target
from .recolor import RecolorBinding

OutputFormat = Literal["png", "gif"]
FORMATS: Tuple[str, ...] = ("png", "gif")
GIF_MAX_COLOURS = 256

UNSUPPORTED_FORMAT = "'{}' is an unsupported format, only 'png' or 'gif' are accepted"


@dataclass(frozen=True)
class LoadOptions:
    """Decode-time adjustments applied before dithering."""

    width: int = 0
    height: int = 0
    grayscale: bool = False
    saturation: float = 0.0  # percent, -100..100
    brightness: float = 0.0
    contrast: float = 0.0
    auto_orient: bool = True


@dataclass(frozen=True)
class DitherOptions:
    method: str = "floyd-steinberg"
    strength: float = 1.0
    serpentine: bool = False
    bayer_size: int = 4


@dataclass(frozen=True, eq=False)
class RunConfig:
    inputs: Tuple[str, ...]
    palette: U8Palette
    output: OutputTarget
    output_format: OutputFormat
    recolor: Optional[RecolorBinding] = None
    compress_level: int = COMPRESSION_LEVELS["default"]
    no_overwrite: bool = False
    fps: Optional[float] = None
    loop: int = 0
    upscale: int = 1
    load: LoadOptions = field(default_factory=LoadOptions)
    dither: DitherOptions = field(default_factory=DitherOptions)
    debug: bool = False

    @property
    def animated(self) -> bool:
        return is_animated(len(self.inputs), self.output_format, self.output)

    @property
    def post_processing_needed(self) -> bool:
        return self.recolor is not None or self.upscale > 1


def expand_inputs(patterns: Sequence[str]) -> List[str]:
    """Expand arguments containing '*' as globs (sorted); keep the rest as given."""
    out: List[str] = []
    for p in patterns:
        if "*" in p:
            out.extend(sorted(glob.glob(p)))
        else:
            out.append(p)
    return out


def resolve_output_format(target: OutputTarget, fmt_flag: Optional[str]) -> OutputFormat:
    """
    The --format value wins when given. Otherwise stream and directory targets
    use png and a file target is detected from its extension.
    """
    if fmt_flag is not None:
        fmt = fmt_flag.lower()
        if fmt not in FORMATS:
            raise ConfigurationError(UNSUPPORTED_FORMAT.format(fmt_flag))
        return fmt  # type: ignore[return-value]

    if target.kind != "file":
        return "png"

    assert target.path is not None
    ext = Path(target.path).suffix.lstrip(".").lower()
    if ext == "":
        return "png"
    if ext not in FORMATS:
        raise ConfigurationError(UNSUPPORTED_FORMAT.format(ext))
    return ext  # type: ignore[return-value]


def is_animated(n_inputs: int, fmt: str, target: OutputTarget) -> bool:
    """Several inputs, GIF output, not a directory: one animated file."""
    return n_inputs > 1 and fmt == "gif" and not target.is_directory


def build_run_config(
    inputs: Sequence[str],
    out: str,
    palette: Sequence[RGBATuple],
    recolor: Optional[Sequence[RGBATuple]] = None,
    *,
    fmt: Optional[str] = None,
    compression: str = "default",
    no_overwrite: bool = False,
    fps: Optional[float] = None,
    loop: int = 0,
    upscale: int = 1,
    load: Optional[LoadOptions] = None,
    dither: Optional[DitherOptions] = None,
    debug: bool = False,
) -> RunConfig:
    """Validate raw settings and freeze them into a RunConfig."""
    paths = expand_inputs(inputs)
    if not paths:
        raise ConfigurationError("no input images")

    if len(palette) < 2:
        raise ConfigurationError("the palette must have at least two colors")
    if any(c[3] != 255 for c in palette):
        raise ConfigurationError("palette colors cannot have transparency")
    pal = palette_from_colours(palette)

    binding: Optional[RecolorBinding] = None
    if recolor:
        if len(recolor) != len(palette):
            raise ConfigurationError(
                "recolor palette must have the same number of colors as the initial palette"
            )
        binding = RecolorBinding(pal, palette_from_colours(recolor))

    target = resolve_output_target(out)
    out_format = resolve_output_format(target, fmt)

    if len(paths) > 1 and out_format != "gif" and not target.is_directory:
        raise ConfigurationError(
            "multiple input images are only allowed if the output format is GIF, "
            "or an existing directory"
        )
    if out_format == "gif" and len(palette) > GIF_MAX_COLOURS:
        raise ConfigurationError(
            "the GIF format only supports 256 colors or less in the palette"
        )

    if compression not in COMPRESSION_LEVELS:
        raise ConfigurationError(f"invalid compression type '{compression}'")

    if upscale < 0:
        raise ConfigurationError("upscale cannot be negative")
    if upscale == 0:
        upscale = 1

    if fps is not None and fps <= 0:
        raise ConfigurationError("fps must be greater than 0")
    if loop < 0:
        raise ConfigurationError("loop count cannot be negative")
    if is_animated(len(paths), out_format, target) and fps is None:
        raise ConfigurationError("output will be animated GIF, but --fps flag is not set")

    dither = dither or DitherOptions()
    if dither.method not in METHODS:
        raise ConfigurationError(f"unknown dithering method '{dither.method}'")
    if dither.method == "bayer" and (
        dither.bayer_size < 2 or dither.bayer_size & (dither.bayer_size - 1)
    ):
        raise ConfigurationError("bayer matrix size must be a power of two")

    load = load or LoadOptions()
    if load.width < 0 or load.height < 0:
        raise ConfigurationError("width and height cannot be negative")
    grayscale = load.grayscale or is_grayscale_palette(palette)
    saturation = load.saturation
    if saturation <= -100:
        grayscale = True
        saturation = 0.0
    load = LoadOptions(
        width=load.width,
        height=load.height,
        grayscale=grayscale,
        saturation=saturation,
        brightness=load.brightness,
        contrast=load.contrast,
        auto_orient=load.auto_orient,
    )

    return RunConfig(
        inputs=tuple(paths),
        palette=pal,
        output=target,
        output_format=out_format,
        recolor=binding,
        compress_level=COMPRESSION_LEVELS[compression],
        no_overwrite=no_overwrite,
        fps=fps,
        loop=loop,
        upscale=upscale,
        load=load,
        dither=dither,
        debug=debug,
    )


__all__ = [
    "OutputFormat",
    "FORMATS",
    "GIF_MAX_COLOURS",
    "LoadOptions",
    "DitherOptions",
    "RunConfig",
    "expand_inputs",
    "resolve_output_format",
    "is_animated",
    "build_run_config",
]
