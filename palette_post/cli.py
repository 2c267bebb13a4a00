# palette_post/cli.py
"""
Command line front end.

Usage:
  python -m palette_post -i IN [-i IN ...] -o OUT -p PALETTE [options]

Examples:
  python -m palette_post -i photo.jpg -o out.png -p "black white" -r "indigo limegreen"
  python -m palette_post -i 'frames/*.png' -o anim.gif -p "0 85 170 255" --fps 12 -u 2

Colours (for --palette and --recolor) are one quoted argument separated by
spaces: r,g,b tuples, hex codes (with or without '#'), a single number 0-255
for grey, or an SVG colour name. --recolor also accepts r,g,b,a tuples.
The single word 'sample' extracts a 5 colour palette from the first input.

Output:
  '-' writes to stdout. An existing directory receives one file per input
  named after the input. Any other path is a single output file; several
  inputs with GIF output become one animated GIF.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import __version__
from .colours import parse_colour_list, parse_percent
from .config import (
    DitherOptions,
    LoadOptions,
    RunConfig,
    build_run_config,
    expand_inputs,
)
from .core_types import RGBATuple
from .encode import COMPRESSION_LEVELS
from .engine import METHODS, PaletteDitherer
from .errors import ConfigurationError, PipelineError
from .image_io import SAMPLE_KEYWORD, sample_palette
from .output import STREAM_TOKEN
from .pipeline import run_pipeline
from .utils import debug_log, error, key_value_pairs_to_string

DECIMAL_OR_PERCENT = " Decimal (-1.0..1.0) or percentage (-100%..100%)."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="palette_post",
        description="Dither images to a palette, recolor, upscale and write PNG or GIF.",
    )
    parser.add_argument(
        "-i", "--in", dest="inputs", action="append", required=True,
        help="Input path, repeat for several. '-' is stdin. Paths with '*' are globs.",
    )
    parser.add_argument(
        "-o", "--out", required=True, help="Output file, existing directory, or '-'"
    )
    parser.add_argument(
        "-p", "--palette", required=True,
        help="Colours used for dithering, or 'sample' to take 5 from the first input",
    )
    parser.add_argument(
        "-r", "--recolor", default="",
        help="Colours that replace the palette after dithering, position by position",
    )
    parser.add_argument(
        "-f", "--format", dest="fmt", choices=["png", "gif"], default=None,
        help="Output format. Detected from the output filename when omitted.",
    )
    parser.add_argument(
        "-c", "--compression", choices=list(COMPRESSION_LEVELS), default="default",
        help="PNG compression",
    )
    parser.add_argument(
        "--no-overwrite", action="store_true",
        help="Stop before overwriting an existing file. "
        "Files written before it stay in place.",
    )
    parser.add_argument("--fps", type=float, default=None, help="Animated GIF frame rate")
    parser.add_argument(
        "--loop", type=int, default=0,
        help="Times the animated GIF plays, 0 is infinite",
    )
    parser.add_argument(
        "-u", "--upscale", type=int, default=1,
        help="Integer scale factor applied AFTER dithering",
    )
    parser.add_argument(
        "-x", "--width", type=int, default=0,
        help="Resize input width BEFORE dithering (0 keeps aspect)",
    )
    parser.add_argument(
        "-y", "--height", type=int, default=0,
        help="Resize input height BEFORE dithering (0 keeps aspect)",
    )
    parser.add_argument("--grayscale", action="store_true", help="Grayscale inputs first")
    parser.add_argument("--saturation", default="", help="Saturation." + DECIMAL_OR_PERCENT)
    parser.add_argument("--brightness", default="", help="Brightness." + DECIMAL_OR_PERCENT)
    parser.add_argument("--contrast", default="", help="Contrast." + DECIMAL_OR_PERCENT)
    parser.add_argument(
        "--no-exif-rotation", action="store_true", help="Ignore the EXIF orientation tag"
    )
    parser.add_argument(
        "-m", "--method", choices=list(METHODS), default="floyd-steinberg",
        help="Dithering method",
    )
    parser.add_argument(
        "-s", "--strength", default="",
        help="Dithering strength." + DECIMAL_OR_PERCENT + " 0 is ignored.",
    )
    parser.add_argument(
        "--serpentine", action="store_true", help="Serpentine Floyd-Steinberg scan"
    )
    parser.add_argument(
        "--bayer", type=int, default=4, help="Bayer matrix size (power of two)"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    parser.add_argument(
        "-v", "--version", action="version", version=f"palette_post {__version__}"
    )
    return parser


def _percent(value: str, flag: str, max_one: bool) -> float:
    try:
        return parse_percent(value, max_one)
    except ValueError as e:
        raise ConfigurationError(f"{flag}: {e}") from None


def _colours(
    text: str, flag: str, inputs: List[str], load: LoadOptions, allow_alpha: bool = False
) -> List[RGBATuple]:
    """Colour list for a flag. The single word "sample" reads the first input."""
    if text.strip() != SAMPLE_KEYWORD:
        return parse_colour_list(text, flag, allow_alpha=allow_alpha)
    paths = expand_inputs(inputs)
    if not paths:
        raise ConfigurationError("no input images")
    if paths[0] == STREAM_TOKEN:
        # stdin can only be read once
        raise ConfigurationError(f"{flag}: 'sample' needs a file as the first input")
    return sample_palette(paths[0], load)


def config_from_args(args: argparse.Namespace) -> RunConfig:
    strength = _percent(args.strength, "strength", max_one=True) or 1.0
    load = LoadOptions(
        width=args.width,
        height=args.height,
        grayscale=args.grayscale,
        saturation=_percent(args.saturation, "saturation", max_one=False),
        brightness=_percent(args.brightness, "brightness", max_one=False),
        contrast=_percent(args.contrast, "contrast", max_one=False),
        auto_orient=not args.no_exif_rotation,
    )
    palette = _colours(args.palette, "palette", args.inputs, load)
    recolor = (
        _colours(args.recolor, "recolor", args.inputs, load, allow_alpha=True)
        if args.recolor
        else None
    )
    dither = DitherOptions(
        method=args.method,
        strength=strength,
        serpentine=args.serpentine,
        bayer_size=args.bayer,
    )
    return build_run_config(
        args.inputs,
        args.out,
        palette,
        recolor,
        fmt=args.fmt,
        compression=args.compression,
        no_overwrite=args.no_overwrite,
        fps=args.fps,
        loop=args.loop,
        upscale=args.upscale,
        load=load,
        dither=dither,
        debug=args.debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
        if config.debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Method", config.dither.method),
                        ("Strength", config.dither.strength),
                        ("Grayscale", config.load.grayscale),
                        ("Target", config.output.describe()),
                    ]
                )
            )
        engine = PaletteDitherer(
            config.palette,
            config.dither.method,  # type: ignore[arg-type]
            strength=config.dither.strength,
            serpentine=config.dither.serpentine,
            bayer_size=config.dither.bayer_size,
        )
        run_pipeline(config, engine)
    except PipelineError as e:
        error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
