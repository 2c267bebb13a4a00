# palette_post/image_io.py
from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import List

import numpy as np
from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from .config import LoadOptions
from .core_types import RGBATuple, U8Image, rgba_to_hex
from .errors import InputLoadError
from .output import STREAM_TOKEN
from .utils import log

"""
Input loading: decode with Pillow, orient, resize and adjust, return RGBA.
Also extracts a small palette from an input for `--palette sample`.
"""

SAMPLE_KEYWORD = "sample"
SAMPLE_COLOURS = 5
SAMPLE_THUMBNAIL = (200, 200)
SAMPLE_KMEANS_ITERATIONS = 500


def _resize(im: Image.Image, width: int, height: int) -> Image.Image:
    if width == 0 and height == 0:
        return im
    W0, H0 = im.size
    if width == 0:
        width = max(1, int(round(W0 * (height / float(H0)))))
    if height == 0:
        height = max(1, int(round(H0 * (width / float(W0)))))
    # Box filtering suits the common case of downscaling before dithering.
    return im.resize((width, height), resample=Image.Resampling.BOX)


def _adjust(im: Image.Image, opts: LoadOptions) -> Image.Image:
    """Apply grayscale and percent adjustments (-100..100, 0 = unchanged)."""
    if opts.grayscale:
        alpha = im.getchannel("A")
        im = ImageOps.grayscale(im).convert("RGBA")
        im.putalpha(alpha)
    if opts.saturation:
        im = ImageEnhance.Color(im).enhance(1.0 + opts.saturation / 100.0)
    if opts.contrast:
        im = ImageEnhance.Contrast(im).enhance(1.0 + opts.contrast / 100.0)
    if opts.brightness:
        im = ImageEnhance.Brightness(im).enhance(1.0 + opts.brightness / 100.0)
    return im


def prepare_image(im: Image.Image, opts: LoadOptions) -> U8Image:
    """Orient, convert to RGBA, resize and adjust an opened image."""
    if opts.auto_orient:
        im = ImageOps.exif_transpose(im)
    im = im.convert("RGBA")
    im = _resize(im, opts.width, opts.height)
    im = _adjust(im, opts)
    return np.array(im, dtype=np.uint8)


def load_image_rgba(name: str, opts: LoadOptions) -> U8Image:
    """Load an input path ('-' for stdin) as (H, W, 4) uint8."""
    try:
        if name == STREAM_TOKEN:
            data = sys.stdin.buffer.read()
            with Image.open(io.BytesIO(data)) as im0:
                return prepare_image(im0, opts)
        with Image.open(Path(name)) as im0:
            return prepare_image(im0, opts)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InputLoadError(name, e) from e


def extract_palette(rgba: U8Image, n_colours: int = SAMPLE_COLOURS) -> List[RGBATuple]:
    """
    Derive up to n_colours opaque colours from an image.

    The image is shrunk to a nearest-neighbour thumbnail, then median cut
    with k-means refinement picks the colours. Most used colour first.
    """
    thumb = Image.fromarray(np.ascontiguousarray(rgba)).convert("RGB")
    thumb = thumb.resize(SAMPLE_THUMBNAIL, resample=Image.Resampling.NEAREST)
    q = thumb.quantize(
        colors=n_colours,
        method=Image.Quantize.MEDIANCUT,
        kmeans=SAMPLE_KMEANS_ITERATIONS,
    )
    flat = q.getpalette() or []
    used = sorted(q.getcolors() or [], key=lambda c: -c[0])
    return [(flat[3 * i], flat[3 * i + 1], flat[3 * i + 2], 255) for _count, i in used]


def sample_palette(name: str, opts: LoadOptions) -> List[RGBATuple]:
    """Load an input the usual way and extract its palette."""
    colours = extract_palette(load_image_rgba(name, opts))
    log(f"Extracted palette: {' '.join(rgba_to_hex(c) for c in colours)}")
    return colours


__all__ = [
    "SAMPLE_KEYWORD",
    "prepare_image",
    "load_image_rgba",
    "extract_palette",
    "sample_palette",
]
