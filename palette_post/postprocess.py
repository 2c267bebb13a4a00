# palette_post/postprocess.py
from __future__ import annotations

"""
Post-processing of dithered frames: recolor, then integer upscale.

Upscaling is nearest-neighbour only; any smoothing filter would blend the
dither pattern into colours that are not in the palette. Paletted frames stay
paletted with the same palette table.
"""

from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .core_types import Frame, GenericFrame, PalettedFrame
from .recolor import RecolorBinding, recolor


def upscaled_size(width: int, height: int, factor: int) -> Tuple[int, int]:
    """Width times factor; height follows the current aspect ratio."""
    new_w = width * factor
    new_h = int(float(new_w) * float(height) / float(width) + 0.5)
    return new_w, new_h


def upscale(frame: Frame, factor: int) -> Frame:
    """Nearest-neighbour resize by an integer factor."""
    if factor == 1:
        return frame
    w, h = frame.size
    dst = upscaled_size(w, h, factor)

    if frame.kind == "paletted":
        assert isinstance(frame, PalettedFrame)
        im = Image.fromarray(frame.indices)  # "L": indices are resampled as values
        indices = np.array(im.resize(dst, Image.Resampling.NEAREST), dtype=np.uint8)
        return PalettedFrame(indices, frame.palette)

    assert isinstance(frame, GenericFrame)
    im = Image.fromarray(frame.rgba)
    rgba = np.array(im.resize(dst, Image.Resampling.NEAREST), dtype=np.uint8)
    return GenericFrame(rgba)


def post_process(
    frame: Frame, binding: Optional[RecolorBinding], factor: int = 1
) -> Frame:
    """
    Apply recolor (when a binding is active) and upscale (when factor > 1).

    Call once per frame: recolor rewrites paletted tables in place.
    """
    frame = recolor(frame, binding)
    return upscale(frame, factor)


__all__ = ["upscaled_size", "upscale", "post_process"]
