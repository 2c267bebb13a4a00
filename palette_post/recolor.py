# palette_post/recolor.py
from __future__ import annotations

"""
Recolor mapping: swap dithered palette colours for a parallel palette.

Functions:
  RecolorBinding(palette, recolor)            position i of palette -> position i of recolor
  RecolorBinding.lookup(rows) -> (rgba, n_unmatched)
  recolor(frame, binding) -> Frame

Use cases:
  - paletted frames: only the palette table is rewritten (in place)
  - generic frames: every pixel is matched and rewritten
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .core_types import Frame, GenericFrame, PalettedFrame, U8Palette, pack_rgb
from .errors import ConfigurationError
from .utils import warn


@dataclass(frozen=True, eq=False)
class RecolorBinding:
    """Positional 1:1 binding from the dithering palette to a recolor palette."""

    palette: U8Palette
    recolor: U8Palette

    def __post_init__(self) -> None:
        if self.palette.shape[0] == 0 or self.recolor.shape[0] == 0:
            raise ConfigurationError("recolor binding needs two non-empty palettes")
        if self.palette.shape[0] != self.recolor.shape[0]:
            raise ConfigurationError(
                "recolor palette must have the same number of colors as the initial palette"
            )

    def lookup(self, rows: np.ndarray) -> Tuple[np.ndarray, int]:
        """
        Map (..., >=3) colour rows to their bound recolor RGBA rows.

        Alpha of the input is ignored. The first palette position with equal
        RGB wins. Rows with no match get recolor[0]; their count is returned.
        """
        keys = pack_rgb(rows)
        pal_keys = pack_rgb(self.palette)
        order = np.argsort(pal_keys, kind="stable")
        sorted_keys = pal_keys[order]

        pos = np.searchsorted(sorted_keys, keys, side="left")
        pos = np.minimum(pos, sorted_keys.shape[0] - 1)
        matched = sorted_keys[pos] == keys
        idx = np.where(matched, order[pos], 0)

        return self.recolor[idx], int(np.count_nonzero(~matched))


def _recolor_paletted(frame: PalettedFrame, binding: RecolorBinding) -> PalettedFrame:
    new_rows, unmatched = binding.lookup(frame.palette)
    if unmatched:
        warn(f"recolor: {unmatched} palette entries matched no palette colour")
    if not frame.palette.flags.writeable:
        return PalettedFrame(frame.indices, new_rows)
    frame.palette[:] = new_rows
    return frame


def _recolor_generic(frame: GenericFrame, binding: RecolorBinding) -> GenericFrame:
    rgba = frame.rgba
    if not rgba.flags.writeable:
        rgba = rgba.copy()
    new_rgba, unmatched = binding.lookup(rgba)
    if unmatched:
        warn(f"recolor: {unmatched:,} pixels matched no palette colour")
    rgba[...] = new_rgba
    return GenericFrame(rgba)


def recolor(frame: Frame, binding: Optional[RecolorBinding]) -> Frame:
    """
    Recolor a dithered frame. Returns the frame untouched when binding is None.

    Paletted frames keep their type and index table.
    """
    if binding is None:
        return frame
    if frame.kind == "paletted":
        return _recolor_paletted(frame, binding)  # type: ignore[arg-type]
    return _recolor_generic(frame, binding)  # type: ignore[arg-type]


__all__ = ["RecolorBinding", "recolor"]
