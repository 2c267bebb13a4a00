# palette_post/engine.py
from __future__ import annotations

"""
Dithering engine interface and a small reference implementation.

The pipeline only relies on the DitheringEngine protocol:
  palette                      (P,4) uint8, the colours every output index refers to
  dither(rgba)          -> GenericFrame
  dither_paletted(rgba) -> (PalettedFrame, ImageConfig)

PaletteDitherer methods:
  none            : nearest palette colour (RGB distance), no diffusion
  floyd-steinberg : error diffusion in RGB, optional serpentine scan
  bayer           : ordered dithering with an NxN Bayer threshold matrix

Every call allocates a fresh palette copy for its frame: recolor rewrites
paletted tables in place.
"""

from typing import Literal, Protocol, Tuple

import numpy as np

from .core_types import (
    GenericFrame,
    ImageConfig,
    PalettedFrame,
    U8Image,
    U8Indices,
    U8Palette,
    assert_u8_rgba,
)

Method = Literal["none", "floyd-steinberg", "bayer"]
METHODS: Tuple[str, ...] = ("none", "floyd-steinberg", "bayer")


class DitheringEngine(Protocol):
    palette: U8Palette

    def dither(self, rgba: U8Image) -> GenericFrame: ...

    def dither_paletted(self, rgba: U8Image) -> Tuple[PalettedFrame, ImageConfig]: ...


# ---------- helpers ------------------------------------------------------------


def index_dtype(n_colours: int) -> type:
    """uint8 while indices fit a byte; generic frames may use larger palettes."""
    return np.uint8 if n_colours <= 256 else np.uint16


def nearest_indices(rgb: np.ndarray, pal_rgb: np.ndarray) -> U8Indices:
    """Index of the nearest palette row (squared RGB distance) for every pixel."""
    shape = rgb.shape[:-1]
    flat = rgb.reshape(-1, 3).astype(np.float32)
    pal = pal_rgb.astype(np.float32)
    out = np.empty(flat.shape[0], dtype=index_dtype(pal.shape[0]))
    chunk = 200_000

    for i in range(0, flat.shape[0], chunk):
        pts = flat[i : i + chunk]
        diff = pts[:, None, :] - pal[None, :, :]
        de2 = np.sum(diff * diff, axis=2)
        out[i : i + chunk] = np.argmin(de2, axis=1)

    return out.reshape(shape)


def bayer_matrix(size: int) -> np.ndarray:
    """Normalised (size x size) Bayer threshold matrix in [0, 1)."""
    if size < 2 or size & (size - 1):
        raise ValueError("bayer matrix size must be a power of two >= 2")
    m = np.zeros((1, 1), dtype=np.int64)
    while m.shape[0] < size:
        m = np.block([[4 * m, 4 * m + 2], [4 * m + 3, 4 * m + 1]])
    return (m.astype(np.float32) + 0.5) / float(size * size)


# ---------- reference engine ---------------------------------------------------


class PaletteDitherer:
    """Map RGBA images onto a fixed palette."""

    def __init__(
        self,
        palette: U8Palette,
        method: Method = "floyd-steinberg",
        *,
        strength: float = 1.0,
        serpentine: bool = False,
        bayer_size: int = 4,
    ) -> None:
        if palette.ndim != 2 or palette.shape[1] != 4 or palette.shape[0] == 0:
            raise ValueError("palette must be a non-empty (P,4) array")
        if method not in METHODS:
            raise ValueError(f"unknown dithering method '{method}'")
        self.palette = palette.astype(np.uint8, copy=True)
        self.palette.setflags(write=False)
        self.method = method
        self.strength = float(strength)
        self.serpentine = bool(serpentine)
        self.bayer_size = int(bayer_size)
        if method == "bayer":
            self._threshold = bayer_matrix(self.bayer_size)

    def _indices(self, rgba: U8Image) -> U8Indices:
        assert_u8_rgba(rgba)
        rgb = rgba[..., :3]
        pal_rgb = self.palette[:, :3]
        if self.method == "none":
            return nearest_indices(rgb, pal_rgb)
        if self.method == "bayer":
            return self._bayer(rgb, pal_rgb)
        return self._floyd_steinberg(rgb, pal_rgb)

    def _bayer(self, rgb: np.ndarray, pal_rgb: np.ndarray) -> U8Indices:
        H, W, _ = rgb.shape
        n = self.bayer_size
        reps = ((H + n - 1) // n, (W + n - 1) // n)
        thresh = np.tile(self._threshold, reps)[:H, :W]
        offset = (thresh - 0.5) * 255.0 * self.strength
        shifted = np.clip(rgb.astype(np.float32) + offset[..., None], 0.0, 255.0)
        return nearest_indices(shifted, pal_rgb)

    def _floyd_steinberg(self, rgb: np.ndarray, pal_rgb: np.ndarray) -> U8Indices:
        H, W, _ = rgb.shape
        work = rgb.astype(np.float32)
        pal = pal_rgb.astype(np.float32)
        out = np.zeros((H, W), dtype=index_dtype(pal.shape[0]))
        k = self.strength

        for y in range(H):
            left_to_right = (not self.serpentine) or (y % 2) == 0
            xs = range(W) if left_to_right else range(W - 1, -1, -1)
            nbrs = (
                ((1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16))
                if left_to_right
                else ((-1, 0, 7 / 16), (1, 1, 3 / 16), (0, 1, 5 / 16), (-1, 1, 1 / 16))
            )
            for x in xs:
                here = np.clip(work[y, x], 0.0, 255.0)
                diff = pal - here
                j = int(np.argmin(np.sum(diff * diff, axis=1)))
                out[y, x] = j

                err = (here - pal[j]) * k
                for dx, dy, w in nbrs:
                    nx, ny = x + dx, y + dy
                    if 0 <= ny < H and 0 <= nx < W:
                        work[ny, nx] += err * w

        return out

    def dither(self, rgba: U8Image) -> GenericFrame:
        idx = self._indices(rgba)
        return GenericFrame(self.palette[idx])

    def dither_paletted(self, rgba: U8Image) -> Tuple[PalettedFrame, ImageConfig]:
        if self.palette.shape[0] > 256:
            raise ValueError("paletted output supports at most 256 colours")
        idx = self._indices(rgba)
        H, W = idx.shape
        frame = PalettedFrame(idx, self.palette.copy())
        return frame, ImageConfig(self.palette.copy(), W, H)


__all__ = [
    "Method",
    "METHODS",
    "DitheringEngine",
    "nearest_indices",
    "bayer_matrix",
    "PaletteDitherer",
]
