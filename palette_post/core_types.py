# palette_post/core_types.py
from __future__ import annotations

"""
Core type aliases, frame variants, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import ClassVar, Literal, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBATuple = Tuple[int, int, int, int]

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
U8Indices = NDArray[np.uint8]  # (H, W) palette indices
U8Palette = NDArray[np.uint8]  # (P, 4) RGBA rows

FrameKind = Literal["paletted", "generic"]

# Frame variants


@dataclass(frozen=True)
class PalettedFrame:
    """Index table plus palette. The palette array may be rewritten in place."""

    indices: U8Indices
    palette: U8Palette
    kind: ClassVar[FrameKind] = "paletted"

    @property
    def size(self) -> Tuple[int, int]:
        return int(self.indices.shape[1]), int(self.indices.shape[0])

    def to_rgba(self) -> U8Image:
        """Expand indices through the palette into an (H, W, 4) array."""
        return self.palette[self.indices]


@dataclass(frozen=True)
class GenericFrame:
    """Direct RGBA pixels."""

    rgba: U8Image
    kind: ClassVar[FrameKind] = "generic"

    @property
    def size(self) -> Tuple[int, int]:
        return int(self.rgba.shape[1]), int(self.rgba.shape[0])

    def to_rgba(self) -> U8Image:
        return self.rgba


Frame = Union[PalettedFrame, GenericFrame]


@dataclass(frozen=True)
class ImageConfig:
    """Shared colour table and bounds of an animation."""

    palette: U8Palette
    width: int
    height: int


# Small helpers


def rgba_to_hex(rgba: Sequence[int]) -> str:
    """RGBA row to '#rrggbb' or '#rrggbbaa' when not opaque."""
    r, g, b = int(rgba[0]), int(rgba[1]), int(rgba[2])
    a = int(rgba[3]) if len(rgba) > 3 else 255
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"#{r:02x}{g:02x}{b:02x}{a:02x}"


def palette_from_colours(colours: Sequence[RGBATuple]) -> U8Palette:
    """Stack RGBA tuples into a (P, 4) uint8 palette array."""
    out = np.zeros((len(colours), 4), dtype=np.uint8)
    for i, c in enumerate(colours):
        out[i] = c
    return out


def pack_rgb(rgb: np.ndarray) -> NDArray[np.uint32]:
    """Pack the first three channels of (..., >=3) uint8 rows into uint32 keys."""
    arr = np.asarray(rgb, dtype=np.uint32)
    return (arr[..., 0] << 16) | (arr[..., 1] << 8) | arr[..., 2]


def assert_u8_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image  # type: ignore[return-value]


__all__ = [
    "RGBATuple",
    "U8Image",
    "U8Indices",
    "U8Palette",
    "FrameKind",
    "PalettedFrame",
    "GenericFrame",
    "Frame",
    "ImageConfig",
    "rgba_to_hex",
    "palette_from_colours",
    "pack_rgb",
    "assert_u8_rgba",
]
