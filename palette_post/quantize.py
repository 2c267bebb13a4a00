# palette_post/quantize.py
from __future__ import annotations

"""
Quantisation strategies for paletted encoders.

  DeriveFromEngine(engine) : the encoder receives the raw image and the engine
                             both picks the palette and places the pixels
  FixedPalette(table)      : the encoder receives an already paletted frame
                             and reports this table unchanged, so indices set
                             up by post-processing are never re-quantised
"""

from dataclasses import dataclass
from typing import Union

from .core_types import Frame, PalettedFrame, U8Image, U8Palette
from .engine import DitheringEngine


@dataclass(frozen=True)
class DeriveFromEngine:
    engine: DitheringEngine


@dataclass(frozen=True, eq=False)
class FixedPalette:
    table: U8Palette


QuantizeStrategy = Union[DeriveFromEngine, FixedPalette]


def quantize_for_encoding(
    image: Union[U8Image, Frame], strategy: QuantizeStrategy
) -> PalettedFrame:
    """Produce the paletted frame an encoder writes under the given strategy."""
    if isinstance(strategy, FixedPalette):
        if getattr(image, "kind", None) != "paletted":
            raise TypeError("a fixed palette needs an already paletted frame")
        assert isinstance(image, PalettedFrame)
        if int(image.indices.max(initial=0)) >= strategy.table.shape[0]:
            raise ValueError("frame indices exceed the fixed palette")
        return PalettedFrame(image.indices, strategy.table)

    if getattr(image, "kind", None) is not None:
        raise TypeError("engine quantisation takes the raw RGBA image")
    frame, _config = strategy.engine.dither_paletted(image)  # type: ignore[arg-type]
    return frame


__all__ = [
    "DeriveFromEngine",
    "FixedPalette",
    "QuantizeStrategy",
    "quantize_for_encoding",
]
