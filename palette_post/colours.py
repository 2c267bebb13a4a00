# palette_post/colours.py
from __future__ import annotations

"""
Colour-list and percentage argument parsing.

Exports:
  parse_colour(text, allow_alpha=False) -> RGBATuple
  parse_colour_list(text, flag, allow_alpha=False) -> list[RGBATuple]
  parse_percent(text, max_one) -> float
  is_grayscale_palette(colours) -> bool

Accepted colour forms, tried in order:
  "r,g,b"        decimal tuple
  "r,g,b,a"      decimal tuple with alpha (recolor palettes only)
  "#rrggbb"      hex, '#' optional, case-insensitive
  "0".."255"     grey level
  "indigo"       CSS / SVG colour name (via Pillow's ImageColor table)
"""

import re
from typing import List, Sequence

from PIL import ImageColor

from .core_types import RGBATuple
from .errors import ConfigurationError

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


def _parse_tuple(text: str, n: int) -> RGBATuple:
    parts = text.split(",")
    if len(parts) != n:
        raise ValueError(text)
    values = [int(p.strip()) for p in parts]
    if any(v < 0 or v > 255 for v in values):
        raise ValueError(text)
    if n == 3:
        values.append(255)
    return (values[0], values[1], values[2], values[3])


def parse_colour(text: str, allow_alpha: bool = False) -> RGBATuple:
    """Parse one colour. Raises ValueError with a readable message on failure."""
    commas = text.count(",")
    if commas == 2:
        try:
            return _parse_tuple(text, 3)
        except ValueError:
            raise ValueError(
                f"{text} is not a valid RGB tuple. Example: 25,200,150"
            ) from None
    if allow_alpha and commas == 3:
        try:
            return _parse_tuple(text, 4)
        except ValueError:
            raise ValueError(
                f"{text} is not a valid RGBA tuple. Example: 25,200,150,100"
            ) from None

    m = _HEX_RE.match(text)
    if m:
        r, g, b = ImageColor.getrgb("#" + m.group(1).lower())[:3]
        return (r, g, b, 255)

    if text.isdigit():
        n = int(text)
        if n > 255:
            raise ValueError(f"single numbers like {n} must be in the range 0-255")
        return (n, n, n, 255)

    name = text.lower()
    if name in ImageColor.colormap:
        r, g, b = ImageColor.getrgb(name)[:3]
        return (r, g, b, 255)

    raise ValueError(
        f"{text} not recognized as an RGB tuple, hex code, number 0-255, or SVG colour name"
    )


def parse_colour_list(
    text: str, flag: str, allow_alpha: bool = False
) -> List[RGBATuple]:
    """Split a whitespace-separated colour list and parse every entry."""
    colours: List[RGBATuple] = []
    for arg in text.split():
        try:
            colours.append(parse_colour(arg, allow_alpha=allow_alpha))
        except ValueError as e:
            raise ConfigurationError(f"{flag}: {e}") from None
    return colours


def parse_percent(text: str, max_one: bool) -> float:
    """
    Parse "0.5" or "50%". An empty string is 0.

    With max_one, "50%" -> 0.5 and "0.5" -> 0.5.
    Without it,  "50%" -> 50  and "0.5" -> 50.
    """
    if not text:
        return 0.0
    if text.endswith("%"):
        value = float(text[:-1])
        return value / 100.0 if max_one else value
    value = float(text)
    return value if max_one else value * 100.0


def is_grayscale_palette(colours: Sequence[RGBATuple]) -> bool:
    """True when every colour has equal R, G and B."""
    return all(c[0] == c[1] == c[2] for c in colours)


__all__ = [
    "parse_colour",
    "parse_colour_list",
    "parse_percent",
    "is_grayscale_palette",
]
