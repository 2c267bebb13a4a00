# palette_post/animation.py
from __future__ import annotations

"""
Animated GIF assembly state.

Exports:
  NO_REPEAT                          # stored loop value: play once, no loop extension
  delay_centiseconds(fps) -> int     # max(round(100 / fps), 1)
  translate_loop_count(n) -> int     # user count -> GIF loop field
  AnimationBuffer                    # ordered frames, delays, loop count, shared config

The GIF delay unit is 1/100 s, so 100 fps is the fastest representable rate.
The GIF loop field counts repeats after the first playback.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .core_types import ImageConfig, PalettedFrame
from .errors import FrameValidationError

NO_REPEAT = -1


def delay_centiseconds(fps: float) -> int:
    """Per-frame delay for a frame rate, never below 1."""
    if fps <= 0:
        raise ValueError("fps must be greater than 0")
    return int(max(round(100.0 / fps), 1))


def translate_loop_count(loops: int) -> int:
    """0 -> 0 (infinite), 1 -> NO_REPEAT, N -> N-1."""
    if loops < 0:
        raise ValueError("loop count cannot be negative")
    if loops == 0:
        return 0
    if loops == 1:
        return NO_REPEAT
    return loops - 1


@dataclass
class AnimationBuffer:
    delay: int
    loop_count: int
    frames: List[PalettedFrame] = field(default_factory=list)
    delays: List[int] = field(default_factory=list)
    config: Optional[ImageConfig] = None
    first_name: Optional[str] = None
    finalized: bool = False

    @property
    def bounds(self) -> Optional[Tuple[int, int]]:
        if not self.frames:
            return None
        return self.frames[0].size

    def start(self, frame: PalettedFrame, config: ImageConfig, name: str) -> None:
        """Store frame 0 and the shared image configuration."""
        if self.frames:
            raise RuntimeError("animation already started")
        self.frames.append(frame)
        self.delays.append(self.delay)
        self.config = config
        self.first_name = name

    def check_bounds(self, size: Tuple[int, int], name: str) -> None:
        if self.bounds is not None and tuple(size) != self.bounds:
            raise FrameValidationError(
                f"image '{name}' isn't the same size as '{self.first_name}', "
                "all sizes must match to create an animated GIF"
            )

    def append(self, frame: PalettedFrame, name: str) -> None:
        """Add a later frame after checking it against frame 0's bounds."""
        if not self.frames:
            raise RuntimeError("animation not started")
        if self.finalized:
            raise RuntimeError("animation already finalized")
        self.check_bounds(frame.size, name)
        self.frames.append(frame)
        self.delays.append(self.delay)

    def finalize(self) -> None:
        if self.finalized:
            raise RuntimeError("animation already finalized")
        self.finalized = True


__all__ = [
    "NO_REPEAT",
    "delay_centiseconds",
    "translate_loop_count",
    "AnimationBuffer",
]
