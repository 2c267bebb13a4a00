import numpy as np
import pytest

from palette_post.animation import (
    NO_REPEAT,
    AnimationBuffer,
    delay_centiseconds,
    translate_loop_count,
)
from palette_post.core_types import ImageConfig, PalettedFrame
from palette_post.errors import FrameValidationError


class TestDelay:
    @pytest.mark.parametrize(
        "fps,expected", [(100, 1), (24, 4), (1, 100), (10, 10), (0.5, 200)]
    )
    def test_known_rates(self, fps, expected):
        assert delay_centiseconds(fps) == expected

    @pytest.mark.parametrize("fps", [101, 250, 1000, 1e9])
    def test_never_below_one(self, fps):
        assert delay_centiseconds(fps) == 1

    def test_zero_fps_rejected(self):
        with pytest.raises(ValueError):
            delay_centiseconds(0)


class TestLoopCount:
    def test_infinite(self):
        assert translate_loop_count(0) == 0

    def test_play_once_is_no_repeat(self):
        assert translate_loop_count(1) == NO_REPEAT

    def test_first_playback_is_counted(self):
        assert translate_loop_count(5) == 4
        assert translate_loop_count(2) == 1


def _frame(w, h):
    table = np.array([[0, 0, 0, 255], [255, 255, 255, 255]], dtype=np.uint8)
    return PalettedFrame(np.zeros((h, w), dtype=np.uint8), table)


class TestAnimationBuffer:
    def test_frames_share_delay(self):
        buf = AnimationBuffer(delay=10, loop_count=0)
        first = _frame(4, 4)
        buf.start(first, ImageConfig(first.palette, 4, 4), "a.png")
        buf.append(_frame(4, 4), "b.png")
        assert buf.delays == [10, 10]
        assert buf.bounds == (4, 4)

    def test_bounds_mismatch_names_both_inputs(self):
        buf = AnimationBuffer(delay=10, loop_count=0)
        first = _frame(4, 4)
        buf.start(first, ImageConfig(first.palette, 4, 4), "first.png")
        with pytest.raises(FrameValidationError) as exc:
            buf.append(_frame(5, 4), "second.png")
        assert "second.png" in str(exc.value)
        assert "first.png" in str(exc.value)
        assert len(buf.frames) == 1

    def test_finalize_only_once(self):
        buf = AnimationBuffer(delay=1, loop_count=0)
        buf.finalize()
        with pytest.raises(RuntimeError):
            buf.finalize()
