from typing import Dict

import numpy as np
import pytest

from palette_post.core_types import palette_from_colours

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
INDIGO = (75, 0, 130, 255)
LIMEGREEN = (50, 205, 50, 255)


def solid(width: int, height: int, colour) -> np.ndarray:
    """(H, W, 4) uint8 image filled with one colour."""
    out = np.zeros((height, width, 4), dtype=np.uint8)
    out[...] = colour
    return out


def checker(width: int, height: int, a=BLACK, b=WHITE) -> np.ndarray:
    """Alternating 1px checkerboard of two colours."""
    out = solid(width, height, a)
    ys, xs = np.indices((height, width))
    out[(ys + xs) % 2 == 1] = b
    return out


@pytest.fixture
def bw_palette() -> np.ndarray:
    return palette_from_colours([BLACK, WHITE])


@pytest.fixture
def make_loader():
    def _make(images: Dict[str, np.ndarray]):
        def load(name: str) -> np.ndarray:
            return images[name].copy()

        return load

    return _make
