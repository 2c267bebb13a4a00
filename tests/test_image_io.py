import numpy as np
import pytest
from PIL import Image

from palette_post.config import LoadOptions
from palette_post.errors import InputLoadError
from palette_post.image_io import extract_palette, load_image_rgba, sample_palette

from .conftest import BLACK, INDIGO, RED, WHITE, solid


def _quadrants():
    """40x40 image: black, white, red and indigo quadrants, black largest."""
    img = solid(40, 40, BLACK)
    img[:10, 20:] = WHITE
    img[20:, :20] = RED
    img[20:, 20:] = INDIGO
    return img


class TestExtractPalette:
    def test_few_colours_are_recovered_exactly(self):
        colours = extract_palette(_quadrants())
        assert set(colours) == {BLACK, WHITE, RED, INDIGO}
        assert colours[0] == BLACK

    def test_limited_to_requested_count(self):
        ramp = np.zeros((16, 64, 4), dtype=np.uint8)
        ramp[..., 0] = np.arange(0, 256, 4, dtype=np.uint8)[None, :]
        ramp[..., 1] = 255 - ramp[..., 0]
        ramp[..., 3] = 255
        colours = extract_palette(ramp)
        assert 2 <= len(colours) <= 5
        assert all(c[3] == 255 for c in colours)


class TestLoading:
    def test_sample_palette_logs_extracted_colours(self, tmp_path, capsys):
        path = tmp_path / "q.png"
        Image.fromarray(_quadrants()).save(path)
        colours = sample_palette(str(path), LoadOptions())
        assert set(colours) == {BLACK, WHITE, RED, INDIGO}
        assert "Extracted palette: #000000" in capsys.readouterr().err

    def test_resize_keeps_aspect_when_one_side_is_zero(self, tmp_path):
        path = tmp_path / "wide.png"
        Image.fromarray(solid(40, 20, WHITE)).save(path)
        rgba = load_image_rgba(str(path), LoadOptions(width=10))
        assert rgba.shape == (5, 10, 4)

    def test_missing_file_is_load_error(self, tmp_path):
        with pytest.raises(InputLoadError) as exc:
            load_image_rgba(str(tmp_path / "nope.png"), LoadOptions())
        assert "nope.png" in str(exc.value)
