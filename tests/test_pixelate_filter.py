"""
Unit tests for the pixelate_filter module.

Tests the block-averaging redaction algorithm: cell partitioning, rounding,
alpha averaging, idempotence, stroke ordering and purity of rendering.
"""

import numpy as np
import pytest
from PIL import Image

from PX_Libs.PixelateLib.pixelate_filter import (
    PixelateStroke,
    apply_pixelate_strokes,
    pixelate_region,
    round_half_up,
    validate_block_size,
)


def cell_is_uniform(pixels, x0, y0, x1, y1):
    cell = pixels[y0:y1, x0:x1].reshape(-1, 4)
    return bool((cell == cell[0]).all())


class TestRoundHalfUp:
    """Tests for round_half_up function."""

    def test_halves_round_up(self):
        """Should round .5 up rather than to even."""
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(-0.5) == 0


class TestValidateBlockSize:
    """Tests for validate_block_size function."""

    def test_rejects_non_positive(self):
        """Should reject block sizes below 1."""
        with pytest.raises(ValueError):
            validate_block_size(0)
        assert validate_block_size(3) == 3


class TestPixelateRegion:
    """Tests for pixelate_region function."""

    def test_sixteen_cell_example(self, gradient_image):
        """A 40x40 box with block size 10 should become 16 uniform cells."""
        pixels = np.array(gradient_image)
        original = pixels.copy()

        pixelate_region(pixels, 50, 50, 20, 10)

        for row in range(4):
            for col in range(4):
                x0, y0 = 30 + col * 10, 30 + row * 10
                assert cell_is_uniform(pixels, x0, y0, x0 + 10, y0 + 10)
        # Neighbouring cells differ on a gradient, so there are exactly 16 cells
        cells = {tuple(pixels[30 + r * 10, 30 + c * 10]) for r in range(4) for c in range(4)}
        assert len(cells) == 16
        # Pixels outside the box are untouched
        assert (pixels[:30] == original[:30]).all()
        assert (pixels[70:] == original[70:]).all()
        assert (pixels[:, :30] == original[:, :30]).all()
        assert (pixels[:, 70:] == original[:, 70:]).all()

    def test_cell_value_is_rounded_mean(self):
        """Should write the mean of each channel, halves rounded up."""
        pixels = np.zeros((1, 2, 4), dtype=np.uint8)
        pixels[0, 0] = (10, 0, 255, 0)
        pixels[0, 1] = (11, 1, 254, 255)

        pixelate_region(pixels, 1, 0, 1, 2)

        assert tuple(pixels[0, 0]) == (11, 1, 255, 128)
        assert tuple(pixels[0, 1]) == (11, 1, 255, 128)

    def test_alpha_is_averaged(self):
        """Should average alpha like the colour channels."""
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[..., 3] = [[0, 255], [255, 0]]

        pixelate_region(pixels, 1, 1, 1, 2)

        assert (pixels[..., 3] == 128).all()

    def test_clipped_edge_cells(self):
        """Should clip the box to the surface and shrink the last cells."""
        pixels = np.arange(5 * 7 * 4, dtype=np.uint8).reshape(5, 7, 4)

        pixelate_region(pixels, 0, 0, 7, 4)

        assert cell_is_uniform(pixels, 0, 0, 4, 4)
        assert cell_is_uniform(pixels, 4, 0, 7, 4)
        assert cell_is_uniform(pixels, 0, 4, 4, 5)
        assert cell_is_uniform(pixels, 4, 4, 7, 5)

    def test_idempotent(self, gradient_image):
        """Re-averaging already uniform cells should change nothing."""
        pixels = np.array(gradient_image)
        pixelate_region(pixels, 50, 50, 20, 10)
        once = pixels.copy()

        pixelate_region(pixels, 50, 50, 20, 10)

        assert (pixels == once).all()

    def test_empty_box_is_noop(self, gradient_image):
        """Should do nothing for a zero radius or a box off the surface."""
        pixels = np.array(gradient_image)
        original = pixels.copy()

        pixelate_region(pixels, 50, 50, 0, 10)
        pixelate_region(pixels, 500, 500, 20, 10)

        assert (pixels == original).all()


class TestPixelateStroke:
    """Tests for the PixelateStroke dataclass."""

    def test_dict_format(self):
        """Should serialize points as [x, y] pairs."""
        stroke = PixelateStroke(points=((0.1, 0.2), (0.3, 0.4)), radius=0.05)
        assert stroke.to_dict() == {"points": [[0.1, 0.2], [0.3, 0.4]], "radius": 0.05}
        assert PixelateStroke.from_dict(stroke.to_dict()) == stroke


class TestApplyPixelateStrokes:
    """Tests for apply_pixelate_strokes function."""

    def test_single_point_stroke(self, gradient_image):
        """A centred point with radius 0.2 on 100x100 should pixelate the 40x40 box."""
        stroke = PixelateStroke(points=((0.5, 0.5),), radius=0.2)

        result = np.array(apply_pixelate_strokes(gradient_image, [stroke], 10))

        expected = np.array(gradient_image)
        pixelate_region(expected, 50, 50, 20, 10)
        assert (result == expected).all()

    def test_does_not_modify_input(self, gradient_image):
        """Should leave the base image untouched."""
        before = np.array(gradient_image).copy()
        stroke = PixelateStroke(points=((0.5, 0.5),), radius=0.2)

        apply_pixelate_strokes(gradient_image, [stroke], 10)

        assert (np.array(gradient_image) == before).all()

    def test_in_progress_renders_last(self, gradient_image):
        """Should render an in-progress stroke as if it were committed last."""
        first = PixelateStroke(points=((0.3, 0.3),), radius=0.15)
        second = PixelateStroke(points=((0.4, 0.4),), radius=0.15)

        committed = apply_pixelate_strokes(gradient_image, [first, second], 5)
        preview = apply_pixelate_strokes(gradient_image, [first], 5, in_progress=second)

        assert (np.array(committed) == np.array(preview)).all()

    def test_stroke_order_matters(self, gradient_image):
        """Later strokes should average pixels already changed by earlier ones."""
        first = PixelateStroke(points=((0.3, 0.3),), radius=0.15)
        second = PixelateStroke(points=((0.37, 0.37),), radius=0.15)

        forward = np.array(apply_pixelate_strokes(gradient_image, [first, second], 10))
        backward = np.array(apply_pixelate_strokes(gradient_image, [second, first], 10))

        assert not (forward == backward).all()

    def test_no_strokes_returns_copy(self, gradient_image):
        """Should return an equal copy when there is nothing to render."""
        result = apply_pixelate_strokes(gradient_image, [], 10)
        assert result is not gradient_image
        assert (np.array(result) == np.array(gradient_image)).all()

    def test_rgb_input_gains_alpha(self):
        """Should always return RGBA."""
        image = Image.new("RGB", (10, 10), (1, 2, 3))
        result = apply_pixelate_strokes(image, [PixelateStroke(((0.5, 0.5),), 0.5)], 4)
        assert result.mode == "RGBA"

    def test_rejects_non_image(self):
        """Should raise TypeError for non-image input."""
        with pytest.raises(TypeError):
            apply_pixelate_strokes([[0]], [], 10)
