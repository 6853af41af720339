"""
Unit tests for the chroma_key module.

Tests background removal with feathering, colour sampling and
tolerance conversion.
"""

import pytest
from PIL import Image

from PX_Libs.ImageEditingLib.chroma_key import (
    apply_chroma_key,
    color_to_hex,
    normalize_tolerance,
    sample_color,
)


def strip(*colors):
    """Build a 1-pixel-high RGBA strip from RGB colours."""
    image = Image.new("RGBA", (len(colors), 1))
    for x, color in enumerate(colors):
        image.putpixel((x, 0), tuple(color) + (255,))
    return image


class TestApplyChromaKey:
    """Tests for apply_chroma_key function."""

    def test_inside_feathered_and_outside(self):
        """Should clear near pixels, feather the band and keep far ones."""
        # tolerance 0.1 -> 25 on the 0-255 scale
        image = strip((10, 10, 0), (20, 10, 10), (30, 30, 0))

        result = apply_chroma_key(image, (0, 0, 0), 0.1)

        assert result.getpixel((0, 0))[3] == 0
        assert result.getpixel((1, 0))[3] == 153
        assert result.getpixel((2, 0))[3] == 255

    def test_rgb_channels_untouched(self):
        """Should only change alpha."""
        image = strip((10, 10, 0))
        assert apply_chroma_key(image, (0, 0, 0), 0.1).getpixel((0, 0))[:3] == (10, 10, 0)

    def test_zero_tolerance_exact_match(self):
        """Should clear only exact matches when tolerance is zero."""
        image = strip((0, 0, 0), (1, 0, 0))

        result = apply_chroma_key(image, (0, 0, 0), 0.0)

        assert result.getpixel((0, 0))[3] == 0
        assert result.getpixel((1, 0))[3] == 255

    def test_does_not_modify_input(self):
        """Should return a new image."""
        image = strip((0, 0, 0))
        apply_chroma_key(image, (0, 0, 0), 0.5)
        assert image.getpixel((0, 0))[3] == 255

    def test_invalid_arguments(self):
        """Should reject bad colours and tolerances."""
        image = strip((0, 0, 0))
        with pytest.raises(ValueError):
            apply_chroma_key(image, (0, 0), 0.1)
        with pytest.raises(ValueError):
            apply_chroma_key(image, (0, 0, 0), 1.5)


class TestSampleColor:
    """Tests for sample_color function."""

    def test_inside(self, quadrant_image):
        """Should return the RGB colour under the point."""
        assert sample_color(quadrant_image, (0.0, 0.0)) == (255, 255, 255)
        assert sample_color(quadrant_image, (0.75, 0.5)) == (0, 0, 255)

    def test_outside(self, quadrant_image):
        """Should return None off the surface."""
        assert sample_color(quadrant_image, (1.0, 0.5)) is None
        assert sample_color(quadrant_image, (-0.2, 0.5)) is None


class TestHelpers:
    """Tests for color_to_hex and normalize_tolerance functions."""

    def test_color_to_hex(self):
        """Should format lowercase #rrggbb."""
        assert color_to_hex((255, 0, 171)) == "#ff00ab"

    def test_normalize_tolerance(self):
        """Should map 0-100 to 0-1 and clamp."""
        assert normalize_tolerance(30) == pytest.approx(0.3)
        assert normalize_tolerance(250) == 1.0
        assert normalize_tolerance(-5) == 0.0
