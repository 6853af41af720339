"""
Pytest configuration and shared fixtures for Pixelargon tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def data_dir(tmp_path):
    """
    Provide a temporary application data directory.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a (not yet created) data directory
    """
    return tmp_path / "data"


@pytest.fixture
def gradient_image():
    """
    Provide a 100x100 RGBA image whose pixels are all different.

    Returns:
        PIL Image in RGBA mode
    """
    ys, xs = np.mgrid[0:100, 0:100]
    pixels = np.zeros((100, 100, 4), dtype=np.uint8)
    pixels[..., 0] = (xs * 2).astype(np.uint8)
    pixels[..., 1] = (ys * 2).astype(np.uint8)
    pixels[..., 2] = ((xs + ys) % 256).astype(np.uint8)
    pixels[..., 3] = 255
    return Image.fromarray(pixels, "RGBA")


@pytest.fixture
def quadrant_image():
    """
    Provide a 40x20 RGBA image split into red (left) and blue (right) halves,
    with the top-left pixel white so orientation changes are detectable.
    """
    image = Image.new("RGBA", (40, 20), (255, 0, 0, 255))
    image.paste((0, 0, 255, 255), (20, 0, 40, 20))
    image.putpixel((0, 0), (255, 255, 255, 255))
    return image


@pytest.fixture
def sample_png(tmp_path, quadrant_image):
    """
    Write the quadrant image to a PNG file.

    Returns:
        Path to the PNG file
    """
    path = tmp_path / "sample.png"
    quadrant_image.save(path, format="PNG")
    return path

