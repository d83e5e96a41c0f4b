"""Pytest configuration and fixtures."""

import numpy as np
import pytest
from PIL import Image


def random_bits(size: int, density: float = 0.3, seed: int = 0) -> np.ndarray:
    """Random (size, size) binary image with both colors present."""
    rng = np.random.default_rng(seed)
    bits = rng.random((size, size)) < density
    bits[0, 0] = True
    bits[-1, -1] = False
    return bits


def single_pixel_bits(size: int, x: int, y: int) -> np.ndarray:
    """All-background image with one foreground pixel."""
    bits = np.zeros((size, size), dtype=bool)
    bits[y, x] = True
    return bits


@pytest.fixture
def glyph_gray():
    """40x24 white image with a black 20x8 bar."""
    gray = np.full((24, 40), 255, dtype=np.uint8)
    gray[8:16, 10:30] = 0
    return gray


@pytest.fixture
def glyph_path(tmp_path, glyph_gray):
    """Path to the bar image saved as PNG."""
    path = tmp_path / "glyph.png"
    Image.fromarray(glyph_gray).save(path)
    return path
