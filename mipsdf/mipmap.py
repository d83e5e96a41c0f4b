"""Multi-resolution pyramid (mipmap) over a binary image.

Level 0 holds one cell per input pixel. Every cell of level k+1 summarizes
the 2x2 block beneath it at level k as BACKGROUND, FOREGROUND or MIXED.
A homogeneous cell guarantees that every descendant shares its color.
"""
import logging
from pathlib import Path
from typing import List, Union
import numpy as np
from PIL import Image

from mipsdf.raster_ingest import is_power_of_two
from mipsdf.types import BinaryImage, BACKGROUND, FOREGROUND, MIXED

logger = logging.getLogger(__name__)

# Gray values used when rendering levels for inspection
LEVEL_GRAY = {FOREGROUND: 0, MIXED: 127, BACKGROUND: 255}


def summarize_blocks(level: np.ndarray) -> np.ndarray:
    """
    Compress each 2x2 block of a level into one summary cell.

    Args:
        level: (N, N) uint8 array of cell colors, N even

    Returns:
        (N/2, N/2) uint8 array; the shared color where all four cells
        agree on a homogeneous color, MIXED otherwise
    """
    a = level[0::2, 0::2]
    b = level[0::2, 1::2]
    c = level[1::2, 0::2]
    d = level[1::2, 1::2]

    homogeneous = (a == b) & (a == c) & (a == d) & (a != MIXED)
    return np.where(homogeneous, a, MIXED).astype(np.uint8)


class Pyramid:
    """Immutable stack of progressively coarser summaries of a binary image."""

    def __init__(self, levels: List[np.ndarray]):
        self._levels = levels
        for level in self._levels:
            level.flags.writeable = False

    @classmethod
    def build(cls, bits: BinaryImage) -> "Pyramid":
        """
        Build all levels bottom-up.

        Args:
            bits: (W, W) boolean array, True = foreground, W a power of two

        Returns:
            Pyramid with log2(W) + 1 levels

        Raises:
            ValueError: If the image is not square with a power-of-two side
        """
        bits = np.asarray(bits)
        if bits.ndim != 2:
            raise ValueError(f"Pyramid needs a 2D image, got {bits.ndim}D")

        h, w = bits.shape
        if h != w:
            raise ValueError(f"Pyramid needs a square image, got {w}x{h}")
        if not is_power_of_two(w):
            raise ValueError(f"Pyramid needs a power-of-two side, got {w}")

        base = np.where(bits.astype(bool), FOREGROUND, BACKGROUND).astype(np.uint8)
        levels = [base]
        while levels[-1].shape[0] > 1:
            levels.append(summarize_blocks(levels[-1]))

        logger.debug(f"Built pyramid over {w}x{w} image with {len(levels)} levels")
        return cls(levels)

    @property
    def size(self) -> int:
        """Side length of the finest level."""
        return self._levels[0].shape[0]

    @property
    def max_level(self) -> int:
        return len(self._levels) - 1

    def levels_count(self) -> int:
        return len(self._levels)

    def level(self, k: int) -> np.ndarray:
        return self._levels[k]

    def cell(self, k: int, x: int, y: int) -> int:
        return int(self._levels[k][y, x])

    def color_at(self, x: int, y: int) -> int:
        """Color of a finest-level pixel."""
        return int(self._levels[0][y, x])

    def level_images(self) -> List[np.ndarray]:
        """Render every level as a uint8 grayscale image."""
        lut = np.zeros(MIXED + 1, dtype=np.uint8)
        for color, gray in LEVEL_GRAY.items():
            lut[color] = gray
        return [lut[level] for level in self._levels]

    def save_levels(self, basename: Union[str, Path]) -> List[Path]:
        """
        Write each level to BASENAME{k}.png.

        Args:
            basename: Path prefix; the level index and suffix are appended

        Returns:
            Paths written, coarsest last
        """
        Path(f"{basename}").parent.mkdir(parents=True, exist_ok=True)
        paths = []
        for k, image in enumerate(self.level_images()):
            path = Path(f"{basename}{k}.png")
            Image.fromarray(image).save(path)
            paths.append(path)
        logger.info(f"Saved mipmaps to {basename}[0..{self.levels_count()}].png")
        return paths
