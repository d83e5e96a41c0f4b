"""Raster image ingestion: grayscale loading, canvas padding and thresholding."""
import logging
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image
from PIL import ImageOps

from mipsdf.types import BinaryImage, GrayImage, IngestResult, ImageLoadError

logger = logging.getLogger(__name__)

# Grayscale modes Pillow uses for 16-bit images
SIXTEEN_BIT_MODES = ('I;16', 'I;16B', 'I;16L', 'I;16N', 'I')


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def load_grayscale(path: Union[str, Path]) -> GrayImage:
    """
    Load an image file as 8-bit grayscale.

    Transparent pixels are composited on white, so they end up
    as background after thresholding.

    Args:
        path: Path to image file

    Returns:
        (H, W) uint8 array

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                img = img.convert('RGBA')
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[3])
                img = background

            if img.mode in SIXTEEN_BIT_MODES:
                # convert('L') clips 16-bit values instead of scaling them
                wide = np.clip(np.array(img, dtype=np.int64), 0, 65535)
                return (wide >> 8).astype(np.uint8)

            if img.mode != 'L':
                img = img.convert('L')

            return np.array(img, dtype=np.uint8)

    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e


def pad_to_square(gray: GrayImage) -> GrayImage:
    """
    Place an image centered on a white power-of-two square canvas.

    Images that are already square with a power-of-two side are
    returned unchanged.

    Args:
        gray: (H, W) uint8 array

    Returns:
        (S, S) uint8 array, S = next power of two >= max(H, W)
    """
    if gray.ndim != 2:
        raise ValueError(f"Expected 2D grayscale array, got {gray.ndim}D")

    h, w = gray.shape
    if h == w and is_power_of_two(w):
        return gray

    size = next_power_of_two(max(h, w))
    logger.info(f"Placing input in {size}x{size} canvas")

    offset_x = (size - w) // 2
    offset_y = (size - h) // 2

    canvas = np.full((size, size), 255, dtype=np.uint8)
    canvas[offset_y:offset_y + h, offset_x:offset_x + w] = gray
    return canvas


def binarize(gray: GrayImage, threshold: int = 128) -> BinaryImage:
    """
    Threshold a grayscale image.

    Dark pixels (value < threshold) are foreground, everything at or
    above the threshold is background.

    Args:
        gray: uint8 array
        threshold: Midpoint gray value

    Returns:
        Boolean array, True = foreground
    """
    return np.asarray(gray) < threshold


def ingest(path: Union[str, Path], threshold: int = 128) -> IngestResult:
    """
    Ingest an image file as a square power-of-two binary image.

    Args:
        path: Path to image file
        threshold: Foreground threshold passed to binarize()

    Returns:
        IngestResult with the padded binary image
    """
    logger.info(f"Loading input image '{path}'")
    gray = load_grayscale(path)
    height, width = gray.shape
    logger.info(f"Image is of size {width}x{height} pixels")

    padded = pad_to_square(gray)

    logger.info("Converting image to binary")
    bits = binarize(padded, threshold)

    return IngestResult(
        bits=bits,
        original_path=str(path),
        width=width,
        height=height,
        size=bits.shape[0],
    )


def ingest_from_array(image: np.ndarray, threshold: int = 128, path: str = "") -> IngestResult:
    """
    Create IngestResult from a numpy array.

    Args:
        image: Grayscale (H, W) array, or boolean mask with True = foreground
        threshold: Foreground threshold for grayscale input
        path: Optional path for reference

    Returns:
        IngestResult
    """
    image = np.asarray(image)
    if image.ndim != 2:
        raise ImageLoadError(f"Expected 2D array, got {image.ndim}D")

    height, width = image.shape
    if image.dtype == bool:
        # Foreground is dark
        gray = np.where(image, 0, 255).astype(np.uint8)
    else:
        gray = np.clip(image, 0, 255).astype(np.uint8)

    bits = binarize(pad_to_square(gray), threshold)

    return IngestResult(
        bits=bits,
        original_path=path,
        width=width,
        height=height,
        size=bits.shape[0],
    )
