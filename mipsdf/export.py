"""Quantization and encoding of signed distance fields."""
import logging
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image

from mipsdf.types import DistanceField, ExportError, OUTPUT_TYPES

logger = logging.getLogger(__name__)

# +D maps to 254 rather than 255 so the 8-bit mapping is symmetric around 127
GRAY_MIDPOINT = 127
GRAY_SATURATED = 254

U16_HALF_RANGE = 32767


def _check_saturation(saturation: float) -> None:
    if not np.isfinite(saturation) or saturation <= 0:
        raise ValueError(f"Saturation distance must be positive and finite, got {saturation}")


def sdf_to_grayscale(sdf: DistanceField, saturation: float) -> np.ndarray:
    """
    Map signed distances onto 8-bit gray values.

    Args:
        sdf: Signed distance field
        saturation: Distance magnitude mapped to the extremes

    Returns:
        uint8 array; -saturation -> 0, 0 -> 127, +saturation -> 254
    """
    _check_saturation(saturation)
    clamped = np.clip(np.asarray(sdf, dtype=np.float64), -saturation, saturation)
    gray = np.rint(GRAY_MIDPOINT + clamped / saturation * GRAY_MIDPOINT)
    return gray.astype(np.uint8)


def sdf_to_u16(sdf: DistanceField, saturation: float) -> np.ndarray:
    """
    Map signed distances onto the signed 16-bit range, stored offset as unsigned.

    Args:
        sdf: Signed distance field
        saturation: Distance magnitude mapped to the extremes

    Returns:
        uint16 array; -saturation -> 0, 0 -> 32767, +saturation -> 65534
    """
    _check_saturation(saturation)
    scaled = np.asarray(sdf, dtype=np.float64) / saturation * U16_HALF_RANGE
    scaled = np.clip(scaled, -U16_HALF_RANGE, U16_HALF_RANGE)
    return (np.trunc(scaled).astype(np.int32) + U16_HALF_RANGE).astype(np.uint16)


def encode(sdf: DistanceField, output_type: str, saturation: float) -> bytes:
    """
    Encode a distance field in one of the raw formats.

    Values are little-endian, row-major.

    Args:
        sdf: Signed distance field
        output_type: 'u16', 'f32' or 'f64'
        saturation: Saturation distance (used by 'u16')

    Returns:
        Raw bytes

    Raises:
        ExportError: If the format is not a raw format
    """
    if output_type == "u16":
        return sdf_to_u16(sdf, saturation).astype("<u2").tobytes()
    if output_type == "f32":
        return np.asarray(sdf).astype("<f4").tobytes()
    if output_type == "f64":
        return np.asarray(sdf).astype("<f8").tobytes()
    raise ExportError(f"Unknown raw output format: {output_type}")


def count_unsaturated_border_pixels(gray: np.ndarray) -> int:
    """
    Count border samples of an 8-bit SDF below the saturated value.

    Each edge is counted separately, so corners count twice. A non-zero
    count means the shape reaches closer to the border than the saturation
    distance.
    """
    count = 0
    count += int(np.sum(gray[0, :] < GRAY_SATURATED))
    count += int(np.sum(gray[-1, :] < GRAY_SATURATED))
    count += int(np.sum(gray[:, 0] < GRAY_SATURATED))
    count += int(np.sum(gray[:, -1] < GRAY_SATURATED))
    return count


def save_sdf(
    sdf: DistanceField,
    output_path: Union[str, Path],
    output_type: str,
    saturation: float
) -> Path:
    """
    Write a distance field to disk.

    Args:
        sdf: Signed distance field
        output_path: Destination file
        output_type: One of 'png', 'png16', 'u16', 'f32', 'f64'
        saturation: Saturation distance for the quantized formats

    Returns:
        Path written

    Raises:
        ExportError: If the format is unknown or the file cannot be written
    """
    if output_type not in OUTPUT_TYPES:
        raise ExportError(f"Unknown output format: {output_type}")

    output_path = Path(output_path)
    h, w = np.shape(sdf)

    try:
        if output_type == "png":
            gray = sdf_to_grayscale(sdf, saturation)
            logger.info(f"Unsaturated border pixels: {count_unsaturated_border_pixels(gray)}")
            Image.fromarray(gray).save(output_path, format="PNG")
        elif output_type == "png16":
            Image.fromarray(sdf_to_u16(sdf, saturation)).save(output_path, format="PNG")
        else:
            output_path.write_bytes(encode(sdf, output_type, saturation))
    except OSError as e:
        raise ExportError(f"Failed to write {output_path}: {e}") from e

    logger.info(
        f"Saved {w}x{h} signed distance field in {output_type} format as '{output_path}'"
    )
    return output_path
