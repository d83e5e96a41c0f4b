"""Core types for signed distance field generation."""
from dataclasses import dataclass
from typing import Optional
import numpy as np

# Type aliases
GrayImage = np.ndarray
BinaryImage = np.ndarray
DistanceField = np.ndarray

# Pyramid cell colors
BACKGROUND = 0
FOREGROUND = 1
MIXED = 2

OUTPUT_TYPES = ("png", "png16", "u16", "f32", "f64")


@dataclass
class SDFConfig:
    """Configuration for the SDF pipeline."""
    # Output grid side, power of two (default: input size / 4)
    sdf_size: Optional[int] = None

    # Saturation distance in input pixels (default: input size / 4)
    saturation: Optional[float] = None

    # Encoding
    output_type: str = "png"

    # Gray values below this are foreground
    threshold: int = 128

    # Diagnostics
    save_mipmaps: Optional[str] = None

    # Search (workers = -1: one per CPU)
    workers: int = 1
    prune: bool = True

    def __post_init__(self):
        if self.output_type not in OUTPUT_TYPES:
            raise ValueError(
                f"output_type must be one of {', '.join(OUTPUT_TYPES)}, got {self.output_type!r}"
            )
        if self.workers < 1 and self.workers != -1:
            raise ValueError(f"workers must be >= 1 or -1 (auto), got {self.workers}")
        if not 0 < self.threshold <= 255:
            raise ValueError(f"threshold must be in 1..255, got {self.threshold}")

    def resolve_sdf_size(self, input_size: int) -> int:
        if self.sdf_size is not None:
            return self.sdf_size
        return max(input_size // 4, 1)

    def resolve_saturation(self, input_size: int) -> float:
        if self.saturation is not None:
            return float(self.saturation)
        return max(input_size / 4, 1.0)


@dataclass
class IngestResult:
    """Result from raster image ingestion."""
    bits: BinaryImage          # (S, S) bool, True = foreground
    original_path: str
    width: int                 # before padding
    height: int
    size: int                  # padded canvas side

    @property
    def padded(self) -> bool:
        return self.width != self.size or self.height != self.size


class SDFError(Exception):
    """Base exception for SDF generation errors."""
    pass


class ImageLoadError(SDFError):
    """Exception raised when an input image cannot be read."""
    pass


class ExportError(SDFError):
    """Exception raised while encoding or writing an SDF."""
    pass
