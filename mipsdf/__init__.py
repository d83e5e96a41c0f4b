"""mipsdf: signed distance fields from binary images via mipmap-accelerated search."""
from mipsdf.types import (
    SDFConfig,
    IngestResult,
    SDFError,
    ImageLoadError,
    ExportError,
    BACKGROUND,
    FOREGROUND,
    MIXED,
)
from mipsdf.mipmap import Pyramid
from mipsdf.sdf_algorithm import calculate_sdf
from mipsdf.pipeline import SDFPipeline

__version__ = "0.1.0"
__all__ = [
    "SDFConfig",
    "IngestResult",
    "SDFError",
    "ImageLoadError",
    "ExportError",
    "BACKGROUND",
    "FOREGROUND",
    "MIXED",
    "Pyramid",
    "calculate_sdf",
    "SDFPipeline",
]
