"""Pipeline orchestrator: image file in, encoded signed distance field out."""
import logging
from pathlib import Path
from typing import Optional, Union

from mipsdf.export import save_sdf
from mipsdf.mipmap import Pyramid
from mipsdf.raster_ingest import ingest, ingest_from_array
from mipsdf.sdf_algorithm import calculate_sdf, validate_sdf_request
from mipsdf.types import DistanceField, IngestResult, SDFConfig, SDFError

logger = logging.getLogger(__name__)


class SDFPipeline:
    """Loads, pads and thresholds an image, then searches and exports its SDF."""

    def __init__(self, config: Optional[SDFConfig] = None):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or SDFConfig()
        self.ingest_result: Optional[IngestResult] = None
        self.pyramid: Optional[Pyramid] = None
        self.sdf_size: Optional[int] = None
        self.saturation: Optional[float] = None

    def process(
        self,
        image_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> DistanceField:
        """Process an image file.

        Args:
            image_path: Path to input image
            output_path: Optional path to write the encoded SDF

        Returns:
            Signed distance field

        Raises:
            FileNotFoundError: If input file doesn't exist
            SDFError: If loading or export fails
            ValueError: If the requested output size or saturation is invalid
        """
        result = ingest(image_path, self.config.threshold)
        return self._run(result, output_path)

    def process_array(self, image, output_path: Optional[Union[str, Path]] = None) -> DistanceField:
        """Process a grayscale array or boolean mask (True = foreground)."""
        result = ingest_from_array(image, self.config.threshold)
        return self._run(result, output_path)

    def _run(
        self,
        result: IngestResult,
        output_path: Optional[Union[str, Path]]
    ) -> DistanceField:
        self.ingest_result = result

        self.sdf_size = self.config.resolve_sdf_size(result.size)
        self.saturation = self.config.resolve_saturation(result.size)
        validate_sdf_request(result.size, self.sdf_size, self.saturation)

        logger.info("Calculating mipmap")
        self.pyramid = Pyramid.build(result.bits)
        logger.info(f"Mipmap has {self.pyramid.levels_count()} levels")

        if self.config.save_mipmaps:
            self.pyramid.save_levels(self.config.save_mipmaps)

        logger.info(
            f"Calculating signed distance field of size {self.sdf_size} "
            f"with saturation distance {self.saturation}"
        )

        sdf = calculate_sdf(
            self.pyramid,
            self.sdf_size,
            self.saturation,
            prune=self.config.prune,
            workers=self.config.workers,
        )

        if output_path:
            logger.info("Doing a final color space conversion")
            save_sdf(sdf, output_path, self.config.output_type, self.saturation)

        return sdf


def generate_sdf(
    image_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[SDFConfig] = None
) -> DistanceField:
    """Convenience wrapper around SDFPipeline.process."""
    try:
        return SDFPipeline(config).process(image_path, output_path)
    except (FileNotFoundError, SDFError, ValueError):
        raise
    except Exception as e:
        raise SDFError(f"SDF generation failed: {e}") from e
