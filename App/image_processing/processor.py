"""Main image processor orchestrating the complete pipeline.

AIDEV-NOTE: One call runs decode -> conditional resize -> conversion ->
encode -> stale artifact cleanup, synchronously. Missing and undecodable
sources are skipped (None), encode failures raise ImageEncodeError.
"""

import logging
from pathlib import Path
from typing import assert_never

from PIL import Image

from models import ConversionMode, ImageConversionConfig

from .dithering import DitherAlgorithm, get_dither_algorithm
from .encoder import processed_filename, save_processed_image
from .surface import ImageSurface
from .utils import has_alpha, target_size

logger = logging.getLogger(__name__)

DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def normalize_mode(image: Image.Image) -> Image.Image:
    """Return a copy of image in L, RGB or RGBA mode.

    Images with an alpha channel or a transparency key become RGBA.
    """
    if has_alpha(image):
        return image.convert("RGBA")
    if image.mode in ("L", "RGB"):
        return image.copy()
    return image.convert("RGB")


def resize_to_width(image: Image.Image, max_width: int) -> Image.Image:
    """Scale an image down so it fits within max_width.

    Args:
        image: Decoded source image
        max_width: Maximum width, also the height bound for portrait images

    Returns:
        New RGBA image if the source has alpha, otherwise RGB
    """
    width, height = target_size(image.width, image.height, max_width)
    mode = "RGBA" if has_alpha(image) else "RGB"
    if image.mode != mode:
        image = image.convert(mode)
    return image.resize((width, height), Image.Resampling.BILINEAR)


def to_greyscale(image: Image.Image) -> Image.Image:
    """Draw an image onto a new single-channel surface of the same size."""
    greyscale = Image.new("L", image.size)
    mask = image.getchannel("A") if image.mode == "RGBA" else None
    greyscale.paste(image.convert("L"), (0, 0), mask)
    return greyscale


def dither(
    image: Image.Image, algorithm: DitherAlgorithm, threshold: int
) -> Image.Image:
    """Run a dither algorithm from image into a new single-channel image."""
    destination = Image.new("L", image.size)
    algorithm.process(ImageSurface(image), ImageSurface(destination), threshold)
    return destination


class ImageProcessor:
    """Converts source images into processed site assets."""

    def __init__(
        self,
        config: ImageConversionConfig | None = None,
        dither_algorithm: DitherAlgorithm | None = None,
    ):
        self.config = config or ImageConversionConfig()
        self._dither_algorithm = dither_algorithm

    @property
    def dither_algorithm(self) -> DitherAlgorithm:
        """Injected algorithm, or the bundled one named in the config."""
        if self._dither_algorithm is None:
            self._dither_algorithm = get_dither_algorithm(
                self.config.dither_algorithm
            )
        return self._dither_algorithm

    def load_image(self, file_path: str | Path) -> Image.Image | None:
        """Load and normalise an image file.

        Args:
            file_path: Path to image file (PNG, JPG, etc.)

        Returns:
            Image in L, RGB or RGBA mode, or None if the file is missing
            or cannot be decoded
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            logger.debug("Can't find image at %s - skipping conversion", file_path)
            return None

        try:
            with Image.open(file_path) as image:
                image.load()
                return normalize_mode(image)
        except DECODE_ERRORS as e:
            logger.warning("Failed to decode image %s: %s", file_path, e)
            return None

    def resized_source(self, save_dir: str | Path, source: str) -> Image.Image | None:
        """Load source from save_dir, scaled down if wider than allowed."""
        image = self.load_image(Path(save_dir) / source)
        if image is None:
            return None

        max_width = self.config.max_image_width
        if image.width <= max_width:
            return image

        resized = resize_to_width(image, max_width)
        logger.debug(
            "Resized %s from %dx%d to %dx%d",
            source,
            image.width,
            image.height,
            resized.width,
            resized.height,
        )
        return resized

    def convert(self, image: Image.Image) -> Image.Image | None:
        """Apply the configured conversion mode to a resized image."""
        mode = self.config.conversion_mode
        match mode:
            case ConversionMode.NONE:
                return None
            case ConversionMode.COLOR:
                return image
            case ConversionMode.GREYSCALE:
                return to_greyscale(image)
            case ConversionMode.DITHER:
                return dither(image, self.dither_algorithm, self.config.threshold)
            case _:
                assert_never(mode)

    def convert_image(self, save_dir: str | Path, source: str) -> str | None:
        """Execute the complete pipeline for one source image.

        Args:
            save_dir: Directory holding the source; the artifact is
                written next to it
            source: Source filename relative to save_dir

        Returns:
            Artifact filename relative to save_dir, or None if no
            artifact was produced

        Raises:
            ImageEncodeError: If the artifact cannot be written
        """
        if self.config.conversion_mode is ConversionMode.NONE:
            return None

        logger.debug(
            "Converting %s (%s)", source, self.config.conversion_mode.value
        )
        resized = self.resized_source(save_dir, source)
        if resized is None:
            return None

        result = self.convert(resized)
        if result is None:
            return None

        output_name = processed_filename(source, self.config.save_format)
        save_processed_image(Path(save_dir) / output_name, result, self.config.save_format)
        return output_name


def convert_image(
    save_dir: str | Path,
    source: str,
    config: ImageConversionConfig,
    dither_algorithm: DitherAlgorithm | None = None,
) -> str | None:
    """Convert a single image with an explicit configuration."""
    return ImageProcessor(config, dither_algorithm).convert_image(save_dir, source)
