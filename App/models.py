"""Data models and constants for the site image processor."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import assert_never

# Configuration file path
CONFIG_FILE = Path.home() / ".site_images_config.json"

# Suffix appended to the source stem for every generated artifact
PROCESSED_SUFFIX = "_processed"


class ConversionMode(Enum):
    """How the color representation of an asset is transformed.

    AIDEV-NOTE: NONE disables output generation entirely; it is not the
    same as COLOR, which still resizes and re-encodes.
    """

    NONE = "none"
    COLOR = "color"  # Pass-through, resize only
    GREYSCALE = "greyscale"  # Single-channel luminance
    DITHER = "dither"  # Delegated to a DitherAlgorithm


class SaveFormat(Enum):
    """Output encodings with their fixed compression quality."""

    PNG = "png"
    JPEG_HIGH = "jpeg_high"
    JPEG_MEDIUM = "jpeg_medium"
    JPEG_LOW = "jpeg_low"

    @property
    def encoder(self) -> str:
        """Pillow format name used to write this format."""
        match self:
            case SaveFormat.PNG:
                return "PNG"
            case SaveFormat.JPEG_HIGH | SaveFormat.JPEG_MEDIUM | SaveFormat.JPEG_LOW:
                return "JPEG"
            case _:
                assert_never(self)

    @property
    def extension(self) -> str:
        match self:
            case SaveFormat.PNG:
                return ".png"
            case SaveFormat.JPEG_HIGH | SaveFormat.JPEG_MEDIUM | SaveFormat.JPEG_LOW:
                return ".jpeg"
            case _:
                assert_never(self)

    @property
    def compression_quality(self) -> float:
        """Compression quality in the 0.0-1.0 range.

        AIDEV-NOTE: PNG carries 0.0 but is always lossless, so the value
        never reaches the encoder.
        """
        match self:
            case SaveFormat.PNG:
                return 0.0
            case SaveFormat.JPEG_HIGH:
                return 0.85
            case SaveFormat.JPEG_MEDIUM:
                return 0.65
            case SaveFormat.JPEG_LOW:
                return 0.50
            case _:
                assert_never(self)

    @property
    def is_lossless(self) -> bool:
        return self is SaveFormat.PNG


def known_extensions() -> "list[str]":
    """All extensions an artifact may be written with, without duplicates."""
    return sorted({save_format.extension for save_format in SaveFormat})


@dataclass(frozen=True)
class ImageConversionConfig:
    """Settings for one run of the image pipeline.

    Passed explicitly into every pipeline call and never mutated.
    """

    conversion_mode: ConversionMode = ConversionMode.COLOR
    save_format: SaveFormat = SaveFormat.JPEG_HIGH

    # Dithering
    dither_algorithm: str = "floyd_steinberg"  # Name in DITHER_ALGORITHMS
    threshold: int = 128  # 0-255

    # Images wider than this are scaled down
    max_image_width: int = 1200  # px

    def __post_init__(self):
        if not isinstance(self.conversion_mode, ConversionMode):
            raise ValueError(f"Invalid conversion mode: {self.conversion_mode!r}")
        if not isinstance(self.save_format, SaveFormat):
            raise ValueError(f"Invalid save format: {self.save_format!r}")
        if not 0 <= self.threshold <= 255:
            raise ValueError(f"Threshold must be in 0-255, got {self.threshold}")
        if self.max_image_width <= 0:
            raise ValueError(
                f"Max image width must be positive, got {self.max_image_width}"
            )
