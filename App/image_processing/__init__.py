"""Image processing pipeline for site-ready image assets.

AIDEV-NOTE: This package turns a source image into a processed artifact
next to it. Organized into modular components:
- processor: ImageProcessor orchestrator (decode, resize, conversion)
- encoder: Format/quality table, output naming and stale artifact cleanup
- surface: PixelSurface capability and its Pillow adapter
- dithering: Dither algorithms written against PixelSurface
- utils: Resize math and packed color helpers
"""

from .dithering import DITHER_ALGORITHMS, DitherAlgorithm, get_dither_algorithm
from .encoder import ImageEncodeError, processed_filename
from .processor import ImageProcessor, convert_image
from .surface import ImageSurface, PixelSurface

__all__ = [
    "DITHER_ALGORITHMS",
    "DitherAlgorithm",
    "ImageEncodeError",
    "ImageProcessor",
    "ImageSurface",
    "PixelSurface",
    "convert_image",
    "get_dither_algorithm",
    "processed_filename",
]
