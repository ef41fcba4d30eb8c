"""Utility functions for sizing images and handling packed colors.

AIDEV-NOTE: Colors cross the PixelSurface boundary as packed 0xAARRGGBB
integers. Helpers here are the only place that knows the bit layout.
"""

from PIL import Image

OPAQUE_BLACK = 0xFF000000
OPAQUE_WHITE = 0xFFFFFFFF


def target_size(width: int, height: int, max_width: int) -> "tuple[int, int]":
    """Calculate the downscaled size of an image wider than max_width.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_width: Configured maximum width, reused as the height bound
            for portrait images

    Returns:
        Tuple of (target_width, target_height)

    AIDEV-NOTE: Landscape and square images round the height up, portrait
    images round the width half-up. Integer arithmetic keeps both exact.
    """
    if height <= width:
        # square or landscape-oriented image
        target_width = max_width
        target_height = -(-target_width * height // width)
    else:
        # portrait image
        target_height = max_width
        target_width = (2 * target_height * width + height) // (2 * height)
    return max(1, target_width), max(1, target_height)


def has_alpha(image: Image.Image) -> bool:
    """Check whether an image carries transparency."""
    return "A" in image.mode or image.info.get("transparency") is not None


def pack_argb(r: int, g: int, b: int, a: int = 255) -> int:
    """Pack channel values (0-255 each) into a 0xAARRGGBB integer."""
    return (a & 0xFF) << 24 | (r & 0xFF) << 16 | (g & 0xFF) << 8 | (b & 0xFF)


def unpack_argb(argb: int) -> "tuple[int, int, int, int]":
    """Split a packed color into (r, g, b, a)."""
    return (argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF, (argb >> 24) & 0xFF


def luminance(argb: int) -> int:
    """Get ITU-R 601-2 luma (0-255) of a packed color."""
    r, g, b, _ = unpack_argb(argb)
    return (r * 299 + g * 587 + b * 114 + 500) // 1000
