"""Pixel access capability used by dithering algorithms.

AIDEV-NOTE: PixelSurface is the only interface a dither algorithm may
depend on. It knows nothing about files, encoders or storage layout.
Width and height are read-only: surfaces are never resized through here.
"""

from typing import Protocol

from PIL import Image

from .utils import luminance, pack_argb, unpack_argb

SURFACE_MODES = ("L", "RGB", "RGBA")


class PixelSurface(Protocol):
    """Width, height and per-pixel access to packed 0xAARRGGBB colors."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def get_pixel(self, x: int, y: int) -> int: ...

    def set_pixel(self, x: int, y: int, color: int) -> None: ...


class ImageSurface:
    """Adapts a Pillow image to the PixelSurface capability.

    Reads and writes go straight to the backing image. Out-of-range
    coordinates raise whatever Pillow raises (IndexError).
    """

    def __init__(self, image: Image.Image):
        if image.mode not in SURFACE_MODES:
            raise ValueError(
                f"Unsupported surface mode {image.mode!r}, "
                f"expected one of {', '.join(SURFACE_MODES)}"
            )
        self.image = image
        self._pixels = image.load()

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def get_pixel(self, x: int, y: int) -> int:
        value = self._pixels[x, y]
        mode = self.image.mode
        if mode == "L":
            return pack_argb(value, value, value)
        if mode == "RGB":
            r, g, b = value
            return pack_argb(r, g, b)
        r, g, b, a = value
        return pack_argb(r, g, b, a)

    def set_pixel(self, x: int, y: int, color: int) -> None:
        mode = self.image.mode
        if mode == "L":
            self._pixels[x, y] = luminance(color)
            return
        r, g, b, a = unpack_argb(color)
        if mode == "RGB":
            self._pixels[x, y] = (r, g, b)
        else:
            self._pixels[x, y] = (r, g, b, a)
