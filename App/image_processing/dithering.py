"""Dithering algorithms written against the PixelSurface capability.

AIDEV-NOTE: Algorithms only see PixelSurface objects, never Pillow images.
Every algorithm reads luminance from the source and writes opaque black
or white into the destination, using the threshold as the cut-off.
"""

from typing import Protocol

import numpy as np

from .surface import PixelSurface
from .utils import OPAQUE_BLACK, OPAQUE_WHITE, luminance


class DitherAlgorithm(Protocol):
    """Pluggable transform from a source surface into a destination."""

    def process(
        self, source: PixelSurface, destination: PixelSurface, threshold: int
    ) -> None: ...


def read_luminance(surface: PixelSurface) -> "list[list[float]]":
    """Read a surface into rows of luminance values (0-255)."""
    return [
        [float(luminance(surface.get_pixel(x, y))) for x in range(surface.width)]
        for y in range(surface.height)
    ]


class ThresholdDither:
    """Plain threshold: darker than the cut-off becomes black."""

    name = "threshold"

    def process(
        self, source: PixelSurface, destination: PixelSurface, threshold: int
    ) -> None:
        for y in range(source.height):
            for x in range(source.width):
                grey = luminance(source.get_pixel(x, y))
                destination.set_pixel(
                    x, y, OPAQUE_BLACK if grey < threshold else OPAQUE_WHITE
                )


class ErrorDiffusionDither:
    """Error diffusion with a configurable kernel.

    Args:
        name: Registry name
        kernel: List of (dx, dy, weight) offsets relative to the current
            pixel; dy is never negative and dx is positive when dy is 0
        divisor: Sum the weights are divided by
    """

    def __init__(self, name: str, kernel: "list[tuple[int, int, int]]", divisor: int):
        self.name = name
        self.kernel = kernel
        self.divisor = divisor

    def process(
        self, source: PixelSurface, destination: PixelSurface, threshold: int
    ) -> None:
        width, height = source.width, source.height
        rows = read_luminance(source)

        for y in range(height):
            row = rows[y]
            for x in range(width):
                old = row[x]
                if old < threshold:
                    new, color = 0.0, OPAQUE_BLACK
                else:
                    new, color = 255.0, OPAQUE_WHITE
                destination.set_pixel(x, y, color)

                error = old - new
                if error == 0:
                    continue
                for dx, dy, weight in self.kernel:
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and ny < height:
                        rows[ny][nx] += error * weight / self.divisor


def bayer_matrix(order: int) -> np.ndarray:
    """Build a normalised Bayer index matrix of size order x order.

    Args:
        order: Matrix size, a power of two (2, 4, 8, ...)

    Returns:
        Float array with values in [0, 1)
    """
    if order < 2 or order & (order - 1):
        raise ValueError(f"Bayer order must be a power of two >= 2, got {order}")

    matrix = np.array([[0, 2], [3, 1]], dtype=np.int64)
    while matrix.shape[0] < order:
        matrix = np.block(
            [
                [4 * matrix, 4 * matrix + 2],
                [4 * matrix + 3, 4 * matrix + 1],
            ]
        )
    return matrix.astype(np.float64) / (order * order)


class BayerDither:
    """Ordered dithering with a Bayer matrix.

    The cut-off for each pixel is the threshold shifted by the matrix
    entry, spread across +/- 128 around the threshold.
    """

    def __init__(self, order: int = 4):
        self.name = f"bayer_{order}"
        self.order = order
        self.offsets = (bayer_matrix(order) - 0.5) * 255.0

    def process(
        self, source: PixelSurface, destination: PixelSurface, threshold: int
    ) -> None:
        order = self.order
        for y in range(source.height):
            offsets = self.offsets[y % order]
            for x in range(source.width):
                grey = luminance(source.get_pixel(x, y))
                cutoff = threshold + offsets[x % order]
                destination.set_pixel(
                    x, y, OPAQUE_BLACK if grey < cutoff else OPAQUE_WHITE
                )


FLOYD_STEINBERG = ErrorDiffusionDither(
    "floyd_steinberg",
    [(1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)],
    16,
)

ATKINSON = ErrorDiffusionDither(
    "atkinson",
    [(1, 0, 1), (2, 0, 1), (-1, 1, 1), (0, 1, 1), (1, 1, 1), (0, 2, 1)],
    8,
)

JARVIS_JUDICE_NINKE = ErrorDiffusionDither(
    "jarvis_judice_ninke",
    [
        (1, 0, 7), (2, 0, 5),
        (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
        (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
    ],
    48,
)

STUCKI = ErrorDiffusionDither(
    "stucki",
    [
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
    ],
    42,
)

BURKES = ErrorDiffusionDither(
    "burkes",
    [
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
    ],
    32,
)

SIERRA_LITE = ErrorDiffusionDither(
    "sierra_lite",
    [(1, 0, 2), (-1, 1, 1), (0, 1, 1)],
    4,
)

DITHER_ALGORITHMS: "dict[str, DitherAlgorithm]" = {
    algorithm.name: algorithm
    for algorithm in (
        ThresholdDither(),
        FLOYD_STEINBERG,
        ATKINSON,
        JARVIS_JUDICE_NINKE,
        STUCKI,
        BURKES,
        SIERRA_LITE,
        BayerDither(2),
        BayerDither(4),
        BayerDither(8),
    )
}


def get_dither_algorithm(name: str) -> DitherAlgorithm:
    """Look up a bundled dither algorithm by name.

    Raises:
        ValueError: If no algorithm is registered under that name
    """
    try:
        return DITHER_ALGORITHMS[name]
    except KeyError:
        raise ValueError(
            f"Unknown dither algorithm {name!r}, "
            f"expected one of {', '.join(sorted(DITHER_ALGORITHMS))}"
        ) from None
