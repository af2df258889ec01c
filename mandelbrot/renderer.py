"""Sequential rendering of the Mandelbrot set into a grayscale pixel buffer."""

from __future__ import annotations

import logging
import warnings

import numpy as np

from .escape import escape_time, intensity
from .geometry import ImageBounds, ViewRegion, pixel_to_point

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 255
# escape counts map onto 255 - k; larger limits wrap modulo 256
MAX_BYTE_LIMIT = 255


def allocate_buffer(bounds: ImageBounds) -> np.ndarray:
    """Return a zero-filled row-major buffer with one byte per pixel."""

    return np.zeros(bounds.pixel_count, dtype=np.uint8)


def check_buffer(pixels: np.ndarray, bounds: ImageBounds) -> None:
    if not isinstance(pixels, np.ndarray) or pixels.dtype != np.uint8 or pixels.ndim != 1:
        raise ValueError("pixel buffer must be a one-dimensional uint8 array")
    if pixels.shape[0] != bounds.pixel_count:
        raise ValueError(
            f"pixel buffer holds {pixels.shape[0]} bytes, "
            f"expected {bounds.width}x{bounds.height}={bounds.pixel_count}"
        )


def check_limit(limit: int) -> None:
    if limit <= 0:
        raise ValueError(f"iteration limit must be positive, got {limit}")
    if limit > MAX_BYTE_LIMIT:
        warnings.warn(
            f"iteration limit {limit} exceeds {MAX_BYTE_LIMIT}; "
            "slow escapes wrap modulo 256 in the grayscale output",
            UserWarning,
            stacklevel=3,
        )


def render_rows(
    pixels: np.ndarray,
    bounds: ImageBounds,
    region: ViewRegion,
    limit: int,
    top: int = 0,
) -> None:
    """Fill ``pixels`` with whole image rows starting at row ``top``.

    ``pixels`` holds ``len(pixels) // bounds.width`` consecutive rows. Every pixel is
    mapped against the full image ``bounds`` and ``region``, so a slice of rows
    renders exactly as it would inside the complete image.
    """

    width = bounds.width
    for offset in range(len(pixels) // width):
        row = top + offset
        pixels[offset * width:(offset + 1) * width] = [
            intensity(escape_time(pixel_to_point(bounds, (column, row), region), limit))
            for column in range(width)
        ]


def render(
    pixels: np.ndarray,
    bounds: ImageBounds,
    region: ViewRegion,
    limit: int = DEFAULT_LIMIT,
) -> None:
    """Render ``region`` into ``pixels`` one pixel at a time, in row-major order."""

    check_buffer(pixels, bounds)
    check_limit(limit)
    logger.debug("Rendering %dx%d sequentially (limit %d)", bounds.width, bounds.height, limit)
    render_rows(pixels, bounds, region, limit)
