"""Pixel grid and complex-plane geometry for Mandelbrot renders."""

from __future__ import annotations

from dataclasses import dataclass

Pixel = tuple[int, int]


@dataclass(frozen=True)
class ImageBounds:
    """Width and height of the output pixel grid."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"image bounds must be positive, got {self.width}x{self.height}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class ViewRegion:
    """Rectangle of the complex plane covered by the image.

    ``upper_left`` maps to pixel (0, 0). The imaginary axis grows upwards while
    pixel rows grow downwards, so a well formed region has
    ``upper_left.real < lower_right.real`` and ``upper_left.imag > lower_right.imag``.
    The renderer does not enforce this; a malformed region yields a mirrored or
    degenerate image.
    """

    upper_left: complex
    lower_right: complex

    @property
    def plane_width(self) -> float:
        return self.lower_right.real - self.upper_left.real

    @property
    def plane_height(self) -> float:
        return self.upper_left.imag - self.lower_right.imag

    @property
    def is_oriented(self) -> bool:
        return self.plane_width > 0 and self.plane_height > 0


def pixel_to_point(bounds: ImageBounds, pixel: Pixel, region: ViewRegion) -> complex:
    """Return the point of the complex plane under ``pixel``.

    ``pixel`` is a ``(column, row)`` pair. Pixels tile the region left-closed and
    right-open: column 0 lands on ``upper_left.real`` and column ``width`` would land
    on ``lower_right.real``. No bounds check is made.
    """

    column, row = pixel
    width = region.lower_right.real - region.upper_left.real
    height = region.upper_left.imag - region.lower_right.imag
    # rows grow downwards, the imaginary axis grows upwards
    return complex(
        region.upper_left.real + column * width / bounds.width,
        region.upper_left.imag - row * height / bounds.height,
    )
