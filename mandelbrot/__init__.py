"""Public API for Mandelbrot rendering utilities."""

from .bands import DEFAULT_WORKERS, Band, BandRenderError, partition_bands, render_parallel
from .escape import ESCAPE_NORM_SQR, escape_time, intensity
from .frame import MODES, RenderParameters, RenderResult, render_image, resolve_mode
from .geometry import ImageBounds, Pixel, ViewRegion, pixel_to_point
from .renderer import DEFAULT_LIMIT, allocate_buffer, render

__all__ = [
    "Band",
    "BandRenderError",
    "DEFAULT_LIMIT",
    "DEFAULT_WORKERS",
    "ESCAPE_NORM_SQR",
    "ImageBounds",
    "MODES",
    "Pixel",
    "RenderParameters",
    "RenderResult",
    "ViewRegion",
    "allocate_buffer",
    "escape_time",
    "intensity",
    "partition_bands",
    "pixel_to_point",
    "render",
    "render_image",
    "render_parallel",
    "resolve_mode",
]
