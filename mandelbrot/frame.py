"""One-shot rendering of a complete frame from a parameter bundle."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np

from .bands import DEFAULT_WORKERS, render_parallel
from .geometry import ImageBounds, ViewRegion
from .renderer import DEFAULT_LIMIT, allocate_buffer, render

logger = logging.getLogger(__name__)

MODES = ("fast", "slow", "tensor")


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    bounds: ImageBounds
    region: ViewRegion
    limit: int = DEFAULT_LIMIT
    workers: int = DEFAULT_WORKERS
    mode: str = "fast"


@dataclass(frozen=True)
class RenderResult:
    """Finished pixel buffer together with the geometry it was rendered for."""

    pixels: np.ndarray
    bounds: ImageBounds
    region: ViewRegion
    mode: str

    def as_image_array(self) -> np.ndarray:
        """View the flat buffer as ``(height, width)`` rows."""

        return self.pixels.reshape(self.bounds.height, self.bounds.width)


def resolve_mode(mode: str) -> str:
    """Normalise a mode selector; anything unrecognised renders in parallel."""

    normalized = (mode or "").strip().lower()
    if normalized in MODES:
        return normalized
    warnings.warn(f"Unknown render mode '{mode}', using 'fast'.", UserWarning, stacklevel=2)
    return "fast"


def render_image(params: RenderParameters) -> RenderResult:
    """Allocate a buffer and render ``params`` into it with the selected engine."""

    mode = resolve_mode(params.mode)
    pixels = allocate_buffer(params.bounds)

    if mode == "slow":
        render(pixels, params.bounds, params.region, params.limit)
    elif mode == "tensor":
        # TensorFlow is optional and slow to import
        from .tensor import default_device, render_tensor

        render_tensor(pixels, params.bounds, params.region, params.limit, device=default_device())
    else:
        render_parallel(pixels, params.bounds, params.region, params.workers, params.limit)

    logger.debug("Rendered %dx%d in %s mode", params.bounds.width, params.bounds.height, mode)
    return RenderResult(pixels=pixels, bounds=params.bounds, region=params.region, mode=mode)
