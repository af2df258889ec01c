"""Parallel rendering: split the image into row bands, one thread per band.

Each band owns a disjoint slice of the flat pixel buffer. Workers receive numpy
views of their slice, so they write straight into the caller's buffer and no two
workers ever touch the same byte. No locks are taken.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from .geometry import ImageBounds, ViewRegion, pixel_to_point
from .renderer import DEFAULT_LIMIT, check_buffer, check_limit, render_rows

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


@dataclass(frozen=True)
class Band:
    """A contiguous run of image rows and the buffer range it owns."""

    index: int
    top: int
    bounds: ImageBounds  # full image width, band height
    region: ViewRegion   # band corners, mapped on the full image grid

    @property
    def height(self) -> int:
        return self.bounds.height

    @property
    def start(self) -> int:
        return self.top * self.bounds.width

    @property
    def stop(self) -> int:
        return self.start + self.bounds.pixel_count


class BandRenderError(RuntimeError):
    """Raised once every band has finished and at least one of them failed."""

    def __init__(self, failures: list[tuple[Band, BaseException]]):
        self.failures = failures
        indices = ", ".join(str(band.index) for band, _ in failures)
        super().__init__(f"{len(failures)} band(s) failed to render: {indices}")


def rows_per_band(height: int, workers: int) -> int:
    return -(-height // workers)


def partition_bands(bounds: ImageBounds, region: ViewRegion, workers: int) -> list[Band]:
    """Cut the image rows into at most ``workers`` bands of equal height.

    Every band but the last holds ``ceil(height / workers)`` rows. Band corners are
    computed with :func:`pixel_to_point` against the whole image, so neighbouring
    bands share their boundary exactly.
    """

    if workers <= 0:
        raise ValueError(f"worker count must be positive, got {workers}")

    step = rows_per_band(bounds.height, workers)
    bands = []
    for index, top in enumerate(range(0, bounds.height, step)):
        height = min(step, bounds.height - top)
        band_region = ViewRegion(
            upper_left=pixel_to_point(bounds, (0, top), region),
            lower_right=pixel_to_point(bounds, (bounds.width, top + height), region),
        )
        bands.append(Band(index, top, ImageBounds(bounds.width, height), band_region))

    _check_tiling(bands, bounds)
    return bands


def _check_tiling(bands: list[Band], bounds: ImageBounds) -> None:
    offset = 0
    for band in bands:
        assert band.start == offset, f"band {band.index} starts at {band.start}, expected {offset}"
        offset = band.stop
    assert offset == bounds.pixel_count, f"bands cover {offset} of {bounds.pixel_count} pixels"


def _render_band(
    pixels: np.ndarray,
    bounds: ImageBounds,
    region: ViewRegion,
    band: Band,
    limit: int,
) -> None:
    render_rows(pixels, bounds, region, limit, top=band.top)
    logger.debug(
        "Band %d done: rows %d-%d, %s to %s",
        band.index, band.top, band.top + band.height - 1,
        band.region.upper_left, band.region.lower_right,
    )


def render_parallel(
    pixels: np.ndarray,
    bounds: ImageBounds,
    region: ViewRegion,
    workers: int = DEFAULT_WORKERS,
    limit: int = DEFAULT_LIMIT,
) -> None:
    """Render ``region`` into ``pixels`` using one thread per row band.

    Returns only after every band has finished. The buffer ends up byte-for-byte
    equal to what :func:`mandelbrot.renderer.render` produces. If any band raises,
    a single :class:`BandRenderError` listing every failed band is raised after
    all bands have been joined.
    """

    check_buffer(pixels, bounds)
    check_limit(limit)
    bands = partition_bands(bounds, region, workers)

    logger.debug(
        "Rendering %dx%d in %d bands of up to %d rows (limit %d)",
        bounds.width, bounds.height, len(bands), bands[0].height, limit,
    )

    # leaving the executor joins every band
    with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="band") as executor:
        futures = {
            executor.submit(_render_band, pixels[band.start:band.stop], bounds, region, band, limit): band
            for band in bands
        }

    failures = [
        (band, future.exception())
        for future, band in futures.items()
        if future.exception() is not None
    ]
    if failures:
        raise BandRenderError(failures) from failures[0][1]
