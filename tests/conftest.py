"""Shared fixtures: regions and reference renders."""

import numpy as np
import pytest

from mandelbrot import ImageBounds, ViewRegion, allocate_buffer, render


@pytest.fixture
def unit_region():
    """The square [-1, 1] x [-1, 1]."""
    return ViewRegion(upper_left=complex(-1.0, 1.0), lower_right=complex(1.0, -1.0))


@pytest.fixture
def full_region():
    """Region holding the whole set."""
    return ViewRegion(upper_left=complex(-2.0, 1.25), lower_right=complex(0.5, -1.25))


@pytest.fixture
def odd_bounds():
    """Dimensions that no small worker count divides evenly."""
    return ImageBounds(37, 23)


def sequential_pixels(bounds, region, limit=64):
    """Reference buffer from the sequential renderer."""
    pixels = allocate_buffer(bounds)
    render(pixels, bounds, region, limit)
    return pixels


@pytest.fixture
def reference():
    return sequential_pixels


def filled_buffer(bounds, value=7):
    """Buffer pre-filled with a value the renderer never writes at limit 64."""
    return np.full(bounds.pixel_count, value, dtype=np.uint8)


@pytest.fixture
def filled():
    return filled_buffer
