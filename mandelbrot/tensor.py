"""Vectorized rendering on TensorFlow.

All pixels advance through the orbit together as float64 tensors. The arithmetic
follows :func:`mandelbrot.escape.escape_time` operation for operation, so results
match the scalar renderer wherever the device rounds like the CPU.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import tensorflow as tf

from .escape import ESCAPE_NORM_SQR
from .geometry import ImageBounds, ViewRegion
from .renderer import DEFAULT_LIMIT, check_buffer, check_limit

logger = logging.getLogger(__name__)


def default_device() -> str:
    """Use the first visible GPU when TensorFlow has one, otherwise the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if gpus:
        try:
            for gpu in gpus:
                tf.config.experimental.set_memory_growth(gpu, True)
            logger.info("GPU found, using %s", gpus[0].name)
            return '/GPU:0'
        except RuntimeError:
            # memory growth must be set before the GPU is initialised
            logger.warning("GPU already initialised, falling back to CPU", exc_info=True)
    return '/CPU:0'


@tf.function
def _mandelbrot_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor,
                     ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for points that have not escaped."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = zr * zi + zi * zr + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    norm = zr * zr + zi * zi
    # NaN orbits never compare greater, so they stay active like in the scalar loop
    escaped = norm > tf.constant(ESCAPE_NORM_SQR, dtype=norm.dtype)
    return zr, zi, ns, tf.logical_and(active, tf.logical_not(escaped))


@tf.function
def _mandelbrot_run(cr: tf.Tensor, ci: tf.Tensor, limit: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    """Iterate until every point escaped or ``limit`` iterations ran."""

    limit = tf.cast(limit, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    ns = tf.zeros_like(cr, tf.int32)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _mandelbrot_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, active = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns, active


def _sample_grid(bounds: ImageBounds, region: ViewRegion) -> tuple[np.ndarray, np.ndarray]:
    # same expression as pixel_to_point, element-wise
    columns = np.arange(bounds.width, dtype=np.float64)
    rows = np.arange(bounds.height, dtype=np.float64)
    re = region.upper_left.real + columns * region.plane_width / bounds.width
    im = region.upper_left.imag - rows * region.plane_height / bounds.height
    cr = np.broadcast_to(re[np.newaxis, :], (bounds.height, bounds.width))
    ci = np.broadcast_to(im[:, np.newaxis], (bounds.height, bounds.width))
    return cr, ci


def render_tensor(
    pixels: np.ndarray,
    bounds: ImageBounds,
    region: ViewRegion,
    limit: int = DEFAULT_LIMIT,
    *,
    device: Optional[str] = None,
) -> None:
    """Render ``region`` into ``pixels`` with one vectorized TensorFlow loop."""

    check_buffer(pixels, bounds)
    check_limit(limit)
    cr, ci = _sample_grid(bounds, region)

    with tf.device(device if device is not None else "/CPU:0"):
        ns, active = _mandelbrot_run(
            tf.convert_to_tensor(cr, dtype=tf.float64),
            tf.convert_to_tensor(ci, dtype=tf.float64),
            tf.constant(limit, dtype=tf.int32),
        )

    ns = ns.numpy().astype(np.int64)
    escaped = ~active.numpy()
    # ns counts the escaping iteration too
    levels = np.where(escaped, (255 - (ns - 1)) % 256, 0)
    pixels[:] = levels.astype(np.uint8).ravel()
    logger.debug("Rendered %dx%d on %s", bounds.width, bounds.height, device or "/CPU:0")
