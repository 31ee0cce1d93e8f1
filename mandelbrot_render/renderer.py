"""Escape-time evaluation and rendering into grayscale pixel buffers."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
import tensorflow as tf

from .plane import pixel_to_point, point_grid

ITERATION_LIMIT = 255
HORIZON = 4.0


def escape_time(point: complex, limit: int) -> Optional[int]:
    """Try to determine if ``point`` is in the Mandelbrot set, using at most ``limit`` iterations.

    Returns the iteration at which ``point`` was found to escape the circle of
    radius two centered on the origin, or ``None`` if it stayed inside for
    ``limit`` iterations.
    """

    # z = z * z + point, component-wise; rounds step for step like _escape_step.
    zr, zi = 0.0, 0.0
    cr, ci = point.real, point.imag
    for i in range(limit):
        if zr * zr + zi * zi > HORIZON:
            return i
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
    return None


def intensity(count: Optional[int]) -> int:
    """Map an escape count to a gray level; points in the set are black."""

    if count is None:
        return 0
    return ITERATION_LIMIT - count


def new_buffer(bounds: tuple[int, int]) -> np.ndarray:
    """Allocate a zeroed row-major grayscale buffer for ``bounds``."""

    return np.zeros(bounds[0] * bounds[1], dtype=np.uint8)


def _check_buffer(pixels, bounds: tuple[int, int]) -> None:
    expected = bounds[0] * bounds[1]
    if len(pixels) != expected:
        raise ValueError(
            f"pixel buffer holds {len(pixels)} bytes but bounds {bounds[0]}x{bounds[1]} need {expected}"
        )


@tf.function
def _escape_step(
    i: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    counts: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Record newly escaped points, then iterate the ones still inside."""

    horizon = tf.cast(HORIZON, zr.dtype)
    escaped = tf.logical_and(active, zr * zr + zi * zi > horizon)
    counts = tf.where(escaped, tf.fill(tf.shape(counts), i), counts)
    active = tf.logical_and(active, tf.logical_not(escaped))

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    return zr, zi, counts, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, limit: tf.Tensor) -> tf.Tensor:
    """Escape counts for a grid of points; ``-1`` marks points that never escaped."""

    limit = tf.cast(limit, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    counts = tf.fill(tf.shape(cr), tf.constant(-1, dtype=tf.int32))
    active = tf.ones_like(counts, tf.bool)

    def cond(i, zr, zi, counts, active):
        return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

    def body(i, zr, zi, counts, active):
        zr, zi, counts, active = _escape_step(i, zr, zi, cr, ci, counts, active)
        return i + 1, zr, zi, counts, active

    _, _, _, counts, _ = tf.while_loop(cond, body, (i, zr, zi, counts, active))
    return counts


def render(
    pixels: np.ndarray,
    bounds: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    *,
    device: Optional[str] = None,
) -> None:
    """Render a rectangle of the Mandelbrot set into ``pixels``.

    ``bounds`` gives the width and height of the flat, row-major buffer
    ``pixels``, which holds one grayscale byte per pixel. ``upper_left`` and
    ``lower_right`` are the points on the complex plane at the corners of the
    image. Every byte of ``pixels`` is overwritten.
    """

    _check_buffer(pixels, bounds)

    x, y = point_grid(bounds, upper_left, lower_right)
    limit = tf.constant(ITERATION_LIMIT, dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(x, dtype=tf.float64)
        ci = tf.convert_to_tensor(y, dtype=tf.float64)
        counts = _escape_run(cr, ci, limit)
        shades = tf.where(counts < 0, tf.zeros_like(counts), ITERATION_LIMIT - counts)

    pixels[:] = np.asarray(shades.numpy(), dtype=np.uint8).reshape(-1)


def _render_rows(
    pixels: np.ndarray,
    bounds: tuple[int, int],
    rows: range,
    upper_left: complex,
    lower_right: complex,
) -> None:
    width = bounds[0]
    for row in rows:
        for column in range(width):
            point = pixel_to_point(bounds, (column, row), upper_left, lower_right)
            pixels[row * width + column] = intensity(escape_time(point, ITERATION_LIMIT))


def _row_bands(height: int, workers: int) -> list[range]:
    band = max(1, -(-height // workers))
    return [range(start, min(start + band, height)) for start in range(0, height, band)]


def render_bands(
    pixels: np.ndarray,
    bounds: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    *,
    workers: Optional[int] = None,
) -> None:
    """Render like :func:`render`, one pixel at a time across worker threads.

    The rows are split into disjoint bands and each worker writes only the
    slice of ``pixels`` its band covers. Returns once every band is filled.
    This is the scalar reference path: the workers share the GIL, so it is
    not faster than a single thread.
    """

    _check_buffer(pixels, bounds)

    workers = max(1, int(workers or os.cpu_count() or 1))
    bands = _row_bands(bounds[1], workers)
    if not bands:
        return
    with ThreadPoolExecutor(max_workers=min(workers, len(bands))) as pool:
        futures = [
            pool.submit(_render_rows, pixels, bounds, rows, upper_left, lower_right)
            for rows in bands
        ]
        for future in futures:
            future.result()
