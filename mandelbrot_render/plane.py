"""Mapping between the pixel grid and the complex plane."""

from __future__ import annotations

import numpy as np


def pixel_to_point(
    bounds: tuple[int, int],
    pixel: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> complex:
    """Return the point on the complex plane that ``pixel`` samples.

    ``bounds`` is the ``(width, height)`` of the image in pixels and ``pixel``
    a ``(column, row)`` pair inside it. ``upper_left`` and ``lower_right`` are
    the plane coordinates of the image corners.
    """

    width = np.float64(lower_right.real - upper_left.real)
    height = np.float64(upper_left.imag - lower_right.imag)
    # Empty bounds give inf/nan instead of raising.
    with np.errstate(divide="ignore", invalid="ignore"):
        # Rows grow downwards while the imaginary axis grows upwards.
        re = np.float64(upper_left.real) + np.float64(pixel[0]) * width / np.float64(bounds[0])
        im = np.float64(upper_left.imag) - np.float64(pixel[1]) * height / np.float64(bounds[1])
    return complex(float(re), float(im))


def point_grid(
    bounds: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> tuple[np.ndarray, np.ndarray]:
    """Real and imaginary parts of every sample point, shaped ``(height, width)``.

    Evaluated in the same order as :func:`pixel_to_point` so each element is
    bit-identical to the scalar mapping.
    """

    x_res, y_res = bounds
    x_width = np.float64(lower_right.real - upper_left.real)
    y_width = np.float64(upper_left.imag - lower_right.imag)

    columns = np.arange(x_res, dtype=np.float64)
    rows = np.arange(y_res, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        x = np.float64(upper_left.real) + columns * x_width / np.float64(x_res)
        y = np.float64(upper_left.imag) - rows * y_width / np.float64(y_res)

    X, Y = np.meshgrid(x, y)
    return X, Y
