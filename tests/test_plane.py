import math

import numpy as np
import pytest

from mandelbrot_render import pixel_to_point, point_grid


def test_pixel_to_point_interpolates_linearly():
    point = pixel_to_point((100, 100), (25, 75), complex(-1.0, 1.0), complex(1.0, -1.0))
    assert point == pytest.approx(complex(-0.5, -0.5))


def test_origin_pixel_is_upper_left():
    upper_left = complex(-1.20, 0.35)
    assert pixel_to_point((100, 75), (0, 0), upper_left, complex(-1.0, 0.20)) == upper_left


@pytest.mark.parametrize("size", [10, 100, 1000])
def test_last_pixel_is_one_step_short_of_lower_right(size):
    upper_left, lower_right = complex(-2.0, 1.0), complex(1.0, -1.0)
    point = pixel_to_point((size, size), (size - 1, size - 1), upper_left, lower_right)
    assert point.real == pytest.approx(lower_right.real - 3.0 / size)
    assert point.imag == pytest.approx(lower_right.imag + 2.0 / size)


def test_rows_move_down_the_imaginary_axis():
    top = pixel_to_point((4, 4), (0, 0), complex(0.0, 1.0), complex(1.0, 0.0))
    below = pixel_to_point((4, 4), (0, 1), complex(0.0, 1.0), complex(1.0, 0.0))
    assert below.imag < top.imag


def test_out_of_range_pixels_extrapolate():
    point = pixel_to_point((10, 10), (20, -10), complex(0.0, 0.0), complex(1.0, -1.0))
    assert point == pytest.approx(complex(2.0, 1.0))


def test_inverted_corners_are_accepted():
    point = pixel_to_point((2, 2), (1, 1), complex(1.0, -1.0), complex(-1.0, 1.0))
    assert point == pytest.approx(complex(0.0, 0.0))


def test_point_grid_matches_scalar_mapping():
    bounds = (7, 5)
    upper_left, lower_right = complex(-1.20, 0.35), complex(-1.0, 0.20)
    re, im = point_grid(bounds, upper_left, lower_right)

    assert re.shape == im.shape == (5, 7)
    for row in range(bounds[1]):
        for column in range(bounds[0]):
            expected = pixel_to_point(bounds, (column, row), upper_left, lower_right)
            assert re[row, column] == expected.real
            assert im[row, column] == expected.imag
    assert re.dtype == np.float64


def test_zero_bounds_yield_non_finite_points():
    point = pixel_to_point((0, 10), (0, 0), complex(-1.0, 1.0), complex(1.0, -1.0))
    assert not math.isfinite(point.real)
    assert point.imag == 1.0


def test_zero_height_maps_rows_to_infinity():
    re, im = point_grid((1, 0), complex(-1.0, 1.0), complex(1.0, -1.0))
    assert re.shape == im.shape == (0, 1)
    point = pixel_to_point((1, 0), (0, 3), complex(-1.0, 1.0), complex(1.0, -1.0))
    assert point.real == -1.0
    assert math.isinf(point.imag)
