"""Public API for grayscale Mandelbrot rendering."""

from .image import EncodingError, read_image, write_image
from .parsing import parse_complex, parse_pair
from .plane import pixel_to_point, point_grid
from .renderer import (
    ITERATION_LIMIT,
    escape_time,
    intensity,
    new_buffer,
    render,
    render_bands,
)

__all__ = [
    "EncodingError",
    "ITERATION_LIMIT",
    "escape_time",
    "intensity",
    "new_buffer",
    "parse_complex",
    "parse_pair",
    "pixel_to_point",
    "point_grid",
    "read_image",
    "render",
    "render_bands",
    "write_image",
]
