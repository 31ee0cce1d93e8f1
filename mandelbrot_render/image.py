"""Reading and writing grayscale PNG rasters."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
import PIL.Image

PathLike = Union[str, Path]


class EncodingError(Exception):
    """Raised when a pixel buffer cannot be encoded to, or decoded from, a file."""


def _as_bytes(pixels) -> np.ndarray:
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        return np.frombuffer(pixels, dtype=np.uint8)
    data = np.asarray(pixels)
    if data.dtype != np.uint8:
        raise EncodingError(f"pixel buffer must hold uint8 values, got {data.dtype}")
    return data.reshape(-1)


def write_image(filename: PathLike, pixels, bounds: tuple[int, int]) -> None:
    """Write the buffer ``pixels``, whose dimensions are given by ``bounds``, to ``filename`` as a PNG."""

    width, height = bounds
    if width <= 0 or height <= 0:
        raise EncodingError(f"image dimensions must be positive, got {width}x{height}")

    data = _as_bytes(pixels)
    if data.size != width * height:
        raise EncodingError(
            f"pixel buffer holds {data.size} bytes but a {width}x{height} image needs {width * height}"
        )

    image = PIL.Image.fromarray(data.reshape(height, width))
    try:
        image.save(str(filename), format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodingError(f"cannot write {filename}: {exc}") from exc


def read_image(filename: PathLike) -> tuple[np.ndarray, tuple[int, int]]:
    """Load a grayscale raster into a flat buffer and its ``(width, height)``."""

    try:
        with PIL.Image.open(str(filename)) as image:
            if image.mode != "L":
                raise EncodingError(f"{filename} is a {image.mode} image, expected grayscale")
            bounds = image.size
            pixels = np.array(image, dtype=np.uint8).reshape(-1)
    except OSError as exc:
        raise EncodingError(f"cannot read {filename}: {exc}") from exc
    return pixels, bounds
