"""Parsing of the ``WIDTHxHEIGHT`` and ``RE,IM`` command-line arguments."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def _parse_operand(text: str, convert: Callable[[str], T]) -> Optional[T]:
    # int() and float() tolerate padding and digit grouping; a bare operand does not.
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return convert(text)
    except ValueError:
        return None


def parse_pair(text: str, separator: str, convert: Callable[[str], T] = int) -> Optional[tuple[T, T]]:
    """Parse ``text`` as two values joined by ``separator``.

    ``parse_pair("400x600", "x")`` gives ``(400, 600)`` and
    ``parse_pair("1.5,-2", ",", float)`` gives ``(1.5, -2.0)``. Returns
    ``None`` if the separator is missing or either side does not convert.
    """

    index = text.find(separator)
    if index < 0:
        return None

    left = _parse_operand(text[:index], convert)
    right = _parse_operand(text[index + len(separator):], convert)
    if left is None or right is None:
        return None
    return left, right


def parse_complex(text: str) -> Optional[complex]:
    """Parse a ``RE,IM`` pair of floats as a complex number."""

    pair = parse_pair(text, ",", float)
    if pair is None:
        return None
    return complex(pair[0], pair[1])
