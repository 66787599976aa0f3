from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidDimensions, InvalidParameter, OutOfBounds


def _as_int(name: str, v) -> int:
    if isinstance(v, bool):
        raise InvalidDimensions(f"{name} must be an integer, got bool")
    if isinstance(v, (float, np.floating)) and not float(v).is_integer():
        raise InvalidDimensions(f"{name} must be an integer, got {v!r}")
    try:
        i = int(v)
    except Exception as e:
        raise InvalidDimensions(f"{name} must be an integer, got {type(v).__name__}") from e
    return i


def size_wh(width, height) -> Tuple[int, int]:
    w = _as_int("width", width)
    h = _as_int("height", height)
    if w <= 0 or h <= 0:
        raise InvalidDimensions(f"width and height must be > 0, got {w}x{h}")
    return w, h


def _as_index(name: str, v) -> int:
    if isinstance(v, bool):
        raise OutOfBounds(f"{name} must be an integer, got bool")
    if isinstance(v, (float, np.floating)) and not float(v).is_integer():
        raise OutOfBounds(f"{name} must be an integer pixel index, got {v!r}")
    try:
        return int(v)
    except (TypeError, ValueError, OverflowError) as e:
        raise OutOfBounds(f"{name} must be an integer, got {type(v).__name__}") from e


def coord(x, y, width: int, height: int) -> Tuple[int, int]:
    xi = _as_index("x", x)
    yi = _as_index("y", y)
    if not (0 <= xi < width and 0 <= yi < height):
        raise OutOfBounds(f"pixel ({xi}, {yi}) outside {width}x{height} image")
    return xi, yi


def positive_finite(name: str, value) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {type(value).__name__}") from e
    if not math.isfinite(f) or f <= 0.0:
        raise InvalidParameter(f"{name} must be finite and > 0, got {value!r}")
    return f


def unit_interval(name: str, value) -> float:
    f = float(value)
    if not (0.0 <= f <= 1.0):
        raise InvalidParameter(f"{name} must be within [0, 1], got {value!r}")
    return f


def all_finite(name: str, arr: np.ndarray) -> np.ndarray:
    if not np.isfinite(arr).all():
        raise InvalidParameter(f"{name} contains non-finite values")
    return arr


def same_size(a, b, context: str = "") -> None:
    if (a.width, a.height) != (b.width, b.height):
        raise DimensionMismatch(
            f"{context or 'operands'} differ in size: "
            f"{a.width}x{a.height} vs {b.width}x{b.height}"
        )
