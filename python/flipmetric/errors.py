# python/flipmetric/errors.py
# Exception kinds raised by image buffers, the metric and the statistics layer.
# Each subclasses the builtin a caller would already catch (ValueError/IndexError).
# RELEVANT FILES:python/flipmetric/_validate.py,python/flipmetric/image.py,python/flipmetric/histogram.py

from __future__ import annotations


class FlipError(Exception):
    """Base class for all flipmetric errors."""


class InvalidDimensions(FlipError, ValueError):
    """Width or height is zero, negative or not an integer."""


class DimensionMismatch(FlipError, ValueError):
    """Operands of a binary operation have different sizes."""


class OutOfBounds(FlipError, IndexError):
    """Pixel coordinate or bucket index outside the valid range."""


class InvalidParameter(FlipError, ValueError):
    """Parameter outside its domain (percentile, pixels per degree, empty ramp, NaN input)."""


__all__ = [
    "FlipError",
    "InvalidDimensions",
    "DimensionMismatch",
    "OutOfBounds",
    "InvalidParameter",
]
