# python/flipmetric/image.py
# Owned 2-D pixel buffers for RGB and scalar float data, plus the flat-buffer boundary helpers.
# Everything else in the package consumes or produces these.
# RELEVANT FILES:python/flipmetric/color.py,python/flipmetric/metric.py,tests/test_image.py

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from . import _validate
from .color import decode_srgb8, encode_srgb8
from .errors import InvalidParameter

ArrayLike = Union[np.ndarray, Sequence[float], bytes, bytearray]


class PixelBuffer:
    """Dense row-major grid of ``float32`` values.

    Dimensions are fixed at construction. Pixels change only through
    :meth:`set`; :meth:`get` and :meth:`set` raise ``OutOfBounds`` for
    coordinates outside ``[0, width) x [0, height)``.
    """

    channels = 1

    def __init__(self, width: int, height: int, data: Optional[ArrayLike] = None):
        w, h = _validate.size_wh(width, height)
        shape = self._storage_shape(w, h)
        if data is None:
            arr = np.zeros(shape, dtype=np.float32)
        else:
            arr = np.array(data, dtype=np.float32, copy=True)
            if arr.size != int(np.prod(shape)):
                raise InvalidParameter(
                    f"{type(self).__name__} {w}x{h} expects {int(np.prod(shape))} values, got {arr.size}"
                )
            arr = arr.reshape(shape)
        self._width = w
        self._height = h
        self._data = arr

    @classmethod
    def _storage_shape(cls, w: int, h: int) -> Tuple[int, ...]:
        if cls.channels == 1:
            return (h, w)
        return (h, w, cls.channels)

    @classmethod
    def from_array(cls, arr: np.ndarray):
        """Wrap a copy of an ``(H, W)`` or ``(H, W, 3)`` array."""
        a = np.asarray(arr)
        if a.ndim < 2:
            raise InvalidParameter(f"expected at least a 2-D array, got shape {a.shape}")
        return cls(a.shape[1], a.shape[0], a)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._data.shape

    def __len__(self) -> int:
        return self._width * self._height

    def get(self, x: int, y: int):
        xi, yi = _validate.coord(x, y, self._width, self._height)
        return float(self._data[yi, xi])

    def set(self, x: int, y: int, value) -> None:
        xi, yi = _validate.coord(x, y, self._width, self._height)
        self._data[yi, xi] = value

    def clone(self):
        out = object.__new__(type(self))
        out._width = self._width
        out._height = self._height
        out._data = self._data.copy()
        return out

    def as_array(self) -> np.ndarray:
        """Read-only view of the backing storage."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer) or type(other) is not type(self):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._width}x{self._height})"


class ColorImage(PixelBuffer):
    """Three-channel float image. Values are unconstrained; encoding clamps."""

    channels = 3

    def get(self, x: int, y: int) -> Tuple[float, float, float]:
        xi, yi = _validate.coord(x, y, self._width, self._height)
        r, g, b = self._data[yi, xi]
        return (float(r), float(g), float(b))

    def set(self, x: int, y: int, value) -> None:
        xi, yi = _validate.coord(x, y, self._width, self._height)
        v = np.asarray(value, dtype=np.float32)
        if v.shape != (3,):
            raise InvalidParameter(f"color value must have 3 channels, got shape {v.shape}")
        self._data[yi, xi] = v


class ScalarImage(PixelBuffer):
    """Single-channel float image, e.g. an error map."""

    channels = 1

    def to_color(self) -> ColorImage:
        """Replicate each scalar into all three channels."""
        rgb = np.repeat(self._data[:, :, None], 3, axis=2)
        return ColorImage(self._width, self._height, rgb)


def create_color_image(width: int, height: int, data: Optional[ArrayLike] = None) -> ColorImage:
    """Build a color image from row-major 8-bit RGB bytes, or zeros when ``data`` is None."""
    w, h = _validate.size_wh(width, height)
    if data is None:
        return ColorImage(w, h)
    decoded = decode_srgb8(data)
    if decoded.size != w * h * 3:
        raise InvalidParameter(f"expected {w * h * 3} encoded bytes for {w}x{h} RGB, got {decoded.size}")
    return ColorImage(w, h, decoded)


def create_scalar_image(width: int, height: int, data: Optional[ArrayLike] = None) -> ScalarImage:
    """Build a scalar image from row-major floats, or zeros when ``data`` is None."""
    return ScalarImage(width, height, data)


def read_color_image(image: ColorImage) -> bytes:
    """Encode a color image to row-major 8-bit RGB bytes (clamped, rounded half up)."""
    if not isinstance(image, ColorImage):
        raise InvalidParameter(f"expected ColorImage, got {type(image).__name__}")
    return encode_srgb8(image.as_array()).tobytes()


def read_scalar_image(image: ScalarImage) -> np.ndarray:
    """Return a flat row-major ``float32`` copy of a scalar image."""
    if not isinstance(image, ScalarImage):
        raise InvalidParameter(f"expected ScalarImage, got {type(image).__name__}")
    return image.as_array().reshape(-1).copy()


__all__ = [
    "PixelBuffer",
    "ColorImage",
    "ScalarImage",
    "create_color_image",
    "create_scalar_image",
    "read_color_image",
    "read_scalar_image",
]
