"""
Color space conversions used by the FLIP metric.

Provides numpy-friendly helpers for moving between 8-bit encoded sRGB,
normalized sRGB, linear RGB, CIE XYZ (D65), the opponent space YCxCz and
CIELAB, plus the Hunt adjustment and HyAB distance the metric is built on.
All functions operate on arrays shaped (..., 3) with channels last.
"""

from __future__ import annotations

import numpy as np
from typing import Iterable

from .errors import InvalidParameter

_LINEAR_TO_XYZ = np.array(
    [
        [10135552.0 / 24577794.0, 8788810.0 / 24577794.0, 4435075.0 / 24577794.0],
        [2613072.0 / 12288897.0, 8788810.0 / 12288897.0, 887015.0 / 12288897.0],
        [1425312.0 / 73733382.0, 8788810.0 / 73733382.0, 70074185.0 / 73733382.0],
    ],
    dtype=np.float64,
)

_XYZ_TO_LINEAR = np.linalg.inv(_LINEAR_TO_XYZ)

# XYZ of linear-RGB white; both YCxCz and CIELAB are taken relative to it
REFERENCE_ILLUMINANT = _LINEAR_TO_XYZ @ np.ones(3, dtype=np.float64)

_LAB_DELTA = 6.0 / 29.0


def _as_float_array(color: np.ndarray | Iterable[float]) -> np.ndarray:
    arr = np.asarray(color, dtype=np.float32)
    if arr.shape[-1] != 3:
        raise ValueError(f"Expected color data with shape (..., 3); got {arr.shape}")
    return arr


def _apply_matrix(arr: np.ndarray, m: np.ndarray) -> np.ndarray:
    flat = arr.reshape(-1, 3).astype(np.float64, copy=False)
    return (flat @ m.T).astype(np.float32).reshape(arr.shape)


def decode_srgb8(data: np.ndarray | bytes) -> np.ndarray:
    """Map 8-bit encoded channels to floats by dividing by 255."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(data, dtype=np.uint8)
    else:
        arr = np.asarray(data)
        if arr.dtype != np.uint8:
            if arr.dtype.kind not in "biuf":
                raise InvalidParameter(f"encoded channels must be numeric, got dtype {arr.dtype}")
            if arr.size and not np.array_equal(arr, np.floor(arr)):
                raise InvalidParameter("encoded channel values must be integers")
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise InvalidParameter("encoded channel values must lie in [0, 255]")
            arr = arr.astype(np.uint8)
    return arr.astype(np.float32) / np.float32(255.0)


def encode_srgb8(color: np.ndarray) -> np.ndarray:
    """Quantize floats to 8 bits: ``uint8(clamp(v, 0, 1) * 255 + 0.5)``.

    Adding 0.5 before truncation rounds half away from zero for the clamped,
    non-negative domain, so decode followed by encode is lossless for any
    8-bit input.
    """
    arr = np.clip(np.asarray(color, dtype=np.float32), 0.0, 1.0)
    scaled = arr * np.float32(255.0) + np.float32(0.5)
    return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)


def srgb_to_linear(c: np.ndarray) -> np.ndarray:
    c = np.asarray(c, dtype=np.float32)
    a = 0.055
    return np.where(c <= 0.04045, c / 12.92, ((np.maximum(c, 0.0) + a) / (1 + a)) ** 2.4).astype(np.float32)


def linear_to_srgb(c: np.ndarray) -> np.ndarray:
    c = np.asarray(c, dtype=np.float32)
    a = 0.055
    return np.where(
        c <= 0.0031308, c * 12.92, (1 + a) * np.power(np.maximum(c, 0.0), 1 / 2.4) - a
    ).astype(np.float32)


def linear_rgb_to_xyz(color: np.ndarray) -> np.ndarray:
    return _apply_matrix(_as_float_array(color), _LINEAR_TO_XYZ)


def xyz_to_linear_rgb(color: np.ndarray) -> np.ndarray:
    return _apply_matrix(_as_float_array(color), _XYZ_TO_LINEAR)


def xyz_to_ycxcz(xyz: np.ndarray) -> np.ndarray:
    """Linear opponent space: Y is L*-scaled luminance, Cx/Cz are red-green and blue-yellow."""
    arr = _as_float_array(xyz) / REFERENCE_ILLUMINANT.astype(np.float32)
    x, y, z = arr[..., 0], arr[..., 1], arr[..., 2]
    return np.stack([116.0 * y - 16.0, 500.0 * (x - y), 200.0 * (y - z)], axis=-1).astype(np.float32)


def ycxcz_to_xyz(ycxcz: np.ndarray) -> np.ndarray:
    arr = _as_float_array(ycxcz)
    y = (arr[..., 0] + 16.0) / 116.0
    x = arr[..., 1] / 500.0 + y
    z = y - arr[..., 2] / 200.0
    return (np.stack([x, y, z], axis=-1) * REFERENCE_ILLUMINANT.astype(np.float32)).astype(np.float32)


def xyz_to_lab(xyz: np.ndarray) -> np.ndarray:
    arr = _as_float_array(xyz) / REFERENCE_ILLUMINANT.astype(np.float32)
    d3 = _LAB_DELTA ** 3
    f = np.where(arr > d3, np.cbrt(arr), arr / (3.0 * _LAB_DELTA ** 2) + 4.0 / 29.0)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1).astype(np.float32)


def srgb_to_ycxcz(color: np.ndarray) -> np.ndarray:
    return xyz_to_ycxcz(linear_rgb_to_xyz(srgb_to_linear(_as_float_array(color))))


def linear_rgb_to_lab(color: np.ndarray) -> np.ndarray:
    return xyz_to_lab(linear_rgb_to_xyz(color))


def hunt_adjust(lab: np.ndarray) -> np.ndarray:
    """Scale chroma by lightness: ``(L, 0.01 L a, 0.01 L b)``."""
    arr = _as_float_array(lab)
    L = arr[..., 0]
    return np.stack([L, 0.01 * L * arr[..., 1], 0.01 * L * arr[..., 2]], axis=-1).astype(np.float32)


def hyab(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """HyAB distance: city-block on lightness, Euclidean on chroma."""
    d = _as_float_array(a) - _as_float_array(b)
    return (np.abs(d[..., 0]) + np.sqrt(d[..., 1] ** 2 + d[..., 2] ** 2)).astype(np.float32)


__all__ = [
    "REFERENCE_ILLUMINANT",
    "decode_srgb8",
    "encode_srgb8",
    "srgb_to_linear",
    "linear_to_srgb",
    "linear_rgb_to_xyz",
    "xyz_to_linear_rgb",
    "xyz_to_ycxcz",
    "ycxcz_to_xyz",
    "xyz_to_lab",
    "srgb_to_ycxcz",
    "linear_rgb_to_lab",
    "hunt_adjust",
    "hyab",
]
