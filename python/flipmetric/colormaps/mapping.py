# python/flipmetric/colormaps/mapping.py
# Renders scalar error maps as false-color images through a ramp.
# RELEVANT FILES:python/flipmetric/colormaps/core.py,python/flipmetric/colormaps/registry.py,tests/test_colormaps_core.py

from __future__ import annotations

from typing import Union

import numpy as np

from ..errors import InvalidParameter
from ..image import ColorImage, ScalarImage
from .core import Colormap
from .registry import get

Ramp = Union[Colormap, ColorImage, np.ndarray]


def build_map(name: str) -> Colormap:
    """Resolve a named preset (e.g. ``"magma"``) to its 256-entry ramp."""
    try:
        return get(name)
    except KeyError as e:
        raise InvalidParameter(str(e.args[0])) from e


def builtin_ramp(name: str = "magma") -> ColorImage:
    """Named preset as a 256 x 1 ColorImage."""
    return build_map(name).to_image()


def _ramp_table(ramp: Ramp) -> np.ndarray:
    if isinstance(ramp, Colormap):
        table = ramp.rgb
    elif isinstance(ramp, ColorImage):
        table = ramp.as_array().reshape(-1, 3)
    else:
        table = np.asarray(ramp, dtype=np.float32)
        if table.size == 0:
            raise InvalidParameter("ramp is empty")
        if table.ndim != 2 or table.shape[1] != 3:
            raise InvalidParameter(f"ramp must have shape (N, 3), got {table.shape}")
    if table.shape[0] == 0:
        raise InvalidParameter("ramp is empty")
    return table


def color_map(error_map: ScalarImage, ramp: Ramp) -> ColorImage:
    """Map each error value ``e`` to ``ramp[round(clamp(e, 0, 1) * (N - 1))]``.

    Rounding is half up, so 0.5 steps land on the upper entry. NaN errors map
    to the first entry.
    """
    if not isinstance(error_map, ScalarImage):
        raise InvalidParameter(f"error_map must be a ScalarImage, got {type(error_map).__name__}")
    table = _ramp_table(ramp)
    n = table.shape[0]
    e = np.nan_to_num(error_map.as_array().astype(np.float64), nan=0.0)
    idx = np.floor(np.clip(e, 0.0, 1.0) * (n - 1) + 0.5).astype(np.intp)
    return ColorImage(error_map.width, error_map.height, table[idx])


__all__ = ["Ramp", "build_map", "builtin_ramp", "color_map"]
