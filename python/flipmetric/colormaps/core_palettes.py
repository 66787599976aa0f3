from __future__ import annotations
import numpy as np
from matplotlib import colormaps as _mpl_colormaps
from .core import Colormap, from_stops
from .registry import register

RAMP_SIZE = 256

# Perceptually uniform ramps from matplotlib's listed data (magma matches the FLIP reference tool)
_MPL_RAMPS = ("magma", "viridis", "inferno")

_GRAY_STOPS = [(0.0, "#000000"), (1.0, "#FFFFFF")]


def _mpl_to_colormap(mpl_cmap, name: str, n: int = RAMP_SIZE) -> Colormap:
    xs = np.linspace(0, 1, n, dtype=np.float64)
    rgba = np.array(mpl_cmap(xs), dtype=np.float32)  # (n,4) in sRGB
    return Colormap(name, np.ascontiguousarray(rgba[:, :3]))


def _register_core():
    for name in _MPL_RAMPS:
        register(name, lambda name=name: _mpl_to_colormap(_mpl_colormaps[name], name))
    register("gray", lambda: from_stops("gray", _GRAY_STOPS, RAMP_SIZE))
_register_core()
