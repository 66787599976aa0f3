from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..errors import InvalidParameter
from ..image import ColorImage


def _hex_to_rgb(hex_s: str) -> np.ndarray:
    hex_s = hex_s.lstrip("#")
    if len(hex_s) != 6:
        raise InvalidParameter(f"expected #RRGGBB color, got {hex_s!r}")
    r = int(hex_s[0:2], 16) / 255.0
    g = int(hex_s[2:4], 16) / 255.0
    b = int(hex_s[4:6], 16) / 255.0
    return np.array([r, g, b], dtype=np.float32)


def _interp_stops(stops, n: int) -> np.ndarray:
    # stops: list[(pos0..1, "#RRGGBB" or (r,g,b))], interpolated in display sRGB
    if len(stops) < 2:
        raise InvalidParameter("a ramp needs at least two stops")
    xs = np.array([s[0] for s in stops], dtype=np.float32)
    if np.any(np.diff(xs) < 0):
        raise InvalidParameter("stop positions must be non-decreasing")
    cols = []
    for s in stops:
        c = s[1]
        if isinstance(c, str):
            cols.append(_hex_to_rgb(c))
        else:
            cols.append(np.array(c, dtype=np.float32)[:3])
    cols = np.array(cols, dtype=np.float32)  # (k,3)
    x = np.linspace(0.0, 1.0, n, dtype=np.float32)
    rgb = np.column_stack([np.interp(x, xs, cols[:, i]) for i in range(3)]).astype(np.float32)
    return np.clip(rgb, 0.0, 1.0)


@dataclass(frozen=True)
class Colormap:
    name: str
    rgb: np.ndarray  # shape (N,3), display sRGB in [0, 1], float32

    def __len__(self) -> int:
        return int(self.rgb.shape[0])

    def reversed(self) -> "Colormap":
        return Colormap(self.name + "_r", self.rgb[::-1].copy())

    def to_image(self) -> ColorImage:
        """The ramp as an N x 1 ColorImage."""
        return ColorImage(len(self), 1, self.rgb)


def from_stops(name: str, stops, n: int = 256) -> Colormap:
    if n < 1:
        raise InvalidParameter(f"ramp size must be >= 1, got {n}")
    return Colormap(name=name, rgb=_interp_stops(stops, n=n))


def from_listed(name: str, colors) -> Colormap:
    """Wrap an explicit (N, 3) color table."""
    rgb = np.asarray(colors, dtype=np.float32)
    if rgb.ndim != 2 or rgb.shape[1] < 3:
        raise InvalidParameter(f"listed colors must have shape (N, 3), got {rgb.shape}")
    return Colormap(name=name, rgb=np.ascontiguousarray(rgb[:, :3]))
