# python/flipmetric/filters.py
# Separable contrast-sensitivity and edge/point feature filters driven by pixels-per-degree.
# Pure NumPy/SciPy; consumed only by the metric.
# RELEVANT FILES:python/flipmetric/metric.py,python/flipmetric/color.py,python/flipmetric/config.py,tests/test_filters.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.ndimage import correlate1d

from . import _validate
from .color import hunt_adjust, linear_rgb_to_lab, xyz_to_linear_rgb, ycxcz_to_xyz
from .config import FlipParameters

logger = logging.getLogger(__name__)

CSF_CHANNELS = ("achromatic", "red_green", "blue_yellow")

# (weight, 1-D kernel); a channel's 2-D kernel is sum(weight * outer(k, k))
SeparableTerm = Tuple[float, np.ndarray]


def csf_radius(pixels_per_degree: float, parameters: Optional[FlipParameters] = None) -> int:
    p = parameters or FlipParameters()
    b_max = max(max(b1, b2) for (_, b1, _, b2) in p.csf.values())
    return int(math.ceil(p.truncation * math.sqrt(b_max / (2.0 * math.pi ** 2)) * pixels_per_degree))


def feature_sigma(pixels_per_degree: float, parameters: Optional[FlipParameters] = None) -> float:
    p = parameters or FlipParameters()
    return 0.5 * p.feature_width * pixels_per_degree


def feature_radius(pixels_per_degree: float, parameters: Optional[FlipParameters] = None) -> int:
    p = parameters or FlipParameters()
    return max(1, int(math.ceil(p.truncation * feature_sigma(pixels_per_degree, p))))


def csf_kernels(pixels_per_degree: float, parameters: Optional[FlipParameters] = None) -> Dict[str, List[SeparableTerm]]:
    """Build the per-channel contrast sensitivity filters.

    Each channel's spatial kernel is a sum of up to two isotropic Gaussians,
    ``a * sqrt(pi / b) * exp(-pi^2 * r^2 / b)`` with ``r`` in degrees. Every
    Gaussian is separable, so the normalized 2-D kernel is returned as a list
    of weighted 1-D kernels whose outer products add up to it. All channels
    share one radius, set by the widest Gaussian.
    """
    p = parameters or FlipParameters()
    ppd = _validate.positive_finite("pixels_per_degree", pixels_per_degree)
    r = max(1, csf_radius(ppd, p))
    with np.errstate(over="ignore"):
        x = np.arange(-r, r + 1, dtype=np.float64) / ppd

    kernels: Dict[str, List[SeparableTerm]] = {}
    for channel in CSF_CHANNELS:
        a1, b1, a2, b2 = p.csf[channel]
        parts = []
        for a, b in ((a1, b1), (a2, b2)):
            if a == 0.0:
                continue
            with np.errstate(over="ignore"):
                k = np.exp(-(math.pi ** 2) * x * x / b)
            s = k.sum()
            # outer(k, k) sums to s^2; keep that mass so the weights below are exact
            parts.append((a * math.sqrt(math.pi / b) * s * s, k / s))
        total = sum(w for w, _ in parts)
        kernels[channel] = [(w / total, k) for w, k in parts]
    return kernels


def _normalize_lobes(d: np.ndarray) -> np.ndarray:
    pos = d[d > 0].sum()
    neg = -d[d < 0].sum()
    out = np.zeros_like(d)
    if pos > 0:
        out = np.where(d > 0, d / pos, out)
    if neg > 0:
        out = np.where(d < 0, d / neg, out)
    return out


def feature_kernels(pixels_per_degree: float, parameters: Optional[FlipParameters] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(edge, point, smooth)`` 1-D kernels.

    ``edge`` and ``point`` are the first and second derivative of a Gaussian
    with positive and negative lobes each normalized to unit mass; ``smooth``
    is the Gaussian itself normalized to unit sum and is applied across the
    derivative direction.
    """
    p = parameters or FlipParameters()
    ppd = _validate.positive_finite("pixels_per_degree", pixels_per_degree)
    sd = feature_sigma(ppd, p)
    r = feature_radius(ppd, p)
    x = np.arange(-r, r + 1, dtype=np.float64)
    # sd can be tiny enough that (x / sd) ** 2 overflows; the Gaussian is then 0 there
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        z2 = np.where(x == 0.0, 0.0, (x / sd) ** 2)
        g = np.exp(-0.5 * z2)
        point = np.where(g > 0.0, (z2 - 1.0) * g, 0.0)
    edge = _normalize_lobes(-x * g)
    point = _normalize_lobes(point)
    smooth = g / g.sum()
    return edge, point, smooth


def _separable(img: np.ndarray, along_x: np.ndarray, along_y: np.ndarray) -> np.ndarray:
    tmp = correlate1d(img, along_y, axis=0, mode="nearest")
    return correlate1d(tmp, along_x, axis=1, mode="nearest")


@dataclass
class FilterResponse:
    """Filtered responses of one image; lives only for the duration of a metric call."""

    hunt_lab: np.ndarray   # (H, W, 3) filtered, gamut-clamped, Hunt-adjusted Lab
    edges: np.ndarray      # (H, W) edge gradient magnitude
    points: np.ndarray     # (H, W) point gradient magnitude


class FilterBank:
    """Contrast sensitivity and feature filters for one viewing condition."""

    def __init__(self, pixels_per_degree: float, parameters: Optional[FlipParameters] = None):
        self.pixels_per_degree = _validate.positive_finite("pixels_per_degree", pixels_per_degree)
        self.parameters = parameters or FlipParameters()
        self.csf = csf_kernels(self.pixels_per_degree, self.parameters)
        self.edge, self.point, self.smooth = feature_kernels(self.pixels_per_degree, self.parameters)
        csf_r = len(next(iter(self.csf.values()))[0][1]) // 2
        self.halo = max(csf_r, len(self.smooth) // 2)
        logger.debug(
            f"FilterBank ppd={self.pixels_per_degree:.3f}: csf radius={csf_r}, "
            f"feature radius={len(self.smooth) // 2}"
        )

    def filter_color(self, ycxcz: np.ndarray) -> np.ndarray:
        """CSF-filter a YCxCz image and return Hunt-adjusted Lab of the result."""
        out = np.empty(ycxcz.shape, dtype=np.float32)
        for c, channel in enumerate(CSF_CHANNELS):
            plane = ycxcz[..., c].astype(np.float32, copy=False)
            acc = None
            for weight, k in self.csf[channel]:
                term = _separable(plane, k, k)
                acc = term * np.float32(weight) if acc is None else acc + term * np.float32(weight)
            out[..., c] = acc
        linear = np.clip(xyz_to_linear_rgb(ycxcz_to_xyz(out)), 0.0, 1.0)
        return hunt_adjust(linear_rgb_to_lab(linear))

    def detect_features(self, achromatic: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Edge and point gradient magnitudes of a [0, 1] achromatic image."""
        img = achromatic.astype(np.float32, copy=False)
        ex = _separable(img, self.edge, self.smooth)
        ey = _separable(img, self.smooth, self.edge)
        px = _separable(img, self.point, self.smooth)
        py = _separable(img, self.smooth, self.point)
        return np.hypot(ex, ey), np.hypot(px, py)

    def respond(self, ycxcz: np.ndarray) -> FilterResponse:
        achromatic = (ycxcz[..., 0] + 16.0) / 116.0
        edges, points = self.detect_features(achromatic)
        return FilterResponse(self.filter_color(ycxcz), edges, points)


__all__ = [
    "CSF_CHANNELS",
    "csf_radius",
    "feature_sigma",
    "feature_radius",
    "csf_kernels",
    "feature_kernels",
    "FilterResponse",
    "FilterBank",
]
