"""
LDR-FLIP perceptual difference between a reference and a test image.

The metric filters both images with contrast sensitivity kernels scaled by the
viewing condition (pixels per degree of visual angle), measures a calibrated
color distance (HyAB on Hunt-adjusted CIELAB), measures a feature distance
from edge and point detectors on the achromatic channel, and blends the two
into one error value in [0, 1] per pixel.

Rows can be split into tiles computed on worker threads. Every tile reads
``halo`` real neighbor rows on each side, so the result does not depend on
the tiling or the worker count.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from . import _validate
from .color import hunt_adjust, hyab, linear_rgb_to_lab, srgb_to_ycxcz
from .config import ConfigSource, FlipParameters, load_metric_config
from .errors import InvalidParameter
from .filters import FilterBank
from .image import ColorImage, ScalarImage

logger = logging.getLogger(__name__)

# Roughly a 0.7 m wide 3840-pixel monitor viewed from 0.7 m
DEFAULT_PIXELS_PER_DEGREE = 67.0


def pixels_per_degree(distance: float, resolution_x: float, monitor_width: float) -> float:
    """Pixels per degree of visual angle for a monitor setup.

    Args:
        distance: Viewing distance in meters.
        resolution_x: Horizontal monitor resolution in pixels.
        monitor_width: Monitor width in meters.
    """
    d = _validate.positive_finite("distance", distance)
    rx = _validate.positive_finite("resolution_x", resolution_x)
    mw = _validate.positive_finite("monitor_width", monitor_width)
    return d * (rx / mw) * (math.pi / 180.0)


def max_color_distance(parameters: Optional[FlipParameters] = None) -> float:
    """HyAB^qc distance between pure green and pure blue, the largest the color term normalizes by."""
    p = parameters or FlipParameters()
    primaries = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0]], dtype=np.float32)
    hunt = hunt_adjust(linear_rgb_to_lab(primaries))
    return float(hyab(hunt[0], hunt[1])) ** p.qc


def _redistribute(delta: np.ndarray, cmax: float, p: FlipParameters) -> np.ndarray:
    pccmax = p.pc * cmax
    low = (p.pt / pccmax) * delta
    high = p.pt + ((delta - pccmax) / (cmax - pccmax)) * (1.0 - p.pt)
    return np.where(delta < pccmax, low, high)


def color_difference(ref_hunt: np.ndarray, test_hunt: np.ndarray, parameters: Optional[FlipParameters] = None) -> np.ndarray:
    p = parameters or FlipParameters()
    delta = np.power(hyab(ref_hunt, test_hunt).astype(np.float64), p.qc)
    return _redistribute(delta, max_color_distance(p), p)


def feature_difference(ref_edges: np.ndarray, ref_points: np.ndarray,
                       test_edges: np.ndarray, test_points: np.ndarray,
                       parameters: Optional[FlipParameters] = None) -> np.ndarray:
    p = parameters or FlipParameters()
    edge_diff = np.abs(ref_edges.astype(np.float64) - test_edges)
    point_diff = np.abs(ref_points.astype(np.float64) - test_points)
    return np.power(np.maximum(edge_diff, point_diff) / math.sqrt(2.0), p.qf)


def _row_tiles(height: int, tile_rows: int) -> List[Tuple[int, int]]:
    return [(y0, min(height, y0 + tile_rows)) for y0 in range(0, height, tile_rows)]


def _compute_tile(bank: FilterBank, ref_ycxcz: np.ndarray, test_ycxcz: np.ndarray,
                  y0: int, y1: int, out: np.ndarray) -> None:
    h = ref_ycxcz.shape[0]
    s0 = max(0, y0 - bank.halo)
    s1 = min(h, y1 + bank.halo)
    ref = bank.respond(ref_ycxcz[s0:s1])
    test = bank.respond(test_ycxcz[s0:s1])
    rows = slice(y0 - s0, y1 - s0)
    p = bank.parameters
    dc = color_difference(ref.hunt_lab[rows], test.hunt_lab[rows], p)
    df = feature_difference(ref.edges[rows], ref.points[rows], test.edges[rows], test.points[rows], p)
    err = np.power(dc, 1.0 - df)
    out[y0:y1] = np.clip(err, 0.0, 1.0).astype(np.float32)


def compute_error_map(reference: ColorImage, test: ColorImage,
                      pixels_per_degree: float = DEFAULT_PIXELS_PER_DEGREE,
                      *, config: ConfigSource = None) -> ScalarImage:
    """Compute the per-pixel FLIP error map between two sRGB images.

    Args:
        reference: Reference image, normalized sRGB values.
        test: Test image with the same dimensions.
        pixels_per_degree: Viewing condition; larger means finer detail is visible.
        config: Optional MetricConfig, mapping or JSON path (workers, tile_rows, parameters).

    Returns:
        New ScalarImage with values in [0, 1]; exactly zero where the images agree.

    Raises:
        DimensionMismatch: Reference and test differ in size.
        InvalidParameter: pixels_per_degree not finite and positive, or non-finite pixels.
    """
    if not isinstance(reference, ColorImage) or not isinstance(test, ColorImage):
        raise InvalidParameter("reference and test must be ColorImage instances")
    _validate.same_size(reference, test, "reference and test images")
    ppd = _validate.positive_finite("pixels_per_degree", pixels_per_degree)
    cfg = load_metric_config(config)

    ref_arr = _validate.all_finite("reference", reference.as_array())
    test_arr = _validate.all_finite("test", test.as_array())

    bank = FilterBank(ppd, cfg.parameters)
    ref_ycxcz = srgb_to_ycxcz(ref_arr)
    test_ycxcz = srgb_to_ycxcz(test_arr)

    h, w = reference.height, reference.width
    out = np.zeros((h, w), dtype=np.float32)
    tiles = _row_tiles(h, cfg.tile_rows)
    logger.debug(f"compute_error_map {w}x{h} ppd={ppd:.3f}: {len(tiles)} tile(s), workers={cfg.workers}")

    if cfg.workers == 1 or len(tiles) == 1:
        for y0, y1 in tiles:
            _compute_tile(bank, ref_ycxcz, test_ycxcz, y0, y1, out)
    else:
        with ThreadPoolExecutor(max_workers=cfg.workers) as pool:
            futures = [pool.submit(_compute_tile, bank, ref_ycxcz, test_ycxcz, y0, y1, out) for y0, y1 in tiles]
            for f in futures:
                f.result()

    return ScalarImage(w, h, out)


__all__ = [
    "DEFAULT_PIXELS_PER_DEGREE",
    "pixels_per_degree",
    "max_color_distance",
    "color_difference",
    "feature_difference",
    "compute_error_map",
]
