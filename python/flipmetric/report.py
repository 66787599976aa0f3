"""
Quality report helpers: scalar summaries of an error map and a histogram plot.

The summary mirrors what the FLIP tool prints for a comparison: mean error,
weighted median and weighted quartiles, minimum and maximum.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional, Tuple

import numpy as np

from .config import ConfigSource, load_metric_config
from .image import ColorImage, ScalarImage
from .metric import DEFAULT_PIXELS_PER_DEGREE, compute_error_map
from .pooling import Pool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlipSummary:
    mean: float
    weighted_median: float
    weighted_q1: float
    weighted_q3: float
    min: float
    max: float
    count: int

    def to_dict(self) -> dict:
        return asdict(self)


def summarize(pool: Pool) -> FlipSummary:
    """Collect the standard statistics from a populated pool.

    Weighted percentiles are NaN when the pool holds no weight or its range
    starts below zero.
    """
    hist = pool.histogram
    has_weight = hist.min_value >= 0.0 and float(np.sum(hist.counts() * hist.centers())) > 0.0

    def _weighted(p: float) -> float:
        return pool.percentile(p, weighted=True) if has_weight else math.nan

    return FlipSummary(
        mean=pool.mean,
        weighted_median=_weighted(0.5),
        weighted_q1=_weighted(0.25),
        weighted_q3=_weighted(0.75),
        min=pool.min_value,
        max=pool.max_value,
        count=pool.count,
    )


def evaluate(reference: ColorImage, test: ColorImage,
             pixels_per_degree: float = DEFAULT_PIXELS_PER_DEGREE,
             *, bucket_count: int = 100, config: ConfigSource = None) -> Tuple[ScalarImage, FlipSummary]:
    """Compute the error map of two images and summarize it."""
    cfg = load_metric_config(config)
    error_map = compute_error_map(reference, test, pixels_per_degree, config=cfg)
    pool = Pool(bucket_count)
    pool.update_image(error_map, workers=cfg.workers)
    summary = summarize(pool)
    logger.debug(f"evaluate: mean={summary.mean:.6f} weighted_median={summary.weighted_median:.6f}")
    return error_map, summary


def plot_histogram(pool: Pool, ax=None, *, weighted: bool = True, color: str = "#DE4968"):
    """Draw the pooled error histogram and mark the mean and weighted median.

    Args:
        pool: Populated pool.
        ax: Matplotlib Axes to draw into; a new figure is created when None.
        weighted: Plot ``center * count`` per bucket instead of raw counts.
        color: Bar color.

    Returns:
        The Axes drawn into.
    """
    if ax is None:
        import matplotlib.pyplot as plt
        _, ax = plt.subplots(figsize=(6, 3.5))

    hist = pool.histogram
    centers = hist.centers()
    heights = hist.counts().astype(np.float64)
    if weighted:
        heights = heights * centers
    ax.bar(centers, heights, width=hist.bucket_step, color=color, align="center")
    ax.set_xlim(hist.min_value, hist.max_value)
    ax.set_xlabel("error")
    ax.set_ylabel("weighted count" if weighted else "count")

    summary = summarize(pool)
    if not math.isnan(summary.mean):
        ax.axvline(summary.mean, color="black", linestyle="--", label=f"mean {summary.mean:.4f}")
    if not math.isnan(summary.weighted_median):
        ax.axvline(summary.weighted_median, color="gray", linestyle=":",
                   label=f"weighted median {summary.weighted_median:.4f}")
    if ax.get_legend_handles_labels()[0]:
        ax.legend(loc="upper right")
    return ax


__all__ = ["FlipSummary", "summarize", "evaluate", "plot_histogram"]
