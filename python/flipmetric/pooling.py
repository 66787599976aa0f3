# python/flipmetric/pooling.py
# Streaming min/max/mean and (value-weighted) percentile aggregator over error values.
# Owns exactly one Histogram; percentiles are derived from it on demand.
# RELEVANT FILES:python/flipmetric/histogram.py,python/flipmetric/report.py,tests/test_pooling.py

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from . import _validate
from .config import load_metric_config
from .errors import InvalidParameter
from .histogram import Histogram
from .image import ScalarImage

logger = logging.getLogger(__name__)


class Pool:
    """Aggregate error values into running statistics and a histogram.

    Empty pools report NaN for ``min_value``, ``max_value``, ``mean`` and the
    unweighted percentile. The weighted percentile raises ``InvalidParameter``
    when the accumulated weight is zero.

    A percentile is reported as the center of the bucket that reaches it,
    ``min + (id + 0.5) * bucket_step``.
    """

    def __init__(self, bucket_count: int = 100, min_value: float = 0.0, max_value: float = 1.0):
        self._histogram = Histogram(bucket_count, min_value, max_value)
        self.clear()

    def clear(self) -> None:
        self._histogram.clear()
        self._count = 0
        self._sum = 0.0
        self._min = math.inf
        self._max = -math.inf
        self._min_coord: Optional[Tuple[int, int]] = None
        self._max_coord: Optional[Tuple[int, int]] = None

    @property
    def histogram(self) -> Histogram:
        """Snapshot of the backing histogram."""
        return self._histogram.copy()

    @property
    def count(self) -> int:
        return self._count

    @property
    def min_value(self) -> float:
        return self._min if self._count else math.nan

    @property
    def max_value(self) -> float:
        return self._max if self._count else math.nan

    @property
    def min_coord(self) -> Optional[Tuple[int, int]]:
        """(x, y) of the first observation holding the minimum."""
        return self._min_coord

    @property
    def max_coord(self) -> Optional[Tuple[int, int]]:
        return self._max_coord

    @property
    def mean(self) -> float:
        return self._sum / self._count if self._count else math.nan

    def update(self, x: int, y: int, value: float) -> None:
        v = float(value)
        if not math.isfinite(v):
            raise InvalidParameter(f"cannot pool non-finite value {value!r}")
        self._histogram.increment(v)
        self._count += 1
        self._sum += v
        if v < self._min:
            self._min = v
            self._min_coord = (int(x), int(y))
        if v > self._max:
            self._max = v
            self._max_coord = (int(x), int(y))

    def update_image(self, image: ScalarImage, *, workers: Optional[int] = None) -> None:
        """Feed every pixel of ``image`` in row-major order.

        With more than one worker, rows are split into tiles, each tile fills
        its own partial histogram and the partials are merged afterwards.
        """
        if not isinstance(image, ScalarImage):
            raise InvalidParameter(f"expected ScalarImage, got {type(image).__name__}")
        arr = _validate.all_finite("image", image.as_array())
        n_workers = load_metric_config().workers if workers is None else int(workers)
        if n_workers < 1:
            raise InvalidParameter(f"workers must be >= 1, got {workers}")

        h, w = arr.shape
        step = max(1, math.ceil(h / n_workers))
        bands: List[Tuple[int, int]] = [(y0, min(h, y0 + step)) for y0 in range(0, h, step)]

        def _partial(band: Tuple[int, int]) -> Histogram:
            part = Histogram(self._histogram.bucket_count, self._histogram.min_value, self._histogram.max_value)
            part.increment_values(arr[band[0]:band[1]])
            return part

        if len(bands) == 1:
            partials = [_partial(bands[0])]
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as ex:
                partials = list(ex.map(_partial, bands))
        for part in partials:
            self._histogram.merge(part)

        lo_idx = int(np.argmin(arr))
        hi_idx = int(np.argmax(arr))
        lo = float(arr.flat[lo_idx])
        hi = float(arr.flat[hi_idx])
        if lo < self._min:
            self._min = lo
            self._min_coord = (lo_idx % w, lo_idx // w)
        if hi > self._max:
            self._max = hi
            self._max_coord = (hi_idx % w, hi_idx // w)
        self._count += arr.size
        self._sum += float(arr.sum(dtype=np.float64))
        logger.debug(f"pooled {arr.size} values from {w}x{h} image in {len(bands)} band(s)")

    def percentile(self, p: float, weighted: bool = False) -> float:
        """Value at fraction ``p`` of the pooled data.

        Unweighted: walk buckets in ascending order until the cumulative count
        reaches ``p * count`` ("what value sits at rank p").

        Weighted: each bucket contributes ``center * count`` and the walk stops
        once ``p`` of the total magnitude is covered ("which value captures p
        of the total error"). Only defined for ranges starting at or above 0.
        """
        q = _validate.unit_interval("percentile", p)
        counts = self._histogram.counts()
        if weighted:
            if self._histogram.min_value < 0.0:
                raise InvalidParameter(
                    f"weighted percentiles need a range starting at or above 0, got min_value={self._histogram.min_value}"
                )
            weights = counts * self._histogram.centers()
        else:
            weights = counts.astype(np.float64)
        cum = np.cumsum(weights)
        total = float(cum[-1])
        if total <= 0.0:
            if weighted:
                raise InvalidParameter("weighted percentile of a pool with zero total weight")
            return math.nan
        hits = np.flatnonzero((cum >= q * total) & (counts > 0))
        bucket_id = int(hits[0]) if hits.size else int(np.flatnonzero(counts)[-1])
        return self._histogram.bucket_center(bucket_id)

    def weighted_percentile(self, p: float) -> float:
        return self.percentile(p, weighted=True)

    def __repr__(self) -> str:
        return f"Pool(count={self._count}, buckets={self._histogram.bucket_count})"


__all__ = ["Pool"]
