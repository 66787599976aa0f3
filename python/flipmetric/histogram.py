"""
Fixed-bucket histogram over a scalar value range.

Values outside ``[min_value, max_value)`` saturate into the first or last
bucket instead of being discarded, so the total count always equals the
number of observations. Non-finite values are rejected.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from . import _validate
from .errors import DimensionMismatch, InvalidParameter, OutOfBounds
from .image import ScalarImage


class Histogram:
    """Frequency counts in ``bucket_count`` equal-width buckets.

    Args:
        bucket_count: Number of buckets, at least 1.
        min_value: Lower edge of bucket 0.
        max_value: Upper edge of the last bucket; must exceed ``min_value``.
    """

    def __init__(self, bucket_count: int, min_value: float = 0.0, max_value: float = 1.0):
        lo = float(min_value)
        hi = float(max_value)
        if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi:
            raise InvalidParameter(f"histogram range must satisfy min < max, got [{min_value}, {max_value})")
        self._min = lo
        self._max = hi
        self._counts = np.zeros(self._check_count(bucket_count), dtype=np.int64)

    @staticmethod
    def _check_count(bucket_count) -> int:
        n = int(bucket_count)
        if n < 1:
            raise InvalidParameter(f"bucket_count must be >= 1, got {bucket_count}")
        return n

    @property
    def bucket_count(self) -> int:
        return int(self._counts.shape[0])

    @property
    def min_value(self) -> float:
        return self._min

    @property
    def max_value(self) -> float:
        return self._max

    @property
    def bucket_step(self) -> float:
        return (self._max - self._min) / self.bucket_count

    @property
    def total(self) -> int:
        return int(self._counts.sum())

    def __len__(self) -> int:
        return self.bucket_count

    def _bucket_ids(self, values: np.ndarray) -> np.ndarray:
        ids = np.floor((values.astype(np.float64) - self._min) / self.bucket_step)
        return np.clip(ids, 0, self.bucket_count - 1).astype(np.intp)

    def value_bucket_id(self, value: float) -> int:
        """Bucket index for ``value``, saturating at both ends."""
        v = float(value)
        if not math.isfinite(v):
            raise InvalidParameter(f"cannot bucket non-finite value {value!r}")
        return int(self._bucket_ids(np.array([v]))[0])

    def increment(self, value: float, count: int = 1) -> None:
        c = int(count)
        if c < 0:
            raise InvalidParameter(f"count must be >= 0, got {count}")
        self._counts[self.value_bucket_id(value)] += c

    def increment_values(self, values) -> None:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.size == 0:
            return
        _validate.all_finite("values", arr)
        self._counts += np.bincount(self._bucket_ids(arr), minlength=self.bucket_count)

    def increment_image(self, image: ScalarImage) -> None:
        if not isinstance(image, ScalarImage):
            raise InvalidParameter(f"expected ScalarImage, got {type(image).__name__}")
        self.increment_values(image.as_array())

    def _check_id(self, bucket_id: int) -> int:
        i = int(bucket_id)
        if not (0 <= i < self.bucket_count):
            raise OutOfBounds(f"bucket id {bucket_id} outside [0, {self.bucket_count})")
        return i

    def bucket_value(self, bucket_id: int) -> int:
        return int(self._counts[self._check_id(bucket_id)])

    def bucket_lower(self, bucket_id: int) -> float:
        return self._min + self._check_id(bucket_id) * self.bucket_step

    def bucket_center(self, bucket_id: int) -> float:
        return self._min + (self._check_id(bucket_id) + 0.5) * self.bucket_step

    def centers(self) -> np.ndarray:
        return self._min + (np.arange(self.bucket_count, dtype=np.float64) + 0.5) * self.bucket_step

    def bucket_id_min(self) -> Optional[int]:
        """Lowest non-empty bucket, or None when empty."""
        nz = np.flatnonzero(self._counts)
        return int(nz[0]) if nz.size else None

    def bucket_id_max(self) -> Optional[int]:
        """Highest non-empty bucket, or None when empty."""
        nz = np.flatnonzero(self._counts)
        return int(nz[-1]) if nz.size else None

    def counts(self) -> np.ndarray:
        return self._counts.copy()

    def clear(self) -> None:
        self._counts[...] = 0

    def resize(self, bucket_count: int) -> None:
        """Change the bucket count; all counts reset, range unchanged."""
        self._counts = np.zeros(self._check_count(bucket_count), dtype=np.int64)

    def merge(self, other: "Histogram") -> None:
        """Add another histogram's counts bucket by bucket. Geometry must match."""
        if (other.bucket_count, other.min_value, other.max_value) != (self.bucket_count, self._min, self._max):
            raise DimensionMismatch(
                f"cannot merge histogram {other.bucket_count}@[{other.min_value}, {other.max_value}) "
                f"into {self.bucket_count}@[{self._min}, {self._max})"
            )
        self._counts += other._counts

    def copy(self) -> "Histogram":
        out = Histogram(self.bucket_count, self._min, self._max)
        out._counts = self._counts.copy()
        return out

    def __repr__(self) -> str:
        return f"Histogram(buckets={self.bucket_count}, range=[{self._min}, {self._max}), total={self.total})"


__all__ = ["Histogram"]
