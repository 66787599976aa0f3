# tests/test_pooling.py
# Running statistics and frequency- vs value-weighted percentiles.
# RELEVANT FILES:python/flipmetric/pooling.py,python/flipmetric/histogram.py

import math

import numpy as np
import pytest

from flipmetric import InvalidParameter, Pool, ScalarImage, create_scalar_image


def test_mean_of_known_sequence():
    pool = Pool(100)
    for i, v in enumerate([0.1, 0.2, 0.3]):
        pool.update(i, 0, v)
    assert pool.mean == pytest.approx(0.2)
    assert pool.min_value == pytest.approx(0.1)
    assert pool.max_value == pytest.approx(0.3)
    assert pool.count == 3


def test_empty_pool_sentinels():
    pool = Pool(10)
    assert math.isnan(pool.mean)
    assert math.isnan(pool.min_value)
    assert math.isnan(pool.max_value)
    assert math.isnan(pool.percentile(0.5))
    with pytest.raises(InvalidParameter):
        pool.percentile(0.5, weighted=True)


def test_percentiles_ordered(rng):
    pool = Pool(64)
    pool.update_image(ScalarImage(16, 16, rng.random((16, 16))))
    for weighted in (False, True):
        p0 = pool.percentile(0.0, weighted)
        p5 = pool.percentile(0.5, weighted)
        p1 = pool.percentile(1.0, weighted)
        assert p0 <= p5 <= p1


def test_percentile_reports_bucket_center():
    pool = Pool(10)
    for v in (0.12, 0.13, 0.57, 0.91):
        pool.update(0, 0, v)
    assert pool.percentile(0.0) == pytest.approx(0.15)
    assert pool.percentile(0.5) == pytest.approx(0.15)
    assert pool.percentile(0.75) == pytest.approx(0.55)
    assert pool.percentile(1.0) == pytest.approx(0.95)


def test_weighted_differs_from_unweighted():
    # nine tiny errors and one large: rank median is small, magnitude median is large
    pool = Pool(10)
    for _ in range(9):
        pool.update(0, 0, 0.01)
    pool.update(0, 0, 0.99)
    assert pool.percentile(0.5) == pytest.approx(0.05)
    # weights: 9 * 0.05 = 0.45 vs 0.95 -> half the magnitude lies in the top bucket
    assert pool.percentile(0.5, weighted=True) == pytest.approx(0.95)
    assert pool.weighted_percentile(0.25) == pytest.approx(0.05)


@pytest.mark.parametrize("p", [-0.01, 1.01])
def test_percentile_range(p):
    pool = Pool(4)
    pool.update(0, 0, 0.5)
    with pytest.raises(InvalidParameter):
        pool.percentile(p)


def test_coordinates_of_extremes():
    pool = Pool(10)
    pool.update(3, 1, 0.5)
    pool.update(7, 2, 0.1)
    pool.update(0, 9, 0.8)
    assert pool.min_coord == (7, 2)
    assert pool.max_coord == (0, 9)


def test_update_image_matches_per_pixel_updates(rng):
    values = rng.random((9, 7)).astype(np.float32)
    img = ScalarImage(7, 9, values)
    bulk = Pool(32)
    bulk.update_image(img, workers=3)
    single = Pool(32)
    for y in range(9):
        for x in range(7):
            single.update(x, y, img.get(x, y))
    np.testing.assert_array_equal(bulk.histogram.counts(), single.histogram.counts())
    assert bulk.count == single.count == 63
    assert bulk.mean == pytest.approx(single.mean)
    assert bulk.min_value == single.min_value
    assert bulk.max_value == single.max_value
    assert bulk.min_coord == single.min_coord
    assert bulk.max_coord == single.max_coord


def test_non_finite_rejected():
    pool = Pool(4)
    with pytest.raises(InvalidParameter):
        pool.update(0, 0, float("nan"))
    with pytest.raises(InvalidParameter):
        pool.update_image(create_scalar_image(2, 1, [0.1, float("inf")]))
    assert pool.count == 0


def test_histogram_is_a_snapshot():
    pool = Pool(4)
    pool.update(0, 0, 0.3)
    snap = pool.histogram
    snap.increment(0.9)
    assert pool.histogram.total == 1


def test_clear():
    pool = Pool(4)
    pool.update(0, 0, 0.3)
    pool.clear()
    assert pool.count == 0
    assert math.isnan(pool.mean)
    assert pool.min_coord is None


def test_weighted_percentile_needs_non_negative_range():
    pool = Pool(4, -1.0, 1.0)
    for v in (-0.9, -0.9, 0.9):
        pool.update(0, 0, v)
    assert pool.percentile(0.5) == pytest.approx(-0.75)
    with pytest.raises(InvalidParameter, match="at or above 0"):
        pool.percentile(0.5, weighted=True)
    with pytest.raises(InvalidParameter, match="at or above 0"):
        pool.weighted_percentile(0.9)
