# tests/test_metric.py
# FLIP error map: identity, range, symmetry, monotonicity, determinism and tiling.
# RELEVANT FILES:python/flipmetric/metric.py,python/flipmetric/filters.py,python/flipmetric/config.py

import math

import numpy as np
import pytest

from flipmetric import (
    DEFAULT_PIXELS_PER_DEGREE,
    ColorImage,
    DimensionMismatch,
    InvalidParameter,
    ScalarImage,
    compute_error_map,
    create_color_image,
    pixels_per_degree,
    read_scalar_image,
)
from flipmetric.metric import max_color_distance


def _uniform(w, h, rgb):
    return ColorImage(w, h, np.broadcast_to(np.asarray(rgb, dtype=np.float32), (h, w, 3)))


def _noisy(rng, w=24, h=20):
    return ColorImage(w, h, rng.random((h, w, 3), dtype=np.float32))


@pytest.mark.parametrize("ppd", [1.0, 30.0, DEFAULT_PIXELS_PER_DEGREE])
def test_identical_images_give_exact_zero(rng, ppd):
    img = _noisy(rng)
    err = compute_error_map(img, img.clone(), ppd)
    assert isinstance(err, ScalarImage)
    assert (err.width, err.height) == (img.width, img.height)
    assert np.all(read_scalar_image(err) == 0.0)


def test_identical_checkerboard_gives_zero(checker_rgb8):
    w, h, raw = checker_rgb8
    a = create_color_image(w, h, raw)
    b = create_color_image(w, h, raw)
    assert np.all(read_scalar_image(compute_error_map(a, b, 30.0)) == 0.0)


def test_black_vs_white_is_uniform_and_near_one():
    black = _uniform(2, 2, (0.0, 0.0, 0.0))
    white = _uniform(2, 2, (1.0, 1.0, 1.0))
    values = read_scalar_image(compute_error_map(black, white, 30.0))
    assert values.shape == (4,)
    np.testing.assert_allclose(values, values[0], atol=1e-6)
    assert values[0] > 0.9
    assert values[0] <= 1.0


@pytest.mark.parametrize("ppd", [2.0, 30.0, 67.0])
def test_values_within_unit_interval(rng, ppd):
    a = _noisy(rng)
    b = ColorImage(a.width, a.height, rng.normal(0.5, 0.8, size=(a.height, a.width, 3)))
    values = read_scalar_image(compute_error_map(a, b, ppd))
    assert values.min() >= 0.0
    assert values.max() <= 1.0


@pytest.mark.parametrize("ppd", [1e-3, 1e-160, 1e-200, 5e-324])
def test_tiny_ppd_stays_finite_and_in_range(rng, ppd):
    a = _noisy(rng, 4, 4)
    b = _noisy(rng, 4, 4)
    values = read_scalar_image(compute_error_map(a, b, ppd))
    assert np.isfinite(values).all()
    assert values.min() >= 0.0
    assert values.max() <= 1.0


def test_monotonic_in_color_divergence():
    reference = _uniform(8, 8, (0.1, 0.1, 0.1))
    previous = -1.0
    for level in np.linspace(0.1, 1.0, 10):
        test = _uniform(8, 8, (level, level, level))
        value = read_scalar_image(compute_error_map(reference, test, 30.0))[27]
        assert value >= previous
        previous = value


def test_deterministic(rng):
    a = _noisy(rng)
    b = _noisy(rng, a.width, a.height)
    first = compute_error_map(a, b, 40.0)
    second = compute_error_map(a, b, 40.0)
    assert first == second


def test_inputs_not_mutated(rng):
    a = _noisy(rng)
    b = _noisy(rng, a.width, a.height)
    a0, b0 = a.clone(), b.clone()
    compute_error_map(a, b, 30.0)
    assert a == a0 and b == b0


def test_tiling_and_workers_do_not_change_result(rng):
    a = _noisy(rng, 20, 37)
    b = _noisy(rng, 20, 37)
    whole = read_scalar_image(compute_error_map(a, b, 30.0))
    tiled = read_scalar_image(compute_error_map(a, b, 30.0, config={"tile_rows": 5, "workers": 3}))
    np.testing.assert_array_equal(tiled, whole)


def test_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        compute_error_map(ColorImage(4, 4), ColorImage(4, 5), 30.0)


@pytest.mark.parametrize("ppd", [0.0, -1.0, float("nan"), float("inf")])
def test_invalid_ppd(ppd):
    img = ColorImage(3, 3)
    with pytest.raises(InvalidParameter):
        compute_error_map(img, img, ppd)


def test_non_finite_pixels_rejected():
    a = ColorImage(2, 2)
    b = ColorImage(2, 2)
    b.set(1, 1, (float("nan"), 0.0, 0.0))
    with pytest.raises(InvalidParameter):
        compute_error_map(a, b, 30.0)


def test_scalar_images_rejected():
    with pytest.raises(InvalidParameter):
        compute_error_map(ScalarImage(2, 2), ScalarImage(2, 2), 30.0)


def test_pixels_per_degree_default_monitor():
    assert pixels_per_degree(0.7, 3840.0, 0.7) == pytest.approx(DEFAULT_PIXELS_PER_DEGREE, abs=0.05)
    assert pixels_per_degree(1.0, 180.0, 1.0) == pytest.approx(math.pi)
    with pytest.raises(InvalidParameter):
        pixels_per_degree(0.7, 3840.0, 0.0)


def test_max_color_distance_is_green_blue():
    cmax = max_color_distance()
    assert 35.0 < cmax < 50.0
