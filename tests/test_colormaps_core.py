import numpy as np
import pytest

from flipmetric import InvalidParameter, ScalarImage, create_scalar_image, read_color_image
from flipmetric.colormaps import (
    Colormap,
    RAMP_SIZE,
    available,
    build_map,
    builtin_ramp,
    color_map,
    from_listed,
    from_stops,
    get,
)


def test_core_available_min():
    keys = available()
    assert "magma" in keys
    assert "viridis" in keys


def test_magma_ramp_shape_and_endpoints():
    cm = build_map("magma")
    assert cm.rgb.shape == (RAMP_SIZE, 3)
    np.testing.assert_allclose(cm.rgb[0], [0.001462, 0.000466, 0.013866], atol=1e-5)
    np.testing.assert_allclose(cm.rgb[-1], [0.987053, 0.991438, 0.749504], atol=1e-5)


def test_builtin_ramp_is_256_by_1_image():
    ramp = builtin_ramp("magma")
    assert (ramp.width, ramp.height) == (256, 1)
    assert ramp.get(0, 0) == pytest.approx(tuple(build_map("magma").rgb[0]))


def test_monotonic_lightness():
    cm = get("magma")
    # relative luminance of display sRGB rises along magma
    lum = cm.rgb @ np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)
    assert (np.diff(lum) >= -1e-3).all()


def test_hash_determinism():
    cm1 = get("magma")
    cm2 = get("magma")
    assert np.allclose(cm1.rgb, cm2.rgb)


def test_unknown_ramp():
    with pytest.raises(InvalidParameter):
        build_map("does-not-exist")
    with pytest.raises(KeyError):
        get("does-not-exist")


@pytest.mark.parametrize("value,index", [(0.0, 0), (1.0, -1)])
def test_constant_maps_to_ramp_endpoint(value, index):
    cm = build_map("magma")
    err = ScalarImage(5, 4, np.full((4, 5), value, dtype=np.float32))
    out = color_map(err, builtin_ramp("magma")).as_array()
    np.testing.assert_array_equal(out, np.broadcast_to(cm.rgb[index], out.shape))


def test_out_of_range_errors_are_clamped():
    cm = build_map("magma")
    err = create_scalar_image(2, 1, [-3.0, 7.0])
    out = color_map(err, cm)
    assert out.get(0, 0) == pytest.approx(tuple(cm.rgb[0]))
    assert out.get(1, 0) == pytest.approx(tuple(cm.rgb[-1]))


def test_index_rounds_to_nearest():
    ramp = from_listed("steps", [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5], [1.0, 1.0, 1.0]])
    err = create_scalar_image(4, 1, [0.2, 0.3, 0.74, 0.76])
    out = color_map(err, ramp)
    assert [out.get(x, 0)[0] for x in range(4)] == pytest.approx([0.0, 0.5, 0.5, 1.0])


def test_custom_array_ramp_and_empty_ramp():
    err = create_scalar_image(1, 1, [0.9])
    out = color_map(err, np.array([[1.0, 0.0, 0.0]], dtype=np.float32))
    assert out.get(0, 0) == pytest.approx((1.0, 0.0, 0.0))
    with pytest.raises(InvalidParameter):
        color_map(err, np.zeros((0, 3), dtype=np.float32))
    with pytest.raises(InvalidParameter):
        color_map(err, Colormap("empty", np.zeros((0, 3), dtype=np.float32)))


def test_from_stops_gray_encodes_linearly():
    gray = from_stops("g", [(0.0, "#000000"), (1.0, "#FFFFFF")], n=256)
    err = create_scalar_image(3, 1, [0.0, 0.5, 1.0])
    data = read_color_image(color_map(err, gray))
    assert list(data) == [0, 0, 0, 128, 128, 128, 255, 255, 255]


def test_reversed():
    cm = build_map("viridis")
    np.testing.assert_array_equal(cm.reversed().rgb[0], cm.rgb[-1])
    assert cm.reversed().name == "viridis_r"
