"""Tests for undistortion lookup tables."""

import numpy as np
import pytest

from lensmodels.geometry import (
    GeometryError,
    ModelType,
    Parameters,
    PinholeCamera,
    PinholeIntrinsics,
    init_undistort_maps,
)


def test_distortion_free_pinhole_gives_pixel_grid():
    camera = PinholeCamera(
        Parameters(ModelType.PINHOLE, "ideal", 100, 80),
        PinholeIntrinsics(0.0, 0.0, 0.0, 0.0, 100.0, 100.0, 50.0, 40.0),
    )
    map_x, map_y = init_undistort_maps(camera, 100, 80, 100.0, 100.0, 50.0, 40.0)
    assert map_x.shape == (80, 100)
    assert map_x.dtype == np.float32
    u, v = np.meshgrid(np.arange(100), np.arange(80))
    np.testing.assert_allclose(map_x, u, atol=1e-4)
    np.testing.assert_allclose(map_y, v, atol=1e-4)


def test_center_of_view_samples_principal_point(kannala_brandt_camera):
    map_x, map_y = init_undistort_maps(
        kannala_brandt_camera, 641, 481, 300.0, 300.0, 320.0, 240.0
    )
    assert map_x[240, 320] == pytest.approx(640.0)
    assert map_y[240, 320] == pytest.approx(480.0)


def test_maps_match_forward_projection(pinhole_camera):
    map_x, map_y = init_undistort_maps(pinhole_camera, 60, 40, 200.0, 200.0, 30.0, 20.0)
    ray = [(10.0 - 30.0) / 200.0, (5.0 - 20.0) / 200.0, 1.0]
    expected = pinhole_camera.space_to_plane(ray)
    assert map_x[5, 10] == pytest.approx(expected[0], abs=1e-3)
    assert map_y[5, 10] == pytest.approx(expected[1], abs=1e-3)


@pytest.mark.parametrize(
    ("width", "height", "fx"),
    [(0, 10, 1.0), (10, -1, 1.0), (10, 10, 0.0)],
)
def test_rejects_invalid_view(pinhole_camera, width, height, fx):
    with pytest.raises(GeometryError):
        init_undistort_maps(pinhole_camera, width, height, fx, 1.0, 0.0, 0.0)
