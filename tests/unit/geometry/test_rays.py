"""Tests for pixel to world ray casting."""

import numpy as np
import pytest

from lensmodels.geometry import (
    GeometryError,
    as_rotation_matrix,
    camera_to_world_ray,
    pixel_to_camera_ray,
    pixel_to_world_ray,
    project_points,
)

_RVEC = np.array([0.3, -0.1, 0.2])
_TVEC = np.array([0.5, -0.2, 2.0])


def test_pixel_to_camera_ray_is_unit(any_camera):
    ray = pixel_to_camera_ray(any_camera, 400.0, 300.0)
    assert ray.shape == (3,)
    assert np.linalg.norm(ray) == pytest.approx(1.0)


def test_camera_center_is_ray_origin():
    ray = camera_to_world_ray(np.array([0.0, 0.0, 1.0]), _RVEC, _TVEC)
    R = as_rotation_matrix(_RVEC)
    np.testing.assert_allclose(ray.origin, -R.T @ _TVEC)
    np.testing.assert_allclose(ray.direction, R.T @ np.array([0.0, 0.0, 1.0]))


def test_world_ray_passes_through_projected_point(any_camera):
    world_point = np.array([0.2, 0.1, 0.3])
    pixel = project_points(any_camera, world_point[None], _RVEC, _TVEC)[0]
    ray = pixel_to_world_ray(any_camera, pixel[0], pixel[1], _RVEC, _TVEC)

    to_point = world_point - ray.origin
    assert np.dot(to_point, ray.direction) > 0.0
    np.testing.assert_allclose(
        np.cross(to_point / np.linalg.norm(to_point), ray.direction), 0.0, atol=1e-9
    )


def test_zero_direction_is_rejected():
    with pytest.raises(GeometryError, match="Degenerate"):
        camera_to_world_ray(np.zeros(3), np.eye(3), np.zeros(3))
