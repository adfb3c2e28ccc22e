"""Tests for rotation normalization helpers."""

import cv2
import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from lensmodels.geometry import (
    GeometryError,
    as_rotation_matrix,
    rotation_to_rvec,
    transform_points,
)

_RVEC = np.array([0.1, -0.2, 0.3])


def _rodrigues(rvec: np.ndarray) -> np.ndarray:
    R, _ = cv2.Rodrigues(rvec.reshape(3, 1))
    return R


class TestAsRotationMatrix:
    def test_quaternion_via_scipy(self):
        # 90 degrees about z, scalar-last
        quat = [0.0, 0.0, np.sin(np.pi / 4), np.cos(np.pi / 4)]
        R = as_rotation_matrix(Rotation.from_quat(quat))
        expected = _rodrigues(np.array([0.0, 0.0, np.pi / 2]))
        np.testing.assert_allclose(R, expected, atol=1e-12)

    def test_matrix_passes_through(self):
        R = _rodrigues(_RVEC)
        np.testing.assert_array_equal(as_rotation_matrix(R), R)

    @pytest.mark.parametrize("shape", [(3,), (3, 1), (1, 3)])
    def test_axis_angle_shapes(self, shape):
        np.testing.assert_allclose(
            as_rotation_matrix(_RVEC.reshape(shape)), _rodrigues(_RVEC)
        )

    def test_zero_rvec_is_identity(self):
        np.testing.assert_allclose(as_rotation_matrix(np.zeros(3)), np.eye(3))

    def test_rejects_unknown_shape(self):
        with pytest.raises(GeometryError):
            as_rotation_matrix(np.zeros(4))


def test_rotation_to_rvec_round_trip():
    np.testing.assert_allclose(rotation_to_rvec(Rotation.from_rotvec(_RVEC)), _RVEC)


def test_transform_points_applies_rotation_then_translation():
    pts = np.array([[1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
    rz90 = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    out = transform_points(pts, rz90, [0.0, 0.0, 5.0])
    np.testing.assert_allclose(out, [[0.0, 1.0, 5.0], [-2.0, 0.0, 5.0]])


def test_transform_points_rejects_bad_translation():
    with pytest.raises(GeometryError):
        transform_points(np.zeros((1, 3)), np.eye(3), [1.0, 2.0])
