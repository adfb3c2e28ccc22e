from typing import Any

import cv2
import numpy as np
from jaxtyping import Float
from scipy.spatial.transform import Rotation

from .types import GeometryError

RotationLike = Rotation | Float[np.ndarray, "..."]


def as_rotation_matrix(rotation: RotationLike) -> Float[np.ndarray, "3 3"]:
    """
    Accept any supported rotation representation and return a 3x3 matrix:
    - scipy Rotation (e.g. Rotation.from_quat for quaternions)
    - 3x3 rotation matrix
    - axis-angle vector of shape (3,), (3, 1) or (1, 3), converted with cv2.Rodrigues
    """
    if isinstance(rotation, Rotation):
        return rotation.as_matrix()

    arr = np.asarray(rotation, dtype=float)
    if arr.shape == (3, 3):
        return arr
    if arr.size == 3:
        R, _ = cv2.Rodrigues(arr.reshape(3, 1))
        return R
    raise GeometryError(f"Unsupported rotation shape {arr.shape}")


def rotation_to_rvec(rotation: RotationLike) -> Float[np.ndarray, "3"]:
    """Any supported rotation -> axis-angle vector."""
    rvec, _ = cv2.Rodrigues(as_rotation_matrix(rotation))
    return rvec.reshape(3)


def as_translation(translation: Any) -> Float[np.ndarray, "3"]:
    t = np.asarray(translation, dtype=float)
    if t.size != 3:
        raise GeometryError(f"Translation must have 3 elements, got shape {t.shape}")
    return t.reshape(3)


def transform_points(
    points: Float[np.ndarray, "N 3"],
    rotation: RotationLike,
    translation: Any,
) -> Float[np.ndarray, "N 3"]:
    """Apply X' = R @ X + t to each row."""
    R = as_rotation_matrix(rotation)
    t = as_translation(translation)
    return (R @ np.asarray(points, dtype=float).T).T + t.reshape(1, 3)
