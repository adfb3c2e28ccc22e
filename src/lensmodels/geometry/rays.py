from dataclasses import dataclass

import numpy as np
from jaxtyping import Float

from .camera import Camera
from .transforms import RotationLike, as_rotation_matrix, as_translation
from .types import GeometryError

_EPS = 1e-9


@dataclass(slots=True)
class Ray3D:
    origin: Float[np.ndarray, "3"]  # camera optical center in world frame
    direction: Float[np.ndarray, "3"]  # unit vector in world frame


def pixel_to_camera_ray(
    camera: Camera,
    u_px: float,
    v_px: float,
) -> Float[np.ndarray, "3"]:
    """Transform pixel coordinate into a unit direction in the camera frame."""
    return camera.lift_sphere(np.array([u_px, v_px], dtype=float))


def camera_to_world_ray(
    ray_cam: Float[np.ndarray, "3"],
    rotation: RotationLike,
    translation: Float[np.ndarray, "3"],
) -> Ray3D:
    """
    Convert camera-frame ray to world-frame ray, origin at camera center.

    rotation/translation map world to camera: X_cam = R @ X_world + t.
    """
    R = as_rotation_matrix(rotation)
    t = as_translation(translation)
    direction_world = R.T @ np.asarray(ray_cam, dtype=float).reshape(3)
    dir_norm = float(np.linalg.norm(direction_world))
    if dir_norm < _EPS:
        raise GeometryError("Degenerate world ray direction")

    origin = -R.T @ t
    return Ray3D(origin=origin, direction=direction_world / dir_norm)


def pixel_to_world_ray(
    camera: Camera,
    u_px: float,
    v_px: float,
    rotation: RotationLike,
    translation: Float[np.ndarray, "3"],
) -> Ray3D:
    """Convenience wrapper combining pixel_to_camera_ray and camera_to_world_ray."""
    ray_cam = pixel_to_camera_ray(camera, u_px, v_px)
    return camera_to_world_ray(ray_cam, rotation, translation)
