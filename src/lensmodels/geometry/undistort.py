import numpy as np
from jaxtyping import Float32

from .camera import Camera
from .types import GeometryError


def init_undistort_maps(
    camera: Camera,
    width: int,
    height: int,
    fx: float,
    fy: float,
    cx: float,
    cy: float,
) -> tuple[Float32[np.ndarray, "height width"], Float32[np.ndarray, "height width"]]:
    """
    Lookup tables from a virtual distortion-free pinhole view into the camera image.

    Pixel (u, v) of the virtual view with intrinsics fx, fy, cx, cy samples the
    camera image at (map_x[v, u], map_y[v, u]); the tables plug into cv2.remap.
    """
    if width <= 0 or height <= 0:
        raise GeometryError("Undistorted view size must be positive")
    if fx == 0 or fy == 0:
        raise GeometryError("Invalid intrinsics: fx or fy is zero")

    u, v = np.meshgrid(
        np.arange(width, dtype=float),
        np.arange(height, dtype=float),
    )
    rays = np.stack(
        [(u.ravel() - cx) / fx, (v.ravel() - cy) / fy, np.ones(u.size)],
        axis=1,
    )
    proj = camera.space_to_plane(rays)
    map_x = proj[:, 0].reshape(height, width).astype(np.float32)
    map_y = proj[:, 1].reshape(height, width).astype(np.float32)
    return map_x, map_y
