import logging
from collections.abc import Sequence

import numpy as np
from jaxtyping import Float

from .camera import Camera, _ensure_points
from .transforms import RotationLike, transform_points
from .types import CorrespondenceError, GeometryError, ReprojectionErrorResult

logger = logging.getLogger(__name__)


def project_points(
    camera: Camera,
    object_points: Float[np.ndarray, "N 3"],
    rotation: RotationLike,
    translation: Float[np.ndarray, "3"],
) -> Float[np.ndarray, "N 2"]:
    """
    Move object points into the camera frame (R @ X + t) and project them.

    Order and count are preserved; points behind the camera are projected
    like any other.
    """
    pts, _ = _ensure_points(object_points, 3)
    if pts.shape[0] == 0:
        return np.zeros((0, 2), dtype=float)
    pts_cam = transform_points(pts, rotation, translation)
    return camera.space_to_plane(pts_cam)


def reprojection_dist(
    camera: Camera,
    p1: Float[np.ndarray, "3"],
    p2: Float[np.ndarray, "3"],
) -> float:
    """Image-plane distance between the projections of two camera-frame points."""
    proj = camera.space_to_plane(np.stack([p1, p2]).astype(float))
    return float(np.linalg.norm(proj[0] - proj[1]))


def reprojection_error(
    camera: Camera,
    object_points: Sequence[Float[np.ndarray, "N 3"]],
    image_points: Sequence[Float[np.ndarray, "N 2"]],
    rvecs: Sequence[RotationLike],
    tvecs: Sequence[Float[np.ndarray, "3"]],
    per_view: bool = False,
) -> ReprojectionErrorResult:
    """
    Mean reprojection error over several views.

    The mean is taken over all points, so views with more points weigh more.
    With per_view=True the mean of each view is reported too, in view order.
    """
    num_views = len(object_points)
    if not (len(image_points) == len(rvecs) == len(tvecs) == num_views):
        raise CorrespondenceError(
            "object_points, image_points, rvecs and tvecs must have the same length: "
            f"{num_views}, {len(image_points)}, {len(rvecs)}, {len(tvecs)}"
        )
    if num_views == 0:
        raise CorrespondenceError("No views to evaluate")

    total_err = 0.0
    total_points = 0
    view_errors: list[float] = []

    for i in range(num_views):
        obj, _ = _ensure_points(object_points[i], 3)
        img, _ = _ensure_points(image_points[i], 2)
        if obj.shape[0] != img.shape[0]:
            raise CorrespondenceError(
                f"View {i}: {obj.shape[0]} object points vs {img.shape[0]} image points"
            )
        if obj.shape[0] == 0:
            raise CorrespondenceError(f"View {i} has no points")

        est = project_points(camera, obj, rvecs[i], tvecs[i])
        if not np.all(np.isfinite(est)):
            raise GeometryError(f"View {i}: projection produced non-finite coordinates")

        err = float(np.linalg.norm(est - img, axis=1).sum())
        view_errors.append(err / obj.shape[0])
        total_err += err
        total_points += obj.shape[0]

    mean_error = total_err / total_points
    logger.debug(
        "Reprojection error: mean=%.4f over %d points in %d views",
        mean_error,
        total_points,
        num_views,
    )
    return ReprojectionErrorResult(
        mean_error=mean_error,
        num_points=total_points,
        per_view_errors=tuple(view_errors) if per_view else None,
    )


def reprojection_error_point(
    camera: Camera,
    point: Float[np.ndarray, "3"],
    orientation: RotationLike,
    position: Float[np.ndarray, "3"],
    observed: Float[np.ndarray, "2"],
) -> float:
    """Distance between an observation and the projection of one world point."""
    pts, _ = _ensure_points(point, 3)
    obs, _ = _ensure_points(observed, 2)
    if pts.shape[0] != 1 or obs.shape[0] != 1:
        raise CorrespondenceError("Expected a single point and a single observation")
    p_cam = transform_points(pts, orientation, position)
    proj = camera.space_to_plane(p_cam)
    return float(np.linalg.norm(proj[0] - obs[0]))
