import logging

import cv2
import numpy as np
from jaxtyping import Float

from .camera import Camera, _ensure_points
from .types import (
    CorrespondenceError,
    Extrinsics,
    ExtrinsicsConfig,
    ExtrinsicsError,
    GeometryError,
)

logger = logging.getLogger(__name__)

_COLLINEAR_TOL = 1e-9


def _check_correspondences(
    object_points: np.ndarray,
    image_points: np.ndarray,
    min_points: int,
) -> None:
    if object_points.shape[0] != image_points.shape[0]:
        raise CorrespondenceError(
            "Mismatch between object and image point counts: "
            f"{object_points.shape[0]} vs {image_points.shape[0]}"
        )
    if object_points.shape[0] < min_points:
        raise CorrespondenceError(
            f"Not enough points for PnP (need >= {min_points}, "
            f"got {object_points.shape[0]})"
        )
    centered = object_points - object_points.mean(axis=0, keepdims=True)
    scale = max(float(np.abs(centered).max()), 1.0)
    if np.linalg.matrix_rank(centered, tol=_COLLINEAR_TOL * scale) < 2:
        raise CorrespondenceError("Object points are collinear, pose is ambiguous")


def _normalized_image_points(
    image_points: np.ndarray,
    camera: Camera,
    min_depth: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Lift observations into a unit-focal, zero-distortion pinhole view.

    Returns the normalized coordinates of the usable points and a boolean
    mask of which input rows they came from.
    """
    rays = camera.lift_projective(image_points)
    depth = rays[:, 2]
    valid = np.isfinite(rays).all(axis=1) & (depth > min_depth)
    safe_depth = np.where(valid, depth, 1.0)
    normalized = rays[:, :2] / safe_depth[:, None]
    return normalized[valid], valid


def _solve_pnp(
    object_points: np.ndarray,
    normalized_points: np.ndarray,
    cfg: ExtrinsicsConfig,
) -> tuple[np.ndarray, np.ndarray]:
    # unit focal length, zero principal point and no distortion after lifting
    camera_matrix = np.eye(3, dtype=float)
    obj = object_points
    img = normalized_points

    rvec = None
    tvec = None
    if cfg.use_ransac:
        try:
            success_ransac, rvec, tvec, inliers = cv2.solvePnPRansac(
                obj,
                img,
                camera_matrix,
                None,
                reprojectionError=cfg.ransac_reprojection_error,
                confidence=cfg.ransac_confidence,
                flags=cv2.SOLVEPNP_AP3P,
            )
        except cv2.error as exc:
            raise ExtrinsicsError(f"solvePnPRansac failed: {exc}") from exc

        if not success_ransac:
            raise ExtrinsicsError("solvePnPRansac failed to find a valid solution")

        if inliers is not None and len(inliers) >= cfg.min_points:
            inlier_idx = inliers[:, 0].astype(int)
            obj = np.take(obj, inlier_idx, axis=0)
            img = np.take(img, inlier_idx, axis=0)

    try:
        if rvec is None:
            success, rvec, tvec = cv2.solvePnP(
                obj, img, camera_matrix, None, flags=cfg.pnp_method
            )
        else:
            success, rvec, tvec = cv2.solvePnP(
                obj,
                img,
                camera_matrix,
                None,
                rvec=rvec,
                tvec=tvec,
                useExtrinsicGuess=True,
                flags=cv2.SOLVEPNP_ITERATIVE,
            )
    except cv2.error as exc:
        raise ExtrinsicsError(f"solvePnP failed: {exc}") from exc

    if not success:
        raise ExtrinsicsError("solvePnP failed to find a valid solution")
    if not (np.all(np.isfinite(rvec)) and np.all(np.isfinite(tvec))):
        raise ExtrinsicsError("solvePnP returned a non-finite pose")
    return rvec.reshape(3), tvec.reshape(3)


def estimate_extrinsics(
    object_points: Float[np.ndarray, "N 3"],
    image_points: Float[np.ndarray, "N 2"],
    camera: Camera,
    config: ExtrinsicsConfig | None = None,
) -> Extrinsics:
    """
    Estimate the object->camera pose from 3D-2D correspondences:
    - lift each observation through the camera model and divide by depth,
      giving coordinates of an ideal pinhole camera
    - solve PnP on those with an identity camera matrix
    """
    cfg = config or ExtrinsicsConfig()
    cfg.validate()

    obj, _ = _ensure_points(object_points, 3)
    img, _ = _ensure_points(image_points, 2)
    _check_correspondences(obj, img, cfg.min_points)

    normalized, valid = _normalized_image_points(img, camera, cfg.min_depth)
    num_dropped = int(np.count_nonzero(~valid))
    if num_dropped:
        if not cfg.skip_degenerate_points:
            bad = np.flatnonzero(~valid).tolist()
            raise GeometryError(
                f"Lifted rays have near-zero or negative depth at indices {bad}"
            )
        logger.warning(
            "Dropping %d of %d correspondences with degenerate lifted depth",
            num_dropped,
            valid.shape[0],
        )
        obj = obj[valid]
        _check_correspondences(obj, normalized, cfg.min_points)

    rvec, tvec = _solve_pnp(
        np.ascontiguousarray(obj, dtype=np.float64),
        np.ascontiguousarray(normalized, dtype=np.float64),
        cfg,
    )

    logger.debug(
        "Extrinsics estimated for %s: num_points=%d, dropped=%d",
        camera.camera_name or type(camera).__name__,
        obj.shape[0],
        num_dropped,
    )
    return Extrinsics(rvec=rvec, tvec=tvec, num_points=int(obj.shape[0]))
