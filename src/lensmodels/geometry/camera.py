"""
Camera model base class shared by all lens geometries.

Coordinate systems:
- Camera frame follows the pinhole convention with z pointing forward.
- Image plane coordinates are pixels, u to the right, v down.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

import numpy as np
from jaxtyping import Float, UInt8

from .types import Array2F, Array3F, GeometryError, ModelType, Parameters

if TYPE_CHECKING:
    from .kannala_brandt import KannalaBrandtIntrinsics
    from .mei import MeiIntrinsics
    from .pinhole import PinholeIntrinsics

    CameraIntrinsics = PinholeIntrinsics | KannalaBrandtIntrinsics | MeiIntrinsics

_EPS = 1e-9


def _ensure_points(
    points: Float[np.ndarray, "..."],
    dim: int = 3,
) -> tuple[np.ndarray, bool]:
    """Normalize input points to shape (N, dim), track whether it was a single point."""
    pts = np.asarray(points, dtype=float)
    is_single = False
    if pts.size == 0:
        return np.empty((0, dim), dtype=float), is_single
    if pts.ndim == 1:
        if pts.shape[0] != dim:
            raise GeometryError(f"Point must have length {dim}.")
        pts = pts.reshape(1, dim)
        is_single = True
    if pts.ndim != 2 or pts.shape[-1] != dim:
        raise GeometryError(f"Points array must have shape (N, {dim}).")
    return pts, is_single


def _safe_denominator(values: np.ndarray) -> np.ndarray:
    """Keep the sign of a denominator but push it away from zero."""
    return np.where(np.abs(values) < _EPS, np.copysign(_EPS, values), values)


def _check_focal(name: str, value: float) -> None:
    if value == 0 or not np.isfinite(value):
        raise GeometryError(f"Invalid intrinsics: {name} must be finite and non-zero")


class Camera(ABC):
    """
    Projection model interface: space_to_plane maps camera-frame points to
    image coordinates, lift_projective maps image coordinates back to rays.
    """

    model_type: ClassVar[ModelType]

    def __init__(self, parameters: Parameters):
        if parameters.model_type is not self.model_type:
            raise GeometryError(
                f"{type(self).__name__} requires {self.model_type.name} parameters, "
                f"got {parameters.model_type.name}"
            )
        self._parameters = parameters
        self._mask: UInt8[np.ndarray, "h w"] = np.zeros((0, 0), dtype=np.uint8)

    @property
    def parameters(self) -> Parameters:
        return self._parameters

    @property
    def camera_name(self) -> str:
        return self._parameters.camera_name

    @property
    def image_width(self) -> int:
        return self._parameters.image_width

    @property
    def image_height(self) -> int:
        return self._parameters.image_height

    @property
    def mask(self) -> UInt8[np.ndarray, "h w"]:
        """Read-only view of the valid-pixel mask; empty when unset."""
        view = self._mask.view()
        view.flags.writeable = False
        return view

    def set_mask(self, mask: UInt8[np.ndarray, "h w"]) -> None:
        arr = np.array(mask, dtype=np.uint8, copy=True)
        if arr.ndim != 2:
            raise GeometryError("Mask must be a 2D array.")
        self._mask = arr

    def clear_mask(self) -> None:
        self._mask = np.zeros((0, 0), dtype=np.uint8)

    @property
    @abstractmethod
    def intrinsics(self) -> "CameraIntrinsics": ...

    @abstractmethod
    def intrinsics_vector(self) -> Float[np.ndarray, "n"]:
        """Intrinsic coefficients in model order, length parameters.n_intrinsics."""

    @classmethod
    @abstractmethod
    def from_intrinsics_vector(
        cls,
        parameters: Parameters,
        vector: Float[np.ndarray, "n"],
    ) -> "Camera": ...

    @abstractmethod
    def _space_to_plane(self, pts: Array3F) -> Array2F: ...

    @abstractmethod
    def _lift_projective(self, pts: Array2F) -> Array3F: ...

    def space_to_plane(
        self,
        points_cam: Float[np.ndarray, "..."],
    ) -> Float[np.ndarray, "N 2"]:
        """Camera-frame points -> image plane coordinates."""
        pts, is_single = _ensure_points(points_cam, 3)
        proj = self._space_to_plane(pts)
        return proj[0] if is_single else proj

    def lift_projective(
        self,
        points_img: Float[np.ndarray, "..."],
    ) -> Float[np.ndarray, "N 3"]:
        """Image plane coordinates -> camera-frame rays (scale per model)."""
        pts, is_single = _ensure_points(points_img, 2)
        rays = self._lift_projective(pts)
        return rays[0] if is_single else rays

    def lift_sphere(
        self,
        points_img: Float[np.ndarray, "..."],
    ) -> Float[np.ndarray, "N 3"]:
        """Image plane coordinates -> unit rays in the camera frame."""
        pts, is_single = _ensure_points(points_img, 2)
        rays = self._lift_projective(pts)
        norm = np.linalg.norm(rays, axis=1, keepdims=True)
        if np.any(norm < _EPS):
            raise GeometryError("Degenerate ray direction")
        rays = rays / norm
        return rays[0] if is_single else rays

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(parameters={self._parameters!r}, "
            f"intrinsics={self.intrinsics!r})"
        )


def _intrinsics_from_vector(
    parameters: Parameters,
    vector: Float[np.ndarray, "n"],
) -> list[float]:
    """Validate an intrinsic vector against the model's coefficient count."""
    vec = np.asarray(vector, dtype=float).reshape(-1)
    if vec.shape[0] != parameters.n_intrinsics:
        raise GeometryError(
            f"{parameters.model_type.name} expects {parameters.n_intrinsics} "
            f"intrinsics, got {vec.shape[0]}"
        )
    return [float(v) for v in vec]
