from dataclasses import dataclass, replace
from enum import Enum

import cv2
import numpy as np
from jaxtyping import Float

Array2F = Float[np.ndarray, "N 2"]
Array3F = Float[np.ndarray, "N 3"]


class ModelType(Enum):
    PINHOLE = "pinhole"
    KANNALA_BRANDT = "kannala_brandt"
    MEI = "mei"


_N_INTRINSICS = {
    ModelType.PINHOLE: 8,
    ModelType.KANNALA_BRANDT: 8,
    ModelType.MEI: 9,
}


@dataclass(frozen=True, slots=True)
class Parameters:
    """
    Identity of a camera model:
    - model_type decides how many intrinsic coefficients the model carries
    - image_width / image_height are in pixels, 0 means not set yet
    """

    model_type: ModelType
    camera_name: str = ""
    image_width: int = 0
    image_height: int = 0

    @property
    def n_intrinsics(self) -> int:
        return _N_INTRINSICS[self.model_type]

    def with_name(self, camera_name: str) -> "Parameters":
        return replace(self, camera_name=camera_name)

    def with_image_size(self, image_width: int, image_height: int) -> "Parameters":
        return replace(self, image_width=image_width, image_height=image_height)


@dataclass(slots=True)
class Extrinsics:
    """Object->camera pose, X_cam = R @ X_obj + t."""

    rvec: Float[np.ndarray, "3"]  # axis-angle
    tvec: Float[np.ndarray, "3"]
    num_points: int

    @property
    def rotation_matrix(self) -> Float[np.ndarray, "3 3"]:
        R, _ = cv2.Rodrigues(np.asarray(self.rvec, dtype=float).reshape(3, 1))
        return R


@dataclass(slots=True)
class ReprojectionErrorResult:
    mean_error: float  # averaged over points, not views
    num_points: int
    per_view_errors: tuple[float, ...] | None = None


class GeometryError(RuntimeError):
    pass


class CorrespondenceError(RuntimeError):
    pass


class ExtrinsicsError(RuntimeError):
    pass


@dataclass(slots=True)
class ExtrinsicsConfig:
    """
    Tunable thresholds for extrinsics estimation.

    Thresholds are in normalized image units (unit focal length), since the
    pose is solved on lifted, distortion-free coordinates.
    """

    min_points: int = 4
    min_depth: float = 1e-9
    skip_degenerate_points: bool = False
    pnp_method: int = cv2.SOLVEPNP_ITERATIVE
    use_ransac: bool = False
    ransac_reprojection_error: float = 1e-2
    ransac_confidence: float = 0.99

    def validate(self) -> None:
        if self.min_points < 4:
            raise ExtrinsicsError("min_points must be at least 4")
        if self.min_depth <= 0:
            raise ExtrinsicsError("min_depth must be positive")
        if self.ransac_reprojection_error <= 0:
            raise ExtrinsicsError("ransac_reprojection_error must be positive")
        if not 0.0 < self.ransac_confidence < 1.0:
            raise ExtrinsicsError("ransac_confidence must be in (0, 1)")
