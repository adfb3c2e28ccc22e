from dataclasses import astuple, dataclass

import numpy as np
from jaxtyping import Float

from .camera import (
    Camera,
    _check_focal,
    _intrinsics_from_vector,
    _safe_denominator,
)
from .distortion import distortion_offset, undistort
from .types import Array2F, Array3F, ModelType, Parameters


@dataclass(frozen=True, slots=True)
class PinholeIntrinsics:
    k1: float
    k2: float
    p1: float
    p2: float
    fx: float
    fy: float
    cx: float
    cy: float


class PinholeCamera(Camera):
    """Perspective camera with radial-tangential distortion."""

    model_type = ModelType.PINHOLE

    def __init__(self, parameters: Parameters, intrinsics: PinholeIntrinsics):
        super().__init__(parameters)
        _check_focal("fx", intrinsics.fx)
        _check_focal("fy", intrinsics.fy)
        self._intrinsics = intrinsics

    @property
    def intrinsics(self) -> PinholeIntrinsics:
        return self._intrinsics

    def intrinsics_vector(self) -> Float[np.ndarray, "8"]:
        return np.asarray(astuple(self._intrinsics), dtype=float)

    @classmethod
    def from_intrinsics_vector(
        cls,
        parameters: Parameters,
        vector: Float[np.ndarray, "8"],
    ) -> "PinholeCamera":
        coeffs = _intrinsics_from_vector(parameters, vector)
        return cls(parameters, PinholeIntrinsics(*coeffs))

    def _space_to_plane(self, pts: Array3F) -> Array2F:
        intr = self._intrinsics
        z = _safe_denominator(pts[:, 2])
        m = pts[:, :2] / z[:, None]
        m_d = m + distortion_offset(m, intr.k1, intr.k2, intr.p1, intr.p2)
        u = intr.fx * m_d[:, 0] + intr.cx
        v = intr.fy * m_d[:, 1] + intr.cy
        return np.stack([u, v], axis=1)

    def _lift_projective(self, pts: Array2F) -> Array3F:
        intr = self._intrinsics
        m_d = np.stack(
            [(pts[:, 0] - intr.cx) / intr.fx, (pts[:, 1] - intr.cy) / intr.fy],
            axis=1,
        )
        m_u = undistort(m_d, intr.k1, intr.k2, intr.p1, intr.p2)
        return np.column_stack([m_u, np.ones(m_u.shape[0])])
