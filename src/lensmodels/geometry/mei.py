"""
MEI unified omnidirectional model.

A point is first projected onto the unit sphere, then perspective-projected
from a center shifted by xi along the optical axis, followed by
radial-tangential distortion and the generalized focal lengths gamma1/gamma2.
"""

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

_XI_TOL = 1e-12


@dataclass(frozen=True, slots=True)
class MeiIntrinsics:
    xi: float
    k1: float
    k2: float
    p1: float
    p2: float
    gamma1: float
    gamma2: float
    u0: float
    v0: float


class MeiCamera(Camera):
    model_type = ModelType.MEI

    def __init__(self, parameters: Parameters, intrinsics: MeiIntrinsics):
        super().__init__(parameters)
        _check_focal("gamma1", intrinsics.gamma1)
        _check_focal("gamma2", intrinsics.gamma2)
        self._intrinsics = intrinsics

    @property
    def intrinsics(self) -> MeiIntrinsics:
        return self._intrinsics

    def intrinsics_vector(self) -> Float[np.ndarray, "9"]:
        return np.asarray(astuple(self._intrinsics), dtype=float)

    @classmethod
    def from_intrinsics_vector(
        cls,
        parameters: Parameters,
        vector: Float[np.ndarray, "9"],
    ) -> "MeiCamera":
        coeffs = _intrinsics_from_vector(parameters, vector)
        return cls(parameters, MeiIntrinsics(*coeffs))

    def _space_to_plane(self, pts: Array3F) -> Array2F:
        intr = self._intrinsics
        norm = np.linalg.norm(pts, axis=1)
        z = _safe_denominator(pts[:, 2] + intr.xi * norm)
        m = pts[:, :2] / z[:, None]
        m_d = m + distortion_offset(m, intr.k1, intr.k2, intr.p1, intr.p2)
        u = intr.gamma1 * m_d[:, 0] + intr.u0
        v = intr.gamma2 * m_d[:, 1] + intr.v0
        return np.stack([u, v], axis=1)

    def _lift_projective(self, pts: Array2F) -> Array3F:
        intr = self._intrinsics
        m_d = np.stack(
            [(pts[:, 0] - intr.u0) / intr.gamma1, (pts[:, 1] - intr.v0) / intr.gamma2],
            axis=1,
        )
        m_u = undistort(m_d, intr.k1, intr.k2, intr.p1, intr.p2)
        rho2 = np.sum(m_u * m_u, axis=1)

        xi = intr.xi
        if abs(xi - 1.0) < _XI_TOL:
            return np.column_stack([m_u, (1.0 - rho2) / 2.0])

        # outside the valid image circle (xi > 1) the discriminant goes negative
        disc = np.maximum(1.0 + (1.0 - xi * xi) * rho2, 0.0)
        lam = (xi + np.sqrt(disc)) / (1.0 + rho2)
        return np.column_stack([lam[:, None] * m_u, lam - xi])
