"""
Kannala-Brandt fisheye model (equidistant projection with odd polynomial in theta).

The image radius of a ray at angle theta from the optical axis is
r(theta) = theta + k2*theta^3 + k3*theta^5 + k4*theta^7 + k5*theta^9.
"""

from dataclasses import astuple, dataclass

import numpy as np
from jaxtyping import Float

from .camera import Camera, _check_focal, _intrinsics_from_vector
from .types import Array2F, Array3F, ModelType, Parameters

_MIN_RADIUS = 1e-12
_MAX_ITERATIONS = 30
_STEP_TOL = 1e-14


@dataclass(frozen=True, slots=True)
class KannalaBrandtIntrinsics:
    k2: float
    k3: float
    k4: float
    k5: float
    mu: float
    mv: float
    u0: float
    v0: float


class KannalaBrandtCamera(Camera):
    model_type = ModelType.KANNALA_BRANDT

    def __init__(self, parameters: Parameters, intrinsics: KannalaBrandtIntrinsics):
        super().__init__(parameters)
        _check_focal("mu", intrinsics.mu)
        _check_focal("mv", intrinsics.mv)
        self._intrinsics = intrinsics

    @property
    def intrinsics(self) -> KannalaBrandtIntrinsics:
        return self._intrinsics

    def intrinsics_vector(self) -> Float[np.ndarray, "8"]:
        return np.asarray(astuple(self._intrinsics), dtype=float)

    @classmethod
    def from_intrinsics_vector(
        cls,
        parameters: Parameters,
        vector: Float[np.ndarray, "8"],
    ) -> "KannalaBrandtCamera":
        coeffs = _intrinsics_from_vector(parameters, vector)
        return cls(parameters, KannalaBrandtIntrinsics(*coeffs))

    def _radius(self, theta: np.ndarray) -> np.ndarray:
        intr = self._intrinsics
        t2 = theta * theta
        poly = intr.k2 + t2 * (intr.k3 + t2 * (intr.k4 + t2 * intr.k5))
        return theta * (1.0 + t2 * poly)

    def _radius_derivative(self, theta: np.ndarray) -> np.ndarray:
        intr = self._intrinsics
        t2 = theta * theta
        poly = 3.0 * intr.k2 + t2 * (
            5.0 * intr.k3 + t2 * (7.0 * intr.k4 + t2 * 9.0 * intr.k5)
        )
        return 1.0 + t2 * poly

    def _solve_theta(self, radius: np.ndarray) -> np.ndarray:
        """Invert r(theta) = radius with Newton steps, theta kept in [0, pi]."""
        theta = np.clip(radius, 0.0, np.pi)
        # rows converge independently; non-finite rows are left as they are
        active = np.flatnonzero(np.isfinite(radius))
        for _ in range(_MAX_ITERATIONS):
            if active.size == 0:
                break
            cur = theta[active]
            deriv = self._radius_derivative(cur)
            deriv = np.where(np.abs(deriv) < _MIN_RADIUS, 1.0, deriv)
            step = (self._radius(cur) - radius[active]) / deriv
            finite = np.isfinite(step)
            theta[active[finite]] = np.clip(cur[finite] - step[finite], 0.0, np.pi)
            active = active[finite & (np.abs(step) >= _STEP_TOL)]
        return theta

    def _space_to_plane(self, pts: Array3F) -> Array2F:
        intr = self._intrinsics
        # atan2 keeps the angle defined behind the camera and at the origin
        theta = np.arctan2(np.hypot(pts[:, 0], pts[:, 1]), pts[:, 2])
        phi = np.arctan2(pts[:, 1], pts[:, 0])
        r = self._radius(theta)
        u = intr.mu * r * np.cos(phi) + intr.u0
        v = intr.mv * r * np.sin(phi) + intr.v0
        return np.stack([u, v], axis=1)

    def _lift_projective(self, pts: Array2F) -> Array3F:
        intr = self._intrinsics
        px = (pts[:, 0] - intr.u0) / intr.mu
        py = (pts[:, 1] - intr.v0) / intr.mv
        radius = np.hypot(px, py)

        on_axis = radius < _MIN_RADIUS
        theta = np.where(on_axis, 0.0, self._solve_theta(radius))
        phi = np.where(on_axis, 0.0, np.arctan2(py, px))

        sin_theta = np.sin(theta)
        return np.stack(
            [sin_theta * np.cos(phi), sin_theta * np.sin(phi), np.cos(theta)],
            axis=1,
        )
