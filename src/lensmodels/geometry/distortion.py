"""Radial-tangential (k1, k2, p1, p2) distortion used by the pinhole and MEI models."""

import numpy as np
from jaxtyping import Float

_MAX_ITERATIONS = 20
_STEP_TOL = 1e-14
_DET_EPS = 1e-12


def distortion_offset(
    m: Float[np.ndarray, "N 2"],
    k1: float,
    k2: float,
    p1: float,
    p2: float,
) -> Float[np.ndarray, "N 2"]:
    """Offset d(m) such that the distorted point is m + d(m)."""
    mx = m[:, 0]
    my = m[:, 1]
    mx2 = mx * mx
    my2 = my * my
    mxy = mx * my
    rho2 = mx2 + my2
    rad = k1 * rho2 + k2 * rho2 * rho2
    du = mx * rad + 2.0 * p1 * mxy + p2 * (rho2 + 2.0 * mx2)
    dv = my * rad + 2.0 * p2 * mxy + p1 * (rho2 + 2.0 * my2)
    return np.stack([du, dv], axis=1)


def distortion_jacobian(
    m: Float[np.ndarray, "N 2"],
    k1: float,
    k2: float,
    p1: float,
    p2: float,
) -> Float[np.ndarray, "N 2 2"]:
    """Jacobian of m + d(m) with respect to m."""
    mx = m[:, 0]
    my = m[:, 1]
    rho2 = mx * mx + my * my
    rad = k1 * rho2 + k2 * rho2 * rho2
    drad = 2.0 * (k1 + 2.0 * k2 * rho2)  # d(rad)/d(mx) = drad * mx

    jac = np.empty((m.shape[0], 2, 2), dtype=float)
    jac[:, 0, 0] = 1.0 + rad + drad * mx * mx + 2.0 * p1 * my + 6.0 * p2 * mx
    jac[:, 0, 1] = drad * mx * my + 2.0 * p1 * mx + 2.0 * p2 * my
    jac[:, 1, 0] = drad * mx * my + 2.0 * p2 * my + 2.0 * p1 * mx
    jac[:, 1, 1] = 1.0 + rad + drad * my * my + 2.0 * p2 * mx + 6.0 * p1 * my
    return jac


def undistort(
    m_d: Float[np.ndarray, "N 2"],
    k1: float,
    k2: float,
    p1: float,
    p2: float,
) -> Float[np.ndarray, "N 2"]:
    """
    Invert m_d = m_u + d(m_u) with Newton iterations.

    Rows whose Jacobian is near singular take a fixed-point step instead.
    Each row iterates on its own: a row stops once its step is below
    tolerance, and a row whose step turns non-finite is frozen at its last
    value without affecting the others.
    """
    if k1 == 0 and k2 == 0 and p1 == 0 and p2 == 0:
        return m_d.copy()

    m_u = m_d.copy()
    active = np.flatnonzero(np.isfinite(m_d).all(axis=1))
    for _ in range(_MAX_ITERATIONS):
        if active.size == 0:
            break
        cur = m_u[active]
        residual = cur + distortion_offset(cur, k1, k2, p1, p2) - m_d[active]
        jac = distortion_jacobian(cur, k1, k2, p1, p2)
        a = jac[:, 0, 0]
        b = jac[:, 0, 1]
        c = jac[:, 1, 0]
        d = jac[:, 1, 1]
        det = a * d - b * c
        singular = np.abs(det) < _DET_EPS
        safe_det = np.where(singular, 1.0, det)
        rx = residual[:, 0]
        ry = residual[:, 1]
        step_x = np.where(singular, rx, (d * rx - b * ry) / safe_det)
        step_y = np.where(singular, ry, (a * ry - c * rx) / safe_det)
        step = np.stack([step_x, step_y], axis=1)
        finite = np.isfinite(step).all(axis=1)
        m_u[active[finite]] = cur[finite] - step[finite]
        converged = finite & (np.max(np.abs(step), axis=1) < _STEP_TOL)
        active = active[finite & ~converged]
    return m_u
