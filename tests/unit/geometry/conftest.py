"""Shared camera fixtures for the geometry unit tests."""

import numpy as np
import pytest

from lensmodels.geometry import (
    KannalaBrandtCamera,
    KannalaBrandtIntrinsics,
    MeiCamera,
    MeiIntrinsics,
    ModelType,
    Parameters,
    PinholeCamera,
    PinholeIntrinsics,
)


@pytest.fixture
def pinhole_camera() -> PinholeCamera:
    """EuRoC-like pinhole camera with mild radial-tangential distortion."""
    params = Parameters(ModelType.PINHOLE, "cam_pinhole", 752, 480)
    intr = PinholeIntrinsics(
        k1=-0.28,
        k2=0.07,
        p1=1e-4,
        p2=-2e-5,
        fx=460.0,
        fy=458.0,
        cx=367.0,
        cy=248.0,
    )
    return PinholeCamera(params, intr)


@pytest.fixture
def kannala_brandt_camera() -> KannalaBrandtCamera:
    params = Parameters(ModelType.KANNALA_BRANDT, "cam_fisheye", 1280, 960)
    intr = KannalaBrandtIntrinsics(
        k2=-0.01,
        k3=0.005,
        k4=-0.001,
        k5=0.0002,
        mu=350.0,
        mv=352.0,
        u0=640.0,
        v0=480.0,
    )
    return KannalaBrandtCamera(params, intr)


@pytest.fixture
def mei_camera() -> MeiCamera:
    params = Parameters(ModelType.MEI, "cam_omni", 1280, 960)
    intr = MeiIntrinsics(
        xi=1.2,
        k1=-0.1,
        k2=0.02,
        p1=1e-4,
        p2=1e-4,
        gamma1=800.0,
        gamma2=805.0,
        u0=640.0,
        v0=480.0,
    )
    return MeiCamera(params, intr)


@pytest.fixture
def unit_pinhole_camera() -> PinholeCamera:
    """Unit focal length, zero principal point, no distortion."""
    params = Parameters(ModelType.PINHOLE, "unit")
    intr = PinholeIntrinsics(0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 0.0, 0.0)
    return PinholeCamera(params, intr)


@pytest.fixture(params=["pinhole", "kannala_brandt", "mei"])
def any_camera(request, pinhole_camera, kannala_brandt_camera, mei_camera):
    return {
        "pinhole": pinhole_camera,
        "kannala_brandt": kannala_brandt_camera,
        "mei": mei_camera,
    }[request.param]


def _sample_rays(max_angle_deg: float, n_theta: int = 6, n_phi: int = 8) -> np.ndarray:
    rays = [np.array([0.0, 0.0, 1.0])]
    max_angle = np.deg2rad(max_angle_deg)
    for theta in np.linspace(max_angle / n_theta, max_angle, n_theta):
        for phi in np.linspace(0.0, 2.0 * np.pi, n_phi, endpoint=False):
            s = np.sin(theta)
            rays.append(np.array([s * np.cos(phi), s * np.sin(phi), np.cos(theta)]))
    return np.stack(rays)


@pytest.fixture
def sample_rays():
    """Factory for unit rays in front of the camera up to an angle off the axis."""
    return _sample_rays


@pytest.fixture
def planar_target() -> np.ndarray:
    """4x5 calibration grid on the z=0 plane, 10 cm spacing."""
    xs, ys = np.meshgrid(np.arange(5) * 0.1, np.arange(4) * 0.1)
    return np.stack([xs.ravel(), ys.ravel(), np.zeros(xs.size)], axis=1)
