from collections.abc import Mapping
from types import MappingProxyType

import numpy as np
from jaxtyping import Float

from .camera import Camera
from .kannala_brandt import KannalaBrandtCamera
from .mei import MeiCamera
from .pinhole import PinholeCamera
from .types import ModelType, Parameters

CAMERA_TYPES: Mapping[ModelType, type[Camera]] = MappingProxyType(
    {
        ModelType.PINHOLE: PinholeCamera,
        ModelType.KANNALA_BRANDT: KannalaBrandtCamera,
        ModelType.MEI: MeiCamera,
    }
)


def _default_intrinsics(model_type: ModelType, cx: float, cy: float) -> list[float]:
    if model_type is ModelType.MEI:
        # xi, k1, k2, p1, p2, gamma1, gamma2, u0, v0
        return [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 1.0, cx, cy]
    # pinhole: k1, k2, p1, p2, fx, fy, cx, cy
    # kannala-brandt: k2, k3, k4, k5, mu, mv, u0, v0
    return [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, cx, cy]


def generate_camera(
    model_type: ModelType,
    camera_name: str = "",
    image_width: int = 0,
    image_height: int = 0,
) -> Camera:
    """
    Create a camera with placeholder intrinsics: unit focal terms, no
    distortion, principal point at the image center (xi=1 for MEI).
    """
    parameters = Parameters(model_type, camera_name, image_width, image_height)
    vector = _default_intrinsics(model_type, image_width / 2.0, image_height / 2.0)
    return camera_from_intrinsics(parameters, np.asarray(vector, dtype=float))


def camera_from_intrinsics(
    parameters: Parameters,
    vector: Float[np.ndarray, "n"],
) -> Camera:
    """Build the camera variant selected by parameters.model_type."""
    camera_cls = CAMERA_TYPES[parameters.model_type]
    return camera_cls.from_intrinsics_vector(parameters, vector)
