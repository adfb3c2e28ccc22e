from .camera import Camera
from .extrinsics import estimate_extrinsics
from .factory import CAMERA_TYPES, camera_from_intrinsics, generate_camera
from .kannala_brandt import KannalaBrandtCamera, KannalaBrandtIntrinsics
from .mei import MeiCamera, MeiIntrinsics
from .pinhole import PinholeCamera, PinholeIntrinsics
from .rays import (
    Ray3D,
    camera_to_world_ray,
    pixel_to_camera_ray,
    pixel_to_world_ray,
)
from .reprojection import (
    project_points,
    reprojection_dist,
    reprojection_error,
    reprojection_error_point,
)
from .transforms import as_rotation_matrix, rotation_to_rvec, transform_points
from .types import (
    CorrespondenceError,
    Extrinsics,
    ExtrinsicsConfig,
    ExtrinsicsError,
    GeometryError,
    ModelType,
    Parameters,
    ReprojectionErrorResult,
)
from .undistort import init_undistort_maps

__all__ = [
    # types
    "ModelType",
    "Parameters",
    "Extrinsics",
    "ExtrinsicsConfig",
    "ReprojectionErrorResult",
    "GeometryError",
    "CorrespondenceError",
    "ExtrinsicsError",
    # camera models
    "Camera",
    "PinholeCamera",
    "PinholeIntrinsics",
    "KannalaBrandtCamera",
    "KannalaBrandtIntrinsics",
    "MeiCamera",
    "MeiIntrinsics",
    "CAMERA_TYPES",
    "generate_camera",
    "camera_from_intrinsics",
    # pose and error
    "estimate_extrinsics",
    "project_points",
    "reprojection_dist",
    "reprojection_error",
    "reprojection_error_point",
    # transforms
    "as_rotation_matrix",
    "rotation_to_rvec",
    "transform_points",
    # rays
    "Ray3D",
    "pixel_to_camera_ray",
    "camera_to_world_ray",
    "pixel_to_world_ray",
    # undistortion
    "init_undistort_maps",
]
