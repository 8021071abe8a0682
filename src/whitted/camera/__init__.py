"""Camera module for view ray generation.

Components:
    pinhole: Pinhole (perspective) camera with look-at positioning

Rays are generated per pixel (row, column), through the pixel center,
with row 0 at the top of the image.
"""

from .pinhole import (
    CameraOptions,
    get_camera_info,
    get_view_ray,
    setup_camera,
)

__all__ = [
    "CameraOptions",
    "setup_camera",
    "get_view_ray",
    "get_camera_info",
]
