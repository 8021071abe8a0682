"""Pinhole camera model for primary ray generation.

The camera is configured by a ``CameraOptions`` dataclass and turns a pixel
(row, column) into a view ray through the pixel's center. Row 0 is the top
row of the image and column 0 the leftmost column.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at unit distance in front of the camera and spans
``2 * tan(vfov / 2)`` vertically and ``aspect`` times that horizontally.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.camera.pinhole import CameraOptions, setup_camera
    >>>
    >>> camera = CameraOptions(
    ...     screen_width=640,
    ...     screen_height=480,
    ...     lookfrom=(0.0, 1.0, 4.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ... )
    >>> setup_camera(camera)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from whitted.core.ray import Ray, make_ray, normalize

logger = logging.getLogger(__name__)

# Fallback up vectors, tried in order when vup is parallel to the view direction
_ALTERNATE_UP = ((0.0, 0.0, -1.0), (1.0, 0.0, 0.0))

_PARALLEL_EPSILON = 1e-12


@dataclass
class CameraOptions:
    """Configuration for a pinhole camera.

    Attributes:
        screen_width: Image width in pixels.
        screen_height: Image height in pixels.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Approximate up direction.
    """

    screen_width: int
    screen_height: int
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.screen_width / self.screen_height

    def validate(self) -> None:
        """Reject camera configurations that cannot produce rays.

        Raises:
            ValueError: If the image size, field of view or view direction
                is invalid.
        """
        if self.screen_width < 1 or self.screen_height < 1:
            raise ValueError(
                f"Image size must be positive, got {self.screen_width}x{self.screen_height}"
            )
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view must be in (0, 180), got {self.vfov}")
        if np.allclose(self.lookfrom, self.lookat):
            raise ValueError("lookfrom and lookat must be different points")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward

# Half extents of the image plane at unit distance
_half_width = ti.field(dtype=ti.f64, shape=())
_half_height = ti.field(dtype=ti.f64, shape=())


def _build_basis(
    lookfrom: np.ndarray, lookat: np.ndarray, vup: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    if np.linalg.norm(u) < _PARALLEL_EPSILON:
        for candidate in _ALTERNATE_UP:
            u = np.cross(np.array(candidate), w)
            if np.linalg.norm(u) >= _PARALLEL_EPSILON:
                logger.warning("vup %s is parallel to the view direction, using %s", vup, candidate)
                break
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)
    return u, v, w


def setup_camera(camera: CameraOptions) -> None:
    """Initialize camera state from configuration.

    Must be called before any kernel generates view rays.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid.
    """
    camera.validate()

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)
    u, v, w = _build_basis(lookfrom, lookat, vup)

    half_height = math.tan(math.radians(camera.vfov) / 2.0)

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _half_height[None] = half_height
    _half_width[None] = half_height * camera.aspect_ratio

    logger.debug(
        "Camera at %s looking at %s, vfov=%.1f, %dx%d",
        camera.lookfrom,
        camera.lookat,
        camera.vfov,
        camera.screen_width,
        camera.screen_height,
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_view_ray(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the view ray through the center of pixel (row, col).

    Args:
        row: Pixel row (0 = top).
        col: Pixel column (0 = left).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera origin with a unit direction.
    """
    x = (2.0 * (ti.cast(col, ti.f64) + 0.5) / width - 1.0) * _half_width[None]
    y = (1.0 - 2.0 * (ti.cast(row, ti.f64) + 0.5) / height) * _half_height[None]
    direction = normalize(x * _camera_u[None] + y * _camera_v[None] - _camera_w[None])
    return make_ray(_camera_origin[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w and the image-plane half extents.
    """

    def _vec(field) -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _vec(_camera_origin),
        "u": _vec(_camera_u),
        "v": _vec(_camera_v),
        "w": _vec(_camera_w),
        "half_extent": (float(_half_width[None]), float(_half_height[None])),
    }
