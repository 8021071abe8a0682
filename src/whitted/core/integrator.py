"""Whitted ray-cast driver and render target.

This module implements the recursive ray cast and the kernels that evaluate
it for every pixel of the color map.

A ray cast resolves the nearest hit across triangles and spheres, shades it
locally and follows the reflection and refraction rays the hit spawns, each
with the recursion budget reduced by one. A budget of zero, or a ray that
misses everything, yields the background color (black).

Taichi functions cannot call themselves, so the recursion runs on a per-ray
work stack of (origin, direction, weight, depth) frames evaluated depth
first. A frame's weight is the product of the albedo factors along its path
from the primary ray, so folding ``weight * shade_local`` of every frame into
one accumulator gives the same color as the recursive formulation. Children
whose budget would be zero are not pushed since they contribute background.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.core.integrator import cast_ray
    >>> from whitted.core.options import RenderOptions
    >>> cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(depth=3))
    (0.0, 0.0, 0.0)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.camera.pinhole import get_view_ray
from whitted.core.options import MAX_RECURSION_DEPTH, RenderMode, RenderOptions
from whitted.core.ray import vec3
from whitted.core.shading import shade_local, spawn_secondary
from whitted.scene.intersection import attach_normal, find_nearest_hit

logger = logging.getLogger(__name__)

# A frame at depth d pushes at most two children at depth d - 1 and pops
# before pushing, so at most one pending frame per level plus the current one.
STACK_SIZE = MAX_RECURSION_DEPTH + 1

MODE_FULL = int(RenderMode.FULL)


# =============================================================================
# Ray-Cast Driver
# =============================================================================


@ti.func
def ray_cast(origin: vec3, direction: vec3, mode: ti.i32, depth: ti.i32) -> vec3:
    """Color seen along a ray with the given recursion budget.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.
        mode: A RenderMode value. Depth and normal modes never spawn
            secondary rays.
        depth: Recursion budget. Zero returns the background color without
            querying the scene.

    Returns:
        The accumulated color.
    """
    # Background is black
    color = vec3(0.0, 0.0, 0.0)

    stack_origin = ti.Matrix.zero(ti.f64, STACK_SIZE, 3)
    stack_direction = ti.Matrix.zero(ti.f64, STACK_SIZE, 3)
    stack_weight = ti.Vector.zero(ti.f64, STACK_SIZE)
    stack_depth = ti.Vector.zero(ti.i32, STACK_SIZE)
    top = 0

    if depth > 0:
        for k in ti.static(range(3)):
            stack_origin[0, k] = origin[k]
            stack_direction[0, k] = direction[k]
        stack_weight[0] = 1.0
        stack_depth[0] = depth
        top = 1

    while top > 0:
        top -= 1
        frame_origin = vec3(stack_origin[top, 0], stack_origin[top, 1], stack_origin[top, 2])
        frame_direction = vec3(
            stack_direction[top, 0], stack_direction[top, 1], stack_direction[top, 2]
        )
        weight = stack_weight[top]
        frame_depth = stack_depth[top]

        hit = find_nearest_hit(frame_origin, frame_direction)
        if hit.found == 1:
            hit = attach_normal(hit)
            color += weight * shade_local(hit, frame_direction, mode)

            if mode == MODE_FULL and frame_depth > 1:
                reflection, refraction = spawn_secondary(hit, frame_direction)
                for child in ti.static((refraction, reflection)):
                    if child.valid == 1:
                        for k in ti.static(range(3)):
                            stack_origin[top, k] = child.origin[k]
                            stack_direction[top, k] = child.direction[k]
                        stack_weight[top] = weight * child.weight
                        stack_depth[top] = frame_depth - 1
                        top += 1

    return color


# =============================================================================
# Render Target (Color Map)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color map indexed [row, column], row 0 at the top
_color_map = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the color map.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Reset the color map to the background color."""
    _color_map.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    mode: ti.i32,
    depth: ti.i32,
):
    """Cast one view ray per pixel for rows [row_start, row_end)."""
    for row, col in ti.ndrange((row_start, row_end), width):
        ray = get_view_ray(row, col, width, height)
        _color_map[row, col] = ray_cast(ray.origin, ray.direction, mode, depth)


_single_ray_color = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _cast_single_ray(origin: vec3, direction: vec3, mode: ti.i32, depth: ti.i32):
    # Single-iteration outer loop keeps the driver's inner loops serial
    for _ in range(1):
        _single_ray_color[None] = ray_cast(origin, direction, mode, depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def cast_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    options: RenderOptions | None = None,
) -> tuple[float, float, float]:
    """Cast a single ray against the current scene.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before casting.
        options: Render mode and recursion budget (defaults if None).

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        ValueError: If the options are invalid or the direction is zero.
    """
    options = options or RenderOptions()
    options.validate()

    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if norm == 0.0:
        raise ValueError("Ray direction must be non-zero")
    d = d / norm

    o = np.asarray(origin, dtype=np.float64)
    _cast_single_ray(vec3(*o), vec3(*d), int(options.mode), options.depth)
    color = _single_ray_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_color_map(
    options: RenderOptions,
    row_start: int = 0,
    row_end: int | None = None,
) -> None:
    """Fill rows [row_start, row_end) of the color map.

    The camera must have been set up with ``setup_camera`` for the same
    image size as the render target.

    Args:
        options: Render mode and recursion budget.
        row_start: First row to render.
        row_end: One past the last row to render (defaults to the image height).

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the options or the row range are invalid.
    """
    _check_render_target_initialized()
    options.validate()

    width, height = get_image_dimensions()
    if row_end is None:
        row_end = height
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")
    if row_start == row_end:
        return

    logger.debug("Rendering rows %d-%d", row_start, row_end - 1)
    _render_rows(row_start, row_end, width, height, int(options.mode), options.depth)


def get_color_map_numpy() -> npt.NDArray[np.float64]:
    """Get the color map as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with the raw, unprocessed colors.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return _color_map.to_numpy()[:height, :width].copy()
