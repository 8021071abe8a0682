"""Ray data structure and vector utilities for Whitted ray tracing.

This module provides the fundamental Ray dataclass and the vector helpers the
shading model relies on (reflection, refraction, normalization). All operations
are Taichi functions so they can be called from inside render kernels.

Every vector is a 3-component 64-bit float. The Taichi runtime must be
initialized with ``default_fp=ti.f64`` so that literals inside kernels match
the field precision; the shadow test compares positions within 1e-6, which
single precision cannot resolve reliably.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.core.ray import make_ray, vec3
    >>> # ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0)) inside a kernel
"""

import taichi as ti
import taichi.math as tm

# Double precision 3D vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Must be unit length
            before it is handed to an intersection test.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Zero-length vectors are returned unchanged instead of producing NaNs.
    """
    n = tm.length(v)
    result = v
    if n > 0.0:
        result = v / n
    return result


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f64):
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident ray (normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        A tuple ``(direction, valid)``. ``valid`` is 0 when total internal
        reflection occurs, in which case ``direction`` is the zero vector.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    valid = 0
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
        valid = 1
    return result, valid


@ti.func
def face_forward(normal: vec3, direction: vec3) -> vec3:
    """Orient a normal so that it faces against the given direction."""
    result = normal
    if tm.dot(direction, normal) > 0.0:
        result = -normal
    return result
