"""Triangle primitive with ray-triangle intersection.

A triangle is defined by its three vertices a, b and c. Its geometric normal
is normalize(cross(b - a, c - a)), following the right-hand rule over the
vertex order.

Ray-triangle intersection uses the Moller-Trumbore algorithm:
1. Solve origin + t * direction = a + beta * (b - a) + gamma * (c - a)
   with Cramer's rule
2. Accept the hit when beta >= 0, gamma >= 0 and beta + gamma <= 1

Triangles are open surfaces, so a ray is never "inside" one; dielectric
behaviour (unscaled refraction, no reflection) is reserved for closed solids.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.geometry.triangle import Triangle, hit_triangle, vec3
    >>> floor = Triangle(
    ...     a=vec3(-10, 0, -10), b=vec3(0, 0, 20), c=vec3(10, 0, -10)
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti

from whitted.core.ray import cross, dot, normalize, vec3

from .sphere import HitRecord

# Determinants below this magnitude mean the ray is parallel to the plane
PARALLEL_EPSILON = 1e-12


@ti.dataclass
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        a: First vertex (vec3).
        b: Second vertex (vec3).
        c: Third vertex (vec3).
    """

    a: vec3
    b: vec3
    c: vec3


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-triangle intersection (Moller-Trumbore).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        triangle: The triangle to test intersection against.
        t_min: Exclusive lower bound for a valid hit distance.
        t_max: Exclusive upper bound for a valid hit distance.

    Returns:
        A HitRecord; check its hit field.
    """
    edge1 = triangle.b - triangle.a
    edge2 = triangle.c - triangle.a

    p = cross(ray_direction, edge2)
    det = dot(edge1, p)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)

    if ti.abs(det) > PARALLEL_EPSILON:
        inv_det = 1.0 / det
        s = ray_origin - triangle.a
        beta = dot(s, p) * inv_det

        if beta >= 0.0 and beta <= 1.0:
            q = cross(s, edge1)
            gamma = dot(ray_direction, q) * inv_det

            if gamma >= 0.0 and beta + gamma <= 1.0:
                t = dot(edge2, q) * inv_det
                if t > t_min and t < t_max:
                    did_hit = 1
                    hit_t = t
                    hit_point = ray_origin + t * ray_direction

    return HitRecord(
        hit=did_hit,
        distance=hit_t,
        position=hit_point,
    )


@ti.func
def triangle_normal(triangle: Triangle) -> vec3:
    """Unit geometric normal of the triangle (right-hand rule over a, b, c)."""
    return normalize(cross(triangle.b - triangle.a, triangle.c - triangle.a))


@ti.func
def triangle_is_inside(direction: vec3, normal: vec3) -> ti.i32:
    """Triangles bound no volume, so a ray is never inside one."""
    return 0
