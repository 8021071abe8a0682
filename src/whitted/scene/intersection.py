"""Scene-level primitive storage and nearest-intersection search.

The scene keeps two separate, ordered primitive collections (triangles and
spheres) in Taichi fields. Both kinds expose the same capabilities, selected
by a primitive kind:

    primitive_intersect(kind, index, origin, direction) -> HitRecord
    primitive_normal(kind, index, position)            -> outward normal
    primitive_is_inside(kind, direction, normal)       -> 1 if leaving a solid
    primitive_material(kind, index)                    -> material id

The nearest-intersection search threads an explicit ``NearestHit``
accumulator through one collection after the other:

    best = empty_hit()
    best = find_nearest(TRIANGLE, origin, direction, best)
    best = find_nearest(SPHERE, origin, direction, best)

Within a search, a candidate replaces the accumulator when nothing has been
found yet (in this or an earlier collection) or when it is strictly closer.
An empty collection leaves the accumulator untouched.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.intersection import add_sphere, query_nearest
    >>> add_sphere((0.0, 0.0, -3.0), 1.0, material_id=0)
    >>> hit = query_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> hit.distance
    2.0
"""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti

from whitted.core.ray import vec3
from whitted.geometry.sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    sphere_is_inside,
    sphere_normal,
)
from whitted.geometry.triangle import (
    Triangle,
    hit_triangle,
    triangle_is_inside,
    triangle_normal,
)


class PrimitiveKind(IntEnum):
    """Primitive variants, in the order the nearest search visits them."""

    TRIANGLE = 0
    SPHERE = 1


TRIANGLE = int(PrimitiveKind.TRIANGLE)
SPHERE = int(PrimitiveKind.SPHERE)

# Valid hits lie strictly in front of the ray origin
T_MIN = 0.0

# Distance of an empty accumulator ("no hit yet")
INF_DISTANCE = 1e30


@ti.dataclass
class NearestHit:
    """Best-so-far result of a nearest-intersection search.

    Attributes:
        found: 1 once any primitive has been accepted, 0 otherwise.
        kind: PrimitiveKind of the winning primitive (-1 if none).
        index: Index of the winning primitive within its collection (-1 if none).
        distance: Distance along the ray to the hit.
        position: The hit point.
        normal: Outward unit normal, attached after the search completes.
    """

    found: ti.i32
    kind: ti.i32
    index: ti.i32
    distance: ti.f64
    position: vec3
    normal: vec3


# Maximum number of primitives supported in the scene
MAX_TRIANGLES = 4096
MAX_SPHERES = 1024

# Triangle storage: Structure of Arrays layout
triangle_a = ti.Vector.field(3, dtype=ti.f64, shape=MAX_TRIANGLES)
triangle_b = ti.Vector.field(3, dtype=ti.f64, shape=MAX_TRIANGLES)
triangle_c = ti.Vector.field(3, dtype=ti.f64, shape=MAX_TRIANGLES)
triangle_material_ids = ti.field(dtype=ti.i32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_triangles[None] = 0
    num_spheres[None] = 0


def add_triangle(
    a: tuple[float, float, float],
    b: tuple[float, float, float],
    c: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a triangle to the scene.

    Args:
        a: First vertex.
        b: Second vertex.
        c: Third vertex.
        material_id: The material ID to associate with this triangle.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_a[idx] = list(a)
    triangle_b[idx] = list(b)
    triangle_c[idx] = list(c)
    triangle_material_ids[idx] = material_id
    num_triangles[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = list(center)
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


# =============================================================================
# Primitive Capabilities
# =============================================================================


@ti.func
def _get_triangle(index: ti.i32) -> Triangle:
    return Triangle(a=triangle_a[index], b=triangle_b[index], c=triangle_c[index])


@ti.func
def _get_sphere(index: ti.i32) -> Sphere:
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def primitive_count(kind: ti.template()) -> ti.i32:
    """Number of primitives in the collection of the given kind."""
    count = 0
    if ti.static(kind == TRIANGLE):
        count = num_triangles[None]
    else:
        count = num_spheres[None]
    return count


@ti.func
def primitive_intersect(
    kind: ti.template(), index: ti.i32, origin: vec3, direction: vec3
) -> HitRecord:
    """Intersect a ray with one primitive of the given kind."""
    rec = HitRecord(hit=0, distance=0.0, position=vec3(0.0, 0.0, 0.0))
    if ti.static(kind == TRIANGLE):
        rec = hit_triangle(origin, direction, _get_triangle(index), T_MIN, INF_DISTANCE)
    else:
        rec = hit_sphere(origin, direction, _get_sphere(index), T_MIN, INF_DISTANCE)
    return rec


@ti.func
def primitive_normal(kind: ti.i32, index: ti.i32, position: vec3) -> vec3:
    """Outward unit normal of a primitive at a point on its surface."""
    normal = vec3(0.0, 0.0, 0.0)
    if kind == TRIANGLE:
        normal = triangle_normal(_get_triangle(index))
    else:
        normal = sphere_normal(_get_sphere(index), position)
    return normal


@ti.func
def primitive_is_inside(kind: ti.i32, direction: vec3, normal: vec3) -> ti.i32:
    """Whether a ray along direction is leaving the primitive's solid."""
    inside = 0
    if kind == TRIANGLE:
        inside = triangle_is_inside(direction, normal)
    else:
        inside = sphere_is_inside(direction, normal)
    return inside


@ti.func
def primitive_material(kind: ti.i32, index: ti.i32) -> ti.i32:
    """Material ID of a primitive."""
    material_id = 0
    if kind == TRIANGLE:
        material_id = triangle_material_ids[index]
    else:
        material_id = sphere_material_ids[index]
    return material_id


# =============================================================================
# Nearest-Intersection Search
# =============================================================================


@ti.func
def empty_hit() -> NearestHit:
    """An accumulator representing "no hit yet"."""
    return NearestHit(
        found=0,
        kind=-1,
        index=-1,
        distance=INF_DISTANCE,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def find_nearest(
    kind: ti.template(), origin: vec3, direction: vec3, best: NearestHit
) -> NearestHit:
    """Scan one primitive collection and fold its hits into the accumulator.

    Args:
        kind: The primitive kind to scan (compile-time constant).
        origin: Ray origin.
        direction: Unit ray direction.
        best: The accumulator from earlier searches (or ``empty_hit()``).

    Returns:
        The updated accumulator. It is unchanged when no primitive of this
        kind yields a closer valid hit.
    """
    result = best
    for i in range(primitive_count(kind)):
        rec = primitive_intersect(kind, i, origin, direction)
        if rec.hit == 1:
            if result.found == 0 or rec.distance < result.distance:
                result.found = 1
                result.kind = kind
                result.index = i
                result.distance = rec.distance
                result.position = rec.position
    return result


@ti.func
def find_nearest_hit(origin: vec3, direction: vec3) -> NearestHit:
    """Nearest hit over all triangles, then all spheres. No normal attached."""
    best = empty_hit()
    best = find_nearest(TRIANGLE, origin, direction, best)
    best = find_nearest(SPHERE, origin, direction, best)
    return best


@ti.func
def attach_normal(best: NearestHit) -> NearestHit:
    """Compute the outward normal for the confirmed nearest hit."""
    result = best
    if result.found == 1:
        result.normal = primitive_normal(result.kind, result.index, result.position)
    return result


# =============================================================================
# Python-side Query
# =============================================================================


@dataclass
class NearestHitInfo:
    """Python view of a nearest-intersection query result."""

    kind: PrimitiveKind
    index: int
    distance: float
    position: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int


_query_result = NearestHit.field(shape=())
_query_material = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_nearest_kernel(origin: vec3, direction: vec3):
    # Single-iteration outer loop keeps the collection scans serial
    for _ in range(1):
        best = attach_normal(find_nearest_hit(origin, direction))
        _query_result[None] = best
        _query_material[None] = -1
        if best.found == 1:
            _query_material[None] = primitive_material(best.kind, best.index)


def query_nearest(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> NearestHitInfo | None:
    """Find the nearest primitive along a ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before the search.

    Returns:
        A NearestHitInfo, or None if the ray misses every primitive.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    o = np.asarray(origin, dtype=np.float64)
    _query_nearest_kernel(vec3(*o), vec3(*d))

    if _query_result.found[None] == 0:
        return None

    position = _query_result.position[None]
    normal = _query_result.normal[None]
    return NearestHitInfo(
        kind=PrimitiveKind(int(_query_result.kind[None])),
        index=int(_query_result.index[None]),
        distance=float(_query_result.distance[None]),
        position=(float(position[0]), float(position[1]), float(position[2])),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        material_id=int(_query_material[None]),
    )
