"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection tests:

Components:
    sphere: Sphere primitive, the shared HitRecord, and ray-sphere intersection
    triangle: Triangle primitive with Moller-Trumbore intersection

Each primitive kind exposes the same capabilities, implemented as Taichi
functions (@ti.func) for use in render kernels:

    hit_<kind>(origin, direction, shape, t_min, t_max) -> HitRecord
    <kind>_normal(shape, ...) -> outward unit normal
    <kind>_is_inside(direction, normal) -> 1 if the ray is leaving the solid

No acceleration structure is used; the scene scans primitive lists linearly.
"""

from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_sphere,
    sphere_is_inside,
    sphere_normal,
)
from .triangle import Triangle, hit_triangle, triangle_is_inside, triangle_normal

__all__ = [
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "sphere_normal",
    "sphere_is_inside",
    "Triangle",
    "hit_triangle",
    "triangle_normal",
    "triangle_is_inside",
]
