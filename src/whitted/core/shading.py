"""Shadow testing and the Whitted shading model.

Given the nearest hit along a view ray (with its normal attached), the
shading model produces:

- ``shade_local``: the part of the color that needs no further rays. In
  full mode this is ``intensity + ambient + albedo[0] * (diffuse + specular)``
  summed over every unshadowed point light; in depth and normal modes it is
  the hit distance or the surface normal.
- ``spawn_secondary``: the reflection and refraction rays the hit spawns,
  each with the weight its recursive color is multiplied by.

The ray-cast driver combines the two:

    color = shade_local(hit) + sum(weight * ray_cast(child) for child in children)

which is exactly the recursive Whitted formula because the final color is
linear in the reflected and refracted colors.

Refraction always uses the ratio 1 / refraction_index. A refracted ray that
leaves a solid (the view ray is "inside") contributes its color unscaled,
while one entering a solid is weighted by albedo[2]. Reflection is only
traced from outside a solid.

All functions here are pure: they read scene fields and never write to them.
"""

import taichi as ti
import taichi.math as tm

from whitted.core.options import RenderMode
from whitted.core.ray import dot, face_forward, length, normalize, reflect, refract, vec3
from whitted.materials.phong import get_phong_material
from whitted.scene.intersection import (
    NearestHit,
    find_nearest_hit,
    primitive_is_inside,
    primitive_material,
)
from whitted.scene.lights import get_light, light_count

# A light ray's nearest hit must land within this distance of the shaded point
SHADOW_EPSILON = 1e-6

# Secondary ray origins are pushed off the surface by this distance
BOUNCE_EPSILON = 1e-5

MODE_FULL = int(RenderMode.FULL)
MODE_DEPTH = int(RenderMode.DEPTH)
MODE_NORMAL = int(RenderMode.NORMAL)


@ti.dataclass
class SecondaryRay:
    """A reflection or refraction ray spawned by a hit.

    Attributes:
        valid: 1 if the ray should be traced.
        origin: Offset ray origin.
        direction: Unit ray direction.
        weight: Factor applied to the color the ray returns.
    """

    valid: ti.i32
    origin: vec3
    direction: vec3
    weight: ti.f64


@ti.func
def _no_ray() -> SecondaryRay:
    return SecondaryRay(
        valid=0,
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
        weight=0.0,
    )


@ti.func
def is_in_shadow(light_position: vec3, point: vec3) -> ti.i32:
    """Whether something closer to the light occludes the point.

    Casts a ray from the light toward the point and compares the nearest hit
    along it (triangles first, then spheres) with the point itself. The ray
    origin is not offset, so geometry touching the light and hits that only
    approximately coincide with the point are resolved by SHADOW_EPSILON
    alone.

    Args:
        light_position: Position of the point light.
        point: Surface point being shaded.

    Returns:
        1 if the point is in shadow, 0 otherwise. A light ray that hits
        nothing leaves the point lit.
    """
    direction = normalize(point - light_position)
    best = find_nearest_hit(light_position, direction)
    shadowed = 0
    if best.found == 1 and length(point - best.position) > SHADOW_EPSILON:
        shadowed = 1
    return shadowed


@ti.func
def shade_local(hit: NearestHit, view_direction: vec3, mode: ti.i32) -> vec3:
    """Color of a hit that does not depend on secondary rays.

    Args:
        hit: The nearest hit, with its outward normal attached.
        view_direction: Unit direction of the ray that produced the hit.
        mode: A RenderMode value.

    Returns:
        Depth mode: the hit distance on every channel.
        Normal mode: the surface normal flipped to face the viewer, not the
            stored outward normal, so back faces and sphere interiors map
            like front faces.
        Full mode: intensity + ambient + albedo[0] * (diffuse + specular).
    """
    normal = face_forward(hit.normal, view_direction)
    color = vec3(0.0, 0.0, 0.0)

    if mode == MODE_DEPTH:
        color = vec3(hit.distance, hit.distance, hit.distance)
    elif mode == MODE_NORMAL:
        color = normal
    else:
        material = get_phong_material(primitive_material(hit.kind, hit.index))
        diffusion = vec3(0.0, 0.0, 0.0)
        specular = vec3(0.0, 0.0, 0.0)

        for i in range(light_count()):
            light_position, light_intensity = get_light(i)
            if is_in_shadow(light_position, hit.position) == 0:
                light_direction = normalize(hit.position - light_position)
                l_d = tm.max(0.0, dot(-light_direction, normal))
                l_s = tm.pow(
                    tm.max(0.0, dot(-view_direction, reflect(light_direction, normal))),
                    material.specular_exponent,
                )
                diffusion += l_d * light_intensity * material.diffuse_color
                specular += l_s * light_intensity * material.specular_color

        color = (
            material.intensity
            + material.ambient_color
            + material.albedo[0] * (diffusion + specular)
        )

    return color


@ti.func
def spawn_secondary(hit: NearestHit, view_direction: vec3):
    """Reflection and refraction rays spawned by a hit in full mode.

    Args:
        hit: The nearest hit, with its outward normal attached.
        view_direction: Unit direction of the ray that produced the hit.

    Returns:
        A tuple (reflection, refraction) of SecondaryRay. A ray is invalid
        when its albedo weight is zero, when reflecting from inside a solid,
        or, for refraction, on total internal reflection.
    """
    material = get_phong_material(primitive_material(hit.kind, hit.index))
    normal = face_forward(hit.normal, view_direction)
    inside = primitive_is_inside(hit.kind, view_direction, hit.normal)

    refraction = _no_ray()
    if material.albedo[2] > 0.0:
        eta = 1.0 / material.refraction_index
        refracted, ok = refract(view_direction, normal, eta)
        if ok == 1:
            refracted = normalize(refracted)
            refraction.valid = 1
            refraction.origin = hit.position + BOUNCE_EPSILON * refracted
            refraction.direction = refracted
            refraction.weight = ti.select(inside == 1, 1.0, material.albedo[2])

    reflection = _no_ray()
    if material.albedo[1] > 0.0 and inside == 0:
        reflection.valid = 1
        reflection.origin = hit.position + BOUNCE_EPSILON * normal
        reflection.direction = normalize(reflect(view_direction, normal))
        reflection.weight = material.albedo[1]

    return reflection, refraction
