"""Phong-style material used by the Whitted shading model.

A material combines a local illumination model with weights for the global
(recursive) contributions:

    color = intensity + ambient
          + albedo[0] * (diffuse + specular)
          + albedo[1] * reflected
          + albedo[2] * refracted

where, per unshadowed point light L with intensity I,

    diffuse  += max(0, dot(-L, N)) * I * diffuse_color
    specular += max(0, dot(-V, reflect(L, N)))^specular_exponent * I * specular_color

The albedo components are independent weights in [0, 1]; they are not
required to sum to one.

The refracted term is weighted by albedo[2] only when the ray enters a solid.
A ray leaving a solid contributes its refracted color unscaled, and no
reflection is traced from inside.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.materials.phong import add_phong_material
    >>> glass = add_phong_material(
    ...     specular_color=(1.0, 1.0, 1.0),
    ...     specular_exponent=125.0,
    ...     refraction_index=1.5,
    ...     albedo=(0.0, 0.1, 0.9),
    ... )
"""

import taichi as ti

from whitted.core.ray import vec3

Color = tuple[float, float, float]


@ti.dataclass
class PhongMaterial:
    """Phong material properties.

    Attributes:
        ambient_color: Constant ambient term (RGB).
        intensity: Emissive base term (RGB), added regardless of lighting.
        diffuse_color: Lambertian reflectance (RGB).
        specular_color: Phong highlight color (RGB).
        specular_exponent: Phong shininess exponent (>= 0).
        refraction_index: Index of refraction of the medium (> 0).
        albedo: Weights for (direct, reflected, refracted) contributions.
    """

    ambient_color: vec3
    intensity: vec3
    diffuse_color: vec3
    specular_color: vec3
    specular_exponent: ti.f64
    refraction_index: ti.f64
    albedo: vec3


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 256

_ambient_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
_intensities = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
_diffuse_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
_specular_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
_specular_exponents = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
_refraction_indices = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_phong_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def _check_color(name: str, color: Color) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative")


def add_phong_material(
    ambient_color: Color = (0.0, 0.0, 0.0),
    intensity: Color = (0.0, 0.0, 0.0),
    diffuse_color: Color = (0.0, 0.0, 0.0),
    specular_color: Color = (0.0, 0.0, 0.0),
    specular_exponent: float = 0.0,
    refraction_index: float = 1.0,
    albedo: Color = (1.0, 0.0, 0.0),
) -> int:
    """Add a material to the material registry.

    Args:
        ambient_color: Constant ambient term (RGB, non-negative).
        intensity: Emissive base term (RGB, non-negative).
        diffuse_color: Diffuse reflectance (RGB, non-negative).
        specular_color: Specular highlight color (RGB, non-negative).
        specular_exponent: Phong exponent, must be >= 0.
        refraction_index: Index of refraction, must be > 0.
        albedo: Weights for (direct, reflected, refracted) light, each in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is outside its valid range.
    """
    _check_color("ambient_color", ambient_color)
    _check_color("intensity", intensity)
    _check_color("diffuse_color", diffuse_color)
    _check_color("specular_color", specular_color)

    if len(albedo) != 3:
        raise ValueError(f"albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Albedo component {i} = {component} is outside [0, 1]")

    if specular_exponent < 0.0:
        raise ValueError(f"Specular exponent must be >= 0, got {specular_exponent}")
    if refraction_index <= 0.0:
        raise ValueError(f"Refraction index must be > 0, got {refraction_index}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    _ambient_colors[idx] = list(ambient_color)
    _intensities[idx] = list(intensity)
    _diffuse_colors[idx] = list(diffuse_color)
    _specular_colors[idx] = list(specular_color)
    _specular_exponents[idx] = specular_exponent
    _refraction_indices[idx] = refraction_index
    _albedos[idx] = list(albedo)
    num_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_phong_material(material_id: ti.i32) -> PhongMaterial:
    """Look up a material by index.

    Args:
        material_id: The index of the material in the registry.

    Returns:
        The PhongMaterial stored at that index.
    """
    return PhongMaterial(
        ambient_color=_ambient_colors[material_id],
        intensity=_intensities[material_id],
        diffuse_color=_diffuse_colors[material_id],
        specular_color=_specular_colors[material_id],
        specular_exponent=_specular_exponents[material_id],
        refraction_index=_refraction_indices[material_id],
        albedo=_albedos[material_id],
    )
