"""Materials module.

Components:
    phong: The fixed Phong-style material (ambient, emissive intensity,
        diffuse, specular, refraction index and a 3-component albedo that
        weights direct, reflected and refracted light)

Material properties live in Taichi fields indexed by material id so that
render kernels can look them up with ``get_phong_material``.
"""

from .phong import (
    MAX_MATERIALS,
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_phong_material,
    get_phong_material_count,
)

__all__ = [
    "PhongMaterial",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
    "MAX_MATERIALS",
]
