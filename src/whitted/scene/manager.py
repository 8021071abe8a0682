"""Scene manager coordinating materials, primitives and lights.

The SceneManager is the Python-side owner of a scene. It writes materials,
triangles, spheres and lights into the Taichi field storage used by the
render kernels and keeps a plain-Python record of everything it added so the
scene can be inspected and serialized.

Materials get sequential integer ids and may also be given a name; primitives
reference their material by either.

Scenes round-trip through dictionaries and JSON files:

    {
      "materials": [{"name": "red", "diffuse_color": [0.7, 0, 0], ...}],
      "triangles": [{"vertices": [[0,0,0],[1,0,0],[0,1,0]], "material": "red"}],
      "spheres": [{"center": [0,0,-3], "radius": 1.0, "material": "red"}],
      "lights": [{"position": [0,5,0], "intensity": [1,1,1]}]
    }

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_material("red", diffuse_color=(0.8, 0.1, 0.1))
    0
    >>> scene.add_sphere((0, 0, -3), 1.0, "red")
    0
    >>> scene.add_light((0, 5, 0), (1, 1, 1))
    0
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from whitted.materials.phong import (
    MAX_MATERIALS,
    add_phong_material,
    clear_phong_materials,
    get_phong_material_count,
)
from whitted.scene.intersection import (
    MAX_SPHERES,
    MAX_TRIANGLES,
    add_sphere,
    add_triangle,
    clear_scene,
    get_sphere_count,
    get_triangle_count,
)
from whitted.scene.lights import MAX_LIGHTS, add_light, clear_lights, get_light_count

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]
MaterialRef = int | str

# Material parameters accepted by add_material, in serialization order
MATERIAL_PARAMETERS = (
    "ambient_color",
    "intensity",
    "diffuse_color",
    "specular_color",
    "specular_exponent",
    "refraction_index",
    "albedo",
)

_COLOR_PARAMETERS = {"ambient_color", "intensity", "diffuse_color", "specular_color", "albedo"}


def _as_vec3(value: Any, what: str) -> Vec3:
    try:
        components = [float(v) for v in value]
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a sequence of 3 numbers, got {value!r}") from None
    if len(components) != 3:
        raise ValueError(f"{what} must have 3 components, got {len(components)}")
    return (components[0], components[1], components[2])


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID used by primitives and kernels.
        name: Optional human-readable name.
        params: The material parameters as stored.
    """

    material_id: int
    name: str | None
    params: dict[str, Any]


@dataclass
class TriangleInfo:
    """Information about a triangle in the scene."""

    triangle_index: int
    vertices: tuple[Vec3, Vec3, Vec3]
    material_id: int


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: Vec3
    radius: float
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light in the scene."""

    light_index: int
    position: Vec3
    intensity: Vec3


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        triangles: List of triangle configurations.
        spheres: List of sphere configurations.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    triangles: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Scene builder writing materials, primitives and lights to field storage.

    Only one scene is resident at a time: the field storage is global, so
    creating a SceneManager (or calling ``clear``) resets it.

    Attributes:
        materials: MaterialInfo for all registered materials, indexed by id.
        triangles: TriangleInfo for all triangles in insertion order.
        spheres: SphereInfo for all spheres in insertion order.
        lights: LightInfo for all lights in insertion order.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.triangles: list[TriangleInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self._material_names: dict[str, int] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_phong_materials()
        clear_lights()
        self.materials.clear()
        self.triangles.clear()
        self.spheres.clear()
        self.lights.clear()
        self._material_names.clear()

    def clear(self) -> None:
        """Clear the entire scene (materials, primitives and lights)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, name: str | None = None, **params: Any) -> int:
        """Add a Phong material to the scene.

        Args:
            name: Optional unique name primitives can reference.
            **params: Any of MATERIAL_PARAMETERS. Missing parameters take the
                defaults of ``add_phong_material``.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the name is taken, a parameter is unknown, or a
                value is out of range.
        """
        if name is not None and name in self._material_names:
            raise ValueError(f"Duplicate material name: {name!r}")
        unknown = set(params) - set(MATERIAL_PARAMETERS)
        if unknown:
            raise ValueError(f"Unknown material parameters: {sorted(unknown)}")

        normalized: dict[str, Any] = {}
        for key, value in params.items():
            if key in _COLOR_PARAMETERS:
                normalized[key] = _as_vec3(value, key)
            else:
                normalized[key] = float(value)

        material_id = add_phong_material(**normalized)

        self.materials.append(MaterialInfo(material_id=material_id, name=name, params=normalized))
        if name is not None:
            self._material_names[name] = material_id

        logger.debug("Added material %d (%s)", material_id, name or "unnamed")
        return material_id

    def resolve_material(self, material: MaterialRef) -> int:
        """Translate a material name or ID to a material ID.

        Raises:
            ValueError: If no such material has been added.
        """
        if isinstance(material, str):
            if material not in self._material_names:
                raise ValueError(f"Unknown material: {material!r}")
            return self._material_names[material]
        if isinstance(material, bool) or not isinstance(material, int):
            raise ValueError(f"Material reference must be a name or an id, got {material!r}")
        if material < 0 or material >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material}")
        return material

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_phong_material_count()

    def get_material_info(self, material: MaterialRef) -> MaterialInfo | None:
        """Get information about a material by name or ID, or None if not found."""
        try:
            return self.materials[self.resolve_material(material)]
        except ValueError:
            return None

    # =========================================================================
    # Primitive and Light Management
    # =========================================================================

    def add_triangle(self, a: Vec3, b: Vec3, c: Vec3, material: MaterialRef) -> int:
        """Add a triangle to the scene.

        The vertex order (a, b, c) fixes the outward normal as
        normalize((b - a) x (c - a)).

        Returns:
            The index of the added triangle.

        Raises:
            RuntimeError: If the maximum number of triangles is exceeded.
            ValueError: If the material is unknown or a vertex is malformed.
        """
        material_id = self.resolve_material(material)
        vertices = (
            _as_vec3(a, "vertex a"),
            _as_vec3(b, "vertex b"),
            _as_vec3(c, "vertex c"),
        )
        triangle_index = add_triangle(*vertices, material_id=material_id)
        self.triangles.append(
            TriangleInfo(triangle_index=triangle_index, vertices=vertices, material_id=material_id)
        )
        return triangle_index

    def add_sphere(self, center: Vec3, radius: float, material: MaterialRef) -> int:
        """Add a sphere to the scene.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the material is unknown or the radius is not positive.
        """
        material_id = self.resolve_material(material)
        center = _as_vec3(center, "sphere center")
        radius = float(radius)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        sphere_index = add_sphere(center, radius, material_id=material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_light(self, position: Vec3, intensity: Vec3) -> int:
        """Add a point light to the scene.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If an intensity component is negative.
        """
        position = _as_vec3(position, "light position")
        intensity = _as_vec3(intensity, "light intensity")
        light_index = add_light(position, intensity)
        self.lights.append(LightInfo(light_index=light_index, position=position, intensity=intensity))
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_triangle_count(self) -> int:
        """Get the number of triangles in the scene."""
        return get_triangle_count()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_triangle_count() + self.get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def _material_ref(self, material_id: int) -> MaterialRef:
        name = self.materials[material_id].name
        return name if name is not None else material_id

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Primitives reference named materials by name and the rest by ID.
        """
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {}
            if mat.name is not None:
                mat_config["name"] = mat.name
            for key in MATERIAL_PARAMETERS:
                if key in mat.params:
                    value = mat.params[key]
                    mat_config[key] = list(value) if key in _COLOR_PARAMETERS else value
            config.materials.append(mat_config)

        for tri in self.triangles:
            config.triangles.append(
                {
                    "vertices": [list(v) for v in tri.vertices],
                    "material": self._material_ref(tri.material_id),
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material": self._material_ref(sphere.material_id),
                }
            )

        for light in self.lights:
            config.lights.append(
                {"position": list(light.position), "intensity": list(light.intensity)}
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Materials are loaded before the
        primitives that reference them. A configuration that does not fit
        the field storage is rejected before anything is cleared.

        Raises:
            RuntimeError: If the configuration exceeds a storage capacity.
            ValueError: If the configuration contains invalid data.
        """
        self._check_capacity(config)
        self.clear()

        for mat_config in config.materials:
            params = dict(mat_config)
            name = params.pop("name", None)
            self.add_material(name, **params)

        for tri_config in config.triangles:
            vertices = tri_config.get("vertices")
            if vertices is None or len(vertices) != 3:
                raise ValueError(f"Triangle needs exactly 3 vertices: {tri_config!r}")
            self.add_triangle(*vertices, material=tri_config.get("material", 0))

        for sphere_config in config.spheres:
            if "center" not in sphere_config or "radius" not in sphere_config:
                raise ValueError(f"Sphere needs a center and a radius: {sphere_config!r}")
            self.add_sphere(
                sphere_config["center"],
                sphere_config["radius"],
                material=sphere_config.get("material", 0),
            )

        for light_config in config.lights:
            if "position" not in light_config or "intensity" not in light_config:
                raise ValueError(f"Light needs a position and an intensity: {light_config!r}")
            self.add_light(light_config["position"], light_config["intensity"])

        logger.info(
            "Loaded scene: %d materials, %d triangles, %d spheres, %d lights",
            len(self.materials),
            len(self.triangles),
            len(self.spheres),
            len(self.lights),
        )

    def _check_capacity(self, config: SceneConfig) -> None:
        for what, count, limit in (
            ("materials", len(config.materials), self.get_max_materials()),
            ("triangles", len(config.triangles), self.get_max_triangles()),
            ("spheres", len(config.spheres), self.get_max_spheres()),
            ("lights", len(config.lights), self.get_max_lights()),
        ):
            if count > limit:
                raise RuntimeError(f"Scene has {count} {what}, maximum supported is {limit}")

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "triangles": config.triangles,
            "spheres": config.spheres,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'triangles', 'spheres' and
                'lights' keys; missing keys mean empty collections.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene description must be a JSON object, got {type(data).__name__}")
        config = SceneConfig(
            materials=data.get("materials", []),
            triangles=data.get("triangles", []),
            spheres=data.get("spheres", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_triangles() -> int:
        """Get the maximum number of triangles supported."""
        return MAX_TRIANGLES

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS


def load_scene(path: str | Path) -> SceneManager:
    """Read a JSON scene file into a fresh SceneManager.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the scene description is invalid.
    """
    path = Path(path)
    logger.info("Loading scene from %s", path)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    scene = SceneManager()
    scene.from_dict(data)
    return scene


def save_scene(scene: SceneManager, path: str | Path) -> None:
    """Write a scene to a JSON file."""
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(scene.to_dict(), f, indent=2)
    logger.info("Saved scene to %s", path)
