"""Scene module for geometry storage, lights and scene management.

Components:
    intersection: Triangle and sphere storage plus the nearest-intersection
        search over both collections
    lights: Point light storage
    manager: SceneManager, JSON scene files
    presets: Ready-made demo scene

Importing this package allocates the scene's Taichi fields, so ``ti.init``
must have been called first.
"""

from .intersection import (
    MAX_SPHERES,
    MAX_TRIANGLES,
    NearestHit,
    NearestHitInfo,
    PrimitiveKind,
    add_sphere,
    add_triangle,
    clear_scene,
    find_nearest,
    find_nearest_hit,
    get_sphere_count,
    get_triangle_count,
    query_nearest,
)
from .lights import MAX_LIGHTS, add_light, clear_lights, get_light_count
from .manager import (
    LightInfo,
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TriangleInfo,
    load_scene,
    save_scene,
)
from .presets import DemoSceneParams, create_demo_scene

__all__ = [
    # Primitive storage and search
    "PrimitiveKind",
    "NearestHit",
    "NearestHitInfo",
    "add_triangle",
    "add_sphere",
    "clear_scene",
    "find_nearest",
    "find_nearest_hit",
    "query_nearest",
    "get_triangle_count",
    "get_sphere_count",
    "MAX_TRIANGLES",
    "MAX_SPHERES",
    # Lights
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Scene management
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "TriangleInfo",
    "SphereInfo",
    "LightInfo",
    "load_scene",
    "save_scene",
    # Presets
    "create_demo_scene",
    "DemoSceneParams",
]
