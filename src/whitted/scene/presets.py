"""Demo scene: three spheres (diffuse, mirror, glass) on a floor.

The scene exercises every part of the shading model:
- a large floor and back wall made of triangles (diffuse, receives shadows)
- a red diffuse sphere with a Phong highlight
- a mirror sphere (reflection only)
- a glass sphere (mostly refraction, a little reflection)
- two point lights of different colors

The coordinate system is right-handed with Y up; the camera sits in front of
the spheres at +Z looking toward -Z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.presets import create_demo_scene
    >>> from whitted.core.renderer import Renderer
    >>> scene, camera = create_demo_scene(320, 240)
    >>> Renderer(camera).render()
"""

from dataclasses import dataclass

from whitted.camera.pinhole import CameraOptions
from whitted.scene.manager import SceneManager


@dataclass
class DemoSceneParams:
    """Parameters for customizing the demo scene.

    Attributes:
        key_light_intensity: RGB intensity of the main light (upper left).
        fill_light_intensity: RGB intensity of the fill light (upper right).
        glass_refraction_index: Refraction index of the glass sphere.
        floor_color: Diffuse color of the floor and back wall.
    """

    key_light_intensity: tuple[float, float, float] = (1.0, 1.0, 1.0)
    fill_light_intensity: tuple[float, float, float] = (0.4, 0.4, 0.5)
    glass_refraction_index: float = 1.5
    floor_color: tuple[float, float, float] = (0.6, 0.6, 0.6)


# =============================================================================
# Demo Scene Constants
# =============================================================================

FLOOR_Y = -1.0
FLOOR_HALF_SIZE = 10.0
BACK_WALL_Z = -10.0
WALL_HEIGHT = 10.0

SPHERE_RADIUS = 1.0
DIFFUSE_SPHERE_CENTER = (-2.5, 0.0, -5.0)
MIRROR_SPHERE_CENTER = (0.0, 0.0, -6.0)
GLASS_SPHERE_CENTER = (2.2, 0.0, -4.0)

KEY_LIGHT_POSITION = (-6.0, 8.0, 2.0)
FILL_LIGHT_POSITION = (6.0, 6.0, 0.0)

CAMERA_LOOKFROM = (0.0, 1.5, 3.0)
CAMERA_LOOKAT = (0.0, 0.0, -5.0)
CAMERA_VFOV = 60.0


def create_demo_scene(
    width: int = 320,
    height: int = 240,
    params: DemoSceneParams | None = None,
) -> tuple[SceneManager, CameraOptions]:
    """Create the demo scene.

    Args:
        width: Image width in pixels for the returned camera.
        height: Image height in pixels for the returned camera.
        params: Optional DemoSceneParams; defaults are used if None.

    Returns:
        A tuple of (SceneManager, CameraOptions).
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager()

    scene.add_material(
        "floor",
        ambient_color=(0.05, 0.05, 0.05),
        diffuse_color=params.floor_color,
        specular_color=(0.1, 0.1, 0.1),
        specular_exponent=10.0,
        albedo=(1.0, 0.0, 0.0),
    )
    scene.add_material(
        "red",
        ambient_color=(0.05, 0.0, 0.0),
        diffuse_color=(0.7, 0.1, 0.1),
        specular_color=(0.4, 0.4, 0.4),
        specular_exponent=50.0,
        albedo=(1.0, 0.0, 0.0),
    )
    scene.add_material(
        "mirror",
        specular_color=(1.0, 1.0, 1.0),
        specular_exponent=1000.0,
        albedo=(0.1, 0.85, 0.0),
    )
    scene.add_material(
        "glass",
        specular_color=(1.0, 1.0, 1.0),
        specular_exponent=125.0,
        refraction_index=params.glass_refraction_index,
        albedo=(0.0, 0.1, 0.9),
    )

    # Floor (y = FLOOR_Y), wound so the normal points up
    s = FLOOR_HALF_SIZE
    y = FLOOR_Y
    scene.add_triangle((-s, y, s), (s, y, s), (s, y, -s), "floor")
    scene.add_triangle((-s, y, s), (s, y, -s), (-s, y, -s), "floor")

    # Back wall (z = BACK_WALL_Z), facing the camera
    z = BACK_WALL_Z
    top = FLOOR_Y + WALL_HEIGHT
    scene.add_triangle((-s, y, z), (s, y, z), (s, top, z), "floor")
    scene.add_triangle((-s, y, z), (s, top, z), (-s, top, z), "floor")

    scene.add_sphere(DIFFUSE_SPHERE_CENTER, SPHERE_RADIUS, "red")
    scene.add_sphere(MIRROR_SPHERE_CENTER, SPHERE_RADIUS, "mirror")
    scene.add_sphere(GLASS_SPHERE_CENTER, SPHERE_RADIUS, "glass")

    scene.add_light(KEY_LIGHT_POSITION, params.key_light_intensity)
    scene.add_light(FILL_LIGHT_POSITION, params.fill_light_intensity)

    camera = CameraOptions(
        screen_width=width,
        screen_height=height,
        vfov=CAMERA_VFOV,
        lookfrom=CAMERA_LOOKFROM,
        lookat=CAMERA_LOOKAT,
    )

    return scene, camera
