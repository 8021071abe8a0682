"""Point light storage.

Lights are stored in Taichi fields so the shading kernels can iterate over
them. Only point lights are supported: a position and an RGB intensity, with
hard shadows.
"""

import taichi as ti

MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    intensity: tuple[float, float, float],
) -> int:
    """Add a point light to the scene.

    Args:
        position: World-space position of the light.
        intensity: RGB intensity (non-negative).

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If any intensity component is negative.
    """
    for i, component in enumerate(intensity):
        if component < 0.0:
            raise ValueError(f"Light intensity component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = list(position)
    light_intensities[idx] = list(intensity)
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light(index: ti.i32):
    """Return (position, intensity) of the light at index."""
    return light_positions[index], light_intensities[index]


@ti.func
def light_count() -> ti.i32:
    """Number of lights, readable from kernels."""
    return num_lights[None]

