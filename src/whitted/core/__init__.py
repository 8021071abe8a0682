"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    options: Render mode and recursion budget
    shading: Shadow test and Whitted shading model
    integrator: Ray-cast driver, color map and render kernels
    renderer: Banded Renderer and the ``render`` entry point

The shading, integrator and renderer modules allocate Taichi fields (through
the scene storage they use) and are NOT imported here, so this package can be
imported before ``ti.init``. Import them directly when needed:

    from whitted.core.renderer import Renderer, render
"""

from .options import (
    DEFAULT_DEPTH,
    MAX_RECURSION_DEPTH,
    RenderMode,
    RenderOptions,
    parse_render_mode,
)
from .ray import (
    Ray,
    cross,
    dot,
    face_forward,
    length,
    make_ray,
    normalize,
    reflect,
    refract,
    vec3,
)

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "face_forward",
    "RenderMode",
    "RenderOptions",
    "parse_render_mode",
    "MAX_RECURSION_DEPTH",
    "DEFAULT_DEPTH",
]
