"""Whitted-style recursive ray tracer built on Taichi.

This package renders scenes of triangles and spheres lit by point lights,
with Phong shading, hard shadows and recursive reflection and refraction.

Subpackages:
    core: Ray utilities, render options, shading, ray-cast driver and renderer
    geometry: Triangle and sphere intersection tests
    materials: Phong material registry
    scene: Primitive and light storage, scene manager, JSON scenes, presets
    camera: Pinhole camera with per-pixel view rays
    preview: Post-processing, PNG export and preview utilities

Taichi must be initialized with ``default_fp=ti.f64`` before importing any
module that allocates fields (everything except ``whitted.core``).
"""

__version__ = "0.1.0"
