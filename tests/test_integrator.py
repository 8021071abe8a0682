"""Tests for the ray-cast driver and render target.

Tests cover:
- Misses and a zero recursion budget return background
- Hand-computed local shading (single sphere, single light)
- Shadowing of a floor by a sphere
- Mirror reflection and refraction through recursion levels
- Depth and normal modes
- Render target setup and validation
- Repeatability and the albedo (1, 0, 0) case
"""

import pytest


def _emissive(color):
    """Material that shows only its intensity term."""
    from whitted.materials.phong import add_phong_material

    return add_phong_material(intensity=color, albedo=(1.0, 0.0, 0.0))


def _assert_color(got, want, tol=1e-9):
    for g, w in zip(got, want):
        assert abs(g - w) < tol, f"{got} != {want}"


class TestBackground:
    """Tests for rays that see no geometry."""

    def test_miss_returns_black(self):
        """Test a ray that misses every primitive returns exactly zero."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.scene.intersection import add_sphere

        add_sphere((5.0, 5.0, -5.0), 1.0, _emissive((1.0, 1.0, 1.0)))

        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(depth=5))
        assert color == (0.0, 0.0, 0.0)

    def test_zero_depth_returns_black(self):
        """Test a zero budget returns background even when looking at a surface."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, _emissive((1.0, 1.0, 1.0)))

        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(depth=0))
        assert color == (0.0, 0.0, 0.0)

    def test_zero_direction_rejected(self):
        """Test a zero direction is rejected before casting."""
        from whitted.core.integrator import cast_ray

        with pytest.raises(ValueError, match="non-zero"):
            cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_invalid_depth_rejected(self):
        """Test an out-of-range budget is rejected before casting."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import MAX_RECURSION_DEPTH, RenderOptions

        with pytest.raises(ValueError, match="outside"):
            cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(depth=MAX_RECURSION_DEPTH + 1))


class TestLocalShading:
    """Tests for directly lit surfaces."""

    def test_single_sphere_single_light(self):
        """Test a sphere lit from above and viewed from above."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere
        from whitted.scene.lights import add_light

        mat = add_phong_material(
            ambient_color=(0.1, 0.1, 0.1),
            diffuse_color=(0.5, 0.2, 0.1),
            specular_color=(0.3, 0.3, 0.3),
            specular_exponent=10.0,
            albedo=(0.8, 0.0, 0.0),
        )
        add_sphere((0.0, 0.0, 0.0), 1.0, mat)
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))

        color = cast_ray((0.0, 3.0, 0.0), (0.0, -1.0, 0.0), RenderOptions(depth=1))
        _assert_color(color, (0.74, 0.5, 0.42))

    def test_sphere_shadows_floor(self):
        """Test a floor point behind a sphere receives no light."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle
        from whitted.scene.lights import add_light

        floor = add_phong_material(diffuse_color=(0.5, 0.5, 0.5))
        add_triangle((-10, 0, -10), (0, 0, 20), (10, 0, -10), floor)
        add_light((0.0, 4.0, 0.0), (1.0, 1.0, 1.0))

        options = RenderOptions(depth=1)
        lit = cast_ray((3.0, 1.0, 0.0), (-3.0, -1.0, 0.0), options)
        _assert_color(lit, (0.5, 0.5, 0.5))

        add_sphere((0.0, 2.0, 0.0), 0.5, floor)
        shadowed = cast_ray((3.0, 1.0, 0.0), (-3.0, -1.0, 0.0), options)
        assert shadowed == (0.0, 0.0, 0.0)

    def test_multiple_lights_add(self):
        """Test contributions of unshadowed lights are summed."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_triangle
        from whitted.scene.lights import add_light

        floor = add_phong_material(diffuse_color=(1.0, 1.0, 1.0))
        add_triangle((-10, 0, -10), (0, 0, 20), (10, 0, -10), floor)
        add_light((0.0, 4.0, 0.0), (0.25, 0.0, 0.0))
        add_light((0.0, 2.0, 0.0), (0.0, 0.5, 0.0))

        color = cast_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), RenderOptions(depth=1))
        _assert_color(color, (0.25, 0.5, 0.0))


class TestRecursion:
    """Tests for reflection and refraction through the recursion budget."""

    def _mirror_scene(self):
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle

        mirror = add_phong_material(albedo=(0.0, 1.0, 0.0))
        add_sphere((0.0, 0.0, 0.0), 1.0, mirror)
        add_triangle((-10, -10, 10), (10, -10, 10), (0, 20, 10), _emissive((0.2, 0.4, 0.6)))

    def test_mirror_reflects_triangle(self):
        """Test a mirror sphere shows the emissive triangle behind the viewer."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions

        self._mirror_scene()

        color = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=2))
        _assert_color(color, (0.2, 0.4, 0.6))

    def test_mirror_matches_direct_cast(self):
        """Test the reflected color equals a cast from the offset reflection origin."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions

        self._mirror_scene()

        reflected = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=2))
        direct = cast_ray((0.0, 0.0, 1.0 + 1e-5), (0.0, 0.0, 1.0), RenderOptions(depth=1))
        _assert_color(reflected, direct)

    def test_mirror_needs_budget(self):
        """Test the reflection is not traced when the budget is exhausted."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions

        self._mirror_scene()

        color = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=1))
        assert color == (0.0, 0.0, 0.0)

    def test_refraction_through_sphere(self):
        """Test a transparent sphere with index 1 passes the background through.

        Entering is weighted by albedo[2]; leaving is unscaled. Two surface
        crossings plus the triangle hit need a budget of three.
        """
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle

        glass = add_phong_material(refraction_index=1.0, albedo=(0.0, 0.0, 0.5))
        add_sphere((0.0, 0.0, 0.0), 1.0, glass)
        add_triangle((-10, -10, -10), (10, -10, -10), (0, 20, -10), _emissive((0.2, 0.4, 0.6)))

        color = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=3))
        _assert_color(color, (0.1, 0.2, 0.3))

        color = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=2))
        assert color == (0.0, 0.0, 0.0)

    def test_reflection_and_refraction_combine(self):
        """Test both secondary contributions are added to the local color."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle

        glass = add_phong_material(
            ambient_color=(0.01, 0.01, 0.01), refraction_index=1.0, albedo=(1.0, 0.5, 0.5)
        )
        add_sphere((0.0, 0.0, 0.0), 1.0, glass)
        add_triangle((-10, -10, -10), (10, -10, -10), (0, 20, -10), _emissive((0.0, 0.0, 1.0)))
        add_triangle((-10, -10, 10), (10, -10, 10), (0, 20, 10), _emissive((1.0, 0.0, 0.0)))

        color = cast_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), RenderOptions(depth=3))
        # Front surface ambient + reflected red + 0.5 * (back surface ambient + blue)
        expected = (0.01 + 0.5 * 1.0 + 0.5 * 0.01, 0.01 + 0.5 * 0.01, 0.01 + 0.5 * (0.01 + 1.0))
        _assert_color(color, expected)

    def test_deep_mirror_corridor_terminates(self):
        """Test two facing mirrors stop after the maximum budget."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import MAX_RECURSION_DEPTH, RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_triangle

        mirror = add_phong_material(ambient_color=(0.1, 0.1, 0.1), albedo=(1.0, 0.5, 0.0))
        add_triangle((-10, -10, -1), (10, -10, -1), (0, 20, -1), mirror)
        add_triangle((-10, -10, 1), (10, -10, 1), (0, 20, 1), mirror)

        depth = MAX_RECURSION_DEPTH
        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(depth=depth))
        # Geometric series of ambient terms halved at every bounce
        expected = 0.1 * (1.0 - 0.5**depth) / (1.0 - 0.5)
        _assert_color(color, (expected, expected, expected))


class TestVisualizationModes:
    """Tests for depth and normal modes."""

    def test_depth_mode(self):
        """Test depth mode returns the camera-to-hit distance on every channel."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderMode, RenderOptions
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, _emissive((1.0, 1.0, 1.0)))

        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(RenderMode.DEPTH, 3))
        _assert_color(color, (4.0, 4.0, 4.0))

    def test_depth_mode_ignores_mirrors(self):
        """Test depth mode never follows reflections."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderMode, RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, add_phong_material(albedo=(0.0, 1.0, 0.0)))

        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(RenderMode.DEPTH, 5))
        _assert_color(color, (4.0, 4.0, 4.0))

    def test_normal_mode(self):
        """Test normal mode returns the surface normal facing the viewer."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderMode, RenderOptions
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, _emissive((1.0, 1.0, 1.0)))

        color = cast_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), RenderOptions(RenderMode.NORMAL, 1))
        _assert_color(color, (0.0, 0.0, 1.0))


class TestRenderTarget:
    """Tests for render target setup."""

    def test_setup_sets_dimensions(self):
        """Test setup_render_target records the active size."""
        from whitted.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(40, 30)
        assert get_image_dimensions() == (40, 30)

    def test_setup_rejects_oversized(self):
        """Test sizes beyond the preallocated buffer are rejected."""
        from whitted.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_setup_rejects_empty(self):
        """Test non-positive sizes are rejected."""
        from whitted.core.integrator import setup_render_target

        with pytest.raises(ValueError, match="positive"):
            setup_render_target(0, 10)

    def test_color_map_shape_and_clear(self):
        """Test the color map is exposed as (height, width, 3) and starts black."""
        import numpy as np

        from whitted.core.integrator import get_color_map_numpy, setup_render_target

        setup_render_target(8, 4)
        color_map = get_color_map_numpy()
        assert color_map.shape == (4, 8, 3)
        assert np.all(color_map == 0.0)

    def test_invalid_row_range(self):
        """Test render_color_map rejects rows outside the image."""
        from whitted.core.integrator import render_color_map, setup_render_target
        from whitted.core.options import RenderOptions

        setup_render_target(8, 4)
        with pytest.raises(ValueError, match="row range"):
            render_color_map(RenderOptions(), 2, 10)


class TestShadingProperties:
    """Tests for properties that hold for any scene."""

    def _glass_and_mirror_scene(self):
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle
        from whitted.scene.lights import add_light

        floor = add_phong_material(ambient_color=(0.05, 0.05, 0.05), diffuse_color=(0.6, 0.6, 0.6))
        mirror = add_phong_material(specular_color=(1.0, 1.0, 1.0), specular_exponent=50.0,
                                    albedo=(0.2, 0.8, 0.0))
        glass = add_phong_material(specular_color=(0.5, 0.5, 0.5), specular_exponent=125.0,
                                   refraction_index=1.5, albedo=(0.0, 0.1, 0.9))
        add_triangle((-10, -1, 10), (10, -1, 10), (10, -1, -10), floor)
        add_triangle((-10, -1, 10), (10, -1, -10), (-10, -1, -10), floor)
        add_sphere((-1.0, 0.0, -4.0), 1.0, mirror)
        add_sphere((1.0, 0.0, -3.0), 0.8, glass)
        add_light((-4.0, 6.0, 0.0), (1.0, 1.0, 1.0))
        add_light((4.0, 5.0, -2.0), (0.5, 0.5, 0.6))

    def test_repeated_cast_is_identical(self):
        """Test casting the same ray twice gives bit-identical colors."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions

        self._glass_and_mirror_scene()

        for direction in [(-0.25, 0.0, -1.0), (0.25, -0.05, -1.0), (0.0, -0.5, -1.0)]:
            first = cast_ray((0.0, 0.0, 1.0), direction, RenderOptions(depth=6))
            second = cast_ray((0.0, 0.0, 1.0), direction, RenderOptions(depth=6))
            assert first == second

    @pytest.mark.parametrize("refraction_index", [1.0, 2.7])
    def test_diffuse_albedo_ignores_refraction_index(self, refraction_index):
        """Test albedo (1, 0, 0) yields exactly base + diffuse + specular."""
        from whitted.core.integrator import cast_ray
        from whitted.core.options import RenderOptions
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere, add_triangle
        from whitted.scene.lights import add_light

        mat = add_phong_material(
            ambient_color=(0.1, 0.1, 0.1),
            diffuse_color=(0.5, 0.2, 0.1),
            specular_color=(0.3, 0.3, 0.3),
            specular_exponent=10.0,
            refraction_index=refraction_index,
            albedo=(1.0, 0.0, 0.0),
        )
        add_sphere((0.0, 0.0, 0.0), 1.0, mat)
        # Bright surface below the sphere, only visible through refraction
        add_triangle((-10, -5, -10), (0, -5, 20), (10, -5, -10), _emissive((1.0, 1.0, 1.0)))
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))

        color = cast_ray((0.0, 3.0, 0.0), (0.0, -1.0, 0.0), RenderOptions(depth=5))
        # ambient + (diffuse + specular) with both terms at full strength
        _assert_color(color, (0.1 + 0.5 + 0.3, 0.1 + 0.2 + 0.3, 0.1 + 0.1 + 0.3))
