"""Tests for the shadow test and the local shading model.

Tests cover:
- Points facing the light are lit, occluded points are shadowed
- Shadow queries are pure (repeatable)
- shade_local in depth, normal and full modes
- spawn_secondary weights and validity
"""

import taichi as ti


def _shadow_query(light, point):
    """Run is_in_shadow once from Python."""
    from whitted.core.ray import vec3
    from whitted.core.shading import is_in_shadow

    result = ti.field(dtype=ti.i32, shape=2)

    @ti.kernel
    def test_kernel(light_position: vec3, p: vec3):
        for _ in range(1):
            result[0] = is_in_shadow(light_position, p)
            result[1] = is_in_shadow(light_position, p)

    test_kernel(vec3(*light), vec3(*point))
    return result[0], result[1]


class TestShadow:
    """Tests for is_in_shadow."""

    def test_lit_point_on_sphere(self):
        """Test the point of a sphere nearest the light is lit."""
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0)

        first, second = _shadow_query((0.0, 5.0, 0.0), (0.0, 1.0, 0.0))
        assert first == 0
        assert second == 0

    def test_far_side_of_sphere_is_shadowed(self):
        """Test the side of a sphere facing away from the light is self-shadowed."""
        from whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0)

        first, second = _shadow_query((0.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert first == 1
        assert second == 1

    def test_occluder_between_light_and_triangle(self):
        """Test a sphere between the light and a floor point shadows it."""
        from whitted.scene.intersection import add_sphere, add_triangle

        add_triangle((-10, 0, -10), (0, 0, 20), (10, 0, -10))
        add_sphere((0.0, 2.0, 0.0), 0.5)

        shadowed, _ = _shadow_query((0.0, 4.0, 0.0), (0.0, 0.0, 0.0))
        assert shadowed == 1

    def test_unoccluded_triangle_point_is_lit(self):
        """Test a floor point with a clear path to the light is lit."""
        from whitted.scene.intersection import add_sphere, add_triangle

        add_triangle((-10, 0, -10), (0, 0, 20), (10, 0, -10))
        add_sphere((5.0, 2.0, 0.0), 0.5)

        shadowed, _ = _shadow_query((0.0, 4.0, 0.0), (0.0, 0.0, 0.0))
        assert shadowed == 0


def _shade(origin, direction, mode):
    """Find the nearest hit along a ray and evaluate shade_local and spawn_secondary."""
    from whitted.core.ray import vec3
    from whitted.core.shading import shade_local, spawn_secondary
    from whitted.scene.intersection import attach_normal, find_nearest_hit

    color = ti.Vector.field(3, dtype=ti.f64, shape=())
    valid = ti.field(dtype=ti.i32, shape=2)
    weight = ti.field(dtype=ti.f64, shape=2)
    child_direction = ti.Vector.field(3, dtype=ti.f64, shape=2)

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, m: ti.i32):
        for _ in range(1):
            hit = attach_normal(find_nearest_hit(o, d))
            color[None] = shade_local(hit, d, m)
            reflection, refraction = spawn_secondary(hit, d)
            valid[0] = reflection.valid
            weight[0] = reflection.weight
            child_direction[0] = reflection.direction
            valid[1] = refraction.valid
            weight[1] = refraction.weight
            child_direction[1] = refraction.direction

    test_kernel(vec3(*origin), vec3(*direction), mode)
    return {
        "color": color.to_numpy(),
        "reflection": (valid[0], weight[0], child_direction.to_numpy()[0]),
        "refraction": (valid[1], weight[1], child_direction.to_numpy()[1]),
    }


class TestShadeLocal:
    """Tests for shade_local."""

    def test_depth_mode_returns_distance(self):
        """Test depth mode replicates the hit distance across channels."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere

        mat = add_phong_material()
        add_sphere((0.0, 0.0, -5.0), 1.0, mat)

        result = _shade((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), int(RenderMode.DEPTH))
        assert all(abs(c - 4.0) < 1e-12 for c in result["color"])

    def test_normal_mode_faces_viewer(self):
        """Test normal mode returns the normal oriented toward the viewer."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_triangle

        mat = add_phong_material()
        # Winding gives a normal along -z, away from the viewer at the origin
        add_triangle((-5, -5, -3), (0, 5, -3), (5, -5, -3), mat)

        result = _shade((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), int(RenderMode.NORMAL))
        assert abs(result["color"][2] - 1.0) < 1e-12

    def test_full_mode_phong(self):
        """Test full mode adds intensity, ambient and albedo-weighted Phong terms."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere
        from whitted.scene.lights import add_light

        mat = add_phong_material(
            ambient_color=(0.1, 0.1, 0.1),
            intensity=(0.05, 0.0, 0.0),
            diffuse_color=(0.5, 0.2, 0.1),
            specular_color=(0.3, 0.3, 0.3),
            specular_exponent=10.0,
            albedo=(0.8, 0.0, 0.0),
        )
        add_sphere((0.0, 0.0, 0.0), 1.0, mat)
        add_light((0.0, 5.0, 0.0), (1.0, 1.0, 1.0))

        result = _shade((0.0, 3.0, 0.0), (0.0, -1.0, 0.0), int(RenderMode.FULL))
        expected = (0.05 + 0.1 + 0.8 * 0.8, 0.1 + 0.8 * 0.5, 0.1 + 0.8 * 0.4)
        for got, want in zip(result["color"], expected):
            assert abs(got - want) < 1e-9

    def test_full_mode_ignores_shadowed_light(self):
        """Test a shadowed light contributes neither diffuse nor specular."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere
        from whitted.scene.lights import add_light

        mat = add_phong_material(
            ambient_color=(0.1, 0.1, 0.1),
            diffuse_color=(1.0, 1.0, 1.0),
            specular_color=(1.0, 1.0, 1.0),
            specular_exponent=1.0,
        )
        add_sphere((0.0, 0.0, 0.0), 1.0, mat)
        # Light below the sphere, viewer above
        add_light((0.0, -5.0, 0.0), (1.0, 1.0, 1.0))

        result = _shade((0.0, 3.0, 0.0), (0.0, -1.0, 0.0), int(RenderMode.FULL))
        for got in result["color"]:
            assert abs(got - 0.1) < 1e-12


class TestSpawnSecondary:
    """Tests for reflection and refraction rays spawned by a hit."""

    def test_diffuse_material_spawns_nothing(self):
        """Test albedo (1, 0, 0) spawns no secondary rays."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere

        mat = add_phong_material(albedo=(1.0, 0.0, 0.0))
        add_sphere((0.0, 0.0, -5.0), 1.0, mat)

        result = _shade((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), int(RenderMode.FULL))
        assert result["reflection"][0] == 0
        assert result["refraction"][0] == 0

    def test_mirror_reflects_back(self):
        """Test a head-on mirror hit reflects straight back with weight albedo[1]."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere

        mat = add_phong_material(albedo=(0.0, 0.7, 0.0))
        add_sphere((0.0, 0.0, -5.0), 1.0, mat)

        result = _shade((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), int(RenderMode.FULL))
        valid, weight, direction = result["reflection"]
        assert valid == 1
        assert abs(weight - 0.7) < 1e-12
        assert abs(direction[2] - 1.0) < 1e-12
        assert result["refraction"][0] == 0

    def test_refraction_weight_outside_and_inside(self):
        """Test refraction is weighted by albedo[2] entering and unscaled leaving."""
        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere

        mat = add_phong_material(refraction_index=1.0, albedo=(0.0, 0.5, 0.4))
        add_sphere((0.0, 0.0, 0.0), 1.0, mat)

        entering = _shade((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), int(RenderMode.FULL))
        valid, weight, direction = entering["refraction"]
        assert valid == 1
        assert abs(weight - 0.4) < 1e-12
        assert abs(direction[2] + 1.0) < 1e-12
        assert entering["reflection"][0] == 1

        leaving = _shade((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), int(RenderMode.FULL))
        valid, weight, _ = leaving["refraction"]
        assert valid == 1
        assert abs(weight - 1.0) < 1e-12
        # No reflection from inside a solid
        assert leaving["reflection"][0] == 0


class TestShadingIsPure:
    """Tests that shading the same hit twice gives the same result."""

    def test_repeated_shading_is_identical(self):
        """Test shade_local and spawn_secondary depend only on their inputs."""
        import numpy as np

        from whitted.core.options import RenderMode
        from whitted.materials.phong import add_phong_material
        from whitted.scene.intersection import add_sphere
        from whitted.scene.lights import add_light

        mat = add_phong_material(
            ambient_color=(0.1, 0.1, 0.1),
            diffuse_color=(0.5, 0.5, 0.5),
            specular_color=(0.3, 0.3, 0.3),
            specular_exponent=20.0,
            refraction_index=1.5,
            albedo=(0.6, 0.3, 0.5),
        )
        add_sphere((0.0, 0.0, -4.0), 1.0, mat)
        add_light((2.0, 5.0, 0.0), (1.0, 0.9, 0.8))

        ray = ((0.0, 0.0, 0.0), (0.1, 0.2, -1.0))
        first = _shade(*ray, int(RenderMode.FULL))
        second = _shade(*ray, int(RenderMode.FULL))

        np.testing.assert_array_equal(first["color"], second["color"])
        for key in ("reflection", "refraction"):
            valid, weight, direction = first[key]
            assert second[key][0] == valid
            assert second[key][1] == weight
            np.testing.assert_array_equal(second[key][2], direction)
