"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere
- Ray starting inside sphere (far root)
- Sphere behind the ray origin
- Outward normal and inside test
"""

import taichi as ti


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        from whitted.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        distance = ti.field(dtype=ti.f64, shape=())
        position = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)
            record = hit_sphere(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), sphere, 0.0, 1e30)
            hit[None] = record.hit
            distance[None] = record.distance
            position[None] = record.position

        test_kernel()
        assert hit[None] == 1
        assert abs(distance[None] - 4.0) < 1e-12
        p = position[None]
        assert abs(p[0]) < 1e-12
        assert abs(p[1]) < 1e-12
        assert abs(p[2] - 1.0) < 1e-12

    def test_hit_sphere_miss(self):
        """Test ray passing beside the sphere."""
        from whitted.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)
            record = hit_sphere(vec3(5.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0), sphere, 0.0, 1e30)
            hit[None] = record.hit

        test_kernel()
        assert hit[None] == 0

    def test_hit_sphere_from_inside(self):
        """Test a ray starting at the center uses the far root."""
        from whitted.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        distance = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=2.0)
            record = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0), sphere, 0.0, 1e30)
            hit[None] = record.hit
            distance[None] = record.distance

        test_kernel()
        assert hit[None] == 1
        assert abs(distance[None] - 2.0) < 1e-12

    def test_hit_sphere_behind_origin(self):
        """Test a sphere entirely behind the ray is not hit."""
        from whitted.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 5.0), radius=1.0)
            record = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.0, 1e30)
            hit[None] = record.hit

        test_kernel()
        assert hit[None] == 0

    def test_hit_sphere_respects_t_max(self):
        """Test hits beyond t_max are rejected."""
        from whitted.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, -10.0), radius=1.0)
            record = hit_sphere(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), sphere, 0.0, 5.0)
            hit[None] = record.hit

        test_kernel()
        assert hit[None] == 0


class TestSphereNormal:
    """Tests for the sphere normal and inside test."""

    def test_normal_points_outward(self):
        """Test the normal is the unit vector from center to the point."""
        from whitted.geometry.sphere import make_sphere, sphere_normal, vec3

        normal = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 1.0, 1.0), 2.0)
            normal[None] = sphere_normal(sphere, vec3(1.0, 3.0, 1.0))

        test_kernel()
        n = normal[None]
        assert abs(n[0]) < 1e-12
        assert abs(n[1] - 1.0) < 1e-12
        assert abs(n[2]) < 1e-12

    def test_is_inside(self):
        """Test a direction along the outward normal means the ray is leaving the solid."""
        from whitted.geometry.sphere import sphere_is_inside, vec3

        leaving = ti.field(dtype=ti.i32, shape=())
        entering = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 0.0, 1.0)
            leaving[None] = sphere_is_inside(vec3(0.0, 0.0, 1.0), n)
            entering[None] = sphere_is_inside(vec3(0.0, 0.0, -1.0), n)

        test_kernel()
        assert leaving[None] == 1
        assert entering[None] == 0
