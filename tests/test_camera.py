"""Tests for Camera class."""

import pytest

from pathweave import sampling
from pathweave.vec3 import Vec3, Point3
from pathweave.camera import Camera


class TestCamera:
    """Test Camera ray generation."""

    def test_center_ray_points_at_target(self):
        camera = Camera(
            look_from=Point3(0, 0, 0),
            look_at=Point3(0, 0, -1),
            vup=Vec3(0, 1, 0),
            vfov=90,
            aspect_ratio=1.0
        )
        ray = camera.get_ray(0.5, 0.5)
        assert ray.origin == Point3(0, 0, 0)
        assert ray.direction.normalize() == Vec3(0, 0, -1)

    def test_direction_not_normalized(self):
        camera = Camera(Point3(0, 0, 0), Point3(0, 0, -1), focus_dist=10.0)
        ray = camera.get_ray(0.5, 0.5)
        assert abs(ray.direction.length() - 10.0) < 1e-9

    def test_corners_span_field_of_view(self):
        camera = Camera(
            look_from=Point3(0, 0, 0),
            look_at=Point3(0, 0, -1),
            vfov=90,
            aspect_ratio=1.0,
            focus_dist=1.0
        )
        top = camera.get_ray(0.5, 1.0).direction
        bottom = camera.get_ray(0.5, 0.0).direction
        left = camera.get_ray(0.0, 0.5).direction
        right = camera.get_ray(1.0, 0.5).direction
        # 90 degree field of view: half angle of 45 degrees
        assert top == Vec3(0, 1, -1)
        assert bottom == Vec3(0, -1, -1)
        assert left == Vec3(-1, 0, -1)
        assert right == Vec3(1, 0, -1)

    def test_aspect_ratio_widens_horizontally(self):
        camera = Camera(Point3(0, 0, 0), Point3(0, 0, -1), vfov=90, aspect_ratio=2.0, focus_dist=1.0)
        right = camera.get_ray(1.0, 0.5).direction
        assert abs(right.x - 2.0) < 1e-9

    def test_basis_is_orthonormal(self):
        camera = Camera(Point3(278, 278, -800), Point3(278, 278, 0))
        assert abs(camera.u.dot(camera.v)) < 1e-9
        assert abs(camera.u.dot(camera.w)) < 1e-9
        assert camera.w == Vec3(0, 0, -1)

    def test_pinhole_has_fixed_origin(self):
        camera = Camera(Point3(1, 2, 3), Point3(0, 0, 0))
        for s, t in ((0, 0), (0.3, 0.8), (1, 1)):
            assert camera.get_ray(s, t).origin == Point3(1, 2, 3)

    def test_aperture_jitters_origin_on_lens(self):
        sampling.seed(51)
        camera = Camera(
            look_from=Point3(0, 0, 0),
            look_at=Point3(0, 0, -1),
            aperture=2.0,
            focus_dist=5.0
        )
        moved = 0
        for _ in range(50):
            ray = camera.get_ray(0.5, 0.5)
            offset = ray.origin - Point3(0, 0, 0)
            assert offset.length() < 1.0 + 1e-9
            assert abs(offset.z) < 1e-9
            if offset.length() > 1e-6:
                moved += 1
            # All lens samples converge on the focus plane
            focus_point = ray.at(1.0)
            assert focus_point == Point3(0, 0, -5)
        assert moved > 0

    def test_invalid_aspect_ratio(self):
        with pytest.raises(ValueError):
            Camera(Point3(0, 0, 0), Point3(0, 0, -1), aspect_ratio=0.0)
