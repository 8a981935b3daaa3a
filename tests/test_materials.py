"""Tests for material system."""

import math

import pytest

from pathweave import sampling
from pathweave.vec3 import Vec3, Point3, Color
from pathweave.ray import Ray
from pathweave.shapes import HitRecord
from pathweave.pdf import CosinePDF, SpherePDF
from pathweave.textures import SolidColor, CheckerTexture
from pathweave.materials import (
    ScatterRecord, Material, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic,
    refract, schlick
)


def make_hit(point=Point3(0, 0, 0), normal=Vec3(0, 1, 0), material=None):
    return HitRecord(t=1.0, u=0.5, v=0.5, point=point, normal=normal, material=material)


class TestLambertian:
    """Test Lambertian diffuse material."""

    def setup_method(self):
        sampling.seed(21)

    def test_scatter_always_succeeds(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        for _ in range(100):
            assert mat.scatter(ray_in, make_hit()) is not None

    def test_scattered_in_hemisphere(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        normal = Vec3(0, 1, 0)
        for _ in range(100):
            record = mat.scatter(ray_in, make_hit(normal=normal))
            assert record.scattered_ray.direction.dot(normal) >= -1e-9
            assert record.scattered_ray.origin == Point3(0, 0, 0)

    def test_record_fields(self):
        albedo = Color(0.8, 0.2, 0.3)
        mat = Lambertian(albedo)
        record = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit())

        assert isinstance(record, ScatterRecord)
        assert record.attenuation == albedo
        assert record.is_specular is False
        assert isinstance(record.pdf, CosinePDF)
        cosine = record.scattered_ray.direction.normalize().y
        assert abs(record.pdf_value - cosine / math.pi) < 1e-9

    def test_accepts_texture(self):
        texture = CheckerTexture.from_colors(Color(0, 0, 0), Color(1, 1, 1))
        mat = Lambertian(texture)
        assert mat.albedo is texture

    def test_wraps_color_in_solid_texture(self):
        mat = Lambertian(Color(0.1, 0.2, 0.3))
        assert isinstance(mat.albedo, SolidColor)

    def test_scattering_pdf(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        hit = make_hit()
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        up = Ray(Point3(0, 0, 0), Vec3(0, 3, 0))
        slanted = Ray(Point3(0, 0, 0), Vec3(1, 1, 0))
        down = Ray(Point3(0, 0, 0), Vec3(0, -1, 0))

        assert abs(mat.scattering_pdf(ray_in, hit, up) - 1 / math.pi) < 1e-9
        assert abs(mat.scattering_pdf(ray_in, hit, slanted) - math.sqrt(0.5) / math.pi) < 1e-9
        assert mat.scattering_pdf(ray_in, hit, down) == 0.0

    def test_does_not_emit(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        hit = make_hit()
        emitted = mat.emitted(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), hit, 0, 0, hit.point)
        assert emitted == Color(0, 0, 0)


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection(self):
        mat = Metal(Color(1, 1, 1), 0.0)
        ray_in = Ray(Point3(-1, 1, 0), Vec3(1, -1, 0))
        record = mat.scatter(ray_in, make_hit())

        assert record is not None
        assert record.is_specular
        assert record.scattered_ray.direction.normalize() == Vec3(1, 1, 0).normalize()

    def test_attenuation(self):
        albedo = Color(0.7, 0.6, 0.5)
        record = Metal(albedo).scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit())
        assert record.attenuation == albedo

    def test_fuzz_is_clamped(self):
        assert Metal(Color(1, 1, 1), 3.0).fuzz == 1.0
        assert Metal(Color(1, 1, 1), 0.3).fuzz == 0.3

    def test_fuzzy_reflection_stays_above_surface(self):
        sampling.seed(22)
        mat = Metal(Color(1, 1, 1), 1.0)
        ray_in = Ray(Point3(-1, 0.1, 0), Vec3(1, -0.1, 0))
        absorbed = 0
        for _ in range(200):
            record = mat.scatter(ray_in, make_hit())
            if record is None:
                absorbed += 1
            else:
                assert record.scattered_ray.direction.dot(Vec3(0, 1, 0)) > 0
        # Grazing incidence with full fuzz absorbs some rays
        assert absorbed > 0

    def test_no_scattering_pdf(self):
        mat = Metal(Color(1, 1, 1))
        hit = make_hit()
        ray = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        assert mat.scattering_pdf(ray, hit, ray) == 0.0


class TestDielectric:
    """Test Dielectric material."""

    def test_always_scatters_specular_white(self):
        sampling.seed(23)
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0.3, -1, 0))
        for _ in range(50):
            record = mat.scatter(ray_in, make_hit())
            assert record is not None
            assert record.is_specular
            assert record.attenuation == Color(1, 1, 1)

    def test_head_on_mostly_refracts(self):
        sampling.seed(24)
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        through = 0
        n = 400
        for _ in range(n):
            record = mat.scatter(ray_in, make_hit())
            if record.scattered_ray.direction.y < 0:
                through += 1
        # Normal-incidence reflectance of glass is 4%
        assert through / n > 0.9

    def test_total_internal_reflection(self):
        sampling.seed(25)
        mat = Dielectric(1.5)
        # Inside the glass, leaving at a grazing angle (normal points outward +y)
        ray_in = Ray(Point3(0, -0.1, 0), Vec3(1, 0.1, 0))
        for _ in range(50):
            record = mat.scatter(ray_in, make_hit())
            assert record.scattered_ray.direction.y < 0

    def test_refract_bends_towards_normal(self):
        incoming = Vec3(1, -1, 0).normalize()
        out = refract(incoming, Vec3(0, 1, 0), 1.0 / 1.5)
        assert out is not None
        sin_in = math.sqrt(0.5)
        sin_out = abs(out.normalize().x)
        assert abs(sin_out - sin_in / 1.5) < 1e-9

    def test_refract_tir_returns_none(self):
        assert refract(Vec3(1, 0.1, 0), Vec3(0, -1, 0), 1.5) is None

    def test_schlick(self):
        assert abs(schlick(1.0, 1.5) - 0.04) < 1e-9
        assert abs(schlick(0.0, 1.5) - 1.0) < 1e-9


class TestDiffuseLight:
    """Test emissive material."""

    def test_emits_on_front_side(self):
        light = DiffuseLight(Color(4, 4, 4))
        hit = make_hit(normal=Vec3(0, -1, 0))
        ray_in = Ray(Point3(0, -5, 0), Vec3(0, 1, 0))
        assert light.emitted(ray_in, hit, 0.5, 0.5, hit.point) == Color(4, 4, 4)

    def test_dark_on_back_side(self):
        light = DiffuseLight(Color(4, 4, 4))
        hit = make_hit(normal=Vec3(0, 1, 0))
        ray_in = Ray(Point3(0, -5, 0), Vec3(0, 1, 0))
        assert light.emitted(ray_in, hit, 0.5, 0.5, hit.point) == Color(0, 0, 0)

    def test_never_scatters(self):
        light = DiffuseLight(Color(1, 1, 1))
        assert light.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit()) is None


class TestIsotropic:
    """Test the medium phase function."""

    def test_scatter(self):
        sampling.seed(26)
        mat = Isotropic(Color(0.5, 0.5, 0.5))
        record = mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit())
        assert record.attenuation == Color(0.5, 0.5, 0.5)
        assert record.is_specular is False
        assert isinstance(record.pdf, SpherePDF)
        assert abs(record.scattered_ray.direction.length() - 1.0) < 1e-9
        assert abs(record.pdf_value - 1 / (4 * math.pi)) < 1e-12

    def test_scattering_pdf_is_uniform(self):
        mat = Isotropic(Color(1, 1, 1))
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        assert abs(mat.scattering_pdf(ray, make_hit(), ray) - 1 / (4 * math.pi)) < 1e-12


class TestMaterialBase:
    """Test the abstract interface."""

    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Material()
