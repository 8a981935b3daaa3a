"""Tests for sampling densities."""

import math

from pathweave import sampling
from pathweave.vec3 import Vec3, Point3
from pathweave.pdf import PDF, CosinePDF, SpherePDF, HittablePDF, MixturePDF
from pathweave.shapes import Sphere, XZRect


class ConstantPDF(PDF):
    """Always returns one direction; used to attribute mixture draws."""

    def __init__(self, direction, density):
        self.direction = direction
        self.density = density

    def value(self, direction):
        return self.density

    def generate(self):
        return self.direction


class TestCosinePDF:
    """Test cosine-weighted hemisphere sampling."""

    def test_value_matches_cosine(self):
        pdf = CosinePDF(Vec3(0, 1, 0))
        assert abs(pdf.value(Vec3(0, 1, 0)) - 1.0 / math.pi) < 1e-9
        d = Vec3(1, 1, 0)
        assert abs(pdf.value(d) - math.cos(math.pi / 4) / math.pi) < 1e-9

    def test_value_independent_of_length(self):
        pdf = CosinePDF(Vec3(0, 0, 1))
        assert abs(pdf.value(Vec3(0, 0, 7)) - pdf.value(Vec3(0, 0, 1))) < 1e-12

    def test_zero_below_horizon(self):
        pdf = CosinePDF(Vec3(0, 1, 0))
        sampling.seed(8)
        for _ in range(100):
            d = Vec3.random_unit_vector()
            if d.y < 0:
                assert pdf.value(d) == 0.0
        assert pdf.value(Vec3(1, 0, 0)) == 0.0

    def test_generated_directions_in_hemisphere(self):
        sampling.seed(9)
        normal = Vec3(0.3, -0.5, 0.8).normalize()
        pdf = CosinePDF(normal)
        for _ in range(500):
            d = pdf.generate()
            assert d.dot(normal) >= -1e-9
            assert abs(d.length() - 1.0) < 1e-9

    def test_histogram_matches_cosine_distribution(self):
        """Fraction of draws with cos(theta) <= c must be c^2."""
        sampling.seed(10)
        axis = Vec3(0, 0, 1)
        pdf = CosinePDF(axis)
        n = 20000
        bins = 5
        counts = [0] * bins
        for _ in range(n):
            cosine = pdf.generate().dot(axis)
            index = min(int(cosine * bins), bins - 1)
            counts[index] += 1

        for i in range(bins):
            lo = i / bins
            hi = (i + 1) / bins
            expected = hi * hi - lo * lo
            assert abs(counts[i] / n - expected) < 0.02

    def test_estimates_integral_of_cosine(self):
        """E[cos / pdf] over the hemisphere is pi."""
        sampling.seed(12)
        pdf = CosinePDF(Vec3(0, 1, 0))
        n = 2000
        total = 0.0
        for _ in range(n):
            d = pdf.generate()
            total += d.y / pdf.value(d)
        assert abs(total / n - math.pi) < 1e-6


class TestSpherePDF:
    """Test uniform sphere sampling."""

    def test_constant_value(self):
        pdf = SpherePDF()
        assert abs(pdf.value(Vec3(1, 2, 3)) - 1.0 / (4 * math.pi)) < 1e-12

    def test_generates_unit_vectors_both_hemispheres(self):
        sampling.seed(13)
        pdf = SpherePDF()
        ups = 0
        n = 2000
        for _ in range(n):
            d = pdf.generate()
            assert abs(d.length() - 1.0) < 1e-9
            if d.y > 0:
                ups += 1
        assert 0.45 < ups / n < 0.55


class TestHittablePDF:
    """Test sampling towards a target shape."""

    def test_delegates_to_shape(self):
        light = XZRect(-1, 1, -1, 1, 10)
        origin = Point3(0, 0, 0)
        pdf = HittablePDF(light, origin)
        assert pdf.value(Vec3(0, 1, 0)) == light.pdf_value(origin, Vec3(0, 1, 0))

    def test_generated_directions_hit_target(self):
        sampling.seed(14)
        target = Sphere(Point3(0, 5, 0), 1.0)
        origin = Point3(0, 0, 0)
        pdf = HittablePDF(target, origin)
        for _ in range(100):
            d = pdf.generate()
            assert pdf.value(d) > 0.0


class TestMixturePDF:
    """Test the equal-weight mixture."""

    def test_value_is_exact_average(self):
        sampling.seed(15)
        p0 = CosinePDF(Vec3(0, 1, 0))
        p1 = HittablePDF(XZRect(-1, 1, -1, 1, 10), Point3(0, 0, 0))
        mixture = MixturePDF(p0, p1)
        for _ in range(100):
            d = Vec3.random_unit_vector()
            expected = 0.5 * p0.value(d) + 0.5 * p1.value(d)
            assert abs(mixture.value(d) - expected) < 1e-12

    def test_generate_splits_evenly(self):
        sampling.seed(16)
        left = Vec3(-1, 0, 0)
        right = Vec3(1, 0, 0)
        mixture = MixturePDF(ConstantPDF(left, 1.0), ConstantPDF(right, 1.0))
        n = 4000
        from_first = sum(1 for _ in range(n) if mixture.generate() == left)
        assert abs(from_first / n - 0.5) < 0.05
