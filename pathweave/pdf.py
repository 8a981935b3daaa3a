"""
Probability density functions for importance sampling scattered directions.

Implements:
- Cosine-weighted hemisphere sampling around a normal
- Uniform sphere sampling (for isotropic media)
- Sampling towards a target shape (direct light sampling)
- An equal-weight mixture of two densities
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import math

from .vec3 import Vec3, Point3
from .onb import ONB
from .sampling import random_double
from .shapes import Hittable


class PDF(ABC):
    """A sampling strategy over directions paired with its density."""

    @abstractmethod
    def value(self, direction: Vec3) -> float:
        """Probability density of `direction` (per unit solid angle)."""
        pass

    @abstractmethod
    def generate(self) -> Vec3:
        """Draw a direction from this distribution."""
        pass


class CosinePDF(PDF):
    """Cosine-weighted distribution over the hemisphere around an axis."""

    def __init__(self, w: Vec3):
        self.uvw = ONB.build_from_w(w)

    def value(self, direction: Vec3) -> float:
        cosine = direction.normalize().dot(self.uvw.w)
        if cosine > 0.0:
            return cosine / math.pi
        return 0.0

    def generate(self) -> Vec3:
        return self.uvw.local(Vec3.random_cosine_direction())


class SpherePDF(PDF):
    """Uniform distribution over all directions."""

    def value(self, direction: Vec3) -> float:
        return 1.0 / (4.0 * math.pi)

    def generate(self) -> Vec3:
        return Vec3.random_unit_vector()


class HittablePDF(PDF):
    """Directions from `origin` towards a target shape.

    The density is the shape's own solid-angle density as seen from
    `origin`, which makes this the direct-light sampling strategy.
    """

    def __init__(self, hittable: Hittable, origin: Point3):
        self.hittable = hittable
        self.origin = origin

    def value(self, direction: Vec3) -> float:
        return self.hittable.pdf_value(self.origin, direction)

    def generate(self) -> Vec3:
        return self.hittable.random(self.origin)


class MixturePDF(PDF):
    """50/50 blend of two distributions."""

    def __init__(self, p0: PDF, p1: PDF):
        self.p0 = p0
        self.p1 = p1

    def value(self, direction: Vec3) -> float:
        return 0.5 * self.p0.value(direction) + 0.5 * self.p1.value(direction)

    def generate(self) -> Vec3:
        if random_double() < 0.5:
            return self.p0.generate()
        return self.p1.generate()
