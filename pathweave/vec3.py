"""
Vector3 class for 3D math operations.

This is the fundamental building block of the path tracer, used for:
- Points in 3D space
- Direction vectors
- RGB radiance values
"""

from __future__ import annotations
import math
from typing import Union
import numpy as np

from .sampling import random_double


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API. Instances are treated as immutable values.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    # Equality is approximate, so no hash can agree with it
    __hash__ = None

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3.from_array(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        # numpy semantics: division by zero yields inf/nan instead of raising
        with np.errstate(divide='ignore', invalid='ignore'):
            if isinstance(other, Vec3):
                return Vec3.from_array(self._data / other._data)
            return Vec3.from_array(self._data / np.float64(other))

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction."""
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        a = self._data
        b = other._data
        return Vec3(
            a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0]
        )

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given normal."""
        return self - normal * 2 * self.dot(normal)

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return all(abs(c) < epsilon for c in self._data)

    def has_nan(self) -> bool:
        return bool(np.isnan(self._data).any())

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    @staticmethod
    def random(min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Generate a random vector with components in [min_val, max_val)."""
        return Vec3(
            random_double(min_val, max_val),
            random_double(min_val, max_val),
            random_double(min_val, max_val)
        )

    @staticmethod
    def random_in_unit_sphere() -> Vec3:
        """Generate a random point inside the unit sphere."""
        while True:
            p = Vec3.random(-1, 1)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_unit_vector() -> Vec3:
        """Generate a random unit vector (uniform on sphere surface)."""
        return Vec3.random_in_unit_sphere().normalize()

    @staticmethod
    def random_in_unit_disk() -> Vec3:
        """Generate a random point inside the unit disk (z=0)."""
        while True:
            p = Vec3(random_double(-1, 1), random_double(-1, 1), 0)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_cosine_direction() -> Vec3:
        """Sample a direction around +z with density cos(theta)/pi."""
        r1 = random_double()
        r2 = random_double()
        z = math.sqrt(1.0 - r2)
        phi = 2.0 * math.pi * r1
        r2_sqrt = math.sqrt(r2)
        return Vec3(math.cos(phi) * r2_sqrt, math.sin(phi) * r2_sqrt, z)

    @staticmethod
    def random_to_sphere(radius: float, distance_squared: float) -> Vec3:
        """Sample a direction around +z inside the cone subtended by a sphere.

        Args:
            radius: Sphere radius
            distance_squared: Squared distance from the origin to the sphere center
        """
        r1 = random_double()
        r2 = random_double()
        cos_theta_max = math.sqrt(max(0.0, 1.0 - radius * radius / distance_squared))
        z = 1.0 + r2 * (cos_theta_max - 1.0)
        phi = 2.0 * math.pi * r1
        sin_theta = math.sqrt(max(0.0, 1.0 - z * z))
        return Vec3(math.cos(phi) * sin_theta, math.sin(phi) * sin_theta, z)


def de_nan(color: Vec3) -> Vec3:
    """Replace NaN components with zero."""
    if not color.has_nan():
        return color
    return Vec3.from_array(np.nan_to_num(color._data, nan=0.0, posinf=np.inf, neginf=-np.inf))


# Convenience type aliases
Point3 = Vec3
Color = Vec3
