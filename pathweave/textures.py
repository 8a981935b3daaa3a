"""
Texture system for the path tracer.

Implements:
- Solid color textures
- Procedural checker pattern
- Perlin turbulence (marble-like) noise

The renderer only ever calls `value(u, v, point)`.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import math

from .vec3 import Color, Point3
from .perlin import Perlin


class Texture(ABC):
    """Abstract base class for textures."""

    @abstractmethod
    def value(self, u: float, v: float, point: Point3) -> Color:
        """Get the texture color at the given UV coordinates.

        Args:
            u: Horizontal texture coordinate [0, 1]
            v: Vertical texture coordinate [0, 1]
            point: 3D point in world space (for procedural textures)

        Returns:
            Color at this location
        """
        pass


class SolidColor(Texture):
    """A solid color texture."""

    def __init__(self, color: Color):
        self.color = color

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float) -> SolidColor:
        return cls(Color(r, g, b))

    def value(self, u: float, v: float, point: Point3) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"SolidColor({self.color})"


class CheckerTexture(Texture):
    """A 3D checker pattern from the sign of a product of sines."""

    def __init__(self, odd: Texture, even: Texture, frequency: float = 10.0):
        """Create a checker texture.

        Args:
            odd: Texture where the sine product is negative
            even: Texture elsewhere
            frequency: Angular frequency of the pattern along each axis
        """
        self.odd = odd
        self.even = even
        self.frequency = frequency

    @classmethod
    def from_colors(cls, odd: Color, even: Color) -> CheckerTexture:
        return cls(SolidColor(odd), SolidColor(even))

    def value(self, u: float, v: float, point: Point3) -> Color:
        f = self.frequency
        sines = math.sin(f * point.x) * math.sin(f * point.y) * math.sin(f * point.z)
        if sines < 0:
            return self.odd.value(u, v, point)
        return self.even.value(u, v, point)


class NoiseTexture(Texture):
    """Marble-like grey pattern driven by Perlin turbulence."""

    def __init__(self, scale: float = 1.0, color: Color = None):
        """Create a noise texture.

        Args:
            scale: Frequency of the marble veins along z
            color: Base color (noise modulates intensity)
        """
        self.scale = scale
        self.color = color if color is not None else Color(1, 1, 1)
        self.noise = Perlin()

    def value(self, u: float, v: float, point: Point3) -> Color:
        t = 0.5 * (1 + math.sin(self.scale * point.z + 10 * self.noise.turbulence(point)))
        return self.color * t
