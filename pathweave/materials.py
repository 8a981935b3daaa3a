"""
Materials system.

Implements:
- Lambertian diffuse (cosine importance sampled)
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with Schlick reflectance)
- Diffuse area light (one-sided emitter)
- Isotropic phase function for participating media
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union
import math

from .vec3 import Vec3, Color, Point3
from .ray import Ray
from .pdf import PDF, CosinePDF, SpherePDF
from .sampling import random_double
from .shapes import HitRecord
from .textures import Texture, SolidColor


@dataclass
class ScatterRecord:
    """Result of a material scatter operation.

    Attributes:
        attenuation: Color multiplier applied to the incoming radiance
        scattered_ray: The outgoing ray
        pdf_value: Density with which `scattered_ray` was drawn
        is_specular: True for delta reflection/refraction, which bypasses
            importance sampling
        pdf: The material's own sampling distribution (None for specular)
    """
    attenuation: Color
    scattered_ray: Ray
    pdf_value: float
    is_specular: bool = False
    pdf: Optional[PDF] = None


def as_texture(value: Union[Texture, Color]) -> Texture:
    """Accept either a Texture or a plain Color."""
    if isinstance(value, Texture):
        return value
    return SolidColor(value)


def refract(v: Vec3, n: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """Refract `v` through a surface with normal `n`.

    Returns None under total internal reflection.
    """
    uv = v.normalize()
    dt = uv.dot(n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1 - dt * dt)
    if discriminant > 0:
        return (uv - n * dt) * ni_over_nt - n * math.sqrt(discriminant)
    return None


def schlick(cosine: float, ref_idx: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - ref_idx) / (1 + ref_idx)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded

        Returns:
            ScatterRecord if the ray scatters, None if it is absorbed
        """
        pass

    def emitted(self, ray_in: Ray, hit: HitRecord, u: float, v: float, point: Point3) -> Color:
        """Return emitted light color. Default is no emission."""
        return Color(0, 0, 0)

    def scattering_pdf(self, ray_in: Ray, hit: HitRecord, scattered: Ray) -> float:
        """Density of the material's own scattering distribution for `scattered`.

        Zero for materials whose scattering is a delta distribution or
        that do not scatter at all.
        """
        return 0.0


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Union[Texture, Color]):
        """Create a Lambertian material.

        Args:
            albedo: Texture or constant color for the base reflectance
        """
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        pdf = CosinePDF(hit.normal)
        direction = pdf.generate().normalize()
        return ScatterRecord(
            attenuation=self.albedo.value(hit.u, hit.v, hit.point),
            scattered_ray=Ray(hit.point, direction),
            pdf_value=pdf.value(direction),
            is_specular=False,
            pdf=pdf
        )

    def scattering_pdf(self, ray_in: Ray, hit: HitRecord, scattered: Ray) -> float:
        cosine = hit.normal.dot(scattered.direction.normalize())
        return max(0.0, cosine) / math.pi

    def __repr__(self) -> str:
        return f"Lambertian({self.albedo!r})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Radius of the random perturbation of the mirror direction (clamped to 1)
        """
        self.albedo = albedo
        self.fuzz = min(fuzz, 1.0)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        reflected = ray_in.direction.normalize().reflect(hit.normal)
        scattered = Ray(hit.point, reflected + Vec3.random_in_unit_sphere() * self.fuzz)

        # Absorb rays perturbed below the surface
        if scattered.direction.dot(hit.normal) <= 0:
            return None

        return ScatterRecord(
            attenuation=self.albedo,
            scattered_ray=scattered,
            pdf_value=0.0,
            is_specular=True
        )


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, refractive_index: float = 1.5):
        """Create a dielectric material.

        Args:
            refractive_index: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.refractive_index = refractive_index

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        direction = ray_in.direction
        ri = self.refractive_index
        cosine = direction.dot(hit.normal) / direction.length()

        if direction.dot(hit.normal) > 0:
            # Leaving the object
            outward_normal = -hit.normal
            ni_over_nt = ri
            cosine = min(ri * cosine, 1.0)
        else:
            outward_normal = hit.normal
            ni_over_nt = 1.0 / ri
            cosine = -cosine

        refracted = refract(direction, outward_normal, ni_over_nt)
        reflect_prob = schlick(cosine, ri) if refracted is not None else 1.0

        if random_double() < reflect_prob:
            out = direction.reflect(hit.normal)
        else:
            out = refracted

        return ScatterRecord(
            attenuation=Color(1, 1, 1),
            scattered_ray=Ray(hit.point, out),
            pdf_value=0.0,
            is_specular=True
        )


class DiffuseLight(Material):
    """One-sided emitter; light leaves along the outward normal only."""

    def __init__(self, emit: Union[Texture, Color]):
        self.emit = as_texture(emit)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        return None

    def emitted(self, ray_in: Ray, hit: HitRecord, u: float, v: float, point: Point3) -> Color:
        if hit.normal.dot(ray_in.direction) < 0.0:
            return self.emit.value(u, v, point)
        return Color(0, 0, 0)

    def __repr__(self) -> str:
        return f"DiffuseLight({self.emit!r})"


class Isotropic(Material):
    """Phase function of a participating medium: scatters uniformly."""

    def __init__(self, albedo: Union[Texture, Color]):
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord) -> Optional[ScatterRecord]:
        pdf = SpherePDF()
        direction = pdf.generate()
        return ScatterRecord(
            attenuation=self.albedo.value(hit.u, hit.v, hit.point),
            scattered_ray=Ray(hit.point, direction),
            pdf_value=pdf.value(direction),
            is_specular=False,
            pdf=pdf
        )

    def scattering_pdf(self, ray_in: Ray, hit: HitRecord, scattered: Ray) -> float:
        return 1.0 / (4.0 * math.pi)
