"""
Participating media.

A ConstantMedium fills a closed boundary shape with a homogeneous
density. Rays passing through it scatter at an exponentially
distributed free-path distance, using an isotropic phase function.
"""

from __future__ import annotations
from typing import Optional, Union
import math

from .vec3 import Vec3, Color
from .ray import Ray
from .sampling import random_double
from .shapes import Hittable, HitRecord, AABB
from .textures import Texture
from .materials import Isotropic


class ConstantMedium(Hittable):
    """A constant density participating medium.

    Can be used for fog, smoke, clouds, etc.
    The medium is defined by a boundary shape and a density.
    """

    def __init__(self, boundary: Hittable, density: float, albedo: Union[Texture, Color]):
        """Create a constant density medium.

        Args:
            boundary: The closed shape that defines the medium's extent
            density: Scattering events per unit length (higher = more opaque)
            albedo: Texture or color of the medium
        """
        if density <= 0:
            raise ValueError(f"Medium density must be positive, got {density}")
        self.boundary = boundary
        self.density = density
        self.neg_inv_density = -1.0 / density
        self.phase_function = Isotropic(albedo)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Sample a scattering event inside the boundary."""
        # Entry and exit along the whole line, then clip to the query range
        hit1 = self.boundary.hit(ray, -math.inf, math.inf)
        if hit1 is None:
            return None

        hit2 = self.boundary.hit(ray, hit1.t + 0.0001, math.inf)
        if hit2 is None:
            return None

        t_enter = max(hit1.t, t_min)
        t_exit = min(hit2.t, t_max)

        if t_enter >= t_exit:
            return None

        if t_enter < 0:
            t_enter = 0.0

        ray_length = ray.direction.length()
        distance_inside_boundary = (t_exit - t_enter) * ray_length
        # 1 - U lies in (0, 1], keeping log finite
        hit_distance = self.neg_inv_density * math.log(1.0 - random_double())

        if hit_distance >= distance_inside_boundary:
            return None

        t = t_enter + hit_distance / ray_length
        return HitRecord(
            t=t,
            u=0.0,
            v=0.0,
            point=ray.at(t),
            normal=Vec3(1, 0, 0),  # arbitrary
            material=self.phase_function
        )

    def bounding_box(self) -> Optional[AABB]:
        return self.boundary.bounding_box()

    def __repr__(self) -> str:
        return f"ConstantMedium(density={self.density}, boundary={self.boundary!r})"
