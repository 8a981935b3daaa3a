"""Gradient (Perlin) noise with random unit-vector lattice gradients."""

from __future__ import annotations
import math
from typing import List

import numpy as np

from .vec3 import Vec3, Point3
from .sampling import generator

POINT_COUNT = 256


class Perlin:
    """3D Perlin noise generator.

    The gradient table and the three permutation tables are drawn from
    the calling thread's random stream at construction time.
    """

    def __init__(self):
        rng = generator()
        gradients = []
        for _ in range(POINT_COUNT):
            gradients.append(Vec3(
                rng.uniform(-1.0, 1.0),
                rng.uniform(-1.0, 1.0),
                rng.uniform(-1.0, 1.0)
            ).normalize().to_array())
        self.ranvec = np.array(gradients, dtype=np.float64)
        self.perm_x = self._generate_perm()
        self.perm_y = self._generate_perm()
        self.perm_z = self._generate_perm()

    @staticmethod
    def _generate_perm() -> List[int]:
        p = list(range(POINT_COUNT))
        generator().shuffle(p)
        return p

    def noise(self, p: Point3) -> float:
        """Smoothly interpolated noise value, roughly in [-1, 1]."""
        u = p.x - math.floor(p.x)
        v = p.y - math.floor(p.y)
        w = p.z - math.floor(p.z)

        i = int(math.floor(p.x))
        j = int(math.floor(p.y))
        k = int(math.floor(p.z))

        # Hermite smoothing of the interpolation weights
        uu = u * u * (3 - 2 * u)
        vv = v * v * (3 - 2 * v)
        ww = w * w * (3 - 2 * w)

        accum = 0.0
        for di in (0, 1):
            for dj in (0, 1):
                for dk in (0, 1):
                    gradient = self.ranvec[
                        self.perm_x[(i + di) & 255]
                        ^ self.perm_y[(j + dj) & 255]
                        ^ self.perm_z[(k + dk) & 255]
                    ]
                    weight = (u - di) * gradient[0] + (v - dj) * gradient[1] + (w - dk) * gradient[2]
                    accum += (
                        (di * uu + (1 - di) * (1 - uu))
                        * (dj * vv + (1 - dj) * (1 - vv))
                        * (dk * ww + (1 - dk) * (1 - ww))
                        * weight
                    )
        return float(accum)

    def turbulence(self, p: Point3, depth: int = 7) -> float:
        """Sum of `depth` octaves of noise, absolute value."""
        accum = 0.0
        temp_p = p
        weight = 1.0

        for _ in range(depth):
            accum += weight * self.noise(temp_p)
            weight *= 0.5
            temp_p = temp_p * 2

        return abs(accum)
