"""Scene container handed to the renderer."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .vec3 import Color
from .shapes import Hittable, HittableList


@dataclass
class Scene:
    """Geometry to render plus the shapes worth sampling directly.

    Attributes:
        objects: Every primitive in the scene. Not modified once rendering starts.
        lights: Importance-sampling targets (usually the emitters). These
            are not rendered themselves, so a light must also be in `objects`.
        background: Radiance returned for rays that escape the scene
    """
    objects: HittableList = field(default_factory=HittableList)
    lights: Optional[Hittable] = None
    background: Color = field(default_factory=lambda: Color(0, 0, 0))

    def __post_init__(self):
        if self.lights is not None:
            self._check_light(self.lights)

    @staticmethod
    def _check_light(target: Hittable) -> None:
        if not target.is_samplable():
            raise ValueError(f"{target!r} cannot be importance sampled and is not a valid light target")

    def add(self, obj: Hittable) -> None:
        self.objects.add(obj)

    def add_light(self, target: Hittable) -> None:
        """Register a shape towards which scattered rays are importance sampled.

        Raises:
            ValueError: If the shape cannot be sampled (media, BVHs, empty lists)
        """
        self._check_light(target)
        if self.lights is None:
            self.lights = HittableList()
        elif not isinstance(self.lights, HittableList):
            self.lights = HittableList([self.lights])
        self.lights.add(target)

    @property
    def has_lights(self) -> bool:
        if self.lights is None:
            return False
        if isinstance(self.lights, HittableList):
            return len(self.lights) > 0
        return True

    def __len__(self) -> int:
        return len(self.objects)
