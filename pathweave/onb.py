"""Orthonormal basis used to map locally sampled directions into world space."""

from __future__ import annotations

from .vec3 import Vec3


class ONB:
    """Orthonormal basis (u, v, w) built around a given axis."""

    __slots__ = ('u', 'v', 'w')

    def __init__(self, u: Vec3, v: Vec3, w: Vec3):
        self.u = u
        self.v = v
        self.w = w

    @classmethod
    def build_from_w(cls, n: Vec3) -> ONB:
        """Build a basis whose w axis is the normalized `n`."""
        w = n.normalize()
        a = Vec3(0, 1, 0) if abs(w.x) > 0.9 else Vec3(1, 0, 0)
        v = w.cross(a).normalize()
        u = w.cross(v)
        return cls(u, v, w)

    def local(self, a: Vec3) -> Vec3:
        """Express local coordinates `a` in world space."""
        return self.u * a.x + self.v * a.y + self.w * a.z

    def __repr__(self) -> str:
        return f"ONB(u={self.u}, v={self.v}, w={self.w})"
