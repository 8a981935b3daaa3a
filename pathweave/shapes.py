"""
Geometric shapes for the path tracer.

Each shape implements the Hittable protocol: `hit` returns the nearest
intersection strictly inside (t_min, t_max) and `bounding_box` returns
an AABB, or None for unbounded geometry.

Normals stored in a HitRecord are the geometric outward normals (not
flipped towards the ray); one-sided emitters and dielectrics rely on it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .onb import ONB
from .sampling import random_double, generator

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        t: The ray parameter at intersection
        u, v: Texture coordinates at the hit point
        point: The intersection point in world space
        normal: The outward surface normal at the intersection
        material: The material at the hit point (owned by the scene)
    """
    t: float
    u: float
    v: float
    point: Point3
    normal: Vec3
    material: Optional[Material] = None


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (avoid self-intersection)
            t_max: Maximum t value to consider

        Returns:
            HitRecord if intersection found, None otherwise
        """
        pass

    @abstractmethod
    def bounding_box(self) -> Optional[AABB]:
        """Get the axis-aligned bounding box for this object.

        Returns:
            AABB if the object is bounded, None otherwise
        """
        pass

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Density of `direction` when sampling towards this object from `origin`.

        Shapes that cannot be importance sampled report zero.
        """
        return 0.0

    def random(self, origin: Point3) -> Vec3:
        """Sample a direction from `origin` towards this object."""
        return Vec3(1, 0, 0)

    def is_samplable(self) -> bool:
        """True if `pdf_value` and `random` describe directions towards this shape.

        Only such shapes may be used as importance-sampling targets.
        """
        return type(self).random is not Hittable.random


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB using the slab method."""
        for i in range(3):
            direction = ray.direction[i]
            if direction != 0.0:
                inv_d = 1.0 / direction
            else:
                inv_d = math.inf
            origin = ray.origin[i]
            t0 = (self.minimum[i] - origin) * inv_d
            t1 = (self.maximum[i] - origin) * inv_d

            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = t0 if t0 > t_min else t_min
            t_max = t1 if t1 < t_max else t_max

            if t_max <= t_min:
                return False

        return True

    @staticmethod
    def surrounding_box(box0: AABB, box1: AABB) -> AABB:
        """Return the AABB that contains both input boxes."""
        small = Point3(
            min(box0.minimum.x, box1.minimum.x),
            min(box0.minimum.y, box1.minimum.y),
            min(box0.minimum.z, box1.minimum.z)
        )
        big = Point3(
            max(box0.maximum.x, box1.maximum.x),
            max(box0.maximum.y, box1.maximum.y),
            max(box0.maximum.z, box1.maximum.z)
        )
        return AABB(small, big)

    def corners(self) -> Iterator[Point3]:
        """Yield the eight corner points of the box."""
        for i in (0, 1):
            for j in (0, 1):
                for k in (0, 1):
                    yield Point3(
                        self.maximum.x if i else self.minimum.x,
                        self.maximum.y if j else self.minimum.y,
                        self.maximum.z if k else self.minimum.z
                    )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return self.minimum == other.minimum and self.maximum == other.maximum

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (negative radius flips the normals inward)
            material: Material for shading
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        |O + tD - C|^2 = r^2 expands to t^2(D.D) + 2t(D.(O-C)) + (O-C).(O-C) - r^2 = 0;
        with half_b = D.(O-C) the discriminant is half_b^2 - a*c.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant <= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Nearest root first, then the far one
        for root in ((-half_b - sqrtd) / a, (-half_b + sqrtd) / a):
            if t_min < root < t_max:
                point = ray.at(root)
                outward_normal = (point - self.center) / self.radius
                u, v = self.get_sphere_uv(outward_normal)
                return HitRecord(
                    t=root,
                    u=u,
                    v=v,
                    point=point,
                    normal=outward_normal,
                    material=self.material
                )

        return None

    @staticmethod
    def get_sphere_uv(normal: Vec3) -> Tuple[float, float]:
        """Get spherical UV coordinates for a point on the unit sphere.

        u: 1 - (phi + pi) / 2pi where phi = atan2(z, x)
        v: (theta + pi/2) / pi where theta = asin(y)
        """
        phi = math.atan2(normal.z, normal.x)
        theta = math.asin(max(-1.0, min(1.0, normal.y)))
        u = 1.0 - (phi + math.pi) / (2 * math.pi)
        v = (theta + math.pi / 2) / math.pi
        return u, v

    def bounding_box(self) -> Optional[AABB]:
        """Return the AABB containing this sphere."""
        r = abs(self.radius)
        r_vec = Vec3(r, r, r)
        return AABB(self.center - r_vec, self.center + r_vec)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Uniform density over the cone of directions subtended by the sphere."""
        if self.hit(Ray(origin, direction), 0.001, math.inf) is None:
            return 0.0

        distance_squared = (self.center - origin).length_squared()
        cos_theta_max = math.sqrt(max(0.0, 1.0 - self.radius * self.radius / distance_squared))
        solid_angle = 2 * math.pi * (1 - cos_theta_max)
        if solid_angle <= 0:
            return 0.0
        return 1.0 / solid_angle

    def random(self, origin: Point3) -> Vec3:
        direction = self.center - origin
        distance_squared = direction.length_squared()
        uvw = ONB.build_from_w(direction)
        return uvw.local(Vec3.random_to_sphere(self.radius, distance_squared))

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class AxisAlignedRect(Hittable):
    """A rectangle lying in a plane perpendicular to one coordinate axis.

    The rectangle spans [a0, a1] x [b0, b1] over its two in-plane axes
    and sits at coordinate `k` along the remaining axis. Its normal is
    the positive direction of that axis.
    """

    # Indices of the (first in-plane, second in-plane, plane) axes
    axes: Tuple[int, int, int] = (0, 1, 2)
    thickness = 0.0001

    def __init__(self, a0: float, a1: float, b0: float, b1: float, k: float,
                 material: Optional[Material] = None):
        self.a0 = a0
        self.a1 = a1
        self.b0 = b0
        self.b1 = b1
        self.k = k
        self.material = material

        normal = [0.0, 0.0, 0.0]
        normal[self.axes[2]] = 1.0
        self.normal = Vec3(*normal)

    def _compose(self, a: float, b: float, k: float) -> Point3:
        """Build a point from in-plane and plane-axis coordinates."""
        comps = [0.0, 0.0, 0.0]
        a_axis, b_axis, k_axis = self.axes
        comps[a_axis] = a
        comps[b_axis] = b
        comps[k_axis] = k
        return Point3(*comps)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        a_axis, b_axis, k_axis = self.axes

        direction_k = ray.direction[k_axis]
        if direction_k == 0.0:
            # Parallel ray: the plane crossing is at infinity (or undefined)
            return None

        t = (self.k - ray.origin[k_axis]) / direction_k
        if not (t_min < t < t_max):
            return None

        a = ray.origin[a_axis] + t * ray.direction[a_axis]
        b = ray.origin[b_axis] + t * ray.direction[b_axis]
        if a < self.a0 or a > self.a1 or b < self.b0 or b > self.b1:
            return None

        return HitRecord(
            t=t,
            u=(a - self.a0) / (self.a1 - self.a0),
            v=(b - self.b0) / (self.b1 - self.b0),
            point=ray.at(t),
            normal=self.normal,
            material=self.material
        )

    def bounding_box(self) -> Optional[AABB]:
        # Padded along the plane axis so the box never has zero width
        return AABB(
            self._compose(self.a0, self.b0, self.k - self.thickness),
            self._compose(self.a1, self.b1, self.k + self.thickness)
        )

    def area(self) -> float:
        return (self.a1 - self.a0) * (self.b1 - self.b0)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Solid-angle density of uniformly sampling the rectangle's area."""
        rec = self.hit(Ray(origin, direction), 0.001, math.inf)
        if rec is None:
            return 0.0

        length_squared = direction.length_squared()
        distance_squared = rec.t * rec.t * length_squared
        cosine = abs(direction.dot(rec.normal)) / math.sqrt(length_squared)
        if cosine == 0.0:
            return 0.0
        return distance_squared / (cosine * self.area())

    def random(self, origin: Point3) -> Vec3:
        point = self._compose(
            random_double(self.a0, self.a1),
            random_double(self.b0, self.b1),
            self.k
        )
        return point - origin

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.a0}, {self.a1}, "
                f"{self.b0}, {self.b1}, k={self.k})")


class XYRect(AxisAlignedRect):
    """Rectangle in the plane z = k, normal +z."""

    axes = (0, 1, 2)

    def __init__(self, x0: float, x1: float, y0: float, y1: float, k: float,
                 material: Optional[Material] = None):
        super().__init__(x0, x1, y0, y1, k, material)


class XZRect(AxisAlignedRect):
    """Rectangle in the plane y = k, normal +y."""

    axes = (0, 2, 1)

    def __init__(self, x0: float, x1: float, z0: float, z1: float, k: float,
                 material: Optional[Material] = None):
        super().__init__(x0, x1, z0, z1, k, material)


class YZRect(AxisAlignedRect):
    """Rectangle in the plane x = k, normal +x."""

    axes = (1, 2, 0)

    def __init__(self, y0: float, y1: float, z0: float, z1: float, k: float,
                 material: Optional[Material] = None):
        super().__init__(y0, y1, z0, z1, k, material)


class FlipNormals(Hittable):
    """Wraps a shape and inverts the normal of every hit it reports."""

    def __init__(self, obj: Hittable):
        self.obj = obj

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        rec = self.obj.hit(ray, t_min, t_max)
        if rec is None:
            return None
        rec.normal = -rec.normal
        return rec

    def bounding_box(self) -> Optional[AABB]:
        return self.obj.bounding_box()

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        return self.obj.pdf_value(origin, direction)

    def random(self, origin: Point3) -> Vec3:
        return self.obj.random(origin)

    def is_samplable(self) -> bool:
        return self.obj.is_samplable()

    def __repr__(self) -> str:
        return f"FlipNormals({self.obj!r})"


class HittableList(Hittable):
    """An ordered collection of hittable objects, scanned linearly."""

    def __init__(self, objects: Optional[List[Hittable]] = None):
        self.objects: List[Hittable] = objects if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def bounding_box(self) -> Optional[AABB]:
        """Return the AABB containing all objects."""
        if not self.objects:
            return None

        output_box: Optional[AABB] = None
        for obj in self.objects:
            box = obj.bounding_box()
            if box is None:
                return None
            output_box = box if output_box is None else AABB.surrounding_box(output_box, box)

        return output_box

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Average of the member densities (members are chosen uniformly)."""
        if not self.objects:
            return 0.0
        weight = 1.0 / len(self.objects)
        return sum(weight * obj.pdf_value(origin, direction) for obj in self.objects)

    def random(self, origin: Point3) -> Vec3:
        if not self.objects:
            return Vec3(1, 0, 0)
        return generator().choice(self.objects).random(origin)

    def is_samplable(self) -> bool:
        return bool(self.objects) and all(obj.is_samplable() for obj in self.objects)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)


class Cuboid(Hittable):
    """An axis-aligned box built from six rectangles."""

    def __init__(self, p0: Point3, p1: Point3, material: Optional[Material] = None):
        """Create a box from its minimum and maximum corners.

        Args:
            p0: Minimum corner
            p1: Maximum corner
            material: Material shared by all six faces
        """
        self.p0 = p0
        self.p1 = p1
        self.material = material
        self.sides = HittableList([
            XYRect(p0.x, p1.x, p0.y, p1.y, p1.z, material),
            FlipNormals(XYRect(p0.x, p1.x, p0.y, p1.y, p0.z, material)),
            XZRect(p0.x, p1.x, p0.z, p1.z, p1.y, material),
            FlipNormals(XZRect(p0.x, p1.x, p0.z, p1.z, p0.y, material)),
            YZRect(p0.y, p1.y, p0.z, p1.z, p1.x, material),
            FlipNormals(YZRect(p0.y, p1.y, p0.z, p1.z, p0.x, material)),
        ])

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return self.sides.hit(ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        return AABB(self.p0, self.p1)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        """Average of the face densities; a face is picked uniformly by `random`."""
        return self.sides.pdf_value(origin, direction)

    def random(self, origin: Point3) -> Vec3:
        return self.sides.random(origin)

    def __repr__(self) -> str:
        return f"Cuboid(p0={self.p0}, p1={self.p1})"


class Translate(Hittable):
    """Places a shape at an offset without rebuilding its geometry."""

    def __init__(self, obj: Hittable, offset: Vec3):
        self.obj = obj
        self.offset = offset

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        moved = Ray(ray.origin - self.offset, ray.direction)
        rec = self.obj.hit(moved, t_min, t_max)
        if rec is None:
            return None
        rec.point = rec.point + self.offset
        return rec

    def bounding_box(self) -> Optional[AABB]:
        box = self.obj.bounding_box()
        if box is None:
            return None
        return AABB(box.minimum + self.offset, box.maximum + self.offset)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        return self.obj.pdf_value(origin - self.offset, direction)

    def random(self, origin: Point3) -> Vec3:
        return self.obj.random(origin - self.offset)

    def is_samplable(self) -> bool:
        return self.obj.is_samplable()

    def __repr__(self) -> str:
        return f"Translate({self.obj!r}, offset={self.offset})"


class RotateY(Hittable):
    """Rotates a shape about the y axis by a fixed angle in degrees."""

    def __init__(self, obj: Hittable, angle: float):
        self.obj = obj
        self.angle = angle
        radians = math.radians(angle)
        self.sin_theta = math.sin(radians)
        self.cos_theta = math.cos(radians)

        # Rotation does not preserve axis alignment, so rebound the
        # rotated corners of the child's box once up front
        box = obj.bounding_box()
        self.bbox: Optional[AABB] = None
        if box is not None:
            rotated = [self.to_world_space(corner) for corner in box.corners()]
            self.bbox = AABB(
                Point3(min(p.x for p in rotated), min(p.y for p in rotated), min(p.z for p in rotated)),
                Point3(max(p.x for p in rotated), max(p.y for p in rotated), max(p.z for p in rotated))
            )

    def to_object_space(self, v: Vec3) -> Vec3:
        """Rotate a world-space vector by -angle."""
        return Vec3(
            self.cos_theta * v.x - self.sin_theta * v.z,
            v.y,
            self.sin_theta * v.x + self.cos_theta * v.z
        )

    def to_world_space(self, v: Vec3) -> Vec3:
        """Rotate an object-space vector by +angle."""
        return Vec3(
            self.cos_theta * v.x + self.sin_theta * v.z,
            v.y,
            -self.sin_theta * v.x + self.cos_theta * v.z
        )

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        rotated = Ray(self.to_object_space(ray.origin), self.to_object_space(ray.direction))
        rec = self.obj.hit(rotated, t_min, t_max)
        if rec is None:
            return None
        rec.point = self.to_world_space(rec.point)
        rec.normal = self.to_world_space(rec.normal)
        return rec

    def bounding_box(self) -> Optional[AABB]:
        return self.bbox

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        # Rotation preserves solid angle, so the child's density carries over
        return self.obj.pdf_value(self.to_object_space(origin), self.to_object_space(direction))

    def random(self, origin: Point3) -> Vec3:
        return self.to_world_space(self.obj.random(self.to_object_space(origin)))

    def is_samplable(self) -> bool:
        return self.obj.is_samplable()

    def __repr__(self) -> str:
        return f"RotateY({self.obj!r}, angle={self.angle})"
