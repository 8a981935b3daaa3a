"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

BVH is a binary tree where each node contains an AABB and either:
- Exactly one primitive (leaf node)
- Two child nodes (interior node)

A tree is built once from an immutable scene and never modified
afterwards, so several render workers may traverse it concurrently.
"""

from __future__ import annotations
from functools import cmp_to_key
import logging
from typing import Callable, List, Optional, Sequence

from .ray import Ray
from .sampling import random_double
from .shapes import Hittable, HitRecord, AABB, HittableList

logger = logging.getLogger(__name__)


class BVHBuildError(ValueError):
    """Raised when geometry cannot be placed in a BVH."""
    pass


def _require_box(obj: Hittable) -> AABB:
    box = obj.bounding_box()
    if box is None:
        raise BVHBuildError(f"No bounding box for {obj!r}; unbounded geometry cannot be placed in a BVH")
    return box


def box_compare(axis: int) -> Callable[[Hittable, Hittable], int]:
    """Comparator ordering primitives by the minimum of their box on `axis`.

    Exact ties compare as "greater", so the ordering is not strict; it
    only affects tree balance, never which surface is found.
    """
    def compare(a: Hittable, b: Hittable) -> int:
        if _require_box(a).minimum[axis] - _require_box(b).minimum[axis] < 0.0:
            return -1
        return 1
    return compare


class BVHNode(Hittable):
    """A node in the Bounding Volume Hierarchy tree.

    Leaf nodes reference one primitive in `contents`; interior nodes own
    two subtrees in `left` and `right`.
    """

    def __init__(self, objects: List[Hittable], time0: float = 0.0, time1: float = 0.0):
        """Build a BVH over a list of objects.

        The list is sorted in place, one level at a time.

        Args:
            objects: Hittable objects to index (all must be bounded)
            time0: Start of the shutter interval the boxes must cover
            time1: End of the shutter interval the boxes must cover
        """
        if not objects:
            raise BVHBuildError("Cannot build a BVH node over an empty list")

        self.time0 = time0
        self.time1 = time1
        self.contents: Optional[Hittable] = None
        self.left: Optional[BVHNode] = None
        self.right: Optional[BVHNode] = None

        if len(objects) == 1:
            self.contents = objects[0]
            self.bbox = _require_box(self.contents)
            return

        axis = int(3 * random_double())
        objects.sort(key=cmp_to_key(box_compare(axis)))

        mid = len(objects) // 2
        self.left = BVHNode(objects[:mid], time0, time1)
        self.right = BVHNode(objects[mid:], time0, time1)
        self.bbox = AABB.surrounding_box(self.left.bbox, self.right.bbox)

    @property
    def is_leaf(self) -> bool:
        return self.contents is not None

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray intersection with the subtree under this node."""
        if not self.bbox.hit(ray, t_min, t_max):
            return None

        if self.contents is not None:
            return self.contents.hit(ray, t_min, t_max)

        # Test both children: the closer surface may live in either one
        hit_left = self.left.hit(ray, t_min, t_max)
        hit_right = self.right.hit(ray, t_min, t_max)

        if hit_left is not None and hit_right is not None:
            return hit_left if hit_left.t < hit_right.t else hit_right
        if hit_left is not None:
            return hit_left
        return hit_right

    def bounding_box(self) -> Optional[AABB]:
        """Return the bounding box for this node."""
        return self.bbox

    def depth(self) -> int:
        """Number of levels in the subtree (a leaf has depth 1)."""
        if self.contents is not None:
            return 1
        return 1 + max(self.left.depth(), self.right.depth())

    def __repr__(self) -> str:
        if self.contents is not None:
            return f"BVHNode(leaf={self.contents!r})"
        return f"BVHNode(bbox={self.bbox})"


class BVH(Hittable):
    """Bounding Volume Hierarchy acceleration structure.

    Provides O(log n) ray intersection instead of O(n) for n objects.
    An empty scene yields a BVH that never reports a hit.
    """

    def __init__(self, objects: Sequence[Hittable], time0: float = 0.0, time1: float = 0.0):
        """Build a BVH from a sequence of objects.

        Args:
            objects: Hittable objects to accelerate (the sequence is copied)
            time0: Start of the shutter interval
            time1: End of the shutter interval
        """
        self.objects = list(objects)

        if not self.objects:
            self.root: Optional[BVHNode] = None
        else:
            self.root = BVHNode(list(self.objects), time0, time1)
            logger.debug(
                "Built BVH over %d primitives (depth %d)",
                len(self.objects), self.root.depth()
            )

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray intersection using the BVH."""
        if self.root is None:
            return None
        return self.root.hit(ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        """Return the bounding box for the entire BVH."""
        if self.root is None:
            return None
        return self.root.bounding_box()

    def __len__(self) -> int:
        """Return the number of objects in the BVH."""
        return len(self.objects)


def build_bvh(scene: HittableList, time0: float = 0.0, time1: float = 0.0) -> BVH:
    """Convenience function to build a BVH from a HittableList.

    Args:
        scene: The scene as a HittableList
        time0: Start of the shutter interval
        time1: End of the shutter interval

    Returns:
        A BVH acceleration structure
    """
    return BVH(list(scene.objects), time0, time1)
