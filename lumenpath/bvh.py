"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

Every node owns exactly two children (primitives or nested nodes) and a
cached AABB enclosing both. The tree is built once before rendering and
is only read afterwards, so render threads share it without locking.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import logging

from .vec3 import Rng, make_rng
from .ray import Ray
from .shapes import Hittable, HitRecord, AABB

logger = logging.getLogger(__name__)


class BVHError(Exception):
    """Scene cannot be organised into a BVH."""


class MissingBoundingBox(BVHError):
    """An object could not report a bounding box."""

    def __init__(self, obj: Hittable):
        super().__init__(f"Object without bounding box: {obj!r}")
        self.obj = obj


class InvalidBoundingBox(BVHError):
    """A bounding box contains NaN or inverted coordinates."""

    def __init__(self, obj: Hittable, box: AABB):
        super().__init__(f"Invalid bounding box {box!r} for {obj!r}")
        self.obj = obj
        self.box = box


class TooFewElements(BVHError):
    """A BVH node needs at least two objects."""

    def __init__(self, count: int):
        super().__init__(f"A BVH node needs at least 2 objects, got {count}")
        self.count = count


class BVHNode(Hittable):
    """Interior node of the hierarchy with two children."""

    __slots__ = ('left', 'right', 'bbox')

    def __init__(self, left: Hittable, right: Hittable, bbox: AABB):
        self.left = left
        self.right = right
        self.bbox = bbox

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        """Return the nearest hit below this node."""
        if not self.bbox.hit(ray, t_min, t_max):
            return None

        hit_left = self.left.hit(ray, t_min, t_max, rng)

        # Anything the right child reports is closer than the left hit
        hit_right = self.right.hit(ray, t_min, hit_left.t if hit_left else t_max, rng)

        if hit_right is not None:
            return hit_right
        return hit_left

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        return self.bbox

    def __repr__(self) -> str:
        return f"BVHNode(bbox={self.bbox})"


def build_bvh(
    objects: Sequence[Hittable],
    time_start: float = 0.0,
    time_end: float = 1.0,
    rng: Optional[Rng] = None
) -> BVHNode:
    """Build a BVH over ``objects``.

    Each node sorts its objects by the minimum corner of their boxes along
    a randomly chosen axis and splits them in half.

    Args:
        objects: At least two bounded objects
        time_start: Start of the interval the boxes must cover
        time_end: End of the interval the boxes must cover
        rng: Random stream used to pick split axes

    Raises:
        MissingBoundingBox: An object has no bounding box
        InvalidBoundingBox: A bounding box has NaN or inverted coordinates
        TooFewElements: Fewer than two objects were given
    """
    if len(objects) < 2:
        raise TooFewElements(len(objects))

    entries: List[Tuple[Hittable, AABB]] = []
    for obj in objects:
        box = obj.bounding_box(time_start, time_end)
        if box is None:
            raise MissingBoundingBox(obj)
        if not box.is_valid():
            raise InvalidBoundingBox(obj, box)
        entries.append((obj, box))

    rng = rng if rng is not None else make_rng()
    root = _build(entries, rng)
    logger.debug("Built BVH over %d objects, bounds %s", len(entries), root.bbox)
    return root


def _build(entries: List[Tuple[Hittable, AABB]], rng: Rng) -> BVHNode:
    axis = int(rng.integers(0, 3))
    entries = sorted(entries, key=lambda entry: entry[1].minimum[axis])

    count = len(entries)
    if count == 2:
        (left, left_box), (right, right_box) = entries
    elif count == 3:
        left = _build(entries[:2], rng)
        left_box = left.bbox
        right, right_box = entries[2]
    else:
        mid = count // 2
        left = _build(entries[:mid], rng)
        right = _build(entries[mid:], rng)
        left_box, right_box = left.bbox, right.bbox

    return BVHNode(left, right, left_box.union(right_box))
