"""
Instance wrappers that reposition or reorient any Hittable.

Wrappers transform the incoming ray into the inner object's space,
delegate, and map the returned hit back into world space.
"""

from __future__ import annotations
from typing import Optional
import math

from .vec3 import Vec3, Rng
from .ray import Ray
from .shapes import Hittable, HitRecord, AABB


class FlipNormals(Hittable):
    """Reports the inner object's hits with the normal reversed."""

    def __init__(self, inner: Hittable):
        self.inner = inner

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        hit_record = self.inner.hit(ray, t_min, t_max, rng)
        if hit_record is not None:
            hit_record.normal = -hit_record.normal
        return hit_record

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        return self.inner.bounding_box(time_start, time_end)


class Translate(Hittable):
    """Moves the inner object by a fixed offset."""

    def __init__(self, inner: Hittable, offset: Vec3):
        self.inner = inner
        self.offset = offset

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        moved = Ray(ray.origin - self.offset, ray.direction, ray.time)
        hit_record = self.inner.hit(moved, t_min, t_max, rng)
        if hit_record is not None:
            hit_record.point = hit_record.point + self.offset
        return hit_record

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        box = self.inner.bounding_box(time_start, time_end)
        if box is None:
            return None
        return AABB(box.minimum + self.offset, box.maximum + self.offset)


class RotateY(Hittable):
    """Rotates the inner object about the Y axis.

    The bounding box is computed once from the inner box over [0, 1];
    rotating the eight corners and enclosing them keeps it conservative.
    """

    def __init__(self, inner: Hittable, angle: float):
        """Create a rotation wrapper.

        Args:
            inner: Object to rotate
            angle: Rotation angle in degrees (counter-clockwise seen from +Y)
        """
        self.inner = inner
        self.angle = angle
        radians = math.radians(angle)
        self.sin_theta = math.sin(radians)
        self.cos_theta = math.cos(radians)

        inner_box = inner.bounding_box(0.0, 1.0)
        if inner_box is None:
            self.bbox = None
        else:
            box = AABB.empty()
            for corner in inner_box.corners():
                rotated = self._to_world(corner)
                box = box.union(AABB(rotated, rotated))
            self.bbox = box

    def _to_object(self, v: Vec3) -> Vec3:
        return Vec3(
            self.cos_theta * v.x - self.sin_theta * v.z,
            v.y,
            self.sin_theta * v.x + self.cos_theta * v.z
        )

    def _to_world(self, v: Vec3) -> Vec3:
        return Vec3(
            self.cos_theta * v.x + self.sin_theta * v.z,
            v.y,
            -self.sin_theta * v.x + self.cos_theta * v.z
        )

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        rotated = Ray(self._to_object(ray.origin), self._to_object(ray.direction), ray.time)
        hit_record = self.inner.hit(rotated, t_min, t_max, rng)
        if hit_record is not None:
            hit_record.point = self._to_world(hit_record.point)
            hit_record.normal = self._to_world(hit_record.normal)
        return hit_record

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        return self.bbox
