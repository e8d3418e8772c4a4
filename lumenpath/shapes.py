"""
Geometric shapes for the path tracer.

Each shape implements the Hittable protocol with `hit` and `bounding_box`.
Normals stored in a HitRecord are outward geometric normals; materials
compare them against the ray direction to tell entering from exiting.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3, Rng
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


# Half thickness given to the flat axis of rectangles so their boxes have volume
RECT_PADDING = 0.0001


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The outward surface normal at the intersection
        t: The ray parameter at intersection
        material: The material at the hit point (shared, never copied)
        u, v: Texture coordinates at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    material: Optional[Material] = None
    u: float = 0.0
    v: float = 0.0


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (avoid self-intersection)
            t_max: Maximum t value to consider
            rng: Random stream for stochastic objects (participating media)

        Returns:
            HitRecord if intersection found, None otherwise
        """

    @abstractmethod
    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        """Get the axis-aligned box enclosing this object over a time interval.

        Returns:
            AABB if the object is bounded, None otherwise
        """


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

    @classmethod
    def empty(cls) -> AABB:
        """Box that contains nothing; union with it returns the other box."""
        inf = float('inf')
        return cls(Point3(inf, inf, inf), Point3(-inf, -inf, -inf))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB using the slab method.

        A zero direction component means the ray runs parallel to that
        slab: it misses when its origin lies outside the slab and the
        axis places no limit on the interval otherwise.
        """
        for i in range(3):
            origin = ray.origin[i]
            direction = ray.direction[i]
            if direction == 0.0:
                if origin < self.minimum[i] or origin > self.maximum[i]:
                    return False
                continue

            inv_d = 1.0 / direction
            t0 = (self.minimum[i] - origin) * inv_d
            t1 = (self.maximum[i] - origin) * inv_d

            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = max(t0, t_min)
            t_max = min(t1, t_max)

            if t_max <= t_min:
                return False

        return True

    def union(self, other: AABB) -> AABB:
        """Return the AABB that contains both boxes."""
        small = Point3(
            min(self.minimum.x, other.minimum.x),
            min(self.minimum.y, other.minimum.y),
            min(self.minimum.z, other.minimum.z)
        )
        big = Point3(
            max(self.maximum.x, other.maximum.x),
            max(self.maximum.y, other.maximum.y),
            max(self.maximum.z, other.maximum.z)
        )
        return AABB(small, big)

    def is_valid(self) -> bool:
        """True when no coordinate is NaN and minimum <= maximum on every axis."""
        for i in range(3):
            lo, hi = self.minimum[i], self.maximum[i]
            if math.isnan(lo) or math.isnan(hi) or lo > hi:
                return False
        return True

    def corners(self) -> List[Point3]:
        """The eight corner points of the box."""
        return [
            Point3(
                self.maximum.x if i else self.minimum.x,
                self.maximum.y if j else self.minimum.y,
                self.maximum.z if k else self.minimum.z
            )
            for i in (0, 1) for j in (0, 1) for k in (0, 1)
        ]

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Sphere(Hittable):
    """A sphere defined by center and radius, optionally moving linearly.

    The center at ray time t is ``center + t * motion``.
    """

    def __init__(
        self,
        center: Point3,
        radius: float,
        material: Optional[Material] = None,
        motion: Optional[Vec3] = None
    ):
        """Create a sphere.

        Args:
            center: Center point of the sphere at time 0
            radius: Radius of the sphere
            material: Material for shading
            motion: Displacement of the center per unit of time (None = static)
        """
        self.center = center
        self.radius = radius
        self.material = material
        self.motion = motion

    def center_at(self, time: float) -> Point3:
        """Get the center position at a given time."""
        if self.motion is None:
            return self.center
        return self.center + self.motion * time

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is solved here with the half-b form.
        """
        center = self.center_at(ray.time)
        oc = ray.origin - center
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
                outward_normal = (point - center) / self.radius
                u, v = sphere_uv(outward_normal)
                return HitRecord(
                    point=point,
                    normal=outward_normal,
                    t=root,
                    material=self.material,
                    u=u,
                    v=v
                )

        return None

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        """Return the AABB containing the sphere over the time interval."""
        r = abs(self.radius)
        r_vec = Vec3(r, r, r)
        start = self.center_at(time_start)
        box = AABB(start - r_vec, start + r_vec)
        if self.motion is None:
            return box
        end = self.center_at(time_end)
        return box.union(AABB(end - r_vec, end + r_vec))

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


def sphere_uv(unit_point: Vec3) -> Tuple[float, float]:
    """Spherical texture coordinates for a point on the unit sphere.

    u: 0 at x=-1 sweeping around the Y axis
    v: 0 at the south pole (y=-1), 1 at the north pole
    """
    phi = math.atan2(unit_point.z, unit_point.x)
    theta = math.asin(max(-1.0, min(1.0, unit_point.y)))
    u = 1.0 - (phi + math.pi) / (2 * math.pi)
    v = (theta + math.pi / 2) / math.pi
    return u, v


class HittableList(Hittable):
    """A collection of hittable objects."""

    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: List[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t, rng)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        """Return the AABB containing all objects."""
        if not self.objects:
            return None

        output_box = AABB.empty()
        for obj in self.objects:
            box = obj.bounding_box(time_start, time_end)
            if box is None:
                return None
            output_box = output_box.union(box)

        return output_box

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)


def _fraction(x: float, lo: float, hi: float) -> float:
    """Position of x within [lo, hi]; 0 for a degenerate interval."""
    extent = hi - lo
    if extent == 0.0:
        return 0.0
    return (x - lo) / extent


class _AxisRect(Hittable):
    """Rectangle lying in a plane perpendicular to one coordinate axis.

    Subclasses pick the in-plane axes (a, b) and the normal axis c.
    """

    a_axis = 0
    b_axis = 1
    c_axis = 2

    def __init__(
        self,
        a_range: Tuple[float, float],
        b_range: Tuple[float, float],
        k: float,
        material: Optional[Material] = None
    ):
        self.a0, self.a1 = a_range
        self.b0, self.b1 = b_range
        self.k = k
        self.material = material
        normal = [0.0, 0.0, 0.0]
        normal[self.c_axis] = 1.0
        self.normal = Vec3(*normal)

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        dc = ray.direction[self.c_axis]
        if dc == 0.0:
            return None

        t = (self.k - ray.origin[self.c_axis]) / dc
        if t < t_min or t > t_max:
            return None

        a = ray.origin[self.a_axis] + t * ray.direction[self.a_axis]
        b = ray.origin[self.b_axis] + t * ray.direction[self.b_axis]
        if a < self.a0 or a > self.a1 or b < self.b0 or b > self.b1:
            return None

        return HitRecord(
            point=ray.at(t),
            normal=self.normal,
            t=t,
            material=self.material,
            u=_fraction(a, self.a0, self.a1),
            v=_fraction(b, self.b0, self.b1)
        )

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        lo = [0.0, 0.0, 0.0]
        hi = [0.0, 0.0, 0.0]
        lo[self.a_axis], hi[self.a_axis] = self.a0, self.a1
        lo[self.b_axis], hi[self.b_axis] = self.b0, self.b1
        lo[self.c_axis], hi[self.c_axis] = self.k - RECT_PADDING, self.k + RECT_PADDING
        return AABB(Point3(*lo), Point3(*hi))

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(({self.a0}, {self.a1}), "
                f"({self.b0}, {self.b1}), k={self.k})")


class XYRect(_AxisRect):
    """Rectangle at z = k spanning x and y; normal +z."""
    a_axis, b_axis, c_axis = 0, 1, 2


class XZRect(_AxisRect):
    """Rectangle at y = k spanning x and z; normal +y."""
    a_axis, b_axis, c_axis = 0, 2, 1


class YZRect(_AxisRect):
    """Rectangle at x = k spanning y and z; normal +x."""
    a_axis, b_axis, c_axis = 1, 2, 0


class RectBox(Hittable):
    """A closed axis-aligned box built from six rectangles.

    The rectangles on the minimum side of each axis have their normals
    flipped so every face points outward.
    """

    def __init__(self, p_min: Point3, p_max: Point3, material: Optional[Material] = None):
        """Create a box from two opposite corners.

        Args:
            p_min: Corner with the smallest coordinates
            p_max: Corner with the largest coordinates
            material: Material shared by all six faces
        """
        from .instances import FlipNormals

        self.p_min = p_min
        self.p_max = p_max
        self.material = material

        x = (p_min.x, p_max.x)
        y = (p_min.y, p_max.y)
        z = (p_min.z, p_max.z)
        self.sides = HittableList([
            XYRect(x, y, p_max.z, material),
            FlipNormals(XYRect(x, y, p_min.z, material)),
            XZRect(x, z, p_max.y, material),
            FlipNormals(XZRect(x, z, p_min.y, material)),
            YZRect(y, z, p_max.x, material),
            FlipNormals(YZRect(y, z, p_min.x, material)),
        ])

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        return self.sides.hit(ray, t_min, t_max, rng)

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        return AABB(self.p_min, self.p_max)

    def __repr__(self) -> str:
        return f"RectBox(min={self.p_min}, max={self.p_max})"
