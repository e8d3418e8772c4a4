"""
Volumetric effects for the path tracer.

A constant density medium scatters light at exponentially distributed
distances inside a boundary shape. The boundary must be convex: the
medium looks for exactly one entry and one exit along each ray.
"""

from __future__ import annotations
from typing import Optional, Union
import math

from .vec3 import Vec3, Color, Rng, make_rng
from .ray import Ray
from .shapes import Hittable, HitRecord, AABB
from .materials import Isotropic
from .textures import Texture

# Gap between the entry hit and the search for the exit hit
EXIT_EPSILON = 0.0001


class ConstantMedium(Hittable):
    """A constant density participating medium.

    Can be used for fog, smoke, mist or subsurface-looking solids.
    """

    def __init__(self, boundary: Hittable, density: float, albedo: Union[Texture, Color]):
        """Create a constant density medium.

        Args:
            boundary: Convex shape enclosing the medium
            density: Scattering events per unit distance (higher = more opaque)
            albedo: Texture or color of the isotropic phase function
        """
        if density <= 0:
            raise ValueError(f"Medium density must be positive, got {density}")
        self.boundary = boundary
        self.density = density
        self.neg_inv_density = -1.0 / density
        # Private phase material, never shared with other objects
        self.phase_material = Isotropic(albedo)

    def hit(self, ray: Ray, t_min: float, t_max: float, rng: Optional[Rng] = None) -> Optional[HitRecord]:
        """Sample a scattering event inside the medium."""
        entry = self.boundary.hit(ray, -math.inf, math.inf, rng)
        if entry is None:
            return None

        exit_ = self.boundary.hit(ray, entry.t + EXIT_EPSILON, math.inf, rng)
        if exit_ is None:
            return None

        t_enter = max(entry.t, t_min)
        t_exit = min(exit_.t, t_max)
        if t_enter >= t_exit:
            return None
        t_enter = max(t_enter, 0.0)

        rng = rng if rng is not None else make_rng()
        ray_length = ray.direction.length()
        distance_inside_boundary = (t_exit - t_enter) * ray_length
        # 1 - random() lies in (0, 1], keeping the logarithm finite
        hit_distance = self.neg_inv_density * math.log(1.0 - rng.random())

        if hit_distance >= distance_inside_boundary:
            return None

        t = t_enter + hit_distance / ray_length
        return HitRecord(
            point=ray.at(t),
            normal=Vec3(1, 0, 0),  # Arbitrary, media have no surface
            t=t,
            material=self.phase_material
        )

    def bounding_box(self, time_start: float, time_end: float) -> Optional[AABB]:
        return self.boundary.bounding_box(time_start, time_end)
