"""
Recursive Monte Carlo path integrator.

All light comes from emissive geometry: a ray that escapes the scene
contributes black. Paths stop when a material absorbs the ray or after
``max_depth`` bounces (a hard cap, not Russian roulette).
"""

from __future__ import annotations
from typing import Optional
import math

from .vec3 import Color, Rng
from .ray import Ray
from .shapes import Hittable

# Lower bound on hit distances; keeps secondary rays off their own surface
T_MIN = 0.001
MAX_DEPTH = 50


def trace(
    ray: Ray,
    scene: Hittable,
    rng: Optional[Rng] = None,
    depth: int = 0,
    max_depth: int = MAX_DEPTH
) -> Color:
    """Estimate the radiance arriving along ``ray``.

    Args:
        ray: The ray to trace
        scene: Root of the scene (BVH, list or any Hittable)
        rng: Random stream of the calling render task
        depth: Number of bounces already taken
        max_depth: Depth at which scattering stops

    Returns:
        Linear radiance (non-negative, unbounded)
    """
    hit = scene.hit(ray, T_MIN, math.inf, rng)
    if hit is None:
        return Color(0, 0, 0)

    material = hit.material
    if material is None:
        return Color(0, 0, 0)

    emitted = material.emitted(hit.u, hit.v, hit.point)
    if depth >= max_depth:
        return emitted

    result = material.scatter(ray, hit, rng)
    if result is None:
        return emitted

    return emitted + result.attenuation * trace(
        result.scattered_ray, scene, rng, depth + 1, max_depth
    )
