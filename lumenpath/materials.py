"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)
- Diffuse light (emitter)
- Isotropic (phase function of participating media)

Materials are immutable once built and are shared by reference between
every primitive that uses them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING
import math

from .vec3 import Vec3, Color, Point3, Rng, make_rng
from .ray import Ray
from .textures import Texture, as_texture

if TYPE_CHECKING:
    from .shapes import HitRecord


BLACK = Color(0, 0, 0)


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: Random stream of the calling render task

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """

    def emitted(self, u: float, v: float, point: Point3) -> Color:
        """Return emitted light color. Default is no emission."""
        return BLACK


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Union[Texture, Color]):
        """Create a Lambertian material.

        Args:
            albedo: Texture or plain color giving the reflectance
        """
        self.texture = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        scatter_direction = hit.normal + Vec3.random_in_unit_sphere(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterResult(
            scattered_ray=Ray(hit.point, scatter_direction, ray_in.time),
            attenuation=self.texture.value(hit.u, hit.v, hit.point)
        )


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Radius of the random perturbation (0 = mirror, 1 = very rough)
        """
        if not 0.0 <= fuzz <= 1.0:
            raise ValueError(f"Metal fuzz must be in [0, 1], got {fuzz}")
        self.albedo = albedo
        self.fuzz = fuzz

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        reflected = ray_in.direction.normalize().reflect(hit.normal)
        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        # Reflections pointing into the surface are absorbed
        if reflected.dot(hit.normal) <= 0:
            return None

        return ScatterResult(
            scattered_ray=Ray(hit.point, reflected, ray_in.time),
            attenuation=self.albedo
        )


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ior = ior

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        rng = rng if rng is not None else make_rng()
        direction = ray_in.direction
        d_dot_n = direction.dot(hit.normal)

        # Exiting when travelling along the outward normal
        if d_dot_n > 0:
            outward_normal = -hit.normal
            ni_over_nt = self.ior
            cosine = self.ior * d_dot_n / direction.length()
        else:
            outward_normal = hit.normal
            ni_over_nt = 1.0 / self.ior
            cosine = -d_dot_n / direction.length()

        refracted = refract(direction, outward_normal, ni_over_nt)
        if refracted is None or rng.random() < schlick(cosine, self.ior):
            new_direction = direction.reflect(hit.normal)
        else:
            new_direction = refracted

        return ScatterResult(
            scattered_ray=Ray(hit.point, new_direction, ray_in.time),
            attenuation=Color(1, 1, 1)
        )


class DiffuseLight(Material):
    """Light-emitting material; terminates every path that reaches it."""

    def __init__(self, emit: Union[Texture, Color]):
        """Create an emissive material.

        Args:
            emit: Texture or plain color of the emitted radiance
        """
        self.texture = as_texture(emit)

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        return None

    def emitted(self, u: float, v: float, point: Point3) -> Color:
        return self.texture.value(u, v, point)


class Isotropic(Material):
    """Phase function of a participating medium: scatters uniformly."""

    def __init__(self, albedo: Union[Texture, Color]):
        self.texture = as_texture(albedo)

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: Optional[Rng] = None) -> Optional[ScatterResult]:
        return ScatterResult(
            scattered_ray=Ray(hit.point, Vec3.random_in_unit_sphere(rng), ray_in.time),
            attenuation=self.texture.value(hit.u, hit.v, hit.point)
        )


def schlick(cosine: float, ior: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - ior) / (1 + ior)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


def refract(v: Vec3, n: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """Refract ``v`` through a surface with unit normal ``n`` (Snell's law).

    Returns:
        The refracted direction, or None on total internal reflection
    """
    uv = v.normalize()
    dt = uv.dot(n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    if discriminant <= 0:
        return None
    return (uv - n * dt) * ni_over_nt - n * math.sqrt(discriminant)
