"""Tests for materials."""

import pytest
from lumenpath.vec3 import Vec3, Point3, Color, make_rng
from lumenpath.ray import Ray
from lumenpath.shapes import HitRecord
from lumenpath.textures import Texture, SolidColor
from lumenpath.materials import (
    Material, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic, schlick, refract
)


class UVTexture(Texture):
    """Encodes the lookup coordinates as a color."""

    def value(self, u, v, point):
        return Color(u, v, 0)


def make_hit(normal=Vec3(0, 1, 0), u=0.0, v=0.0):
    return HitRecord(point=Point3(0, 0, 0), normal=normal, t=1.0, u=u, v=v)


class TestMaterialBase:
    """Test the abstract base."""

    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Material()

    def test_default_emission_is_black(self):
        assert Lambertian(Color(1, 1, 1)).emitted(0, 0, Point3(0, 0, 0)) == Color(0, 0, 0)


class TestLambertian:
    """Test Lambertian material."""

    def test_scatter(self):
        material = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0), time=0.25)
        result = material.scatter(ray_in, make_hit(), make_rng(0))

        assert result is not None
        assert result.attenuation == Color(0.5, 0.5, 0.5)
        assert result.scattered_ray.origin == Point3(0, 0, 0)
        assert result.scattered_ray.time == 0.25

    def test_scatter_leaves_surface(self):
        material = Lambertian(Color(0.5, 0.5, 0.5))
        rng = make_rng(1)
        normal = Vec3(0, 1, 0)
        for _ in range(100):
            result = material.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(normal), rng)
            assert result.scattered_ray.direction.dot(normal) > 0

    def test_samples_texture_at_hit_uv(self):
        material = Lambertian(UVTexture())
        result = material.scatter(
            Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(u=0.25, v=0.75), make_rng(0)
        )
        assert result.attenuation == Color(0.25, 0.75, 0)

    def test_accepts_texture(self):
        texture = SolidColor(Color(0.1, 0.2, 0.3))
        assert Lambertian(texture).texture is texture


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection(self):
        material = Metal(Color(0.9, 0.8, 0.7), fuzz=0.0)
        ray_in = Ray(Point3(-1, 1, 0), Vec3(1, -1, 0))
        result = material.scatter(ray_in, make_hit(), make_rng(0))

        assert result.scattered_ray.direction == Vec3(1, 1, 0).normalize()
        assert result.attenuation == Color(0.9, 0.8, 0.7)

    def test_mirror_law(self):
        material = Metal(Color(0.3, 0.6, 0.9), fuzz=0.0)
        normal = Vec3(0, 0, 1)
        incoming = Vec3(0.3, -0.4, -0.5).normalize()
        result = material.scatter(Ray(Point3(0, 0, 1), incoming), make_hit(normal), make_rng(0))

        reflected = result.scattered_ray.direction
        assert reflected.dot(normal) == pytest.approx(-incoming.dot(normal))
        assert reflected.x == pytest.approx(incoming.x)
        assert reflected.y == pytest.approx(incoming.y)
        assert result.attenuation == Color(0.3, 0.6, 0.9)

    def test_absorbs_reflection_into_surface(self):
        material = Metal(Color(1, 1, 1), fuzz=0.0)
        ray_in = Ray(Point3(0, -1, 0), Vec3(0, 1, 0))
        assert material.scatter(ray_in, make_hit(), make_rng(0)) is None

    def test_fuzz_stays_near_mirror(self):
        material = Metal(Color(1, 1, 1), fuzz=0.3)
        rng = make_rng(2)
        mirror = Vec3(1, 1, 0).normalize()
        for _ in range(50):
            result = material.scatter(Ray(Point3(-1, 1, 0), Vec3(1, -1, 0)), make_hit(), rng)
            if result is not None:
                assert (result.scattered_ray.direction - mirror).length() < 0.3

    @pytest.mark.parametrize("fuzz", [-0.1, 1.5])
    def test_fuzz_out_of_range(self, fuzz):
        with pytest.raises(ValueError):
            Metal(Color(1, 1, 1), fuzz)


class TestDielectric:
    """Test Dielectric material."""

    def test_attenuation_is_white(self):
        material = Dielectric(1.5)
        rng = make_rng(3)
        for _ in range(20):
            result = material.scatter(Ray(Point3(0, 1, 0), Vec3(0.3, -1, 0)), make_hit(), rng)
            assert result.attenuation == Color(1, 1, 1)

    def test_normal_incidence_mostly_refracts(self):
        material = Dielectric(1.5)
        rng = make_rng(4)
        refracted = 0
        for _ in range(200):
            result = material.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(), rng)
            direction = result.scattered_ray.direction.normalize()
            assert direction in (Vec3(0, -1, 0), Vec3(0, 1, 0))
            if direction == Vec3(0, -1, 0):
                refracted += 1
        assert refracted > 150

    def test_total_internal_reflection(self):
        material = Dielectric(1.5)
        # Leaving the glass at a grazing angle
        ray_in = Ray(Point3(0, 0, 0), Vec3(1, 0.1, 0))
        result = material.scatter(ray_in, make_hit(), make_rng(5))
        assert result.scattered_ray.direction == Vec3(1, -0.1, 0)

    def test_refraction_bends_towards_normal(self):
        material = Dielectric(1.5)
        rng = make_rng(6)
        incoming = Vec3(1, -1, 0)
        for _ in range(20):
            result = material.scatter(Ray(Point3(-1, 1, 0), incoming), make_hit(), rng)
            direction = result.scattered_ray.direction.normalize()
            if direction.y < 0:
                assert direction.x < incoming.normalize().x


class TestSchlick:
    """Test the Fresnel approximation."""

    def test_normal_incidence(self):
        assert schlick(1.0, 1.5) == pytest.approx(0.04)

    def test_grazing(self):
        assert schlick(0.0, 1.5) == pytest.approx(1.0)

    def test_matched_index(self):
        assert schlick(0.5, 1.0) == pytest.approx(0.5 ** 5)


class TestRefract:
    """Test Snell's law helper."""

    def test_straight_through(self):
        result = refract(Vec3(0, -1, 0), Vec3(0, 1, 0), 1 / 1.5)
        assert result == Vec3(0, -1, 0)

    def test_total_internal_reflection(self):
        assert refract(Vec3(0.9, -0.1, 0), Vec3(0, 1, 0), 1.5) is None


class TestDiffuseLight:
    """Test emissive material."""

    def test_never_scatters(self):
        light = DiffuseLight(Color(4, 4, 4))
        assert light.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(), make_rng(0)) is None

    def test_emitted(self):
        light = DiffuseLight(Color(4, 3, 2))
        assert light.emitted(0.5, 0.5, Point3(0, 0, 0)) == Color(4, 3, 2)

    def test_emitted_texture(self):
        light = DiffuseLight(UVTexture())
        assert light.emitted(0.2, 0.4, Point3(0, 0, 0)) == Color(0.2, 0.4, 0)


class TestIsotropic:
    """Test phase function material."""

    def test_scatter(self):
        material = Isotropic(Color(0.2, 0.4, 0.6))
        hit = HitRecord(point=Point3(1, 2, 3), normal=Vec3(1, 0, 0), t=1.0)
        rng = make_rng(7)
        for _ in range(20):
            result = material.scatter(Ray(Point3(0, 0, 0), Vec3(1, 2, 3), 0.5), hit, rng)
            assert result.scattered_ray.origin == Point3(1, 2, 3)
            assert result.scattered_ray.direction.length_squared() < 1
            assert result.scattered_ray.time == 0.5
            assert result.attenuation == Color(0.2, 0.4, 0.6)
