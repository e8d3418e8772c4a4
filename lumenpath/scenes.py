"""
Built-in scenes.

Each builder returns a fully constructed Scene (world + camera). BVH
construction happens here, so scene errors surface before rendering.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .vec3 import Vec3, Point3, Color, Rng, make_rng
from .camera import Camera
from .shapes import Hittable, HittableList, Sphere, XYRect, XZRect, YZRect, RectBox
from .instances import FlipNormals, Translate, RotateY
from .volumes import ConstantMedium
from .materials import Lambertian, Metal, Dielectric, DiffuseLight
from .textures import CheckerTexture, NoiseTexture, ImageTexture, Texture
from .bvh import build_bvh

TIME_START = 0.0
TIME_END = 1.0


@dataclass
class Scene:
    """A renderable world and the camera looking at it."""
    world: Hittable
    camera: Camera


def _outdoor_camera(aspect_ratio: float) -> Camera:
    return Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
        exposure_time=TIME_END - TIME_START
    )


def _box_camera(aspect_ratio: float, look_from: Point3) -> Camera:
    return Camera(
        look_from=look_from,
        look_at=Point3(278, 278, 0),
        vup=Vec3(0, 1, 0),
        vfov=40,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0,
        exposure_time=TIME_END - TIME_START
    )


def _globe_texture(image_path: Optional[str]) -> Texture:
    if image_path:
        return ImageTexture.from_file(image_path)
    return CheckerTexture.from_colors(Color(0.1, 0.2, 0.5), Color(0.2, 0.6, 0.2), 0.5)


def random_scene(aspect_ratio: float = 16 / 9, rng: Optional[Rng] = None, **_) -> Scene:
    """Many small bouncing spheres on a checkered ground, with two lights."""
    rng = rng if rng is not None else make_rng()
    objects: List[Hittable] = []

    ground = Lambertian(CheckerTexture.from_colors(Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9), 0.1))
    objects.append(Sphere(Point3(0, -1000, 0), 1000, ground))

    for a in range(-11, 12):
        for b in range(-11, 12):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Color(*(rng.random(3) * rng.random(3)))
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                albedo = Color(*(0.5 * (1 + rng.random(3))))
                material = Metal(albedo, 0.5 * rng.random())
            else:
                material = Dielectric(1.5)

            objects.append(Sphere(center, 0.2, material, motion=Vec3(0, 0.5 * rng.random(), 0)))

    objects.append(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    objects.append(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    objects.append(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))
    objects.append(Sphere(Point3(-4, 3.5, 0), 1.0, DiffuseLight(Color(6, 6, 6))))
    objects.append(XYRect((3, 5), (1, 5), 1.5, DiffuseLight(Color(3, 3, 3))))

    world = build_bvh(objects, TIME_START, TIME_END, rng)
    return Scene(world, _outdoor_camera(aspect_ratio))


def two_spheres(aspect_ratio: float = 16 / 9, rng: Optional[Rng] = None,
                image_path: Optional[str] = None, **_) -> Scene:
    """Marble ground and a textured globe lit by a large overhead panel."""
    world = HittableList([
        XZRect((-100, 100), (-100, 100), 150, DiffuseLight(Color(1, 1, 1))),
        Sphere(Point3(0, -1000, 0), 1000, Lambertian(NoiseTexture(4.0))),
        Sphere(Point3(0, 2, 0), 2, Lambertian(_globe_texture(image_path))),
    ])
    return Scene(world, _outdoor_camera(aspect_ratio))


def _cornell_walls(light_intensity: float) -> List[Hittable]:
    red = Lambertian(Color(0.65, 0.05, 0.05))
    white = Lambertian(Color(0.73, 0.73, 0.73))
    green = Lambertian(Color(0.12, 0.45, 0.15))
    light = DiffuseLight(Color(light_intensity, light_intensity, light_intensity))
    w = 555.0

    return [
        FlipNormals(YZRect((0, w), (0, w), w, green)),
        YZRect((0, w), (0, w), 0, red),
        XZRect((213, 343), (227, 332), w - 1, light),
        FlipNormals(XZRect((0, w), (0, w), w, white)),
        XZRect((0, w), (0, w), 0, white),
        FlipNormals(XYRect((0, w), (0, w), w, white)),
    ]


def _cornell_blocks() -> List[Hittable]:
    white = Lambertian(Color(0.73, 0.73, 0.73))
    short_block = Translate(
        RotateY(RectBox(Point3(0, 0, 0), Point3(165, 165, 165), white), -18),
        Vec3(130, 0, 65)
    )
    tall_block = Translate(
        RotateY(RectBox(Point3(0, 0, 0), Point3(165, 330, 165), white), 15),
        Vec3(265, 0, 295)
    )
    return [short_block, tall_block]


def cornell_box(aspect_ratio: float = 1.0, rng: Optional[Rng] = None, **_) -> Scene:
    """The classic Cornell box with two rotated blocks."""
    world = HittableList(_cornell_walls(15.0) + _cornell_blocks())
    return Scene(world, _box_camera(aspect_ratio, Point3(278, 278, -800)))


def cornell_box_smoke(aspect_ratio: float = 1.0, rng: Optional[Rng] = None, **_) -> Scene:
    """Cornell box whose blocks are replaced by white and black smoke."""
    short_block, tall_block = _cornell_blocks()
    world = HittableList(_cornell_walls(7.0) + [
        ConstantMedium(short_block, 0.01, Color(1, 1, 1)),
        ConstantMedium(tall_block, 0.01, Color(0, 0, 0)),
    ])
    return Scene(world, _box_camera(aspect_ratio, Point3(278, 278, -800)))


def final_scene(aspect_ratio: float = 1.0, rng: Optional[Rng] = None,
                image_path: Optional[str] = None, **_) -> Scene:
    """Showcase of every feature: boxes, motion, glass, media, noise, instancing."""
    rng = rng if rng is not None else make_rng()
    objects: List[Hittable] = []

    white = Lambertian(Color(0.73, 0.73, 0.73))
    ground_material = Lambertian(Color(0.48, 0.83, 0.53))

    ground: List[Hittable] = []
    n = 20
    for i in range(n):
        for j in range(n):
            w = 100.0
            x0 = -1000.0 + i * w
            z0 = -1000.0 + j * w
            y1 = 100.0 * (rng.random() + 0.01)
            ground.append(RectBox(Point3(x0, 0, z0), Point3(x0 + w, y1, z0 + w), ground_material))
    objects.append(build_bvh(ground, TIME_START, TIME_END, rng))

    objects.append(XZRect((123, 423), (147, 412), 553, DiffuseLight(Color(7, 7, 7))))

    objects.append(Sphere(
        Point3(400, 400, 200), 50, Lambertian(Color(0.7, 0.3, 0.1)), motion=Vec3(30, 0, 0)
    ))
    objects.append(Sphere(Point3(260, 150, 45), 50, Dielectric(1.5)))
    objects.append(Sphere(Point3(0, 150, 145), 50, Metal(Color(0.8, 0.8, 0.9), 1.0)))

    # Glass shell filled with a blue medium
    subsurface = Sphere(Point3(360, 150, 145), 70, Dielectric(1.5))
    objects.append(subsurface)
    objects.append(ConstantMedium(subsurface, 0.2, Color(0.2, 0.4, 0.9)))

    # Thin mist over the whole scene
    objects.append(ConstantMedium(Sphere(Point3(0, 0, 0), 5000, Dielectric(1.5)), 0.0001, Color(1, 1, 1)))

    objects.append(Sphere(Point3(400, 200, 400), 100, Lambertian(_globe_texture(image_path))))
    objects.append(Sphere(Point3(220, 280, 300), 80, Lambertian(NoiseTexture(0.1))))

    cluster: List[Hittable] = [
        Sphere(Point3(*(165 * rng.random(3))), 10, white) for _ in range(1000)
    ]
    objects.append(Translate(
        RotateY(build_bvh(cluster, TIME_START, TIME_END, rng), 15),
        Vec3(-100, 270, 395)
    ))

    return Scene(HittableList(objects), _box_camera(aspect_ratio, Point3(478, 278, -600)))


SceneBuilder = Callable[..., Scene]

SCENES: Dict[str, SceneBuilder] = {
    'random': random_scene,
    'two-spheres': two_spheres,
    'cornell': cornell_box,
    'cornell-smoke': cornell_box_smoke,
    'final': final_scene,
}


def build_scene(name: str, aspect_ratio: float, rng: Optional[Rng] = None,
                image_path: Optional[str] = None) -> Scene:
    """Look up a scene by name and build it.

    Raises:
        KeyError: Unknown scene name
    """
    try:
        builder = SCENES[name]
    except KeyError:
        raise KeyError(f"Unknown scene '{name}', choose from {sorted(SCENES)}") from None
    return builder(aspect_ratio=aspect_ratio, rng=rng, image_path=image_path)
