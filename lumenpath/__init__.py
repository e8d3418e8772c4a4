"""
lumenpath - A Python Monte Carlo Path Tracer

An offline path tracer with support for:
- Diffuse, metal, glass and emissive materials
- Constant density participating media
- Procedural (checker, Perlin marble) and image textures
- Spheres with motion blur, axis-aligned rectangles and boxes
- Instancing (translation, rotation, flipped normals)
- BVH acceleration
- Column-parallel multi-threaded rendering
"""

__version__ = "0.1.0"
__author__ = "lumenpath Team"

from .vec3 import Vec3, Point3, Color, make_rng
from .ray import Ray
from .shapes import (
    AABB, HitRecord, Hittable, HittableList, Sphere,
    XYRect, XZRect, YZRect, RectBox
)
from .instances import FlipNormals, Translate, RotateY
from .volumes import ConstantMedium
from .materials import (
    Material, ScatterResult, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic
)
from .textures import (
    Texture, SolidColor, CheckerTexture, NoiseTexture, ImageTexture, Perlin, shared_perlin
)
from .bvh import (
    BVHNode, build_bvh, BVHError, MissingBoundingBox, InvalidBoundingBox, TooFewElements
)
from .camera import Camera
from .integrator import trace
from .renderer import Renderer, RenderSettings
from .image_io import save_image, save_ppm, load_image, to_ldr
from .scenes import Scene, SCENES, build_scene
from .config import RenderJob, ConfigError, load_job, parse_job
