"""
Texture system for the path tracer.

Implements:
- Solid color textures
- 3D checker pattern
- Perlin turbulence (marble) noise
- Image textures (nearest pixel lookup)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Union
import math
import threading

import numpy as np

from .vec3 import Color, Point3, Rng, make_rng
from . import image_io


class Texture(ABC):
    """Abstract base class for textures."""

    @abstractmethod
    def value(self, u: float, v: float, point: Point3) -> Color:
        """Get the texture color at the given coordinates.

        Args:
            u: Horizontal texture coordinate [0, 1]
            v: Vertical texture coordinate [0, 1], 0 at the bottom
            point: 3D point in world space (for procedural textures)

        Returns:
            Color at this location
        """


class SolidColor(Texture):
    """A solid color texture."""

    def __init__(self, color: Color):
        self.color = color

    def value(self, u: float, v: float, point: Point3) -> Color:
        return self.color


def as_texture(source: Union[Texture, Color]) -> Texture:
    """Wrap a plain color in a SolidColor; pass textures through."""
    if isinstance(source, Texture):
        return source
    return SolidColor(source)


class CheckerTexture(Texture):
    """A 3D checker pattern alternating between two sub-textures.

    The selector is the sign of ``sin(x/s) * sin(y/s) * sin(z/s)``, so
    cells are ``pi * cell_size`` wide and sampling along one axis repeats
    with period ``2 * pi * cell_size``.
    """

    def __init__(self, even: Texture, odd: Texture, cell_size: float = 1.0):
        """Create a checker texture.

        Args:
            even: Texture used where the sine product is negative
            odd: Texture used elsewhere
            cell_size: Pattern scale; cells are pi * cell_size wide
        """
        self.even = even
        self.odd = odd
        self.cell_size = cell_size
        self._frequency = 1.0 / cell_size

    @classmethod
    def from_colors(cls, c1: Color, c2: Color, cell_size: float = 1.0) -> CheckerTexture:
        return cls(SolidColor(c1), SolidColor(c2), cell_size)

    def value(self, u: float, v: float, point: Point3) -> Color:
        f = self._frequency
        sines = math.sin(f * point.x) * math.sin(f * point.y) * math.sin(f * point.z)
        if sines < 0:
            return self.even.value(u, v, point)
        return self.odd.value(u, v, point)


class Perlin:
    """Gradient noise lattice: 256 unit vectors and three permutations.

    The tables are read-only once built; one instance is shared by every
    noise texture in the process (see ``shared_perlin``).
    """

    POINT_COUNT = 256

    def __init__(self, rng: Optional[Rng] = None):
        rng = rng if rng is not None else make_rng()
        n = self.POINT_COUNT

        vectors = rng.uniform(-1.0, 1.0, (n, 3))
        lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
        self.gradients = vectors / lengths
        self.perm_x = rng.permutation(n)
        self.perm_y = rng.permutation(n)
        self.perm_z = rng.permutation(n)

        for table in (self.gradients, self.perm_x, self.perm_y, self.perm_z):
            table.setflags(write=False)

    def noise(self, point: Point3) -> float:
        """Trilinearly interpolated gradient noise in roughly [-1, 1]."""
        fx, fy, fz = math.floor(point.x), math.floor(point.y), math.floor(point.z)
        u, v, w = point.x - fx, point.y - fy, point.z - fz
        i, j, k = int(fx), int(fy), int(fz)

        # Hermite smoothing of the interpolation weights
        uu = u * u * (3 - 2 * u)
        vv = v * v * (3 - 2 * v)
        ww = w * w * (3 - 2 * w)

        accum = 0.0
        for di in (0, 1):
            for dj in (0, 1):
                for dk in (0, 1):
                    index = (self.perm_x[(i + di) & 255]
                             ^ self.perm_y[(j + dj) & 255]
                             ^ self.perm_z[(k + dk) & 255])
                    g = self.gradients[index]
                    weight = (g[0] * (u - di) + g[1] * (v - dj) + g[2] * (w - dk))
                    accum += ((di * uu + (1 - di) * (1 - uu))
                              * (dj * vv + (1 - dj) * (1 - vv))
                              * (dk * ww + (1 - dk) * (1 - ww))
                              * weight)
        return float(accum)

    def turbulence(self, point: Point3, depth: int = 7) -> float:
        """Sum of ``depth`` octaves at doubling frequency and halving weight."""
        accum = 0.0
        weight = 1.0
        p = point

        for _ in range(depth):
            accum += weight * self.noise(p)
            weight *= 0.5
            p = p * 2

        return abs(accum)


_shared_perlin: Optional[Perlin] = None
_shared_perlin_lock = threading.Lock()


def shared_perlin() -> Perlin:
    """Return the process-wide Perlin tables, building them on first use."""
    global _shared_perlin
    with _shared_perlin_lock:
        if _shared_perlin is None:
            _shared_perlin = Perlin()
        return _shared_perlin


class NoiseTexture(Texture):
    """Marble-like grey texture driven by Perlin turbulence."""

    def __init__(self, scale: float = 1.0, perlin: Optional[Perlin] = None):
        """Create a noise texture.

        Args:
            scale: Spatial frequency of the pattern
            perlin: Noise tables (defaults to the shared process-wide tables)
        """
        self.scale = scale
        self.perlin = perlin if perlin is not None else shared_perlin()

    def value(self, u: float, v: float, point: Point3) -> Color:
        p = point * self.scale
        t = 0.5 * (1 + math.sin(self.scale * point.x + 5 * self.perlin.turbulence(p)))
        return Color(t, t, t)


class ImageTexture(Texture):
    """A texture backed by a bitmap of linear colors.

    Pixel rows are stored top-down; texture v = 0 is the bottom row.
    """

    def __init__(self, pixels: np.ndarray):
        """Create an image texture.

        Args:
            pixels: Array of shape (height, width, 3) with linear float colors
        """
        data = np.asarray(pixels, dtype=np.float64)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected an (height, width, 3) pixel array, got shape {data.shape}")
        self._data = data
        self._height, self._width = data.shape[:2]

    @classmethod
    def from_file(cls, filename: str) -> ImageTexture:
        """Load a texture from an image file (see ``image_io.load_image``)."""
        return cls(image_io.load_image(filename))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def value(self, u: float, v: float, point: Point3) -> Color:
        i = int(u * self._width)
        j = int((1.0 - v) * self._height)

        # Clamp to valid pixel indices
        i = max(0, min(self._width - 1, i))
        j = max(0, min(self._height - 1, j))

        pixel = self._data[j, i]
        return Color(pixel[0], pixel[1], pixel[2])
