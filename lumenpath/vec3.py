"""
Vector3 class for 3D math operations.

This is the fundamental building block of the path tracer, used for:
- Points in 3D space
- Direction vectors
- Linear RGB radiance values (non-negative, unbounded)
"""

from __future__ import annotations
import math
from typing import Optional, Union
import numpy as np


Rng = np.random.Generator


def make_rng(seed: Optional[int] = None) -> Rng:
    """Create a random generator; without a seed it is drawn from OS entropy."""
    return np.random.default_rng(seed)


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for storage while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3.from_array(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data / other._data)
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return (float(c) for c in self._data)

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction."""
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given normal."""
        return self - normal * 2 * self.dot(normal)

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return bool(np.all(np.abs(self._data) < epsilon))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    @staticmethod
    def random(min_val: float = 0.0, max_val: float = 1.0, rng: Optional[Rng] = None) -> Vec3:
        """Generate a random vector with components in [min_val, max_val)."""
        rng = rng if rng is not None else make_rng()
        return Vec3.from_array(rng.uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: Optional[Rng] = None) -> Vec3:
        """Generate a random point inside the unit sphere by rejection."""
        rng = rng if rng is not None else make_rng()
        while True:
            p = Vec3.random(-1, 1, rng)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_in_unit_disk(rng: Optional[Rng] = None) -> Vec3:
        """Generate a random point inside the unit disk (z=0)."""
        rng = rng if rng is not None else make_rng()
        while True:
            p = Vec3(rng.uniform(-1, 1), rng.uniform(-1, 1), 0)
            if p.length_squared() < 1:
                return p


# Convenience type aliases
Point3 = Vec3
Color = Vec3
