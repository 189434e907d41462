"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- Linear RGB color values

Every random helper takes an explicit numpy Generator so the caller
decides which stream is consumed.
"""

from __future__ import annotations
import math
from typing import Union
import numpy as np


class Vec3:
    """An immutable 3D vector.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API. All operations return new vectors.
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

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return np.allclose(self._data, other._data)

    # Equality is approximate, so no hash can agree with it
    __hash__ = None

    def __iter__(self):
        return (float(c) for c in self._data)

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

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: float) -> Vec3:
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def unit(self) -> Vec3:
        """Return a unit vector in the same direction.

        Raises:
            ValueError: if the vector has zero length
        """
        length = self.length()
        if length == 0:
            raise ValueError("Cannot take the unit vector of a zero-length vector")
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

    def refract(self, normal: Vec3, eta_ratio: float) -> Vec3:
        """Refract this unit vector through a surface.

        Splits the refracted ray into the components perpendicular and
        parallel to the normal. The caller is responsible for ruling out
        total internal reflection first.

        Args:
            normal: Unit surface normal, pointing against this vector
            eta_ratio: Ratio of refractive indices (n1/n2)

        Returns:
            Refracted direction vector
        """
        cos_theta = min(-self.dot(normal), 1.0)
        r_out_perp = (self + normal * cos_theta) * eta_ratio
        r_out_parallel = normal * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
        return r_out_perp + r_out_parallel

    def refract_or_reflect(
        self,
        normal: Vec3,
        refractive_index: float,
        front_face: bool,
        rng: np.random.Generator
    ) -> Vec3:
        """Pick the outgoing direction at a dielectric boundary.

        Reflects under total internal reflection, or with the probability
        given by Schlick's approximation; refracts otherwise.

        Args:
            normal: Unit normal pointing against the incoming ray
            refractive_index: Index of the medium behind the surface
            front_face: True when entering the medium
            rng: Random stream used for the reflect/refract choice

        Returns:
            Unit outgoing direction
        """
        refraction_ratio = 1.0 / refractive_index if front_face else refractive_index

        unit_direction = self.unit()
        cos_theta = min(-unit_direction.dot(normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or schlick_reflectance(cos_theta, refraction_ratio) > rng.random():
            return unit_direction.reflect(normal)
        return unit_direction.refract(normal, refraction_ratio)

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return bool(np.all(np.abs(self._data) < epsilon))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    @staticmethod
    def random(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Generate a random vector with components in [min_val, max_val)."""
        return Vec3.from_array(rng.uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
        """Generate a random point strictly inside the unit sphere.

        Rejection sampling from the enclosing cube accepts about 52% of
        draws, so the loop runs fewer than two times on average; ten
        straight rejections happen with probability below 1e-3.
        """
        while True:
            p = Vec3.random(rng, -1, 1)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_unit_vector(rng: np.random.Generator) -> Vec3:
        """Generate a random unit vector (uniform on sphere surface)."""
        while True:
            p = Vec3.random_in_unit_sphere(rng)
            # The origin itself has no direction
            if p.length_squared() > 0:
                return p.unit()

    @staticmethod
    def random_on_hemisphere(normal: Vec3, rng: np.random.Generator) -> Vec3:
        """Generate a random unit vector in the hemisphere defined by normal."""
        on_sphere = Vec3.random_unit_vector(rng)
        if on_sphere.dot(normal) >= 0.0:
            return on_sphere
        return -on_sphere


def schlick_reflectance(cosine: float, ref_idx: float) -> float:
    """Schlick's approximation for the Fresnel reflectance."""
    r0 = (1 - ref_idx) / (1 + ref_idx)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


# Convenience type aliases
Point3 = Vec3
Color = Vec3
