"""
Materials system.

Implements:
- Lambertian diffuse
- Glossy (fuzzy mirror reflection with roughness)
- Dielectric (glass, water - with refraction)

Materials are immutable after construction and may be shared by any
number of surfaces.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np

from .errors import ConfigurationError
from .vec3 import Vec3, Color
from .ray import Ray

if TYPE_CHECKING:
    from .shapes import HitRecord


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit_record: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit_record: Intersection produced by the surface hit test
            rng: Random stream owned by the current pixel

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit_record: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        scatter_direction = hit_record.normal + Vec3.random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit_record.normal

        return ScatterResult(
            scattered_ray=Ray(hit_record.point, scatter_direction),
            attenuation=self.albedo
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Glossy(Material):
    """Fuzzy mirror: specular reflection perturbed by roughness."""

    def __init__(self, albedo: Color, roughness: float = 0.0):
        """Create a glossy material.

        Args:
            albedo: The reflection color
            roughness: Surface roughness, clamped to [0, 1] (0 = mirror)
        """
        self.albedo = albedo
        self.roughness = max(0.0, min(1.0, float(roughness)))

    def scatter(self, ray_in: Ray, hit_record: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        reflected = ray_in.direction.reflect(hit_record.normal)
        # Rays fuzzed below the surface are not rejected here; the next
        # intersection test decides what they contribute.
        direction = reflected + Vec3.random_unit_vector(rng) * self.roughness

        return ScatterResult(
            scattered_ray=Ray(hit_record.point, direction),
            attenuation=self.albedo
        )

    def __repr__(self) -> str:
        return f"Glossy(albedo={self.albedo}, roughness={self.roughness})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, refractive_index: float = 1.5, albedo: Optional[Color] = None):
        """Create a dielectric material.

        Args:
            refractive_index: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
            albedo: Optional color tint for the glass, defaults to white

        Raises:
            ConfigurationError: if refractive_index is not positive
        """
        if not refractive_index > 0:
            raise ConfigurationError(
                f"Refractive index must be positive, got {refractive_index}"
            )
        self.refractive_index = float(refractive_index)
        self.albedo = albedo if albedo is not None else Color(1, 1, 1)

    def scatter(self, ray_in: Ray, hit_record: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        direction = ray_in.direction.refract_or_reflect(
            hit_record.normal, self.refractive_index, hit_record.front_face, rng
        )
        return ScatterResult(
            scattered_ray=Ray(hit_record.point, direction),
            attenuation=self.albedo
        )

    def __repr__(self) -> str:
        return f"Dielectric(refractive_index={self.refractive_index})"
