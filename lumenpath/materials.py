"""
Materials system.

The set of materials is closed:
- Lambertian diffuse
- Metal (perfect specular reflection)
- Dielectric (glass, water - with refraction)
- Light (emissive, never scatters)

Materials are frozen dataclasses. They hold no per-use state, so a single
instance can be shared by every primitive and every worker that uses it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import HitRecord

BLACK = Color(0, 0, 0)
WHITE = Color(1, 1, 1)


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray


class Material(ABC):
    """Base class for the closed set of materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: The calling task's random generator

        Returns:
            ScatterResult if the ray scatters, None if it is absorbed
        """

    def emitted(self) -> Color:
        """Return emitted radiance. Default is no emission."""
        return BLACK


@dataclass(frozen=True)
class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""
    albedo: Color

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        scatter_direction = hit.normal + Vec3.random_in_unit_sphere(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, scatter_direction),
        )


@dataclass(frozen=True)
class Metal(Material):
    """Metallic material with mirror reflection."""
    albedo: Color

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        reflected = ray_in.direction.normalize().reflect(hit.normal)

        # Reflections into the surface are absorbed
        if reflected.dot(hit.normal) <= 0:
            return None

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, reflected),
        )


@dataclass(frozen=True)
class Dielectric(Material):
    """Dielectric (glass-like) material with refraction.

    refraction_index: 1.0 = air, 1.5 = glass, 2.4 = diamond
    """
    refraction_index: float = 1.5

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        # Entering the medium uses 1/eta, leaving it uses eta
        refraction_ratio = 1.0 / self.refraction_index if hit.front_face else self.refraction_index

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        if must_reflect(sin_theta, refraction_ratio) or \
                schlick_reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = unit_direction.reflect(hit.normal)
        else:
            direction = unit_direction.refract(hit.normal, refraction_ratio)

        return ScatterResult(
            attenuation=WHITE,
            scattered_ray=Ray(hit.point, direction.normalize()),
        )


@dataclass(frozen=True)
class Light(Material):
    """Light-emitting material."""
    emission: Color

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        return None

    def emitted(self) -> Color:
        return self.emission


MATERIAL_TYPES = (Lambertian, Metal, Dielectric, Light)


def must_reflect(sin_theta: float, refraction_ratio: float) -> bool:
    """True when Snell's law has no solution (total internal reflection)."""
    return refraction_ratio * sin_theta > 1.0


def schlick_reflectance(cosine: float, refraction_ratio: float) -> float:
    """Schlick's approximation for Fresnel reflectance."""
    r0 = (1 - refraction_ratio) / (1 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)
