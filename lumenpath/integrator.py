"""
Path-tracing integrator.

``ray_color`` estimates the radiance arriving along a ray: it finds the
closest surface through the BVH, adds what the surface emits, and recurses on
the scattered ray weighted by the material's attenuation. A fixed recursion
depth is the only termination rule.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .vec3 import Color
from .ray import Ray
from .scene import Scene
from .bvh import BVH

Background = Callable[[Ray], Color]

SKY_HORIZON = Color(1.0, 1.0, 1.0)
SKY_ZENITH = Color(0.5, 0.7, 1.0)


def sky_background(ray: Ray) -> Color:
    """Sky gradient: white at the horizon blending to blue overhead."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return SKY_HORIZON * (1.0 - t) + SKY_ZENITH * t


def black_background(ray: Ray) -> Color:
    """No ambient light: only emissive surfaces light the scene."""
    return Color(0, 0, 0)


@dataclass(frozen=True)
class SolidBackground:
    """Background returning the same radiance in every direction."""
    color: Color

    def __call__(self, ray: Ray) -> Color:
        return self.color


def ray_color(
    ray: Ray,
    scene: Scene,
    bvh: BVH,
    depth: int,
    rng: np.random.Generator,
    background: Background = sky_background,
    t_min: float = 0.001
) -> Color:
    """Compute the radiance carried back along a ray.

    Args:
        ray: The ray to trace
        scene: The scene the BVH was built over
        bvh: Acceleration structure for ``scene``
        depth: Remaining bounces; 0 returns black
        rng: The calling task's random generator
        background: Radiance for rays that escape the scene
        t_min: Self-intersection epsilon

    Returns:
        The estimated radiance (unclamped)
    """
    if depth <= 0:
        return Color(0, 0, 0)

    hit_record = bvh.hit(ray, scene, t_min, float('inf'))

    if hit_record is None:
        return background(ray)

    material = hit_record.material
    if material is None:
        # Geometry without a material is shaded by its normal
        return (hit_record.normal + Color(1, 1, 1)) * 0.5

    emitted = material.emitted()

    scatter_result = material.scatter(ray, hit_record, rng)
    if scatter_result is None:
        return emitted

    return emitted + scatter_result.attenuation * ray_color(
        scatter_result.scattered_ray, scene, bvh, depth - 1, rng, background, t_min
    )
