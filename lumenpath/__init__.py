"""
LumenPath - A Monte-Carlo Path Tracer

An offline path tracer with support for:
- Diffuse, metal, glass and emissive materials
- Bounding volume hierarchy (BVH) acceleration
- Depth of field
- Multi-process rendering with per-pixel random streams
- PNG/JPEG output
"""

__version__ = "0.1.0"
__author__ = "LumenPath Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .config import ConfigError, RenderSettings
from .shapes import AABB, HitRecord, Hittable, Sphere, closest_hit
from .scene import Scene, SceneFrozenError
from .bvh import BVH, BVHNode
from .materials import (
    Material, Lambertian, Metal, Dielectric, Light, ScatterResult,
    MATERIAL_TYPES, schlick_reflectance
)
from .camera import Camera
from .integrator import ray_color, sky_background, black_background, SolidBackground
from .renderer import Renderer, pixel_rng, sample_pixel
from .image import ImageBuffer, ImageWriteError, to_ldr
from .scenes import SceneView, SCENES, load_builtin_scene
