"""
Camera module for generating primary rays.

Supports:
- Perspective projection
- Depth of field (defocus blur)
- Configurable field of view
- Arbitrary positioning via look-at
"""

from __future__ import annotations
import math
from typing import Optional

import numpy as np

from .config import ConfigError
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A camera with perspective projection and depth of field.

    Immutable once constructed; every rendering task shares the same camera.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0))
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens aperture for depth of field (0 = pinhole)
            focus_dist: Distance to the focus plane

        Raises:
            ConfigError: If the parameters cannot describe a camera
        """
        if not 0 < vfov < 180:
            raise ConfigError(f"vertical field of view should be in (0, 180), got {vfov}")
        if not aspect_ratio > 0:
            raise ConfigError(f"aspect ratio should be > 0, got {aspect_ratio}")
        if aperture < 0:
            raise ConfigError(f"aperture should be >= 0, got {aperture}")
        if not focus_dist > 0:
            raise ConfigError(f"focus distance should be > 0, got {focus_dist}")

        view = look_from - look_at
        if view.near_zero():
            raise ConfigError("look_from and look_at must be different points")
        if vup.cross(view).near_zero():
            raise ConfigError("up vector must not be parallel to the viewing direction")

        theta = math.radians(vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        # Compute orthonormal camera basis
        self.w = view.normalize()                # Points backward from camera
        self.u = vup.cross(self.w).normalize()   # Points right
        self.v = self.w.cross(self.u)            # Points up

        self.origin = look_from
        self.horizontal = self.u * (viewport_width * focus_dist)
        self.vertical = self.v * (viewport_height * focus_dist)
        self.lower_left_corner = (
            self.origin
            - self.horizontal / 2
            - self.vertical / 2
            - self.w * focus_dist
        )

        self.lens_radius = aperture / 2

    def get_ray(self, s: float, t: float, rng: Optional[np.random.Generator] = None) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random generator for the lens sample; required when the
                camera has a non-zero aperture

        Returns:
            A ray from the camera through the specified point. The direction
            is not normalized.
        """
        if self.lens_radius > 0:
            if rng is None:
                raise ValueError("a random generator is required for depth of field")
            rd = Vec3.random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )

        return Ray(self.origin + offset, direction)

    @classmethod
    def from_settings(cls, settings, look_from: Point3, look_at: Point3, vup: Vec3 = Vec3(0, 1, 0)) -> Camera:
        """Build a camera from the lens parameters of a RenderSettings.

        The aspect ratio is taken from the final pixel dimensions so that the
        rounding of the derived height does not stretch the image.
        """
        return cls(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=settings.vfov,
            aspect_ratio=settings.width / settings.height,
            aperture=settings.aperture,
            focus_dist=settings.focus_dist,
        )

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"
