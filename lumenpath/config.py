"""
Render configuration.

``RenderSettings`` is the single configuration record handed to the renderer
by the command line (or by library callers). It is validated as soon as it is
built so that a bad value fails before any rendering work begins.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from .vec3 import Color


class ConfigError(ValueError):
    """Raised for rendering parameters that cannot produce an image."""


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    aperture: float = 0.0
    focus_dist: float = 1.0
    output_path: str = "out.png"
    parallel: bool = True
    num_workers: int = 0  # 0 = auto-detect
    tile_size: int = 16
    seed: Optional[int] = None
    use_sky_gradient: bool = True
    background_color: Color = None
    gamma: float = 2.2
    t_min: float = 0.001

    def __post_init__(self):
        if self.background_color is None:
            self.background_color = Color(0.0, 0.0, 0.0)
        if self.num_workers == 0:
            self.num_workers = os.cpu_count() or 1
        self.validate()

    @property
    def height(self) -> int:
        """Image height in pixels, derived from width and aspect ratio."""
        return int(self.width / self.aspect_ratio)

    @property
    def workers(self) -> int:
        """Number of worker processes actually used for a render."""
        return self.num_workers if self.parallel else 1

    def validate(self) -> None:
        """Check every parameter, raising ConfigError on the first bad one."""
        if self.samples_per_pixel < 1:
            raise ConfigError("samples per pixel should be >= 1")
        if self.max_depth < 1:
            raise ConfigError("max depth should be >= 1")
        if self.width < 1:
            raise ConfigError("image width should be >= 1")
        if not self.aspect_ratio > 0:
            raise ConfigError("aspect ratio should be > 0")
        if self.height < 1:
            raise ConfigError(
                f"image height derived from width {self.width} and aspect ratio "
                f"{self.aspect_ratio:g} is zero"
            )
        if not 0 < self.vfov < 180:
            raise ConfigError("vertical field of view should be in (0, 180) degrees")
        if self.aperture < 0:
            raise ConfigError("aperture should be >= 0")
        if not self.focus_dist > 0:
            raise ConfigError("focus distance should be > 0")
        if self.num_workers < 0:
            raise ConfigError("worker count should be >= 0")
        if self.tile_size < 1:
            raise ConfigError("tile size should be >= 1")
        if not self.gamma > 0:
            raise ConfigError("gamma should be > 0")
        if not self.t_min > 0:
            raise ConfigError("t_min should be a small positive epsilon")
        if self.seed is not None and self.seed < 0:
            raise ConfigError("seed should be a non-negative integer")
