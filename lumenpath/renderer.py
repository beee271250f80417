"""
Renderer module - the parallel sampling scheduler.

Implements:
- Jittered multi-sample estimation of every pixel
- A private, independently seeded random generator per pixel
- Tile-based fan-out over a process pool (or a sequential loop)
- Single-writer aggregation of the HDR image
"""

from __future__ import annotations
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import numpy as np

from .vec3 import Color
from .camera import Camera
from .scene import Scene
from .bvh import BVH
from .config import RenderSettings
from .image import ImageBuffer, sink_row
from .integrator import (
    Background, SolidBackground, black_background, ray_color, sky_background
)

logger = logging.getLogger(__name__)

Tile = Tuple[int, int, int, int]
ProgressCallback = Callable[[int, int], None]


def pixel_rng(entropy: int, x: int, y: int, width: int) -> np.random.Generator:
    """Create the private random generator for pixel (x, y).

    Every pixel gets its own child of the render's seed sequence, so the
    samples drawn for a pixel do not depend on which worker renders it or in
    what order.
    """
    seed_seq = np.random.SeedSequence(entropy, spawn_key=(y * width + x,))
    return np.random.default_rng(seed_seq)


def sample_pixel(
    x: int,
    y: int,
    width: int,
    height: int,
    camera: Camera,
    scene: Scene,
    bvh: BVH,
    samples: int,
    max_depth: int,
    rng: np.random.Generator,
    background: Background = sky_background,
    t_min: float = 0.001
) -> Color:
    """Average ``samples`` jittered estimates of the radiance at a pixel.

    ``y`` counts from the bottom row. The result is unclamped.
    """
    pixel_color = Color(0, 0, 0)

    for _ in range(samples):
        u = (x + rng.random()) / width
        v = (y + rng.random()) / height
        ray = camera.get_ray(u, v, rng)
        pixel_color = pixel_color + ray_color(ray, scene, bvh, max_depth, rng, background, t_min)

    return pixel_color / samples


@dataclass(frozen=True)
class RenderJob:
    """Everything a worker needs to render tiles; shared read-only."""
    scene: Scene
    bvh: BVH
    camera: Camera
    width: int
    height: int
    samples: int
    max_depth: int
    background: Background
    t_min: float
    entropy: int


def render_tile(job: RenderJob, tile: Tile) -> Tuple[Tile, np.ndarray]:
    """Render a tile; row j of the result is image row ``y0 + j`` from the bottom."""
    x0, y0, x1, y1 = tile
    tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

    for j in range(y1 - y0):
        for i in range(x1 - x0):
            x, y = x0 + i, y0 + j
            rng = pixel_rng(job.entropy, x, y, job.width)
            color = sample_pixel(
                x, y, job.width, job.height, job.camera, job.scene, job.bvh,
                job.samples, job.max_depth, rng, job.background, job.t_min
            )
            tile_image[j, i] = color.to_array()

    return tile, tile_image


# Per-process job installed by the pool initializer
_worker_job: Optional[RenderJob] = None


def _install_job(job: RenderJob) -> None:
    global _worker_job
    _worker_job = job


def _render_installed_tile(tile: Tile) -> Tuple[Tile, np.ndarray]:
    return render_tile(_worker_job, tile)


class Renderer:
    """Path tracing renderer with multi-process support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Set a callback for progress updates.

        Args:
            callback: Called with (completed_pixels, total_pixels); counts
                only ever increase
        """
        self._progress_callback = callback

    def background(self) -> Background:
        """Background radiance function selected by the settings."""
        if self.settings.use_sky_gradient:
            return sky_background
        if self.settings.background_color == Color(0, 0, 0):
            return black_background
        return SolidBackground(self.settings.background_color)

    def render(self, scene: Scene, camera: Camera, bvh: Optional[BVH] = None) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            scene: The scene to render
            camera: The camera to render from
            bvh: A BVH already built over ``scene`` (built here if None)

        Returns:
            HDR image of shape (height, width, 3), row 0 at the top
        """
        settings = self.settings
        width = settings.width
        height = settings.height

        if bvh is None:
            bvh = BVH.build(scene)

        entropy = settings.seed if settings.seed is not None else np.random.SeedSequence().entropy

        job = RenderJob(
            scene=scene,
            bvh=bvh,
            camera=camera,
            width=width,
            height=height,
            samples=settings.samples_per_pixel,
            max_depth=settings.max_depth,
            background=self.background(),
            t_min=settings.t_min,
            entropy=entropy,
        )

        image = np.zeros((height, width, 3), dtype=np.float64)
        tiles = self._generate_tiles(width, height)
        workers = min(settings.workers, len(tiles))
        total = width * height
        completed = 0

        logger.info(
            "Rendering %dx%d, %d spp, max depth %d, %d primitive(s), %d worker(s), seed %d",
            width, height, job.samples, job.max_depth, len(scene), workers, entropy
        )
        start_time = time.perf_counter()

        if workers > 1:
            with ProcessPoolExecutor(
                max_workers=workers,
                initializer=_install_job,
                initargs=(job,)
            ) as executor:
                futures = [executor.submit(_render_installed_tile, tile) for tile in tiles]
                for future in as_completed(futures):
                    completed += self._place_tile(image, *future.result())
                    self._report(completed, total)
        else:
            for tile in tiles:
                completed += self._place_tile(image, *render_tile(job, tile))
                self._report(completed, total)

        logger.info("Render finished in %.2fs", time.perf_counter() - start_time)
        return image

    def _report(self, completed: int, total: int) -> None:
        if self._progress_callback:
            self._progress_callback(completed, total)

    @staticmethod
    def _place_tile(image: np.ndarray, tile: Tile, tile_image: np.ndarray) -> int:
        """Write a tile into the image, flipping bottom-up rows to top-down.

        Returns:
            Number of pixels written
        """
        x0, y0, x1, y1 = tile
        top = sink_row(y1 - 1, image.shape[0])
        bottom = sink_row(y0, image.shape[0])
        image[top:bottom + 1, x0:x1] = tile_image[::-1]
        return (x1 - x0) * (y1 - y0)

    def _generate_tiles(self, width: int, height: int) -> List[Tile]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples, y counted from the bottom
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Quantize an HDR image and write it to ``filename``."""
        ImageBuffer.from_hdr(image, self.settings.gamma).save(filename)
