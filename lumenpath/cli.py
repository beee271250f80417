"""
Command line interface for rendering the built-in scenes.
"""

from __future__ import annotations
import argparse
import logging
import os
import platform
import sys
import time
from typing import List, Optional

from .camera import Camera
from .config import ConfigError, RenderSettings
from .image import ImageWriteError
from .renderer import Renderer
from .scenes import SCENES, load_builtin_scene


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lumenpath',
        description='LumenPath - A Monte-Carlo path tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  lumenpath --scene materials --output render.png
  lumenpath -w 800 -s 100 -d 50 --aperture 0.1 --focus-dist 3.4 -o dof.png
  lumenpath --scene emissive --samples 200 --sequential --seed 7
        '''
    )

    parser.add_argument('-s', '--samples', type=int, default=10, help='Samples per pixel, >= 1 (default: 10)')
    parser.add_argument('-d', '--depth', type=int, default=10, help='Max ray recursion depth, >= 1 (default: 10)')
    parser.add_argument('-w', '--width', type=int, default=400, help='Image width in pixels (default: 400)')
    parser.add_argument('--aspect', type=float, default=16.0 / 9.0, help='Aspect ratio width/height (default: 16/9)')
    parser.add_argument('--fov', type=float, default=90.0, help='Vertical field of view in degrees (default: 90)')
    parser.add_argument('--aperture', type=float, default=0.0, help='Lens aperture, 0 for a pinhole (default: 0)')
    parser.add_argument('--focus-dist', type=float, default=None,
                        help='Distance to the focus plane (default: distance to the look-at point)')
    parser.add_argument('-o', '--output', type=str, default='out.png', help='Output filename (default: out.png)')
    parser.add_argument('--scene', type=str, default='two-spheres', choices=sorted(SCENES),
                        help='Scene to render (default: two-spheres)')
    parser.add_argument('--sequential', action='store_true', help='Render on a single process')
    parser.add_argument('--workers', type=int, default=0, help='Number of worker processes (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible renders')
    parser.add_argument('--gamma', type=float, default=2.2, help='Output gamma (default: 2.2)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log render details')
    parser.add_argument('--info', action='store_true', help='Show platform info and exit')

    return parser


def platform_info() -> dict:
    """Details about the machine that decide the default worker count."""
    return {
        'system': platform.system(),
        'machine': platform.machine(),
        'python_version': platform.python_version(),
        'cpu_count': os.cpu_count(),
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    if args.info:
        info = platform_info()
        print("LumenPath Platform Info:")
        print(f"  System: {info['system']}")
        print(f"  Machine: {info['machine']}")
        print(f"  Python: {info['python_version']}")
        print(f"  CPU Cores: {info['cpu_count']}")
        return 0

    world, view = load_builtin_scene(args.scene)
    focus_dist = args.focus_dist
    if focus_dist is None:
        focus_dist = (view.look_from - view.look_at).length()

    try:
        settings = RenderSettings(
            width=args.width,
            aspect_ratio=args.aspect,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            vfov=args.fov,
            aperture=args.aperture,
            focus_dist=focus_dist,
            output_path=args.output,
            parallel=not args.sequential,
            num_workers=args.workers,
            seed=args.seed,
            use_sky_gradient=view.use_sky_gradient,
            gamma=args.gamma,
        )
        camera = Camera.from_settings(settings, view.look_from, view.look_at, view.vup)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    # Print header
    print("=" * 60)
    print("LumenPath Path Tracer")
    print("=" * 60)
    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Workers: {settings.workers}")
    print(f"\nScene: {args.scene} ({len(world)} objects)")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(completed: int, total: int):
        pct = completed * 100 // total
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = bar_len * completed // total
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()

    image = renderer.render(world, camera)

    elapsed = time.time() - start_time
    primary_rays = settings.width * settings.height * settings.samples_per_pixel
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Primary rays per second: {primary_rays / max(elapsed, 1e-9):.0f}")

    print(f"\nSaving to: {settings.output_path}")
    try:
        renderer.save_image(image, settings.output_path)
    except ImageWriteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print("\nDone!")
    return 0
