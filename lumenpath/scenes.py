"""
Built-in scenes.

Each builder returns a fresh ``Scene`` together with the ``SceneView`` it is
meant to be seen from.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .vec3 import Vec3, Color, Point3
from .shapes import Sphere
from .scene import Scene
from .materials import Lambertian, Metal, Dielectric, Light


@dataclass(frozen=True)
class SceneView:
    """Where a scene is viewed from and how it is lit from outside."""
    look_from: Point3
    look_at: Point3
    vup: Vec3 = Vec3(0, 1, 0)
    use_sky_gradient: bool = True


def create_two_spheres() -> Tuple[Scene, SceneView]:
    """A metal sphere resting on a large diffuse ground sphere."""
    world = Scene()
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2))))
    return world, SceneView(look_from=Point3(0, 0, 0), look_at=Point3(0, 0, -1))


def create_materials_scene() -> Tuple[Scene, SceneView]:
    """Diffuse, glass (with a hollow bubble) and metal spheres side by side."""
    world = Scene()

    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))

    # Left sphere - hollow glass: a negative radius flips the normals inward
    glass = Dielectric(1.5)
    world.add(Sphere(Point3(-1, 0, -1), 0.5, glass))
    world.add(Sphere(Point3(-1, 0, -1), -0.4, glass))

    # Right sphere - metal
    world.add(Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2))))

    return world, SceneView(look_from=Point3(-2, 2, 1), look_at=Point3(0, 0, -1))


def create_emissive_scene() -> Tuple[Scene, SceneView]:
    """Spheres lit only by a light sphere overhead, against a black sky."""
    world = Scene()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-2.5, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(2.5, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5))))

    # Light source
    world.add(Sphere(Point3(0, 5, 0), 1.5, Light(Color(6, 6, 6))))

    view = SceneView(
        look_from=Point3(0, 2.5, 9),
        look_at=Point3(0, 1, 0),
        use_sky_gradient=False,
    )
    return world, view


SCENES: Dict[str, Callable[[], Tuple[Scene, SceneView]]] = {
    'two-spheres': create_two_spheres,
    'materials': create_materials_scene,
    'emissive': create_emissive_scene,
}


def load_builtin_scene(name: str) -> Tuple[Scene, SceneView]:
    """Build one of the scenes in ``SCENES`` by name."""
    try:
        builder = SCENES[name]
    except KeyError:
        raise KeyError(f"unknown scene {name!r}; choose from {', '.join(sorted(SCENES))}") from None
    return builder()
