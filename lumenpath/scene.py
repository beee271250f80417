"""
Scene container.

A scene is an ordered, stably indexed collection of primitives. It is built
once before rendering; the BVH refers to primitives by their position in the
scene, so the scene is frozen as soon as a BVH is built over it.
"""

from __future__ import annotations
from typing import Iterator, Optional

from .ray import Ray
from .shapes import AABB, HitRecord, Sphere, closest_hit


class SceneFrozenError(RuntimeError):
    """Raised when a scene is modified after its BVH was built."""


class Scene:
    """An ordered collection of spheres."""

    def __init__(self, primitives: Optional[list[Sphere]] = None):
        self.primitives: list[Sphere] = list(primitives) if primitives is not None else []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the scene read-only for the rest of the program."""
        self._frozen = True

    def add(self, primitive: Sphere) -> int:
        """Append a primitive and return its index in the scene."""
        if self._frozen:
            raise SceneFrozenError("cannot add primitives to a scene after its BVH was built")
        self.primitives.append(primitive)
        return len(self.primitives) - 1

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Closest hit by testing every primitive (no acceleration)."""
        return closest_hit(self.primitives, ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        """Return the AABB containing all primitives, or None when empty."""
        output_box: Optional[AABB] = None

        for primitive in self.primitives:
            box = primitive.bounding_box()
            output_box = box if output_box is None else AABB.surrounding_box(output_box, box)

        return output_box

    def __getitem__(self, index: int) -> Sphere:
        return self.primitives[index]

    def __len__(self) -> int:
        return len(self.primitives)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self.primitives)

    def __repr__(self) -> str:
        return f"Scene({len(self.primitives)} primitives)"
