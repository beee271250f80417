"""
Geometric shapes for the path tracer.

Each shape implements the Hittable protocol: an exact ``hit`` test and an
axis-aligned ``bounding_box`` used by the BVH.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: Unit surface normal, always pointing against the ray
        t: The ray parameter at intersection
        front_face: True if the ray approached from outside the surface
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None

    def set_face_normal(self, ray: Ray, outward_normal: Vec3) -> None:
        """Orient the normal against the incoming ray.

        Args:
            ray: The incoming ray
            outward_normal: The unit geometric normal pointing outward
        """
        self.front_face = ray.direction.dot(outward_normal) < 0
        self.normal = outward_normal if self.front_face else -outward_normal


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (avoid self-intersection)
            t_max: Maximum t value to consider

        Returns:
            HitRecord if intersection found, None otherwise
        """

    @abstractmethod
    def bounding_box(self) -> AABB:
        """Get the axis-aligned bounding box for this object."""


class Sphere(Hittable):
    """A sphere defined by center and radius.

    ``bvh_index`` is -1 until a BVH build assigns the sphere its leaf.
    """

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        self.center = center
        self.radius = radius
        self.material = material
        self.bvh_index = -1

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
        Only roots strictly inside (t_min, t_max) are accepted. A sphere of
        radius zero has no surface normal and is never hit.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a == 0 or self.radius == 0:
            return None
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if not discriminant >= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if not t_min < root < t_max:
            root = (-half_b + sqrtd) / a
            if not t_min < root < t_max:
                return None
        if not math.isfinite(root):
            return None

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius

        hit_record = HitRecord(
            point=point,
            normal=outward_normal,
            t=root,
            front_face=True,
            material=self.material,
        )
        hit_record.set_face_normal(ray, outward_normal)

        return hit_record

    def bounding_box(self) -> AABB:
        """Return the AABB containing this sphere."""
        r_vec = Vec3(abs(self.radius), abs(self.radius), abs(self.radius))
        return AABB(self.center - r_vec, self.center + r_vec)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB using the slab method."""
        for i in range(3):
            origin = ray.origin[i]
            direction = ray.direction[i]
            lo = self.minimum[i]
            hi = self.maximum[i]

            if direction == 0:
                # Parallel to the slab: inside it for every t, or never
                if origin < lo or origin > hi:
                    return False
                continue

            inv_d = 1.0 / direction
            t0 = (lo - origin) * inv_d
            t1 = (hi - origin) * inv_d
            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = max(t0, t_min)
            t_max = min(t1, t_max)

            if t_max < t_min:
                return False

        return True

    def centroid(self) -> Point3:
        return (self.minimum + self.maximum) * 0.5

    def longest_axis(self) -> int:
        """Index (0=x, 1=y, 2=z) of the box's longest extent."""
        extent = (self.maximum - self.minimum).to_array()
        return int(extent.argmax())

    def contains(self, other: AABB) -> bool:
        """True if ``other`` lies entirely inside this box."""
        return all(
            self.minimum[i] <= other.minimum[i] and other.maximum[i] <= self.maximum[i]
            for i in range(3)
        )

    @staticmethod
    def surrounding_box(box0: AABB, box1: AABB) -> AABB:
        """Return the AABB that contains both input boxes."""
        small = Point3(
            min(box0.minimum.x, box1.minimum.x),
            min(box0.minimum.y, box1.minimum.y),
            min(box0.minimum.z, box1.minimum.z)
        )
        big = Point3(
            max(box0.maximum.x, box1.maximum.x),
            max(box0.maximum.y, box1.maximum.y),
            max(box0.maximum.z, box1.maximum.z)
        )
        return AABB(small, big)

    @staticmethod
    def from_points(points: Iterable[Point3]) -> AABB:
        """Smallest AABB containing every point (at least one required)."""
        points = iter(points)
        first = next(points)
        box = AABB(first, first)
        for p in points:
            box = AABB.surrounding_box(box, AABB(p, p))
        return box

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


def closest_hit(
    candidates: Iterable[Hittable],
    ray: Ray,
    t_min: float,
    t_max: float
) -> Optional[HitRecord]:
    """Intersect every candidate and keep the hit with the smallest t.

    A hit whose distance is not a finite real number never wins; ties keep
    the first candidate encountered.
    """
    closest: Optional[HitRecord] = None

    for obj in candidates:
        hit_record = obj.hit(ray, t_min, t_max)
        if hit_record is None or not math.isfinite(hit_record.t):
            continue
        if closest is None or hit_record.t < closest.t:
            closest = hit_record

    return closest
