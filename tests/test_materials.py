"""Tests for material system."""

import pytest
import math
import dataclasses
import numpy as np

from lumenpath.vec3 import Vec3, Point3, Color
from lumenpath.ray import Ray
from lumenpath.shapes import HitRecord
from lumenpath.materials import (
    Material, Lambertian, Metal, Dielectric, Light, MATERIAL_TYPES,
    must_reflect, schlick_reflectance
)


def make_hit(normal=Vec3(0, 1, 0), point=Point3(0, 0, 0), front_face=True, material=None):
    return HitRecord(point=point, normal=normal, t=1.0, front_face=front_face, material=material)


class TestClosedSet:
    """Test the material set."""

    def test_material_types(self):
        assert MATERIAL_TYPES == (Lambertian, Metal, Dielectric, Light)
        assert all(issubclass(t, Material) for t in MATERIAL_TYPES)

    def test_materials_are_immutable(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        with pytest.raises(dataclasses.FrozenInstanceError):
            mat.albedo = Color(1, 1, 1)

    def test_materials_compare_by_value(self):
        assert Metal(Color(0.1, 0.2, 0.3)) == Metal(Color(0.1, 0.2, 0.3))
        assert Dielectric(1.5) != Dielectric(1.3)


class TestLambertian:
    """Test Lambertian diffuse material."""

    def test_scatter_always_succeeds(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))

        for _ in range(100):
            assert mat.scatter(ray_in, make_hit(), rng) is not None

    def test_scattered_in_hemisphere(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))
        normal = Vec3(0, 1, 0)

        for _ in range(200):
            result = mat.scatter(ray_in, make_hit(normal), rng)
            assert result.scattered_ray.direction.dot(normal) >= 0
            assert result.scattered_ray.origin == Point3(0, 0, 0)

    def test_attenuation_within_albedo(self, rng):
        albedo = Color(0.8, 0.2, 0.3)
        mat = Lambertian(albedo)
        ray_in = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))

        for _ in range(50):
            att = mat.scatter(ray_in, make_hit(), rng).attenuation
            for i in range(3):
                assert 0 <= att[i] <= albedo[i]

    def test_emits_nothing(self):
        assert Lambertian(Color(1, 1, 1)).emitted() == Color(0, 0, 0)


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection(self, rng):
        mat = Metal(Color(1, 1, 1))
        ray_in = Ray(Point3(0, 0, 0), Vec3(1, -1, 0))
        hit = make_hit(Vec3(0, 1, 0), Point3(1, -1, 0))

        result = mat.scatter(ray_in, hit, rng)
        assert result is not None

        # Incoming (1, -1, 0) reflects to (1, 1, 0)
        expected = Vec3(1, 1, 0).normalize()
        assert result.scattered_ray.direction == expected

    def test_attenuation_within_albedo(self, rng):
        albedo = Color(0.9, 0.6, 0.1)
        mat = Metal(albedo)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0.3, -1, 0.2))

        att = mat.scatter(ray_in, make_hit(), rng).attenuation
        for i in range(3):
            assert 0 <= att[i] <= albedo[i]

    @pytest.mark.parametrize("direction", [
        Vec3(0, 1, 0),       # leaving the surface along the normal
        Vec3(1, 0.5, 0),     # leaving at an angle
        Vec3(1, 0, 0),       # grazing, exactly tangent
        Vec3(0, 0, -1),      # tangent along another axis
    ])
    def test_absorbed_when_reflection_enters_surface(self, rng, direction):
        mat = Metal(Color(0.8, 0.8, 0.8))
        normal = Vec3(0, 1, 0)
        reflected = direction.normalize().reflect(normal)
        assert reflected.dot(normal) <= 0

        assert mat.scatter(Ray(Point3(0, 0, 0), direction), make_hit(normal), rng) is None

    def test_does_not_use_random_numbers(self):
        rng = np.random.default_rng(0)
        state = rng.bit_generator.state
        Metal(Color(1, 1, 1)).scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(), rng)
        assert rng.bit_generator.state == state


class TestDielectric:
    """Test Dielectric material."""

    def test_always_scatters_with_white_attenuation(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0.2, -1, 0))

        for front_face in (True, False):
            for _ in range(50):
                result = mat.scatter(ray_in, make_hit(front_face=front_face), rng)
                assert result is not None
                assert result.attenuation == Color(1, 1, 1)

    def test_outgoing_direction_is_unit_length(self, rng):
        mat = Dielectric(1.5)
        for _ in range(200):
            direction = Vec3(rng.uniform(-1, 1), -rng.uniform(0.01, 1), rng.uniform(-1, 1))
            for front_face in (True, False):
                result = mat.scatter(Ray(Point3(0, 1, 0), direction), make_hit(front_face=front_face), rng)
                assert abs(result.scattered_ray.direction.length() - 1.0) < 1e-9

    def test_outgoing_is_reflection_or_refraction(self, rng):
        mat = Dielectric(1.5)
        normal = Vec3(0, 1, 0)
        unit_in = Vec3(0.5, -1, 0).normalize()
        reflected = unit_in.reflect(normal)
        refracted = unit_in.refract(normal, 1 / 1.5).normalize()

        for _ in range(100):
            out = mat.scatter(Ray(Point3(0, 1, 0), unit_in), make_hit(normal), rng).scattered_ray.direction
            assert out == reflected or out == refracted

    def test_total_internal_reflection(self, rng):
        # Leaving glass at a steep angle: ratio * sin(theta) = 1.5 * sin(60) > 1
        mat = Dielectric(1.5)
        normal = Vec3(0, 1, 0)
        angle = math.radians(60)
        unit_in = Vec3(math.sin(angle), -math.cos(angle), 0)
        assert must_reflect(math.sin(angle), 1.5)

        expected = unit_in.reflect(normal)
        for _ in range(50):
            out = mat.scatter(Ray(Point3(0, 1, 0), unit_in), make_hit(normal, front_face=False), rng)
            assert out.scattered_ray.direction == expected

    def test_normal_incidence_mostly_refracts(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))

        refracted = 0
        for _ in range(400):
            out = mat.scatter(ray_in, make_hit(), rng).scattered_ray.direction
            if out.y < 0:
                refracted += 1

        # Schlick reflectance at normal incidence for glass is 4%
        assert refracted > 350

    def test_schlick_reflectance(self):
        r0 = ((1 - 1.5) / (1 + 1.5)) ** 2
        assert abs(schlick_reflectance(1.0, 1.5) - r0) < 1e-12
        assert abs(schlick_reflectance(0.0, 1.5) - 1.0) < 1e-12
        assert schlick_reflectance(0.5, 1 / 1.5) < schlick_reflectance(0.1, 1 / 1.5)

    def test_must_reflect(self):
        assert not must_reflect(0.5, 1 / 1.5)
        assert not must_reflect(0.6, 1.5)
        assert must_reflect(0.7, 1.5)


class TestLight:
    """Test Light (emissive) material."""

    def test_never_scatters(self, rng):
        mat = Light(Color(4, 4, 4))
        assert mat.scatter(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), make_hit(), rng) is None

    def test_emission(self):
        assert Light(Color(4, 3, 2)).emitted() == Color(4, 3, 2)

    def test_only_light_emits(self):
        for mat in (Lambertian(Color(1, 1, 1)), Metal(Color(1, 1, 1)), Dielectric(1.5)):
            assert mat.emitted() == Color(0, 0, 0)
