"""Tests for the built-in scenes."""

import pytest

from lumenpath.vec3 import Point3
from lumenpath.shapes import Sphere
from lumenpath.materials import Light, Metal, MATERIAL_TYPES
from lumenpath.scenes import SCENES, SceneView, load_builtin_scene, create_two_spheres


class TestBuiltinScenes:
    """Test scene construction."""

    @pytest.mark.parametrize("name", sorted(SCENES))
    def test_scene_builds(self, name):
        world, view = load_builtin_scene(name)
        assert len(world) > 0
        assert isinstance(view, SceneView)
        assert not world.frozen
        for primitive in world:
            assert isinstance(primitive, Sphere)
            assert isinstance(primitive.material, MATERIAL_TYPES)

    def test_each_call_returns_fresh_scene(self):
        a, _ = load_builtin_scene('two-spheres')
        b, _ = load_builtin_scene('two-spheres')
        assert a is not b

    def test_two_spheres_layout(self):
        world, view = create_two_spheres()
        assert len(world) == 2
        assert world[1].center == Point3(0, 0, -1)
        assert world[1].radius == 0.5
        assert isinstance(world[1].material, Metal)
        assert view.look_from == Point3(0, 0, 0)
        assert view.use_sky_gradient

    def test_emissive_scene_is_dark(self):
        world, view = load_builtin_scene('emissive')
        assert not view.use_sky_gradient
        assert any(isinstance(p.material, Light) for p in world)

    def test_materials_scene_has_hollow_sphere(self):
        world, _ = load_builtin_scene('materials')
        assert any(p.radius < 0 for p in world)

    def test_unknown_scene(self):
        with pytest.raises(KeyError, match="unknown scene"):
            load_builtin_scene('cornell-box')
