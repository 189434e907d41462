"""Tests for the scene description parser."""

import json
import pytest

from raysmith.errors import ConfigurationError
from raysmith.vec3 import Vec3, Point3, Color
from raysmith.materials import Lambertian, Glossy, Dielectric
from raysmith.scene_parser import SceneParser, SceneParseError, load_scene, parse_scene


SCENE_YAML = """
camera:
  origin: [0, 0, 0]
  focal_length: 1.0

render:
  image_width: 8
  image_height: 4
  samples_per_pixel: 2
  max_depth: 5
  rng_seed: 3

materials:
  ground:
    kind: lambertian
    albedo: [0.8, 0.8, 0.0]
  glass:
    kind: dielectric
    refractive_index: 1.5

objects:
  - kind: sphere
    center: [0, -100.5, -1]
    radius: 100
    material: ground
  - kind: sphere
    center: [0, 0, -1]
    radius: 0.5
    material: glass
"""


class TestParseDict:
    """Test parsing from dictionaries."""

    def test_minimal_scene_uses_defaults(self):
        scene, camera, settings = parse_scene({})
        assert len(scene) == 0
        assert settings.width == 400
        assert settings.height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        assert (camera.image_width, camera.image_height) == (400, 225)

    def test_shared_material_is_one_object(self):
        scene, _, _ = parse_scene({
            'materials': {'red': {'kind': 'lambertian', 'albedo': [1, 0, 0]}},
            'objects': [
                {'kind': 'sphere', 'center': [0, 0, -1], 'radius': 0.5, 'material': 'red'},
                {'kind': 'sphere', 'center': [1, 0, -1], 'radius': 0.5, 'material': 'red'},
            ],
        })
        first, second = list(scene)
        assert isinstance(first.material, Lambertian)
        assert first.material is second.material

    def test_inline_material(self):
        scene, _, _ = parse_scene({
            'objects': [{
                'center': {'x': 1, 'y': 2, 'z': 3},
                'radius': 2,
                'material': {'type': 'metal', 'albedo': '#ff8000', 'fuzz': 0.25},
            }],
        })
        sphere = next(iter(scene))
        assert sphere.center == Point3(1, 2, 3)
        assert sphere.radius == 2.0
        assert isinstance(sphere.material, Glossy)
        assert sphere.material.roughness == 0.25
        assert sphere.material.albedo == Color(1.0, 128 / 255.0, 0.0)

    def test_dielectric_options(self):
        scene, _, _ = parse_scene({
            'objects': [
                {'radius': 1, 'material': {'kind': 'dielectric', 'ior': 1.33}},
                {'radius': 1, 'material': {'kind': 'dielectric',
                                           'albedo': {'r': 0.9, 'g': 1, 'b': 0.9}}},
            ],
        })
        water, tinted = list(scene)
        assert water.material.refractive_index == 1.33
        assert water.material.albedo == Color(1, 1, 1)
        assert tinted.material.refractive_index == 1.5
        assert tinted.material.albedo == Color(0.9, 1, 0.9)

    def test_sphere_without_material_rejected(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'kind': 'sphere', 'radius': 1}]})

    def test_render_section(self):
        _, camera, settings = parse_scene({
            'render': {'width': 16, 'height': 9, 'samples': 4, 'max_depth': 3,
                       'seed': 11, 'threads': 2, 'tile_size': 8},
        })
        assert (settings.width, settings.height) == (16, 9)
        assert settings.samples_per_pixel == 4
        assert settings.max_depth == 3
        assert settings.seed == 11
        assert settings.num_threads == 2
        assert settings.tile_size == 8
        assert (camera.image_width, camera.image_height) == (16, 9)

    def test_long_key_names_take_priority(self):
        _, _, settings = parse_scene({
            'render': {'width': 16, 'image_width': 32, 'seed': 1, 'rng_seed': 2},
        })
        assert settings.width == 32
        assert settings.seed == 2

    def test_camera_section(self):
        _, camera, _ = parse_scene({
            'render': {'image_width': 4, 'image_height': 4},
            'camera': {'camera_origin': [0, 1, 2], 'look_at': [0, 1, 0],
                       'focal_length': 2.0, 'viewport_height': 1.0},
        })
        assert camera.origin == Point3(0, 1, 2)
        assert camera.w == Vec3(0, 0, 1)
        assert camera.focal_length == 2.0
        assert camera.viewport_height == 1.0

    def test_parser_keeps_state(self):
        parser = SceneParser()
        parser.parse_dict({'materials': {'m': {'kind': 'glossy'}}})
        assert isinstance(parser.materials['m'], Glossy)
        assert parser.settings is not None
        assert parser.camera is not None


class TestParseErrors:
    """Test malformed scene descriptions."""

    def test_unknown_material_name(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'radius': 1, 'material': 'missing'}]})

    def test_unknown_material_kind(self):
        with pytest.raises(SceneParseError):
            parse_scene({'materials': {'m': {'kind': 'emissive'}}})

    def test_unknown_object_kind(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'kind': 'cube'}]})

    def test_invalid_material_reference(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'radius': 1, 'material': 42}]})

    @pytest.mark.parametrize("value", [[1, 2], "up", 5])
    def test_bad_vector(self, value):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'center': value, 'radius': 1, 'material': {}}]})

    @pytest.mark.parametrize("value", ["red", "#12345", [1, 0]])
    def test_bad_color(self, value):
        with pytest.raises(SceneParseError):
            parse_scene({'materials': {'m': {'albedo': value}}})

    def test_zero_radius_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_scene({'objects': [{'radius': 0, 'material': {}}]})

    def test_bad_render_value_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_scene({'render': {'samples_per_pixel': 0}})

    @pytest.mark.parametrize("section", ['materials', 'objects', 'render', 'camera'])
    def test_null_section(self, section):
        with pytest.raises(SceneParseError):
            parse_scene({section: None})

    @pytest.mark.parametrize("data", [
        {'materials': ['glass']},
        {'objects': {'kind': 'sphere'}},
        {'objects': ['sphere']},
        {'materials': {'m': 'lambertian'}},
    ])
    def test_wrongly_shaped_section(self, data):
        with pytest.raises(SceneParseError):
            parse_scene(data)

    @pytest.mark.parametrize("obj", [
        {'radius': 'big', 'material': {}},
        {'radius': None, 'material': {}},
        {'center': [0, 'up', 0], 'radius': 1, 'material': {}},
        {'center': {'x': 'left'}, 'radius': 1, 'material': {}},
        {'radius': 1, 'material': {'kind': 'glossy', 'roughness': 'high'}},
        {'radius': 1, 'material': {'kind': 'dielectric', 'ior': [1.5]}},
        {'radius': 1, 'material': {'albedo': ['red', 0, 0]}},
    ])
    def test_non_numeric_object_fields(self, obj):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [obj]})

    @pytest.mark.parametrize("render", [
        {'image_width': 'wide'},
        {'samples_per_pixel': '1.5'},
        {'threads': True},
    ])
    def test_non_numeric_render_fields(self, render):
        with pytest.raises(SceneParseError):
            parse_scene({'render': render})

    def test_non_numeric_camera_field(self):
        with pytest.raises(SceneParseError):
            parse_scene({'camera': {'focal_length': 'long'}})

    def test_bad_hex_digits(self):
        with pytest.raises(SceneParseError):
            parse_scene({'materials': {'m': {'albedo': '#zz0000'}}})


class TestParseFile:
    """Test loading scene files from disk."""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML)

        scene, camera, settings = load_scene(str(path))

        assert len(scene) == 2
        ground, glass = list(scene)
        assert isinstance(ground.material, Lambertian)
        assert isinstance(glass.material, Dielectric)
        assert settings.width == 8
        assert settings.seed == 3
        assert (camera.image_width, camera.image_height) == (8, 4)

    def test_json_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            'render': {'image_width': 5, 'image_height': 5},
            'objects': [{'kind': 'sphere', 'center': [0, 0, -1], 'radius': 0.5,
                         'material': {'kind': 'lambertian'}}],
        }))

        scene, camera, settings = load_scene(str(path))
        assert len(scene) == 1
        assert settings.width == 5

    def test_render_overrides(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML)

        _, camera, settings = load_scene(
            str(path), {'image_width': 20, 'samples_per_pixel': 7}
        )
        assert settings.width == 20
        assert settings.height == 4
        assert settings.samples_per_pixel == 7
        assert camera.image_width == 20

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("objects: [unclosed\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_document_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_empty_materials_section(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("materials:\nobjects:\n  - {kind: sphere, radius: 1, material: {}}\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_non_numeric_radius_in_file(self, tmp_path):
        path = tmp_path / "radius.yaml"
        path.write_text("objects:\n  - {kind: sphere, radius: big, material: {}}\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))
