"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Camera configuration
- Render settings
- Materials library
- Objects (spheres bound to materials)

Example scene file:
```yaml
camera:
  origin: [0, 0, 0]
  focal_length: 1.0
  viewport_height: 2.0

render:
  image_width: 400
  image_height: 225
  samples_per_pixel: 100
  max_depth: 50
  rng_seed: 7

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
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Glossy, Dielectric
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key present in data."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _number(value: Any, name: str, convert: Callable[[Any], Any] = float) -> Any:
    """Convert a scene value to a number, reporting bad input as a parse error."""
    if isinstance(value, bool):
        raise SceneParseError(f"'{name}' must be a number, got {value!r}")
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise SceneParseError(f"'{name}' must be a number, got {value!r}") from exc


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(
        self,
        filepath: str,
        render_overrides: Optional[Dict[str, Any]] = None
    ) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)
            render_overrides: Entries replacing those of the `render` section

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        if path.suffix == '.json':
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                raise SceneParseError(f"Invalid JSON in {filepath}: {exc}") from exc
        else:
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as exc:
                raise SceneParseError(f"Invalid YAML in {filepath}: {exc}") from exc

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        if render_overrides:
            render = data.get('render', {})
            if not isinstance(render, dict):
                raise SceneParseError("'render' must be a mapping")
            data['render'] = {**render, **render_overrides}

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        if not isinstance(data, dict):
            raise SceneParseError("Scene description must be a mapping")

        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            self._parse_objects(data['objects'])

        # Camera size follows the render settings
        self._parse_settings(data.get('render', {}))
        self._parse_camera(data.get('camera', {}))

        logger.debug(
            "Parsed scene: %d materials, %d objects",
            len(self.materials), len(self.objects)
        )
        return self.objects, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(*(_number(c, 'vector component') for c in data))
        elif isinstance(data, dict):
            return Vec3(
                _number(data.get('x', 0), 'x'),
                _number(data.get('y', 0), 'y'),
                _number(data.get('z', 0), 'z')
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*(_number(c, 'color component') for c in data))
        elif isinstance(data, dict):
            return Color(
                _number(data.get('r', 0), 'r'),
                _number(data.get('g', 0), 'g'),
                _number(data.get('b', 0), 'b')
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#'):
                hex_color = data[1:]
                if len(hex_color) == 6:
                    try:
                        r = int(hex_color[0:2], 16) / 255.0
                        g = int(hex_color[2:4], 16) / 255.0
                        b = int(hex_color[4:6], 16) / 255.0
                    except ValueError as exc:
                        raise SceneParseError(f"Invalid hex color: {data}") from exc
                    return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _build_material(self, mat_data: Any) -> Material:
        """Build one material from its descriptor."""
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Material must be a mapping, got: {mat_data}")

        mat_type = str(_first(mat_data, 'kind', 'type', default='lambertian')).lower()

        if mat_type == 'lambertian':
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type in ('glossy', 'metal'):
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            roughness = _number(_first(mat_data, 'roughness', 'fuzz', default=0.0), 'roughness')
            return Glossy(albedo, roughness)

        elif mat_type == 'dielectric':
            refractive_index = _number(
                _first(mat_data, 'refractive_index', 'ior', default=1.5), 'refractive_index'
            )
            albedo = None
            if 'albedo' in mat_data:
                albedo = self._parse_color(mat_data['albedo'])
            return Dielectric(refractive_index, albedo)

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Any) -> None:
        """Parse materials section."""
        if not isinstance(materials_data, dict):
            raise SceneParseError("'materials' must be a mapping of name to material")
        for name, mat_data in materials_data.items():
            self.materials[name] = self._build_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Object has no material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._build_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: Any) -> None:
        """Parse objects section."""
        if not isinstance(objects_data, list):
            raise SceneParseError("'objects' must be a list")

        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Object must be a mapping, got: {obj_data}")

            obj_type = str(_first(obj_data, 'kind', 'type', default='sphere')).lower()
            if obj_type != 'sphere':
                raise SceneParseError(f"Unknown object type: {obj_type}")

            material = self._get_material(obj_data.get('material'))
            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            radius = _number(obj_data.get('radius', 1.0), 'radius')
            self.objects.add(Sphere(center, radius, material))

    def _parse_camera(self, camera_data: Any) -> None:
        """Parse camera section."""
        if not isinstance(camera_data, dict):
            raise SceneParseError("'camera' must be a mapping")

        origin = self._parse_vec3(_first(camera_data, 'origin', 'camera_origin', default=[0, 0, 0]))
        look_at = None
        if 'look_at' in camera_data:
            look_at = self._parse_vec3(camera_data['look_at'])
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))

        self.camera = Camera(
            image_width=self.settings.width,
            image_height=self.settings.height,
            origin=origin,
            look_at=look_at,
            vup=vup,
            focal_length=_number(camera_data.get('focal_length', 1.0), 'focal_length'),
            viewport_height=_number(camera_data.get('viewport_height', 2.0), 'viewport_height')
        )

    def _parse_settings(self, settings_data: Any) -> None:
        """Parse render settings section."""
        if not isinstance(settings_data, dict):
            raise SceneParseError("'render' must be a mapping")

        def integer(name: str, *keys: str, default: int) -> int:
            return _number(_first(settings_data, *keys, default=default), name, int)

        self.settings = RenderSettings(
            width=integer('image_width', 'image_width', 'width', default=400),
            height=integer('image_height', 'image_height', 'height', default=225),
            samples_per_pixel=integer('samples_per_pixel', 'samples_per_pixel', 'samples', default=100),
            max_depth=integer('max_depth', 'max_depth', default=50),
            seed=integer('rng_seed', 'rng_seed', 'seed', default=0),
            num_threads=integer('threads', 'threads', default=1),
            tile_size=integer('tile_size', 'tile_size', default=32)
        )


def load_scene(
    filepath: str,
    render_overrides: Optional[Dict[str, Any]] = None
) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file
        render_overrides: Entries replacing those of the `render` section

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath, render_overrides)


def parse_scene(data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
