"""
Raysmith - A Python Monte-Carlo Ray Tracer

A small recursive path tracer with support for:
- Spheres scanned linearly for the closest hit
- Lambertian, glossy and dielectric materials
- Jittered multi-sample antialiasing with gamma correction
- Reproducible per-pixel random streams
- YAML/JSON scene descriptions
"""

__version__ = "0.1.0"
__author__ = "Raysmith Team"

from .errors import ConfigurationError
from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, HittableList, Scene, HitRecord, Hittable
from .materials import Material, ScatterResult, Lambertian, Glossy, Dielectric
from .camera import Camera
from .renderer import (
    Renderer, RenderSettings, ImageSink, ArrayImageSink, PILImageSink,
    linear_to_gamma, to_ldr, pixel_rng
)
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
