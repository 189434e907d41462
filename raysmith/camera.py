"""
Camera module for generating primary rays.

Supports:
- Pinhole perspective projection onto a viewport at focal_length
- Arbitrary orientation via look-at (defaults to looking down -z)
- Box-filter jitter within each pixel for antialiasing
"""

from __future__ import annotations
from typing import Optional

import numpy as np

from .errors import ConfigurationError
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera that maps pixel coordinates to rays."""

    def __init__(
        self,
        image_width: int,
        image_height: int,
        origin: Point3 = Point3(0, 0, 0),
        look_at: Optional[Point3] = None,
        vup: Vec3 = Vec3(0, 1, 0),
        focal_length: float = 1.0,
        viewport_height: float = 2.0
    ):
        """Create a camera.

        Args:
            image_width: Image width in pixels
            image_height: Image height in pixels
            origin: Camera position in world space
            look_at: Point the camera is looking at (default: origin - z)
            vup: World up vector (usually (0, 1, 0))
            focal_length: Distance from the origin to the viewport
            viewport_height: Vertical extent of the viewport in world units

        Raises:
            ConfigurationError: on non-positive sizes or a degenerate orientation
        """
        if image_width <= 0 or image_height <= 0:
            raise ConfigurationError(
                f"Image size must be positive, got {image_width}x{image_height}"
            )
        if not focal_length > 0:
            raise ConfigurationError(f"Focal length must be positive, got {focal_length}")
        if not viewport_height > 0:
            raise ConfigurationError(f"Viewport height must be positive, got {viewport_height}")

        if look_at is None:
            look_at = origin - Vec3(0, 0, 1)

        self.image_width = image_width
        self.image_height = image_height
        self.origin = origin
        self.focal_length = float(focal_length)
        self.viewport_height = float(viewport_height)
        self.viewport_width = viewport_height * image_width / image_height

        # Compute orthonormal camera basis
        try:
            self.w = (origin - look_at).unit()  # Points backward from camera
            self.u = vup.cross(self.w).unit()   # Points right
        except ValueError as exc:
            raise ConfigurationError(f"Degenerate camera orientation: {exc}") from exc
        self.v = self.w.cross(self.u)           # Points up

        # Image rows run top to bottom, so the vertical edge points down
        viewport_u = self.u * self.viewport_width
        viewport_v = -self.v * self.viewport_height

        self.pixel_delta_u = viewport_u / image_width
        self.pixel_delta_v = viewport_v / image_height

        viewport_upper_left = (
            origin
            - self.w * self.focal_length
            - viewport_u / 2
            - viewport_v / 2
        )
        self.pixel00_loc = viewport_upper_left + (self.pixel_delta_u + self.pixel_delta_v) * 0.5

    def pixel_center(self, i: int, j: int) -> Point3:
        """World-space center of pixel column i, row j."""
        return self.pixel00_loc + self.pixel_delta_u * i + self.pixel_delta_v * j

    def get_ray(self, i: int, j: int, rng: np.random.Generator, jitter: bool = True) -> Ray:
        """Generate a sample ray through pixel (i, j).

        Args:
            i: Pixel column (0 = left)
            j: Pixel row (0 = top)
            rng: Random stream for the jitter offsets
            jitter: Offset the target uniformly within [-0.5, 0.5] of a pixel

        Returns:
            A ray from the camera origin through the (jittered) pixel center
        """
        if jitter:
            offset_u = rng.uniform(-0.5, 0.5)
            offset_v = rng.uniform(-0.5, 0.5)
        else:
            offset_u = offset_v = 0.0

        pixel_sample = (
            self.pixel00_loc
            + self.pixel_delta_u * (i + offset_u)
            + self.pixel_delta_v * (j + offset_v)
        )
        return Ray(self.origin, pixel_sample - self.origin)

    def __repr__(self) -> str:
        return (
            f"Camera(origin={self.origin}, size={self.image_width}x{self.image_height}, "
            f"focal_length={self.focal_length})"
        )
