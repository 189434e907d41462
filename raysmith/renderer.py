"""
Renderer module - the heart of the ray tracer.

Implements:
- Recursive path tracing bounded by a maximum bounce depth
- Jittered multi-sample antialiasing
- Gamma correction and 8-bit quantization
- Optional multi-threaded tile-based rendering
- Image sinks that receive each finished pixel
"""

from __future__ import annotations
import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .errors import ConfigurationError
from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable

logger = logging.getLogger(__name__)

# Minimum ray parameter for secondary hits, avoids shadow acne
T_MIN = 1e-3

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    num_threads: int = 1
    tile_size: int = 32
    jitter: bool = True

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Image size must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ConfigurationError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must not be negative, got {self.max_depth}")
        if self.seed < 0:
            raise ConfigurationError(f"seed must not be negative, got {self.seed}")
        if self.num_threads < 1:
            raise ConfigurationError(f"num_threads must be at least 1, got {self.num_threads}")
        if self.tile_size < 1:
            raise ConfigurationError(f"tile_size must be at least 1, got {self.tile_size}")

    @property
    def total_samples(self) -> int:
        return self.width * self.height * self.samples_per_pixel


class ImageSink(ABC):
    """Receives every finished pixel exactly once."""

    @abstractmethod
    def write_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        pass


class ArrayImageSink(ImageSink):
    """Collects pixels into a (height, width, 3) uint8 numpy buffer."""

    def __init__(self, width: int, height: int):
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self.writes = 0

    def write_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        self.pixels[y, x] = (r, g, b)
        self.writes += 1


class PILImageSink(ImageSink):
    """Collects pixels into a Pillow RGB image."""

    def __init__(self, width: int, height: int):
        from PIL import Image as PILImage

        self.image = PILImage.new('RGB', (width, height))

    def write_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        self.image.putpixel((x, y), (r, g, b))

    def save(self, filename: str) -> None:
        """Write the collected image; the extension picks the format."""
        self.image.save(filename)


def linear_to_gamma(linear: np.ndarray) -> np.ndarray:
    """Gamma-2 encode linear color values (square root per channel).

    Negative inputs map to 0, so the transform is non-decreasing and
    fixes both 0 and 1.
    """
    return np.sqrt(np.clip(linear, 0.0, None))


def to_ldr(linear_image: np.ndarray) -> np.ndarray:
    """Convert a linear float image to gamma-corrected 8-bit channels.

    Args:
        linear_image: Mean linear color per pixel (float64)

    Returns:
        uint8 array of the same shape, truncated after scaling by 255
    """
    corrected = linear_to_gamma(linear_image)
    return np.clip(corrected * 255.0, 0, 255).astype(np.uint8)


def pixel_rng(seed: int, x: int, y: int) -> np.random.Generator:
    """Independent random stream for one pixel.

    Derived from the render seed and the pixel coordinates, so the
    result does not depend on the order or thread pixels run on.
    """
    return np.random.default_rng(np.random.SeedSequence([seed, y, x]))


class Renderer:
    """Path tracing renderer with optional multi-threading."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None
        self._progress_lock = threading.Lock()
        self._completed_samples = 0

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        The callback is invoked once per traced sample.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def ray_color(self, ray: Ray, scene: Hittable, depth: int, rng: np.random.Generator) -> Color:
        """Estimate the radiance carried back along a ray.

        Args:
            ray: The ray to trace
            scene: The scene to trace against
            depth: Number of bounces already taken
            rng: Random stream of the pixel being rendered

        Returns:
            Linear color estimate for this ray
        """
        if depth >= self.settings.max_depth:
            return BLACK

        hit_record = scene.hit(ray, T_MIN, float('inf'))

        if hit_record is None:
            return self.sky_color(ray)

        scatter_result = hit_record.material.scatter(ray, hit_record, rng)
        if scatter_result is None:
            return BLACK

        return scatter_result.attenuation * self.ray_color(
            scatter_result.scattered_ray, scene, depth + 1, rng
        )

    @staticmethod
    def sky_color(ray: Ray) -> Color:
        """Vertical gradient from white at the horizon to sky blue overhead."""
        unit_direction = ray.direction.unit()
        t = 0.5 * (unit_direction.y + 1.0)
        return WHITE * (1.0 - t) + SKY_BLUE * t

    def sample_pixel(self, scene: Hittable, camera: Camera, i: int, j: int,
                     rng: np.random.Generator) -> Color:
        """Mean linear color of pixel (i, j) over samples_per_pixel rays."""
        samples = self.settings.samples_per_pixel
        pixel_color = Color(0, 0, 0)

        for _ in range(samples):
            ray = camera.get_ray(i, j, rng, jitter=self.settings.jitter)
            pixel_color = pixel_color + self.ray_color(ray, scene, 0, rng)
            self._report_sample()

        return pixel_color / samples

    def render_linear(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the mean linear color per pixel.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from, sized like the settings

        Returns:
            Linear image as numpy array of shape (height, width, 3)
        """
        width = self.settings.width
        height = self.settings.height
        if (camera.image_width, camera.image_height) != (width, height):
            raise ConfigurationError(
                f"Camera is {camera.image_width}x{camera.image_height} "
                f"but settings ask for {width}x{height}"
            )

        image = np.zeros((height, width, 3), dtype=np.float64)
        self._completed_samples = 0
        seed = self.settings.seed

        def render_tile(tile: Tuple[int, int, int, int]) -> None:
            """Render a single tile into its own slice of the image."""
            x0, y0, x1, y1 = tile
            for y in range(y0, y1):
                for x in range(x0, x1):
                    rng = pixel_rng(seed, x, y)
                    image[y, x] = self.sample_pixel(scene, camera, x, y, rng).to_array()

        tiles = self._generate_tiles(width, height)

        logger.info(
            "Rendering %dx%d, %d samples/pixel, max depth %d, %d thread(s)",
            width, height, self.settings.samples_per_pixel,
            self.settings.max_depth, self.settings.num_threads
        )
        start_time = time.perf_counter()

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                # list() re-raises any exception from a worker
                list(executor.map(render_tile, tiles))
        else:
            for tile in tiles:
                render_tile(tile)

        logger.info("Render finished in %.2f seconds", time.perf_counter() - start_time)
        return image

    def render(self, scene: Hittable, camera: Camera, sink: Optional[ImageSink] = None) -> np.ndarray:
        """Render the scene to 8-bit RGB.

        Args:
            scene: The scene to render
            camera: The camera to render from
            sink: Optional receiver of every pixel, in row-major order
                from top to bottom and left to right

        Returns:
            uint8 image of shape (height, width, 3)
        """
        ldr = to_ldr(self.render_linear(scene, camera))

        if sink is not None:
            height, width = ldr.shape[:2]
            for y in range(height):
                for x in range(width):
                    r, g, b = ldr[y, x]
                    sink.write_pixel(x, y, int(r), int(g), int(b))

        return ldr

    def _report_sample(self) -> None:
        if self._progress_callback is None:
            return
        # Called under the lock so fractions arrive in increasing order
        with self._progress_lock:
            self._completed_samples += 1
            self._progress_callback(self._completed_samples / self.settings.total_samples)

    def _generate_tiles(self, width: int, height: int) -> list[Tuple[int, int, int, int]]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save an image to file.

        Args:
            image: uint8 image, or a linear float image to be converted
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        if image.dtype != np.uint8:
            image = to_ldr(image)

        PILImage.fromarray(image).save(filename)
