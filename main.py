#!/usr/bin/env python3
"""
Raysmith - A Python Monte-Carlo Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from raysmith.errors import ConfigurationError
from raysmith.vec3 import Color, Point3
from raysmith.camera import Camera
from raysmith.shapes import Sphere, HittableList
from raysmith.materials import Lambertian, Glossy, Dielectric
from raysmith.renderer import Renderer, RenderSettings, PILImageSink
from raysmith.scene_parser import SceneParseError, load_scene


def create_demo_scene() -> HittableList:
    """Create a demo scene with one sphere of each material."""
    world = HittableList()

    ground = Lambertian(Color(0.8, 0.8, 0.0))
    center = Lambertian(Color(0.1, 0.2, 0.5))
    glass = Dielectric(1.5)
    gold = Glossy(Color(0.8, 0.6, 0.2), 0.3)

    world.add(Sphere(Point3(0.0, -100.5, -1.0), 100.0, ground))
    world.add(Sphere(Point3(0.0, 0.0, -1.0), 0.5, center))
    world.add(Sphere(Point3(-1.0, 0.0, -1.0), 0.5, glass))
    # Hollow glass: an inner sphere with the inverse index acts as an air bubble
    world.add(Sphere(Point3(-1.0, 0.0, -1.0), 0.4, Dielectric(1.0 / 1.5)))
    world.add(Sphere(Point3(1.0, 0.0, -1.0), 0.5, gold))

    return world


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Raysmith - A Python Monte-Carlo Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --width 640 --height 360 --samples 200 --seed 7 --output hd.png
  python main.py --scene-file scene.yaml --threads 4 --output scene.png
        '''
    )

    parser.add_argument('--width', type=int, default=None, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 225)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max ray depth (default: 50)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (default: 0)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (default: 1)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene description (default: built-in demo)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.scene_file:
            overrides = {
                'image_width': args.width,
                'image_height': args.height,
                'samples_per_pixel': args.samples,
                'max_depth': args.depth,
                'rng_seed': args.seed,
                'threads': args.threads,
            }
            overrides = {key: value for key, value in overrides.items() if value is not None}
            world, camera, settings = load_scene(args.scene_file, overrides)
        else:
            overrides = {
                'width': args.width,
                'height': args.height,
                'samples_per_pixel': args.samples,
                'max_depth': args.depth,
                'seed': args.seed,
                'num_threads': args.threads,
            }
            overrides = {key: value for key, value in overrides.items() if value is not None}
            settings = RenderSettings(**overrides)
            world = create_demo_scene()
            camera = Camera(settings.width, settings.height)
    except (ConfigurationError, SceneParseError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    # Print header
    print("=" * 60)
    print("Raysmith Ray Tracer")
    print("=" * 60)

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Seed: {settings.seed}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Objects in scene: {len(world)}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()

    sink = PILImageSink(settings.width, settings.height)
    renderer.render(world, camera, sink)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Samples per second: {settings.total_samples / elapsed:.0f}")

    output_path = Path(args.output)
    print(f"\nSaving to: {args.output}")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        sink.save(str(output_path))
    except (OSError, ValueError) as exc:
        print(f"Error: could not write {args.output}: {exc}", file=sys.stderr)
        return 1

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
