#!/usr/bin/env python3
"""
PathWeave - A Python Monte-Carlo Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from pathweave.renderer import Renderer, RenderSettings
from pathweave.scene_parser import SceneParseError, load_scene
from pathweave.scenes import SCENES, build_scene
from pathweave.logging_config import setup_logging

logger = logging.getLogger("pathweave.cli")


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        description='PathWeave - A Python Monte-Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene cornell --samples 64 --output cornell.png
  python main.py --scene smoke --width 300 --height 300 --threads 8 --seed 1
  python main.py --file scenes/box.yaml --output box.png
        '''
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--scene', type=str, default='cornell', choices=sorted(SCENES),
                        help='Built-in scene to render (default: cornell)')
    source.add_argument('--file', type=str, default=None,
                        help='Scene description file (JSON or YAML)')

    parser.add_argument('--width', type=int, default=None, help='Image width (default: 200)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 200)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max bounce depth (default: 50)')
    parser.add_argument('--threads', type=int, default=None, help='Number of worker threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Root seed for a reproducible image')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: INFO)')
    return parser


def make_settings(args: argparse.Namespace, base: Optional[RenderSettings] = None) -> RenderSettings:
    """Merge command line overrides onto file settings (or the CLI defaults)."""
    if base is None:
        base = RenderSettings(width=200, height=200, samples_per_pixel=100, num_threads=0)

    def pick(value, fallback):
        return fallback if value is None else value

    return RenderSettings(
        width=pick(args.width, base.width),
        height=pick(args.height, base.height),
        samples_per_pixel=pick(args.samples, base.samples_per_pixel),
        max_depth=pick(args.depth, base.max_depth),
        num_threads=pick(args.threads, base.num_threads),
        seed=pick(args.seed, base.seed),
        background_color=base.background_color,
        t_min=base.t_min,
        share_bvh=base.share_bvh,
        gamma=base.gamma
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        if args.file:
            scene, file_camera, file_settings = load_scene(args.file)
            settings = make_settings(args, file_settings)
            camera = file_camera
        else:
            settings = make_settings(args)
            camera, scene = build_scene(args.scene, settings.width / settings.height)
    except SceneParseError as exc:
        logger.error("Could not load scene: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("Invalid settings: %s", exc)
        return 2

    print("=" * 60)
    print("PathWeave Path Tracer")
    print("=" * 60)
    print(f"Scene: {args.file or args.scene} ({len(scene)} objects)")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

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

    start_time = time.time()
    image = renderer.render(scene, camera)
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    renderer.save_image(image, str(output_path))
    print(f"Saved to: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
