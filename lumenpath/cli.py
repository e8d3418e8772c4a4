"""
Command line entry point for rendering the built-in scenes.
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .bvh import BVHError
from .config import ConfigError, RenderJob, load_job
from .image_io import save_image
from .logging_config import setup_logging
from .renderer import Renderer, RenderSettings
from .scenes import SCENES, build_scene

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lumenpath',
        description='lumenpath - a Monte Carlo path tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  lumenpath --scene cornell --samples 200 --output cornell.ppm
  lumenpath --scene random --width 640 --height 360 --output random.png
  lumenpath --config jobs/final.yaml --threads 8
        '''
    )

    parser.add_argument('--config', type=str, help='YAML or JSON job file')
    parser.add_argument('--width', type=int, help='Image width (default: 800)')
    parser.add_argument('--height', type=int, help='Image height (default: 600)')
    parser.add_argument('--samples', type=int, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, help='Max bounce depth (default: 50)')
    parser.add_argument('--threads', type=int, help='Number of threads (0=auto)')
    parser.add_argument('--output', type=str, help='Output filename (.ppm or any Pillow format)')
    parser.add_argument('--scene', type=str, choices=sorted(SCENES), help='Scene to render')
    parser.add_argument('--texture', type=str, help='Image for the globe in two-spheres/final')
    parser.add_argument('--log-level', type=str, default='INFO', help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=Path, help='Also log to this file')
    return parser


def resolve_job(args: argparse.Namespace) -> RenderJob:
    """Merge the optional job file with command line overrides."""
    job = load_job(args.config) if args.config else RenderJob(settings=RenderSettings())
    s = job.settings

    settings = RenderSettings(
        width=args.width if args.width is not None else s.width,
        height=args.height if args.height is not None else s.height,
        samples_per_pixel=args.samples if args.samples is not None else s.samples_per_pixel,
        max_depth=args.depth if args.depth is not None else s.max_depth,
        num_threads=args.threads if args.threads is not None else s.num_threads,
    )
    return RenderJob(
        settings=settings,
        scene=args.scene or job.scene,
        output=args.output or job.output,
        texture=args.texture or job.texture,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        job = resolve_job(args)
    except (ConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    settings = job.settings
    print("=" * 60)
    print("lumenpath")
    print("=" * 60)
    print(f"  Scene: {job.scene}")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

    try:
        scene = build_scene(job.scene, settings.aspect_ratio, image_path=job.texture)
    except (BVHError, FileNotFoundError) as e:
        logger.error("Scene construction failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    renderer = Renderer(settings)
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
    image = renderer.render(scene.world, scene.camera)
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    output_path = Path(job.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_image(image, output_path)
    print(f"Saved to: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
