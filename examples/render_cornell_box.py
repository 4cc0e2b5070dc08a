#!/usr/bin/env python3
"""Render the Cornell box scene.

This script demonstrates end-to-end rendering of the built-in Cornell box
scene. It creates the scene, renders both passes over a thread pool and
saves a PNG.

Usage:
    python examples/render_cornell_box.py [options]

Options:
    --width WIDTH           Image width in pixels (default: 256)
    --height HEIGHT         Image height in pixels (default: 256)
    --sampling-depth DEPTH  Antialiasing level, 0 finest to 2 (default: 1)
    --workers WORKERS       Worker threads (default: CPU count)
    --output OUTPUT         Output file path (default: cornell_box.png)
    --quiet                 Suppress progress output

Example:
    python examples/render_cornell_box.py --width 128 --height 128 --sampling-depth 2
"""

from __future__ import annotations

import argparse
import logging
import sys

from arrt.cli import configure_logging, render_to_file
from arrt.core.renderer import RenderSettings
from arrt.scene.cornell_box import create_cornell_box_scene


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=256, help="Image width in pixels (default: 256)")
    parser.add_argument("--height", type=int, default=256, help="Image height in pixels (default: 256)")
    parser.add_argument(
        "--sampling-depth",
        type=int,
        choices=(0, 1, 2),
        default=1,
        help="Antialiasing level (default: 1)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    configure_logging(quiet=args.quiet)

    try:
        if args.workers is not None:
            settings = RenderSettings(sampling_depth=args.sampling_depth, workers=args.workers)
        else:
            settings = RenderSettings(sampling_depth=args.sampling_depth)
        scene = create_cornell_box_scene(width=args.width, height=args.height)
        output_file = render_to_file(scene, args.output, settings, quiet=args.quiet)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.getLogger(__name__).info("Saved to: %s", output_file.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
