"""Command-line entry point.

Usage:
    arrt SCENE [options]
    arrt --cornell-box [options]

Options:
    --sampling-depth N  Antialiasing level: 0 finest, 2 none (default: 0)
    --workers N         Worker threads (default: CPU count)
    --max-depth N       Reflection/refraction depth limit (default: 5)
    --output OUTPUT     Output PNG path (default: out.png)
    --width/--height    Image size for the Cornell box demo (default: 256)
    --verbose           Log debug output
    --quiet             Only log warnings and errors

Example:
    arrt scenes/spheres.yaml --sampling-depth 1 --output spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import yaml

from arrt.core.integrator import MAX_DEPTH
from arrt.core.renderer import Renderer, RenderSettings
from arrt.preview.export import save_png
from arrt.scene.cornell_box import create_cornell_box_scene
from arrt.scene.scene import Scene

logger = logging.getLogger("arrt")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arrt",
        description="Render a YAML scene with a Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "scene",
        nargs="?",
        help="Path to a YAML scene file",
    )
    parser.add_argument(
        "--cornell-box",
        action="store_true",
        help="Render the built-in Cornell box instead of a scene file",
    )
    parser.add_argument(
        "--sampling-depth",
        type=int,
        choices=(0, 1, 2),
        default=0,
        help="Antialiasing level, 0 is finest and 2 disables subdivision (default: 0)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads (default: CPU count)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=MAX_DEPTH,
        help=f"Reflection/refraction recursion limit (default: {MAX_DEPTH})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.png",
        help="Output file path (default: out.png)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=256,
        help="Cornell box image width in pixels (default: 256)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=256,
        help="Cornell box image height in pixels (default: 256)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress progress output"
    )
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def render_to_file(
    scene: Scene,
    output_path: str,
    settings: RenderSettings,
    quiet: bool = False,
) -> Path:
    """Render ``scene`` and save it as a PNG.

    Args:
        scene: The scene to render.
        output_path: Output file path.
        settings: Renderer options.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    renderer = Renderer(scene, settings)
    start_time = time.time()

    def progress_callback(pass_name: str, done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(
                f"\r  {pass_name}: {done}/{total} rows ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                file=sys.stderr,
                flush=True,
            )

    framebuffer = renderer.render(callback=progress_callback)
    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    output_file = Path(output_path)
    save_png(framebuffer, output_file)
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.scene is None and not args.cornell_box:
        parser.error("a scene file or --cornell-box is required")
    if args.scene is not None and args.cornell_box:
        parser.error("give either a scene file or --cornell-box, not both")

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        settings_kwargs = {
            "sampling_depth": args.sampling_depth,
            "max_depth": args.max_depth,
        }
        if args.workers is not None:
            settings_kwargs["workers"] = args.workers
        settings = RenderSettings(**settings_kwargs)

        if args.cornell_box:
            scene = create_cornell_box_scene(width=args.width, height=args.height)
        else:
            scene = Scene.from_file(args.scene)

        output_file = render_to_file(scene, args.output, settings, quiet=args.quiet)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("Saved to: %s", output_file.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
