"""
CLI command for rendering a shape animation into a GIF or PNG frames.

Usage:
    shapegif render --shape star --animation spin --fps 20 -o star.gif
    shapegif render --config preset.yaml --format png -o frames/
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

from ..config import DEFAULTS, load_parameters, resolve_encoder
from ..encoder import EncoderConfig, EncoderPipeline, GifQuality, export_png_frames
from ..exceptions import InvalidParametersError, ShapeGifError
from ..output import DEFAULT_ROOT_NAME, OutputLayout, format_size
from ..sequencer import FrameSequencer
from ..types import AnimationKind, ParameterSet, ShapeKind

logger = logging.getLogger(__name__)

# CLI flag -> ParameterSet field
_FLAG_FIELDS = {
    "shape": "shape",
    "animation": "animation",
    "fill": "fill_color",
    "stroke": "stroke_color",
    "stroke_width": "stroke_width",
    "size": "size_px",
    "rotation": "static_rotation_deg",
    "period": "period_ms",
    "duration": "duration_sec",
    "fps": "fps",
    "width": "canvas_width",
    "height": "canvas_height",
}


def params_from_args(args: argparse.Namespace) -> ParameterSet:
    """Merge preset file (or defaults) with explicit command-line flags."""
    if args.config:
        base: dict[str, Any] = load_parameters(args.config).to_mapping()
    else:
        base = dict(DEFAULTS)
    for flag, field_name in _FLAG_FIELDS.items():
        value = getattr(args, flag)
        if value is not None:
            base[field_name] = value
    if args.outline:
        base["filled"] = False
    return ParameterSet.from_mapping(base)


def _export(args: argparse.Namespace, params: ParameterSet) -> int:
    sequencer = FrameSequencer(params)
    with tqdm(total=params.frame_count, desc="Rendering", unit="frame",
              file=sys.stderr, dynamic_ncols=True, disable=args.quiet) as bar:
        store = sequencer.run(on_progress=lambda done, total: bar.update(1))

    layout = None if args.output else OutputLayout(Path.cwd() / DEFAULT_ROOT_NAME)

    if args.format == "png":
        target = Path(args.output) if args.output else layout.frames_dir(params)
        result = export_png_frames(store, target)
    else:
        encoder_config = EncoderConfig(
            executable=resolve_encoder(args.ffmpeg),
            quality=GifQuality(args.quality),
            stage_timeout_s=args.timeout,
        )
        target = Path(args.output) if args.output else layout.gif_path(params)
        if not args.quiet:
            print(f"Encoding {params.frame_count} frames ...", file=sys.stderr)
        result = EncoderPipeline(encoder_config).encode(store, target, fps=params.fps)

    print(f"Done! {result.frame_count} frames -> {result.path} ({format_size(result.size_bytes)})")
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Main handler for ``shapegif render``."""
    try:
        params = params_from_args(args)
    except InvalidParametersError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"Error: cannot read preset: {exc}", file=sys.stderr)
        return 2

    try:
        return _export(args, params)
    except ShapeGifError as exc:
        logger.debug("Export failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def build_render_parser(
    subparsers: argparse._SubParsersAction,
    parents: list[argparse.ArgumentParser] | None = None,
) -> None:
    """Register the ``render`` subcommand and its arguments."""
    p = subparsers.add_parser(
        "render",
        parents=parents or [],
        help="Render a shape animation",
        description="Render a looping shape animation to an animated GIF or PNG frames.",
    )
    p.add_argument(
        "--config", default=None,
        help="YAML preset file; command-line flags override its values",
    )
    p.add_argument(
        "--shape", choices=[s.value for s in ShapeKind], default=None,
        help=f"Shape to draw (default: {DEFAULTS['shape']})",
    )
    p.add_argument(
        "--animation", choices=[a.value for a in AnimationKind], default=None,
        help=f"Motion to apply (default: {DEFAULTS['animation']})",
    )
    p.add_argument("--fill", default=None, help="Fill colour, e.g. #ff3b30")
    p.add_argument("--stroke", default=None, help="Stroke colour, e.g. #cc2e24")
    p.add_argument(
        "--stroke-width", type=int, default=None,
        help="Stroke width in pixels, 0 = fill only (default: 4)",
    )
    p.add_argument(
        "--outline", action="store_true",
        help="Draw the outline only, without filling",
    )
    p.add_argument("--size", type=int, default=None, help="Shape size in pixels (20-80)")
    p.add_argument("--rotation", type=int, default=None, help="Static rotation in degrees")
    p.add_argument("--period", type=int, default=None, help="Animation cycle length in ms")
    p.add_argument("--duration", type=float, default=None, help="Clip length in seconds")
    p.add_argument("--fps", type=int, default=None, help="Frames per second (default: 15)")
    p.add_argument("--width", type=int, default=None, help="Canvas width (default: 300)")
    p.add_argument("--height", type=int, default=None, help="Canvas height (default: 200)")
    p.add_argument(
        "--format", choices=["gif", "png"], default="gif",
        help="Output format (default: gif)",
    )
    p.add_argument(
        "--quality", choices=[q.value for q in GifQuality], default="medium",
        help="GIF palette quality (default: medium)",
    )
    p.add_argument("--ffmpeg", default=None, help="Path to the ffmpeg executable")
    p.add_argument(
        "--timeout", type=float, default=120.0,
        help="Timeout per encoder stage in seconds (default: 120)",
    )
    p.add_argument(
        "-o", "--output", default=None,
        help=f"Output GIF path or PNG directory (default: ./{DEFAULT_ROOT_NAME}/...)",
    )
    p.add_argument("-q", "--quiet", action="store_true", help="Hide the progress bar")
    p.set_defaults(func=cmd_render)
