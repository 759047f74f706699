"""
CLI commands listing the built-in catalogs.

Usage:
    shapegif shapes
    shapegif animations
"""

from __future__ import annotations

import argparse

from ..types import AnimationKind, ShapeKind

_SHAPE_GROUPS = [
    ("Basic", ShapeKind.CIRCLE, ShapeKind.OCTAGON),
    ("Arrows", ShapeKind.ARROW_RIGHT, ShapeKind.ARROW_CHEVRON),
    ("Flowchart", ShapeKind.PROCESS, ShapeKind.CYLINDER),
    ("Callouts", ShapeKind.CALLOUT_ROUND, ShapeKind.RIBBON),
    ("Special", ShapeKind.STAR, ShapeKind.GEAR),
    ("Geometry", ShapeKind.PARALLELOGRAM, ShapeKind.SECTOR),
]

_ANIMATION_NOTES = {
    AnimationKind.BOUNCE: "vertical bounce with squash and stretch",
    AnimationKind.PULSE: "grow and shrink with breathing opacity",
    AnimationKind.ROTATE: "one full turn per cycle",
    AnimationKind.SWING: "pendulum arc",
    AnimationKind.FADE: "opacity fades in and out",
    AnimationKind.SLIDE: "horizontal back-and-forth",
    AnimationKind.ZOOM: "large scale oscillation",
    AnimationKind.SPIN: "two full turns per cycle",
}


def format_shape_table() -> str:
    members = list(ShapeKind)
    lines = []
    for title, first, last in _SHAPE_GROUPS:
        group = members[members.index(first):members.index(last) + 1]
        lines.append(f"  {title + ':':<11}" + ", ".join(s.value for s in group))
    return "\n".join(lines) + "\n"


def format_animation_table() -> str:
    width = max(len(a.value) for a in AnimationKind)
    return "".join(
        f"  {a.value:<{width}}   {_ANIMATION_NOTES[a]}\n" for a in AnimationKind
    )


def cmd_shapes(args: argparse.Namespace) -> int:
    print(f"{len(ShapeKind)} shapes:")
    print(format_shape_table(), end="")
    return 0


def cmd_animations(args: argparse.Namespace) -> int:
    print(f"{len(AnimationKind)} animations:")
    print(format_animation_table(), end="")
    return 0


def build_catalog_parsers(
    subparsers: argparse._SubParsersAction,
    parents: list[argparse.ArgumentParser] | None = None,
) -> None:
    """Register the ``shapes`` and ``animations`` subcommands."""
    p = subparsers.add_parser("shapes", parents=parents or [], help="List available shapes")
    p.set_defaults(func=cmd_shapes)
    p = subparsers.add_parser(
        "animations", parents=parents or [], help="List available animations"
    )
    p.set_defaults(func=cmd_animations)
