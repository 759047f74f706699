"""
Shape geometry catalog.

Every ShapeKind maps to one builder that returns a ShapePath: an ordered
tuple of sub-paths centred on the origin (screen coordinates, y grows
downward) and scaled by the requested size in pixels.

    ShapeKind  -->  [builder]  -->  ShapePath  -->  render.Surface.draw()

Curves (ellipses, arcs, quadratic and cubic Bezier segments) are flattened
into polylines with fixed segment counts so the same inputs always produce
the same vertices.  Regular polygons and stars list their vertices
clockwise on screen, starting from the top.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from shapegif.types import ShapeKind

Point = tuple[float, float]

CURVE_SEGMENTS = 72     # segments for a full ellipse
BEZIER_SEGMENTS = 16    # segments per Bezier curve


@dataclass(frozen=True)
class SubPath:
    """A single polyline; closed sub-paths can be filled."""
    points: tuple[Point, ...]
    closed: bool = True


@dataclass(frozen=True)
class ShapePath:
    """All sub-paths making up one shape."""
    subpaths: tuple[SubPath, ...]

    @property
    def has_closed(self) -> bool:
        return any(sp.closed for sp in self.subpaths)

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (x_min, y_min, x_max, y_max) over every vertex."""
        xs = [x for sp in self.subpaths for x, _ in sp.points]
        ys = [y for sp in self.subpaths for _, y in sp.points]
        return (min(xs), min(ys), max(xs), max(ys))


# ---------------------------------------------------------------------------
# Primitive helpers
# ---------------------------------------------------------------------------

def _closed(*points: Point) -> SubPath:
    return SubPath(points=tuple(points), closed=True)


def _open(*points: Point) -> SubPath:
    return SubPath(points=tuple(points), closed=False)


def _rect(width: float, height: float, cx: float = 0.0, cy: float = 0.0) -> SubPath:
    hw, hh = width / 2, height / 2
    return _closed(
        (cx - hw, cy - hh), (cx + hw, cy - hh), (cx + hw, cy + hh), (cx - hw, cy + hh),
    )


def _arc_points(
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    start: float = 0.0,
    end: float = 2 * math.pi,
) -> list[Point]:
    """Points along an elliptical arc, clockwise on screen from *start* to *end*."""
    sweep = end - start
    full = math.isclose(abs(sweep), 2 * math.pi)
    n = max(4, int(math.ceil(CURVE_SEGMENTS * abs(sweep) / (2 * math.pi))))
    count = n if full else n + 1
    return [
        (cx + rx * math.cos(start + sweep * i / n),
         cy + ry * math.sin(start + sweep * i / n))
        for i in range(count)
    ]


def _ellipse(cx: float, cy: float, rx: float, ry: float) -> SubPath:
    # Start at the top so closed curves follow the polygon convention.
    return _closed(*_arc_points(cx, cy, rx, ry, -math.pi / 2, 3 * math.pi / 2))


def _quad(p0: Point, ctrl: Point, p1: Point) -> list[Point]:
    """Quadratic Bezier from p0 to p1, excluding p0."""
    out: list[Point] = []
    for i in range(1, BEZIER_SEGMENTS + 1):
        t = i / BEZIER_SEGMENTS
        u = 1 - t
        out.append((
            u * u * p0[0] + 2 * u * t * ctrl[0] + t * t * p1[0],
            u * u * p0[1] + 2 * u * t * ctrl[1] + t * t * p1[1],
        ))
    return out


def _cubic(p0: Point, c1: Point, c2: Point, p1: Point) -> list[Point]:
    """Cubic Bezier from p0 to p1, excluding p0."""
    out: list[Point] = []
    for i in range(1, BEZIER_SEGMENTS + 1):
        t = i / BEZIER_SEGMENTS
        u = 1 - t
        out.append((
            u ** 3 * p0[0] + 3 * u * u * t * c1[0] + 3 * u * t * t * c2[0] + t ** 3 * p1[0],
            u ** 3 * p0[1] + 3 * u * u * t * c1[1] + 3 * u * t * t * c2[1] + t ** 3 * p1[1],
        ))
    return out


def _radial(n_points: int, radii: Sequence[float]) -> SubPath:
    """Vertices at equal angles, clockwise from the top, cycling through *radii*."""
    pts = []
    for i in range(n_points):
        angle = -math.pi / 2 + 2 * math.pi * i / n_points
        r = radii[i % len(radii)]
        pts.append((r * math.cos(angle), r * math.sin(angle)))
    return _closed(*pts)


def regular_polygon(sides: int, radius: float) -> SubPath:
    """Regular polygon inscribed in *radius*, clockwise from the top vertex."""
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}.")
    return _radial(sides, [radius])


def star_polygon(spikes: int, outer: float, inner: float) -> SubPath:
    """Star with *spikes* points, clockwise from the top spike."""
    return _radial(spikes * 2, [outer, inner])


def _recentered(subpaths: Sequence[SubPath]) -> ShapePath:
    """Shift sub-paths so their bounding box is centred on the origin."""
    raw = ShapePath(tuple(subpaths))
    x0, y0, x1, y1 = raw.bounds()
    dx, dy = (x0 + x1) / 2, (y0 + y1) / 2
    return ShapePath(tuple(
        SubPath(tuple((x - dx, y - dy) for x, y in sp.points), sp.closed)
        for sp in subpaths
    ))


# ---------------------------------------------------------------------------
# Basic shapes
# ---------------------------------------------------------------------------

def _circle(s: float) -> ShapePath:
    return ShapePath((_ellipse(0, 0, s / 2, s / 2),))


def _square(s: float) -> ShapePath:
    return ShapePath((_rect(s, s),))


def _rectangle(s: float) -> ShapePath:
    return ShapePath((_rect(s * 1.5, s),))


def _triangle(s: float) -> ShapePath:
    h = s * math.sqrt(3) / 2
    return ShapePath((_closed((0, -h / 2), (s / 2, h / 2), (-s / 2, h / 2)),))


def _diamond(s: float) -> ShapePath:
    return ShapePath((_closed((0, -s / 2), (s / 2, 0), (0, s / 2), (-s / 2, 0)),))


def _pentagon(s: float) -> ShapePath:
    return ShapePath((regular_polygon(5, s / 2),))


def _hexagon(s: float) -> ShapePath:
    return ShapePath((regular_polygon(6, s / 2),))


def _octagon(s: float) -> ShapePath:
    return ShapePath((regular_polygon(8, s / 2),))


# ---------------------------------------------------------------------------
# Arrows
# ---------------------------------------------------------------------------

def _arrow_right(s: float) -> ShapePath:
    w, h = s, s * 0.6
    return ShapePath((_closed(
        (-w / 2, -h / 4), (w / 4, -h / 4), (w / 4, -h / 2), (w / 2, 0),
        (w / 4, h / 2), (w / 4, h / 4), (-w / 2, h / 4),
    ),))


def _arrow_left(s: float) -> ShapePath:
    w, h = s, s * 0.6
    return ShapePath((_closed(
        (w / 2, h / 4), (-w / 4, h / 4), (-w / 4, h / 2), (-w / 2, 0),
        (-w / 4, -h / 2), (-w / 4, -h / 4), (w / 2, -h / 4),
    ),))


def _arrow_up(s: float) -> ShapePath:
    w, h = s * 0.6, s
    return ShapePath((_closed(
        (0, -h / 2), (w / 2, -h / 4), (w / 4, -h / 4), (w / 4, h / 2),
        (-w / 4, h / 2), (-w / 4, -h / 4), (-w / 2, -h / 4),
    ),))


def _arrow_down(s: float) -> ShapePath:
    w, h = s * 0.6, s
    return ShapePath((_closed(
        (-w / 4, -h / 2), (w / 4, -h / 2), (w / 4, h / 4), (w / 2, h / 4),
        (0, h / 2), (-w / 2, h / 4), (-w / 4, h / 4),
    ),))


def _arrow_double(s: float) -> ShapePath:
    w, h = s, s * 0.4
    return ShapePath((_closed(
        (-w / 2, 0), (-w / 4, -h / 2), (-w / 4, -h / 4), (w / 4, -h / 4),
        (w / 4, -h / 2), (w / 2, 0), (w / 4, h / 2), (w / 4, h / 4),
        (-w / 4, h / 4), (-w / 4, h / 2),
    ),))


def _arrow_curved(s: float) -> ShapePath:
    start, tip = (-s / 2, 0.0), (s / 3, 0.0)
    shaft = [start, *_quad(start, (0, -s / 3), tip), (s / 4, -s / 4)]
    return _recentered((_open(*shaft), _open(tip, (s / 4, s / 4))))


def _arrow_block(s: float) -> ShapePath:
    w, h = s, s * 0.6
    return _recentered((_closed(
        (-w / 3, -h / 4), (w / 6, -h / 4), (w / 6, -h / 2), (w / 2, 0),
        (w / 6, h / 2), (w / 6, h / 4), (-w / 3, h / 4),
    ),))


def _arrow_chevron(s: float) -> ShapePath:
    return _recentered((_open((-s / 3, -s / 3), (s / 3, 0), (-s / 3, s / 3)),))


# ---------------------------------------------------------------------------
# Flowchart glyphs
# ---------------------------------------------------------------------------

def _process(s: float) -> ShapePath:
    return ShapePath((_rect(s * 1.2, s * 0.8),))


def _document(s: float) -> ShapePath:
    w, h = s, s * 1.2
    right_low = (w / 2, h / 3)
    mid = (0.0, h / 3)
    pts = [(-w / 2, -h / 2), (w / 2, -h / 2), right_low]
    pts += _quad(right_low, (w / 4, h / 2), mid)
    pts += _quad(mid, (-w / 4, h / 2), (-w / 2, h / 3))
    return _recentered((_closed(*pts),))


def _database(s: float) -> ShapePath:
    w, h = s, s * 1.2
    eh = h * 0.2
    top_y, bottom_y = -h / 2 + eh / 2, h / 2 - eh / 2
    return ShapePath((
        _ellipse(0, bottom_y, w / 2, eh / 2),
        _closed((-w / 2, top_y), (w / 2, top_y), (w / 2, bottom_y), (-w / 2, bottom_y)),
        _ellipse(0, top_y, w / 2, eh / 2),
    ))


def _cloud(s: float) -> ShapePath:
    r = s / 6
    return _recentered((
        _ellipse(-r * 1.5, 0, r * 1.5, r * 1.5),
        _ellipse(r * 1.5, 0, r * 1.5, r * 1.5),
        _ellipse(-r, -r, r, r),
        _ellipse(r, -r, r, r),
        _ellipse(0, 0, r * 2, r * 2),
    ))


def _cylinder(s: float) -> ShapePath:
    w, h = s, s * 1.2
    eh = h * 0.15
    return _recentered((
        _ellipse(0, h / 2, w / 2, eh),
        _closed((-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)),
        _ellipse(0, -h / 2, w / 2, eh),
    ))


# ---------------------------------------------------------------------------
# Callouts
# ---------------------------------------------------------------------------

def _callout_round(s: float) -> ShapePath:
    r = s / 2
    return _recentered((
        _closed((-r / 3, r / 3), (0, r / 2), (-r / 2, r)),
        _ellipse(0, -s / 6, r * 0.8, r * 0.8),
    ))


def _callout_square(s: float) -> ShapePath:
    w, h = s * 0.8, s * 0.6
    base_y = h / 2 - s / 6
    return _recentered((
        _rect(w, h, 0, -s / 6),
        _closed((-w / 6, base_y), (w / 6, base_y), (0, s / 2)),
    ))


def _callout_cloud(s: float) -> ShapePath:
    r = s / 8
    cy = -s / 6
    return _recentered((
        _ellipse(-r * 1.2, cy, r * 1.2, r * 1.2),
        _ellipse(r * 1.2, cy, r * 1.2, r * 1.2),
        _ellipse(-r / 2, -s / 3, r * 0.8, r * 0.8),
        _ellipse(r / 2, -s / 3, r * 0.8, r * 0.8),
        _ellipse(0, cy, r * 2, r * 2),
        _ellipse(-r, r, r * 0.4, r * 0.4),
        _ellipse(-r / 2, r * 1.5, r * 0.2, r * 0.2),
    ))


def _banner(s: float) -> ShapePath:
    w, h = s * 1.2, s * 0.6
    return _recentered((_closed(
        (-w / 2, -h / 2), (w / 3, -h / 2), (w / 2, 0), (w / 3, h / 2), (-w / 2, h / 2),
    ),))


def _ribbon(s: float) -> ShapePath:
    w, h = s * 1.4, s * 0.5
    return ShapePath((_closed(
        (-w / 2, -h / 2), (w / 2, -h / 2), (w / 3, 0),
        (w / 2, h / 2), (-w / 2, h / 2), (-w / 3, 0),
    ),))


# ---------------------------------------------------------------------------
# Special shapes
# ---------------------------------------------------------------------------

def _star(s: float) -> ShapePath:
    return ShapePath((star_polygon(5, s / 2, s / 2 * 0.4),))


def _star4(s: float) -> ShapePath:
    return ShapePath((star_polygon(4, s / 2, s / 4),))


def _star6(s: float) -> ShapePath:
    r = s / 2
    k = r * math.sqrt(3) / 2
    return ShapePath((
        _closed((0, -r), (k, r / 2), (-k, r / 2)),
        _closed((0, r), (-k, -r / 2), (k, -r / 2)),
    ))


def _heart(s: float) -> ShapePath:
    k = s / 40
    segments = [
        ((0, 5), (0, 2), (-4, -2), (-8, 2)),
        ((-8, 2), (-12, 6), (-12, 10), (-8, 14)),
        ((-8, 14), (-4, 18), (0, 22), (0, 22)),
        ((0, 22), (0, 22), (4, 18), (8, 14)),
        ((8, 14), (12, 10), (12, 6), (8, 2)),
        ((8, 2), (4, -2), (0, 2), (0, 5)),
    ]
    pts: list[Point] = [(0.0, 5 * k)]
    for p0, c1, c2, p1 in segments:
        pts += _cubic(
            (p0[0] * k, p0[1] * k), (c1[0] * k, c1[1] * k),
            (c2[0] * k, c2[1] * k), (p1[0] * k, p1[1] * k),
        )
    # Drop the closing point; it coincides with the start.
    return _recentered((_closed(*pts[:-1]),))


def _cross(s: float) -> ShapePath:
    t, l = s * 0.1, s / 2
    return ShapePath((_closed(
        (-t, -l), (t, -l), (t, -t), (l, -t), (l, t), (t, t),
        (t, l), (-t, l), (-t, t), (-l, t), (-l, -t), (-t, -t),
    ),))


def _line(s: float) -> ShapePath:
    return ShapePath((_open((-s / 2, 0), (s / 2, 0)),))


def _lightning(s: float) -> ShapePath:
    return _recentered((_closed(
        (-s / 4, -s / 2), (s / 6, -s / 2), (-s / 6, -s / 6), (s / 4, -s / 6),
        (-s / 8, s / 6), (s / 8, s / 6), (s / 4, s / 2), (-s / 6, s / 2),
        (s / 6, s / 6), (-s / 4, s / 6),
    ),))


def _gear(s: float) -> ShapePath:
    outer, inner = s / 2, s / 3
    return ShapePath((
        star_polygon(8, outer, inner),
        _ellipse(0, 0, inner / 2, inner / 2),
    ))


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def _parallelogram(s: float) -> ShapePath:
    w, h = s * 1.2, s * 0.8
    skew = w * 0.2
    return ShapePath((_closed(
        (-w / 2 + skew, -h / 2), (w / 2 + skew, -h / 2),
        (w / 2 - skew, h / 2), (-w / 2 - skew, h / 2),
    ),))


def _trapezoid(s: float) -> ShapePath:
    top, bottom, h = s * 0.6, s * 1.2, s * 0.8
    return ShapePath((_closed(
        (-top / 2, -h / 2), (top / 2, -h / 2), (bottom / 2, h / 2), (-bottom / 2, h / 2),
    ),))


def _ellipse_shape(s: float) -> ShapePath:
    return ShapePath((_ellipse(0, 0, s / 2, s / 3),))


def _arc(s: float) -> ShapePath:
    return _recentered((_open(*_arc_points(0, 0, s / 2, s / 2, 0, math.pi)),))


def _sector(s: float) -> ShapePath:
    rim = _arc_points(0, 0, s / 2, s / 2, -math.pi / 4, math.pi / 4)
    return _recentered((_closed((0.0, 0.0), *rim),))


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

SHAPE_BUILDERS: dict[ShapeKind, Callable[[float], ShapePath]] = {
    ShapeKind.CIRCLE: _circle,
    ShapeKind.SQUARE: _square,
    ShapeKind.RECTANGLE: _rectangle,
    ShapeKind.TRIANGLE: _triangle,
    ShapeKind.DIAMOND: _diamond,
    ShapeKind.PENTAGON: _pentagon,
    ShapeKind.HEXAGON: _hexagon,
    ShapeKind.OCTAGON: _octagon,
    ShapeKind.ARROW_RIGHT: _arrow_right,
    ShapeKind.ARROW_LEFT: _arrow_left,
    ShapeKind.ARROW_UP: _arrow_up,
    ShapeKind.ARROW_DOWN: _arrow_down,
    ShapeKind.ARROW_DOUBLE: _arrow_double,
    ShapeKind.ARROW_CURVED: _arrow_curved,
    ShapeKind.ARROW_BLOCK: _arrow_block,
    ShapeKind.ARROW_CHEVRON: _arrow_chevron,
    ShapeKind.PROCESS: _process,
    ShapeKind.DECISION: _diamond,
    ShapeKind.DOCUMENT: _document,
    ShapeKind.DATABASE: _database,
    ShapeKind.CLOUD: _cloud,
    ShapeKind.CYLINDER: _cylinder,
    ShapeKind.CALLOUT_ROUND: _callout_round,
    ShapeKind.CALLOUT_SQUARE: _callout_square,
    ShapeKind.CALLOUT_CLOUD: _callout_cloud,
    ShapeKind.BANNER: _banner,
    ShapeKind.RIBBON: _ribbon,
    ShapeKind.STAR: _star,
    ShapeKind.STAR_4: _star4,
    ShapeKind.STAR_6: _star6,
    ShapeKind.HEART: _heart,
    ShapeKind.CROSS: _cross,
    ShapeKind.LINE: _line,
    ShapeKind.LIGHTNING: _lightning,
    ShapeKind.GEAR: _gear,
    ShapeKind.PARALLELOGRAM: _parallelogram,
    ShapeKind.TRAPEZOID: _trapezoid,
    ShapeKind.ELLIPSE: _ellipse_shape,
    ShapeKind.ARC: _arc,
    ShapeKind.SECTOR: _sector,
}

_missing = set(ShapeKind) - set(SHAPE_BUILDERS)
if _missing:
    raise RuntimeError(f"No builder registered for: {sorted(m.value for m in _missing)}")


def build_path(shape: ShapeKind, size: float) -> ShapePath:
    """Return the geometry for *shape* scaled to *size* pixels."""
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}.")
    return SHAPE_BUILDERS[shape](float(size))
