"""
Painting shapes onto an RGBA drawing surface.

    ShapePath + Motion  -->  [supersampled layer]  -->  downsample  -->  Surface

Each draw call paints onto a transparent layer `antialias_factor` times
larger than the surface, reduces it with a box filter for smooth edges,
scales its alpha by the motion opacity and composites it into the buffer.
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw

from shapegif.motion import Motion
from shapegif.shapes import ShapePath, build_path
from shapegif.types import RGB, ParameterSet

ALPHA_FLOOR = 10             # alpha below this is forced to fully transparent
DEFAULT_STROKE_WIDTH = 4     # width for open paths when only filling


@dataclass(frozen=True)
class RenderStyle:
    fill_color: RGB
    stroke_color: RGB
    filled: bool
    stroke_width: int

    @classmethod
    def from_params(cls, params: ParameterSet) -> RenderStyle:
        return cls(
            fill_color=params.fill_color,
            stroke_color=params.stroke_color,
            filled=params.filled,
            stroke_width=params.stroke_width,
        )

    @property
    def strokes(self) -> bool:
        return not self.filled or self.stroke_width > 0

    def open_path_pen(self) -> tuple[RGB, int]:
        """Colour and width used for open sub-paths, which cannot be filled."""
        if self.strokes:
            return self.stroke_color, self.stroke_width
        return self.fill_color, DEFAULT_STROKE_WIDTH


class Surface:
    """Single-writer RGBA drawing buffer reused across frames."""

    def __init__(self, width: int, height: int, antialias_factor: int = 4) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface dimensions must be positive, got {width}x{height}.")
        if antialias_factor < 1:
            raise ValueError(f"antialias_factor must be >= 1, got {antialias_factor}.")
        self.width = width
        self.height = height
        self.antialias_factor = antialias_factor
        self._image = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def clear(self) -> None:
        self._image.paste((0, 0, 0, 0), (0, 0, self.width, self.height))

    def draw(
        self,
        path: ShapePath,
        style: RenderStyle,
        motion: Motion,
        center: tuple[float, float],
    ) -> None:
        """Transform *path* by *motion* and composite it at *center*."""
        f = self.antialias_factor
        sx, sy = motion.scale
        cos_r, sin_r = math.cos(motion.rotation_rad), math.sin(motion.rotation_rad)
        ox = center[0] + motion.translation[0]
        oy = center[1] + motion.translation[1]

        def to_layer(x: float, y: float) -> tuple[float, float]:
            x, y = x * sx, y * sy
            xr = x * cos_r - y * sin_r
            yr = x * sin_r + y * cos_r
            return ((ox + xr) * f, (oy + yr) * f)

        layer = Image.new("RGBA", (self.width * f, self.height * f), (0, 0, 0, 0))
        pen = ImageDraw.Draw(layer)
        fill_rgba = (*style.fill_color, 255)
        stroke_rgba = (*style.stroke_color, 255)
        stroke_px = max(1, round(style.stroke_width * f))
        open_color, open_width = style.open_path_pen()
        open_rgba = (*open_color, 255)
        open_px = max(1, round(open_width * f))

        transformed = [
            ([to_layer(x, y) for x, y in sp.points], sp.closed) for sp in path.subpaths
        ]

        # Fill every closed sub-path first so strokes always sit on top.
        if style.filled:
            for pts, closed in transformed:
                if closed and len(pts) >= 3:
                    pen.polygon(pts, fill=fill_rgba)

        for pts, closed in transformed:
            if len(pts) < 2:
                continue
            if closed:
                if not style.strokes:
                    continue
                # Repeat the first segment so the seam gets a rounded joint.
                pen.line(pts + pts[:2], fill=stroke_rgba, width=stroke_px, joint="curve")
            else:
                pen.line(pts, fill=open_rgba, width=open_px, joint="curve")

        if f > 1:
            layer = layer.resize((self.width, self.height), Image.Resampling.BOX)

        opacity = min(1.0, max(0.0, motion.opacity))
        if opacity < 1.0:
            alpha = layer.getchannel("A").point(lambda a: int(round(a * opacity)))
            layer.putalpha(alpha)

        self._image.alpha_composite(layer)

    def snapshot(self) -> Image.Image:
        """Copy of the buffer with faint pixels cleared to (0, 0, 0, 0)."""
        pixels = np.array(self._image, dtype=np.uint8)
        pixels[pixels[..., 3] < ALPHA_FLOOR] = 0
        return Image.fromarray(pixels)

    def encode_png(self) -> bytes:
        buf = io.BytesIO()
        self.snapshot().save(buf, format="PNG")
        return buf.getvalue()


def render_shape(surface: Surface, params: ParameterSet, motion: Motion) -> None:
    """Draw the configured shape at the centre of *surface*."""
    path = build_path(params.shape, params.size_px)
    center = (surface.width / 2, surface.height / 2)
    surface.draw(path, RenderStyle.from_params(params), motion, center)

