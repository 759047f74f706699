"""
Tests for the drawing surface and the fill / stroke policy.
"""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image
from scipy import ndimage

from shapegif.motion import IDENTITY, Motion
from shapegif.render import (
    ALPHA_FLOOR,
    RenderStyle,
    Surface,
    render_shape,
)
from shapegif.shapes import build_path
from shapegif.types import ParameterSet, ShapeKind

RED = (255, 0, 0)
BLUE = (0, 0, 255)
MIN_REGION = 100


def _render(params: ParameterSet, motion: Motion = IDENTITY) -> Image.Image:
    surface = Surface(params.canvas_width, params.canvas_height)
    render_shape(surface, params, motion)
    return surface.snapshot()


def _alpha(img: Image.Image) -> np.ndarray:
    return np.asarray(img)[..., 3]


def color_mask(image: Image.Image, color, tolerance: int = 40) -> np.ndarray:
    """Opaque pixels within *tolerance* of *color* on every channel."""
    pixels = np.asarray(image.convert("RGBA"), dtype=np.int16)
    close = np.all(np.abs(pixels[..., :3] - np.array(color, dtype=np.int16)) <= tolerance, axis=-1)
    return close & (pixels[..., 3] >= 128)


def largest_region(mask: np.ndarray) -> int:
    """Pixel count of the largest 4-connected component of *mask*."""
    labels, count = ndimage.label(mask)
    if count == 0:
        return 0
    return int(np.bincount(labels.ravel())[1:].max())


class TestFillStroke:
    def test_filled_circle_shows_fill_and_stroke(self):
        params = ParameterSet(
            shape=ShapeKind.CIRCLE, fill_color=RED, stroke_color=BLUE,
            filled=True, stroke_width=4, size_px=40,
        )
        img = _render(params)
        assert largest_region(color_mask(img, RED)) >= MIN_REGION
        assert largest_region(color_mask(img, BLUE)) >= MIN_REGION

    def test_fill_only_has_no_stroke(self):
        params = ParameterSet(fill_color=RED, stroke_color=BLUE, filled=True, stroke_width=0)
        img = _render(params)
        assert largest_region(color_mask(img, RED)) >= MIN_REGION
        assert not color_mask(img, BLUE).any()

    def test_outline_has_no_fill(self):
        params = ParameterSet(
            shape=ShapeKind.SQUARE, fill_color=RED, stroke_color=BLUE,
            filled=False, stroke_width=3,
        )
        img = _render(params)
        assert not color_mask(img, RED).any()
        assert largest_region(color_mask(img, BLUE)) >= MIN_REGION
        # The interior stays transparent.
        assert _alpha(img)[100, 150] == 0

    def test_open_path_uses_fill_colour_when_only_filling(self):
        params = ParameterSet(
            shape=ShapeKind.LINE, fill_color=RED, stroke_color=BLUE,
            filled=True, stroke_width=0,
        )
        img = _render(params)
        assert color_mask(img, RED).sum() >= MIN_REGION
        assert not color_mask(img, BLUE).any()

    def test_open_path_pen(self):
        style = RenderStyle(RED, BLUE, filled=True, stroke_width=0)
        assert style.open_path_pen() == (RED, 4)
        style = RenderStyle(RED, BLUE, filled=False, stroke_width=7)
        assert style.open_path_pen() == (BLUE, 7)

    @pytest.mark.parametrize("shape", list(ShapeKind))
    def test_every_shape_paints_something(self, shape):
        img = _render(ParameterSet(shape=shape, canvas_width=120, canvas_height=120))
        assert (_alpha(img) > 0).sum() > 20


class TestSurface:
    def test_starts_transparent(self):
        surface = Surface(20, 10)
        assert surface.size == (20, 10)
        assert not _alpha(surface.snapshot()).any()

    def test_clear(self):
        surface = Surface(100, 100)
        render_shape(surface, ParameterSet(canvas_width=100, canvas_height=100), IDENTITY)
        assert _alpha(surface.snapshot()).any()
        surface.clear()
        assert not np.asarray(surface.snapshot()).any()

    def test_alpha_floor(self):
        params = ParameterSet(fill_color=RED, stroke_width=0)
        img = _render(params, Motion(opacity=0.03))
        alpha = _alpha(img)
        assert not ((alpha > 0) & (alpha < ALPHA_FLOOR)).any()
        # Cleared pixels are fully zeroed, colour included.
        pixels = np.asarray(img)
        assert not pixels[alpha == 0].any()

    def test_opacity_scales_alpha(self):
        params = ParameterSet(fill_color=RED, stroke_width=0)
        solid = _alpha(_render(params)).max()
        faded = _alpha(_render(params, Motion(opacity=0.5))).max()
        assert solid == 255
        assert faded == pytest.approx(128, abs=2)

    def test_translation_moves_shape(self):
        params = ParameterSet(stroke_width=0)
        img = _render(params, Motion(translation=(60.0, 0.0)))
        ys, xs = np.nonzero(_alpha(img))
        assert xs.mean() == pytest.approx(150 + 60, abs=1.5)
        assert ys.mean() == pytest.approx(100, abs=1.5)

    def test_scale_grows_shape(self):
        params = ParameterSet(stroke_width=0)
        base = (_alpha(_render(params)) > 0).sum()
        big = (_alpha(_render(params, Motion(scale=(2.0, 2.0)))) > 0).sum()
        assert big == pytest.approx(base * 4, rel=0.1)

    def test_encode_png(self):
        surface = Surface(50, 40)
        surface.draw(
            build_path(ShapeKind.TRIANGLE, 30),
            RenderStyle(RED, BLUE, True, 2),
            IDENTITY,
            (25, 20),
        )
        data = surface.encode_png()
        assert data[:8] == b"\x89PNG\r\n\x1a\n"
        img = Image.open(io.BytesIO(data))
        assert img.size == (50, 40)
        assert img.mode == "RGBA"

    def test_deterministic(self):
        params = ParameterSet(shape=ShapeKind.HEART)
        motion = Motion(translation=(3.5, -7.0), scale=(1.1, 0.9), rotation_rad=0.4, opacity=0.7)
        assert _render(params, motion).tobytes() == _render(params, motion).tobytes()

    def test_rejects_bad_dimensions(self):
        with pytest.raises(ValueError):
            Surface(0, 10)
        with pytest.raises(ValueError):
            Surface(10, 10, antialias_factor=0)



class TestRegions:
    def test_largest_region(self):
        mask = np.zeros((10, 10), dtype=bool)
        mask[0:2, 0:2] = True
        mask[5:9, 5:8] = True
        assert largest_region(mask) == 12

    def test_diagonal_pixels_are_separate(self):
        mask = np.eye(4, dtype=bool)
        assert largest_region(mask) == 1

    def test_empty(self):
        assert largest_region(np.zeros((3, 3), dtype=bool)) == 0
