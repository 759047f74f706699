"""
Tests for ParameterSet validation and the Frame data type.
"""

from __future__ import annotations

import io

import pytest
from PIL import Image

from shapegif.exceptions import InvalidParametersError
from shapegif.types import (
    AnimationKind,
    Frame,
    ParameterSet,
    ShapeKind,
    parse_color,
)


class TestParseColor:
    def test_hex_long(self):
        assert parse_color("#ff3b30") == (255, 59, 48)

    def test_hex_short(self):
        assert parse_color("#f00") == (255, 0, 0)

    def test_triple(self):
        assert parse_color([0, 128, 255]) == (0, 128, 255)

    @pytest.mark.parametrize("bad", ["#zzzzzz", "notacolour", (0, 0), (0, 0, 256), (0.5, 0, 0)])
    def test_rejects_garbage(self, bad):
        with pytest.raises(InvalidParametersError):
            parse_color(bad)


class TestParameterSet:
    def test_defaults_are_valid(self):
        p = ParameterSet()
        assert p.shape is ShapeKind.CIRCLE
        assert p.animation is AnimationKind.BOUNCE
        assert p.canvas_size == (300, 200)

    def test_frame_count(self):
        assert ParameterSet(fps=15, duration_sec=2.0).frame_count == 30
        assert ParameterSet(fps=10, duration_sec=0.25).frame_count == 2

    def test_frame_count_zero_rejected(self):
        with pytest.raises(InvalidParametersError):
            ParameterSet(fps=1, duration_sec=0.2)

    @pytest.mark.parametrize("field,value", [
        ("size_px", 19),
        ("size_px", 81),
        ("stroke_width", 21),
        ("stroke_width", -1),
        ("static_rotation_deg", 361),
        ("period_ms", 99),
        ("period_ms", 10_001),
        ("fps", 0),
        ("fps", 61),
        ("duration_sec", 0),
        ("duration_sec", 60.5),
        ("canvas_width", 8),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(InvalidParametersError):
            ParameterSet(**{field: value})

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            ParameterSet(size_px=5)

    def test_outline_needs_stroke(self):
        with pytest.raises(InvalidParametersError):
            ParameterSet(filled=False, stroke_width=0)
        assert ParameterSet(filled=False, stroke_width=2).stroke_width == 2

    def test_fill_only_allowed(self):
        assert ParameterSet(filled=True, stroke_width=0).stroke_width == 0

    def test_bool_is_not_int(self):
        with pytest.raises(InvalidParametersError):
            ParameterSet(size_px=True)

    def test_replace_revalidates(self):
        p = ParameterSet()
        assert p.replace(size_px=60).size_px == 60
        with pytest.raises(InvalidParametersError):
            p.replace(size_px=100)

    def test_frozen(self):
        p = ParameterSet()
        with pytest.raises(AttributeError):
            p.size_px = 50  # type: ignore[misc]

    def test_from_mapping(self):
        p = ParameterSet.from_mapping({
            "shape": "Star-4", "animation": "spin",
            "fill_color": "#0000ff", "stroke_color": "#00ff00",
        })
        assert p.shape is ShapeKind.STAR_4
        assert p.animation is AnimationKind.SPIN
        assert p.fill_color == (0, 0, 255)
        assert p.stroke_color == (0, 255, 0)

    def test_hex_colors_normalised_on_construction(self):
        p = ParameterSet(fill_color="#ff0000", stroke_color="#00f")
        assert p.fill_color == (255, 0, 0)
        assert p.stroke_color == (0, 0, 255)
        assert p.to_mapping()["stroke_color"] == "#0000ff"

    def test_list_color_stored_as_tuple(self):
        p = ParameterSet(fill_color=[255, 0, 0])  # type: ignore[arg-type]
        assert p.fill_color == (255, 0, 0)
        assert isinstance(p.fill_color, tuple)
        assert hash(p) == hash(ParameterSet(fill_color=(255, 0, 0)))

    def test_bad_color_rejected_on_construction(self):
        with pytest.raises(InvalidParametersError):
            ParameterSet(fill_color="not-a-colour")

    def test_from_mapping_unknown_shape(self):
        with pytest.raises(InvalidParametersError, match="Unknown shape"):
            ParameterSet.from_mapping({"shape": "hexagram"})

    def test_from_mapping_unknown_key(self):
        with pytest.raises(InvalidParametersError, match="colour"):
            ParameterSet.from_mapping({"colour": "#fff"})

    def test_mapping_roundtrip(self):
        p = ParameterSet(shape=ShapeKind.GEAR, animation=AnimationKind.FADE, fill_color=(1, 2, 3))
        data = p.to_mapping()
        assert data["shape"] == "gear"
        assert data["fill_color"] == "#010203"
        assert ParameterSet.from_mapping(data) == p

    def test_catalog_sizes(self):
        assert len(ShapeKind) == 40
        assert len(AnimationKind) == 8


class TestFrame:
    def test_to_image(self):
        buf = io.BytesIO()
        Image.new("RGBA", (4, 3), (10, 20, 30, 255)).save(buf, format="PNG")
        frame = Frame(index=0, timestamp_ms=0.0, png_bytes=buf.getvalue(), size=(4, 3))
        img = frame.to_image()
        assert img.mode == "RGBA"
        assert img.size == (4, 3)
        assert img.getpixel((0, 0)) == (10, 20, 30, 255)
