"""
Core data structures used throughout the animation pipeline.
"""

from __future__ import annotations

import dataclasses
import enum
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from PIL import Image, ImageColor

from shapegif.exceptions import InvalidParametersError

RGB = tuple[int, int, int]


class ShapeKind(enum.Enum):
    """The fixed catalog of drawable shapes."""
    # Basic shapes
    CIRCLE = "circle"
    SQUARE = "square"
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    DIAMOND = "diamond"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"
    # Arrows
    ARROW_RIGHT = "arrow-right"
    ARROW_LEFT = "arrow-left"
    ARROW_UP = "arrow-up"
    ARROW_DOWN = "arrow-down"
    ARROW_DOUBLE = "arrow-double"
    ARROW_CURVED = "arrow-curved"
    ARROW_BLOCK = "arrow-block"
    ARROW_CHEVRON = "arrow-chevron"
    # Flowchart glyphs
    PROCESS = "process"
    DECISION = "decision"
    DOCUMENT = "document"
    DATABASE = "database"
    CLOUD = "cloud"
    CYLINDER = "cylinder"
    # Callouts
    CALLOUT_ROUND = "callout-round"
    CALLOUT_SQUARE = "callout-square"
    CALLOUT_CLOUD = "callout-cloud"
    BANNER = "banner"
    RIBBON = "ribbon"
    # Special shapes
    STAR = "star"
    STAR_4 = "star-4"
    STAR_6 = "star-6"
    HEART = "heart"
    CROSS = "cross"
    LINE = "line"
    LIGHTNING = "lightning"
    GEAR = "gear"
    # Geometry
    PARALLELOGRAM = "parallelogram"
    TRAPEZOID = "trapezoid"
    ELLIPSE = "ellipse"
    ARC = "arc"
    SECTOR = "sector"


class AnimationKind(enum.Enum):
    """Supported motion functions."""
    BOUNCE = "bounce"
    PULSE = "pulse"
    ROTATE = "rotate"
    SWING = "swing"
    FADE = "fade"
    SLIDE = "slide"
    ZOOM = "zoom"
    SPIN = "spin"


class CaptureState(enum.Enum):
    """Lifecycle of a FrameSequencer."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class JobState(enum.Enum):
    """Lifecycle of a single GIF export."""
    CREATED = "created"
    FRAMES_WRITTEN = "frames_written"
    PALETTE_GENERATED = "palette_generated"
    ENCODED = "encoded"
    VALIDATED = "validated"
    DELIVERED = "delivered"
    FAILED = "failed"


# Parameter bounds (inclusive).
SIZE_RANGE = (20, 80)
STROKE_WIDTH_RANGE = (0, 20)
ROTATION_RANGE = (0, 360)
PERIOD_MS_RANGE = (100, 10_000)
FPS_RANGE = (1, 60)
MAX_DURATION_SEC = 60.0
CANVAS_RANGE = (16, 2048)


def parse_color(value: Any) -> RGB:
    """Coerce a hex string, colour name, or 3-sequence into an RGB triple."""
    if isinstance(value, str):
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError as exc:
            raise InvalidParametersError(f"Unrecognised colour {value!r}.") from exc
        return (rgb[0], rgb[1], rgb[2])
    try:
        r, g, b = value
    except (TypeError, ValueError) as exc:
        raise InvalidParametersError(
            f"Colour must be a hex string or an RGB triple, got {value!r}."
        ) from exc
    triple = (r, g, b)
    for channel in triple:
        if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
            raise InvalidParametersError(
                f"Colour channels must be integers in 0..255, got {value!r}."
            )
    return triple


def _parse_enum(enum_cls: type[enum.Enum], value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        known = ", ".join(m.value for m in enum_cls)
        raise InvalidParametersError(
            f"Unknown {label} {value!r}. Expected one of: {known}."
        ) from None


def _check_int(name: str, value: Any, bounds: tuple[int, int]) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParametersError(f"{name} must be an integer, got {value!r}.")
    lo, hi = bounds
    if not lo <= value <= hi:
        raise InvalidParametersError(f"{name} must be in {lo}..{hi}, got {value}.")


@dataclass(frozen=True)
class ParameterSet:
    """Validated, immutable animation configuration."""
    shape: ShapeKind = ShapeKind.CIRCLE
    animation: AnimationKind = AnimationKind.BOUNCE
    fill_color: RGB = (255, 59, 48)
    stroke_color: RGB = (204, 46, 36)
    filled: bool = True
    stroke_width: int = 4
    size_px: int = 40
    static_rotation_deg: int = 0
    period_ms: int = 1000
    duration_sec: float = 3.0
    fps: int = 15
    canvas_width: int = 300
    canvas_height: int = 200

    def __post_init__(self) -> None:
        if not isinstance(self.shape, ShapeKind):
            raise InvalidParametersError(f"shape must be a ShapeKind, got {self.shape!r}.")
        if not isinstance(self.animation, AnimationKind):
            raise InvalidParametersError(
                f"animation must be an AnimationKind, got {self.animation!r}."
            )
        object.__setattr__(self, "fill_color", parse_color(self.fill_color))
        object.__setattr__(self, "stroke_color", parse_color(self.stroke_color))
        if not isinstance(self.filled, bool):
            raise InvalidParametersError(f"filled must be a bool, got {self.filled!r}.")
        _check_int("stroke_width", self.stroke_width, STROKE_WIDTH_RANGE)
        if not self.filled and self.stroke_width == 0:
            raise InvalidParametersError(
                "stroke_width must be positive for outlined (unfilled) shapes."
            )
        _check_int("size_px", self.size_px, SIZE_RANGE)
        _check_int("static_rotation_deg", self.static_rotation_deg, ROTATION_RANGE)
        _check_int("period_ms", self.period_ms, PERIOD_MS_RANGE)
        _check_int("fps", self.fps, FPS_RANGE)
        _check_int("canvas_width", self.canvas_width, CANVAS_RANGE)
        _check_int("canvas_height", self.canvas_height, CANVAS_RANGE)
        if isinstance(self.duration_sec, bool) or not isinstance(self.duration_sec, (int, float)):
            raise InvalidParametersError(
                f"duration_sec must be a number, got {self.duration_sec!r}."
            )
        if not 0 < self.duration_sec <= MAX_DURATION_SEC:
            raise InvalidParametersError(
                f"duration_sec must be in (0, {MAX_DURATION_SEC:g}], got {self.duration_sec}."
            )
        if self.frame_count <= 0:
            raise InvalidParametersError(
                f"fps={self.fps} and duration_sec={self.duration_sec} yield no frames."
            )

    @property
    def frame_count(self) -> int:
        return round(self.fps * self.duration_sec)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    @property
    def frame_delay_ms(self) -> float:
        return 1000.0 / self.fps

    def replace(self, **changes: Any) -> ParameterSet:
        """Return a re-validated copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ParameterSet:
        """Build from plain values: enum names as strings, colours as hex."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidParametersError(f"Unknown parameter(s): {', '.join(unknown)}.")
        kwargs: dict[str, Any] = dict(data)
        if "shape" in kwargs:
            kwargs["shape"] = _parse_enum(ShapeKind, kwargs["shape"], "shape")
        if "animation" in kwargs:
            kwargs["animation"] = _parse_enum(AnimationKind, kwargs["animation"], "animation")
        for key in ("fill_color", "stroke_color"):
            if key in kwargs:
                kwargs[key] = parse_color(kwargs[key])
        return cls(**kwargs)

    def to_mapping(self) -> dict[str, Any]:
        """Inverse of from_mapping: enums as names, colours as hex strings."""
        data = dataclasses.asdict(self)
        data["shape"] = self.shape.value
        data["animation"] = self.animation.value
        data["fill_color"] = "#%02x%02x%02x" % self.fill_color
        data["stroke_color"] = "#%02x%02x%02x" % self.stroke_color
        return data


@dataclass(frozen=True)
class Frame:
    """One rendered, validated animation frame."""
    index: int                # 0-based sequence position
    timestamp_ms: float       # index * 1000 / fps
    png_bytes: bytes          # encoded RGBA bitmap
    size: tuple[int, int]     # (width, height)

    def to_image(self) -> Image.Image:
        img = Image.open(io.BytesIO(self.png_bytes))
        img.load()
        return img.convert("RGBA")


@dataclass(frozen=True)
class ExportResult:
    """An artifact handed back to the caller."""
    path: Path
    size_bytes: int
    frame_count: int
