"""
Per-frame motion transforms.

Each AnimationKind is a closed-form function of cycle progress p in [0, 1).
Screen coordinates are used throughout: positive dy moves the shape down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable

from shapegif.types import AnimationKind


@dataclass(frozen=True)
class Motion:
    """Transform applied to a shape for one frame."""
    translation: tuple[float, float] = (0.0, 0.0)
    scale: tuple[float, float] = (1.0, 1.0)
    rotation_rad: float = 0.0
    opacity: float = 1.0

    def with_static_rotation(self, degrees: float) -> Motion:
        """Add a fixed rotation offset, in degrees."""
        return replace(self, rotation_rad=self.rotation_rad + math.radians(degrees))


IDENTITY = Motion()

BOUNCE_HEIGHT = 60.0
SWING_AMPLITUDE = 0.5


def _bounce(p: float) -> Motion:
    b = 2 * p if p < 0.5 else 1 - 2 * (p - 0.5)
    eased = 0.5 * (1 - math.cos(math.pi * b))
    dy = -BOUNCE_HEIGHT + 2 * BOUNCE_HEIGHT * eased
    squish = 1 + 0.2 * (1 - 2 * abs(0.5 - p))
    return Motion(translation=(0.0, dy), scale=(squish, 1 / squish))


def _pulse(p: float) -> Motion:
    wave = math.sin(2 * math.pi * p)
    s = 0.7 + 0.6 * wave
    return Motion(scale=(s, s), opacity=0.6 + 0.4 * abs(wave))


def _rotate(p: float) -> Motion:
    return Motion(rotation_rad=2 * math.pi * p)


def _spin(p: float) -> Motion:
    return Motion(rotation_rad=4 * math.pi * p)


def _swing(p: float) -> Motion:
    angle = SWING_AMPLITUDE * math.sin(2 * math.pi * p)
    return Motion(translation=(80 * math.sin(angle), 30 * math.cos(angle)))


def _fade(p: float) -> Motion:
    return Motion(opacity=0.1 + 0.9 * abs(math.sin(2 * math.pi * p)))


def _slide(p: float) -> Motion:
    return Motion(translation=(100 * math.sin(2 * math.pi * p), 0.0))


def _zoom(p: float) -> Motion:
    s = 0.5 + 1.0 * math.sin(2 * math.pi * p)
    return Motion(scale=(s, s))


_MOTIONS: dict[AnimationKind, Callable[[float], Motion]] = {
    AnimationKind.BOUNCE: _bounce,
    AnimationKind.PULSE: _pulse,
    AnimationKind.ROTATE: _rotate,
    AnimationKind.SWING: _swing,
    AnimationKind.FADE: _fade,
    AnimationKind.SLIDE: _slide,
    AnimationKind.ZOOM: _zoom,
    AnimationKind.SPIN: _spin,
}

_missing = set(AnimationKind) - set(_MOTIONS)
if _missing:
    raise RuntimeError(f"No motion registered for: {sorted(m.value for m in _missing)}")


def apply(kind: AnimationKind, progress: float) -> Motion:
    """Return the motion for *kind* at *progress* in [0, 1)."""
    if not 0.0 <= progress < 1.0:
        raise ValueError(f"progress must be in [0, 1), got {progress}.")
    return _MOTIONS[kind](progress)


def progress_at(timestamp_ms: float, period_ms: float) -> float:
    """Position within the animation cycle, in [0, 1)."""
    if period_ms <= 0:
        raise ValueError(f"period_ms must be positive, got {period_ms}.")
    progress = (timestamp_ms % period_ms) / period_ms
    # Float rounding can land exactly on 1.0 for timestamps just below a period.
    return 0.0 if progress >= 1.0 else progress
