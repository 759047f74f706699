"""
Runtime configuration and external-tool discovery.

Locates the FFmpeg-compatible encoder used by the GIF pipeline and reads
or writes animation presets stored as YAML.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Any

import yaml

from shapegif.exceptions import EncoderNotFoundError, InvalidParametersError
from shapegif.types import ParameterSet

ENCODER_ENV_VAR = "SHAPEGIF_FFMPEG"

DEFAULTS: dict[str, Any] = {
    "shape": "circle",
    "animation": "bounce",
    "size_px": 40,
    "period_ms": 1000,
    "duration_sec": 3.0,
    "fps": 15,
    "fill_color": "#ff3b30",
    "stroke_color": "#cc2e24",
    "stroke_width": 4,
    "filled": True,
}


def default_parameters() -> ParameterSet:
    return ParameterSet.from_mapping(DEFAULTS)


def resolve_encoder(preferred: Path | str | None = None) -> Path:
    """Find the encoder: explicit path, then $SHAPEGIF_FFMPEG, then $PATH."""
    for candidate in (preferred, os.environ.get(ENCODER_ENV_VAR)):
        if not candidate:
            continue
        found = shutil.which(str(candidate))
        if found is None:
            raise EncoderNotFoundError(f"Encoder {str(candidate)!r} is not an executable.")
        return Path(found)
    path = shutil.which("ffmpeg")
    if path is None:
        raise EncoderNotFoundError(
            "ffmpeg not found on $PATH. Install FFmpeg or set "
            f"{ENCODER_ENV_VAR} to the executable."
        )
    return Path(path)


def load_parameters(path: Path | str) -> ParameterSet:
    """Read a YAML preset; missing keys take the values in DEFAULTS."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidParametersError(f"{path}: malformed YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidParametersError(f"{path}: expected a mapping at the top level.")
    return ParameterSet.from_mapping({**DEFAULTS, **data})


def dump_parameters(params: ParameterSet, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(params.to_mapping(), sort_keys=False), encoding="utf-8")
    return path
