"""
shapegif -- Looping shape animations to animated GIF.

Renders a fixed catalog of shapes under parametric motion, collects the
frames into a validated sequence, and encodes them into a GIF through a
two-stage external palette pipeline.
"""

__version__ = "0.1.0"

from shapegif.encoder import EncoderConfig, EncoderPipeline, export_png_frames
from shapegif.exceptions import (
    CaptureCancelledError,
    EncodeStageError,
    FrameEncodingError,
    InvalidParametersError,
    OutputValidationError,
    ShapeGifError,
)
from shapegif.frames import FrameStore
from shapegif.sequencer import FrameSequencer
from shapegif.types import (
    AnimationKind,
    ExportResult,
    Frame,
    ParameterSet,
    ShapeKind,
)

__all__ = [
    "AnimationKind",
    "CaptureCancelledError",
    "EncodeStageError",
    "EncoderConfig",
    "EncoderPipeline",
    "ExportResult",
    "Frame",
    "FrameEncodingError",
    "FrameSequencer",
    "FrameStore",
    "InvalidParametersError",
    "OutputValidationError",
    "ParameterSet",
    "ShapeGifError",
    "ShapeKind",
    "export_png_frames",
]
