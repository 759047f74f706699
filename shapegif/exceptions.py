"""
Custom exception hierarchy for shapegif.

All shapegif exceptions inherit from ShapeGifError so callers can catch
the entire family with a single except clause.
"""

from __future__ import annotations

from pathlib import Path


class ShapeGifError(Exception):
    """Base exception for all shapegif errors."""


class InvalidParametersError(ShapeGifError, ValueError):
    """Raised when an animation configuration is malformed."""


class FrameEncodingError(ShapeGifError):
    """Raised when a single frame fails bitmap or signature validation."""

    def __init__(self, index: int, reason: str = "") -> None:
        message = f"Frame {index} failed validation"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.index = index
        self.reason = reason


class EncodeStageError(ShapeGifError):
    """Raised when an external encoder stage fails or times out."""

    def __init__(
        self,
        stage: str,
        exit_code: int | None,
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        if timed_out:
            message = f"Encoder stage {stage!r} timed out"
        elif exit_code is None:
            message = f"Encoder stage {stage!r} failed"
        else:
            message = f"Encoder stage {stage!r} exited with code {exit_code}"
        tail = stderr.strip().splitlines()[-5:]
        if tail:
            message += ":\n  " + "\n  ".join(tail)
        super().__init__(message)
        self.stage = stage
        self.exit_code = exit_code
        self.stderr = stderr
        self.timed_out = timed_out


class OutputValidationError(ShapeGifError):
    """Raised when the encoder claims success but its output is not a valid GIF."""

    def __init__(self, path: Path, problems: list[str]) -> None:
        super().__init__(
            f"Encoded output {path} failed validation: " + "; ".join(problems)
        )
        self.path = path
        self.problems = list(problems)


class CaptureCancelledError(ShapeGifError):
    """Raised when a capture or export is cancelled by the caller."""


class FrameStoreSealedError(ShapeGifError):
    """Raised when a sealed or discarded frame store is mutated."""


class EncoderNotFoundError(ShapeGifError):
    """Raised when no encoder executable can be located."""
