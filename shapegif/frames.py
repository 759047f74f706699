"""
Frame storage, ordering, and validation.

    FrameSequencer  -->  [FrameStore]  -->  export_all()  -->  frame_0000.png ...

A FrameStore is a strictly contiguous index -> Frame mapping.  Once sealed
it is immutable; once discarded it rejects any further use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Sequence, Tuple

from shapegif.exceptions import FrameEncodingError, FrameStoreSealedError
from shapegif.types import Frame

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
# Smallest well-formed PNG: signature + IHDR + one IDAT + IEND chunks.
MIN_FRAME_BYTES = 8 + 25 + 12 + 12 + 12 + 6
FILENAME_PREFIX = "frame_"
MIN_INDEX_DIGITS = 4


def validate_png_bytes(data: bytes, index: int) -> None:
    """Raise FrameEncodingError unless *data* looks like a complete PNG."""
    if not data:
        raise FrameEncodingError(index, "empty bitmap")
    if data[:8] != PNG_SIGNATURE:
        raise FrameEncodingError(index, "missing PNG signature")
    if len(data) < MIN_FRAME_BYTES:
        raise FrameEncodingError(
            index, f"{len(data)} bytes is below the {MIN_FRAME_BYTES}-byte minimum"
        )


@dataclass
class FrameValidation:
    valid: bool
    total_frames: int
    missing_indices: List[int] = field(default_factory=list)
    corrupt_indices: List[int] = field(default_factory=list)
    dimension_mismatches: List[Tuple[int, Tuple[int, int]]] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


def validate_frame_sequence(
    frames: Sequence[Frame],
    expected_size: tuple[int, int] | None = None,
) -> FrameValidation:
    """Check contiguity, uniform dimensions and PNG signatures of *frames*."""
    result = FrameValidation(valid=True, total_frames=len(frames))
    if not frames:
        result.valid = False
        result.messages.append("Frame list is empty.")
        return result
    if expected_size is None:
        expected_size = frames[0].size
    for position, frame in enumerate(frames):
        if frame.index != position:
            result.missing_indices.append(position)
            result.messages.append(
                f"Position {position}: holds frame {frame.index}, sequence is not contiguous."
            )
        try:
            validate_png_bytes(frame.png_bytes, frame.index)
        except FrameEncodingError as exc:
            result.corrupt_indices.append(frame.index)
            result.messages.append(str(exc))
        if frame.size != expected_size:
            result.dimension_mismatches.append((frame.index, frame.size))
            result.messages.append(
                f"Frame {frame.index}: size {frame.size} != expected {expected_size}."
            )
    if result.missing_indices or result.corrupt_indices or result.dimension_mismatches:
        result.valid = False
    return result


class FrameStore:
    """Ordered, contiguous collection of validated frames."""

    def __init__(self) -> None:
        self._frames: list[Frame] = []
        self._sealed = False
        self._discarded = False

    # -- state -------------------------------------------------------------

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def discarded(self) -> bool:
        return self._discarded

    def _check_usable(self) -> None:
        if self._discarded:
            raise FrameStoreSealedError("Frame store has been discarded.")

    def _check_mutable(self) -> None:
        self._check_usable()
        if self._sealed:
            raise FrameStoreSealedError("Frame store is sealed.")

    def seal(self) -> None:
        self._check_usable()
        self._sealed = True
        logger.debug("Sealed frame store with %d frames", len(self._frames))

    def discard(self) -> None:
        """Drop every frame; the store cannot be used afterwards."""
        dropped = len(self._frames)
        self._frames.clear()
        self._discarded = True
        logger.debug("Discarded frame store (%d frames dropped)", dropped)

    # -- mutation ----------------------------------------------------------

    def add(self, frame: Frame) -> None:
        self._check_mutable()
        expected = len(self._frames)
        if frame.index != expected:
            raise ValueError(
                f"Frame index {frame.index} is out of order; expected {expected}."
            )
        self._frames.append(frame)

    # -- access ------------------------------------------------------------

    def count(self) -> int:
        return len(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def get(self, index: int) -> Frame:
        self._check_usable()
        if not 0 <= index < len(self._frames):
            raise IndexError(f"Frame {index} not in store of {len(self._frames)} frames.")
        return self._frames[index]

    def __iter__(self) -> Iterator[Frame]:
        self._check_usable()
        return iter(list(self._frames))

    def for_each_ordered(self, fn: Callable[[Frame], None]) -> None:
        for frame in self:
            fn(frame)

    @property
    def frame_size(self) -> tuple[int, int] | None:
        return self._frames[0].size if self._frames else None

    def validate(self) -> FrameValidation:
        self._check_usable()
        return validate_frame_sequence(self._frames)

    # -- naming / export ---------------------------------------------------

    @property
    def index_digits(self) -> int:
        last = max(len(self._frames) - 1, 0)
        return max(MIN_INDEX_DIGITS, len(str(last)))

    def filename_for(self, index: int) -> str:
        return f"{FILENAME_PREFIX}{index:0{self.index_digits}d}.png"

    @property
    def filename_pattern(self) -> str:
        """printf-style pattern matching filename_for(), e.g. frame_%04d.png."""
        return f"{FILENAME_PREFIX}%0{self.index_digits}d.png"

    def export_all(self, directory: Path | str) -> list[Path]:
        """Write every frame into *directory* and re-check each file's signature."""
        self._check_usable()
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for frame in self:
            path = directory / self.filename_for(frame.index)
            path.write_bytes(frame.png_bytes)
            written.append(path)
        for frame, path in zip(self._frames, written):
            with path.open("rb") as fh:
                head = fh.read(len(PNG_SIGNATURE))
            if head != PNG_SIGNATURE:
                raise FrameEncodingError(frame.index, f"{path.name} was written corrupt")
        logger.info("Wrote %d frames to %s", len(written), directory)
        return written
