"""
Drive the renderer over a timeline and collect validated frames.

    IDLE  -->  RUNNING  -->  COMPLETED
                       \\->  ABORTED   (frame failure or cancel())
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from shapegif import motion as motion_mod
from shapegif.exceptions import CaptureCancelledError, FrameEncodingError
from shapegif.frames import FrameStore, validate_png_bytes
from shapegif.render import Surface, render_shape
from shapegif.types import CaptureState, Frame, ParameterSet

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class FrameSequencer:
    """Renders one ParameterSet into a sealed FrameStore, exactly once."""

    def __init__(self, params: ParameterSet, antialias_factor: int = 4) -> None:
        self.params = params
        self.surface = Surface(params.canvas_width, params.canvas_height, antialias_factor)
        self._state = CaptureState.IDLE
        self._cancel = threading.Event()

    @property
    def state(self) -> CaptureState:
        return self._state

    def cancel(self) -> None:
        """Request an abort; honoured after the frame in progress finishes."""
        self._cancel.set()

    def timestamp_ms(self, index: int) -> float:
        return index * 1000.0 / self.params.fps

    def render_frame(self, index: int) -> Frame:
        """Render and validate frame *index* without touching the capture state."""
        p = self.params
        ts = self.timestamp_ms(index)
        progress = motion_mod.progress_at(ts, p.period_ms)
        frame_motion = motion_mod.apply(p.animation, progress).with_static_rotation(
            p.static_rotation_deg
        )
        self.surface.clear()
        try:
            render_shape(self.surface, p, frame_motion)
            data = self.surface.encode_png()
        except Exception as exc:
            raise FrameEncodingError(index, str(exc)) from exc
        validate_png_bytes(data, index)
        return Frame(index=index, timestamp_ms=ts, png_bytes=data, size=self.surface.size)

    def run(self, on_progress: Optional[ProgressCallback] = None) -> FrameStore:
        if self._state is not CaptureState.IDLE:
            raise RuntimeError(f"Sequencer already used (state={self._state.value}).")
        self._state = CaptureState.RUNNING
        total = self.params.frame_count
        store = FrameStore()
        logger.info(
            "Capturing %d frames: %s/%s at %d fps",
            total, self.params.shape.value, self.params.animation.value, self.params.fps,
        )
        try:
            for i in range(total):
                if self._cancel.is_set():
                    raise CaptureCancelledError(f"Capture cancelled after {i} frames.")
                frame = self.render_frame(i)
                store.add(frame)
                logger.debug("Frame %d: %d bytes", i, len(frame.png_bytes))
                if on_progress is not None:
                    on_progress(i + 1, total)
        except BaseException:
            self._state = CaptureState.ABORTED
            store.discard()
            raise
        # A cancel after the last frame still aborts.
        if self._cancel.is_set():
            self._state = CaptureState.ABORTED
            store.discard()
            raise CaptureCancelledError(f"Capture cancelled after {total} frames.")
        store.seal()
        self._state = CaptureState.COMPLETED
        logger.info("Captured %d frames", total)
        return store
