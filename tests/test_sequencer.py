"""
Tests for the frame sequencer state machine.
"""

from __future__ import annotations

from unittest import mock

import pytest

from shapegif.exceptions import CaptureCancelledError, FrameEncodingError
from shapegif.frames import PNG_SIGNATURE, FrameStore
from shapegif.sequencer import FrameSequencer
from shapegif.types import AnimationKind, CaptureState, ParameterSet


@pytest.fixture
def params() -> ParameterSet:
    return ParameterSet(fps=15, duration_sec=2.0, canvas_width=100, canvas_height=80)


class TestRun:
    def test_thirty_frames(self, params):
        seq = FrameSequencer(params, antialias_factor=1)
        assert seq.state is CaptureState.IDLE
        store = seq.run()
        assert seq.state is CaptureState.COMPLETED
        assert store.sealed
        assert store.count() == 30
        assert [f.index for f in store] == list(range(30))
        assert store.validate().valid

    def test_timestamps(self, params):
        store = FrameSequencer(params, antialias_factor=1).run()
        assert store.get(0).timestamp_ms == 0.0
        assert store.get(15).timestamp_ms == pytest.approx(1000.0)
        for frame in store:
            assert frame.png_bytes[:8] == PNG_SIGNATURE
            assert frame.size == (100, 80)

    def test_progress_callback(self, small_params):
        calls = []
        FrameSequencer(small_params, antialias_factor=1).run(
            on_progress=lambda done, total: calls.append((done, total))
        )
        assert calls == [(i, 6) for i in range(1, 7)]

    def test_runs_once(self, small_params):
        seq = FrameSequencer(small_params, antialias_factor=1)
        seq.run()
        with pytest.raises(RuntimeError):
            seq.run()

    def test_deterministic(self, small_params):
        a = FrameSequencer(small_params).run()
        b = FrameSequencer(small_params).run()
        assert [f.png_bytes for f in a] == [f.png_bytes for f in b]

    def test_frames_change_over_time(self, small_params):
        store = FrameSequencer(small_params, antialias_factor=1).run()
        assert store.get(0).png_bytes != store.get(1).png_bytes

    def test_render_frame_leaves_state(self, small_params):
        seq = FrameSequencer(small_params.replace(animation=AnimationKind.FADE))
        frame = seq.render_frame(3)
        assert frame.index == 3
        assert seq.state is CaptureState.IDLE


class TestAbort:
    def test_cancel_after_ten_frames(self, params):
        seq = FrameSequencer(params, antialias_factor=1)
        stores = []

        def on_progress(done, total):
            if done == 10:
                seq.cancel()

        with mock.patch("shapegif.sequencer.FrameStore") as store_cls:
            real = FrameStore()
            store_cls.return_value = real
            stores.append(real)
            with mock.patch.object(seq, "render_frame", wraps=seq.render_frame) as render:
                with pytest.raises(CaptureCancelledError):
                    seq.run(on_progress=on_progress)

        assert render.call_count == 10
        assert seq.state is CaptureState.ABORTED
        assert stores[0].discarded
        assert stores[0].count() == 0

    def test_encoding_failure_aborts(self, params):
        seq = FrameSequencer(params, antialias_factor=1)
        real_encode = seq.surface.encode_png
        counter = {"n": 0}

        def flaky():
            counter["n"] += 1
            if counter["n"] == 5:
                raise OSError("disk full")
            return real_encode()

        with mock.patch.object(seq.surface, "encode_png", side_effect=flaky):
            with pytest.raises(FrameEncodingError) as exc_info:
                seq.run()
        assert exc_info.value.index == 4
        assert seq.state is CaptureState.ABORTED

    def test_invalid_bitmap_aborts(self, small_params):
        seq = FrameSequencer(small_params, antialias_factor=1)
        with mock.patch.object(seq.surface, "encode_png", return_value=b"not a png"):
            with pytest.raises(FrameEncodingError) as exc_info:
                seq.run()
        assert exc_info.value.index == 0
        assert seq.state is CaptureState.ABORTED

    def test_unexpected_draw_error_is_typed(self, small_params):
        seq = FrameSequencer(small_params, antialias_factor=1)
        boom = TypeError("color must be int")
        with mock.patch("shapegif.sequencer.render_shape", side_effect=boom):
            with pytest.raises(FrameEncodingError) as exc_info:
                seq.run()
        assert exc_info.value.index == 0
        assert exc_info.value.__cause__ is boom
        assert seq.state is CaptureState.ABORTED

    def test_hex_colors_render(self, small_params):
        p = small_params.replace(fill_color="#ff0000", stroke_color="#0000ff")
        store = FrameSequencer(p, antialias_factor=1).run()
        assert store.count() == 6
        assert store.validate().valid
