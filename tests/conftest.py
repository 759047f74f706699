"""
Shared fixtures for the shapegif test suite.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Sequence

import pytest
from PIL import Image

from shapegif.encoder import ProcessResult
from shapegif.sequencer import FrameSequencer
from shapegif.types import ParameterSet


@pytest.fixture(scope="session")
def has_ffmpeg() -> bool:
    return shutil.which("ffmpeg") is not None


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory(prefix="shapegif_test_") as d:
        yield Path(d)


@pytest.fixture
def small_params() -> ParameterSet:
    """A cheap configuration: 6 frames on a small canvas."""
    return ParameterSet(fps=6, duration_sec=1.0, canvas_width=120, canvas_height=90)


@pytest.fixture
def sealed_store(small_params):
    return FrameSequencer(small_params, antialias_factor=1).run()


class FakeRunner:
    """ProcessRunner stand-in that produces real palette / GIF files with Pillow.

    ``fail_stage`` makes that stage exit non-zero; ``timeout_stage`` reports
    a timeout for it; ``gif_bytes`` replaces the encoded output verbatim.
    """

    def __init__(self, fail_stage=None, timeout_stage=None, gif_bytes=None):
        self.calls: list[list[str]] = []
        self.fail_stage = fail_stage
        self.timeout_stage = timeout_stage
        self.gif_bytes = gif_bytes
        self.killed = 0

    @staticmethod
    def _stage(args: Sequence[str]) -> str:
        return "palette" if "-vf" in args else "encode"

    def run(self, args, timeout_s):
        args = list(args)
        self.calls.append(args)
        stage = self._stage(args)
        if stage == self.timeout_stage:
            return ProcessResult(tuple(args), -9, "", "", timed_out=True)
        if stage == self.fail_stage:
            return ProcessResult(tuple(args), 1, "", "simulated failure\n")
        output = Path(args[-1])
        if stage == "palette":
            Image.new("RGB", (16, 16), (255, 0, 0)).save(output)
        elif self.gif_bytes is not None:
            output.write_bytes(self.gif_bytes)
        else:
            pattern = Path(args[args.index("-i") + 1])
            frames = sorted(pattern.parent.glob("frame_*.png"))
            images = [Image.open(p).convert("RGB") for p in frames]
            images[0].save(
                output, format="GIF", save_all=True, append_images=images[1:],
                duration=100, loop=0,
            )
        return ProcessResult(tuple(args), 0, "", "")

    def kill(self):
        self.killed += 1


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with custom failure modes."""
    return FakeRunner
