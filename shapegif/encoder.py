"""
Two-stage GIF encoding through an external FFmpeg-compatible tool.

    FrameStore --> frame_%04d.png --> [palettegen] --> palette.png
                                  \\-> [paletteuse] --> output.gif --> validate --> destination

Every export runs inside its own temporary work directory, which is
removed whether the job succeeds or fails.  The destination is written
only after the encoded file has passed validation, so a failed export
never leaves a partial GIF behind.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import subprocess
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence

from shapegif.exceptions import (
    CaptureCancelledError,
    EncodeStageError,
    OutputValidationError,
)
from shapegif.frames import FILENAME_PREFIX, FrameStore
from shapegif.types import ExportResult, JobState

logger = logging.getLogger(__name__)

GIF_SIGNATURES = (b"GIF89a", b"GIF87a")
GRAPHIC_CONTROL_MARKER = b"\x21\xf9"
GIF_HEADER_BYTES = 13           # signature + logical screen descriptor
GIF_TRAILER_BYTES = 1
GLOBAL_PALETTE_BYTES = 256 * 3
LOOP_EXTENSION_BYTES = 19


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class GifQuality(enum.Enum):
    """Palette size presets."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DitherMode(enum.Enum):
    """Dithering passed to the paletteuse filter."""
    BAYER = "bayer"
    SIERRA = "sierra2_4a"
    FLOYD_STEINBERG = "floyd_steinberg"
    NONE = "none"


QUALITY_COLORS: dict[GifQuality, int] = {
    GifQuality.LOW: 128,
    GifQuality.MEDIUM: 256,
    GifQuality.HIGH: 256,
}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class EncoderConfig:
    """Encoder executable, palette options and output sanity bounds.

    ``min_frame_bytes`` and ``max_bytes_per_pixel`` / ``frame_overhead_bytes``
    set the lower and upper file-size bounds used by :func:`validate_gif`.
    """
    executable: Path | str = "ffmpeg"
    quality: GifQuality = GifQuality.MEDIUM
    dither: DitherMode = DitherMode.BAYER
    bayer_scale: int = 5
    loop: int = 0                       # 0 = forever
    stage_timeout_s: float = 120.0
    min_frame_bytes: int = 16
    max_bytes_per_pixel: float = 1.5
    frame_overhead_bytes: int = 1024

    def __post_init__(self) -> None:
        if not 0 <= self.bayer_scale <= 5:
            raise ValueError(f"bayer_scale must be in 0..5, got {self.bayer_scale}.")
        if self.loop < -1:
            raise ValueError(f"loop must be >= -1, got {self.loop}.")
        if self.stage_timeout_s <= 0:
            raise ValueError(f"stage_timeout_s must be positive, got {self.stage_timeout_s}.")

    @property
    def max_colors(self) -> int:
        return QUALITY_COLORS[self.quality]


# ---------------------------------------------------------------------------
# Process execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProcessResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


class ProcessRunner(Protocol):
    """Anything able to run an argument vector with a timeout."""

    def run(self, args: Sequence[str], timeout_s: float) -> ProcessResult: ...

    def kill(self) -> None: ...


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class SubprocessRunner:
    """Runs one child process at a time with captured pipes.

    kill() is sticky: once called, any process started later is killed
    as soon as it is registered.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._cancelled = False

    def run(self, args: Sequence[str], timeout_s: float) -> ProcessResult:
        argv = tuple(str(a) for a in args)
        try:
            proc = subprocess.Popen(
                argv, stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            return ProcessResult(argv, 127, "", str(exc))
        except PermissionError as exc:
            return ProcessResult(argv, 126, "", str(exc))

        with self._lock:
            self._proc = proc
            if self._cancelled:
                proc.kill()
        timed_out = False
        try:
            try:
                out, err = proc.communicate(timeout=timeout_s)
            except subprocess.TimeoutExpired:
                timed_out = True
                proc.kill()
                out, err = proc.communicate()
        finally:
            with self._lock:
                self._proc = None
        return ProcessResult(argv, proc.returncode, _decode(out), _decode(err), timed_out)

    def kill(self) -> None:
        """Kill the in-flight process, if any; run() then returns its result."""
        with self._lock:
            self._cancelled = True
            proc = self._proc
        if proc is not None and proc.poll() is None:
            logger.debug("Killing encoder process %d", proc.pid)
            proc.kill()


# ---------------------------------------------------------------------------
# Command construction
# ---------------------------------------------------------------------------

class FfmpegCommandBuilder:
    """Builds the argument vectors for both encoder stages."""

    def __init__(self, config: EncoderConfig) -> None:
        self.cfg = config

    def _input(self, pattern: Path | str, fps: int) -> list[str]:
        return [
            str(self.cfg.executable), "-y", "-v", "error",
            "-framerate", str(fps),
            "-i", str(pattern),
        ]

    def palette_args(self, pattern: Path | str, fps: int, palette_file: Path) -> list[str]:
        return self._input(pattern, fps) + [
            "-vf", f"palettegen=max_colors={self.cfg.max_colors}:stats_mode=diff",
            str(palette_file),
        ]

    def paletteuse_filter(self) -> str:
        parts = [f"dither={self.cfg.dither.value}"]
        if self.cfg.dither is DitherMode.BAYER:
            parts.append(f"bayer_scale={self.cfg.bayer_scale}")
        parts.append("diff_mode=rectangle")
        return "paletteuse=" + ":".join(parts)

    def encode_args(
        self,
        pattern: Path | str,
        fps: int,
        palette_file: Path,
        output: Path,
    ) -> list[str]:
        return self._input(pattern, fps) + [
            "-i", str(palette_file),
            "-lavfi", self.paletteuse_filter(),
            "-loop", str(self.cfg.loop),
            str(output),
        ]


# ---------------------------------------------------------------------------
# Output validation
# ---------------------------------------------------------------------------

def gif_size_bounds(
    frame_count: int,
    width: int,
    height: int,
    config: EncoderConfig | None = None,
) -> tuple[int, int]:
    """Plausible (lower, upper) byte sizes for an encoded animation."""
    cfg = config or EncoderConfig()
    # The encoder may coalesce identical frames, so only one is guaranteed.
    lower = GIF_HEADER_BYTES + cfg.min_frame_bytes + GIF_TRAILER_BYTES
    per_frame = int(width * height * cfg.max_bytes_per_pixel) + cfg.frame_overhead_bytes
    upper = (GIF_HEADER_BYTES + GLOBAL_PALETTE_BYTES + LOOP_EXTENSION_BYTES
             + max(frame_count, 1) * per_frame + GIF_TRAILER_BYTES)
    return lower, upper


def gif_problems(
    data: bytes,
    frame_count: int,
    width: int,
    height: int,
    config: EncoderConfig | None = None,
) -> list[str]:
    """Return every reason *data* is not an acceptable animated GIF."""
    problems: list[str] = []
    lower, upper = gif_size_bounds(frame_count, width, height, config)
    if len(data) < lower:
        problems.append(f"{len(data)} bytes is below the {lower}-byte minimum")
    elif len(data) > upper:
        problems.append(f"{len(data)} bytes exceeds the {upper}-byte maximum")
    if data[:6] not in GIF_SIGNATURES:
        problems.append(f"bad signature {data[:6]!r}")
    if GRAPHIC_CONTROL_MARKER not in data[6:]:
        problems.append("no graphic control extension (21 F9) found")
    return problems


def validate_gif(
    path: Path,
    frame_count: int,
    width: int,
    height: int,
    config: EncoderConfig | None = None,
) -> None:
    """Raise OutputValidationError unless *path* holds a plausible GIF."""
    path = Path(path)
    if not path.is_file():
        raise OutputValidationError(path, ["output file was not created"])
    problems = gif_problems(path.read_bytes(), frame_count, width, height, config)
    if problems:
        raise OutputValidationError(path, problems)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@dataclass
class EncodeJob:
    """One export attempt and the temporary directory it owns."""
    work_dir: Path
    destination: Path
    state: JobState = JobState.CREATED
    history: list[JobState] = field(default_factory=lambda: [JobState.CREATED])

    @classmethod
    def create(cls, destination: Path | str) -> EncodeJob:
        work_dir = Path(tempfile.mkdtemp(prefix="shapegif_"))
        logger.debug("Created work directory %s", work_dir)
        return cls(work_dir=work_dir, destination=Path(destination))

    @property
    def palette_file(self) -> Path:
        return self.work_dir / "palette.png"

    @property
    def output_path(self) -> Path:
        return self.work_dir / "output.gif"

    def advance(self, state: JobState) -> None:
        self.state = state
        self.history.append(state)

    def cleanup(self) -> None:
        """Remove the work directory; failures are logged, not raised."""
        if not self.work_dir.exists():
            return
        try:
            shutil.rmtree(self.work_dir)
        except OSError as exc:
            logger.warning("Could not remove work directory %s: %s", self.work_dir, exc)


def _fps_of(store: FrameStore) -> int:
    if len(store) < 2:
        return 1
    step_ms = store.get(1).timestamp_ms - store.get(0).timestamp_ms
    return max(1, round(1000.0 / step_ms))


def _deliver(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = destination.with_name(f".{destination.name}.part")
    try:
        shutil.move(str(source), str(staging))
        os.replace(staging, destination)
    except OSError:
        staging.unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class EncoderPipeline:
    """Turn a sealed FrameStore into a validated GIF at a chosen path."""

    def __init__(
        self,
        config: EncoderConfig | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.config = config or EncoderConfig()
        self.runner: ProcessRunner = runner or SubprocessRunner()
        self.builder = FfmpegCommandBuilder(self.config)
        self.last_job: EncodeJob | None = None
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Stop before the next stage and kill a running one."""
        self._cancel.set()
        self.runner.kill()

    def _check_cancelled(self) -> None:
        if self._cancel.is_set():
            raise CaptureCancelledError("Encoding cancelled.")

    def _run_stage(self, stage: str, args: list[str]) -> None:
        self._check_cancelled()
        logger.debug("Encoder stage %s: %s", stage, " ".join(args))
        result = self.runner.run(args, self.config.stage_timeout_s)
        self._check_cancelled()
        if result.timed_out or result.returncode != 0:
            raise EncodeStageError(
                stage, result.returncode, result.stderr, timed_out=result.timed_out
            )

    def encode(
        self,
        store: FrameStore,
        destination: Path | str,
        fps: int | None = None,
    ) -> ExportResult:
        if store.discarded or not store.sealed:
            raise ValueError("Only a sealed frame store can be encoded.")
        if len(store) == 0:
            raise ValueError("Cannot encode an empty frame store.")
        destination = Path(destination)
        fps = fps or _fps_of(store)
        width, height = store.get(0).size
        frame_count = len(store)

        try:
            job = EncodeJob.create(destination)
        except OSError as exc:
            raise EncodeStageError("write", None, str(exc)) from exc
        self.last_job = job
        try:
            try:
                store.export_all(job.work_dir)
            except OSError as exc:
                raise EncodeStageError("write", None, str(exc)) from exc
            job.advance(JobState.FRAMES_WRITTEN)

            pattern = job.work_dir / store.filename_pattern
            self._run_stage("palette", self.builder.palette_args(pattern, fps, job.palette_file))
            if not job.palette_file.is_file():
                raise EncodeStageError("palette", 0, "palette file was not created")
            job.advance(JobState.PALETTE_GENERATED)

            self._run_stage(
                "encode",
                self.builder.encode_args(pattern, fps, job.palette_file, job.output_path),
            )
            job.advance(JobState.ENCODED)

            validate_gif(job.output_path, frame_count, width, height, self.config)
            job.advance(JobState.VALIDATED)
            size_bytes = job.output_path.stat().st_size

            self._check_cancelled()
            try:
                _deliver(job.output_path, destination)
            except OSError as exc:
                raise EncodeStageError("deliver", None, str(exc)) from exc
            job.advance(JobState.DELIVERED)
        except BaseException:
            job.advance(JobState.FAILED)
            logger.info("Encoding to %s failed in state %s", destination, job.history[-2].value)
            raise
        finally:
            job.cleanup()

        logger.info("Wrote %s (%d frames, %d bytes)", destination, frame_count, size_bytes)
        return ExportResult(path=destination, size_bytes=size_bytes, frame_count=frame_count)


def export_png_frames(store: FrameStore, directory: Path | str) -> ExportResult:
    """Write the frame set as numbered PNG files into *directory*.

    Existing ``frame_*.png`` files there are removed first.
    """
    if store.discarded or not store.sealed:
        raise ValueError("Only a sealed frame store can be exported.")
    directory = Path(directory)
    try:
        for stale in directory.glob(f"{FILENAME_PREFIX}*.png"):
            stale.unlink()
        paths = store.export_all(directory)
    except OSError as exc:
        raise EncodeStageError("write", None, str(exc)) from exc
    total = sum(p.stat().st_size for p in paths)
    return ExportResult(path=directory, size_bytes=total, frame_count=len(paths))
