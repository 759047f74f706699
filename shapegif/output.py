"""
Output directory layout for exported animations.

    <root>/
        GIF/          <shape>_<animation>_<YYYY-mm-dd_HH-MM-SS>.gif
        PNG-Frames/   <shape>_<animation>_<YYYY-mm-dd_HH-MM-SS>/frame_0000.png ...
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from shapegif.types import ExportResult, ParameterSet

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "ShapeGif-Animations"
GIF_DIR = "GIF"
PNG_DIR = "PNG-Frames"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def format_size(size_bytes: int) -> str:
    """Human-readable byte count, e.g. 12.3 KB."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


class OutputLayout:
    """Creates the output tree and hands out collision-free names."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.gif_dir = self.root / GIF_DIR
        self.png_dir = self.root / PNG_DIR
        for d in (self.gif_dir, self.png_dir):
            d.mkdir(parents=True, exist_ok=True)
        logger.debug("Output layout ready under %s", self.root)

    @staticmethod
    def base_name(params: ParameterSet, when: Optional[datetime] = None) -> str:
        stamp = (when or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return f"{params.shape.value}_{params.animation.value}_{stamp}"

    @staticmethod
    def _unique(parent: Path, stem: str, suffix: str) -> Path:
        candidate = parent / f"{stem}{suffix}"
        n = 1
        while candidate.exists():
            candidate = parent / f"{stem}_{n}{suffix}"
            n += 1
        return candidate

    def gif_path(self, params: ParameterSet, when: Optional[datetime] = None) -> Path:
        return self._unique(self.gif_dir, self.base_name(params, when), ".gif")

    def frames_dir(self, params: ParameterSet, when: Optional[datetime] = None) -> Path:
        return self._unique(self.png_dir, self.base_name(params, when), "")

    def summary(self, results: Iterable[ExportResult]) -> str:
        results = list(results)
        total = sum(r.size_bytes for r in results)
        lines = [f"{len(results)} export(s) in {self.root}, {format_size(total)} total"]
        for r in results:
            lines.append(f"  {r.path}  ({r.frame_count} frames, {format_size(r.size_bytes)})")
        return "\n".join(lines)
