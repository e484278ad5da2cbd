"""
Diagnostic utilities.

Counts what a quadtree traversal visits and writes the summary to the log,
which helps to tune ``max_mipmap_level`` for large rasters.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from shared.constants import CellClass

if TYPE_CHECKING:
    from contours.mipmap import ContourMipmap
    from contours.pyramid import MipmapPyramid

logger = logging.getLogger(__name__)


@dataclass
class QuadtreeStats:
    """Counters collected during one traversal."""

    threshold: float
    segments: int = 0
    leaves_by_class: Counter = field(default_factory=Counter)
    leaves_by_level: Counter = field(default_factory=Counter)
    segments_by_level: Counter = field(default_factory=Counter)
    elapsed_s: float = 0.0

    @property
    def leaves(self) -> int:
        return sum(self.leaves_by_class.values())

    @property
    def deepest_level(self) -> int:
        levels = set(self.leaves_by_level) | set(self.segments_by_level)
        return max(levels) if levels else 0

    def as_dict(self) -> dict[str, Any]:
        return {
            'threshold': self.threshold,
            'segments': self.segments,
            'leaves': self.leaves,
            'leaves_by_class': {c.name: self.leaves_by_class.get(c, 0) for c in CellClass},
            'deepest_level': self.deepest_level,
            'elapsed_ms': round(self.elapsed_s * 1000.0, 3),
        }


def collect_quadtree_stats(
    mipmap: ContourMipmap,
    threshold: float,
    max_mipmap_level: int | None = None,
) -> QuadtreeStats:
    """Walk the quadtree for ``threshold`` and count leaves and segments."""
    stats = QuadtreeStats(threshold=float(threshold))

    def on_line(level: int, x1: int, y1: int, x2: int, y2: int) -> None:
        stats.segments += 1
        stats.segments_by_level[level] += 1

    def on_leaf(level: int, x: int, y: int, cell: CellClass) -> None:
        stats.leaves_by_class[cell] += 1
        stats.leaves_by_level[level] += 1

    started = time.perf_counter()
    mipmap.evaluate_contour(
        threshold, on_line, on_leaf, max_mipmap_level=max_mipmap_level
    )
    stats.elapsed_s = time.perf_counter() - started
    return stats


def log_quadtree_stats(stats: QuadtreeStats, level: int = logging.INFO) -> None:
    """Write traversal counters to the log."""
    info = stats.as_dict()
    logger.log(
        level,
        'Quadtree @ %.3f: %d segments, %d leaves %s, deepest level %d, %.3f ms',
        info['threshold'],
        info['segments'],
        info['leaves'],
        info['leaves_by_class'],
        info['deepest_level'],
        info['elapsed_ms'],
    )


def log_pyramid_memory(pyramid: MipmapPyramid, label: str = '') -> None:
    """Log memory held by the pyramid arrays."""
    mb = round(pyramid.nbytes / 1024 / 1024, 2)
    prefix = f'[{label}] ' if label else ''
    logger.info(
        '%sMipmap pyramid memory: %.2f MB in %d levels (%dx%d raster)',
        prefix,
        mb,
        pyramid.depth,
        pyramid.width,
        pyramid.height,
    )
