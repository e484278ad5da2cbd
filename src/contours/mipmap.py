"""
Contour extraction over a min/max mipmap pyramid.

Typical use::

    mipmap = ContourMipmap(samples, width, height)
    for level in mipmap.intervals(10.0):
        lines = mipmap.contour(level)

Every returned line is a list of (x, y) tuples in raster pixel space
(origin top-left, 1 unit = 1 pixel); closed rings repeat their first point
at the end.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from contours.pyramid import MipmapPyramid
from contours.quadtree import evaluate_contour as _evaluate_contour
from contours.smoothing import is_ring, smooth_line
from contours.stitching import stitch_segments
from domain.models import ContourOptions
from shared.constants import CONTOUR_MAX_MIPMAP_LEVEL_MIN

if TYPE_CHECKING:
    from collections.abc import Sequence

    from contours.pyramid import MipmapLevel
    from contours.quadtree import LeafCallback, LineCallback
    from contours.stitching import Segment

logger = logging.getLogger(__name__)

RASTER_NDIM = 2


class ContourMipmap:
    """Owns a pyramid and answers contour queries against it."""

    def __init__(self, raster: Sequence[float] | np.ndarray, width: int, height: int) -> None:
        self._pyramid = MipmapPyramid(raster, width, height)

    @classmethod
    def from_array(cls, dem: np.ndarray) -> ContourMipmap:
        """Build from a 2D array of shape (height, width)."""
        arr = np.asarray(dem)
        if arr.ndim != RASTER_NDIM:
            msg = f'Expected a 2D raster, got array with shape {arr.shape}'
            raise ValueError(msg)
        height, width = arr.shape
        return cls(arr.ravel(), width, height)

    @property
    def pyramid(self) -> MipmapPyramid:
        return self._pyramid

    @property
    def levels(self) -> tuple[MipmapLevel, ...]:
        return self._pyramid.levels

    @property
    def depth(self) -> int:
        return self._pyramid.depth

    @property
    def width(self) -> int:
        return self._pyramid.width

    @property
    def height(self) -> int:
        return self._pyramid.height

    def min(self) -> float:
        """Minimum finite sample (NaN if the raster has none)."""
        return float(self._pyramid.root.min[0, 0])

    def max(self) -> float:
        """Maximum finite sample (NaN if the raster has none)."""
        return float(self._pyramid.root.max[0, 0])

    def intervals(self, step: float) -> list[float]:
        """Contour levels at multiples of ``step`` inside [min(), max())."""
        if step <= 0:
            msg = f'Contour interval must be positive, got {step}'
            raise ValueError(msg)

        mn = self.min()
        mx = self.max()
        if math.isnan(mn) or math.isnan(mx):
            return []

        start = math.ceil(mn / step) * step
        levels: list[float] = []
        k = 0
        v = start
        while v < mx:
            levels.append(v)
            k += 1
            v = start + k * step
        return levels

    def evaluate_contour(
        self,
        threshold: float,
        on_line: LineCallback,
        on_leaf: LeafCallback | None = None,
        *,
        max_mipmap_level: int | None = None,
    ) -> None:
        """
        Walk the quadtree for ``threshold`` and report raw output.

        Intended for visualising the quadtree; ``contour`` assembles the
        segments into lines instead. Coordinates passed to the callbacks are
        grid units of the reported level, not raster pixels.
        """
        if max_mipmap_level is not None and max_mipmap_level < CONTOUR_MAX_MIPMAP_LEVEL_MIN:
            msg = (
                f'max_mipmap_level must be >= {CONTOUR_MAX_MIPMAP_LEVEL_MIN} '
                f'or None, got {max_mipmap_level}'
            )
            raise ValueError(msg)
        _evaluate_contour(
            self._pyramid,
            threshold,
            on_line,
            on_leaf,
            max_depth=max_mipmap_level,
        )

    def collect_segments(
        self, threshold: float, max_mipmap_level: int | None = None
    ) -> list[Segment]:
        """
        Quadtree segments for ``threshold`` scaled to raster pixel units.

        Coarse cells on the right/bottom border of a raster whose size is not
        a power of two overhang the raster; their segments are clipped to it.
        """
        segments: list[Segment] = []
        levels = self._pyramid.levels
        w = self.width
        h = self.height

        def add_line(level: int, x1: int, y1: int, x2: int, y2: int) -> None:
            scale = levels[level].scale
            start = (min(scale * x1, w), min(scale * y1, h))
            end = (min(scale * x2, w), min(scale * y2, h))
            segments.append((start, end))

        self.evaluate_contour(threshold, add_line, max_mipmap_level=max_mipmap_level)
        return segments

    def contour(
        self,
        threshold: float,
        options: ContourOptions | None = None,
    ) -> list[list[tuple[float, float]]]:
        """
        Build smoothed contour lines for one level.

        Args:
            threshold: Value in the raster at which to draw the contour
            options: Traversal depth, smoothing and filtering parameters

        Returns:
            Closed rings first, then open lines ending at the raster border
            or at missing data.

        """
        if options is None:
            options = ContourOptions()

        segments = self.collect_segments(threshold, options.max_mipmap_level)
        lines = stitch_segments(segments)
        min_len = options.min_line_points
        kept = [line for line in lines if len(line) >= min_len]
        result = [
            smooth_line(
                line,
                kernel_width=options.smooth_kernel_width,
                cycles=options.smooth_cycles,
            )
            for line in kept
        ]

        logger.debug(
            'Contour %.3f: %d segments -> %d lines (%d rings), %d dropped shorter than %d points',
            threshold,
            len(segments),
            len(result),
            sum(1 for line in result if is_ring(line)),
            len(lines) - len(kept),
            min_len,
        )
        return result

    def contour_levels(
        self,
        step: float,
        options: ContourOptions | None = None,
    ) -> dict[float, list[list[tuple[float, float]]]]:
        """Contour every level of ``intervals(step)``, ascending."""
        levels = self.intervals(step)
        return {level: self.contour(level, options) for level in levels}
