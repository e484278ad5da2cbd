"""
Adaptive quadtree traversal of a min/max pyramid for one contour level.

Cells whose value range does not contain the contour level are leaves and
are never subdivided, so uniform regions cost a single coarse cell. Cells
that straddle the level, or that contain missing samples, are split into their four children at the next
pyramid level, and the edges between children are tested for ABOVE/BELOW
transitions that become contour segments.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol

from shared.constants import CellClass

if TYPE_CHECKING:
    from collections.abc import Callable

    from contours.pyramid import MipmapPyramid

    LineCallback = Callable[[int, int, int, int, int], None]
    LeafCallback = Callable[[int, int, int, CellClass], None]


class QuadtreeVisitor(Protocol):
    """Receiver of traversal output; coordinates are in grid units of ``level``."""

    def on_line(self, level: int, x1: int, y1: int, x2: int, y2: int) -> None: ...

    def on_leaf(self, level: int, x: int, y: int, cell: CellClass) -> None: ...


class CallbackVisitor:
    """Adapts a pair of plain callables to :class:`QuadtreeVisitor`."""

    def __init__(
        self,
        on_line: LineCallback,
        on_leaf: LeafCallback | None = None,
    ) -> None:
        self._on_line = on_line
        self._on_leaf = on_leaf

    def on_line(self, level: int, x1: int, y1: int, x2: int, y2: int) -> None:
        self._on_line(level, x1, y1, x2, y2)

    def on_leaf(self, level: int, x: int, y: int, cell: CellClass) -> None:
        if self._on_leaf is not None:
            self._on_leaf(level, x, y, cell)


class QuadtreeContourWalker:
    """
    Walks the pyramid for a single contour level.

    Args:
        pyramid: Shared read-only pyramid
        threshold: Contour level
        max_depth: Pyramid level at which straddling cells stop being split
            and are treated as ABOVE. None means the full pyramid depth.

    """

    def __init__(
        self,
        pyramid: MipmapPyramid,
        threshold: float,
        max_depth: int | None = None,
    ) -> None:
        self._pyramid = pyramid
        self._threshold = float(threshold)
        self._max_depth = pyramid.depth if max_depth is None else max_depth
        self._visitor: QuadtreeVisitor | None = None

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def classify(self, level: int, x: int, y: int) -> CellClass:
        ml = self._pyramid[level]
        if not ml.contains(x, y):
            return CellClass.OUTSIDE
        lo = ml.min[y, x]
        hi = ml.max[y, x]
        if math.isnan(lo) or math.isnan(hi):
            return CellClass.OUTSIDE
        # Ячейку с пропусками дробим до пикселей, там пропуски станут OUTSIDE
        if ml.nodata[y, x] and level < self._max_depth:
            return CellClass.WITHIN
        if lo >= self._threshold:
            return CellClass.ABOVE
        if hi < self._threshold:
            return CellClass.BELOW
        # На предельной глубине ячейки, содержащие уровень, относим к ABOVE
        if level >= self._max_depth:
            return CellClass.ABOVE
        return CellClass.WITHIN

    def walk(self, visitor: QuadtreeVisitor) -> None:
        """Traverse from the root cell, reporting segments and leaves to ``visitor``."""
        self._visitor = visitor
        try:
            self._visit_node(0, 0, 0)
        finally:
            self._visitor = None

    def _visit_node(self, level: int, x: int, y: int) -> None:
        cell = self.classify(level, x, y)
        if cell is not CellClass.WITHIN:
            self._visitor.on_leaf(level, x, y, cell)
            return

        child = level + 1
        x0, y0 = x * 2, y * 2
        self._visit_node(child, x0, y0)
        self._visit_node(child, x0 + 1, y0)
        self._visit_node(child, x0, y0 + 1)
        self._visit_node(child, x0 + 1, y0 + 1)

        # Only the four edges shared between the children; the outer border
        # belongs to the parent's neighbours.
        self._visit_edge_h(child, x0, y0)
        self._visit_edge_v(child, x0, y0)
        self._visit_edge_h(child, x0, y0 + 1)
        self._visit_edge_v(child, x0 + 1, y0)

    def _visit_edge_h(self, level: int, x: int, y: int) -> None:
        """Vertical border between cell (x, y) and its right neighbour (x + 1, y)."""
        left = self.classify(level, x, y)
        right = self.classify(level, x + 1, y)

        if left is CellClass.ABOVE and right is CellClass.BELOW:
            self._visitor.on_line(level, x + 1, y + 1, x + 1, y)
        elif left is CellClass.BELOW and right is CellClass.ABOVE:
            self._visitor.on_line(level, x + 1, y, x + 1, y + 1)
        elif left is CellClass.WITHIN or right is CellClass.WITHIN:
            self._visit_edge_h(level + 1, x * 2 + 1, y * 2)
            self._visit_edge_h(level + 1, x * 2 + 1, y * 2 + 1)

    def _visit_edge_v(self, level: int, x: int, y: int) -> None:
        """Horizontal border between cell (x, y) and its lower neighbour (x, y + 1)."""
        upper = self.classify(level, x, y)
        lower = self.classify(level, x, y + 1)

        if upper is CellClass.ABOVE and lower is CellClass.BELOW:
            self._visitor.on_line(level, x, y + 1, x + 1, y + 1)
        elif upper is CellClass.BELOW and lower is CellClass.ABOVE:
            self._visitor.on_line(level, x + 1, y + 1, x, y + 1)
        elif upper is CellClass.WITHIN or lower is CellClass.WITHIN:
            self._visit_edge_v(level + 1, x * 2, y * 2 + 1)
            self._visit_edge_v(level + 1, x * 2 + 1, y * 2 + 1)


def evaluate_contour(
    pyramid: MipmapPyramid,
    threshold: float,
    on_line: LineCallback,
    on_leaf: LeafCallback | None = None,
    *,
    max_depth: int | None = None,
) -> None:
    """Run one traversal with plain callbacks (unscaled per-level coordinates)."""
    walker = QuadtreeContourWalker(pyramid, threshold, max_depth)
    walker.walk(CallbackVisitor(on_line, on_leaf))
