"""Join unordered contour segments into polylines and closed rings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

Point = tuple[int, int]
Segment = tuple[Point, Point]


def _segment_order(segment: Segment) -> tuple[int, int]:
    (x, y), _ = segment
    return y, x


class SegmentStitcher:
    """
    Incremental endpoint matcher.

    Open fragments are indexed twice: by their first point and by their last
    point. Points are exact integer tuples, so dictionary lookup is an exact
    identity test.
    """

    def __init__(self) -> None:
        self._open_start: dict[Point, list[Point]] = {}
        self._open_end: dict[Point, list[Point]] = {}
        self._rings: list[list[Point]] = []

    @property
    def rings(self) -> list[list[Point]]:
        return self._rings

    @property
    def open_fragments(self) -> list[list[Point]]:
        return list(self._open_start.values())

    def add(self, start: Point, end: Point) -> None:
        a = self._open_end.get(start)
        b = self._open_start.get(end)

        if a is not None and b is not None:
            del self._open_end[start]
            del self._open_start[end]
            if a is b:
                a.append(end)
                self._rings.append(a)
            else:
                joined = a + b
                # a's start key and b's end key now point at the merged fragment
                self._open_start[joined[0]] = joined
                self._open_end[joined[-1]] = joined
        elif a is not None:
            del self._open_end[start]
            a.append(end)
            self._open_end[end] = a
        elif b is not None:
            del self._open_start[end]
            b.insert(0, start)
            self._open_start[start] = b
        else:
            fragment = [start, end]
            self._open_start[start] = fragment
            self._open_end[end] = fragment

        if len(self._open_start) != len(self._open_end):
            logger.error(
                'Contour fragment map size mismatch: %d starts, %d ends after %s -> %s',
                len(self._open_start),
                len(self._open_end),
                start,
                end,
            )
            msg = (
                f'Contour fragment map size mismatch ({len(self._open_start)} starts, '
                f'{len(self._open_end)} ends): duplicated or degenerate segment '
                f'{start} -> {end}'
            )
            raise RuntimeError(msg)

    def result(self) -> list[list[Point]]:
        """Closed rings followed by the open fragments that never closed."""
        return [*self._rings, *self._open_start.values()]


def stitch_segments(segments: Iterable[Segment]) -> list[list[Point]]:
    """
    Assemble segments into maximal polylines and rings.

    Segments are processed in order of their start point (row, then column);
    the sort is stable, so ties keep traversal order.
    """
    stitcher = SegmentStitcher()
    for start, end in sorted(segments, key=_segment_order):
        stitcher.add(start, end)
    return stitcher.result()
