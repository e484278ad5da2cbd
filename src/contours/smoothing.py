from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from shared.constants import (
    CONTOUR_SMOOTH_CYCLES,
    CONTOUR_SMOOTH_KERNEL_WIDTH,
    MIN_POINTS_FOR_SEGMENT,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


def is_ring(points: Sequence[tuple[float, float]]) -> bool:
    """True when the polyline is closed (first point equals last point)."""
    if len(points) < MIN_POINTS_FOR_SEGMENT:
        return False
    return tuple(points[0]) == tuple(points[-1])


def _window_indices(n: int, kernel_width: int, *, wrap: bool) -> np.ndarray:
    # Row i holds the 2*k sample indices i-k .. i+k-1
    offsets = np.arange(-kernel_width, kernel_width)
    idx = np.arange(n)[:, None] + offsets[None, :]
    if wrap:
        return np.mod(idx, n)
    return np.clip(idx, 0, n - 1)


def box_filter(pts: np.ndarray, kernel_width: int, *, wrap: bool) -> np.ndarray:
    """
    One pass of the rectangular filter over an (N, 2) array.

    Returns a new array; ``pts`` is not modified.
    """
    idx = _window_indices(len(pts), kernel_width, wrap=wrap)
    return pts[idx].mean(axis=1)


def smooth_line(
    points: Sequence[tuple[float, float]],
    kernel_width: int = CONTOUR_SMOOTH_KERNEL_WIDTH,
    cycles: int = CONTOUR_SMOOTH_CYCLES,
) -> list[tuple[float, float]]:
    """
    Сглаживание линии повторным прямоугольным фильтром (приближение гаусса).

    Closed rings are filtered circularly over their unique points and stay
    exactly closed. Open lines replicate their endpoints past either end,
    so endpoints drift slightly toward the interior.

    Args:
        points: Polyline or ring as (x, y) pairs
        kernel_width: Half-width of the filter window
        cycles: Number of filter passes (0 returns the input geometry)

    Returns:
        New list of float (x, y) tuples

    """
    ring = is_ring(points)
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if ring:
        pts = pts[:-1]

    if len(pts):
        for _ in range(cycles):
            pts = box_filter(pts, kernel_width, wrap=ring)

    out = [(float(x), float(y)) for x, y in pts]
    if ring:
        out.append(out[0])
    return out
