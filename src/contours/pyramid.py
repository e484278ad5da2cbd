"""
Min/max mipmap pyramid over a scalar raster.

Each level summarises the raster at half the resolution of the level below
it: every cell stores the minimum and maximum finite sample under its
footprint. Missing samples (NaN) are ignored by the reducers and only
propagate when a whole footprint is missing. A separate boolean mask per
level marks cells whose footprint has any missing sample.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from shared.constants import MIPMAP_DTYPE, MIPMAP_REDUCTION_FACTOR, MIPMAP_ROOT_SIZE

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MipmapLevel:
    """
    One level of the pyramid.

    Attributes:
        min: Per-cell minimum, shape (height, width), read-only
        max: Per-cell maximum, shape (height, width), read-only
        width: Cells per row
        height: Cells per column
        scale: Edge of one cell in finest-grid units
        nodata: True where the cell footprint has at least one missing
            sample, shape (height, width), read-only

    """

    min: np.ndarray
    max: np.ndarray
    width: int
    height: int
    scale: int
    nodata: np.ndarray

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


def _pad_to_even(data: np.ndarray, fill: float | bool = np.nan) -> np.ndarray:
    """Pad odd trailing row/column with ``fill`` so 2x2 blocks tile the array."""
    h, w = data.shape
    pad_h = h % MIPMAP_REDUCTION_FACTOR
    pad_w = w % MIPMAP_REDUCTION_FACTOR
    if not pad_h and not pad_w:
        return data
    return np.pad(
        data, ((0, pad_h), (0, pad_w)), mode='constant', constant_values=fill
    )


def _reduce_blocks(
    data: np.ndarray, reducer: np.ufunc, fill: float | bool = np.nan
) -> np.ndarray:
    # fmin/fmax ignore NaN unless both operands are NaN
    padded = _pad_to_even(data, fill)
    top_left = padded[0::2, 0::2]
    top_right = padded[0::2, 1::2]
    bottom_left = padded[1::2, 0::2]
    bottom_right = padded[1::2, 1::2]
    return reducer(reducer(top_left, top_right), reducer(bottom_left, bottom_right))


def mipmap_reduce(level: MipmapLevel) -> MipmapLevel:
    """
    Build the next coarser level from ``level``.

    Output size is ceil(w/2) x ceil(h/2); cells on an odd trailing
    row/column aggregate the 2x1, 1x2 or 1x1 blocks that exist.
    """
    out_min = _reduce_blocks(level.min, np.fmin)
    out_max = _reduce_blocks(level.max, np.fmax)
    # Ячейки за краем растра не считаются пропусками
    out_nodata = _reduce_blocks(level.nodata, np.logical_or, fill=False)
    for arr in (out_min, out_max, out_nodata):
        arr.setflags(write=False)
    out_h, out_w = out_min.shape
    return MipmapLevel(
        min=out_min,
        max=out_max,
        width=out_w,
        height=out_h,
        scale=level.scale * MIPMAP_REDUCTION_FACTOR,
        nodata=out_nodata,
    )


def _as_grid(raster: Sequence[float] | np.ndarray, width: int, height: int) -> np.ndarray:
    if width < 1 or height < 1:
        msg = f'Raster dimensions must be positive, got {width}x{height}'
        raise ValueError(msg)
    data = np.asarray(raster, dtype=MIPMAP_DTYPE)
    if data.size != width * height:
        msg = (
            f'Raster length {data.size} does not match dimensions '
            f'{width}x{height} (expected {width * height} samples)'
        )
        raise ValueError(msg)
    # Копия: исходный буфер вызывающего кода не должен влиять на пирамиду
    grid = data.reshape((height, width)).copy()
    grid[~np.isfinite(grid)] = np.nan
    grid.setflags(write=False)
    return grid


class MipmapPyramid:
    """
    Immutable min/max pyramid, ordered coarsest (1x1 root) to finest.

    The finest level is the raster itself with scale 1. Arrays of all levels
    are flagged read-only, so one pyramid can serve any number of contour
    queries.
    """

    def __init__(self, raster: Sequence[float] | np.ndarray, width: int, height: int) -> None:
        grid = _as_grid(raster, width, height)
        nodata = np.isnan(grid)
        nodata.setflags(write=False)
        finest = MipmapLevel(
            min=grid, max=grid, width=width, height=height, scale=1, nodata=nodata
        )

        levels = [finest]
        while levels[-1].width > MIPMAP_ROOT_SIZE or levels[-1].height > MIPMAP_ROOT_SIZE:
            levels.append(mipmap_reduce(levels[-1]))
        levels.reverse()
        self._levels: tuple[MipmapLevel, ...] = tuple(levels)

        logger.info(
            'Mipmap pyramid built: %d levels for %dx%d raster, sizes: %s',
            len(self._levels),
            width,
            height,
            [f'{lvl.width}x{lvl.height}' for lvl in self._levels],
        )

    @property
    def levels(self) -> tuple[MipmapLevel, ...]:
        return self._levels

    @property
    def depth(self) -> int:
        """Number of levels, ceil(log2(max(width, height))) + 1."""
        return len(self._levels)

    @property
    def root(self) -> MipmapLevel:
        return self._levels[0]

    @property
    def finest(self) -> MipmapLevel:
        return self._levels[-1]

    @property
    def width(self) -> int:
        return self.finest.width

    @property
    def height(self) -> int:
        return self.finest.height

    def __len__(self) -> int:
        return len(self._levels)

    def __getitem__(self, index: int) -> MipmapLevel:
        return self._levels[index]

    @property
    def nbytes(self) -> int:
        """Memory held by level arrays (shared min/max of the finest level counted once)."""
        total = self.finest.min.nbytes
        for level in self._levels[:-1]:
            total += level.min.nbytes + level.max.nbytes
        total += sum(level.nodata.nbytes for level in self._levels)
        return total


def expected_depth(width: int, height: int) -> int:
    """Depth of a pyramid over a ``width`` x ``height`` raster."""
    return math.ceil(math.log2(max(width, height))) + 1
