from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from shared.constants import MIPMAP_DTYPE

if TYPE_CHECKING:
    from collections.abc import Sequence


def replace_nodata(
    raster: Sequence[float] | np.ndarray,
    *,
    nodata: float | None = None,
    below: float | None = None,
) -> np.ndarray:
    """
    Return a float copy of ``raster`` with missing samples set to NaN.

    Args:
        raster: Flat or 2D samples.
        nodata: Exact sentinel value marking missing samples.
        below: Samples strictly below this value are treated as missing
            (GeoTIFF DEMs often use large negative fill values).

    """
    out = np.array(raster, dtype=MIPMAP_DTYPE)
    if nodata is not None:
        out[out == nodata] = np.nan
    if below is not None:
        out[out < below] = np.nan
    return out


@dataclass(frozen=True)
class GeoTransform:
    """
    Affine pixel -> world mapping without rotation.

    world_x = origin_x + x * resolution_x
    world_y = origin_y + y * resolution_y  (resolution_y is usually negative)
    """

    origin_x: float
    origin_y: float
    resolution_x: float
    resolution_y: float

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (
            self.origin_x + x * self.resolution_x,
            self.origin_y + y * self.resolution_y,
        )


def georeference(
    lines: Sequence[Sequence[tuple[float, float]]],
    transform: GeoTransform,
) -> list[list[tuple[float, float]]]:
    """Map contour lines from raster pixel space to world coordinates."""
    return [[transform.apply(x, y) for x, y in line] for line in lines]
