"""Tests for contours.mipmap module."""

import math

import numpy as np
import pytest

from contours.mipmap import ContourMipmap
from contours.stitching import stitch_segments
from domain.models import ContourOptions

RAW = ContourOptions(smooth_cycles=0, smooth_kernel_width=1)


def _peak(size: int = 8) -> np.ndarray:
    """Radially symmetric peak centred between the middle pixels."""
    c = (size - 1) / 2.0
    yy, xx = np.mgrid[0:size, 0:size]
    return 10.0 - np.hypot(xx - c, yy - c)


def _is_closed(line) -> bool:
    return line[0] == line[-1]


class TestRange:
    """Tests for min/max and intervals."""

    def test_min_max(self):
        mipmap = ContourMipmap([3.0, -1.0, 7.5, math.nan], 2, 2)
        assert mipmap.min() == -1.0
        assert mipmap.max() == 7.5

    def test_min_max_all_nan(self):
        mipmap = ContourMipmap([math.nan] * 6, 3, 2)
        assert math.isnan(mipmap.min())
        assert math.isnan(mipmap.max())

    def test_intervals_integer_steps(self):
        """Max itself is excluded."""
        mipmap = ContourMipmap(np.arange(11.0), 11, 1)
        assert mipmap.intervals(3.0) == [0.0, 3.0, 6.0, 9.0]
        assert mipmap.intervals(5.0) == [0.0, 5.0]

    def test_intervals_start_at_multiple_above_min(self):
        mipmap = ContourMipmap([1.5, 9.5], 2, 1)
        assert mipmap.intervals(2.0) == [2.0, 4.0, 6.0, 8.0]

    def test_intervals_negative_range(self):
        mipmap = ContourMipmap([-25.0, -1.0], 2, 1)
        assert mipmap.intervals(10.0) == [-20.0, -10.0]

    @pytest.mark.parametrize('step', [0.0, -1.0])
    def test_intervals_rejects_non_positive_step(self, step):
        mipmap = ContourMipmap([0.0, 1.0], 2, 1)
        with pytest.raises(ValueError, match='positive'):
            mipmap.intervals(step)

    def test_intervals_all_nan(self):
        mipmap = ContourMipmap([math.nan] * 4, 2, 2)
        assert mipmap.intervals(1.0) == []

    def test_intervals_flat_raster(self):
        """min == max gives no levels."""
        mipmap = ContourMipmap(np.full(9, 4.0), 3, 3)
        assert mipmap.intervals(1.0) == []


class TestConstruction:
    """Tests for constructors and properties."""

    def test_from_array(self):
        dem = np.arange(12.0).reshape(3, 4)
        mipmap = ContourMipmap.from_array(dem)
        assert (mipmap.width, mipmap.height) == (4, 3)
        assert mipmap.depth == 3
        assert mipmap.levels[-1].min[2, 3] == 11.0
        assert mipmap.pyramid.finest is mipmap.levels[-1]

    def test_from_array_rejects_1d(self):
        with pytest.raises(ValueError, match='2D'):
            ContourMipmap.from_array(np.arange(4.0))

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            ContourMipmap(np.zeros(5), 2, 2)


class TestContourScenarios:
    """End-to-end contour extraction."""

    def test_single_peak_is_one_ring(self):
        """A radial peak gives one closed ring around its centre."""
        mipmap = ContourMipmap.from_array(_peak())
        mid = (mipmap.min() + mipmap.max()) / 2.0
        lines = mipmap.contour(mid)

        assert len(lines) == 1
        ring = lines[0]
        assert _is_closed(ring)
        pts = np.asarray(ring[:-1])
        # Центр пика в координатах углов пикселей: (4, 4)
        np.testing.assert_allclose(pts.mean(axis=0), [4.0, 4.0], atol=1e-9)
        radius = np.hypot(pts[:, 0] - 4.0, pts[:, 1] - 4.0)
        assert radius.min() > 1.5
        assert radius.max() < 3.5

    def test_two_peaks_stay_separate(self):
        """Peaks touching only at a corner never merge into one ring."""
        grid = np.zeros((4, 4))
        grid[1, 1] = 9.0
        grid[2, 2] = 9.0
        mipmap = ContourMipmap.from_array(grid)
        lines = mipmap.contour(5.0, RAW)

        assert len(lines) == 2
        assert all(_is_closed(line) and len(line) == 5 for line in lines)
        assert {frozenset(line) for line in lines} == {
            frozenset({(1, 1), (1, 2), (2, 2), (2, 1)}),
            frozenset({(2, 2), (2, 3), (3, 3), (3, 2)}),
        }

    def test_nan_row_breaks_lines(self):
        """Nothing is emitted across a row without data."""
        grid = np.zeros((8, 8))
        grid[:, 3:] = 10.0
        grid[3, :] = np.nan
        mipmap = ContourMipmap.from_array(grid)

        for (_, y1), (_, y2) in mipmap.collect_segments(5.0):
            assert max(y1, y2) <= 3 or min(y1, y2) >= 4

        lines = mipmap.contour(5.0, RAW)
        assert lines == [
            [(3, 0), (3, 1), (3, 2), (3, 3)],
            [(3, 4), (3, 5), (3, 6), (3, 7), (3, 8)],
        ]

    def test_nan_row_breaks_lines_on_coarse_border(self):
        """A border on a coarse cell edge is also cut by a row without data."""
        grid = np.zeros((8, 8))
        grid[:, 4:] = 10.0
        grid[3, :] = np.nan
        mipmap = ContourMipmap.from_array(grid)

        segments = mipmap.collect_segments(5.0)
        assert segments
        for (_, y1), (_, y2) in segments:
            assert max(y1, y2) <= 3 or min(y1, y2) >= 4

        lines = mipmap.contour(5.0, RAW)
        assert lines == [
            [(4, 0), (4, 2), (4, 3)],
            [(4, 4), (4, 8)],
        ]

    def test_zero_cycles_returns_stitched_geometry(self):
        """With smoothing off the output equals the stitched segments."""
        rng = np.random.default_rng(17)
        mipmap = ContourMipmap(rng.uniform(0.0, 50.0, size=12 * 10), 12, 10)
        stitched = stitch_segments(mipmap.collect_segments(25.0))
        kept = [line for line in stitched if len(line) >= RAW.min_line_points]
        assert mipmap.contour(25.0, RAW) == kept

    def test_threshold_outside_range(self):
        mipmap = ContourMipmap.from_array(_peak())
        assert mipmap.contour(mipmap.max() + 1.0) == []
        assert mipmap.contour(mipmap.min() - 1.0) == []


class TestContourProperties:
    """Invariants of contour output."""

    def test_repeatable(self):
        """Queries do not change the pyramid and give identical results."""
        mipmap = ContourMipmap.from_array(_peak(13))
        before = [level.min.copy() for level in mipmap.levels]
        first = mipmap.contour(7.0)
        second = mipmap.contour(7.0)
        assert first == second
        for saved, level in zip(before, mipmap.levels):
            np.testing.assert_array_equal(saved, level.min)

    def test_points_within_raster(self):
        """Clipping keeps every point inside [0, width] x [0, height]."""
        rng = np.random.default_rng(23)
        width, height = 13, 7
        mipmap = ContourMipmap(rng.uniform(0.0, 100.0, size=width * height), width, height)
        for level in mipmap.intervals(20.0):
            for (x1, y1), (x2, y2) in mipmap.collect_segments(level):
                assert 0 <= x1 <= width and 0 <= x2 <= width
                assert 0 <= y1 <= height and 0 <= y2 <= height
            for line in mipmap.contour(level):
                for x, y in line:
                    assert 0.0 <= x <= width
                    assert 0.0 <= y <= height

    def test_total_segment_length_matches_pixel_borders(self):
        """Coarse segments cover exactly the ABOVE/BELOW pixel borders."""
        rng = np.random.default_rng(29)
        width, height = 11, 9
        grid = rng.uniform(0.0, 10.0, size=(height, width))
        mipmap = ContourMipmap.from_array(grid)
        threshold = 5.0

        above = grid >= threshold
        expected = int((above[:, 1:] != above[:, :-1]).sum())
        expected += int((above[1:, :] != above[:-1, :]).sum())

        total = sum(
            abs(x2 - x1) + abs(y2 - y1)
            for (x1, y1), (x2, y2) in mipmap.collect_segments(threshold)
        )
        assert total == expected

    @pytest.mark.parametrize('level', [0, -1])
    def test_max_level_below_one_rejected(self, level):
        """A depth limit that would force the root to ABOVE is an error."""
        mipmap = ContourMipmap.from_array(_peak())
        with pytest.raises(ValueError, match='max_mipmap_level'):
            mipmap.collect_segments(7.0, level)
        with pytest.raises(ValueError, match='max_mipmap_level'):
            mipmap.evaluate_contour(7.0, lambda *args: None, max_mipmap_level=level)

    def test_max_level_one_uses_quadrants(self):
        """Depth 1 on an 8x8 raster stops at 4x4 px quadrants."""
        grid = np.zeros((8, 8))
        grid[:, 4:] = 10.0
        mipmap = ContourMipmap.from_array(grid)
        options = ContourOptions(max_mipmap_level=1, smooth_kernel_width=1, smooth_cycles=0)
        assert mipmap.contour(5.0, options) == [[(4, 0), (4, 4), (4, 8)]]

    def test_max_level_coarsens_grid(self):
        """Limiting depth to 2 on an 8x8 raster snaps points to a 2 px grid."""
        mipmap = ContourMipmap.from_array(_peak())
        segments = mipmap.collect_segments(7.0, max_mipmap_level=2)
        assert segments
        for start, end in segments:
            assert all(v % 2 == 0 for v in (*start, *end))

    def test_contour_levels(self):
        mipmap = ContourMipmap.from_array(_peak())
        result = mipmap.contour_levels(1.0)
        assert list(result) == mipmap.intervals(1.0)
        assert all(isinstance(lines, list) for lines in result.values())

    def test_evaluate_contour_passes_level_units(self):
        """Raw callbacks receive per-level coordinates."""
        mipmap = ContourMipmap.from_array(_peak())
        seen = []
        mipmap.evaluate_contour(7.0, lambda *args: seen.append(args))
        assert seen
        for level, *coords in seen:
            n = 2**level
            assert all(0 <= c <= n for c in coords)
