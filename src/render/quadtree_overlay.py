"""
Диагностическая визуализация квадродерева изолиний.

Рисует листья обхода (заливка по классификации) и сырые отрезки изолинии
для одного уровня. Квадрат корня пирамиды растягивается на всё изображение,
поэтому ячейка уровня l занимает size / 2**l пикселей.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from shared.constants import (
    MIN_POINTS_FOR_SEGMENT,
    QUADTREE_OVERLAY_BG_COLOR,
    QUADTREE_OVERLAY_LEAF_FILL,
    QUADTREE_OVERLAY_LEAF_OUTLINE,
    QUADTREE_OVERLAY_LINE_COLOR,
    QUADTREE_OVERLAY_LINE_WIDTH_PX,
    QUADTREE_OVERLAY_SIZE_PX,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from contours.mipmap import ContourMipmap
    from shared.constants import CellClass

logger = logging.getLogger(__name__)


def _cell_px(size: int, level: int) -> float:
    return size / (2**level)


def draw_quadtree(
    mipmap: ContourMipmap,
    threshold: float,
    size: int = QUADTREE_OVERLAY_SIZE_PX,
    max_mipmap_level: int | None = None,
) -> Image.Image:
    """
    Рисует квадродерево и отрезки изолинии для уровня threshold.

    Args:
        mipmap: Пирамида с растром
        threshold: Уровень изолинии
        size: Размер квадратного изображения (px)
        max_mipmap_level: Ограничение глубины обхода

    Returns:
        RGBA изображение size x size

    """
    img = Image.new('RGBA', (size, size), QUADTREE_OVERLAY_BG_COLOR)
    # Полупрозрачные заливки накладываются отдельным слоем
    leaves = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    leaf_draw = ImageDraw.Draw(leaves)
    lines: list[tuple[float, float, float, float]] = []

    def on_leaf(level: int, x: int, y: int, cell: CellClass) -> None:
        s = _cell_px(size, level)
        leaf_draw.rectangle(
            (s * x, s * y, s * (x + 1), s * (y + 1)),
            fill=QUADTREE_OVERLAY_LEAF_FILL[cell],
            outline=QUADTREE_OVERLAY_LEAF_OUTLINE,
        )

    def on_line(level: int, x1: int, y1: int, x2: int, y2: int) -> None:
        s = _cell_px(size, level)
        lines.append((s * x1, s * y1, s * x2, s * y2))

    mipmap.evaluate_contour(
        threshold, on_line, on_leaf, max_mipmap_level=max_mipmap_level
    )

    img = Image.alpha_composite(img, leaves)
    draw = ImageDraw.Draw(img)
    for seg in lines:
        draw.line(
            seg,
            fill=QUADTREE_OVERLAY_LINE_COLOR,
            width=QUADTREE_OVERLAY_LINE_WIDTH_PX,
        )
    return img


def draw_contour_lines(
    mipmap: ContourMipmap,
    lines: Sequence[Sequence[tuple[float, float]]],
    size: int = QUADTREE_OVERLAY_SIZE_PX,
    base: Image.Image | None = None,
) -> Image.Image:
    """Рисует готовые (сшитые и сглаженные) линии в масштабе draw_quadtree."""
    img = base.copy() if base is not None else Image.new(
        'RGBA', (size, size), QUADTREE_OVERLAY_BG_COLOR
    )
    # Пиксель растра -> пиксель изображения
    s = _cell_px(img.width, mipmap.depth - 1)
    draw = ImageDraw.Draw(img)
    for line in lines:
        if len(line) < MIN_POINTS_FOR_SEGMENT:
            continue
        draw.line(
            [(s * x, s * y) for x, y in line],
            fill=QUADTREE_OVERLAY_LINE_COLOR,
            width=QUADTREE_OVERLAY_LINE_WIDTH_PX,
        )
    return img


def iter_sweep_frames(
    mipmap: ContourMipmap,
    step: float,
    size: int = QUADTREE_OVERLAY_SIZE_PX,
) -> Iterator[tuple[float, Image.Image]]:
    """
    Кадры квадродерева при проходе по уровням от min до max с шагом step.

    Вызывающий код сам решает, куда сохранять кадры (PNG, GIF и т.п.).
    """
    levels = mipmap.intervals(step)
    logger.info('Quadtree sweep: %d frames, step %.3f', len(levels), step)
    for level in levels:
        yield level, draw_quadtree(mipmap, level, size)
