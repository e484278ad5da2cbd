# Модуль диагностической визуализации
from render.quadtree_overlay import (
    draw_contour_lines,
    draw_quadtree,
    iter_sweep_frames,
)

__all__ = [
    'draw_contour_lines',
    'draw_quadtree',
    'iter_sweep_frames',
]
