"""Shared utilities and helpers."""
from shared.constants import CellClass
from shared.diagnostics import (
    QuadtreeStats,
    collect_quadtree_stats,
    log_pyramid_memory,
    log_quadtree_stats,
)

__all__ = [
    'CellClass',
    'QuadtreeStats',
    'collect_quadtree_stats',
    'log_pyramid_memory',
    'log_quadtree_stats',
]
