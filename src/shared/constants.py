from enum import IntEnum

# --- Пирамида min/max (mipmap)
# Множитель уменьшения между соседними уровнями пирамиды
MIPMAP_REDUCTION_FACTOR = 2
# Размер корневого уровня пирамиды (ячейки по стороне)
MIPMAP_ROOT_SIZE = 1
# Тип данных уровней пирамиды
MIPMAP_DTYPE = 'float64'


class CellClass(IntEnum):
    """Классификация ячейки квадродерева относительно уровня изолинии."""

    OUTSIDE = 0  # вне растра или нет данных (NaN)
    ABOVE = 1  # min >= уровень
    BELOW = 2  # max < уровень
    WITHIN = 3  # уровень проходит через ячейку


# --- Построение изолиний (значения по умолчанию для ContourOptions)
# Полуширина прямоугольного окна сглаживания (точки)
CONTOUR_SMOOTH_KERNEL_WIDTH = 2
# Количество проходов сглаживания (приближение гауссова фильтра)
CONTOUR_SMOOTH_CYCLES = 2
# Минимальное число точек линии (более короткие отбрасываются)
CONTOUR_MIN_POINTS = 0
# Минимальная полуширина окна сглаживания
CONTOUR_SMOOTH_KERNEL_WIDTH_MIN = 1
# Минимальная глубина обхода пирамиды (max_mipmap_level)
CONTOUR_MAX_MIPMAP_LEVEL_MIN = 1

# Минимальное количество точек для валидного сегмента полилинии
MIN_POINTS_FOR_SEGMENT = 2

# --- Диагностическое изображение квадродерева
# Размер изображения по стороне (px)
QUADTREE_OVERLAY_SIZE_PX = 800
# Цвет фона (RGBA)
QUADTREE_OVERLAY_BG_COLOR = (255, 255, 255, 255)
# Заливка листьев по классификации (RGBA), индекс = CellClass
QUADTREE_OVERLAY_LEAF_FILL = (
    (0, 0, 0, 0),
    (0, 255, 0, 26),
    (255, 0, 0, 26),
    (0, 0, 255, 26),
)
# Цвет рамки листьев (RGBA)
QUADTREE_OVERLAY_LEAF_OUTLINE = (0, 0, 0, 13)
# Цвет отрезков изолинии (RGBA)
QUADTREE_OVERLAY_LINE_COLOR = (0, 0, 0, 255)
# Толщина отрезков изолинии (px)
QUADTREE_OVERLAY_LINE_WIDTH_PX = 1
