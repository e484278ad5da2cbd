from pydantic import BaseModel, field_validator

from shared.constants import (
    CONTOUR_MAX_MIPMAP_LEVEL_MIN,
    CONTOUR_MIN_POINTS,
    CONTOUR_SMOOTH_CYCLES,
    CONTOUR_SMOOTH_KERNEL_WIDTH,
    CONTOUR_SMOOTH_KERNEL_WIDTH_MIN,
)


class ContourOptions(BaseModel):
    """Параметры построения одной изолинии (contour)."""

    model_config = {
        'frozen': True,
        'extra': 'forbid',
    }

    # Максимальная глубина обхода пирамиды; как если бы растр был уменьшен
    # до 2^n пикселей по большей стороне. None: без ограничения
    max_mipmap_level: int | None = None
    # Полуширина прямоугольного фильтра сглаживания (точки)
    smooth_kernel_width: int = CONTOUR_SMOOTH_KERNEL_WIDTH
    # Количество проходов сглаживания (0 = без сглаживания)
    smooth_cycles: int = CONTOUR_SMOOTH_CYCLES
    # Линии и кольца с меньшим числом точек отбрасываются
    min_points: int = CONTOUR_MIN_POINTS

    @field_validator('max_mipmap_level')
    @classmethod
    def validate_max_level(cls, v: int | None) -> int | None:
        if v is not None and v < CONTOUR_MAX_MIPMAP_LEVEL_MIN:
            msg = f'max_mipmap_level must be >= {CONTOUR_MAX_MIPMAP_LEVEL_MIN}'
            raise ValueError(msg)
        return v

    @field_validator('smooth_kernel_width')
    @classmethod
    def validate_kernel_width(cls, v: int) -> int:
        if v < CONTOUR_SMOOTH_KERNEL_WIDTH_MIN:
            msg = f'smooth_kernel_width must be >= {CONTOUR_SMOOTH_KERNEL_WIDTH_MIN}'
            raise ValueError(msg)
        return v

    @field_validator('smooth_cycles', 'min_points')
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            msg = 'Value must be >= 0'
            raise ValueError(msg)
        return v

    @property
    def min_line_points(self) -> int:
        """Shortest line kept for smoothing: max(min_points, 2 * kernel width)."""
        return max(self.min_points, 2 * self.smooth_kernel_width)
