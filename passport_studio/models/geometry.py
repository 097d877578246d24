"""Геометрические модели: физический размер, область кадрирования, угол поворота.

Принципы:
- SRP: только структуры данных и их инварианты, без растровой логики.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from passport_studio.errors import InvalidCropRegion

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


@dataclass(frozen=True)
class PhysicalSize:
    """Размер растра в пикселях при заданном разрешении.

    Fields:
        width_px: Ширина, px.
        height_px: Высота, px.
        dpi: Точек на дюйм.
    """
    width_px: int
    height_px: int
    dpi: int

    @classmethod
    def from_mm(cls, width_mm: float, height_mm: float, dpi: int) -> "PhysicalSize":
        """Переводит миллиметры в пиксели: round(mm / 25.4 * dpi)."""
        return cls(
            width_px=int(round(width_mm / MM_PER_INCH * dpi)),
            height_px=int(round(height_mm / MM_PER_INCH * dpi)),
            dpi=int(dpi),
        )

    @property
    def size(self) -> Tuple[int, int]:
        return self.width_px, self.height_px

    @property
    def aspect(self) -> float:
        return self.width_px / self.height_px


@dataclass(frozen=True)
class CropRegion:
    """Прямоугольник кадрирования в пиксельных координатах исходника.

    Координаты могут быть дробными: редактор кадра редко попадает в целые пиксели.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def validate(self, source_width: int, source_height: int) -> None:
        """Проверяет прямоугольник относительно размеров исходника.

        Raises:
            InvalidCropRegion: нечисловые значения, отрицательное начало,
                ширина/высота <= 0 или выход за границы изображения.
        """
        values = (self.x, self.y, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            raise InvalidCropRegion(f"Некорректные координаты кадра: {values}")
        if self.width <= 0 or self.height <= 0:
            raise InvalidCropRegion(f"Размер кадра должен быть положительным: {self.width}x{self.height}")
        if self.x < 0 or self.y < 0:
            raise InvalidCropRegion(f"Начало кадра вне изображения: ({self.x}, {self.y})")
        if self.x + self.width > source_width or self.y + self.height > source_height:
            raise InvalidCropRegion(
                f"Кадр {self.width}x{self.height}+{self.x}+{self.y} выходит за границы "
                f"изображения {source_width}x{source_height}"
            )

    @classmethod
    def centered(
        cls,
        source_width: int,
        source_height: int,
        aspect: float,
        zoom: float = 1.0,
        offset: Tuple[float, float] = (0.0, 0.0),
        zoom_range: Tuple[float, float] = (1.0, 4.0),
    ) -> "CropRegion":
        """Кадр заданных пропорций по центру изображения.

        При zoom=1 это наибольший прямоугольник с соотношением `aspect`, который
        помещается в исходник; zoom уменьшает его во столько же раз. Смещение
        `offset` (px исходника) сдвигает кадр, но не выводит его за границы.
        """
        if source_width <= 0 or source_height <= 0:
            raise InvalidCropRegion(f"Пустое изображение: {source_width}x{source_height}")
        zoom_min, zoom_max = zoom_range
        zoom = max(zoom_min, min(zoom_max, float(zoom)))

        if source_width / source_height > aspect:
            height = float(source_height)
            width = height * aspect
        else:
            width = float(source_width)
            height = width / aspect
        width /= zoom
        height /= zoom

        dx, dy = offset
        x = (source_width - width) / 2.0 + dx
        y = (source_height - height) / 2.0 + dy
        x = max(0.0, min(source_width - width, x))
        y = max(0.0, min(source_height - height, y))
        return cls(x=x, y=y, width=width, height=height)


def normalize_rotation(degrees: float, limit: float = 30.0) -> float:
    """Приводит угол поворота (градусы, по часовой) к диапазону [-limit, +limit].

    Raises:
        ValueError: если угол не является конечным числом.
    """
    value = float(degrees)
    if not math.isfinite(value):
        raise ValueError(f"Некорректный угол поворота: {degrees}")
    clamped = max(-limit, min(limit, value))
    if clamped != value:
        logger.warning("Rotation %.2f° clamped to %.2f°", value, clamped)
    return clamped
