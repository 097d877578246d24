"""Фиксированные физические константы печати.

Значения не настраиваются пользователем во время работы: они задают класс
вывода (фото 35x45 мм и лист A4) и собраны в неизменяемый `StudioSettings`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from passport_studio.models.geometry import PhysicalSize

DPI = 300

PASSPORT_MM: Tuple[float, float] = (35.0, 45.0)
A4_MM: Tuple[float, float] = (210.0, 297.0)

SHEET_MARGIN_PX = 150
SHEET_GUTTER_PX = 20

# нейтральный серый, не похож на оттенки кожи
GUIDE_COLOR: Tuple[int, int, int] = (128, 128, 128)
GUIDE_WIDTH_PX = 1
GUIDE_TICK_PX = 30

BACKGROUND_COLOR: Tuple[int, int, int] = (255, 255, 255)

ROTATION_LIMIT_DEG = 30.0
ZOOM_RANGE: Tuple[float, float] = (1.0, 4.0)

JPEG_QUALITY = 95


@dataclass(frozen=True)
class StudioSettings:
    dpi: int = DPI
    passport_mm: Tuple[float, float] = PASSPORT_MM
    sheet_mm: Tuple[float, float] = A4_MM
    sheet_margin_px: int = SHEET_MARGIN_PX
    sheet_gutter_px: int = SHEET_GUTTER_PX
    guide_color: Tuple[int, int, int] = GUIDE_COLOR
    guide_width_px: int = GUIDE_WIDTH_PX
    guide_tick_px: int = GUIDE_TICK_PX
    background_color: Tuple[int, int, int] = BACKGROUND_COLOR
    rotation_limit_deg: float = ROTATION_LIMIT_DEG
    zoom_range: Tuple[float, float] = ZOOM_RANGE
    jpeg_quality: int = JPEG_QUALITY

    def __post_init__(self) -> None:
        if self.sheet_margin_px < 0 or self.sheet_gutter_px < 0:
            raise ValueError("Поля и зазоры листа не могут быть отрицательными")
        if not 1 <= self.guide_width_px <= 2:
            raise ValueError(f"Толщина линий реза 1..2 px, получено {self.guide_width_px}")

    @property
    def passport_size(self) -> PhysicalSize:
        """35x45 мм при 300 DPI -> 413x531 px."""
        return PhysicalSize.from_mm(*self.passport_mm, dpi=self.dpi)

    @property
    def sheet_size(self) -> PhysicalSize:
        """A4 при 300 DPI -> 2480x3508 px."""
        return PhysicalSize.from_mm(*self.sheet_mm, dpi=self.dpi)


DEFAULT_SETTINGS = StudioSettings()
