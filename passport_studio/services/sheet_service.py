"""Компоновка листа печати: сетка копий фото, поля, зазоры и метки реза.

Принципы:
- SRP: только раскладка и копирование пикселей; масштабирования здесь нет,
  ячейка уже отрендерена в разрешении листа.
- Детерминизм: нечётный остаток свободного места уходит в правое/нижнее поле.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from passport_studio.config import DEFAULT_SETTINGS, StudioSettings
from passport_studio.errors import CellTooLarge
from passport_studio.models.geometry import PhysicalSize
from passport_studio.models.layout import SheetLayout
from passport_studio.models.raster import RasterBuffer

logger = logging.getLogger(__name__)


class SheetCompositor:
    def __init__(self, settings: StudioSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings

    def compute_layout(self, sheet_size: PhysicalSize, cell_physical_size: PhysicalSize) -> SheetLayout:
        """Сколько целых ячеек помещается на лист и где начинается центрированная сетка.

        columns = floor((W - 2*margin + gutter) / (cell_w + gutter)), аналогично rows.

        Raises:
            CellTooLarge: не помещается ни одной ячейки.
        """
        margin = self._settings.sheet_margin_px
        gutter = self._settings.sheet_gutter_px
        cell_w, cell_h = cell_physical_size.width_px, cell_physical_size.height_px
        if cell_w <= 0 or cell_h <= 0:
            raise ValueError(f"Некорректный размер ячейки: {cell_w}x{cell_h}")

        columns = self._fit_count(sheet_size.width_px, cell_w, margin, gutter)
        rows = self._fit_count(sheet_size.height_px, cell_h, margin, gutter)
        if columns < 1 or rows < 1:
            raise CellTooLarge(
                f"Ячейка {cell_w}x{cell_h} не помещается на лист "
                f"{sheet_size.width_px}x{sheet_size.height_px} (поле {margin}, зазор {gutter})"
            )

        origin_x = margin + self._leading_pad(sheet_size.width_px, columns, cell_w, margin, gutter)
        origin_y = margin + self._leading_pad(sheet_size.height_px, rows, cell_h, margin, gutter)
        layout = SheetLayout(
            columns=columns,
            rows=rows,
            cell_width=cell_w,
            cell_height=cell_h,
            margin=margin,
            gutter=gutter,
            origin_x=origin_x,
            origin_y=origin_y,
        )
        logger.debug(
            "Sheet layout %dx%d cells (%d total), origin (%d, %d)",
            columns, rows, layout.count, origin_x, origin_y,
        )
        return layout

    def render_sheet(
        self,
        cell: RasterBuffer,
        sheet_size: PhysicalSize,
        cell_physical_size: PhysicalSize,
        draw_guides: bool = True,
    ) -> RasterBuffer:
        """Раскладывает копии `cell` по листу `sheet_size`.

        Raises:
            ValueError: размер `cell` не совпадает с `cell_physical_size` или
                у листа и ячейки разный DPI.
            CellTooLarge: ячейка не помещается на лист.
        """
        if cell.size != cell_physical_size.size:
            raise ValueError(
                f"Размер ячейки {cell.width}x{cell.height} не совпадает с ожидаемым "
                f"{cell_physical_size.width_px}x{cell_physical_size.height_px}"
            )
        if cell_physical_size.dpi != sheet_size.dpi:
            raise ValueError(
                f"Ячейка ({cell_physical_size.dpi} DPI) должна быть в разрешении листа ({sheet_size.dpi} DPI)"
            )

        layout = self.compute_layout(sheet_size, cell_physical_size)
        sheet = np.empty((sheet_size.height_px, sheet_size.width_px, 3), dtype=np.uint8)
        sheet[...] = self._settings.background_color

        for x, y in layout.cell_origins():
            sheet[y:y + layout.cell_height, x:x + layout.cell_width] = cell.pixels

        if draw_guides:
            self._draw_guides(sheet, layout)
        return RasterBuffer(sheet)

    # ---------- Вспомогательные функции ----------
    @staticmethod
    def _fit_count(sheet_px: int, cell_px: int, margin: int, gutter: int) -> int:
        return max(0, (sheet_px - 2 * margin + gutter) // (cell_px + gutter))

    @staticmethod
    def _leading_pad(sheet_px: int, count: int, cell_px: int, margin: int, gutter: int) -> int:
        """Левая/верхняя доля остатка; лишний пиксель достаётся правому/нижнему полю."""
        used = count * cell_px + (count - 1) * gutter
        leftover = sheet_px - 2 * margin - used
        return leftover // 2

    def _draw_guides(self, sheet: np.ndarray, layout: SheetLayout) -> None:
        """
        Угловые метки реза: отрезки на продолжении краёв ячейки, снаружи ячейки.
        Во внутреннем зазоре метка доходит до его середины, во внешнем поле
        ограничена `guide_tick_px`.
        """
        color = self._settings.guide_color
        width = self._settings.guide_width_px
        tick = self._settings.guide_tick_px
        sheet_h, sheet_w = sheet.shape[:2]
        inner = layout.gutter // 2

        for index, (x0, y0) in enumerate(layout.cell_origins()):
            row, col = divmod(index, layout.columns)
            x1 = x0 + layout.cell_width
            y1 = y0 + layout.cell_height

            left = min(tick, inner if col > 0 else x0)
            right = min(tick, inner if col < layout.columns - 1 else sheet_w - x1)
            up = min(tick, inner if row > 0 else y0)
            down = min(tick, inner if row < layout.rows - 1 else sheet_h - y1)

            # горизонтальные метки на линиях верхнего и нижнего краёв
            for y_start in (y0, y1 - width):
                rows_slice = slice(y_start, y_start + width)
                self._fill(sheet, rows_slice, slice(x0 - left, x0), color)
                self._fill(sheet, rows_slice, slice(x1, x1 + right), color)
            # вертикальные метки на линиях левого и правого краёв
            for x_start in (x0, x1 - width):
                cols_slice = slice(x_start, x_start + width)
                self._fill(sheet, slice(y0 - up, y0), cols_slice, color)
                self._fill(sheet, slice(y1, y1 + down), cols_slice, color)

    @staticmethod
    def _fill(sheet: np.ndarray, rows: slice, cols: slice, color: Tuple[int, int, int]) -> None:
        if rows.stop <= rows.start or cols.stop <= cols.start:
            return
        sheet[rows, cols] = color


_default_compositor = SheetCompositor()


def render_sheet(
    cell: RasterBuffer,
    sheet_size: PhysicalSize,
    cell_physical_size: PhysicalSize,
    draw_guides: bool = True,
) -> RasterBuffer:
    """Компоновка с настройками по умолчанию; см. `SheetCompositor.render_sheet`."""
    return _default_compositor.render_sheet(cell, sheet_size, cell_physical_size, draw_guides=draw_guides)
