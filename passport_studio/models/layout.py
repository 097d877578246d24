"""Раскладка ячеек на листе печати."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class SheetLayout:
    """Вычисляемая сетка ячеек; хранится только как результат расчёта.

    Fields:
        columns, rows: Число целых ячеек по горизонтали и вертикали.
        cell_width, cell_height: Размер ячейки, px.
        margin: Внешнее поле листа, px.
        gutter: Зазор между соседними ячейками, px.
        origin_x, origin_y: Левый верхний угол первой ячейки (поле + центрирование), px.
    """
    columns: int
    rows: int
    cell_width: int
    cell_height: int
    margin: int
    gutter: int
    origin_x: int
    origin_y: int

    @property
    def count(self) -> int:
        return self.columns * self.rows

    @property
    def grid_width(self) -> int:
        return self.columns * self.cell_width + (self.columns - 1) * self.gutter

    @property
    def grid_height(self) -> int:
        return self.rows * self.cell_height + (self.rows - 1) * self.gutter

    def cell_origins(self) -> Iterator[Tuple[int, int]]:
        """Левые верхние углы ячеек построчно (слева направо, сверху вниз)."""
        for row in range(self.rows):
            for col in range(self.columns):
                yield (
                    self.origin_x + col * (self.cell_width + self.gutter),
                    self.origin_y + row * (self.cell_height + self.gutter),
                )
