"""Ошибки ядра Passport Studio.

Все ошибки наследуют `PassportStudioError` и `ValueError`, поэтому вызывающая
сторона может ловить как общий базовый класс, так и привычный `ValueError`.
"""
from __future__ import annotations


class PassportStudioError(Exception):
    """Базовая ошибка приложения."""


class InvalidCropRegion(PassportStudioError, ValueError):
    """Прямоугольник кадрирования некорректен или выходит за границы исходника."""


class UnsupportedImage(PassportStudioError, ValueError):
    """Исходник не удаётся декодировать в сетку пикселей."""


class CellTooLarge(PassportStudioError, ValueError):
    """Ячейка (фото на паспорт) не помещается на лист с учётом полей и зазоров."""
