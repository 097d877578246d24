"""Модели данных для исходных изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель исходного портрета и его метаданные.

    Fields:
        name: Имя файла (или условное имя для байтов из памяти).
        pil_image: Декодированное изображение PIL в режиме RGB.
        width: Ширина после учёта EXIF-ориентации, px.
        height: Высота после учёта EXIF-ориентации, px.
        mode: Исходный режим PIL, например "RGBA" или "P".
        size_bytes: Размер файла, если доступен.
    """
    name: str
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]
