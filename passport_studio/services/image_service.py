"""Загрузка исходных портретов с диска или из памяти.

Принципы:
- SRP: класс отвечает только за декодирование и базовое извлечение свойств.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from passport_studio.config import BACKGROUND_COLOR
from passport_studio.errors import UnsupportedImage
from passport_studio.models.image_model import ImageData

logger = logging.getLogger(__name__)


class ImageService:
    def __init__(self, background_color: Tuple[int, int, int] = BACKGROUND_COLOR) -> None:
        self._background_color = background_color

    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` в режиме RGB, размерами, исходным режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            UnsupportedImage: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        with path.open("rb") as fh:
            return self._decode(fh.read(), name=path.name, size_bytes=size_bytes)

    def load_bytes(self, data: bytes, name: str = "photo") -> ImageData:
        """Декодирует изображение из байтов (например, загруженных пользователем)."""
        return self._decode(data, name=name, size_bytes=len(data))

    def _decode(self, data: bytes, name: str, size_bytes: Optional[int]) -> ImageData:
        try:
            with Image.open(io.BytesIO(data)) as opened:
                opened.load()
                # телефонные снимки хранят поворот в EXIF
                oriented = ImageOps.exif_transpose(opened)
                source_mode = opened.mode
                rgb = self._to_rgb(oriented)
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            raise UnsupportedImage(f"Файл не является изображением: {name}") from exc

        width, height = rgb.size
        if width == 0 or height == 0:
            raise UnsupportedImage(f"Пустое изображение: {name}")
        logger.debug("Loaded %s: %dx%d, mode %s", name, width, height, source_mode)

        return ImageData(
            name=name,
            pil_image=rgb,
            width=width,
            height=height,
            mode=source_mode,
            size_bytes=size_bytes,
        )

    def _to_rgb(self, image: Image.Image) -> Image.Image:
        """Приводит к RGB; прозрачность заливается цветом фона (для печати альфа не нужна)."""
        if image.mode == "RGB":
            return image.copy()
        if image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, self._background_color)
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return image.convert("RGB")
