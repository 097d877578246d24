"""Экспорт растров: кодирование в JPEG/PNG, data URL для превью, имена файлов."""
from __future__ import annotations

import base64
import io
import logging
import re
from pathlib import Path

from passport_studio.config import DEFAULT_SETTINGS, StudioSettings
from passport_studio.models.raster import RasterBuffer

logger = logging.getLogger(__name__)

_FORMATS = {
    "JPEG": ("image/jpeg", "jpg"),
    "PNG": ("image/png", "png"),
}

OUTPUT_KINDS = {
    "passport": "passport",
    "sheet": "a4-sheet",
}


def _normalize_format(fmt: str) -> str:
    key = fmt.upper()
    if key == "JPG":
        key = "JPEG"
    if key not in _FORMATS:
        raise ValueError(f"Неподдерживаемый формат: {fmt}")
    return key


class ExportService:
    def __init__(self, settings: StudioSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings

    def encode(self, buffer: RasterBuffer, fmt: str = "JPEG") -> bytes:
        """Кодирует буфер в байты файла; DPI записывается в метаданные для печати."""
        key = _normalize_format(fmt)
        dpi = self._settings.dpi
        options = {"dpi": (dpi, dpi)}
        if key == "JPEG":
            options["quality"] = self._settings.jpeg_quality

        out = io.BytesIO()
        buffer.to_image().save(out, format=key, **options)
        data = out.getvalue()
        logger.debug("Encoded %dx%d buffer to %s (%d bytes)", buffer.width, buffer.height, key, len(data))
        return data

    def to_data_url(self, buffer: RasterBuffer, fmt: str = "JPEG") -> str:
        """Превью для встраивания: `data:image/jpeg;base64,...`."""
        key = _normalize_format(fmt)
        mime, _ext = _FORMATS[key]
        payload = base64.b64encode(self.encode(buffer, key)).decode("ascii")
        return f"data:{mime};base64,{payload}"

    def save(self, buffer: RasterBuffer, path: str | Path, fmt: str = "JPEG") -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.encode(buffer, fmt))
        logger.info("Saved %s (%dx%d)", target, buffer.width, buffer.height)
        return target


def output_stem(filename: str) -> str:
    """Имя файла без расширения; пустое имя превращается в "photo"."""
    stem = re.sub(r"\.[^.]+$", "", Path(filename).name)
    return stem or "photo"


def export_filename(stem: str, kind: str, fmt: str = "JPEG") -> str:
    """`<stem>-passport.jpg` или `<stem>-a4-sheet.jpg`."""
    if kind not in OUTPUT_KINDS:
        raise ValueError(f"Неизвестный тип вывода: {kind}")
    _mime, ext = _FORMATS[_normalize_format(fmt)]
    return f"{stem}-{OUTPUT_KINDS[kind]}.{ext}"
