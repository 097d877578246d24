"""Рендер фото на паспорт: кадр + поворот -> растр фиксированного размера.

Алгоритм (обратное отображение):
1. Для каждого пикселя выхода берём его центр и переводим в систему координат
   кадра с началом в центре кадра (неравномерный масштаб по осям допустим,
   выход всегда ровно `output_size`).
2. Поворачиваем точку вокруг центра кадра. Положительный угол означает
   поворот изображения по часовой стрелке, поэтому точку выборки вращаем
   в обратную сторону.
3. Билинейная интерполяция по исходнику; координаты за границей
   прижимаются к ближайшему краевому пикселю (clamp-to-edge).

Вычисления в float64, итоговое округление `np.rint` делает результат
побайтно воспроизводимым.
"""
from __future__ import annotations

import logging
import math
from typing import Tuple, Union

import numpy as np
from PIL import Image

from passport_studio.config import DEFAULT_SETTINGS, StudioSettings
from passport_studio.errors import UnsupportedImage
from passport_studio.models.geometry import CropRegion, PhysicalSize, normalize_rotation
from passport_studio.models.image_model import ImageData
from passport_studio.models.raster import RasterBuffer

logger = logging.getLogger(__name__)

SourceImage = Union[ImageData, Image.Image, RasterBuffer]


class PortraitRenderer:
    def __init__(self, settings: StudioSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings

    def render_portrait(
        self,
        source_image: SourceImage,
        crop: CropRegion,
        rotation: float,
        output_size: PhysicalSize,
    ) -> RasterBuffer:
        """Переносит выбранный кадр исходника в растр размера `output_size`.

        Args:
            source_image: `ImageData`, изображение PIL или `RasterBuffer`.
            crop: Кадр в пикселях исходника.
            rotation: Угол в градусах (по часовой), вокруг центра кадра.
            output_size: Целевой размер выхода.

        Returns:
            Новый `RasterBuffer` ровно `output_size.width_px x output_size.height_px`.

        Raises:
            UnsupportedImage: исходник нельзя представить как сетку пикселей.
            InvalidCropRegion: кадр пустой или выходит за границы исходника.
        """
        src = self._source_pixels(source_image)
        src_h, src_w = src.shape[:2]
        crop.validate(src_w, src_h)
        angle = normalize_rotation(rotation, self._settings.rotation_limit_deg)

        out_w, out_h = output_size.width_px, output_size.height_px
        if out_w <= 0 or out_h <= 0:
            raise ValueError(f"Некорректный размер вывода: {out_w}x{out_h}")

        logger.debug(
            "Rendering portrait %dx%d from crop %.1fx%.1f+%.1f+%.1f, rotation %.2f°",
            out_w, out_h, crop.width, crop.height, crop.x, crop.y, angle,
        )
        xs, ys = self._sampling_grid(crop, angle, out_w, out_h)
        return RasterBuffer(self._bilinear(src, xs, ys))

    # ---------- Вспомогательные функции ----------
    def _source_pixels(self, source_image: SourceImage) -> np.ndarray:
        """
        Возвращает исходник как массив uint8 (H, W, 3).
        """
        if isinstance(source_image, RasterBuffer):
            arr = source_image.pixels
        elif isinstance(source_image, (ImageData, Image.Image)):
            image = source_image.pil_image if isinstance(source_image, ImageData) else source_image
            try:
                rgb = image if image.mode == "RGB" else image.convert("RGB")
                arr = np.asarray(rgb, dtype=np.uint8)
            except (OSError, ValueError) as exc:
                raise UnsupportedImage(f"Не удалось получить пиксели изображения: {exc}") from exc
        else:
            raise UnsupportedImage(f"Неподдерживаемый тип исходника: {type(source_image).__name__}")

        if arr.ndim != 3 or arr.shape[2] != 3 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise UnsupportedImage(f"Исходник не является RGB-растром: {arr.shape}")
        return arr

    def _sampling_grid(
        self, crop: CropRegion, angle_deg: float, out_w: int, out_h: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Координаты выборки в исходнике (непрерывные, центр пикселя k = k + 0.5)
        для каждого пикселя выхода; формы (out_h, out_w).
        """
        cx, cy = crop.center
        scale_x = crop.width / out_w
        scale_y = crop.height / out_h

        # смещения центров пикселей выхода относительно центра кадра
        u = (np.arange(out_w, dtype=np.float64) + 0.5) * scale_x - crop.width / 2.0
        v = (np.arange(out_h, dtype=np.float64) + 0.5) * scale_y - crop.height / 2.0
        uu, vv = np.meshgrid(u, v)

        theta = math.radians(angle_deg)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        xs = cx + uu * cos_t + vv * sin_t
        ys = cy - uu * sin_t + vv * cos_t
        return xs, ys

    def _bilinear(self, src: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Билинейная выборка с прижатием к краям. Никогда не читает за пределами массива.
        """
        src_h, src_w = src.shape[:2]
        fx = np.clip(xs - 0.5, 0.0, src_w - 1)
        fy = np.clip(ys - 0.5, 0.0, src_h - 1)

        x0 = np.floor(fx).astype(np.intp)
        y0 = np.floor(fy).astype(np.intp)
        x1 = np.minimum(x0 + 1, src_w - 1)
        y1 = np.minimum(y0 + 1, src_h - 1)
        wx = (fx - x0)[..., None]
        wy = (fy - y0)[..., None]

        def at(yi: np.ndarray, xi: np.ndarray) -> np.ndarray:
            return src[yi, xi].astype(np.float64)

        top = at(y0, x0) * (1.0 - wx) + at(y0, x1) * wx
        bottom = at(y1, x0) * (1.0 - wx) + at(y1, x1) * wx
        out = top * (1.0 - wy) + bottom * wy
        return np.clip(np.rint(out), 0, 255).astype(np.uint8)


_default_renderer = PortraitRenderer()


def render_portrait(
    source_image: SourceImage,
    crop: CropRegion,
    rotation: float,
    output_size: PhysicalSize,
) -> RasterBuffer:
    """Рендер с настройками по умолчанию; см. `PortraitRenderer.render_portrait`."""
    return _default_renderer.render_portrait(source_image, crop, rotation, output_size)
