"""Контроллер студии: оркестрация загрузки, рендера и экспорта без UI.

SOLID:
- SRP: класс управляет состоянием редактирования и связями между сервисами
  (без растровой логики).
- DIP: зависит от сервисов как от ролей; конкретные реализации инкапсулированы.
Clean Code:
- Каждое изменение входных данных увеличивает номер поколения; результат
  устаревшего рендера отбрасывается, а не прерывается.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from passport_studio.config import DEFAULT_SETTINGS, StudioSettings
from passport_studio.models.geometry import CropRegion, normalize_rotation
from passport_studio.models.image_model import ImageData
from passport_studio.models.raster import RasterBuffer
from passport_studio.services.export_service import ExportService, export_filename, output_stem
from passport_studio.services.image_service import ImageService
from passport_studio.services.portrait_service import PortraitRenderer
from passport_studio.services.sheet_service import SheetCompositor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    passport: RasterBuffer
    sheet: RasterBuffer


@dataclass
class StudioController:
    """Связывает ввод пользователя (кадр, поворот) с конвейером рендера.

    Ответственности:
    - Загрузка исходника через `ImageService`.
    - Рендер фото и листа через `PortraitRenderer` и `SheetCompositor`, с кэшем.
    - Отбрасывание устаревших результатов фонового рендера.
    - Экспорт обоих файлов через `ExportService`.
    """
    settings: StudioSettings = DEFAULT_SETTINGS
    draw_guides: bool = True

    _image_service: ImageService = field(init=False)
    _renderer: PortraitRenderer = field(init=False)
    _compositor: SheetCompositor = field(init=False)
    _exporter: ExportService = field(init=False)
    _current_image: Optional[ImageData] = field(default=None, init=False)
    _crop: Optional[CropRegion] = field(default=None, init=False)
    _rotation: float = field(default=0.0, init=False)
    _generation: int = field(default=0, init=False)
    _result: Optional[RenderResult] = field(default=None, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def __post_init__(self) -> None:
        self._image_service = ImageService(self.settings.background_color)
        self._renderer = PortraitRenderer(self.settings)
        self._compositor = SheetCompositor(self.settings)
        self._exporter = ExportService(self.settings)

    # ---- State ----
    @property
    def image(self) -> Optional[ImageData]:
        return self._current_image

    @property
    def crop(self) -> Optional[CropRegion]:
        return self._crop

    @property
    def rotation(self) -> float:
        return self._rotation

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def stem(self) -> str:
        return output_stem(self._current_image.name) if self._current_image else "photo"

    def load(self, file_path: str | Path) -> ImageData:
        """Загружает файл; кадр сбрасывается на центрированный при zoom=1, поворот на 0."""
        return self._set_image(self._image_service.load_image(file_path))

    def load_bytes(self, data: bytes, name: str = "photo") -> ImageData:
        return self._set_image(self._image_service.load_bytes(data, name=name))

    def set_crop(self, crop: CropRegion) -> None:
        image = self._require_image()
        crop.validate(image.width, image.height)
        with self._lock:
            if self._current_image is not image:
                # кадр проверен для изображения, которое уже заменено
                logger.debug("Discarding crop validated against a replaced image")
                return
            self._crop = crop
            self._invalidate()

    def set_zoom(self, zoom: float, offset: Tuple[float, float] = (0.0, 0.0)) -> CropRegion:
        """Кадр паспортных пропорций по центру с заданным увеличением."""
        image = self._require_image()
        crop = CropRegion.centered(
            image.width,
            image.height,
            self.settings.passport_size.aspect,
            zoom=zoom,
            offset=offset,
            zoom_range=self.settings.zoom_range,
        )
        self.set_crop(crop)
        return crop

    def set_rotation(self, degrees: float) -> None:
        rotation = normalize_rotation(degrees, self.settings.rotation_limit_deg)
        with self._lock:
            self._rotation = rotation
            self._invalidate()

    def reset(self) -> None:
        with self._lock:
            self._current_image = None
            self._crop = None
            self._rotation = 0.0
            self._invalidate()

    # ---- Rendering ----
    def render(self) -> RenderResult:
        """Синхронный рендер обоих растров; повторный вызов без изменений берёт кэш."""
        with self._lock:
            if self._result is not None:
                return self._result
            generation, job = self._snapshot()
        result = self._run(*job)
        with self._lock:
            if generation == self._generation:
                self._result = result
        return result

    def render_async(self, executor: Executor) -> "Future[Optional[RenderResult]]":
        """Рендер в пуле исполнителей.

        Future разрешается в `None`, если за время рендера входные данные
        изменились: такой результат не кэшируется и не должен показываться.
        """
        with self._lock:
            generation, job = self._snapshot()
        return executor.submit(self._run_generation, generation, job)

    def export(self, out_dir: str | Path, fmt: str = "JPEG") -> Dict[str, Path]:
        """Сохраняет `<stem>-passport.*` и `<stem>-a4-sheet.*` в каталог."""
        result = self.render()
        directory = Path(out_dir)
        stem = self.stem
        return {
            "passport": self._exporter.save(result.passport, directory / export_filename(stem, "passport", fmt), fmt),
            "sheet": self._exporter.save(result.sheet, directory / export_filename(stem, "sheet", fmt), fmt),
        }

    def preview_urls(self, fmt: str = "JPEG") -> Dict[str, str]:
        result = self.render()
        return {
            "passport": self._exporter.to_data_url(result.passport, fmt),
            "sheet": self._exporter.to_data_url(result.sheet, fmt),
        }

    # ---- Helpers ----
    def _set_image(self, image: ImageData) -> ImageData:
        with self._lock:
            self._current_image = image
            self._rotation = 0.0
            self._crop = CropRegion.centered(
                image.width,
                image.height,
                self.settings.passport_size.aspect,
                zoom_range=self.settings.zoom_range,
            )
            self._invalidate()
        logger.info("Loaded %s (%dx%d)", image.name, image.width, image.height)
        return image

    def _require_image(self) -> ImageData:
        if self._current_image is None:
            raise RuntimeError("Изображение не загружено")
        return self._current_image

    def _invalidate(self) -> None:
        self._generation += 1
        self._result = None

    def _snapshot(self) -> Tuple[int, Tuple[ImageData, CropRegion, float]]:
        image = self._require_image()
        if self._crop is None:
            raise RuntimeError("Кадр не задан")
        return self._generation, (image, self._crop, self._rotation)

    def _run(self, image: ImageData, crop: CropRegion, rotation: float) -> RenderResult:
        passport_size = self.settings.passport_size
        passport = self._renderer.render_portrait(image, crop, rotation, passport_size)
        sheet = self._compositor.render_sheet(
            passport, self.settings.sheet_size, passport_size, draw_guides=self.draw_guides
        )
        return RenderResult(passport=passport, sheet=sheet)

    def _run_generation(
        self, generation: int, job: Tuple[ImageData, CropRegion, float]
    ) -> Optional[RenderResult]:
        result = self._run(*job)
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale render (generation %d, current %d)", generation, self._generation)
                return None
            self._result = result
        return result
