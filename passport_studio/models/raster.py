"""Растровый буфер: результат каждой стадии конвейера.

Принципы:
- Владение: буфер владеет собственной копией пикселей и закрыт на запись,
  поэтому следующая стадия не может испортить результат предыдущей.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class RasterBuffer:
    """Неизменяемая сетка RGB-пикселей формы (H, W, 3), dtype uint8."""
    pixels: np.ndarray

    def __post_init__(self) -> None:
        source = np.asarray(self.pixels)
        if source.dtype != np.uint8:
            raise ValueError(f"Ожидается dtype uint8, получено {source.dtype}")
        arr = np.array(source, copy=True)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(f"Ожидается массив (H, W, 3), получено {arr.shape}")
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_image(cls, image: Image.Image) -> "RasterBuffer":
        if image.mode != "RGB":
            image = image.convert("RGB")
        return cls(np.asarray(image, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        """Возвращает новую PIL-картинку (копию пикселей)."""
        return Image.fromarray(np.ascontiguousarray(self.pixels), mode="RGB")

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    __hash__ = None  # type: ignore[assignment]
