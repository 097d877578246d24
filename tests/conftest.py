from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from passport_studio.config import DEFAULT_SETTINGS
from passport_studio.models.raster import RasterBuffer


@pytest.fixture
def gradient_image() -> Image.Image:
    """1200x1600: R растёт по x, G по y, B постоянный. Билинейная выборка линейной функции точна."""
    w, h = 1200, 1600
    xs = np.arange(w, dtype=np.float64)
    ys = np.arange(h, dtype=np.float64)
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[..., 0] = np.rint(xs / (w - 1) * 255)[None, :]
    arr[..., 1] = np.rint(ys / (h - 1) * 255)[:, None]
    arr[..., 2] = 77
    return Image.fromarray(arr, mode="RGB")


@pytest.fixture
def solid_image() -> Image.Image:
    return Image.new("RGB", (300, 400), (200, 30, 60))


@pytest.fixture
def passport_cell() -> RasterBuffer:
    w, h = DEFAULT_SETTINGS.passport_size.size
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[...] = (210, 160, 140)
    arr[0, 0] = (1, 2, 3)
    return RasterBuffer(arr)


@pytest.fixture
def portrait_file(tmp_path, gradient_image):
    path = tmp_path / "portrait.png"
    gradient_image.save(path)
    return path
