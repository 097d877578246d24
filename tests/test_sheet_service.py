import numpy as np
import pytest

from passport_studio.config import DEFAULT_SETTINGS, StudioSettings
from passport_studio.errors import CellTooLarge
from passport_studio.models.geometry import PhysicalSize
from passport_studio.models.raster import RasterBuffer
from passport_studio.services.sheet_service import SheetCompositor, render_sheet

A4 = DEFAULT_SETTINGS.sheet_size
PASSPORT = DEFAULT_SETTINGS.passport_size
GREY = np.array(DEFAULT_SETTINGS.guide_color, dtype=np.uint8)
WHITE = np.array(DEFAULT_SETTINGS.background_color, dtype=np.uint8)


def _cell(width, height, color=(10, 20, 30)):
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[...] = color
    return RasterBuffer(arr)


def test_a4_layout_follows_fit_formula():
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    assert layout.columns == (2480 - 300 + 20) // (413 + 20) == 5
    assert layout.rows == (3508 - 300 + 20) // (531 + 20) == 5
    assert layout.count == 25
    assert (layout.margin, layout.gutter) == (150, 20)


def test_a4_layout_is_centered_with_extra_pixel_right_and_bottom():
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    # 2480 - 300 - (5*413 + 4*20) = 35 -> 17 слева, 18 справа
    assert layout.grid_width == 2145
    assert layout.origin_x == 150 + 17
    right_border = 2480 - (layout.origin_x + layout.grid_width)
    assert right_border == 150 + 18
    # 3508 - 300 - (5*531 + 4*20) = 473 -> 236 сверху, 237 снизу
    assert layout.origin_y == 150 + 236
    assert 3508 - (layout.origin_y + layout.grid_height) == 150 + 237


def test_exact_divisor_has_no_leftover_and_even_spacing():
    sheet = PhysicalSize(1000, 800, 300)
    cell = PhysicalSize(185, 160, 300)
    settings = StudioSettings(sheet_margin_px=100, sheet_gutter_px=20)
    layout = SheetCompositor(settings).compute_layout(sheet, cell)
    # 4*185 + 3*20 = 800 = 1000 - 2*100; 3*160 + 2*20 = 520 < 600
    assert layout.columns == 4
    assert layout.origin_x == 100
    assert layout.grid_width == 800
    xs = sorted({x for x, _ in layout.cell_origins()})
    assert xs == [100, 305, 510, 715]
    assert {b - a for a, b in zip(xs, xs[1:])} == {205}


def test_cell_origins_are_row_major():
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    origins = list(layout.cell_origins())
    assert len(origins) == 25
    assert origins[0] == (layout.origin_x, layout.origin_y)
    assert origins[1] == (layout.origin_x + 433, layout.origin_y)
    assert origins[5] == (layout.origin_x, layout.origin_y + 551)


def test_cell_too_large_raises():
    with pytest.raises(CellTooLarge):
        SheetCompositor().compute_layout(PhysicalSize(500, 500, 300), PhysicalSize(300, 100, 300))
    with pytest.raises(CellTooLarge):
        render_sheet(_cell(413, 531), PhysicalSize(600, 600, 300), PASSPORT)


def test_cell_exactly_filling_interior_fits():
    settings = StudioSettings(sheet_margin_px=150, sheet_gutter_px=20)
    layout = SheetCompositor(settings).compute_layout(PhysicalSize(713, 831, 300), PASSPORT)
    assert (layout.columns, layout.rows) == (1, 1)
    assert (layout.origin_x, layout.origin_y) == (150, 150)


def test_render_sheet_places_every_cell(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT)
    assert sheet.size == (2480, 3508)
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    for x, y in layout.cell_origins():
        block = sheet.pixels[y:y + 531, x:x + 413]
        assert np.array_equal(block, passport_cell.pixels)
    # маркер левого верхнего пикселя встречается ровно 25 раз
    marker = np.all(sheet.pixels == np.array([1, 2, 3], dtype=np.uint8), axis=-1)
    assert int(marker.sum()) == 25


def test_render_sheet_background_is_white(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT).pixels
    assert np.array_equal(sheet[0, 0], WHITE)
    assert np.array_equal(sheet[-1, -1], WHITE)
    assert np.array_equal(sheet[1700, 10], WHITE)


def test_guides_at_every_internal_boundary(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT).pixels
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    for index, (x0, y0) in enumerate(layout.cell_origins()):
        row, col = divmod(index, layout.columns)
        x1, y1 = x0 + 413, y0 + 531
        if col < layout.columns - 1:
            # горизонтальная метка верхнего края в зазоре справа, до его середины
            assert np.array_equal(sheet[y0, x1], GREY)
            assert np.array_equal(sheet[y0, x1 + 9], GREY)
            assert np.array_equal(sheet[y1 - 1, x1 + 5], GREY)
        if row < layout.rows - 1:
            assert np.array_equal(sheet[y1, x0], GREY)
            assert np.array_equal(sheet[y1 + 9, x1 - 1], GREY)


def test_guides_meet_at_gutter_midpoint_without_overlap(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT).pixels
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    x0, y0 = layout.origin_x, layout.origin_y
    x1 = x0 + 413
    # середина зазора в полосе между краевыми линиями остаётся фоном
    assert np.array_equal(sheet[y0 + 200, x1 + 10], WHITE)
    # метки соседних ячеек сходятся в середине
    assert np.array_equal(sheet[y0, x1 + 10], GREY)
    assert np.array_equal(sheet[y0, x1 + 19], GREY)


def test_outer_ticks_limited_to_tick_length(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT).pixels
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    x0, y0 = layout.origin_x, layout.origin_y
    tick = DEFAULT_SETTINGS.guide_tick_px
    assert np.array_equal(sheet[y0, x0 - 1], GREY)
    assert np.array_equal(sheet[y0, x0 - tick], GREY)
    assert np.array_equal(sheet[y0, x0 - tick - 1], WHITE)
    assert np.array_equal(sheet[y0 - tick, x0], GREY)
    assert np.array_equal(sheet[y0 - tick - 1, x0], WHITE)


def test_guides_never_cover_cells(passport_cell):
    with_guides = render_sheet(passport_cell, A4, PASSPORT).pixels
    layout = SheetCompositor().compute_layout(A4, PASSPORT)
    for x, y in layout.cell_origins():
        assert np.array_equal(with_guides[y:y + 531, x:x + 413], passport_cell.pixels)


def test_sheet_without_guides(passport_cell):
    sheet = render_sheet(passport_cell, A4, PASSPORT, draw_guides=False).pixels
    grey = np.all(sheet == GREY, axis=-1)
    assert not grey.any()


def test_wider_guides():
    settings = StudioSettings(guide_width_px=2)
    cell = _cell(413, 531)
    sheet = SheetCompositor(settings).render_sheet(cell, A4, PASSPORT).pixels
    layout = SheetCompositor(settings).compute_layout(A4, PASSPORT)
    x0, y0 = layout.origin_x, layout.origin_y
    assert np.array_equal(sheet[y0, x0 - 5], GREY)
    assert np.array_equal(sheet[y0 + 1, x0 - 5], GREY)
    assert np.array_equal(sheet[y0 + 2, x0 - 5], WHITE)


def test_render_sheet_is_deterministic(passport_cell):
    assert render_sheet(passport_cell, A4, PASSPORT) == render_sheet(passport_cell, A4, PASSPORT)


def test_cell_size_mismatch_raises():
    with pytest.raises(ValueError):
        render_sheet(_cell(400, 531), A4, PASSPORT)


def test_dpi_mismatch_raises():
    with pytest.raises(ValueError):
        render_sheet(_cell(413, 531), PhysicalSize(2480, 3508, 600), PASSPORT)


def test_input_cell_not_modified(passport_cell):
    before = passport_cell.tobytes()
    render_sheet(passport_cell, A4, PASSPORT)
    assert passport_cell.tobytes() == before
