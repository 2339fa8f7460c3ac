from __future__ import annotations

import pytest

from pourover_trainer.config import PourConfig
from pourover_trainer.cup_bed import AccumulationField, circle_mask

CENTER = (400, 300)
CUP_R = 180
RING_T = 32  # bed radius = floor(180 - 32 * 1.3) = 138


def _deposit(field: AccumulationField, point: tuple[float, float], ml: float) -> bool:
    return field.deposit_at(point, ml, cup_center=CENTER, cup_radius=CUP_R, ring_thickness=RING_T)


def test_three_by_three_grid_has_five_active_cells() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    assert field.active_count == 5
    mask = field.active_mask
    for row, col in ((0, 0), (2, 0), (0, 2), (2, 2)):
        assert mask[row][col] is False
    for row, col in ((1, 1), (0, 1), (2, 1), (1, 0), (1, 2)):
        assert mask[row][col] is True


def test_unit_circle_keeps_every_centre_of_a_three_by_three_grid() -> None:
    # Corner centres sit at sqrt(8) / 3 = 0.943, inside the unit circle.
    assert sum(sum(row) for row in circle_mask(3)) == 9
    assert sum(sum(row) for row in circle_mask(3, 0.8)) == 5


def test_active_count_depends_only_on_resolution() -> None:
    assert sum(sum(row) for row in circle_mask(2, 0.8)) == 4
    assert sum(sum(row) for row in circle_mask(8)) == 52
    assert sum(sum(row) for row in circle_mask(8, 0.8)) == 32

    field = AccumulationField(PourConfig(grid_resolution=8))
    _deposit(field, CENTER, 10.0)
    assert field.active_count == 32


def test_pour_over_inactive_corner_cell_is_dropped() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    corner = (CENTER[0] - 90, CENTER[1] - 90)  # 127 px out, inside the 138 px bed
    assert field.cell_index(corner, cup_center=CENTER, cup_radius=CUP_R) == (0, 0)
    assert _deposit(field, corner, 5.0) is False
    assert field.total_volume == 0.0
    assert field.volume_at(0, 0) == 0.0


def test_deposit_lands_in_cell_under_point() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    assert _deposit(field, CENTER, 2.5) is True
    assert field.volume_at(1, 1) == pytest.approx(2.5)

    # Left of centre -> column 0, middle row.
    assert _deposit(field, (CENTER[0] - 120, CENTER[1]), 1.0) is True
    assert field.volume_at(1, 0) == pytest.approx(1.0)

    # Below centre (screen y grows downward) -> row 2.
    assert _deposit(field, (CENTER[0], CENTER[1] + 120), 1.0) is True
    assert field.volume_at(2, 1) == pytest.approx(1.0)


def test_deposits_conserve_volume() -> None:
    field = AccumulationField(PourConfig(grid_resolution=5))
    accepted = 0.0
    points = [(400, 300), (350, 260), (460, 330), (400, 420), (300, 300), (399.5, 181)]
    amounts = [0.1, 2.25, 3.0, 0.017, 7.5, 1.0]
    for point, ml in zip(points, amounts):
        if _deposit(field, point, ml):
            accepted += ml

    assert field.total_volume == pytest.approx(accepted)
    assert field.total_volume == pytest.approx(sum(sum(row) for row in field.cell_volumes()))


def test_non_positive_deposit_is_ignored() -> None:
    field = AccumulationField(PourConfig())
    assert _deposit(field, CENTER, 0.0) is False
    assert _deposit(field, CENTER, -3.0) is False
    assert field.total_volume == 0.0


def test_deposit_outside_bed_is_rejected() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    assert field.bed_radius(CUP_R, RING_T) == 138

    before = field.cell_volumes()
    # Inside the cup but past the bed edge.
    assert _deposit(field, (CENTER[0] + 139, CENTER[1]), 5.0) is False
    assert _deposit(field, (CENTER[0] + 100, CENTER[1] + 100), 5.0) is False
    # Well outside the cup.
    assert _deposit(field, (0, 0), 5.0) is False

    assert field.cell_volumes() == before
    assert field.total_volume == 0.0


def test_bed_edge_is_inclusive_and_indexed_by_full_cup_radius() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    assert _deposit(field, (CENTER[0] + 138, CENTER[1]), 1.0) is True
    # 138 / 180 = 0.767 of the full radius -> rightmost column.
    assert field.volume_at(1, 2) == pytest.approx(1.0)


def test_bed_radius_has_minimum() -> None:
    field = AccumulationField(PourConfig())
    assert field.bed_radius(10, 10) == 4


def test_cell_index_clamps_to_grid() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    assert field.cell_index((CENTER[0] + CUP_R, CENTER[1]), cup_center=CENTER, cup_radius=CUP_R) == (1, 2)
    assert field.cell_index((CENTER[0] - CUP_R, CENTER[1] - CUP_R), cup_center=CENTER, cup_radius=CUP_R) == (0, 0)
    assert field.cell_index((10_000, 10_000), cup_center=CENTER, cup_radius=CUP_R) == (2, 2)


def test_reset_zeroes_in_place_and_keeps_mask() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    mask = field.active_mask
    _deposit(field, CENTER, 4.0)
    field.reset()
    assert field.total_volume == 0.0
    assert all(v == 0.0 for row in field.cell_volumes() for v in row)
    assert field.active_mask is mask

    field.reset(resolution=3)
    assert field.active_mask is mask


def test_reset_with_new_resolution_reallocates() -> None:
    field = AccumulationField(PourConfig(grid_resolution=3))
    _deposit(field, CENTER, 4.0)
    field.reset(resolution=8)
    assert field.resolution == 8
    assert field.active_count == 32
    assert len(field.cell_volumes()) == 8
    assert field.total_volume == 0.0


def test_invalid_resolution_fails_fast() -> None:
    with pytest.raises(ValueError):
        AccumulationField(PourConfig(), resolution=1)
    field = AccumulationField(PourConfig())
    with pytest.raises(ValueError):
        field.reset(resolution=0)


def test_zero_cup_radius_is_a_wiring_error() -> None:
    field = AccumulationField(PourConfig())
    with pytest.raises(ValueError):
        field.deposit_at(CENTER, 1.0, cup_center=CENTER, cup_radius=0, ring_thickness=0)
