from __future__ import annotations

import logging
import math

from .config import PourConfig
from .layout import Point, bed_radius

logger = logging.getLogger(__name__)


def circle_mask(resolution: int, radius: float = 1.0) -> tuple[tuple[bool, ...], ...]:
    """Cells whose centre lies within ``radius`` of the origin, row-major."""
    step = 2.0 / resolution
    r2 = radius * radius
    rows: list[tuple[bool, ...]] = []
    for j in range(resolution):
        cy = -1.0 + (j + 0.5) * step
        rows.append(
            tuple((-1.0 + (i + 0.5) * step) ** 2 + cy * cy <= r2 for i in range(resolution))
        )
    return tuple(rows)


class AccumulationField:
    """N x N grid over the cup's cross-section collecting poured volume.

    The grid spans [-1, 1] x [-1, 1] scaled by the full cup radius. Deposits are
    only accepted inside the grounds bed, which is a little smaller than the cup,
    so the outermost ring of the grid stays dry. Only cells inside the active
    radius collect water; a pour over an inactive corner cell is dropped.
    """

    def __init__(self, config: PourConfig, *, resolution: int | None = None) -> None:
        self._cfg = config
        self._allocate(config.grid_resolution if resolution is None else int(resolution))

    def _allocate(self, resolution: int) -> None:
        if resolution < 2:
            raise ValueError("resolution must be >= 2")
        self._n = resolution
        self._cells = [[0.0] * resolution for _ in range(resolution)]
        self._mask = circle_mask(resolution, self._cfg.active_cell_radius)
        self._active_count = sum(sum(1 for inside in row if inside) for row in self._mask)
        self._total = 0.0

    @property
    def resolution(self) -> int:
        return self._n

    @property
    def total_volume(self) -> float:
        return self._total

    @property
    def active_mask(self) -> tuple[tuple[bool, ...], ...]:
        return self._mask

    @property
    def active_count(self) -> int:
        return self._active_count

    def cell_volumes(self) -> tuple[tuple[float, ...], ...]:
        return tuple(tuple(row) for row in self._cells)

    def volume_at(self, row: int, col: int) -> float:
        return self._cells[row][col]

    def active_volumes(self) -> list[float]:
        return [
            v
            for row, mask_row in zip(self._cells, self._mask)
            for v, inside in zip(row, mask_row)
            if inside
        ]

    def reset(self, *, resolution: int | None = None) -> None:
        if resolution is not None and int(resolution) != self._n:
            logger.info("Reallocating cup grid %dx%d -> %dx%d", self._n, self._n, resolution, resolution)
            self._allocate(int(resolution))
            return
        for row in self._cells:
            for i in range(self._n):
                row[i] = 0.0
        self._total = 0.0

    def bed_radius(self, cup_radius: float, ring_thickness: float) -> float:
        return bed_radius(
            cup_radius,
            ring_thickness,
            inset=self._cfg.bed_inset,
            min_radius=self._cfg.min_bed_radius_px,
        )

    def cell_index(self, point: Point, *, cup_center: Point, cup_radius: float) -> tuple[int, int]:
        """Grid ``(row, col)`` under ``point``, clamped onto the grid."""
        n = self._n
        nx = (point[0] - cup_center[0]) / cup_radius
        ny = (point[1] - cup_center[1]) / cup_radius
        col = max(0, min(n - 1, math.floor((nx + 1.0) * 0.5 * n)))
        row = max(0, min(n - 1, math.floor((ny + 1.0) * 0.5 * n)))
        return row, col

    def deposit_at(
        self,
        point: Point,
        delta_ml: float,
        *,
        cup_center: Point,
        cup_radius: float,
        ring_thickness: float,
    ) -> bool:
        """Add ``delta_ml`` to the cell under ``point``. Returns True if accepted."""
        if delta_ml <= 0.0:
            return False
        if cup_radius <= 0.0:
            raise ValueError("cup_radius must be > 0")

        dx = point[0] - cup_center[0]
        dy = point[1] - cup_center[1]
        inner_r = self.bed_radius(cup_radius, ring_thickness)
        if dx * dx + dy * dy > inner_r * inner_r:
            return False

        row, col = self.cell_index(point, cup_center=cup_center, cup_radius=cup_radius)
        if not self._mask[row][col]:
            return False
        self._cells[row][col] += delta_ml
        self._total += delta_ml
        return True
