from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class PourConfig:
    """Per-session tuning, built once and handed to every core component."""

    target_volume_ml: float = 250.0
    target_tolerance_ml: float = 10.0
    round_to_ml: float = 1.0
    max_imbalance_cv: float = 0.35
    grid_resolution: int = 3
    # Cells count toward evenness when their centre is within this fraction of
    # the cup radius. Roughly the bed-to-cup ratio: a 3x3 grid keeps its cross.
    active_cell_radius: float = 0.8

    # Kettle flow (ml/s and ml/s^2).
    best_rate_ml_s: float = 1.6
    base_accel_ml_s2: float = 0.6
    max_rate_ml_s: float = 1.6 * 5.0

    # Grounds bed is the cup radius minus this many ring thicknesses.
    bed_inset: float = 1.3
    min_bed_radius_px: float = 4.0

    optimal_duration_s: float = 150.0
    duration_tolerance_s: float = 20.0

    max_sim_dt_s: float = 0.05

    def validate(self) -> PourConfig:
        if self.grid_resolution < 2:
            raise ValueError("grid_resolution must be >= 2")
        if not 0.0 < self.active_cell_radius <= 1.0:
            raise ValueError("active_cell_radius must be in (0, 1]")
        if self.target_volume_ml <= 0.0:
            raise ValueError("target_volume_ml must be > 0")
        if self.target_tolerance_ml < 0.0:
            raise ValueError("target_tolerance_ml must be >= 0")
        if self.round_to_ml <= 0.0:
            raise ValueError("round_to_ml must be > 0")
        if self.max_imbalance_cv < 0.0:
            raise ValueError("max_imbalance_cv must be >= 0")
        if self.best_rate_ml_s <= 0.0 or self.base_accel_ml_s2 <= 0.0:
            raise ValueError("best_rate_ml_s and base_accel_ml_s2 must be > 0")
        if self.max_rate_ml_s < self.best_rate_ml_s:
            raise ValueError("max_rate_ml_s must be >= best_rate_ml_s")
        if self.bed_inset < 0.0 or self.min_bed_radius_px <= 0.0:
            raise ValueError("bed_inset must be >= 0 and min_bed_radius_px > 0")
        if self.optimal_duration_s < 0.0 or self.duration_tolerance_s < 0.0:
            raise ValueError("pacing window must be >= 0")
        if self.max_sim_dt_s <= 0.0:
            raise ValueError("max_sim_dt_s must be > 0")
        return self

    def with_overrides(self, **changes: object) -> PourConfig:
        return replace(self, **changes).validate()
