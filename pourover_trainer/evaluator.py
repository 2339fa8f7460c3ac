"""Judgement of a finished pour.

A pour wins only if all three checks pass: the rounded volume lands on the
target, the water is spread evenly over the bed (coefficient of variation of
the active cells) and the pour took about the right amount of time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from .config import PourConfig
from .cup_bed import AccumulationField


class Verdict(StrEnum):
    WIN = "win"
    LOSE = "lose"


@dataclass(frozen=True, slots=True)
class Judgement:
    win: bool
    target_hit: bool
    uniform: bool
    paced: bool
    overflow: bool
    volume_ml: float
    rounded_volume_ml: float
    cv: float | None
    elapsed_s: float

    @property
    def verdict(self) -> Verdict:
        return Verdict.WIN if self.win else Verdict.LOSE


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class Evaluator:
    def __init__(self, field: AccumulationField, config: PourConfig) -> None:
        self._field = field
        self._cfg = config

    def rounded_volume(self, round_to_ml: float | None = None) -> float:
        unit = self._cfg.round_to_ml if round_to_ml is None else float(round_to_ml)
        return round_half_up(self._field.total_volume / unit) * unit

    def is_target_hit(self, tolerance_ml: float | None = None) -> bool:
        tol = self._cfg.target_tolerance_ml if tolerance_ml is None else float(tolerance_ml)
        return abs(self.rounded_volume() - self._cfg.target_volume_ml) <= tol

    def is_overflow(self) -> bool:
        return self._field.total_volume > self._cfg.target_volume_ml

    def coefficient_of_variation(self) -> float | None:
        """Population CV over active cells; None when there is nothing to measure."""
        values = self._field.active_volumes()
        if not values:
            return None
        mean = sum(values) / len(values)
        if mean <= 0.0:
            return None
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        return math.sqrt(variance) / mean

    def is_uniform(self, max_cv: float | None = None) -> bool:
        limit = self._cfg.max_imbalance_cv if max_cv is None else float(max_cv)
        if self._field.active_count == 0:
            return True
        cv = self.coefficient_of_variation()
        # No water on the bed is a failure, not a vacuous pass.
        if cv is None:
            return False
        return cv <= limit

    def is_paced(self, elapsed_s: float) -> bool:
        return abs(elapsed_s - self._cfg.optimal_duration_s) <= self._cfg.duration_tolerance_s

    def judge(self, elapsed_s: float) -> Judgement:
        target_hit = self.is_target_hit()
        uniform = self.is_uniform()
        paced = self.is_paced(elapsed_s)
        return Judgement(
            win=target_hit and uniform and paced,
            target_hit=target_hit,
            uniform=uniform,
            paced=paced,
            overflow=self.is_overflow(),
            volume_ml=self._field.total_volume,
            rounded_volume_ml=self.rounded_volume(),
            cv=self.coefficient_of_variation(),
            elapsed_s=float(elapsed_s),
        )
