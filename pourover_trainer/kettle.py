"""Kettle flow model.

The pour rate is driven only by how long the pour input has been held:

* under 1 s the flow eases in slowly and is capped at half the best rate;
* from 1 s to 3 s it is pinned to the best rate (the steady pour);
* from 3 s to 5 s it climbs again towards 1.5x the best rate;
* past 5 s it can reach the kettle's maximum.

Releasing the input drains the flow at twice the base acceleration.
"""

from __future__ import annotations

from enum import StrEnum

from .config import PourConfig


class RampStage(StrEnum):
    IDLE = "idle"
    EASE_IN = "ease_in"
    PLATEAU = "plateau"
    SURGE = "surge"
    FULL = "full"
    DECAY = "decay"


_EASE_IN_END_S = 1.0
_PLATEAU_END_S = 3.0
_SURGE_END_S = 5.0


def stage_for_hold(hold_elapsed_s: float) -> RampStage:
    if hold_elapsed_s < _EASE_IN_END_S:
        return RampStage.EASE_IN
    if hold_elapsed_s < _PLATEAU_END_S:
        return RampStage.PLATEAU
    if hold_elapsed_s < _SURGE_END_S:
        return RampStage.SURGE
    return RampStage.FULL


class PourSource:
    """Pour-rate state machine for the kettle."""

    _STAGE_MULTIPLIER = {
        RampStage.EASE_IN: 0.20,
        RampStage.SURGE: 0.85,
        RampStage.FULL: 1.0,
    }

    def __init__(self, config: PourConfig) -> None:
        self._cfg = config
        self._is_holding = False
        self._hold_elapsed_s = 0.0
        self._release_elapsed_s = 0.0
        self._rate = 0.0

    @property
    def is_holding(self) -> bool:
        return self._is_holding

    @property
    def hold_elapsed_s(self) -> float:
        return self._hold_elapsed_s

    @property
    def release_elapsed_s(self) -> float:
        return self._release_elapsed_s

    @property
    def current_rate(self) -> float:
        return self._rate

    @property
    def stage(self) -> RampStage:
        if self._is_holding:
            return stage_for_hold(self._hold_elapsed_s)
        return RampStage.DECAY if self._rate > 0.0 else RampStage.IDLE

    def reset(self) -> None:
        self._is_holding = False
        self._hold_elapsed_s = 0.0
        self._release_elapsed_s = 0.0
        self._rate = 0.0

    def stop(self) -> None:
        self.set_holding(False)
        self._rate = 0.0

    def set_holding(self, down: bool) -> None:
        down = bool(down)
        if down and not self._is_holding:
            self._hold_elapsed_s = 0.0
        elif not down and self._is_holding:
            self._release_elapsed_s = 0.0
        self._is_holding = down

    def stage_cap(self, hold_elapsed_s: float) -> float:
        best = self._cfg.best_rate_ml_s
        stage = stage_for_hold(hold_elapsed_s)
        if stage is RampStage.EASE_IN:
            return best * 0.5
        if stage is RampStage.PLATEAU:
            return best
        if stage is RampStage.SURGE:
            return min(self._cfg.max_rate_ml_s, best * 1.5)
        return self._cfg.max_rate_ml_s

    def update(self, dt: float) -> None:
        if dt <= 0.0:
            return
        if self._is_holding:
            self._hold_elapsed_s += dt
            stage = stage_for_hold(self._hold_elapsed_s)
            if stage is RampStage.PLATEAU:
                self._rate = self._cfg.best_rate_ml_s
                return
            accel = self._cfg.base_accel_ml_s2 * self._STAGE_MULTIPLIER[stage]
            self._rate = min(self.stage_cap(self._hold_elapsed_s), self._rate + accel * dt)
        elif self._rate > 0.0:
            self._release_elapsed_s += dt
            self._rate = max(0.0, self._rate - 2.0 * self._cfg.base_accel_ml_s2 * dt)

    def is_pouring(self) -> bool:
        return self._is_holding and self._rate > 0.0
