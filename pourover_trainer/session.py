from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .clock import Clock, FrameTimer
from .config import PourConfig
from .cup_bed import AccumulationField
from .evaluator import Evaluator, Judgement, Verdict
from .kettle import PourSource, RampStage
from .layout import Layout, Point, compute_layout, fixed_spout

logger = logging.getLogger(__name__)

LayoutFn = Callable[[int, int], Layout]


class SessionState(StrEnum):
    START = "start"
    PLAY = "play"
    END = "end"


@dataclass(frozen=True, slots=True)
class PourSnapshot:
    """View model for the UI (pure data)."""

    state: SessionState
    verdict: Verdict | None
    judgement: Judgement | None
    volume_ml: float
    rounded_volume_ml: float
    target_volume_ml: float
    rate_ml_s: float
    stage: RampStage
    is_holding: bool
    is_pouring: bool
    elapsed_s: float
    resolution: int
    cells: tuple[tuple[float, ...], ...]
    mask: tuple[tuple[bool, ...], ...]
    layout: Layout
    pour_point: Point


class SessionController:
    """One player's attempts: START -> PLAY -> END -> START ...

    - The attempt ends only when the player settles; volume alone never ends it.
    - Simulation steps are clamped, elapsed time is not.
    - Time comes only from the injected Clock (via ``update``) or from explicit
      ``tick`` deltas.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        config: PourConfig | None = None,
        layout_fn: LayoutFn = compute_layout,
        viewport: tuple[int, int] = (960, 540),
    ) -> None:
        if layout_fn is None:
            raise ValueError("layout_fn is required")
        self._cfg = (config or PourConfig()).validate()
        self._layout_fn = layout_fn
        self._timer = FrameTimer(clock)

        self._kettle = PourSource(self._cfg)
        self._field = AccumulationField(self._cfg)
        self._evaluator = Evaluator(self._field, self._cfg)

        self._state = SessionState.START
        self._judgement: Judgement | None = None
        self._elapsed_s = 0.0

        self._viewport = (int(viewport[0]), int(viewport[1]))
        self._layout = layout_fn(*self._viewport)
        self._pointer: Point | None = None

    @property
    def config(self) -> PourConfig:
        return self._cfg

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def kettle(self) -> PourSource:
        return self._kettle

    @property
    def field(self) -> AccumulationField:
        return self._field

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def elapsed_s(self) -> float:
        return self._elapsed_s

    @property
    def judgement(self) -> Judgement | None:
        return self._judgement

    @property
    def verdict(self) -> Verdict | None:
        return None if self._judgement is None else self._judgement.verdict

    @property
    def layout(self) -> Layout:
        return self._layout

    # Input surface.

    def set_viewport(self, width: int, height: int) -> None:
        size = (int(width), int(height))
        if size == self._viewport:
            return
        self._viewport = size
        self._layout = self._layout_fn(*size)

    def aim_at(self, x: float, y: float, *, active: bool = True) -> None:
        self._pointer = (float(x), float(y)) if active else None

    def set_holding(self, down: bool) -> None:
        if self._state is not SessionState.PLAY:
            return
        self._kettle.set_holding(down)

    def pour_point(self) -> Point:
        return fixed_spout(self._layout.follow(self._pointer))

    # Lifecycle.

    def start(self) -> None:
        if self._state is not SessionState.START:
            return
        self._reset_attempt()
        self._state = SessionState.PLAY
        logger.info(
            "Pour started: target %.0f ml, grid %dx%d",
            self._cfg.target_volume_ml,
            self._field.resolution,
            self._field.resolution,
        )

    def settle(self) -> Judgement | None:
        if self._state is not SessionState.PLAY:
            return None
        judgement = self._evaluator.judge(self._elapsed_s)
        self._judgement = judgement
        self._kettle.stop()
        self._state = SessionState.END
        logger.info(
            "Pour settled: %s (volume %.1f ml, cv %s, elapsed %.1f s, target=%s uniform=%s paced=%s)",
            judgement.verdict.value,
            judgement.volume_ml,
            "n/a" if judgement.cv is None else f"{judgement.cv:.3f}",
            judgement.elapsed_s,
            judgement.target_hit,
            judgement.uniform,
            judgement.paced,
        )
        return judgement

    def restart(self) -> None:
        self._reset_attempt()
        self._state = SessionState.START
        logger.info("Session reset to start")

    def _reset_attempt(self) -> None:
        self._kettle.reset()
        self._field.reset(resolution=self._cfg.grid_resolution)
        self._elapsed_s = 0.0
        self._judgement = None
        self._timer.rebase()

    # Frame driving.

    def update(self) -> None:
        self.tick(self._timer.lap())

    def tick(self, raw_dt: float) -> None:
        if self._state is not SessionState.PLAY:
            return
        raw_dt = max(0.0, float(raw_dt))
        self._elapsed_s += raw_dt

        dt = min(self._cfg.max_sim_dt_s, raw_dt)
        if dt < raw_dt:
            logger.debug("Frame stall of %.3f s clamped to %.3f s", raw_dt, dt)

        self._kettle.update(dt)
        if not self._kettle.is_pouring():
            return

        layout = self._layout
        self._field.deposit_at(
            self.pour_point(),
            self._kettle.current_rate * dt,
            cup_center=layout.cup_center,
            cup_radius=layout.cup_radius,
            ring_thickness=layout.ring_thickness,
        )

    def snapshot(self) -> PourSnapshot:
        return PourSnapshot(
            state=self._state,
            verdict=self.verdict,
            judgement=self._judgement,
            volume_ml=self._field.total_volume,
            rounded_volume_ml=self._evaluator.rounded_volume(),
            target_volume_ml=self._cfg.target_volume_ml,
            rate_ml_s=self._kettle.current_rate,
            stage=self._kettle.stage,
            is_holding=self._kettle.is_holding,
            is_pouring=self._kettle.is_pouring(),
            elapsed_s=self._elapsed_s,
            resolution=self._field.resolution,
            cells=self._field.cell_volumes(),
            mask=self._field.active_mask,
            layout=self._layout,
            pour_point=self.pour_point(),
        )
