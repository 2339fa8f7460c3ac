"""Pygame UI shell for the pour-over trainer.

Hold the mouse button (or Space) to pour, move the mouse to carry the kettle
over the cup, press Enter (or click Finish) to settle and be judged.

Deterministic timing/flow/scoring state lives in pourover_trainer/* (core
modules); this file only draws it and forwards input.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import RealClock
from .config import PourConfig
from .layout import Layout, Point, bed_radius, cell_rect
from .logging_config import LOG_FILE_ENV, level_from_env, setup_logging
from .session import PourSnapshot, SessionController, SessionState

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

Color = tuple[int, int, int]

COLORS: dict[str, Color] = {
    "bg": (17, 20, 23),
    "text": (232, 232, 232),
    "accent": (127, 209, 185),
    "kettle": (60, 110, 113),
    "cup": (40, 75, 99),
    "cup_rim": (58, 107, 128),
    "water": (110, 197, 233),
    "button_bg": (35, 48, 58),
    "button_bg_hover": (44, 61, 73),
    "fail": (231, 111, 81),
    "good": (132, 165, 157),
    "filter": (237, 229, 207),
    "grounds_light": (107, 78, 46),
    "grounds_dark": (62, 42, 20),
}


def _mix(a: Color, b: Color, t: float) -> Color:
    t = 0.0 if t <= 0.0 else 1.0 if t >= 1.0 else t
    return (
        int(round(a[0] + (b[0] - a[0]) * t)),
        int(round(a[1] + (b[1] - a[1]) * t)),
        int(round(a[2] + (b[2] - a[2]) * t)),
    )


def _cubic_bezier(p0: Point, p1: Point, p2: Point, p3: Point, steps: int = 24) -> list[Point]:
    pts: list[Point] = []
    for k in range(steps + 1):
        t = k / steps
        u = 1.0 - t
        x = u * u * u * p0[0] + 3 * u * u * t * p1[0] + 3 * u * t * t * p2[0] + t * t * t * p3[0]
        y = u * u * u * p0[1] + 3 * u * u * t * p1[1] + 3 * u * t * t * p2[1] + t * t * t * p3[1]
        pts.append((x, y))
    return pts


def _format_clock(seconds: float) -> str:
    total = max(0, int(math.floor(seconds)))
    return f"{total // 60}:{total % 60:02d}"


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.VIDEORESIZE:
            self._surface = pygame.display.get_surface()
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


@dataclass(slots=True)
class Button:
    label: str
    rect: pygame.Rect

    def contains(self, pos: tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, *, hovered: bool = False) -> None:
        bg = COLORS["button_bg_hover"] if hovered else COLORS["button_bg"]
        pygame.draw.rect(surface, bg, self.rect, border_radius=10)
        text = font.render(self.label, True, COLORS["text"])
        surface.blit(text, text.get_rect(center=self.rect.center))


class PourScreen:
    """Start / pour / result screen bound to one SessionController."""

    def __init__(self, app: App, *, session: SessionController) -> None:
        self._app = app
        self._session = session
        self._show_grid = False
        self._show_zone = False
        self._show_rate = False

        self._title_font = pygame.font.Font(None, 56)
        self._hud_font = pygame.font.Font(None, 60)
        self._button_font = app.font
        self._small_font = pygame.font.Font(None, 24)
        self._tiny_font = pygame.font.Font(None, 18)

        self._start_btn = Button("Start", pygame.Rect(0, 0, 0, 0))
        self._restart_btn = Button("Restart", pygame.Rect(0, 0, 0, 0))
        self._settle_btn = Button("Finish", pygame.Rect(0, 0, 0, 0))
        self._hover: tuple[int, int] = (-1, -1)

    @property
    def session(self) -> SessionController:
        return self._session

    def handle_event(self, event: pygame.event.Event) -> None:
        session = self._session
        state = session.state

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                if state is SessionState.START:
                    session.start()
                elif state is SessionState.END:
                    session.restart()
                else:
                    session.set_holding(True)
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                session.settle()
            elif event.key == pygame.K_ESCAPE:
                self._app.quit()
            elif event.key == pygame.K_g:
                self._show_grid = not self._show_grid
            elif event.key == pygame.K_z:
                self._show_zone = not self._show_zone
            elif event.key == pygame.K_r:
                self._show_rate = not self._show_rate
            return

        if event.type == pygame.KEYUP:
            if event.key == pygame.K_SPACE:
                session.set_holding(False)
            return

        if event.type == pygame.MOUSEMOTION:
            self._hover = event.pos
            session.aim_at(*event.pos)
            return

        if event.type == pygame.WINDOWLEAVE:
            session.aim_at(0.0, 0.0, active=False)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = event.pos
            session.aim_at(*pos)
            if state is SessionState.START and self._start_btn.contains(pos):
                session.start()
                return
            if state is SessionState.END and self._restart_btn.contains(pos):
                session.restart()
                return
            if state is SessionState.PLAY and self._settle_btn.contains(pos):
                session.settle()
                return
            session.set_holding(True)
            return

        if event.type == pygame.MOUSEBUTTONUP and getattr(event, "button", 0) == 1:
            session.set_holding(False)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        self._session.set_viewport(w, h)
        self._session.update()
        snap = self._session.snapshot()

        self._layout_buttons(w, h)
        surface.fill(COLORS["bg"])

        self._render_cup(surface, snap)
        self._render_kettle(surface, snap)
        if self._show_zone:
            self._render_pour_zone(surface, snap.layout)
        if self._show_grid:
            self._render_grid_overlay(surface, snap)

        self._render_hud(surface, snap)

        if snap.state is SessionState.START:
            self._render_start(surface)
        elif snap.state is SessionState.PLAY:
            self._settle_btn.draw(surface, self._button_font, hovered=self._settle_btn.contains(self._hover))
        else:
            self._render_end(surface, snap)

    def _layout_buttons(self, w: int, h: int) -> None:
        btn_w = min(280, w // 2)
        btn_h = 56
        x = (w - btn_w) // 2
        self._start_btn.rect = pygame.Rect(x, int(h * 0.60), btn_w, btn_h)
        self._restart_btn.rect = pygame.Rect(x, int(h * 0.65), btn_w, btn_h)
        self._settle_btn.rect = pygame.Rect(x, min(h - btn_h - 8, int(h * 0.86)), btn_w, btn_h)

    def _render_cup(self, surface: pygame.Surface, snap: PourSnapshot) -> None:
        layout = snap.layout
        cx, cy = (int(v) for v in layout.cup_center)
        cup_r = int(layout.cup_radius)
        ring_t = int(layout.ring_thickness)
        if cup_r <= 0:
            return

        pygame.draw.circle(surface, _mix(COLORS["bg"], COLORS["cup"], 0.22), (cx, cy), cup_r + int(ring_t * 0.35))
        pygame.draw.circle(surface, _mix(COLORS["bg"], COLORS["cup_rim"], 0.5), (cx, cy), cup_r, max(1, ring_t))

        filter_r = max(6, int(cup_r - ring_t * 0.55))
        filter_t = max(4, int(ring_t * 0.8))
        pygame.draw.circle(surface, COLORS["filter"], (cx, cy), filter_r, filter_t)

        cfg = self._session.config
        inner_r = int(bed_radius(cup_r, ring_t, inset=cfg.bed_inset, min_radius=cfg.min_bed_radius_px))
        self._render_grounds(surface, snap, inner_r)

    def _render_grounds(self, surface: pygame.Surface, snap: PourSnapshot, inner_r: int) -> None:
        layout = snap.layout
        cx, cy = layout.cup_center
        vmax = 0.0
        for row, mask_row in zip(snap.cells, snap.mask):
            for v, inside in zip(row, mask_row):
                if inside and v > vmax:
                    vmax = v

        size = inner_r * 2
        bed = pygame.Surface((size, size), pygame.SRCALPHA)
        ox = cx - inner_r
        oy = cy - inner_r
        n = snap.resolution
        for j in range(n):
            for i in range(n):
                x, y, cw, ch = cell_rect(layout, n, j, i)
                if snap.mask[j][i]:
                    t = 0.0 if vmax <= 0.0 else min(1.0, snap.cells[j][i] / vmax)
                    r, g, b = _mix(COLORS["grounds_light"], COLORS["grounds_dark"], t)
                    alpha = 217
                else:
                    # Inactive corners stay dry.
                    r, g, b = COLORS["grounds_light"]
                    alpha = 110
                rect = pygame.Rect(
                    int(math.floor(x - ox)),
                    int(math.floor(y - oy)),
                    int(math.ceil(cw)) + 1,
                    int(math.ceil(ch)) + 1,
                )
                pygame.draw.rect(bed, (r, g, b, alpha), rect)

        clip = pygame.Surface((size, size), pygame.SRCALPHA)
        pygame.draw.circle(clip, (255, 255, 255, 255), (inner_r, inner_r), inner_r)
        bed.blit(clip, (0, 0), special_flags=pygame.BLEND_RGBA_MIN)
        surface.blit(bed, (int(ox), int(oy)))

    def _tremor(self, surface: pygame.Surface) -> Point:
        # Hand shake on the drawn kettle only; held still while the grid is shown.
        if self._show_grid:
            return (0.0, 0.0)
        s = min(surface.get_size())
        t = pygame.time.get_ticks() / 1000.0
        jx = s * 0.005 * (math.sin(t * 5.7 + 0.3) + 0.5 * math.sin(t * 9.1 + 1.2))
        jy = s * 0.004 * (math.sin(t * 6.3 + 0.8) + 0.5 * math.sin(t * 10.4 + 2.1))
        return (jx, jy)

    def _render_kettle(self, surface: pygame.Surface, snap: PourSnapshot) -> None:
        layout = snap.layout
        rx, ry = layout.kettle_half_extents
        jx, jy = self._tremor(surface)
        spout = (snap.pour_point[0] + jx, snap.pour_point[1] + jy)
        theta = math.pi

        dir_x, dir_y = math.cos(theta), math.sin(theta)
        n_x, n_y = -dir_y, dir_x
        neck_len = max(80, math.floor(min(rx, ry) * 2.6))
        width = max(4, math.floor(min(rx, ry) * 0.18))
        base = (spout[0] - dir_x * neck_len, spout[1] - dir_y * neck_len)
        c1 = (
            spout[0] - dir_x * neck_len * 0.35 + n_x * neck_len * 0.18,
            spout[1] - dir_y * neck_len * 0.35 + n_y * neck_len * 0.18,
        )
        c2 = (
            spout[0] - dir_x * neck_len * 0.70 - n_x * neck_len * 0.22,
            spout[1] - dir_y * neck_len * 0.70 - n_y * neck_len * 0.22,
        )
        pts = _cubic_bezier(base, c2, c1, spout)
        pygame.draw.lines(surface, COLORS["kettle"], False, pts, width)
        pygame.draw.circle(surface, COLORS["kettle"], (int(spout[0]), int(spout[1])), width // 2)

        if snap.is_pouring:
            drop_r = max(2, int(2 + snap.rate_ml_s))
            pygame.draw.circle(surface, COLORS["water"], (int(spout[0]), int(spout[1])), drop_r)

    def _render_pour_zone(self, surface: pygame.Surface, layout: Layout) -> None:
        cx, cy = (int(v) for v in layout.cup_center)
        cup_r = int(layout.cup_radius)
        if cup_r <= 0:
            return
        tint = pygame.Surface((cup_r * 2, cup_r * 2), pygame.SRCALPHA)
        pygame.draw.circle(tint, (*COLORS["accent"], 20), (cup_r, cup_r), cup_r)
        surface.blit(tint, (cx - cup_r, cy - cup_r))
        pygame.draw.circle(surface, COLORS["accent"], (cx, cy), cup_r, 2)

        cfg = self._session.config
        inner_r = int(
            bed_radius(cup_r, layout.ring_thickness, inset=cfg.bed_inset, min_radius=cfg.min_bed_radius_px)
        )
        pygame.draw.circle(surface, COLORS["water"], (cx, cy), inner_r, 1)

    def _render_grid_overlay(self, surface: pygame.Surface, snap: PourSnapshot) -> None:
        n = snap.resolution
        for j in range(n):
            for i in range(n):
                if not snap.mask[j][i]:
                    continue
                x, y, cw, ch = cell_rect(snap.layout, n, j, i)
                rect = pygame.Rect(int(x), int(y), int(cw), int(ch))
                pygame.draw.rect(surface, COLORS["accent"], rect, 1)
                v = snap.cells[j][i]
                label = f"{v:.0f}" if v >= 10 else f"{v:.1f}"
                txt = self._tiny_font.render(label, True, COLORS["text"])
                surface.blit(txt, txt.get_rect(center=rect.center))

    def _render_hud(self, surface: pygame.Surface, snap: PourSnapshot) -> None:
        w, h = surface.get_size()
        vol = self._hud_font.render(f"{snap.rounded_volume_ml:.0f} ml", True, COLORS["text"])
        surface.blit(vol, vol.get_rect(midbottom=(w // 2, int(h * 0.17))))

        timer = self._small_font.render(_format_clock(snap.elapsed_s), True, COLORS["text"])
        surface.blit(timer, timer.get_rect(topright=(w - 18, 16)))

        if self._show_rate:
            rate = self._tiny_font.render(
                f"{snap.rate_ml_s:.2f} ml/s  ({snap.stage.value})", True, COLORS["text"]
            )
            surface.blit(rate, rate.get_rect(midtop=(w // 2, int(h * 0.17) + 4)))

    def _render_start(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        title = self._title_font.render("Pour-over", True, COLORS["text"])
        surface.blit(title, title.get_rect(center=(w // 2, int(h * 0.32))))
        target = self._session.config.target_volume_ml
        hint = self._small_font.render(
            f"Hold mouse or Space to pour {target:.0f} ml evenly. Enter to finish.",
            True,
            COLORS["text"],
        )
        surface.blit(hint, hint.get_rect(center=(w // 2, int(h * 0.40))))
        self._start_btn.draw(surface, self._button_font, hovered=self._start_btn.contains(self._hover))

    def _render_end(self, surface: pygame.Surface, snap: PourSnapshot) -> None:
        w, h = surface.get_size()
        j = snap.judgement
        won = j is not None and j.win
        title = self._title_font.render("Brewed" if won else "Missed", True, COLORS["good" if won else "fail"])
        surface.blit(title, title.get_rect(center=(w // 2, int(h * 0.30))))

        if j is not None:
            cv = "n/a" if j.cv is None else f"{j.cv:.2f}"
            lines = [
                f"Volume {j.rounded_volume_ml:.0f} ml  {'ok' if j.target_hit else 'off target'}",
                f"Evenness CV {cv}  {'ok' if j.uniform else 'uneven'}",
                f"Time {_format_clock(j.elapsed_s)}  {'ok' if j.paced else 'off pace'}",
            ]
            y = int(h * 0.36)
            for line in lines:
                txt = self._small_font.render(line, True, COLORS["text"])
                surface.blit(txt, txt.get_rect(center=(w // 2, y)))
                y += 24

        self._restart_btn.draw(surface, self._button_font, hovered=self._restart_btn.contains(self._hover))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: PourConfig | None = None,
) -> int:
    setup_logging(level_from_env(), os.environ.get(LOG_FILE_ENV) or None)

    pygame.init()
    pygame.display.set_caption("Pour-over Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    session = SessionController(clock=RealClock(), config=config, viewport=surface.get_size())
    app.push(PourScreen(app, session=session))
    logger.info("Trainer window opened at %dx%d", *surface.get_size())

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
