"""Screen geometry shared by the simulation and the renderer.

Everything here is a pure function of the viewport size (and, for the spout,
of where the player is aiming), so the core never has to look at the window.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace


Point = tuple[float, float]


@dataclass(frozen=True, slots=True)
class Layout:
    cup_center: Point
    cup_radius: float
    ring_thickness: float
    kettle_center: Point
    kettle_half_extents: Point

    def follow(self, pointer: Point | None) -> Layout:
        """Return a copy with the kettle carried to ``pointer`` (if any)."""
        if pointer is None:
            return self
        return replace(self, kettle_center=(float(pointer[0]), float(pointer[1])))


def compute_layout(width: int, height: int) -> Layout:
    if width <= 0 or height <= 0:
        raise ValueError("viewport must be positive")

    s = min(width, height)
    cup_r = math.floor(s * 0.30)
    ring_t = max(10, math.floor(cup_r * 0.18))

    ket_w = math.floor(s * 0.44)
    ket_h = math.floor(s * 0.26)

    return Layout(
        cup_center=(math.floor(width * 0.50), math.floor(height * 0.50)),
        cup_radius=cup_r,
        ring_thickness=ring_t,
        kettle_center=(math.floor(width * 0.70), math.floor(height * 0.46)),
        kettle_half_extents=(math.floor(ket_w / 2), math.floor(ket_h / 2)),
    )


def bed_radius(cup_radius: float, ring_thickness: float, *, inset: float, min_radius: float) -> float:
    """Radius of the grounds bed, the only area where a pour counts."""
    return max(min_radius, math.floor(cup_radius - ring_thickness * inset))


def fixed_spout(layout: Layout, angle_rad: float = math.pi) -> Point:
    """Spout tip at a fixed angle on the kettle ellipse (pi points left)."""
    kx, ky = layout.kettle_center
    rx, ry = layout.kettle_half_extents
    return (
        math.floor(kx + rx * math.cos(angle_rad)),
        math.floor(ky + ry * math.sin(angle_rad)),
    )


def cell_rect(layout: Layout, resolution: int, row: int, col: int) -> tuple[float, float, float, float]:
    """Screen rectangle ``(x, y, w, h)`` covered by grid cell ``(row, col)``."""
    cx, cy = layout.cup_center
    r = layout.cup_radius
    step = 2.0 / resolution
    x0 = cx + (-1.0 + col * step) * r
    y0 = cy + (-1.0 + row * step) * r
    x1 = cx + (-1.0 + (col + 1) * step) * r
    y1 = cy + (-1.0 + (row + 1) * step) * r
    return (x0, y0, x1 - x0, y1 - y0)
