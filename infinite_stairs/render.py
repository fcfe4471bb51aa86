"""
Scene Renderer
===============
Paints the current simulation state onto a pixel surface.

Nothing in here mutates the simulation. Screen shake and star twinkle use
their own randomness and the wall clock so the simulation stays
deterministic.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple
import math
import random

from .components import Particle, RunState, Stair, Star, RGB
from .engine import (
    BLACK, BLUE_400, BLUE_500, BLUE_600, BLUE_700,
    SLATE_700, SLATE_800, SLATE_900, SLATE_950, WHITE,
)
from .particles import combo_color
from .simulation import SimulationContext


class Surface(Protocol):
    """
    What the renderer needs from a paintable surface.

    `round_rect(x, y, w, h, radius, color, alpha)` is optional; surfaces
    without it get plain rectangles.
    """
    width: int
    height: int

    def fill_gradient(self, top: RGB, bottom: RGB) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float,
                  color: RGB, alpha: float = 1.0) -> None: ...

    def fill_polygon(self, points: Sequence[Tuple[float, float]],
                     color: RGB, alpha: float = 1.0) -> None: ...

    def stroke_polygon(self, points: Sequence[Tuple[float, float]],
                       color: RGB, alpha: float = 1.0) -> None: ...

    def fill_ellipse(self, cx: float, cy: float, rx: float, ry: float,
                     color: RGB, alpha: float = 1.0) -> None: ...

    def fill_circle(self, cx: float, cy: float, radius: float,
                    color: RGB, alpha: float = 1.0) -> None: ...


# Sizes in world units
ISO_W = 80.0
ISO_H = 40.0
THICKNESS = 12.0
PLAYER_W = 28.0
PLAYER_H = 42.0
PLAYER_RADIUS = 10.0
GLOW_SPREAD = 4.0
PARTICLE_RADIUS = 4.0
SHAKE_MAGNITUDE = 15.0

STAIRS_BEHIND = 15
STAIRS_AHEAD = 30

# The player stays visible for the first half of the death shake.
HIDE_PLAYER_AT_SHAKE = 200.0

BACKGROUND_TOP = SLATE_950
BACKGROUND_BOTTOM = SLATE_900

# (top, border, right side, left side)
STAIR_COLORS = (SLATE_800, SLATE_700, SLATE_900, SLATE_950)
CURRENT_STAIR_COLORS = (BLUE_500, BLUE_400, BLUE_600, BLUE_700)


@dataclass(frozen=True)
class View:
    """World to surface transform: translate by the offset, divide by scale."""
    offset_x: float
    offset_y: float
    scale: float

    def to_px(self, x: float, y: float) -> Tuple[float, float]:
        return (x + self.offset_x) / self.scale, (y + self.offset_y) / self.scale

    def size(self, value: float) -> float:
        return value / self.scale


# =============================================================================
# STATE QUERIES
# =============================================================================

def shake_offset(ctx: SimulationContext, jitter: random.Random) -> Tuple[float, float]:
    """Random translation, linearly scaled by the remaining shake time."""
    if ctx.shake_timer <= 0:
        return 0.0, 0.0
    intensity = (ctx.shake_timer / ctx.tuning.death_shake_ms) * SHAKE_MAGNITUDE
    return ((jitter.random() - 0.5) * intensity,
            (jitter.random() - 0.5) * intensity)


def player_visible(ctx: SimulationContext) -> bool:
    return ctx.state is not RunState.GAMEOVER or ctx.shake_timer > HIDE_PLAYER_AT_SHAKE


def star_alpha(star: Star, now_ms: float) -> float:
    return 0.3 + math.sin(now_ms * 0.001 + star.phase) * 0.2


# =============================================================================
# LAYERS
# =============================================================================

def render_background(surface: Surface):
    surface.fill_gradient(BACKGROUND_TOP, BACKGROUND_BOTTOM)


def render_stars(surface: Surface, stars: List[Star], now_ms: float):
    """Twinkling starfield. Not affected by camera or shake."""
    for star in stars:
        size = 2.0 if star.size > 1.5 else 1.0
        surface.fill_rect(star.x * surface.width, star.y * surface.height,
                          size, size, WHITE, star_alpha(star, now_ms))


def render_stair(surface: Surface, view: View, stair: Stair, is_current: bool):
    """Isometric diamond top with two shaded side faces."""
    top, border, right, left = CURRENT_STAIR_COLORS if is_current else STAIR_COLORS
    x, y = stair.x, stair.y
    half_w, half_h = ISO_W / 2, ISO_H / 2

    def project(points):
        return [view.to_px(px, py) for px, py in points]

    top_face = project([
        (x, y - half_h), (x + half_w, y), (x, y + half_h), (x - half_w, y),
    ])
    right_face = project([
        (x + half_w, y), (x, y + half_h),
        (x, y + half_h + THICKNESS), (x + half_w, y + THICKNESS),
    ])
    left_face = project([
        (x - half_w, y), (x, y + half_h),
        (x, y + half_h + THICKNESS), (x - half_w, y + THICKNESS),
    ])

    surface.fill_polygon(top_face, top)
    surface.stroke_polygon(top_face, border)
    surface.fill_polygon(right_face, right)
    surface.stroke_polygon(right_face, border)
    surface.fill_polygon(left_face, left)
    surface.stroke_polygon(left_face, border)


def _rounded_rect(surface: Surface, x: float, y: float, w: float, h: float,
                  radius: float, color: RGB, alpha: float = 1.0):
    round_rect = getattr(surface, 'round_rect', None)
    if callable(round_rect):
        round_rect(x, y, w, h, radius, color, alpha)
    else:
        surface.fill_rect(x, y, w, h, color, alpha)


def render_player(surface: Surface, view: View, x: float, y: float,
                  facing: int, color: RGB):
    """Glowing rounded body, face band, eye on the facing side and a shadow."""
    s = view.size
    left, top = view.to_px(x - PLAYER_W / 2, y - PLAYER_H)

    # Glow
    _rounded_rect(surface, left - s(GLOW_SPREAD), top - s(GLOW_SPREAD),
                  s(PLAYER_W + GLOW_SPREAD * 2), s(PLAYER_H + GLOW_SPREAD * 2),
                  s(PLAYER_RADIUS + GLOW_SPREAD), color, 0.25)
    # Body
    _rounded_rect(surface, left, top, s(PLAYER_W), s(PLAYER_H),
                  s(PLAYER_RADIUS), color)
    # Face band
    surface.fill_rect(left + s(4), top + s(4), s(PLAYER_W - 8), s(16), WHITE, 0.1)

    # Eye
    eye_offset = 6.0 if facing == 1 else -14.0
    eye_x, eye_y = view.to_px(x + eye_offset, y - PLAYER_H + 10)
    surface.fill_rect(eye_x, eye_y, s(8), s(8), WHITE)
    pupil_x, pupil_y = view.to_px(x + eye_offset + (4 if facing == 1 else 0),
                                  y - PLAYER_H + 12)
    surface.fill_rect(pupil_x, pupil_y, s(4), s(4), SLATE_900)

    # Ground shadow
    shadow_x, shadow_y = view.to_px(x, y + 2)
    surface.fill_ellipse(shadow_x, shadow_y, s(14), s(6), BLACK, 0.4)


def render_particles(surface: Surface, view: View, particles: List[Particle]):
    """Particles fade out with their remaining life."""
    radius = view.size(PARTICLE_RADIUS)
    for p in particles:
        px, py = view.to_px(p.x, p.y)
        surface.fill_circle(px, py, radius, p.color, max(0.0, p.life / p.max_life))


def render_scene(ctx: SimulationContext, surface: Surface, now_ms: float,
                 scale: float = 4.0, jitter: Optional[random.Random] = None):
    """Paint one frame. `scale` is world units per surface pixel."""
    jitter = jitter or random
    render_background(surface)
    render_stars(surface, ctx.stars, now_ms)

    shake_x, shake_y = shake_offset(ctx, jitter)
    view = View(ctx.camera.x + shake_x, ctx.camera.y + shake_y, scale)

    index = ctx.player.index
    start = max(0, index - STAIRS_BEHIND)
    for i, stair in enumerate(ctx.stairs.window(start, index + STAIRS_AHEAD), start):
        render_stair(surface, view, stair, i == index)

    if player_visible(ctx):
        player = ctx.player
        render_player(surface, view, player.visual_x,
                      player.visual_y - player.jump_offset,
                      player.facing, combo_color(ctx.combo))

    render_particles(surface, view, ctx.particles)
