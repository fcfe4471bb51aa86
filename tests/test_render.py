from __future__ import annotations

import copy
import random

import pytest

from infinite_stairs.components import Direction, RunState, Star
from infinite_stairs.engine import PixelCanvas, SLATE_900, SLATE_950, WHITE
from infinite_stairs.render import (
    View,
    player_visible,
    render_scene,
    render_stars,
    shake_offset,
    star_alpha,
)
from infinite_stairs.simulation import apply_direction, create_context
from infinite_stairs.stairs import StairField


class _RecordingSurface:
    """Surface without the optional round_rect primitive."""

    def __init__(self, width: int = 120, height: int = 80) -> None:
        self.width = width
        self.height = height
        self.calls: list[tuple] = []

    def fill_gradient(self, top, bottom) -> None:
        self.calls.append(("fill_gradient", top, bottom))

    def fill_rect(self, x, y, w, h, color, alpha=1.0) -> None:
        self.calls.append(("fill_rect", x, y, w, h, color, alpha))

    def fill_polygon(self, points, color, alpha=1.0) -> None:
        self.calls.append(("fill_polygon", tuple(points), color, alpha))

    def stroke_polygon(self, points, color, alpha=1.0) -> None:
        self.calls.append(("stroke_polygon", tuple(points), color, alpha))

    def fill_ellipse(self, cx, cy, rx, ry, color, alpha=1.0) -> None:
        self.calls.append(("fill_ellipse", cx, cy, rx, ry, color, alpha))

    def fill_circle(self, cx, cy, radius, color, alpha=1.0) -> None:
        self.calls.append(("fill_circle", cx, cy, radius, color, alpha))

    def named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


class _RoundedSurface(_RecordingSurface):
    def round_rect(self, x, y, w, h, radius, color, alpha=1.0) -> None:
        self.calls.append(("round_rect", x, y, w, h, radius, color, alpha))


def _ctx(directions: list[int] | None = None):
    stairs = StairField.from_directions(directions, rng=random.Random(1)) if directions else None
    return create_context(
        rng=random.Random(4),
        viewport_width=480.0,
        viewport_height=320.0,
        stairs=stairs,
    )


def test_scene_draws_background_first() -> None:
    surface = _RecordingSurface()
    render_scene(_ctx(), surface, now_ms=0.0, scale=4.0, jitter=random.Random(0))
    assert surface.calls[0] == ("fill_gradient", SLATE_950, SLATE_900)


def test_player_body_falls_back_to_plain_rect() -> None:
    surface = _RecordingSurface()
    ctx = _ctx()
    ctx.stars = []
    render_scene(ctx, surface, now_ms=0.0, scale=4.0, jitter=random.Random(0))

    # glow + body, then face band, eye, pupil
    rects = surface.named("fill_rect")
    assert len(rects) == 5
    body = rects[1]
    assert body[3:5] == (pytest.approx(28 / 4), pytest.approx(42 / 4))
    assert len(surface.named("fill_ellipse")) == 1


def test_player_body_uses_round_rect_when_available() -> None:
    surface = _RoundedSurface()
    ctx = _ctx()
    ctx.stars = []
    render_scene(ctx, surface, now_ms=0.0, scale=4.0, jitter=random.Random(0))

    rounded = surface.named("round_rect")
    assert len(rounded) == 2
    assert rounded[1][5] == pytest.approx(10 / 4)
    assert len(surface.named("fill_rect")) == 3


def test_eye_sits_on_facing_side() -> None:
    right = _RecordingSurface()
    ctx = _ctx()
    ctx.stars = []
    render_scene(ctx, right, now_ms=0.0, scale=1.0, jitter=random.Random(0))

    left = _RecordingSurface()
    ctx.player.facing = -1
    render_scene(ctx, left, now_ms=0.0, scale=1.0, jitter=random.Random(0))

    eye_right = right.named("fill_rect")[3]
    eye_left = left.named("fill_rect")[3]
    assert eye_right[1] - eye_left[1] == pytest.approx(20.0)
    assert eye_right[5] == WHITE


def test_stair_window_around_player() -> None:
    ctx = _ctx([1] * 100)
    ctx.stars = []

    surface = _RecordingSurface()
    render_scene(ctx, surface, now_ms=0.0, jitter=random.Random(0))
    assert len(surface.named("fill_polygon")) == 30 * 3

    ctx.player.index = 40
    surface = _RecordingSurface()
    render_scene(ctx, surface, now_ms=0.0, jitter=random.Random(0))
    assert len(surface.named("fill_polygon")) == 45 * 3


def test_current_stair_is_highlighted() -> None:
    ctx = _ctx([1] * 40)
    ctx.stars = []
    surface = _RecordingSurface()
    render_scene(ctx, surface, now_ms=0.0, jitter=random.Random(0))

    tops = surface.named("fill_polygon")[::3]
    colors = {t[2] for t in tops}
    assert len(colors) == 2
    assert tops[0][2] != tops[1][2]


def test_player_hidden_late_in_death_shake() -> None:
    ctx = _ctx([-1, 1])
    apply_direction(ctx, Direction.RIGHT)
    assert ctx.state is RunState.GAMEOVER

    ctx.shake_timer = 300.0
    assert player_visible(ctx)
    ctx.shake_timer = 150.0
    assert not player_visible(ctx)

    surface = _RoundedSurface()
    ctx.stars = []
    render_scene(ctx, surface, now_ms=0.0, jitter=random.Random(0))
    assert surface.named("round_rect") == []
    assert len(surface.named("fill_circle")) == 40


def test_particles_fade_with_life() -> None:
    ctx = _ctx([-1, 1])
    apply_direction(ctx, Direction.RIGHT)
    ctx.particles = ctx.particles[:1]
    ctx.particles[0].life = ctx.particles[0].max_life / 4
    ctx.stars = []

    surface = _RecordingSurface()
    render_scene(ctx, surface, now_ms=0.0, jitter=random.Random(0))
    (circle,) = surface.named("fill_circle")
    assert circle[-1] == pytest.approx(0.25)


def test_render_does_not_touch_simulation_state() -> None:
    ctx = _ctx([1] * 20)
    for _ in range(10):
        apply_direction(ctx, Direction.RIGHT)
    assert ctx.shake_timer > 0

    before = (
        copy.deepcopy(ctx.player), copy.deepcopy(ctx.camera), copy.deepcopy(ctx.particles),
        ctx.score, ctx.combo, ctx.time, ctx.shake_timer, ctx.state, ctx.rng.getstate(),
    )
    render_scene(ctx, PixelCanvas(120, 80), now_ms=1234.0, jitter=random.Random(0))
    after = (
        ctx.player, ctx.camera, ctx.particles,
        ctx.score, ctx.combo, ctx.time, ctx.shake_timer, ctx.state, ctx.rng.getstate(),
    )
    assert before == after


def test_shake_offset_scales_with_timer() -> None:
    ctx = _ctx()
    assert shake_offset(ctx, random.Random(0)) == (0.0, 0.0)

    ctx.shake_timer = 400.0
    for _ in range(50):
        dx, dy = shake_offset(ctx, random.Random())
        assert abs(dx) <= 7.5 and abs(dy) <= 7.5

    ctx.shake_timer = 40.0
    for _ in range(50):
        dx, dy = shake_offset(ctx, random.Random())
        assert abs(dx) <= 0.75 and abs(dy) <= 0.75


def test_stars_twinkle_with_wall_clock() -> None:
    star = Star(x=0.5, y=0.5, size=1.0, phase=0.0)
    assert star_alpha(star, 0.0) == pytest.approx(0.3)
    assert 0.1 <= star_alpha(star, 1234.0) <= 0.5
    assert star_alpha(star, 0.0) != star_alpha(star, 1000.0)

    surface = _RecordingSurface(width=100, height=50)
    render_stars(surface, [star], 0.0)
    (rect,) = surface.named("fill_rect")
    assert rect[1:3] == (50.0, 25.0)
    assert rect[-1] == pytest.approx(0.3)


def test_view_projection() -> None:
    view = View(offset_x=100.0, offset_y=-20.0, scale=4.0)
    assert view.to_px(0.0, 0.0) == (25.0, -5.0)
    assert view.size(8.0) == 2.0


def test_scene_paints_pixels_on_canvas() -> None:
    canvas = PixelCanvas(120, 80)
    ctx = _ctx([1] * 40)
    ctx.stars = []
    render_scene(ctx, canvas, now_ms=0.0, jitter=random.Random(0))

    # The current stair sits at 50% width, 70% height.
    assert canvas.get_pixel(60, 56) != canvas.get_pixel(0, 56)
