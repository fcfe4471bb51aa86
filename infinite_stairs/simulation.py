"""
Simulation
===========
Run state machine, scoring, time pressure, camera and easing.

All mutable game state lives in one SimulationContext. The functions below
take it by reference; the facade in game.py is the only caller that also
talks to the host.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
import math
import random

from .components import (
    CameraState, Direction, Particle, PlayerState, RunState, Star
)
from .config import Tuning
from .particles import particle_system, spawn_combo_burst, spawn_death_burst
from .player import Action, resolve_action
from .stairs import StairField


class InputOutcome(Enum):
    IGNORED = 'IGNORED'
    CLIMBED = 'CLIMBED'
    FELL = 'FELL'


@dataclass
class SimulationContext:
    tuning: Tuning
    rng: random.Random
    stairs: StairField
    viewport_width: float = 0.0
    viewport_height: float = 0.0
    player: PlayerState = field(default_factory=PlayerState)
    camera: CameraState = field(default_factory=CameraState)
    particles: List[Particle] = field(default_factory=list)
    stars: List[Star] = field(default_factory=list)
    state: RunState = RunState.START
    score: int = 0
    combo: int = 0
    time: float = 0.0
    high_score: int = 0
    shake_timer: float = 0.0

    @property
    def time_percent(self) -> float:
        return (self.time / self.tuning.max_time) * 100.0


def create_context(
    tuning: Optional[Tuning] = None,
    rng: Optional[random.Random] = None,
    high_score: int = 0,
    viewport_width: float = 0.0,
    viewport_height: float = 0.0,
    stairs: Optional[StairField] = None,
) -> SimulationContext:
    """Build a context in the START state."""
    tuning = tuning or Tuning()
    rng = rng or random.Random()
    ctx = SimulationContext(
        tuning=tuning,
        rng=rng,
        stairs=stairs if stairs is not None else StairField(tuning, rng),
        viewport_width=viewport_width,
        viewport_height=viewport_height,
        high_score=high_score,
    )
    reset(ctx, regenerate=stairs is None)
    return ctx


# =============================================================================
# HELPERS
# =============================================================================

def ease(value: float, target: float, dt: float, rate: float) -> float:
    """Frame-rate independent exponential approach of `value` to `target`."""
    return value + (target - value) * (1.0 - math.exp(-dt * rate))


def time_bonus(tuning: Tuning, score: int) -> float:
    return max(tuning.time_bonus_min,
               tuning.time_bonus_base - score * tuning.time_bonus_per_score)


def depletion_rate(tuning: Tuning, score: int) -> float:
    """Time units drained per second."""
    return tuning.base_depletion_rate + score * tuning.depletion_per_score


def generate_stars(rng: random.Random, count: int) -> List[Star]:
    return [
        Star(x=rng.random(), y=rng.random(), size=rng.random() * 2,
             phase=rng.random() * math.tau)
        for _ in range(count)
    ]


def update_camera_target(ctx: SimulationContext) -> None:
    stair = ctx.stairs[ctx.player.index]
    ctx.camera.target_x = -stair.x + ctx.viewport_width * ctx.tuning.camera_anchor_x
    ctx.camera.target_y = -stair.y + ctx.viewport_height * ctx.tuning.camera_anchor_y


def snap_camera(ctx: SimulationContext) -> None:
    update_camera_target(ctx)
    ctx.camera.x = ctx.camera.target_x
    ctx.camera.y = ctx.camera.target_y


def set_viewport(ctx: SimulationContext, width: float, height: float) -> None:
    """Change the visible world area and re-center on the current stair."""
    ctx.viewport_width = width
    ctx.viewport_height = height
    snap_camera(ctx)


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

def reset(ctx: SimulationContext, regenerate: bool = True) -> None:
    """Return to a fresh START state on a new staircase."""
    tuning = ctx.tuning
    ctx.state = RunState.START
    ctx.score = 0
    ctx.combo = 0
    ctx.time = tuning.max_time
    ctx.shake_timer = 0.0
    ctx.particles = []

    if regenerate:
        ctx.stairs.generate_initial()
    ctx.stars = generate_stars(ctx.rng, tuning.star_count)

    start = ctx.stairs[0]
    ctx.player = PlayerState(index=0, facing=1,
                             visual_x=start.x, visual_y=start.y)
    snap_camera(ctx)


def game_over(ctx: SimulationContext) -> bool:
    """
    End the run. Returns True when the score set a new high score.

    Calling it again once the run is over changes nothing.
    """
    if ctx.state is RunState.GAMEOVER:
        return False
    ctx.state = RunState.GAMEOVER

    new_record = ctx.score > ctx.high_score
    if new_record:
        ctx.high_score = ctx.score

    ctx.shake_timer = ctx.tuning.death_shake_ms
    spawn_death_burst(ctx.particles, ctx.rng,
                      ctx.player.visual_x, ctx.player.visual_y, ctx.tuning)
    return new_record


def apply_direction(ctx: SimulationContext,
                    direction: Union[Direction, str]) -> InputOutcome:
    """Resolve one directional input and apply its outcome."""
    direction = Direction(direction)
    if ctx.state is RunState.GAMEOVER:
        return InputOutcome.IGNORED

    if ctx.state is RunState.START:
        ctx.state = RunState.PLAYING

    player = ctx.player
    if resolve_action(player.facing, direction) is Action.TURN:
        player.facing = -player.facing

    if ctx.stairs[player.index].direction != player.facing:
        game_over(ctx)
        return InputOutcome.FELL

    tuning = ctx.tuning
    player.index += 1
    ctx.score += 1
    ctx.combo += 1
    ctx.time = min(tuning.max_time, ctx.time + time_bonus(tuning, ctx.score))
    player.jump_offset = tuning.jump_height

    if ctx.combo > 0 and ctx.combo % tuning.combo_interval == 0:
        ctx.shake_timer = tuning.combo_shake_ms
        spawn_combo_burst(ctx.particles, ctx.rng,
                          player.visual_x, player.visual_y, ctx.combo, tuning)

    if ctx.stairs.needs_extension(player.index):
        ctx.stairs.extend()

    return InputOutcome.CLIMBED


def step(ctx: SimulationContext, dt: float) -> bool:
    """
    Advance the simulation by `dt` milliseconds.

    Returns True when the time budget ran out during this step.
    """
    tuning = ctx.tuning
    dt = min(max(dt, 0.0), tuning.max_frame_ms)

    timed_out = False
    if ctx.state is RunState.PLAYING:
        ctx.time -= depletion_rate(tuning, ctx.score) * (dt / 1000.0)
        if ctx.time <= 0:
            ctx.time = 0.0
            game_over(ctx)
            timed_out = True

    update_camera_target(ctx)
    camera = ctx.camera
    camera.x = ease(camera.x, camera.target_x, dt, tuning.camera_rate)
    camera.y = ease(camera.y, camera.target_y, dt, tuning.camera_rate)

    player = ctx.player
    stair = ctx.stairs[player.index]
    player.visual_x = ease(player.visual_x, stair.x, dt, tuning.player_rate)
    player.visual_y = ease(player.visual_y, stair.y, dt, tuning.player_rate)
    player.jump_offset *= math.exp(-dt * tuning.jump_decay_rate)

    if ctx.shake_timer > 0:
        ctx.shake_timer = max(0.0, ctx.shake_timer - dt)

    particle_system(ctx.particles, dt, tuning.particle_gravity)
    return timed_out
