"""
Configuration
==============
Gameplay tuning and terminal run options.

All distances are world units (one stair step is STEP_DX across and STEP_DY
up), all durations are milliseconds.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os


STATE_DIR_ENV = 'INFINITE_STAIRS_STATE_DIR'
HIGH_SCORE_KEY = 'infinite_stairs_highscore'

STEP_DX = 40.0
STEP_DY = 24.0


@dataclass(frozen=True)
class Tuning:
    # Time budget
    max_time: float = 100.0
    base_depletion_rate: float = 6.0      # units per second at score 0
    depletion_per_score: float = 0.15
    time_bonus_base: float = 8.0
    time_bonus_per_score: float = 0.01
    time_bonus_min: float = 2.0

    # Staircase generation
    step_dx: float = STEP_DX
    step_dy: float = STEP_DY
    initial_stairs: int = 100
    chunk_stairs: int = 50
    straight_start: int = 5               # stairs 0..5 never flip
    flip_probability: float = 0.4
    extend_margin: int = 30

    # Easing rates (per ms)
    camera_rate: float = 0.01
    player_rate: float = 0.02
    jump_decay_rate: float = 0.01
    jump_height: float = 20.0
    camera_anchor_x: float = 0.5
    camera_anchor_y: float = 0.7

    # Upper bound on a single frame step
    max_frame_ms: float = 50.0

    # Feedback
    combo_interval: int = 10
    burst_height: float = 20.0
    combo_particles: int = 30
    combo_particle_speed: float = 15.0
    combo_particle_lift: float = 5.0
    combo_particle_life: float = 800.0
    combo_shake_ms: float = 150.0
    death_particles: int = 40
    death_particle_speed: float = 20.0
    death_particle_lift: float = 10.0
    death_particle_life: float = 1500.0
    death_shake_ms: float = 400.0
    particle_gravity: float = 0.5         # per frame, not scaled by dt

    # Background
    star_count: int = 100


def default_state_dir() -> Path:
    """
    Directory holding the persisted high score.

    Override for tests/dev via `INFINITE_STAIRS_STATE_DIR`.
    """
    override = os.environ.get(STATE_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / '.infinite_stairs'


@dataclass(frozen=True)
class RunConfig:
    """Options of the terminal host, filled from the command line."""
    target_fps: int = 60
    # World units per half-block pixel.
    scale: float = 4.0
    # Seed for the staircase; None picks a fresh one every launch.
    seed: Optional[int] = None
    state_dir: Optional[str] = None
    log_file: Optional[str] = None
    log_level: str = 'INFO'

    def resolved_state_dir(self) -> Path:
        if self.state_dir:
            return Path(self.state_dir)
        return default_state_dir()
