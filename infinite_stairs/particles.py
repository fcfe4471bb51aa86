"""
Particle System
================
Combo and death bursts, and the per-frame particle physics.

Particles are purely visual; nothing here feeds back into gameplay.
"""

from typing import List
import random

from .components import Particle, RGB
from .config import Tuning
from .engine import (
    BLUE_500, EMERALD_500, AMBER_500, VIOLET_500, PINK_500, CYAN_500, RED_500
)


COMBO_PALETTE: List[RGB] = [
    BLUE_500, EMERALD_500, AMBER_500, VIOLET_500, PINK_500, CYAN_500, RED_500
]
DEATH_COLOR = RED_500


def combo_color(combo: int) -> RGB:
    """Colour of the current combo tier (one tier per 10 combo, wrapping)."""
    tier = max(0, combo) // 10
    return COMBO_PALETTE[tier % len(COMBO_PALETTE)]


def spawn_burst(
    particles: List[Particle],
    rng: random.Random,
    x: float, y: float,
    count: int,
    speed: float,
    lift: float,
    life: float,
    color: RGB
) -> None:
    """Spawn `count` particles with a symmetric spread and an upward bias."""
    for _ in range(count):
        particles.append(Particle(
            x=x,
            y=y,
            vx=(rng.random() - 0.5) * speed,
            vy=(rng.random() - 0.5) * speed - lift,
            life=life,
            max_life=life,
            color=color,
        ))


def spawn_combo_burst(particles: List[Particle], rng: random.Random,
                      x: float, y: float, combo: int, tuning: Tuning) -> None:
    spawn_burst(
        particles, rng, x, y - tuning.burst_height,
        count=tuning.combo_particles,
        speed=tuning.combo_particle_speed,
        lift=tuning.combo_particle_lift,
        life=tuning.combo_particle_life,
        color=combo_color(combo),
    )


def spawn_death_burst(particles: List[Particle], rng: random.Random,
                      x: float, y: float, tuning: Tuning) -> None:
    spawn_burst(
        particles, rng, x, y - tuning.burst_height,
        count=tuning.death_particles,
        speed=tuning.death_particle_speed,
        lift=tuning.death_particle_lift,
        life=tuning.death_particle_life,
        color=DEATH_COLOR,
    )


def particle_system(particles: List[Particle], dt: float, gravity: float) -> None:
    """
    Advance particles one frame and drop the expired ones in place.

    Movement and gravity are applied per call, only life is scaled by dt,
    so arcs depend on the frame rate.
    """
    for p in particles:
        p.x += p.vx
        p.y += p.vy
        p.vy += gravity
        p.life -= dt
    particles[:] = [p for p in particles if p.life > 0]
