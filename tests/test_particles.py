from __future__ import annotations

import random

import pytest

from infinite_stairs.components import Particle
from infinite_stairs.config import Tuning
from infinite_stairs.engine import BLUE_500, EMERALD_500, RED_500
from infinite_stairs.particles import (
    COMBO_PALETTE,
    combo_color,
    particle_system,
    spawn_combo_burst,
    spawn_death_burst,
)


def test_combo_color_tiers_wrap() -> None:
    assert combo_color(0) == BLUE_500
    assert combo_color(9) == BLUE_500
    assert combo_color(10) == EMERALD_500
    assert combo_color(10 * len(COMBO_PALETTE)) == BLUE_500
    assert combo_color(65) == RED_500


def test_combo_burst_shape() -> None:
    particles: list[Particle] = []
    spawn_combo_burst(particles, random.Random(3), 100.0, 50.0, combo=20, tuning=Tuning())

    assert len(particles) == 30
    for p in particles:
        assert (p.x, p.y) == (100.0, 30.0)
        assert -7.5 <= p.vx <= 7.5
        assert -12.5 <= p.vy <= 2.5
        assert p.life == p.max_life == 800.0
        assert p.color == combo_color(20)


def test_death_burst_shape() -> None:
    particles: list[Particle] = []
    spawn_death_burst(particles, random.Random(3), 0.0, 0.0, Tuning())

    assert len(particles) == 40
    for p in particles:
        assert -10.0 <= p.vx <= 10.0
        assert -20.0 <= p.vy <= 0.0
        assert p.life == 1500.0
        assert p.color == RED_500


def test_bursts_have_upward_bias() -> None:
    particles: list[Particle] = []
    spawn_death_burst(particles, random.Random(8), 0.0, 0.0, Tuning())
    mean_vy = sum(p.vy for p in particles) / len(particles)
    assert mean_vy < 0


def test_particle_physics_is_per_frame() -> None:
    p = Particle(x=0.0, y=0.0, vx=2.0, vy=-1.0, life=100.0, max_life=100.0, color=RED_500)
    particles = [p]

    particle_system(particles, 16.0, gravity=0.5)
    assert (p.x, p.y) == (2.0, -1.0)
    assert p.vy == -0.5
    assert p.life == 84.0

    # Same displacement regardless of how long the frame took.
    particle_system(particles, 40.0, gravity=0.5)
    assert (p.x, p.y) == (4.0, -1.5)
    assert p.vy == 0.0
    assert p.life == pytest.approx(44.0)


def test_expired_particles_are_removed() -> None:
    keep = Particle(0.0, 0.0, 0.0, 0.0, life=20.0, max_life=20.0, color=RED_500)
    drop = Particle(0.0, 0.0, 0.0, 0.0, life=16.0, max_life=20.0, color=RED_500)
    particles = [drop, keep]

    particle_system(particles, 16.0, gravity=0.5)

    assert particles == [keep]
