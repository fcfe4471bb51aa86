"""
Component Definitions
======================
Plain dataclasses and enums shared by the simulation and the renderer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


RGB = Tuple[int, int, int]


# =============================================================================
# ENUMS
# =============================================================================

class RunState(Enum):
    """Lifecycle of a single run."""
    START = 'START'
    PLAYING = 'PLAYING'
    GAMEOVER = 'GAMEOVER'


class Direction(Enum):
    """Directional input coming from the host."""
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'

    @property
    def sign(self) -> int:
        return -1 if self is Direction.LEFT else 1

    @classmethod
    def from_sign(cls, sign: int) -> 'Direction':
        return cls.LEFT if sign < 0 else cls.RIGHT


# =============================================================================
# WORLD COMPONENTS
# =============================================================================

@dataclass(frozen=True)
class Stair:
    """
    One platform of the staircase, in world units (y grows downward).

    `direction` is the horizontal sign of the step from this stair to the
    next one, so it is the facing a player standing here needs to climb.
    """
    x: float
    y: float
    direction: int


@dataclass
class PlayerState:
    """Player position on the staircase plus its eased visual position."""
    index: int = 0
    facing: int = 1
    visual_x: float = 0.0
    visual_y: float = 0.0
    jump_offset: float = 0.0


@dataclass
class CameraState:
    """Camera translation; `x`/`y` ease toward `target_x`/`target_y`."""
    x: float = 0.0
    y: float = 0.0
    target_x: float = 0.0
    target_y: float = 0.0


# =============================================================================
# VISUAL COMPONENTS
# =============================================================================

@dataclass
class Particle:
    """A short-lived feedback particle, life measured in milliseconds."""
    x: float
    y: float
    vx: float
    vy: float
    life: float
    max_life: float
    color: RGB


@dataclass(frozen=True)
class Star:
    """Background star. Position is a fraction of the viewport (0..1)."""
    x: float
    y: float
    size: float
    phase: float
