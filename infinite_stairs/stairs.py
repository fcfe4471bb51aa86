"""
Stair Field
============
Procedural, append-only staircase.

The path is conceptually infinite: it is materialized in chunks and extended
whenever the player gets close to the tail. Visited stairs are never pruned so
the renderer can look behind the player.
"""

from typing import Iterator, List, Optional, Sequence
import logging
import random

from .components import Stair
from .config import Tuning


logger = logging.getLogger(__name__)


class StairField:
    """Ordered sequence of stairs with a probabilistic direction walk."""

    def __init__(self, tuning: Optional[Tuning] = None,
                 rng: Optional[random.Random] = None):
        self.tuning = tuning or Tuning()
        self.rng = rng or random.Random()
        self._stairs: List[Stair] = []

    @classmethod
    def from_directions(cls, directions: Sequence[int],
                        tuning: Optional[Tuning] = None,
                        rng: Optional[random.Random] = None) -> 'StairField':
        """Build a field from explicit directions, starting at the origin."""
        field = cls(tuning, rng)
        x, y = 0.0, 0.0
        for direction in directions:
            if direction not in (-1, 1):
                raise ValueError(f'stair direction must be +1 or -1, got {direction!r}')
            field._stairs.append(Stair(x, y, direction))
            x += direction * field.tuning.step_dx
            y -= field.tuning.step_dy
        return field

    # -------------------------------------------------------------------------
    # Sequence access
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._stairs)

    def __getitem__(self, index: int) -> Stair:
        return self._stairs[index]

    def __iter__(self) -> Iterator[Stair]:
        return iter(self._stairs)

    @property
    def tail(self) -> Stair:
        return self._stairs[-1]

    def window(self, start: int, end: int) -> List[Stair]:
        """Stairs in [start, end), clamped to what exists."""
        start = max(0, start)
        end = min(len(self._stairs), end)
        return self._stairs[start:end]

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate_initial(self) -> None:
        """Replace the field with a fresh run starting at the origin."""
        self._stairs = []
        self._walk(0.0, 0.0, 1, self.tuning.initial_stairs,
                   straight=self.tuning.straight_start)

    def extend(self, count: Optional[int] = None) -> None:
        """Append a chunk continuing seamlessly from the tail."""
        if not self._stairs:
            self.generate_initial()
            return
        tail = self.tail
        count = self.tuning.chunk_stairs if count is None else count
        self._walk(
            tail.x + tail.direction * self.tuning.step_dx,
            tail.y - self.tuning.step_dy,
            tail.direction,
            count,
            straight=-1,
        )
        logger.debug('Extended stair field to %d stairs', len(self._stairs))

    def needs_extension(self, index: int) -> bool:
        """True once `index` is within the extension margin of the tail."""
        return index > len(self._stairs) - self.tuning.extend_margin

    def _walk(self, x: float, y: float, direction: int, count: int,
              straight: int) -> None:
        # Stairs with i <= straight keep the running direction.
        for i in range(count):
            if i > straight and self.rng.random() < self.tuning.flip_probability:
                direction = -direction
            self._stairs.append(Stair(x, y, direction))
            x += direction * self.tuning.step_dx
            y -= self.tuning.step_dy
