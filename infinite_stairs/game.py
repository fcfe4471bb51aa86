"""
Game Engine Facade
===================
Owns the simulation context and exposes the contract the host UI uses:
directional input, restart, resize and teardown, plus state callbacks.
"""

from typing import Callable, List, Optional, Union
import logging
import random

from .components import Direction, RunState
from .config import Tuning
from .render import Surface, render_scene
from .simulation import (
    InputOutcome,
    SimulationContext,
    apply_direction,
    create_context,
    reset,
    set_viewport,
    step,
)
from .stairs import StairField
from .storage import HighScoreStore, MemoryHighScoreStore


logger = logging.getLogger(__name__)

StateCallback = Callable[[RunState, int, int, int], None]
TimeCallback = Callable[[float], None]


def _ignore_state(state: RunState, score: int, high_score: int, combo: int) -> None:
    pass


def _ignore_time(percent: float) -> None:
    pass


class StairsEngine:
    """
    The game as seen by a host.

    The host owns the frame loop: it calls `step(dt)` then `render(now)` every
    frame and forwards directional input as it arrives. `on_state_change`
    fires on every score-relevant change, `on_time_update` every frame while
    a run is in progress.
    """

    def __init__(
        self,
        surface: Surface,
        on_state_change: Optional[StateCallback] = None,
        on_time_update: Optional[TimeCallback] = None,
        store: Optional[HighScoreStore] = None,
        tuning: Optional[Tuning] = None,
        seed: Optional[int] = None,
        scale: float = 4.0,
        stairs: Optional[StairField] = None,
    ):
        self.surface = surface
        self.on_state_change = on_state_change or _ignore_state
        self.on_time_update = on_time_update or _ignore_time
        self.store = store if store is not None else MemoryHighScoreStore()
        self.scale = scale
        self.destroyed = False
        self._teardowns: List[Callable[[], None]] = []
        # Cosmetic randomness (shake jitter) never touches the gameplay RNG.
        self._jitter = random.Random()

        self.ctx: SimulationContext = create_context(
            tuning=tuning,
            rng=random.Random(seed),
            high_score=self.store.load() or 0,
            viewport_width=surface.width * scale,
            viewport_height=surface.height * scale,
            stairs=stairs,
        )
        logger.info('Engine ready (high score %d)', self.ctx.high_score)
        self._notify_state()
        self.on_time_update(100.0)

    # -------------------------------------------------------------------------
    # Read-only views for the host
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self.ctx.state

    @property
    def score(self) -> int:
        return self.ctx.score

    @property
    def high_score(self) -> int:
        return self.ctx.high_score

    @property
    def combo(self) -> int:
        return self.ctx.combo

    # -------------------------------------------------------------------------
    # Host contract
    # -------------------------------------------------------------------------

    def handle_direction(self, direction: Union[Direction, str]) -> InputOutcome:
        """Resolve and apply one directional input."""
        direction = Direction(direction)
        if self.destroyed:
            return InputOutcome.IGNORED

        was_starting = self.ctx.state is RunState.START
        previous_high = self.ctx.high_score
        outcome = apply_direction(self.ctx, direction)
        if outcome is InputOutcome.IGNORED:
            return outcome

        if was_starting:
            logger.info('Run started')
        if outcome is InputOutcome.FELL:
            self._finish_run('wrong direction', previous_high)
        else:
            self._notify_state()
        return outcome

    def restart(self) -> None:
        """Reset to a fresh START state on a new staircase."""
        if self.destroyed:
            return
        reset(self.ctx)
        logger.debug('Run reset')
        self._notify_state()
        self.on_time_update(100.0)

    def resize(self, width: int, height: int) -> None:
        """The surface changed size; keep the camera centred on the player."""
        if self.destroyed:
            return
        set_viewport(self.ctx, width * self.scale, height * self.scale)

    def step(self, dt: float) -> None:
        """Advance the simulation by `dt` milliseconds."""
        if self.destroyed:
            return
        was_playing = self.ctx.state is RunState.PLAYING
        previous_high = self.ctx.high_score
        timed_out = step(self.ctx, dt)
        if was_playing:
            self.on_time_update(self.ctx.time_percent)
        if timed_out:
            self._finish_run('out of time', previous_high)

    def render(self, now_ms: float) -> None:
        if self.destroyed:
            return
        render_scene(self.ctx, self.surface, now_ms, self.scale, self._jitter)

    def add_teardown(self, callback: Callable[[], None]) -> None:
        """Register a callback to run once when the engine is destroyed."""
        self._teardowns.append(callback)

    def destroy(self) -> None:
        """
        Stop the engine and release host subscriptions. Safe to call twice.

        Every teardown runs even if an earlier one raises; the first error is
        re-raised once all of them have had their turn.
        """
        if self.destroyed:
            return
        self.destroyed = True
        teardowns, self._teardowns = self._teardowns, []
        first_error: Optional[Exception] = None
        for callback in teardowns:
            try:
                callback()
            except Exception as exc:
                logger.exception('Teardown %r failed', callback)
                if first_error is None:
                    first_error = exc
        logger.debug('Engine destroyed')
        if first_error is not None:
            raise first_error

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _finish_run(self, reason: str, previous_high: int) -> None:
        ctx = self.ctx
        logger.info('Game over (%s) at score %d', reason, ctx.score)
        if ctx.high_score > previous_high:
            logger.info('New high score: %d', ctx.high_score)
            self.store.save(ctx.high_score)
        self._notify_state()

    def _notify_state(self) -> None:
        ctx = self.ctx
        self.on_state_change(ctx.state, ctx.score, ctx.high_score, ctx.combo)
