"""
Player Module
==============
Input resolution and terminal key handling.
"""

from enum import Enum
from typing import List, Union

from .components import Direction


class Action(Enum):
    CLIMB = 'CLIMB'
    TURN = 'TURN'


def resolve_action(facing: int, direction: Union[Direction, str]) -> Action:
    """
    Classify a directional input against the current facing.

    Pressing the side the player already faces is a climb, the other side
    is a turn. Whether the climb then succeeds is decided by the simulation.
    """
    return Action.CLIMB if Direction(direction).sign == facing else Action.TURN


class InputHandler:
    """
    Maps blessed keystrokes to host commands.

    Directions are queued in arrival order and every one of them is applied;
    restart and quit are flags consumed on read.
    """

    LEFT_KEYS = ('a', 'h')
    RIGHT_KEYS = ('d', 'l')

    def __init__(self):
        self._directions: List[Direction] = []
        self._restart_triggered = False
        self._quit_triggered = False

    def process_key(self, key) -> None:
        """Process a single key press from blessed's inkey()."""
        if key is None or not key:
            return

        key_str = key.lower() if not key.is_sequence else ''

        if key_str == 'q' or key.name == 'KEY_ESCAPE':
            self._quit_triggered = True
        elif key.name == 'KEY_LEFT' or key_str in self.LEFT_KEYS:
            self._directions.append(Direction.LEFT)
        elif key.name == 'KEY_RIGHT' or key_str in self.RIGHT_KEYS:
            self._directions.append(Direction.RIGHT)
        elif key_str == 'r':
            self._restart_triggered = True

    def consume_directions(self) -> List[Direction]:
        directions, self._directions = self._directions, []
        return directions

    def consume_restart(self) -> bool:
        triggered, self._restart_triggered = self._restart_triggered, False
        return triggered

    def consume_quit(self) -> bool:
        triggered, self._quit_triggered = self._quit_triggered, False
        return triggered
