from __future__ import annotations

import pytest

from infinite_stairs.components import Direction
from infinite_stairs.player import Action, InputHandler, resolve_action


class _Key(str):
    """Minimal stand-in for blessed's Keystroke."""

    def __new__(cls, text: str = "", name: str | None = None) -> "_Key":
        obj = super().__new__(cls, text)
        obj.name = name
        obj.is_sequence = name is not None
        return obj


@pytest.mark.parametrize(
    "facing, direction, expected",
    [
        (1, Direction.RIGHT, Action.CLIMB),
        (1, Direction.LEFT, Action.TURN),
        (-1, Direction.LEFT, Action.CLIMB),
        (-1, Direction.RIGHT, Action.TURN),
        (1, "RIGHT", Action.CLIMB),
        (-1, "RIGHT", Action.TURN),
    ],
)
def test_resolve_action(facing: int, direction, expected: Action) -> None:
    assert resolve_action(facing, direction) is expected


def test_resolve_action_rejects_unknown_direction() -> None:
    with pytest.raises(ValueError):
        resolve_action(1, "UP")


def test_direction_signs() -> None:
    assert Direction.LEFT.sign == -1
    assert Direction.RIGHT.sign == 1
    assert Direction.from_sign(-1) is Direction.LEFT
    assert Direction.from_sign(1) is Direction.RIGHT


def test_input_handler_queues_directions_in_order() -> None:
    handler = InputHandler()
    handler.process_key(_Key("\x1b[D", name="KEY_LEFT"))
    handler.process_key(_Key("d"))
    handler.process_key(_Key("A"))
    handler.process_key(_Key("\x1b[C", name="KEY_RIGHT"))

    assert handler.consume_directions() == [
        Direction.LEFT, Direction.RIGHT, Direction.LEFT, Direction.RIGHT,
    ]
    assert handler.consume_directions() == []


def test_input_handler_flags_are_consumed_once() -> None:
    handler = InputHandler()
    handler.process_key(_Key("r"))
    handler.process_key(_Key("\x1b", name="KEY_ESCAPE"))

    assert handler.consume_restart() is True
    assert handler.consume_restart() is False
    assert handler.consume_quit() is True
    assert handler.consume_quit() is False


def test_input_handler_ignores_empty_and_unknown_keys() -> None:
    handler = InputHandler()
    handler.process_key(_Key(""))
    handler.process_key(None)
    handler.process_key(_Key("x"))
    assert handler.consume_directions() == []
    assert handler.consume_quit() is False
