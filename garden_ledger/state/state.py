"""
Application state projected from the action stream.

State is an immutable product of slots, one per reducer. Reducing an
action produces a new State only when some slot changes; otherwise the
same State object is returned, and untouched slots are shared with the
previous State.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from . import reducers
from .actions import Action
from .garden import GardenPlot, Position

S = TypeVar("S")


@dataclass(frozen=True)
class State:
    """Snapshot of the garden application.

    Attributes:
        my_garden: The player's plot, once created
        game_tick: Timestamp of the latest game tick
        player_position: Last persisted player position
        move_intent: Pending move, cleared by the next tick
    """

    my_garden: GardenPlot | None = None
    game_tick: int = 0
    player_position: Position | None = None
    move_intent: Position | None = None

    @classmethod
    def initial(cls) -> State:
        return cls()

    def reduce(self, action: Action) -> State:
        return reduce(self, action)


def combine_reducers(**slot_reducers: Callable[[Any, Any], Any]) -> Callable[[S, Any], S]:
    """Build a state reducer from one reducer per dataclass field.

    The combined reducer returns the given state itself when every slot
    reducer returns its input unchanged.
    """

    def combined(state: S, action: Any) -> S:
        changes = {}
        for slot, reducer in slot_reducers.items():
            previous = getattr(state, slot)
            value = reducer(previous, action)
            if value is not previous:
                changes[slot] = value
        if not changes:
            return state
        return dataclasses.replace(state, **changes)

    return combined


reduce = combine_reducers(
    my_garden=reducers.garden,
    game_tick=reducers.game_tick,
    player_position=reducers.player_position,
    move_intent=reducers.move_intent,
)


def replay(actions: Iterable[Action], initial: State | None = None) -> State:
    """Fold a sequence of actions into a state, starting from ``initial``."""
    state = initial if initial is not None else State.initial()
    for action in actions:
        state = reduce(state, action)
    return state
