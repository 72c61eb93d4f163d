"""
Slot reducers.

Each reducer folds one action into one slot of the state. A reducer
returns the exact object it was given when the action does not touch
its slot, so unchanged slots keep their identity across transitions.
"""

from __future__ import annotations

from .actions import Action, CreatePlot, IntendMove, MovePlayer, TickGame
from .garden import GardenPlot, Position


def garden(state: GardenPlot | None, action: Action) -> GardenPlot | None:
    """The player's plot. Set once; later plots are ignored."""
    if isinstance(action, CreatePlot) and state is None:
        return action.plot
    return state


def game_tick(state: int, action: Action) -> int:
    if isinstance(action, TickGame):
        return action.tick
    return state


def player_position(state: Position | None, action: Action) -> Position | None:
    if isinstance(action, MovePlayer):
        return action.position
    return state


def move_intent(state: Position | None, action: Action) -> Position | None:
    """Where the player wants to go next. Consumed by the next game tick."""
    if isinstance(action, IntendMove):
        return action.position
    if isinstance(action, TickGame):
        return None
    return state
