"""
State projection for the garden application.

Actions are folded into an immutable State by per-slot reducers, and
derived views are read back through memoized selectors.
"""

from .actions import (
    CHAIN_ACTIONS,
    Action,
    ChainAction,
    CreatePlot,
    GameAction,
    IntendMove,
    MovePlayer,
    TickGame,
    create_garden_plot,
    intend_move,
    is_chain_action,
    move_player,
    tick_game,
)
from .garden import GAME_H, GAME_W, GARDEN_MARGIN, BBox, GardenPlot, Position
from .selectors import (
    GardenView,
    get_game_tick,
    get_garden_view,
    get_move_intent,
    get_my_garden,
    get_player_in_garden,
    get_player_position,
    selector,
)
from .state import State, combine_reducers, reduce, replay

__all__ = [
    # State
    "State",
    "reduce",
    "replay",
    "combine_reducers",
    # Actions
    "Action",
    "ChainAction",
    "GameAction",
    "CreatePlot",
    "MovePlayer",
    "TickGame",
    "IntendMove",
    "CHAIN_ACTIONS",
    "is_chain_action",
    "create_garden_plot",
    "move_player",
    "tick_game",
    "intend_move",
    # Domain types
    "GardenPlot",
    "Position",
    "BBox",
    "GAME_W",
    "GAME_H",
    "GARDEN_MARGIN",
    # Selectors
    "selector",
    "GardenView",
    "get_my_garden",
    "get_game_tick",
    "get_player_position",
    "get_move_intent",
    "get_garden_view",
    "get_player_in_garden",
]
