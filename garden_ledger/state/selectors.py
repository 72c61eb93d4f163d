"""
Memoized selectors over State.

A selector derived with ``@selector(*inputs)`` runs its input selectors
on every call, and only recomputes when an input changed since its last
call on the current thread. Inputs are compared by value for immutable
primitives (int, float, bool, str, bytes, None) and by identity for
everything else, which relies on reducers preserving slot identity.

Caches hold a single entry per selector and thread.
"""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..logging_utils import get_ledger_logger
from .garden import BBox, GardenPlot, Position
from .state import State

cache_logger = get_ledger_logger("selectors.cache")

_VALUE_TYPES = (int, float, bool, str, bytes, type(None))


def _same_input(current: Any, cached: Any) -> bool:
    if isinstance(current, _VALUE_TYPES) and isinstance(cached, _VALUE_TYPES):
        return type(current) is type(cached) and current == cached
    return current is cached


def selector(*inputs: Callable[[Any], Any]) -> Callable[[Callable[..., Any]], Callable[[Any], Any]]:
    """Memoize a derivation over the results of ``inputs``.

    Example:
        >>> @selector(get_my_garden)
        ... def get_plot_name(plot):
        ...     return plot.name if plot else None
    """

    def decorator(func: Callable[..., Any]) -> Callable[[Any], Any]:
        cache = threading.local()
        name = func.__name__

        @functools.wraps(func)
        def wrapper(state: Any) -> Any:
            args = tuple(select(state) for select in inputs)
            entry = getattr(cache, "entry", None)
            if entry is not None:
                cached_args, cached_result = entry
                if all(_same_input(arg, cached) for arg, cached in zip(args, cached_args)):
                    cache_logger.debug("selector %s - cache hit", name)
                    return cached_result

            result = func(*args)
            cache.entry = (args, result)
            cache_logger.debug("selector %s - cache miss", name)
            return result

        def cache_clear() -> None:
            cache.__dict__.pop("entry", None)

        wrapper.cache_clear = cache_clear
        return wrapper

    return decorator


# Slot accessors


def get_my_garden(state: State) -> GardenPlot | None:
    return state.my_garden


def get_game_tick(state: State) -> int:
    return state.game_tick


def get_player_position(state: State) -> Position | None:
    return state.player_position


def get_move_intent(state: State) -> Position | None:
    return state.move_intent


# Derived views


@dataclass(frozen=True)
class GardenView:
    """Everything needed to render the player's plot."""

    plot: GardenPlot
    bbox: BBox
    label: str


@selector(get_my_garden)
def get_garden_view(plot: GardenPlot | None) -> GardenView | None:
    if plot is None:
        return None
    return GardenView(plot=plot, bbox=GardenPlot.default_bbox(), label=f"<{plot.name}>")


@selector(get_garden_view, get_player_position)
def get_player_in_garden(view: GardenView | None, position: Position | None) -> bool:
    return view is not None and position is not None and view.bbox.contains(position)
