"""
Actions dispatched to the store.

Actions fall into two groups:
- Chain actions must be reproduced on replay, so each one is appended
  to the chain as block data.
- Game actions are transient: they update state only and are never
  persisted.

Chain actions use externally tagged JSON, e.g.
``{"CreatePlot": {"uuid": "...", "name": "..."}}``, and hash as a u32
little-endian variant index followed by the variant's fields.
"""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from ..blocks.timestamps import get_timestamp
from .garden import GardenPlot, Position, pack_i64

_VARIANT_INDEX = struct.Struct("<I")


class ChainAction(ABC):
    """Base class for actions persisted as block data.

    Each variant supplies its JSON body, its field bytes and a decoder
    for its JSON body.
    """

    variant: ClassVar[str]
    variant_index: ClassVar[int]

    @abstractmethod
    def _json_value(self) -> Any:
        """JSON body stored under the variant tag."""
        ...

    @abstractmethod
    def _field_bytes(self) -> bytes:
        """Hashed bytes of the variant fields."""
        ...

    def to_json(self) -> dict[str, Any]:
        return {self.variant: self._json_value()}

    @classmethod
    def from_json(cls, value: Any) -> ChainAction:
        """Decode an externally tagged chain action.

        Raises:
            TypeError: If the value is not a single-key object
            ValueError: If the tag names no known chain action
        """
        if not isinstance(value, dict) or len(value) != 1:
            raise TypeError(f"Expected a single-key chain action object but got {value!r}")
        ((tag, body),) = value.items()
        variant = CHAIN_ACTIONS.get(tag)
        if variant is None:
            raise ValueError(f"Unknown chain action: {tag!r}")
        return variant._from_json_value(body)

    @classmethod
    @abstractmethod
    def _from_json_value(cls, body: Any) -> ChainAction:
        """Decode the JSON body of this variant."""
        ...

    def serialized_bytes(self) -> bytes:
        return _VARIANT_INDEX.pack(self.variant_index) + self._field_bytes()


@dataclass(frozen=True)
class CreatePlot(ChainAction):
    """Claim the player's garden plot."""

    variant: ClassVar[str] = "CreatePlot"
    variant_index: ClassVar[int] = 0

    plot: GardenPlot

    def _json_value(self) -> Any:
        return self.plot.to_json()

    @classmethod
    def _from_json_value(cls, body: Any) -> CreatePlot:
        return cls(plot=GardenPlot.from_json(body))

    def _field_bytes(self) -> bytes:
        return self.plot.serialized_bytes()


@dataclass(frozen=True)
class MovePlayer(ChainAction):
    """Move the player to a position at a given game tick."""

    variant: ClassVar[str] = "MovePlayer"
    variant_index: ClassVar[int] = 1

    position: Position
    tick: int

    def _json_value(self) -> Any:
        return [self.position.to_json(), self.tick]

    @classmethod
    def _from_json_value(cls, body: Any) -> MovePlayer:
        if not isinstance(body, list) or len(body) != 2:
            raise TypeError(f"Expected [position, tick] but got {body!r}")
        position, tick = body
        if not isinstance(tick, int) or isinstance(tick, bool):
            raise TypeError(f"Expected an integer tick but got {type(tick).__name__}")
        return cls(position=Position.from_json(position), tick=tick)

    def _field_bytes(self) -> bytes:
        return self.position.serialized_bytes() + pack_i64(self.tick)


CHAIN_ACTIONS: dict[str, type[ChainAction]] = {
    CreatePlot.variant: CreatePlot,
    MovePlayer.variant: MovePlayer,
}


class GameAction:
    """Base class for transient actions."""


@dataclass(frozen=True)
class TickGame(GameAction):
    tick: int


@dataclass(frozen=True)
class IntendMove(GameAction):
    position: Position


Action = Union[ChainAction, GameAction]


def is_chain_action(action: Action) -> bool:
    return isinstance(action, ChainAction)


# Action constructors


def create_garden_plot(name: str) -> CreatePlot:
    return CreatePlot(GardenPlot.new(name))


def move_player(position: Position, tick: int) -> MovePlayer:
    return MovePlayer(position, tick)


def tick_game() -> TickGame:
    """Advance the game clock to the current timestamp."""
    return TickGame(get_timestamp())


def intend_move(position: Position) -> IntendMove:
    return IntendMove(position)
