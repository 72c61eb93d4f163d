"""
Garden domain types.

Plots and positions travel inside chain actions, so each type has a
JSON form for chunk files and a fixed binary form for block hashing.
The binary form writes fields in declaration order: strings and byte
strings with a u64 little-endian length prefix, integers as i64
little-endian.
"""

from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass
from typing import Any

GAME_W = 80
GAME_H = 50
GARDEN_MARGIN = 10

_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")


def pack_bytes(value: bytes) -> bytes:
    return _U64.pack(len(value)) + value


def pack_str(value: str) -> bytes:
    return pack_bytes(value.encode("utf-8"))


def pack_i64(value: int) -> bytes:
    return _I64.pack(value)


@dataclass(frozen=True)
class Position:
    """A cell on the game board."""

    x: int
    y: int

    def to_json(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_json(cls, value: Any) -> Position:
        if not isinstance(value, dict):
            raise TypeError(f"Expected a position object but got {type(value).__name__}")
        x, y = value["x"], value["y"]
        for coord in (x, y):
            if not isinstance(coord, int) or isinstance(coord, bool):
                raise TypeError(f"Expected integer coordinates but got {x!r}, {y!r}")
        return cls(x=x, y=y)

    def serialized_bytes(self) -> bytes:
        return pack_i64(self.x) + pack_i64(self.y)


@dataclass(frozen=True)
class BBox:
    """An axis-aligned box on the board."""

    top_left: Position
    width: int
    height: int

    def contains(self, position: Position) -> bool:
        return (
            self.top_left.x <= position.x < self.top_left.x + self.width
            and self.top_left.y <= position.y < self.top_left.y + self.height
        )

    def center(self) -> Position:
        return Position(self.top_left.x + self.width // 2, self.top_left.y + self.height // 2)


@dataclass(frozen=True)
class GardenPlot:
    """A named garden plot.

    Attributes:
        uuid: Unique plot identifier
        name: Display name chosen by the player
    """

    uuid: uuid.UUID
    name: str

    @classmethod
    def new(cls, name: str) -> GardenPlot:
        return cls(uuid=uuid.uuid4(), name=name)

    @staticmethod
    def default_bbox() -> BBox:
        """The plot's box: the board inset by the garden margin on every side."""
        return BBox(
            top_left=Position(GARDEN_MARGIN, GARDEN_MARGIN),
            width=GAME_W - GARDEN_MARGIN * 2,
            height=GAME_H - GARDEN_MARGIN * 2,
        )

    def to_json(self) -> dict[str, Any]:
        return {"uuid": str(self.uuid), "name": self.name}

    @classmethod
    def from_json(cls, value: Any) -> GardenPlot:
        if not isinstance(value, dict):
            raise TypeError(f"Expected a garden plot object but got {type(value).__name__}")
        name = value["name"]
        if not isinstance(name, str):
            raise TypeError(f"Expected a string plot name but got {type(name).__name__}")
        return cls(uuid=uuid.UUID(value["uuid"]), name=name)

    def serialized_bytes(self) -> bytes:
        return pack_bytes(self.uuid.bytes) + pack_str(self.name)
