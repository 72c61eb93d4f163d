"""
Block types for the hash-linked ledger.

A block wraps a payload (parent hash, timestamp, data) together with
the payload's canonical SHA-256 hash. Blocks are immutable once built.

Payload data must provide two views:
- a canonical JSON value, used for chunk files and the wire format
- a canonical byte view, used for hashing

Strings and bytes are supported out of the box. Domain types provide
``to_json()``, ``from_json()`` and ``serialized_bytes()``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Generic, TypeVar

from ..exceptions import HashMismatchError
from .hash import Hash

T = TypeVar("T")

_TIMESTAMP = struct.Struct("<q")
TIMESTAMP_MIN = -(2**63)
TIMESTAMP_MAX = 2**63 - 1


@singledispatch
def serialized_bytes(data: Any) -> bytes:
    """Canonical byte view of block data, used for hashing."""
    method = getattr(data, "serialized_bytes", None)
    if method is None:
        raise TypeError(f"Block data of type {type(data).__name__} has no serialized_bytes()")
    return method()


@serialized_bytes.register
def _(data: str) -> bytes:
    return data.encode("utf-8")


@serialized_bytes.register(bytes)
@serialized_bytes.register(bytearray)
def _(data) -> bytes:
    return bytes(data)


@singledispatch
def data_to_json(data: Any) -> Any:
    """Canonical JSON value of block data."""
    method = getattr(data, "to_json", None)
    if method is None:
        raise TypeError(f"Block data of type {type(data).__name__} has no to_json()")
    return method()


@data_to_json.register
def _(data: str) -> Any:
    return data


def data_from_json(value: Any, data_type: type) -> Any:
    """Decode block data of ``data_type`` from its JSON value."""
    if data_type is str:
        if not isinstance(value, str):
            raise TypeError(f"Expected string block data but got {type(value).__name__}")
        return value
    return data_type.from_json(value)


@dataclass(frozen=True)
class BlockPayload(Generic[T]):
    """The hashed content of a block.

    Attributes:
        parent: Hash of the previous block, or ROOT for the first block
        timestamp: Seconds since the epoch (signed 64-bit)
        data: Application data carried by the block
    """

    parent: Hash
    timestamp: int
    data: T

    def hash(self) -> Hash:
        """SHA-256 of parent || timestamp (i64 little-endian) || data bytes."""
        content = bytearray(self.parent.digest)
        content += _TIMESTAMP.pack(self.timestamp)
        content += serialized_bytes(self.data)
        return Hash.of(bytes(content))

    def to_dict(self) -> dict[str, Any]:
        return {
            "parent": self.parent.to_hex(),
            "timestamp": self.timestamp,
            "data": data_to_json(self.data),
        }

    @classmethod
    def from_dict(cls, value: dict[str, Any], data_type: type = str) -> BlockPayload:
        timestamp = value["timestamp"]
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise TypeError(f"Expected integer timestamp but got {type(timestamp).__name__}")
        if not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
            raise ValueError(f"Timestamp {timestamp} is outside the signed 64-bit range")
        return cls(
            parent=Hash.from_hex(value["parent"]),
            timestamp=timestamp,
            data=data_from_json(value["data"], data_type),
        )


@dataclass(frozen=True)
class Block(Generic[T]):
    """A payload together with its cached hash.

    Blocks created through ``Block.new`` always satisfy
    ``block.hash == block.payload.hash()``. Blocks decoded from untrusted
    input may not, which is why ``from_dict`` verifies by default.
    """

    hash: Hash
    payload: BlockPayload[T]

    @classmethod
    def new(cls, payload: BlockPayload[T]) -> Block[T]:
        return cls(hash=payload.hash(), payload=payload)

    @property
    def parent(self) -> Hash:
        return self.payload.parent

    @property
    def timestamp(self) -> int:
        return self.payload.timestamp

    @property
    def data(self) -> T:
        return self.payload.data

    def is_valid(self) -> bool:
        return self.hash == self.payload.hash()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk and wire block object."""
        return {
            "hash": self.hash.to_hex(),
            "payload": self.payload.to_dict(),
        }

    @classmethod
    def from_dict(cls, value: dict[str, Any], data_type: type = str, verify: bool = True) -> Block:
        """Deserialize a block object.

        Args:
            value: Parsed JSON block object
            data_type: Type of the payload data (``str`` or a domain type)
            verify: Check the cached hash against the payload

        Raises:
            HashMismatchError: If ``verify`` is set and the hash is wrong
        """
        block = cls(
            hash=Hash.from_hex(value["hash"]),
            payload=BlockPayload.from_dict(value["payload"], data_type),
        )
        if verify:
            computed = block.payload.hash()
            if computed != block.hash:
                raise HashMismatchError(block.hash, computed, block)
        return block
