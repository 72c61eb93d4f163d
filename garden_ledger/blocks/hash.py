"""
Content hashes for blocks.

A hash is a 32-byte SHA-256 digest. The all-zero hash is the ROOT
sentinel: it is the parent of the first block of every chain.
"""

from __future__ import annotations

import functools
import hashlib

from ..exceptions import InvalidHashDigitError, InvalidHashLengthError

HASH_LEN = 32
HASH_HEX_LEN = 64

_HEX_DIGITS = frozenset("0123456789abcdef")


@functools.total_ordering
class Hash:
    """An immutable 32-byte digest, ordered byte-wise."""

    __slots__ = ("_digest",)

    def __init__(self, digest: bytes | bytearray):
        if not isinstance(digest, (bytes, bytearray)):
            raise TypeError(f"Expected hash digest of type bytes but got {type(digest)}")
        if len(digest) != HASH_LEN:
            raise ValueError(f"Expected hash digest of {HASH_LEN} bytes but got {len(digest)}")
        object.__setattr__(self, "_digest", bytes(digest))

    def __setattr__(self, name, value):
        raise AttributeError("Hash is immutable")

    @classmethod
    def empty(cls) -> Hash:
        """The ROOT sentinel."""
        return cls(bytes(HASH_LEN))

    @classmethod
    def of(cls, data: bytes) -> Hash:
        return cls(hashlib.sha256(data).digest())

    @classmethod
    def from_hex(cls, value: str) -> Hash:
        """Decode a 64-character lowercase hex string.

        Uppercase digits are rejected so that decoding and encoding
        round-trip exactly.

        Raises:
            InvalidHashLengthError: If the string is not 64 characters
            InvalidHashDigitError: If a character is not in [0-9a-f]
        """
        if not isinstance(value, str) or len(value) != HASH_HEX_LEN:
            raise InvalidHashLengthError(value if isinstance(value, str) else repr(value))
        for position, char in enumerate(value):
            if char not in _HEX_DIGITS:
                raise InvalidHashDigitError(value, position)
        return cls(bytes.fromhex(value))

    @property
    def digest(self) -> bytes:
        return self._digest

    def is_root(self) -> bool:
        return not any(self._digest)

    def to_hex(self) -> str:
        return self._digest.hex()

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f"Hash({self.to_hex()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._digest == other._digest

    def __lt__(self, other: Hash) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._digest < other._digest

    def __hash__(self) -> int:
        return hash(self._digest)

    def __bytes__(self) -> bytes:
        return self._digest


ROOT = Hash.empty()
