"""
Custom exceptions for the garden ledger.

Every error raised by the ledger carries the offending value (a path,
a hash, or a block) in ``details`` so callers can report it without
parsing the message.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Hash errors


class InvalidHashError(LedgerError, ValueError):
    """Raised when a hex string cannot be decoded into a hash."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"Invalid hash {value!r}: {reason}", {"value": value, "reason": reason})
        self.value = value
        self.reason = reason


class InvalidHashLengthError(InvalidHashError):
    """Raised when a hex string is not exactly 64 characters."""

    def __init__(self, value: str):
        super().__init__(value, f"expected 64 characters, got {len(value)}")


class InvalidHashDigitError(InvalidHashError):
    """Raised when a hex string contains anything but [0-9a-f]."""

    def __init__(self, value: str, position: int):
        super().__init__(value, f"invalid hex digit at position {position}")
        self.position = position


# Reconcile errors


class ReconcileError(LedgerError):
    """Base exception for a rejected foreign chain fragment."""


class NoMatchingParentError(ReconcileError):
    """The foreign fragment's parent is not part of the local chain."""

    def __init__(self, parent: Any):
        super().__init__(
            f"No local block matches the foreign parent {parent}",
            {"parent": str(parent)},
        )
        self.parent = parent


class ShorterForeignBlocksError(ReconcileError):
    """The local chain is at least as long as the contested foreign tail."""

    def __init__(self, trusted_len: int, foreign_len: int):
        super().__init__(
            f"Foreign tail of {foreign_len} blocks does not beat the local tail of {trusted_len}",
            {"trusted_len": trusted_len, "foreign_len": foreign_len},
        )
        self.trusted_len = trusted_len
        self.foreign_len = foreign_len


class MalformedBlocksError(ReconcileError):
    """A foreign block failed parent or hash verification."""

    def __init__(self, block: Any, reason: str):
        super().__init__(
            f"Malformed foreign block: {reason}",
            {"block": repr(block), "reason": reason},
        )
        self.block = block
        self.reason = reason


# Chain store errors


class ChainStoreError(LedgerError):
    """Base exception for on-disk chain store failures."""


class RootPathInvalidError(ChainStoreError):
    """The store root is a file, or its parent directory does not exist."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid chain store root {path}: {reason}", {"path": path, "reason": reason})
        self.path = path
        self.reason = reason


class ChainStoreIOError(ChainStoreError):
    """Raised when a file-system operation on the store fails."""

    operation = "io"

    def __init__(self, path: str, cause: Exception | None = None):
        details = {"operation": self.operation, "path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Chain store error during {self.operation}: {path}", details)
        self.path = path
        self.cause = cause


class CreateDirectoryError(ChainStoreIOError):
    operation = "create_directory"


class ReadDirectoryError(ChainStoreIOError):
    operation = "read_directory"


class ChunkOpenError(ChainStoreIOError):
    operation = "open_chunk"


class ChunkDeserializeError(ChainStoreIOError):
    operation = "deserialize_chunk"


class ChunkSerializeError(ChainStoreIOError):
    operation = "serialize_chunk"


class HeadReadError(ChainStoreIOError):
    operation = "read_head"


class HeadWriteError(ChainStoreIOError):
    operation = "write_head"


class MissingParentChunkError(ChainStoreError):
    """A chunk referenced by a head or a parent link is not on disk."""

    def __init__(self, hash: Any, path: str | None = None):
        details = {"hash": str(hash)}
        if path:
            details["path"] = path
        super().__init__(f"Missing parent chunk for {hash}", details)
        self.hash = hash
        self.path = path


class InvalidHeadContentsError(ChainStoreError):
    """A head file does not contain a valid hash."""

    def __init__(self, path: str, contents: str):
        super().__init__(f"Head file {path} does not contain a hash", {"path": path, "contents": contents})
        self.path = path
        self.contents = contents


# Store validation errors


class ValidationError(LedgerError):
    """Base exception for a persisted chain that fails verification."""


class ParentMismatchError(ValidationError):
    """A block does not name the previous block as its parent."""

    def __init__(self, expected: Any, actual: Any, block: Any):
        super().__init__(
            f"Block parent {actual} does not match the previous hash {expected}",
            {"expected": str(expected), "actual": str(actual), "block": repr(block)},
        )
        self.expected = expected
        self.actual = actual
        self.block = block


class HashMismatchError(ValidationError):
    """A block's stored hash differs from the hash of its payload."""

    def __init__(self, expected: Any, computed: Any, block: Any):
        super().__init__(
            f"Block hash {expected} does not match the computed hash {computed}",
            {"expected": str(expected), "computed": str(computed), "block": repr(block)},
        )
        self.expected = expected
        self.computed = computed
        self.block = block


# Head references


class InvalidHeadRefError(LedgerError, ValueError):
    """A head name contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, name: str):
        super().__init__(f"Invalid head reference name: {name!r}", {"name": name})
        self.name = name


# Configuration


class ConfigError(LedgerError):
    """Raised when a settings file cannot be read."""

    def __init__(self, path: str, cause: Exception | None = None):
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Could not load ledger settings from {path}", details)
        self.path = path
        self.cause = cause
