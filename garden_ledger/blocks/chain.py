"""
In-memory block chain.

A BlockChain is a deque of blocks where every block names the previous
one as its parent. The chain grows at the tip through ``add_data`` and
``reconcile``, and at the root when the chain store lazily prepends
parent chunks. Blocks are never inserted in the middle.
"""

from __future__ import annotations

import logging
import struct
from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from typing import Generic, TypeVar

from ..exceptions import (
    MalformedBlocksError,
    NoMatchingParentError,
    ShorterForeignBlocksError,
)
from .hash import ROOT, Hash
from .timestamps import get_timestamp
from .types import Block, BlockPayload

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BlockChain(Generic[T]):
    """Ordered, hash-linked sequence of blocks.

    The first block may be unrooted (its parent is not ROOT and is not
    loaded), in which case the chain is partial.
    """

    def __init__(self, blocks: Iterable[Block[T]] | None = None) -> None:
        self._blocks: deque[Block[T]] = deque()
        if blocks is not None:
            self.append_blocks(blocks)

    def tip(self) -> Block[T] | None:
        """Get the newest block, or None for an empty chain."""
        return self._blocks[-1] if self._blocks else None

    def first(self) -> Block[T] | None:
        """Get the earliest loaded block, or None for an empty chain."""
        return self._blocks[0] if self._blocks else None

    @property
    def blocks(self) -> tuple[Block[T], ...]:
        return tuple(self._blocks)

    def is_partial(self) -> bool:
        return bool(self._blocks) and not self._blocks[0].payload.parent.is_root()

    def add_data(self, data: T) -> Block[T]:
        """Append a new block carrying ``data`` at the tip.

        Timestamps never go backwards within a chain; a clock that reads
        earlier than the tip is clamped to the tip's timestamp.
        """
        tip = self.tip()
        timestamp = get_timestamp()
        if tip is not None and timestamp < tip.payload.timestamp:
            timestamp = tip.payload.timestamp
        block = Block.new(
            BlockPayload(
                parent=tip.hash if tip is not None else ROOT,
                timestamp=timestamp,
                data=data,
            )
        )
        self._blocks.append(block)
        return block

    def append_blocks(self, blocks: Iterable[Block[T]]) -> None:
        """Append already linked blocks at the tip."""
        for block in blocks:
            tip = self.tip()
            if tip is not None and block.payload.parent != tip.hash:
                raise ValueError(f"Block {block.hash} does not extend the tip {tip.hash}")
            self._blocks.append(block)

    def prepend_blocks(self, blocks: Sequence[Block[T]]) -> None:
        """Prepend a root-to-tip run of parent blocks.

        The last block of ``blocks`` must be the parent of the current
        first block.
        """
        if not blocks:
            return
        first = self.first()
        if first is not None and first.payload.parent != blocks[-1].hash:
            raise ValueError(f"Block {blocks[-1].hash} is not the parent of {first.hash}")
        self._blocks.extendleft(reversed(blocks))

    def hash_to_index(self, hash: Hash) -> int | None:
        """Find the position of a block by hash, searching from the tip."""
        for offset, block in enumerate(reversed(self._blocks)):
            if block.hash == hash:
                return len(self._blocks) - offset - 1
        return None

    def reconcile(self, foreign: Sequence[Block[T]]) -> int:
        """Adopt a longer foreign history that shares an ancestor with this chain.

        Process:
        1. Ignore an empty fragment
        2. Drop a leading ROOT-parented block (a duplicate root)
        3. Locate the fragment's parent in the local chain
        4. Skip the prefix where local and foreign blocks are equal
        5. Reject if the local tail is not strictly shorter than the foreign tail
        6. Verify parent links and recompute every foreign hash
        7. Truncate to the shared prefix and append the foreign tail

        An empty local chain adopts a rooted fragment whole once it verifies.

        Args:
            foreign: Untrusted blocks, root-to-tip

        Returns:
            Number of blocks adopted

        Raises:
            NoMatchingParentError: If the fragment's parent is not local
            ShorterForeignBlocksError: If the local history wins or ties
            MalformedBlocksError: If a foreign block fails verification
        """
        foreign = list(foreign)
        if not foreign:
            return 0

        if foreign[0].payload.parent.is_root():
            if not self._blocks:
                _verify_blocks(foreign, ROOT, None)
                self._blocks.extend(foreign)
                logger.debug("Adopted rooted chain of %d blocks", len(foreign))
                return len(foreign)
            foreign = foreign[1:]
            if not foreign:
                return 0

        parent = foreign[0].payload.parent
        parent_index = self.hash_to_index(parent)
        if parent_index is None:
            raise NoMatchingParentError(parent)

        last_trusted_index = parent_index
        for offset, foreign_block in enumerate(foreign):
            index = parent_index + 1 + offset
            if index >= len(self._blocks) or self._blocks[index] != foreign_block:
                break
            last_trusted_index = index

        shared = last_trusted_index - parent_index
        trusted_len = len(self._blocks) - last_trusted_index - 1
        foreign_len = len(foreign) - shared

        # Ties keep the local history.
        if trusted_len > 0 and trusted_len >= foreign_len:
            raise ShorterForeignBlocksError(trusted_len, foreign_len)

        last_trusted = self._blocks[last_trusted_index]
        new_blocks = foreign[shared:]
        _verify_blocks(new_blocks, last_trusted.hash, last_trusted.payload.timestamp)

        while len(self._blocks) > last_trusted_index + 1:
            self._blocks.pop()
        self._blocks.extend(new_blocks)

        if new_blocks:
            logger.debug(
                "Reconciled %d foreign blocks onto %s (replaced %d local blocks)",
                len(new_blocks),
                last_trusted.hash,
                trusted_len,
            )
        return len(new_blocks)

    def copy(self) -> BlockChain[T]:
        return BlockChain(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block[T]]:
        return iter(self._blocks)

    def __getitem__(self, index: int) -> Block[T]:
        return self._blocks[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlockChain):
            return NotImplemented
        return list(self._blocks) == list(other._blocks)

    def __repr__(self) -> str:
        tip = self.tip()
        return f"BlockChain(len={len(self._blocks)}, tip={tip.hash if tip else None})"


def _verify_blocks(blocks: Sequence[Block], parent: Hash, timestamp: int | None) -> None:
    """Check parent links, timestamps and recomputed hashes of untrusted blocks."""
    for block in blocks:
        if block.payload.parent != parent:
            raise MalformedBlocksError(block, f"parent {block.payload.parent} is not {parent}")
        if timestamp is not None and block.payload.timestamp < timestamp:
            raise MalformedBlocksError(block, "timestamp goes backwards")
        try:
            computed = block.payload.hash()
        except (TypeError, ValueError, struct.error) as e:
            raise MalformedBlocksError(block, f"payload cannot be hashed: {e}") from e
        if computed != block.hash:
            raise MalformedBlocksError(block, f"hash {block.hash} is not {computed}")
        parent = computed
        timestamp = block.payload.timestamp
