"""
On-disk chain store.

Layout under the store root:

    <root>/
      chains/<hh>/<rest62>    chunk file, named by the hash of its last block
      heads/<name>            hex hash of the tip for a named head

A chunk holds a contiguous run of blocks as a pretty-printed JSON array,
root-to-tip. Chunks are written once and never modified. Only the head
file is rewritten on each persist.

Loading is lazy: the store starts with an empty in-memory chain and walks
parent links backwards one chunk at a time, starting at the named head.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Generic, TypeVar

from ..blocks.chain import BlockChain
from ..blocks.codec import blocks_from_json, blocks_to_json
from ..blocks.hash import ROOT, Hash
from ..blocks.types import Block
from ..exceptions import (
    ChunkDeserializeError,
    ChunkOpenError,
    ChunkSerializeError,
    HeadReadError,
    HeadWriteError,
    InvalidHashError,
    InvalidHeadContentsError,
    MissingParentChunkError,
    ReadDirectoryError,
    RootPathInvalidError,
)
from ..logging_utils import LedgerLoggerAdapter
from .file_ops import ensure_directory, read_text, write_text_atomic
from .head_ref import HeadRef, is_valid_head_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHAINS_DIR = "chains"
HEADS_DIR = "heads"
SHARD_LEN = 2


class ChainStore(Generic[T]):
    """
    Hash-addressed chunk files plus named heads for one chain.

    Contract:
    - Inputs: root directory, head reference, payload data type
    - Outputs: Blocks appended or loaded, chunk and head files
    - Side Effects: Creates chains/ and heads/ under the root on open
    - Ownership: One live ChainStore per root; no file locking is taken
    """

    def __init__(self, root_path: Path | str, head_ref: HeadRef | str, data_type: type = str):
        """Open a store rooted at ``root_path``.

        The root itself is created if missing, but its parent must exist.

        Args:
            root_path: Store root directory
            head_ref: Named head this store reads and advances
            data_type: Payload data type (``str`` or a domain type)

        Raises:
            RootPathInvalidError: If the root is a file or its parent is missing
            CreateDirectoryError: If a store directory cannot be created
        """
        self.root_path = Path(root_path).expanduser()
        self.head_ref = head_ref if isinstance(head_ref, HeadRef) else HeadRef(head_ref)
        self.data_type = data_type

        if self.root_path.exists() and not self.root_path.is_dir():
            raise RootPathInvalidError(str(self.root_path), "path is a file")
        if not self.root_path.parent.is_dir():
            raise RootPathInvalidError(str(self.root_path), "parent directory does not exist")

        self.chains_path = self.root_path / CHAINS_DIR
        self.heads_path = self.root_path / HEADS_DIR
        ensure_directory(self.chains_path)
        ensure_directory(self.heads_path)

        self.chain: BlockChain[T] = BlockChain()
        self.unpersisted = 0
        self.log = LedgerLoggerAdapter(
            logger, {"root": str(self.root_path), "head": self.head_ref.name}
        )

    @classmethod
    def open(cls, root_path: Path | str, head_ref: HeadRef | str, data_type: type = str) -> ChainStore:
        return cls(root_path, head_ref, data_type)

    # Paths

    def chunk_path(self, hash: Hash) -> Path:
        """Path of the chunk whose last block has ``hash``."""
        hex_hash = hash.to_hex()
        return self.chains_path / hex_hash[:SHARD_LEN] / hex_hash[SHARD_LEN:]

    @property
    def head_path(self) -> Path:
        return self.heads_path / self.head_ref.name

    # Heads

    def read_head(self) -> Hash | None:
        """Read the hash named by this store's head.

        Returns:
            The tip hash, or None if the head has never been written

        Raises:
            HeadReadError: If the head file cannot be read as UTF-8 text
            InvalidHeadContentsError: If the head file does not hold a hash
        """
        path = self.head_path
        if not path.exists():
            return None
        contents = read_text(path, HeadReadError).strip()
        try:
            return Hash.from_hex(contents)
        except InvalidHashError as e:
            raise InvalidHeadContentsError(str(path), contents) from e

    def list_heads(self) -> list[str]:
        """List the names of all heads in the store, sorted."""
        try:
            entries = list(self.heads_path.iterdir())
        except OSError as e:
            raise ReadDirectoryError(str(self.heads_path), e) from e
        return sorted(
            entry.name for entry in entries if entry.is_file() and is_valid_head_name(entry.name)
        )

    # Writing

    def append(self, data: T) -> Block[T]:
        """Append a block carrying ``data`` at the tip.

        On a fresh store the head chunk is loaded first so that the new
        block extends the persisted tip instead of starting a new root.
        """
        if not self.chain:
            self.load_next_parent_chunk()
        block = self.chain.add_data(data)
        self.unpersisted += 1
        return block

    def persist(self) -> Hash | None:
        """Write unpersisted blocks as one chunk and advance the head.

        The chunk is written before the head, so a crash in between
        leaves the head at the previous tip and an orphan chunk that the
        next persist skips.

        Returns:
            The persisted tip hash, or None for an empty chain

        Raises:
            MissingParentChunkError: If the loaded window does not reach a persisted chunk
            ChunkSerializeError: If the chunk cannot be encoded or written
            HeadWriteError: If the head file cannot be written
        """
        tip = self.chain.tip()
        if tip is None:
            return None

        tip_path = self.chunk_path(tip.hash)
        if not tip_path.exists():
            window = self._unpersisted_window()
            try:
                content = blocks_to_json(window)
            except (TypeError, ValueError) as e:
                raise ChunkSerializeError(str(tip_path), e) from e
            write_text_atomic(tip_path, content, ChunkSerializeError)
            self.log.info(f"Wrote chunk {tip.hash} with {len(window)} blocks")

        try:
            current = self.read_head()
        except (InvalidHeadContentsError, HeadReadError):
            current = None
        if current != tip.hash:
            write_text_atomic(self.head_path, tip.hash.to_hex(), HeadWriteError)
            self.log.debug(f"Advanced head to {tip.hash}")

        self.unpersisted = 0
        return tip.hash

    def _unpersisted_window(self) -> list[Block[T]]:
        """Blocks from the tip back to the first one whose parent is on disk or ROOT."""
        window: list[Block[T]] = []
        for block in reversed(self.chain.blocks):
            window.append(block)
            parent = block.payload.parent
            if parent.is_root() or self.chunk_path(parent).exists():
                break
        else:
            first = self.chain.first()
            raise MissingParentChunkError(first.payload.parent, str(self.chunk_path(first.payload.parent)))
        window.reverse()
        return window

    # Loading

    def _next_hash_to_load(self) -> Hash:
        first = self.chain.first()
        if first is not None:
            return first.payload.parent
        head = self.read_head()
        return head if head is not None else ROOT

    def load_next_parent_chunk(self) -> bool:
        """Prepend the chunk that ends at the earliest loaded block's parent.

        On an empty chain the chunk named by the head is loaded.

        Returns:
            True if a chunk was loaded, False when the root has been reached

        Raises:
            MissingParentChunkError: If the referenced chunk is not on disk
            ChunkOpenError: If the chunk cannot be read
            ChunkDeserializeError: If the chunk is not a valid block array ending at its name
            HashMismatchError: If a stored block hash does not match its payload
        """
        hash = self._next_hash_to_load()
        if hash.is_root():
            return False

        path = self.chunk_path(hash)
        if not path.is_file():
            raise MissingParentChunkError(hash, str(path))

        text = read_text(path, ChunkOpenError, ChunkDeserializeError)
        try:
            blocks = blocks_from_json(text, self.data_type)
        except (TypeError, ValueError) as e:
            raise ChunkDeserializeError(str(path), e) from e

        if not blocks or blocks[-1].hash != hash:
            raise ChunkDeserializeError(
                str(path), ValueError(f"chunk does not end at block {hash}")
            )
        try:
            self.chain.prepend_blocks(blocks)
        except ValueError as e:
            raise ChunkDeserializeError(str(path), e) from e

        self.log.debug(f"Loaded chunk {hash} with {len(blocks)} blocks")
        return True

    def load_all(self) -> None:
        """Load parent chunks until the chain is rooted."""
        while self.load_next_parent_chunk():
            pass

    def iter_loaded(self) -> Iterator[Block[T]]:
        """Iterate the blocks currently in memory, root-to-tip."""
        return iter(self.chain.blocks)

    def iter_all(self) -> Iterator[Block[T]]:
        """Load the whole chain, then iterate it root-to-tip.

        Raises:
            MissingParentChunkError: If the chain cannot be loaded back to its root
        """
        self.load_all()
        if self.chain.is_partial():
            first = self.chain.first()
            raise MissingParentChunkError(first.payload.parent, str(self.chunk_path(first.payload.parent)))
        return iter(self.chain.blocks)

    def known_hashes(self) -> set[Hash]:
        """Scan chains/ for the tip hashes of every chunk on disk.

        Entries that do not form a valid hash are logged and skipped.
        """
        hashes: set[Hash] = set()
        try:
            shards = sorted(self.chains_path.iterdir())
        except OSError as e:
            raise ReadDirectoryError(str(self.chains_path), e) from e

        for shard in shards:
            if not shard.is_dir() or len(shard.name) != SHARD_LEN:
                self.log.warning(f"Skipping unexpected entry in chains: {shard}")
                continue
            try:
                entries = sorted(shard.iterdir())
            except OSError as e:
                raise ReadDirectoryError(str(shard), e) from e
            for entry in entries:
                try:
                    hashes.add(Hash.from_hex(shard.name + entry.name))
                except InvalidHashError:
                    self.log.warning(f"Skipping malformed chunk name: {entry}")
        return hashes

    # Reconcile

    def reconcile(self, foreign: Sequence[Block[T]] | Iterable[Block[T]]) -> int:
        """Load the full chain and reconcile it against a foreign fragment.

        Adopted blocks count as unpersisted. A store with no history adopts
        a fragment that starts at ROOT whole, so a fresh peer can bootstrap.

        Returns:
            Number of blocks adopted
        """
        self.load_all()
        adopted = self.chain.reconcile(list(foreign))
        self.unpersisted += adopted
        if adopted:
            self.log.info(f"Adopted {adopted} foreign blocks")
        return adopted

    def __repr__(self) -> str:
        return f"ChainStore(root={str(self.root_path)!r}, head={self.head_ref.name!r}, loaded={len(self.chain)})"
