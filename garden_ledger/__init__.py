"""
Garden Ledger

Content-addressed, append-only event ledger with git-like local storage.

Provides:
- Hash-linked blocks with SHA-256 payload hashing
- Fork reconciliation that adopts a longer valid foreign history
- Sharded chunk files plus named heads, loaded lazily from the tip
- Deterministic state projection with memoized selectors

Usage:

    >>> from garden_ledger import LedgerConfig, Store, create_garden_plot
    >>> config = LedgerConfig.for_working_directory(".")
    >>> config.configure_logging()
    >>> store = Store.from_config(config)
    >>> store.dispatch(create_garden_plot("The Secret Garden"))
    >>> store.persist()

Working with a raw chain:

    from garden_ledger import BlockChain, ChainStore

    chain = BlockChain()
    chain.add_data("data 1")

    chains = ChainStore("/tmp/ledger", "main")
    chains.append("data 1")
    chains.persist()
"""

from .blocks import (
    HASH_HEX_LEN,
    HASH_LEN,
    ROOT,
    Block,
    BlockChain,
    BlockPayload,
    Hash,
    TimestampScope,
    blocks_from_json,
    blocks_to_json,
    get_timestamp,
)
from .config import LedgerConfig
from .exceptions import (
    ChainStoreError,
    ChainStoreIOError,
    ChunkDeserializeError,
    ChunkOpenError,
    ChunkSerializeError,
    ConfigError,
    CreateDirectoryError,
    HashMismatchError,
    HeadReadError,
    HeadWriteError,
    InvalidHashDigitError,
    InvalidHashError,
    InvalidHashLengthError,
    InvalidHeadContentsError,
    InvalidHeadRefError,
    LedgerError,
    MalformedBlocksError,
    MissingParentChunkError,
    NoMatchingParentError,
    ParentMismatchError,
    ReadDirectoryError,
    ReconcileError,
    RootPathInvalidError,
    ShorterForeignBlocksError,
    ValidationError,
)
from .local import ChainStore, HeadRef
from .logging_utils import (
    LedgerLoggerAdapter,
    StructuredJsonFormatter,
    configure_structured_logging,
    get_ledger_logger,
)
from .state import (
    ChainAction,
    CreatePlot,
    GameAction,
    GardenPlot,
    IntendMove,
    MovePlayer,
    Position,
    State,
    TickGame,
    create_garden_plot,
    intend_move,
    move_player,
    replay,
    tick_game,
)
from .store import Store

__all__ = [
    # Blocks
    "Hash",
    "ROOT",
    "HASH_LEN",
    "HASH_HEX_LEN",
    "Block",
    "BlockPayload",
    "BlockChain",
    "blocks_to_json",
    "blocks_from_json",
    "get_timestamp",
    "TimestampScope",
    # Storage
    "ChainStore",
    "HeadRef",
    # State
    "State",
    "replay",
    "ChainAction",
    "GameAction",
    "CreatePlot",
    "MovePlayer",
    "TickGame",
    "IntendMove",
    "GardenPlot",
    "Position",
    "create_garden_plot",
    "move_player",
    "tick_game",
    "intend_move",
    # Store
    "Store",
    # Configuration
    "LedgerConfig",
    # Logging
    "StructuredJsonFormatter",
    "configure_structured_logging",
    "get_ledger_logger",
    "LedgerLoggerAdapter",
    # Exceptions
    "LedgerError",
    "InvalidHashError",
    "InvalidHashLengthError",
    "InvalidHashDigitError",
    "ReconcileError",
    "NoMatchingParentError",
    "ShorterForeignBlocksError",
    "MalformedBlocksError",
    "ChainStoreError",
    "RootPathInvalidError",
    "ChainStoreIOError",
    "CreateDirectoryError",
    "ReadDirectoryError",
    "ChunkOpenError",
    "ChunkDeserializeError",
    "ChunkSerializeError",
    "HeadReadError",
    "HeadWriteError",
    "MissingParentChunkError",
    "InvalidHeadContentsError",
    "ValidationError",
    "ParentMismatchError",
    "HashMismatchError",
    "InvalidHeadRefError",
    "ConfigError",
]

__version__ = "0.1.0"
