"""
Store: the application's single entry point to the ledger.

The store owns a ChainStore of chain actions and the State projected
from it. On open, every persisted block is re-verified and folded into
State. Dispatched chain actions are appended to the chain; transient
actions only update State.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .blocks.hash import ROOT, Hash
from .blocks.types import Block
from .exceptions import HashMismatchError, ParentMismatchError
from .local.chain_store import ChainStore
from .logging_utils import get_ledger_logger
from .state.actions import Action, ChainAction, is_chain_action
from .state.state import State, replay

if TYPE_CHECKING:
    from .config import LedgerConfig

logger = logging.getLogger(__name__)
actions_logger = get_ledger_logger("store.actions")


class Store:
    """
    Verified chain plus projected state.

    Contract:
    - Inputs: A ChainStore whose data type is ChainAction
    - Outputs: Current State after every dispatch
    - Side Effects: Appends chain actions to the chain store; persist writes files
    """

    def __init__(self, chains: ChainStore[ChainAction]):
        """Load and verify the whole persisted chain, projecting it into State.

        Raises:
            ParentMismatchError: If a block does not link to the previous block
            HashMismatchError: If a block's hash does not match its payload
            MissingParentChunkError: If the chain cannot be loaded back to its root
        """
        self.chains = chains
        self.state = State.initial()
        self._load_untrusted_chain()

    @classmethod
    def open(cls, chains: ChainStore[ChainAction]) -> Store:
        return cls(chains)

    @classmethod
    def from_config(cls, config: LedgerConfig) -> Store:
        """Open the chain store described by ``config`` and load it."""
        chains = ChainStore(config.root_path, config.head_ref(), data_type=ChainAction)
        return cls(chains)

    def _load_untrusted_chain(self) -> None:
        prev_hash = ROOT
        count = 0
        for block in self.chains.iter_all():
            verify_block(block, prev_hash)
            prev_hash = block.hash
            self.state = self.state.reduce(block.payload.data)
            count += 1
        logger.debug(f"Loaded {count} blocks from {self.chains.root_path}")

    def dispatch(self, action: Action) -> State:
        """Reduce ``action`` into State, appending it to the chain if it is a chain action."""
        actions_logger.debug("dispatch %r", action)
        self.state = self.state.reduce(action)
        if is_chain_action(action):
            self.chains.append(action)
        return self.state

    def persist(self) -> None:
        self.chains.persist()

    def reconcile(self, foreign: Iterable[Block[ChainAction]]) -> int:
        """Reconcile the chain against a foreign fragment and re-project State.

        Transient slots are reset, since State is rebuilt from the chain alone.

        Returns:
            Number of blocks adopted
        """
        adopted = self.chains.reconcile(list(foreign))
        if adopted:
            self.state = replay(block.payload.data for block in self.chains.iter_loaded())
        return adopted


def verify_block(block: Block, prev_hash: Hash) -> None:
    """Check that ``block`` follows ``prev_hash`` and carries its own payload hash.

    Raises:
        ParentMismatchError: If the block's parent is not ``prev_hash``
        HashMismatchError: If the cached hash differs from the payload hash
    """
    if block.payload.parent != prev_hash:
        raise ParentMismatchError(prev_hash, block.payload.parent, block)
    computed = block.payload.hash()
    if computed != block.hash:
        raise HashMismatchError(block.hash, computed, block)
