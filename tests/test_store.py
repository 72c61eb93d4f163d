"""Tests for the Store integrator."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import pytest

from garden_ledger.blocks import Block, BlockChain, Hash, blocks_to_json
from garden_ledger.config import LedgerConfig
from garden_ledger.exceptions import HashMismatchError, ParentMismatchError
from garden_ledger.local import ChainStore
from garden_ledger.logging_utils import STORE_ACTIONS_LOGGER
from garden_ledger.state import (
    ChainAction,
    CreatePlot,
    GardenPlot,
    Position,
    State,
    create_garden_plot,
    intend_move,
    move_player,
    tick_game,
)
from garden_ledger.store import Store

HEAD = "my-garden"


def open_store(root: Path) -> Store:
    return Store.open(ChainStore(root, HEAD, data_type=ChainAction))


class TestOpen:
    """Tests for loading and verifying the persisted chain."""

    def test_empty_store(self, temp_dir: Path) -> None:
        """A fresh store starts from the initial state."""
        store = open_store(temp_dir)
        assert store.state == State.initial()
        assert len(store.chains.chain) == 0

    def test_reopen_reproduces_state(self, temp_dir: Path) -> None:
        """Persisted chain actions are replayed on open."""
        store = open_store(temp_dir)
        store.dispatch(create_garden_plot("The Secret Garden"))
        store.dispatch(move_player(Position(12, 14), 0))
        store.persist()

        reopened = open_store(temp_dir)

        assert reopened.state == store.state
        assert reopened.state.my_garden.name == "The Secret Garden"
        assert reopened.state.player_position == Position(12, 14)

    def test_parent_mismatch(self, temp_dir: Path) -> None:
        """A stored block that skips its predecessor is rejected."""
        chain: BlockChain[ChainAction] = BlockChain()
        first = chain.add_data(create_garden_plot("plot"))
        second = chain.add_data(move_player(Position(1, 1), 0))
        forged = Block.new(replace(second.payload, parent=Hash.of(b"elsewhere")))

        chains = ChainStore(temp_dir, HEAD, data_type=ChainAction)
        path = chains.chunk_path(forged.hash)
        path.parent.mkdir(parents=True)
        path.write_text(blocks_to_json([first, forged]))
        (temp_dir / "heads" / HEAD).write_text(forged.hash.to_hex())

        with pytest.raises(ParentMismatchError) as exc_info:
            Store.open(chains)
        assert exc_info.value.expected == first.hash
        assert exc_info.value.actual == Hash.of(b"elsewhere")

    def test_hash_mismatch(self, temp_dir: Path) -> None:
        """A stored block whose payload was edited is rejected."""
        store = open_store(temp_dir)
        store.dispatch(create_garden_plot("plot"))
        tip = store.chains.persist()

        path = store.chains.chunk_path(tip)
        chunk = json.loads(path.read_text())
        chunk[0]["payload"]["data"]["CreatePlot"]["name"] = "stolen"
        path.write_text(json.dumps(chunk))

        with pytest.raises(HashMismatchError):
            open_store(temp_dir)


class TestDispatch:
    """Tests for dispatching actions."""

    def test_chain_action_appends_block(self, temp_dir: Path) -> None:
        """Chain actions update state and are appended to the chain."""
        store = open_store(temp_dir)
        action = create_garden_plot("plot")

        state = store.dispatch(action)

        assert state.my_garden is action.plot
        assert store.chains.chain.tip().data is action
        assert store.chains.unpersisted == 1

    def test_transient_action_updates_state_only(self, temp_dir: Path) -> None:
        """Game actions never reach the chain."""
        store = open_store(temp_dir)
        store.dispatch(intend_move(Position(3, 3)))
        store.dispatch(tick_game())

        assert store.state.move_intent is None
        assert store.state.game_tick == 0
        assert len(store.chains.chain) == 0

    def test_transient_actions_not_replayed(self, temp_dir: Path) -> None:
        """Only chain actions survive a reopen."""
        store = open_store(temp_dir)
        store.dispatch(create_garden_plot("plot"))
        store.dispatch(intend_move(Position(3, 3)))
        store.persist()

        reopened = open_store(temp_dir)

        assert reopened.state.my_garden == store.state.my_garden
        assert reopened.state.move_intent is None

    def test_store_log(self, temp_dir: Path, caplog) -> None:
        """Every dispatched action is logged on the store actions logger."""
        store = open_store(temp_dir)
        with caplog.at_level(logging.DEBUG, logger=STORE_ACTIONS_LOGGER):
            store.dispatch(tick_game())

        records = [r for r in caplog.records if r.name == STORE_ACTIONS_LOGGER]
        assert len(records) == 1
        assert "TickGame" in records[0].getMessage()


class TestReconcile:
    """Tests for store-level reconcile."""

    def test_reprojects_state(self, temp_dir: Path) -> None:
        """Adopted blocks are folded into a fresh state."""
        store = open_store(temp_dir)
        plot = GardenPlot.new("plot")
        store.dispatch(CreatePlot(plot))
        store.persist()

        foreign = store.chains.chain.copy()
        foreign.add_data(move_player(Position(15, 15), 1))

        assert store.reconcile(foreign.blocks) == 1
        assert store.state.player_position == Position(15, 15)
        assert store.state.my_garden == plot

    def test_nothing_adopted_keeps_state(self, temp_dir: Path) -> None:
        """A fragment the chain already has leaves state alone."""
        store = open_store(temp_dir)
        store.dispatch(create_garden_plot("plot"))
        state = store.state

        assert store.reconcile(store.chains.chain.blocks) == 0
        assert store.state is state


class TestFromConfig:
    """Tests for building a store from configuration."""

    def test_from_config(self, temp_dir: Path) -> None:
        """The config's root and head are used."""
        config = LedgerConfig.for_working_directory(temp_dir, head_name="garden-1")

        store = Store.from_config(config)
        store.dispatch(create_garden_plot("plot"))
        store.persist()

        assert (temp_dir / ".garden" / "heads" / "garden-1").is_file()
        assert Store.from_config(config).state.my_garden.name == "plot"
