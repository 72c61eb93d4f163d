"""Tests for the in-memory block chain and reconcile."""

from __future__ import annotations

from dataclasses import replace

import pytest

from garden_ledger.blocks import ROOT, Block, BlockChain, BlockPayload, Hash, TimestampScope
from garden_ledger.exceptions import (
    MalformedBlocksError,
    NoMatchingParentError,
    ShorterForeignBlocksError,
)

DATA_1_HASH = "0aa8416c618aa6f5243c8a273a4398991ed5f8e097d6807b30164d37c8d84b33"
DATA_2_HASH = "dc8243497f48f2fbb2677646456d4d3f123250a95c838082bfc97716b775b5ff"
DATA_3_HASH = "fba2f217aa0411b48bc370769b9018dbbd1996f7d6ef0221e9db829975931330"
DATA_4_HASH = "d722da39a7e34043683136eb3048b7ac1f3c68778875b17ffc01d8809632bb9c"


class TestAddData:
    """Tests for appending data at the tip."""

    def test_known_hashes(self) -> None:
        """Appends under deterministic timestamps produce the known chain."""
        chain: BlockChain[str] = BlockChain()

        assert chain.add_data("data 1").hash.to_hex() == DATA_1_HASH
        assert chain.add_data("data 2").hash.to_hex() == DATA_2_HASH
        assert chain.add_data("data 3").hash.to_hex() == DATA_3_HASH
        assert chain.add_data("data 4").hash.to_hex() == DATA_4_HASH
        assert chain.tip().hash.to_hex() == DATA_4_HASH

    def test_first_block_is_rooted(self, make_chain) -> None:
        """The first block's parent is ROOT."""
        chain = make_chain("a")
        assert chain.first().payload.parent == ROOT
        assert not chain.is_partial()

    def test_parent_links(self, make_chain) -> None:
        """Every block names the previous block as its parent."""
        chain = make_chain("a", "b", "c", "d")
        for previous, block in zip(chain, list(chain)[1:]):
            assert block.payload.parent == previous.hash

    def test_blocks_carry_their_hash(self, make_chain) -> None:
        """Every engine-built block satisfies hash == payload.hash()."""
        chain = make_chain("a", "b", "c")
        assert all(block.is_valid() for block in chain)

    def test_timestamps_from_counter(self, make_chain) -> None:
        """Blocks take successive counter timestamps."""
        chain = make_chain("a", "b", "c")
        assert [block.timestamp for block in chain] == [0, 1, 2]

    def test_timestamps_never_go_backwards(self) -> None:
        """A clock reading earlier than the tip is clamped to the tip."""
        chain: BlockChain[str] = BlockChain()
        with TimestampScope(start=10):
            chain.add_data("late")
        with TimestampScope(start=5):
            block = chain.add_data("early")
        assert block.timestamp == 10

    def test_empty_chain(self) -> None:
        """An empty chain has no tip and is not partial."""
        chain: BlockChain[str] = BlockChain()
        assert chain.tip() is None
        assert chain.first() is None
        assert len(chain) == 0
        assert not chain.is_partial()


class TestChainStructure:
    """Tests for lookup, prepend and append of linked blocks."""

    def test_hash_to_index(self, make_chain) -> None:
        """Blocks are found by hash."""
        chain = make_chain("a", "b", "c")
        assert chain.hash_to_index(chain[0].hash) == 0
        assert chain.hash_to_index(chain[2].hash) == 2
        assert chain.hash_to_index(Hash.of(b"missing")) is None

    def test_partial_chain(self, make_chain) -> None:
        """A chain whose first block is not rooted is partial."""
        full = make_chain("a", "b", "c")
        partial = BlockChain(full.blocks[1:])
        assert partial.is_partial()

    def test_prepend_parent_blocks(self, make_chain) -> None:
        """Parents are prepended in root-to-tip order."""
        full = make_chain("a", "b", "c", "d")
        chain = BlockChain(full.blocks[2:])
        chain.prepend_blocks(full.blocks[:2])
        assert chain == full
        assert not chain.is_partial()

    def test_prepend_rejects_unrelated_blocks(self, make_chain) -> None:
        """Prepended blocks must end at the first block's parent."""
        full = make_chain("a", "b", "c")
        chain = BlockChain(full.blocks[2:])
        with pytest.raises(ValueError):
            chain.prepend_blocks(full.blocks[:1])

    def test_append_rejects_unlinked_blocks(self, make_chain) -> None:
        """Appended blocks must extend the tip."""
        full = make_chain("a", "b", "c")
        with pytest.raises(ValueError):
            BlockChain([full[0], full[2]])

    def test_copy_is_independent(self, make_chain) -> None:
        """A copy can grow without changing the original."""
        chain = make_chain("a")
        clone = chain.copy()
        clone.add_data("b")
        assert len(chain) == 1
        assert len(clone) == 2


class TestReconcile:
    """Tests for adopting a longer foreign history."""

    def test_rooted_foreign_chain(self, make_chain) -> None:
        """A longer foreign chain sharing the root is adopted."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        foreign.add_data("d")
        foreign.add_data("e")

        adopted = trusted.reconcile(foreign.blocks)

        assert adopted == 2
        assert trusted.blocks == foreign.blocks

    def test_rootless_foreign_slice(self, make_chain) -> None:
        """A slice without the root block is adopted the same way."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        foreign.add_data("d")
        foreign.add_data("e")

        trusted.reconcile(foreign.blocks[1:])

        assert trusted.blocks == foreign.blocks

    def test_shorter_foreign_rejected(self, make_chain) -> None:
        """A foreign tail shorter than the local tail is rejected."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("losing")
        before = trusted.blocks

        with pytest.raises(ShorterForeignBlocksError):
            trusted.reconcile(foreign.blocks[2:])

        assert trusted.blocks == before

    def test_shorter_contested_tail_rejected(self, make_chain) -> None:
        """A diverging foreign tail shorter than the local one is rejected."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("d")
        trusted.add_data("e")
        foreign.add_data("losing")
        before = trusted.blocks

        with pytest.raises(ShorterForeignBlocksError) as exc_info:
            trusted.reconcile(foreign.blocks[2:])

        assert exc_info.value.trusted_len == 2
        assert exc_info.value.foreign_len == 1
        assert trusted.blocks == before

    def test_equal_length_tie_keeps_local(self, make_chain) -> None:
        """Equal-length contested tails keep the local history."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("local")
        foreign.add_data("remote")
        before = trusted.blocks

        with pytest.raises(ShorterForeignBlocksError):
            trusted.reconcile(foreign.blocks)

        assert trusted.blocks == before

    def test_slice_without_shared_parent(self, make_chain) -> None:
        """A slice whose parent is not local fails with NoMatchingParent."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("d")
        trusted.add_data("e")
        foreign.add_data("D")
        foreign.add_data("E")
        foreign.add_data("F")

        with pytest.raises(NoMatchingParentError) as exc_info:
            trusted.reconcile(foreign.blocks[4:])

        assert exc_info.value.parent == foreign[3].hash
        assert len(trusted) == 5

    def test_reorganization(self, make_chain) -> None:
        """A longer fork from a shared parent replaces the local tail."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("d")
        trusted.add_data("e")
        foreign.add_data("D")
        foreign.add_data("E")
        foreign.add_data("F")

        adopted = trusted.reconcile(foreign.blocks[3:])

        assert adopted == 3
        assert trusted.blocks == foreign.blocks
        assert [block.data for block in trusted] == ["a", "b", "c", "D", "E", "F"]

    def test_reorganization_from_root(self, make_chain) -> None:
        """The whole rooted fork also wins over a shorter local tail."""
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        trusted.add_data("d")
        foreign.add_data("D")
        foreign.add_data("E")

        trusted.reconcile(foreign.blocks)

        assert trusted.blocks == foreign.blocks

    def test_idempotent(self, make_chain) -> None:
        """Reconciling the same fragment twice equals reconciling once."""
        trusted = make_chain("a", "b")
        foreign = trusted.copy()
        foreign.add_data("c")

        trusted.reconcile(foreign.blocks)
        once = trusted.blocks
        assert trusted.reconcile(foreign.blocks) == 0
        assert trusted.blocks == once

    def test_empty_foreign_is_noop(self, make_chain) -> None:
        """An empty fragment changes nothing."""
        trusted = make_chain("a", "b")
        before = trusted.blocks
        assert trusted.reconcile([]) == 0
        assert trusted.blocks == before

    def test_empty_local_adopts_rooted_chain(self, make_chain) -> None:
        """An empty chain adopts a verified rooted fragment whole."""
        foreign = make_chain("a", "b")
        chain: BlockChain[str] = BlockChain()

        assert chain.reconcile(foreign.blocks) == 2
        assert chain.blocks == foreign.blocks

    def test_empty_local_rejects_rootless_fragment(self, make_chain) -> None:
        """An empty chain has no parent to attach a rootless fragment to."""
        foreign = make_chain("a", "b")
        chain: BlockChain[str] = BlockChain()

        with pytest.raises(NoMatchingParentError):
            chain.reconcile(foreign.blocks[1:])

    def test_result_keeps_parent_links(self, make_chain) -> None:
        """The reconciled chain is still linked block to block."""
        trusted = make_chain("a", "b")
        foreign = trusted.copy()
        trusted.add_data("x")
        for data in ("y", "z"):
            foreign.add_data(data)

        trusted.reconcile(foreign.blocks[1:])

        for previous, block in zip(trusted, list(trusted)[1:]):
            assert block.payload.parent == previous.hash


class TestMalformedForeignBlocks:
    """Tests for verification of untrusted blocks."""

    @pytest.fixture
    def chains(self, make_chain):
        trusted = make_chain("a", "b", "c")
        foreign = trusted.copy()
        foreign.add_data("d")
        foreign.add_data("e")
        return trusted, foreign

    def test_wrong_parent(self, chains) -> None:
        """A block with an honest hash but a wrong parent is rejected."""
        trusted, foreign = chains
        d, e = foreign[3], foreign[4]
        forged = Block.new(replace(e.payload, parent=Hash.of(b"bogus")))
        before = trusted.blocks

        with pytest.raises(MalformedBlocksError):
            trusted.reconcile([d, forged])

        assert trusted.blocks == before

    def test_dishonest_hash(self, chains) -> None:
        """A block whose hash does not match its payload is rejected."""
        trusted, foreign = chains
        d, e = foreign[3], foreign[4]
        forged = Block(hash=e.hash, payload=replace(e.payload, data="tampered"))

        with pytest.raises(MalformedBlocksError):
            trusted.reconcile([d, forged])

        assert len(trusted) == 3

    def test_timestamp_going_backwards(self, chains) -> None:
        """A block older than its parent is rejected."""
        trusted, foreign = chains
        d = foreign[3]
        forged = Block.new(BlockPayload(parent=d.hash, timestamp=d.timestamp - 1, data="e"))

        with pytest.raises(MalformedBlocksError):
            trusted.reconcile([d, forged])

    def test_malformed_rooted_adoption(self, make_chain) -> None:
        """An empty chain verifies a rooted fragment before adopting it."""
        foreign = make_chain("a", "b")
        forged = Block(hash=foreign[1].hash, payload=replace(foreign[1].payload, data="x"))
        chain: BlockChain[str] = BlockChain()

        with pytest.raises(MalformedBlocksError):
            chain.reconcile([foreign[0], forged])

        assert len(chain) == 0
