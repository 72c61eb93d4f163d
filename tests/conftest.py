"""
Shared test configuration and fixtures.

Every test runs inside a TimestampScope, so blocks are stamped 0, 1, 2...
and their hashes are reproducible.
"""

import tempfile
from pathlib import Path

import pytest

from garden_ledger.blocks import BlockChain, TimestampScope


@pytest.fixture(autouse=True)
def deterministic_timestamps():
    """Replace the wall clock with a counter starting at 0."""
    with TimestampScope() as scope:
        yield scope


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_chain():
    """Build a string chain from a list of payloads."""

    def _make_chain(*payloads: str) -> BlockChain[str]:
        chain: BlockChain[str] = BlockChain()
        for payload in payloads:
            chain.add_data(payload)
        return chain

    return _make_chain
