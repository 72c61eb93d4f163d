"""
Content-addressed block model.

Blocks name their parent by SHA-256 hash, forming an append-only
chain that can be reconciled against a longer foreign history.
"""

from .chain import BlockChain
from .codec import blocks_from_json, blocks_to_json
from .hash import HASH_HEX_LEN, HASH_LEN, ROOT, Hash
from .timestamps import TimestampScope, get_timestamp
from .types import Block, BlockPayload, data_from_json, data_to_json, serialized_bytes

__all__ = [
    # Hashes
    "Hash",
    "ROOT",
    "HASH_LEN",
    "HASH_HEX_LEN",
    # Blocks
    "Block",
    "BlockPayload",
    "BlockChain",
    # Data views
    "serialized_bytes",
    "data_to_json",
    "data_from_json",
    # Wire format
    "blocks_to_json",
    "blocks_from_json",
    # Timestamps
    "get_timestamp",
    "TimestampScope",
]
