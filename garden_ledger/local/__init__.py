"""
Local file-based chain storage.

Chains are persisted as hash-addressed chunk files sharded by the first
two hex digits of their tip hash, with named heads pointing at tips.
Writes use temp file + rename so a head always names a complete chunk.

Key classes:
- ChainStore: Lazy-loading on-disk store for one named head
- HeadRef: Validated head name
"""

from .chain_store import ChainStore
from .file_ops import ensure_directory, read_text, write_text_atomic
from .head_ref import HeadRef, is_valid_head_name

__all__ = [
    # Chain storage
    "ChainStore",
    "HeadRef",
    "is_valid_head_name",
    # Low-level file operations
    "ensure_directory",
    "read_text",
    "write_text_atomic",
]
