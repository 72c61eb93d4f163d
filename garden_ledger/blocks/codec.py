"""
JSON block arrays.

Chunk files and chain fragments exchanged with peers share one format:
a pretty-printed JSON array of block objects, root-to-tip.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from .types import Block


def blocks_to_json(blocks: Iterable[Block]) -> str:
    """Encode blocks as a pretty-printed JSON array."""
    return json.dumps([block.to_dict() for block in blocks], indent=2, ensure_ascii=False)


def blocks_from_json(text: str | bytes, data_type: type = str, verify: bool = True) -> list[Block]:
    """Decode a JSON array of blocks.

    Foreign fragments should be decoded with ``verify=False`` and handed
    to ``BlockChain.reconcile``, which re-verifies every field itself.

    Raises:
        ValueError: If the document is not a JSON array of block objects
        HashMismatchError: If ``verify`` is set and a block's hash is wrong
    """
    value: Any = json.loads(text)
    if not isinstance(value, list):
        raise ValueError(f"Expected a JSON array of blocks but got {type(value).__name__}")
    blocks = []
    for item in value:
        if not isinstance(item, dict):
            raise ValueError(f"Expected a block object but got {type(item).__name__}")
        try:
            blocks.append(Block.from_dict(item, data_type, verify=verify))
        except KeyError as e:
            raise ValueError(f"Block object is missing field {e}") from e
    return blocks
