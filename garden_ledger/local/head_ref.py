"""Named head references."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..exceptions import InvalidHeadRefError

HEAD_REF_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def is_valid_head_name(name: str) -> bool:
    return isinstance(name, str) and HEAD_REF_PATTERN.fullmatch(name) is not None


@dataclass(frozen=True)
class HeadRef:
    """A symbolic name for a chain tip, stored as ``heads/<name>``.

    Names are restricted to [A-Za-z0-9_-] so they are always safe
    file names.
    """

    name: str

    def __post_init__(self) -> None:
        if not is_valid_head_name(self.name):
            raise InvalidHeadRefError(self.name if isinstance(self.name, str) else repr(self.name))

    def __str__(self) -> str:
        return self.name
