"""
File operations for the local chain store.

Provides:
- Directory creation with store-specific errors
- Atomic text writes using temp file + rename
- Whole-file text reads
"""

import os
import tempfile
from pathlib import Path

from ..exceptions import ChainStoreIOError, CreateDirectoryError


def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CreateDirectoryError(str(path), e) from e


def write_text_atomic(
    path: Path,
    content: str,
    error_type: type[ChainStoreIOError] = ChainStoreIOError,
) -> None:
    """Write a text file atomically using temp file + rename.

    Readers either see the previous contents or the new contents,
    never a partial write.

    Args:
        path: Target path
        content: Text to write
        error_type: Error raised, with the target path, when the write fails
    """
    ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        os.replace(temp_path, path)
    except OSError as e:
        # Clean up temp file on error
        try:
            os.remove(temp_path)
        except OSError:
            pass
        raise error_type(str(path), e) from e


def read_text(
    path: Path,
    error_type: type[ChainStoreIOError] = ChainStoreIOError,
    decode_error_type: type[ChainStoreIOError] | None = None,
) -> str:
    """Read a whole UTF-8 text file.

    Args:
        path: Path to read
        error_type: Error raised, with the path, when the read fails
        decode_error_type: Error raised, with the path, when the file is not
            valid UTF-8 (defaults to ``error_type``)
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise (decode_error_type or error_type)(str(path), e) from e
    except OSError as e:
        raise error_type(str(path), e) from e
