"""Atomic file replacement for the small mutable files (HEAD, index)."""

import os
import tempfile
from pathlib import Path

from coeus.errors import StorageWriteError


def atomic_write_text(path: Path, text: str) -> None:
    """Replace path with text via temp file + rename.

    The text is encoded before any file is created, and the temp file is
    removed on every failure, so the target is either fully replaced or
    left untouched.

    Raises:
        UnicodeEncodeError: If text is not encodable as UTF-8
        StorageWriteError: If the temp file cannot be written or renamed
    """
    path = Path(path)
    data = text.encode("utf-8")
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".tmp_{path.name}_",
        )
    except OSError as e:
        raise StorageWriteError(f"Failed to write {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        os.replace(tmp_path, path)

    except BaseException as e:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        if isinstance(e, OSError):
            raise StorageWriteError(f"Failed to write {path}: {e}") from e
        raise
