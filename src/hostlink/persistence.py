"""
Durable JSON persistence for hostlink state files.

The trust store is rewritten whole on every change. Writes go to a sibling
temp file that is fsynced and then renamed over the target, so a crash
leaves either the old file or the new one on disk, never a torn mix.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def ensure_state_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _fsync_dir(directory: Path) -> None:
    # Not available on Windows
    if not hasattr(os, "O_DIRECTORY"):
        return
    dir_fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def atomic_write_with_fsync(path: Path, content: str) -> None:
    """
    Replace ``path`` with ``content`` in one atomic step.

    Args:
        path: File to replace; its directory is created if needed
        content: Text written as UTF-8

    Raises:
        OSError: If writing, syncing or renaming fails. The previous
            file (if any) is left untouched and the temp file is removed.
    """
    ensure_state_dir(path.parent)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
    _fsync_dir(path.parent)


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialize ``data`` as indented JSON and write it atomically."""
    atomic_write_with_fsync(path, json.dumps(data, indent=2) + "\n")


def read_json(path: Path) -> Any:
    """
    Parse a JSON state file.

    Returns None when the file does not exist. OSError (unreadable) and
    ValueError (not JSON) propagate to the caller.
    """
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)
