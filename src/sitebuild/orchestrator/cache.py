from __future__ import annotations

import hashlib
from pathlib import Path


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def file_digest(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def is_current(path: Path, data: bytes) -> bool:
    """True when ``path`` already holds exactly ``data``."""
    try:
        if path.stat().st_size != len(data):
            return False
    except FileNotFoundError:
        return False
    return file_digest(path) == sha256_bytes(data)


def write_if_changed(path: Path, data: bytes) -> bool:
    """Write ``data`` unless the file already has it; return whether it was written.

    Identical outputs keep their mtime.
    """
    if is_current(path, data):
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return True
