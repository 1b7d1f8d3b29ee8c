"""Content fingerprints for installed skill folders."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

HASH_LENGTH = 12

EMPTY_HASH = hashlib.sha256(b"").hexdigest()[:HASH_LENGTH]


def _list_files(root: Path) -> list[str]:
    """Relative POSIX paths of every regular file under ``root``, sorted."""
    files = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            full = Path(dirpath) / filename
            if full.is_file():
                files.append(full.relative_to(root).as_posix())
    return sorted(files)


def compute_content_hash(skill_dir: Path) -> str:
    """SHA-256 over (relative path, bytes) of every file, in sorted path order.

    Truncated to HASH_LENGTH hex characters. An empty tree hashes to EMPTY_HASH.
    """
    root = Path(skill_dir)
    files = _list_files(root)
    if not files:
        return EMPTY_HASH

    digest = hashlib.sha256()
    for relative in files:
        digest.update(relative.encode("utf-8"))
        digest.update((root / relative).read_bytes())

    return digest.hexdigest()[:HASH_LENGTH]
