"""Filesystem operations for vault documents.

INVARIANT: Files are truth. Every parse starts from the text on disk;
nothing is cached between runs.

The parsing engine itself never touches the filesystem (callers hand it
already-read text). This module handles file discovery, vault-relative
path computation and reading.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

# Directories always skipped when discovering documents.
DEFAULT_SKIP_DIRS = frozenset({".raven", ".trash", ".git"})


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_document(path: Path) -> str:
    """Read a document as UTF-8 text."""
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def relative_document_path(vault_root: Path, path: Path) -> str:
    """Return *path* relative to *vault_root* with ``/`` separators.

    Raises:
        ValueError: If *path* lies outside the vault.
    """
    vault_resolved = vault_root.resolve()
    resolved = path.resolve()
    if not resolved.is_relative_to(vault_resolved):
        msg = f"Path escapes vault root: {path}"
        raise ValueError(msg)
    return resolved.relative_to(vault_resolved).as_posix()


def find_documents(
    vault_root: Path,
    *,
    extension: str = ".md",
    skip_dirs: Iterable[str] = (),
) -> list[Path]:
    """Discover all documents in the vault.

    Walks the whole vault, skipping :data:`DEFAULT_SKIP_DIRS` plus any
    directory named in *skip_dirs*, at any depth.
    """
    skipped = DEFAULT_SKIP_DIRS | frozenset(skip_dirs)
    suffix = extension if extension.startswith(".") else f".{extension}"

    results: list[Path] = []
    for path in vault_root.rglob(f"*{suffix}"):
        if not path.is_file():
            continue
        relative_parts = path.relative_to(vault_root).parts[:-1]
        if any(part in skipped for part in relative_parts):
            continue
        results.append(path)

    return sorted(results)
