"""Vault: the single dependency injected into every service.

Owns the vault root and the discovery settings, and hands out
``(relative path, text)`` pairs. It holds no parse state: every call
reads from disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ravenmd.infrastructure.filesystem import (
    find_documents,
    read_document,
    relative_document_path,
)

if TYPE_CHECKING:
    from ravenmd.config.settings import RavenSettings

logger = logging.getLogger(__name__)


class Vault:
    """A directory tree of markdown documents."""

    def __init__(self, settings: RavenSettings) -> None:
        self._settings = settings
        self._root = settings.vault_root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings(self) -> RavenSettings:
        return self._settings

    def exists(self) -> bool:
        return self._root.is_dir()

    def document_paths(self) -> list[Path]:
        """All documents in the vault, sorted by path."""
        vault_cfg = self._settings.vault
        paths = find_documents(
            self._root,
            extension=vault_cfg.extension,
            skip_dirs=vault_cfg.skip_dirs,
        )
        logger.debug("Discovered %d documents under %s", len(paths), self._root)
        return paths

    def resolve_path(self, path: str | Path) -> Path:
        """Resolve a user-supplied path against the vault root.

        Relative paths are tried against CWD first, then the vault root.
        """
        candidate = Path(path)
        if candidate.is_absolute() or candidate.exists():
            return candidate
        return self._root / candidate

    def relative_path(self, path: Path) -> str:
        """Vault-relative ``/``-separated path of *path*.

        Raises:
            ValueError: If *path* lies outside the vault.
        """
        return relative_document_path(self._root, path)

    def read(self, path: Path) -> str:
        """Read a document's text.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid UTF-8.
        """
        return read_document(path)
