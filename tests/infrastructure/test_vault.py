"""Tests for the Vault facade."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ravenmd.config.settings import RavenSettings
from ravenmd.infrastructure.vault import Vault

WriteDoc = Callable[[str, str], Path]


class TestVault:
    def test_root_and_exists(self, vault: Vault, vault_root: Path) -> None:
        assert vault.root == vault_root.resolve()
        assert vault.exists()

    def test_missing_root(self, tmp_path: Path) -> None:
        vault = Vault(RavenSettings.from_cli(vault_root=tmp_path / "nope"))
        assert not vault.exists()

    def test_document_paths_honor_settings(self, write_doc: WriteDoc, vault_root: Path) -> None:
        write_doc("a.md", "")
        write_doc("drafts/b.md", "")
        vault = Vault(RavenSettings.from_cli(vault_root=vault_root, vault={"skip_dirs": ["drafts"]}))
        assert [p.name for p in vault.document_paths()] == ["a.md"]

    def test_resolve_path_falls_back_to_root(self, vault: Vault) -> None:
        assert vault.resolve_path("people/alice.md") == vault.root / "people/alice.md"

    def test_resolve_absolute_path(self, vault: Vault, tmp_path: Path) -> None:
        target = tmp_path / "x.md"
        assert vault.resolve_path(target) == target

    def test_relative_path_and_read(self, vault: Vault, write_doc: WriteDoc) -> None:
        path = write_doc("people/alice.md", "# Alice\n")
        assert vault.relative_path(path) == "people/alice.md"
        assert vault.read(path) == "# Alice\n"
