"""Shared pytest fixtures and test helpers for ravenmd tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from ravenmd.config.settings import RavenSettings
from ravenmd.infrastructure.vault import Vault

WriteDoc = Callable[[str, str], Path]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer env vars from leaking into settings."""
    monkeypatch.delenv("RAVENMD_CONFIG", raising=False)
    monkeypatch.delenv("RAVENMD_VAULT_ROOT", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Temporary vault directory.

    This is the single source of truth for the vault directory layout.
    All vault-related fixtures (vault, _isolated_vault) build on this.
    """
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def write_doc(vault_root: Path) -> WriteDoc:
    """Write a document at a vault-relative path, creating directories."""

    def _write(relative: str, content: str) -> Path:
        path = vault_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def vault(vault_root: Path) -> Vault:
    """A Vault over the temp directory with default settings."""
    return Vault(RavenSettings.from_cli(vault_root=vault_root))


@pytest.fixture
def sample_vault(write_doc: WriteDoc, vault_root: Path) -> Path:
    """A small vault with people, a project and a daily note."""
    write_doc(
        "people/alice.md",
        "---\ntype: person\ntags: [friend, colleague]\n---\n\n# Alice\n\nWorks with [[bob]].\n",
    )
    write_doc("people/bob.md", "---\ntype: person\n---\n\nBob's page. See [[people/alice]].\n")
    write_doc(
        "projects/website.md",
        "---\n"
        "type: project\n"
        'owner: "[[people/alice]]"\n'
        "---\n"
        "\n"
        "# Website\n"
        "\n"
        "## Tasks\n"
        "- @task(due=2025-02-03) Send email to [[alice]]\n"
        "- @task Review [[ghost]]\n",
    )
    write_doc("daily/2025-02-03.md", "# Standup\n::meeting(id=standup, time=09:00)\n\nMet [[bob]].\n")
    return vault_root


@pytest.fixture
def _isolated_vault(vault_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp vault root so the CLI picks it up.

    Use via ``@pytest.mark.usefixtures("_isolated_vault")`` on command test
    classes.
    """
    monkeypatch.chdir(vault_root)
