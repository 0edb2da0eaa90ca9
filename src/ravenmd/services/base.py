"""BaseService: abstract foundation for all ravenmd services.

Every service receives a :class:`Vault` at construction time. The Vault
provides document discovery and reading; parsing is pure domain code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ravenmd.domain.models import ParseOptions
    from ravenmd.infrastructure.vault import Vault


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class ParseService(BaseService):
            def parse_file(self, path: str) -> ServiceResult:
                text = self._vault.read(...)
                ...
    """

    def __init__(self, vault: Vault) -> None:
        self._vault = vault

    @property
    def _options(self) -> ParseOptions:
        return self._vault.settings.parser.to_options()
