"""AppContext: state shared by the ``parse``, ``check`` and ``backlinks`` commands.

The root group builds one from the resolved settings and hands it down via
``@click.pass_obj``. Nothing touches the vault until a command asks for
:attr:`AppContext.service`.
"""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from ravenmd.config.logging import configure_logging
from ravenmd.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from ravenmd.config.settings import RavenSettings
    from ravenmd.infrastructure.vault import Vault
    from ravenmd.services.parse import ParseService
    from ravenmd.services.result import ServiceResult


class AppContext:
    """Settings, output mode and a lazily built :class:`ParseService`."""

    def __init__(self, settings: RavenSettings) -> None:
        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @cached_property
    def vault(self) -> Vault:
        from ravenmd.infrastructure.vault import Vault

        return Vault(self.settings)

    @cached_property
    def service(self) -> ParseService:
        from ravenmd.services.parse import ParseService

        return ParseService(self.vault)

    def emit(self, result: ServiceResult, *, fail: bool = False) -> None:
        """Print *result* and exit 1 when it failed or *fail* is set.

        Failed results go to stderr. Skipped-file warnings of a successful
        result go to stderr too, except in JSON mode where they are part of
        the payload.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        click.echo(text)
        if not self.output.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
        if fail:
            raise SystemExit(1)
