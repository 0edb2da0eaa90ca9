"""Subcommand modules for ravenmd.

Provides register_commands() which uses deferred imports to keep
``ravenmd --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from ravenmd.commands.backlinks import backlinks
    from ravenmd.commands.check import check
    from ravenmd.commands.parse import parse

    cli.add_command(parse)
    cli.add_command(check)
    cli.add_command(backlinks)
