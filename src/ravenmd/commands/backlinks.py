"""Command: list references that point at an object."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from ravenmd.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  ravenmd backlinks people/alice
  ravenmd backlinks alice
  ravenmd backlinks "meetings#standup"
  ravenmd --json backlinks 2025-02-03""",
)
@click.argument("target")
@click.pass_obj
def backlinks(app: AppContext, target: str) -> None:
    """Show every reference in the vault that resolves to TARGET.

    TARGET may be a full object id, a short name, an alias or a date.
    """
    app.emit(app.service.backlinks(target))
