"""Command: parse one document, or the whole vault."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from ravenmd.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  ravenmd parse people/alice.md
  ravenmd --json parse meetings.md
  ravenmd -v parse notes/ideas.md
  ravenmd --vault ~/notes parse""",
)
@click.argument("file", required=False, type=click.Path(dir_okay=False))
@click.pass_obj
def parse(app: AppContext, file: str | None) -> None:
    """Parse FILE into objects, traits and references.

    Without FILE, every document in the vault is parsed and summarized.
    """
    if file is None:
        app.emit(app.service.parse_vault())
    else:
        app.emit(app.service.parse_file(file))
