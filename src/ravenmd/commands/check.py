"""Command: report parse failures and broken references."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from ravenmd.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  ravenmd check
  ravenmd check --errors-only
  ravenmd --json check
  ravenmd --vault ~/notes check --min-severity error""",
)
@click.option(
    "--min-severity",
    type=click.Choice(["warning", "error"]),
    default="warning",
    help="Hide issues below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.option("--strict", is_flag=True, help="Exit with code 1 when any error is found.")
@click.pass_obj
def check(app: AppContext, min_severity: str, errors_only: bool, strict: bool) -> None:
    """Check every vault document for parse errors and unresolved references."""
    threshold = "error" if errors_only else min_severity
    result = app.service.check(min_severity=threshold)
    app.emit(result, fail=strict and result.data.get("errors", 0) > 0)
