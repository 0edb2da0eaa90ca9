"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from ravenmd.output.console import create_console, get_output, style_for_type

if TYPE_CHECKING:
    from rich.console import Console

    from ravenmd.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Object ids for parse results, source ids for backlinks, one
    ``path:line: message`` per issue for check.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if "document" in data:
        return "\n".join(obj["id"] for obj in data["document"].get("objects", []))
    if "documents" in data:
        return "\n".join(
            obj["id"] for doc in data["documents"] for obj in doc.get("objects", [])
        )
    if "backlinks" in data:
        return "\n".join(sorted({link["source_id"] for link in data["backlinks"]}))
    if "issues" in data:
        return "\n".join(_issue_location(issue) + issue["message"] for issue in data["issues"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def display_value(value: Any) -> str:
    """Render a JSON-dumped field value (``{"kind": ..., ...}``) as text."""
    if not isinstance(value, dict):
        return str(value)
    kind = value.get("kind")
    if kind == "null":
        return ""
    if kind == "ref":
        return f"[[{value.get('target', '')}]]"
    if kind == "array":
        return "[" + ", ".join(display_value(item) for item in value.get("items", [])) + "]"
    if kind == "bool":
        return "true" if value.get("value") else "false"
    if kind == "number":
        number = value.get("value", 0)
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return str(number)
    return str(value.get("value", ""))


def _fields_text(fields: dict[str, Any]) -> str:
    return ", ".join(f"{key}={display_value(val)}" for key, val in sorted(fields.items()))


def _issue_location(issue: dict[str, Any]) -> str:
    path = issue.get("path")
    if not path:
        return ""
    line = issue.get("line")
    return f"{path}:{line}: " if line is not None else f"{path}: "


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="raven.ok")
    op = Text(f"  {result.op}", style="raven.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="raven.key")
    if key == "id" or key.endswith("_id") or key == "target":
        v = Text(str(value), style="raven.id")
    elif key in ("path", "file_path"):
        v = Text(str(value), style="raven.path")
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}: {v}"))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="raven.error")
    op = Text(f"  {result.op}", style="raven.op")
    dash = Text(" — ")
    console.print(label, op, dash, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Parse renderers ───────────────────────────────────────────────────


def _object_table(objects: list[dict[str, Any]], *, verbose: bool) -> Table:
    """Build a Rich Table for a document's objects."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("ID", style="raven.id", no_wrap=True)
    table.add_column("Type")
    table.add_column("Lines", justify="right")
    table.add_column("Parent", style="dim")
    table.add_column("Tags")
    if verbose:
        table.add_column("Fields")

    for obj in objects:
        end = obj.get("line_end")
        lines = f"{obj['line_start']}-{end}" if end is not None else f"{obj['line_start']}-"
        row = [
            obj["id"],
            Text(obj["type"], style=style_for_type(obj["type"])),
            lines,
            obj.get("parent_id") or "",
            ", ".join(obj.get("tags", [])),
        ]
        if verbose:
            row.append(Text(_fields_text(obj.get("fields", {}))))
        table.add_row(*row)
    return table


def _render_document_body(console: Console, doc: dict[str, Any], *, verbose: bool) -> None:
    _field(console, "file_path", doc["file_path"])
    console.print()
    console.print(_object_table(doc.get("objects", []), verbose=verbose))

    # Document text goes through Text, never markup: "[[x]]" would parse as a tag.
    traits = doc.get("traits", [])
    if traits:
        console.print()
        console.print(Text(f"traits ({len(traits)})", style="bold"))
        for trait in traits:
            args = _fields_text(trait.get("fields", {}))
            head = f"@{trait['trait_type']}" + (f"({args})" if args else "")
            console.print(
                Text.assemble(
                    f"  {trait['line']:>4}  ",
                    (head, "raven.trait"),
                    f" {trait.get('content', '')}  ",
                    (trait["parent_object_id"], "dim"),
                )
            )

    refs = doc.get("refs", [])
    if refs:
        console.print()
        console.print(Text(f"refs ({len(refs)})", style="bold"))
        for ref in refs:
            console.print(
                Text.assemble(
                    f"  {ref['line']:>4}  ",
                    (f"[[{ref['target_raw']}]]", "raven.ref"),
                    "  ",
                    (ref["source_id"], "dim"),
                )
            )


def _render_parse(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a single parsed document."""
    _status_line(console, result)
    _render_document_body(console, result.data["document"], verbose=verbose)
    if verbose:
        _render_meta(console, result)


def _render_parse_vault(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a vault parse as one summary row per file."""
    _status_line(console, result)
    documents = result.data.get("documents", [])
    failures = result.data.get("failures", [])

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("File", style="raven.path")
    table.add_column("Type")
    table.add_column("Objects", justify="right")
    table.add_column("Traits", justify="right")
    table.add_column("Refs", justify="right")
    for doc in documents:
        root_type = doc["objects"][0]["type"] if doc.get("objects") else ""
        table.add_row(
            doc["file_path"],
            Text(root_type, style=style_for_type(root_type)),
            str(len(doc.get("objects", []))),
            str(len(doc.get("traits", []))),
            str(len(doc.get("refs", []))),
        )
    if documents:
        console.print(table)

    for failure in failures:
        console.print(
            Text.assemble("  ", ("failed", "raven.error"), f" {failure['message']}")
        )

    meta = result.meta or {}
    console.print(
        f"\n{meta.get('files', len(documents))} files, "
        f"{meta.get('objects', 0)} objects, {meta.get('traits', 0)} traits, "
        f"{meta.get('refs', 0)} refs, {len(failures)} failed"
    )


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render check results with issues grouped by category."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", len(issues))

    if count == 0:
        console.print(Text.assemble(("OK", "raven.ok"), "  No issues found."))
        return

    severity_styles = {"error": "raven.error", "warning": "raven.warning"}

    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        cat = str(issue.get("category", "unknown"))
        by_category.setdefault(cat, []).append(issue)

    for cat, cat_issues in by_category.items():
        console.print()
        console.print(Text(cat, style="bold"))
        for issue in cat_issues:
            sev = str(issue.get("severity", "warning"))
            console.print(
                Text.assemble(
                    "  ",
                    (sev, severity_styles.get(sev, "")),
                    f": {_issue_location(issue)}{issue.get('message', '')}",
                )
            )

    errors = sum(1 for i in issues if i.get("severity") == "error")
    warnings = count - errors
    console.print(f"\n{errors} errors, {warnings} warnings")


def _render_backlinks(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the references pointing at one object."""
    _status_line(console, result)
    _field(console, "target", result.data.get("target", ""))
    backlinks = result.data.get("backlinks", [])
    if not backlinks:
        console.print(Text("  No backlinks."))
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Source", style="raven.id")
    table.add_column("File", style="raven.path")
    table.add_column("Line", justify="right")
    if verbose:
        table.add_column("As written")
    for link in backlinks:
        row = [link["source_id"], link["file_path"], str(link["line"])]
        if verbose:
            row.append(Text(f"[[{link['target_raw']}]]"))
        table.add_row(*row)
    console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line plus key-value fields."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_Renderer = Callable[..., None]

_OP_RENDERERS: dict[str, _Renderer] = {
    "parse": _render_parse,
    "parse_vault": _render_parse_vault,
    "check": _render_check,
    "backlinks": _render_backlinks,
}
