"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from gardenctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from gardenctl.services.result import ServiceResult


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
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "eval":
        return str(result.data.get("value", ""))

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(_tree_label(item) for item in items)

    # Dispatched commands already wrote their own output.
    return ""


# ── Helpers ───────────────────────────────────────────────────────────


def _tree_label(item: dict[str, Any]) -> str:
    """``tree`` or ``garden:tree`` for a selected item."""
    garden = item.get("garden")
    tree = str(item.get("tree", ""))
    return f"{garden}:{tree}" if garden else tree


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="garden.ok")
    op = Text(f"  {result.op}", style="garden.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="garden.key")
    if key == "path":
        v = Text(str(value), style="garden.path")
    elif key == "value":
        v = Text(str(value), style="garden.value")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _run_table(runs: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table of per-tree dispatch outcomes."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Tree", style="garden.tree", no_wrap=True)
    table.add_column("Command")
    table.add_column("Status")
    table.add_column("Exit", justify="right")
    table.add_column("Message")
    if verbose:
        table.add_column("Path", style="garden.path")

    for run in runs:
        status = str(run.get("status", ""))
        row: list[str | Text] = [
            _tree_label(run),
            str(run.get("command", "")),
            Text(status, style=style_for_status(status)),
            str(run.get("exit_code", "")),
            str(run.get("message", "")),
        ]
        if verbose:
            row.append(str(run.get("path") or ""))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="garden.error")
    op = Text(f"  {result.op}", style="garden.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    runs = result.data.get("trees")
    if isinstance(runs, list) and runs:
        console.print(_run_table(runs, verbose=verbose))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Dispatch renderers ────────────────────────────────────────────────


def _render_dispatch(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render cmd/exec summaries; the commands' own output went to the terminal."""
    _status_line(console, result)
    data = result.data
    runs: list[dict[str, Any]] = data.get("trees", [])
    counts: dict[str, int] = data.get("counts", {})
    _field(console, "query", data.get("query", ""))
    _field(console, "commands", " ".join(data.get("commands", [])))
    summary = ", ".join(f"{count} {status}" for status, count in counts.items() if count)
    _field(console, "trees", summary or "none selected")

    if runs and (verbose or any(run.get("status") != "ok" for run in runs)):
        console.print()
        console.print(_run_table(runs, verbose=verbose))


# ── Inspection renderers ──────────────────────────────────────────────


def _render_eval(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Print the evaluated value alone so it can be captured by a shell."""
    if verbose:
        _status_line(console, result)
        _field(console, "scope", result.data.get("scope", ""))
        _field(console, "expression", result.data.get("expression", ""))
        _field(console, "value", result.data.get("value", ""))
        return
    console.print(Text(str(result.data.get("value", ""))), soft_wrap=True)


def _render_listing(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ls/select results as a tree table."""
    items: list[dict[str, Any]] = result.data.get("items", [])
    if not items:
        _status_line(console, result)
        _field(console, "query", result.data.get("query", ""))
        _field(console, "count", 0)
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Tree", style="garden.tree", no_wrap=True)
    table.add_column("Garden", style="garden.garden")
    has_paths = any("path" in item for item in items)
    if has_paths:
        table.add_column("Path", style="garden.path")
        table.add_column("Exists")
        table.add_column("Description")

    for item in items:
        row = [str(item.get("tree", "")), str(item.get("garden") or "")]
        if has_paths:
            path = item.get("path")
            row.append(str(path) if path is not None else str(item.get("error", "")))
            row.append("yes" if item.get("exists") else "no")
            row.append(str(item.get("description", "")))
        table.add_row(*row)
    console.print(table)

    for item in items:
        variables = item.get("variables")
        if not variables:
            continue
        console.print()
        console.print(Text(_tree_label(item), style="garden.tree"))
        for name, value in variables.items():
            _field(console, name, value)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback: status line plus top-level scalar fields."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            continue
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "cmd": _render_dispatch,
    "exec": _render_dispatch,
    "eval": _render_eval,
    "ls": _render_listing,
    "select": _render_listing,
}
