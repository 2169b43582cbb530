"""Rich rendering utilities for IR commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from treefold._ir import IR, ChildRef, Entry
from treefold._registry import format_type

if TYPE_CHECKING:
    from rich.console import Console


def format_ref(ref: ChildRef) -> str:
    """Format a child reference for display.

    Example:
        >>> format_ref(("a", {"x": "b"}))
        '(a, {x: b})'

    """
    if isinstance(ref, str):
        return ref
    if isinstance(ref, dict):
        return "{" + ", ".join(f"{key}: {format_ref(value)}" for key, value in ref.items()) + "}"
    return "(" + ", ".join(format_ref(item) for item in ref) + ")"


def _entry_label(node_id: str, entry: Entry) -> str:
    label = f"[dim]{node_id}[/dim] [{_get_kind_style(entry.kind)}]{escape(entry.kind)}[/]"
    if entry.has_value:
        label += f" = {escape(repr(entry.out))}"
    if entry.type is not None:
        label += f" [dim]: {escape(format_type(entry.type))}[/dim]"
    return label


def render_ir_table(ir: IR, console: Console, ids: list[str] | None = None) -> None:
    """Render IR entries as a Rich table.

    Args:
        ir: The IR to render.
        console: Rich Console to output to.
        ids: Entry ids to include. Defaults to every entry in id order.

    """
    if ids is None:
        ids = ir.ordered_ids()
    if not ids:
        console.print("[dim]No entries match the given filters[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Kind")
    table.add_column("Children")
    table.add_column("Value")
    table.add_column("Type")

    for node_id in ids:
        entry = ir[node_id]
        kind_style = _get_kind_style(entry.kind)
        marker = " [bold](root)[/bold]" if node_id == ir.root_id else ""
        table.add_row(
            f"{node_id}{marker}",
            f"[{kind_style}]{escape(entry.kind)}[/{kind_style}]",
            escape(", ".join(format_ref(ref) for ref in entry.children)),
            escape(repr(entry.out)) if entry.has_value else "",
            escape(format_type(entry.type)) if entry.type is not None else "",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(ids)} entries[/dim]")


def render_ir_tree(ir: IR, console: Console) -> None:
    """Render the IR as a tree rooted at its root entry.

    Entries reachable along several paths are expanded once; later
    occurrences are marked as shared.

    Args:
        ir: The IR to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{_entry_label(ir.root_id, ir.root)}[/bold]")
    _add_tree_children(rich_tree, ir, ir.root.children, {ir.root_id})
    console.print(rich_tree)


def _add_tree_children(parent: Tree, ir: IR, refs: tuple[ChildRef, ...], seen: set[str]) -> None:
    """Recursively add child references to a Rich Tree.

    Args:
        parent: Parent Tree node to add children to.
        ir: The IR the references point into.
        refs: Child references of the parent entry.
        seen: Ids that have already been expanded.

    """
    for ref in refs:
        if isinstance(ref, dict):
            branch = parent.add("[dim]{record}[/dim]")
            for key, value in ref.items():
                _add_tree_children(branch.add(f"[dim]{escape(key)}[/dim]"), ir, (value,), seen)
            continue
        if isinstance(ref, tuple):
            _add_tree_children(parent.add("[dim](tuple)[/dim]"), ir, ref, seen)
            continue
        entry = ir[ref]
        if ref in seen:
            parent.add(f"{_entry_label(ref, entry)} [dim](shared)[/dim]")
            continue
        seen.add(ref)
        _add_tree_children(parent.add(_entry_label(ref, entry)), ir, entry.children, seen)


def render_value(value: Any, console: Console) -> None:
    """Render an evaluated value."""
    console.print(escape(repr(value)))


def _get_kind_style(kind: str) -> str:
    """Get Rich style string for a kind, keyed by its namespace.

    Args:
        kind: The kind name.

    Returns:
        Rich style string.

    """
    match kind.split("/", 1)[0]:
        case "num":
            return "blue"
        case "str":
            return "green"
        case "bool":
            return "yellow"
        case "core":
            return "magenta"
        case "st":
            return "red"
        case _:
            return "white"
