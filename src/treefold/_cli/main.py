import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from treefold._dirty import commit, dirty, gc_preserving_aliases, wrap_by_id
from treefold._elaborate import elaborate
from treefold._errors import TreefoldError
from treefold._eval_engine import fold
from treefold._io import DocumentFormat, dump_ir, load_ir, load_tree
from treefold._ir import IR
from treefold._query import Predicate, by_kind, by_kind_prefix, has_child_count, is_leaf, select_where
from treefold._registry import Plugin, Registry, compose_handlers, format_type
from treefold.std import PLUGINS_BY_NAME

from .config import ConfigError, TreefoldConfig, get_config
from .render import render_ir_table, render_ir_tree, render_value

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Treefold CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(error: Exception) -> typer.Exit:
    message = str(error) if isinstance(error, TreefoldError) else f"{type(error).__name__}: {error}"
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    return typer.Exit(code=1)


def _load_config() -> TreefoldConfig:
    try:
        return get_config()
    except ConfigError as e:
        raise _fail(e) from e


def _plugins(config: TreefoldConfig) -> list[Plugin]:
    return [PLUGINS_BY_NAME[name] for name in config.plugins]


def _compile(expr_file: Path, config: TreefoldConfig) -> IR:
    """Load a construction tree and elaborate it against the configured plugins."""
    err_console.print(f"[cyan]Loading expression from:[/cyan] {expr_file}")
    registry = Registry.compose(*_plugins(config))
    logger.debug("Registry has %d kinds from plugins: %s", len(registry), ", ".join(config.plugins))
    tree = load_tree(expr_file)
    return elaborate(tree, registry)


def _output_format(path: Path, config: TreefoldConfig) -> DocumentFormat:
    if path.suffix.lower() in {".toml", ".json"}:
        return DocumentFormat.from_path(path)
    return config.format


@app.command(name="compile")
def compile_(
    expr_file: Annotated[
        Path,
        typer.Argument(help="Path to a TOML or JSON file holding the expression under 'expr'"),
    ],
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the IR document to this file"),
    ] = None,
) -> None:
    """Elaborate an expression into IR and print its entries."""
    config = _load_config()
    err_console.print()
    try:
        ir = _compile(expr_file, config)
        render_ir_table(ir, out_console)
        if output is not None:
            err_console.print(f"[cyan]Exporting IR to:[/cyan] {output}")
            dump_ir(ir, output, _output_format(output, config))
    except TreefoldError as e:
        raise _fail(e) from e

    err_console.print()
    err_console.print(
        f"[green]✓ Compiled {len(ir)} entries[/green] "
        f"[dim](root '{ir.root_id}', counter '{ir.counter}', type {escape(format_type(ir.output_type))})[/dim]",
    )


@app.command(name="eval")
def eval_(
    path: Annotated[
        Path,
        typer.Argument(help="Path to an expression file, or an IR document with --ir"),
    ],
    *,
    from_ir: Annotated[
        bool,
        typer.Option("--ir", help="Treat PATH as an IR document written by 'compile'"),
    ] = False,
) -> None:
    """Evaluate an expression with the configured plugins' default handlers."""
    config = _load_config()
    err_console.print()
    try:
        ir = load_ir(path) if from_ir else _compile(path, config)
        handlers = compose_handlers(_plugins(config))
        err_console.print("[cyan]Evaluating...[/cyan]")
        value = asyncio.run(fold(ir, handlers, volatile_kinds=config.volatile_kinds))
    except Exception as e:  # noqa: BLE001 - handler failures are plain exceptions
        raise _fail(e) from e

    render_value(value, out_console)


@app.command()
def select(  # noqa: PLR0913
    expr_file: Annotated[
        Path,
        typer.Argument(help="Path to a TOML or JSON file holding the expression under 'expr'"),
    ],
    *,
    kind: Annotated[
        str | None,
        typer.Option("--kind", help="Only entries of this exact kind"),
    ] = None,
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Only entries whose kind starts with this prefix"),
    ] = None,
    leaf: Annotated[
        bool,
        typer.Option("--leaf", help="Only entries without children"),
    ] = False,
    children: Annotated[
        int | None,
        typer.Option("--children", help="Only entries with exactly this many child references"),
    ] = None,
) -> None:
    """List the IR entries matching all given filters."""
    config = _load_config()
    err_console.print()

    filters: list[Predicate] = []
    if kind is not None:
        filters.append(by_kind(kind))
    if prefix is not None:
        filters.append(by_kind_prefix(prefix))
    if leaf:
        filters.append(is_leaf())
    if children is not None:
        filters.append(has_child_count(children))

    try:
        ir = _compile(expr_file, config)
    except TreefoldError as e:
        raise _fail(e) from e

    if filters:
        pred = filters[0]
        for extra in filters[1:]:
            pred &= extra
        matched = select_where(ir, pred)
        ids = [node_id for node_id in ir.ordered_ids() if node_id in matched]
    else:
        ids = ir.ordered_ids()

    render_ir_table(ir, out_console, ids)


@app.command()
def check(
    ir_file: Annotated[
        Path,
        typer.Argument(help="Path to an IR document"),
    ],
    *,
    collect: Annotated[
        bool,
        typer.Option("--gc", help="Drop entries unreachable from the root (aliases are kept)"),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the checked IR document to this file"),
    ] = None,
) -> None:
    """Validate an IR document's references."""
    config = _load_config()
    err_console.print()
    err_console.print(f"[cyan]Loading IR from:[/cyan] {ir_file}")
    try:
        ir = load_ir(ir_file)
        before = len(ir)
        if collect:
            ir = commit(gc_preserving_aliases(dirty(ir)))
            err_console.print(f"[cyan]Collected[/cyan] {before - len(ir)} unreachable entries")
        if output is not None:
            err_console.print(f"[cyan]Exporting IR to:[/cyan] {output}")
            dump_ir(ir, output, _output_format(output, config))
    except TreefoldError as e:
        raise _fail(e) from e

    err_console.print(
        Panel(
            f"Root: [bold]{ir.root_id}[/bold]\nCounter: {ir.counter}\nEntries: {len(ir)}",
            title="[bold]IR[/bold]",
            border_style="cyan",
        ),
    )
    err_console.print()
    err_console.print("[green]✓ IR is valid[/green]")
    err_console.print()


@app.command()
def wrap(
    ir_file: Annotated[
        Path,
        typer.Argument(help="Path to an IR document"),
    ],
    target: Annotated[
        str,
        typer.Argument(help="Id of the entry to wrap"),
    ],
    wrapper_kind: Annotated[
        str,
        typer.Argument(help="Kind of the new wrapper entry"),
    ],
    *,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Write the wrapped IR document to this file"),
    ],
) -> None:
    """Insert a single-child wrapper entry above TARGET."""
    config = _load_config()
    err_console.print()
    try:
        ir = wrap_by_id(load_ir(ir_file), target, wrapper_kind)
        dump_ir(ir, output, _output_format(output, config))
    except TreefoldError as e:
        raise _fail(e) from e

    err_console.print(f"[green]✓ Wrapped '{target}' in {escape(wrapper_kind)}[/green] [dim](root '{ir.root_id}')[/dim]")


@app.command()
def tree(
    path: Annotated[
        Path,
        typer.Argument(help="Path to an expression file, or an IR document with --ir"),
    ],
    *,
    from_ir: Annotated[
        bool,
        typer.Option("--ir", help="Treat PATH as an IR document written by 'compile'"),
    ] = False,
) -> None:
    """Show the IR as a tree from its root."""
    config = _load_config()
    err_console.print()
    try:
        ir = load_ir(path) if from_ir else _compile(path, config)
    except TreefoldError as e:
        raise _fail(e) from e

    render_ir_tree(ir, out_console)


def main() -> None:
    app()
