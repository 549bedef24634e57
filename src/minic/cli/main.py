# src/minic/cli/main.py
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .. import __version__
from .. import minic_ast
from ..config import InterpreterConfig
from ..environment import Environment
from ..errors import FatalError, LoadError
from ..evaluator import Evaluator
from ..heap import Heap
from ..loader import load_program

console = Console()
err_console = Console(stderr=True)


def _configure_logging(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def _load(file):
    try:
        return load_program(file)
    except LoadError as e:
        err_console.print(f"[bold red]Load Error:[/bold red] {escape(str(e))}")
        sys.exit(2)


def _print_summary(evaluator):
    table = Table(title="Evaluation Summary")
    table.add_column("Counter", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key, value in evaluator.summary.items():
        table.add_row(key, str(value))
    table.add_row("live_heap_blocks", str(len(evaluator.heap.live_blocks)))
    err_console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name="MiniC")
def cli():
    """MiniC - tree-walking evaluator for a minimal C-like language"""
    pass


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--input', 'input_file', type=click.File('r'), default=None,
              help="Read GET values from this file instead of stdin.")
@click.option('--separator', default=None, help="Text written after each PRINT value.")
@click.option('--stats', is_flag=True, help="Show evaluation counters when done.")
@click.option('--debug', is_flag=True, help="Trace evaluation on stderr.")
def run(file, input_file, separator, stats, debug):
    """Run the main function of a MiniC AST document"""
    try:
        config = InterpreterConfig.from_env(print_separator=separator, debug=debug or None)
    except ValueError as e:
        raise click.UsageError(str(e))
    _configure_logging(config.debug)
    unit = _load(file)

    stdin = input_file or sys.stdin
    if input_file is None and stdin.isatty():
        config.show_prompt = True

    evaluator = Evaluator(
        config,
        stdin=stdin,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )
    try:
        evaluator.run(unit)
    except FatalError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(e.message)}")
        for line in e.stack_trace:
            err_console.print(escape(line), highlight=False)
        if stats:
            _print_summary(evaluator)
        sys.exit(1)

    if stats:
        _print_summary(evaluator)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def check(file):
    """Check that a MiniC AST document loads and has an entry point"""
    unit = _load(file)
    try:
        Environment().init(unit, Heap())
    except FatalError as e:
        err_console.print(f"[bold red]❌ {escape(e.message)}[/bold red]")
        sys.exit(1)

    functions = [f.name for f in unit.functions() if f.is_definition()]
    console.print(f"[bold green]✅ Program is valid![/bold green] "
                  f"{len(functions)} function(s), {len(unit.variables())} global(s)")


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def ast(file):
    """Show the AST of a MiniC document"""
    unit = _load(file)
    tree = Tree("[bold blue]TranslationUnit[/bold blue]")

    def add(branch, node):
        child = branch.add(escape(repr(node)))
        for sub in minic_ast.children(node):
            add(child, sub)

    for decl in unit.decls:
        add(tree, decl)
    console.print(tree)


if __name__ == "__main__":
    cli()
