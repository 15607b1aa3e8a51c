"""
rbtbench CLI — ordered-key store harness

Usage:
    rbtbench run --store mytree:RbTree                 # regression suite
    rbtbench run --store mytree:RbTree -n 100000 -s    # insertion CSV
    rbtbench run --store mytree:RbTree -r 50 -b 3      # corrupt 3 nodes
    rbtbench example --store mytree:RbTree
    rbtbench version

CSV rows, result tables and snapshots go to stdout; progress goes to stderr.
"""

import json
import sys
from typing import Optional

import click
import typer
from rich.console import Console

from . import __version__
from .config import (
    BenchMode,
    Configuration,
    STORE_ENV_VAR,
    parse_number,
    select_mode,
)
from .example import run_example
from .regression import RegressionSuite, VerificationError
from .runner import BenchmarkRunner
from .store import StoreFactory, StoreLoadError, load_store_factory
from .workload import WorkloadGenerator

# =============================================================================
# APP SETUP
# =============================================================================

app = typer.Typer(
    name="rbtbench",
    help="Randomized correctness and performance harness for ordered-key stores",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": []},
)
console = Console(stderr=True, soft_wrap=True)


def show_help(ctx: typer.Context, value: bool):
    """Print usage to stderr and exit with a failure status."""
    if not value or ctx.resilient_parsing:
        return value
    formatter = ctx.make_formatter()
    click.Command.format_help(ctx.command, ctx, formatter)
    console.print(formatter.getvalue().rstrip(), markup=False, highlight=False)
    raise typer.Exit(1)


def help_option():
    return typer.Option(
        False, "--help", "-h", is_eager=True, callback=show_help,
        help="Show this message and exit.",
    )


def get_store_factory(path: Optional[str]) -> StoreFactory:
    """Resolve the store factory or exit."""
    if not path:
        console.print(
            f"[red]No store configured. Pass --store package.module:factory "
            f"or set {STORE_ENV_VAR}.[/red]"
        )
        raise typer.Exit(1)
    try:
        return load_store_factory(path)
    except StoreLoadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def print_settings(config: Configuration):
    """Show the resolved parameters."""
    console.print(
        f"[dim]keys: {config.test_size} | keep: {config.keep_size} | "
        f"break: {config.break_size} | interval: {config.interval} | "
        f"display: {config.width}x{config.height} | mode: {config.mode.value}[/dim]"
    )


# =============================================================================
# COMMANDS
# =============================================================================

@app.callback()
def root(
    help_: bool = help_option(),
):
    """Randomized correctness and performance harness for ordered-key stores."""


@app.command()
def run(
    width: Optional[str] = typer.Option(None, "--width", "-w", metavar="NUMBER", help="Width of the final store snapshot (default 80)"),
    height: Optional[str] = typer.Option(None, "--height", "-H", metavar="NUMBER", help="Height of the final store snapshot (default 20)"),
    count: Optional[str] = typer.Option(None, "--count", "-n", metavar="NUMBER", help="Number of random keys to insert (default 1000)"),
    keep: Optional[str] = typer.Option(None, "--keep", "-r", metavar="NUMBER", help="Keys left in the store after removal (default 20)"),
    breaks: Optional[str] = typer.Option(None, "--break", "-b", metavar="NUMBER", help="Random nodes to paint red to invalidate the store (default 0)"),
    insert: bool = typer.Option(False, "--insert", "-s", help="Benchmark insertion, CSV on stdout"),
    remove: bool = typer.Option(False, "--remove", "-m", help="Benchmark removal, CSV on stdout"),
    search: bool = typer.Option(False, "--search", "-e", help="Benchmark search, CSV on stdout"),
    incremental: bool = typer.Option(False, "--incremental-search", "-l", help="Benchmark search during insertion, CSV on stdout"),
    decremental: bool = typer.Option(False, "--decremental-search", "-o", help="Benchmark search during removal, CSV on stdout"),
    mode: Optional[BenchMode] = typer.Option(None, "--mode", case_sensitive=False, help="Benchmark mode by name, overrides the shortcut flags"),
    interval: Optional[str] = typer.Option(None, "--interval", "-i", metavar="NUMBER", help="CSV row interval (default 1000, or 1% of the key count when that gives fewer than 100 rows; invalid values mean 1%)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed the key generator (default: wall clock)"),
    store: Optional[str] = typer.Option(None, "--store", envvar=STORE_ENV_VAR, help="Store factory, package.module:factory"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Also print the regression report as JSON"),
    help_: bool = help_option(),
):
    """Run the regression suite, or one benchmark mode."""
    shortcuts = [
        m for m, flag in (
            (BenchMode.INSERT, insert),
            (BenchMode.REMOVE, remove),
            (BenchMode.SEARCH, search),
            (BenchMode.INCREMENTAL_SEARCH, incremental),
            (BenchMode.DECREMENTAL_SEARCH, decremental),
        ) if flag
    ]

    config = Configuration(
        width=parse_number(width),
        height=parse_number(height),
        test_size=parse_number(count),
        keep_size=parse_number(keep),
        break_size=parse_number(breaks),
        mode=select_mode(shortcuts, mode),
        interval=parse_number(interval) if interval is not None else None,
        seed=seed,
        store=store,
    ).resolved()

    factory = get_store_factory(config.store)
    print_settings(config)

    generator = WorkloadGenerator(seed=config.seed)
    console.print(
        f"Generating {config.test_size} size random insertion, removal and search key arrays... ",
        end="",
    )
    workload = generator.workload(config.test_size)
    console.print("done.")

    if config.mode != BenchMode.NONE:
        s = factory()
        try:
            BenchmarkRunner(s, workload, config.interval, sys.stdout, console).run(config.mode)
        finally:
            console.print("Cleaning up... ", end="")
            s.destroy()
            workload.release()
            console.print("done.")
        return

    suite = RegressionSuite(factory, workload, config, sys.stdout, console, rng=generator.rng)
    try:
        result = suite.run()
    except VerificationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        print(json.dumps({
            "config": {
                "test_size": config.test_size,
                "keep_size": config.keep_size,
                "break_size": config.break_size,
                "seed": config.seed,
            },
            "report": result.report.to_dicts(),
            "stage_counts": result.stage_counts,
            "random_hits": result.random_hits,
            "sequential_hits": result.sequential_hits,
            "painted": result.painted,
            "corruption_detected": result.corruption_detected,
        }, indent=2))


@app.command()
def example(
    store: Optional[str] = typer.Option(None, "--store", envvar=STORE_ENV_VAR, help="Store factory, package.module:factory"),
    width: Optional[str] = typer.Option(None, "--width", "-w", metavar="NUMBER", help="Snapshot width (default 80)"),
    height: Optional[str] = typer.Option(None, "--height", "-H", metavar="NUMBER", help="Snapshot height (default 11)"),
    help_: bool = help_option(),
):
    """Insert 13 keys and show traversals and range queries."""
    factory = get_store_factory(store)
    w = parse_number(width)
    h = parse_number(height)
    outcome = run_example(
        factory(),
        width=w if w > 0 else 80,
        height=h if h > 0 else 11,
        out=sys.stdout,
    )
    if not outcome["valid"]:
        console.print("[red]✗ Example store failed verification[/red]")
        raise typer.Exit(1)


@app.command()
def version(
    help_: bool = help_option(),
):
    """Show version."""
    console.print(f"rbtbench {__version__}")


# =============================================================================
# ENTRY POINT
# =============================================================================

def main():
    app()


if __name__ == "__main__":
    main()
