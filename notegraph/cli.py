"""CLI entrypoint for notegraph."""

import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click
from rich.logging import RichHandler

from . import __version__
from .config import ConfigError, find_config, load_config


def _auto_detect_vault(start: Path) -> Path | None:
    """Find a ./notes vault folder by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if p.is_dir() and p.name.lower() == "notes":
            return p
        candidate = p / "notes"
        if candidate.is_dir():
            return candidate
    return None


def _exit_with(run: Callable[..., int], *args: Any, **kwargs: Any) -> None:
    """Run a command and exit with its code; bad vault input becomes a usage error."""
    try:
        exit_code = run(*args, **kwargs)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )


@click.group()
@click.version_option(__version__, prog_name="notegraph")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=True, dir_okay=True, path_type=Path),
    default=None,
    help="Notes folder or JSON backup file (defaults to auto-detected ./notes)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML file with a [graph] table (defaults to <vault>/notegraph.toml)",
)
@click.option("--verbose", count=True, help="Log more (repeat for debug output)")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, config_path: Path | None, verbose: int) -> None:
    """notegraph - lay out and explore wiki-linked notes as a graph."""
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException("Vault not found. Pass --vault /path/to/notes or run from inside it.")
        vault = detected

    if not vault.exists():
        raise click.BadParameter(f"Path '{vault}' does not exist.", param_hint="--vault / -v")

    try:
        config = load_config(config_path) if config_path else find_config(vault)
    except ConfigError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    ctx.obj["vault"] = vault.resolve()
    ctx.obj["config"] = config


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "md", "json", "svg", "html"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many notes to show in top lists")
@click.option(
    "--select",
    type=str,
    default=None,
    metavar="TITLE",
    help="Highlight a note and its neighbors (svg/html/json)",
)
@click.option("--max-ticks", type=int, default=300, show_default=True, help="Layout iterations before giving up on convergence")
@click.pass_context
def graph(
    ctx: click.Context,
    fmt: str,
    out: Path | None,
    top: int,
    select: str | None,
    max_ticks: int,
) -> None:
    """Lay out the note reference graph and render it."""
    from .commands.graph_cmd import run_graph

    _exit_with(
        run_graph,
        ctx.obj["vault"],
        config=ctx.obj["config"],
        fmt=fmt,
        out=out,
        top=top,
        select=select,
        max_ticks=max_ticks,
    )


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.option("--top", type=int, default=50, show_default=True, help="How many tags to list")
@click.pass_context
def tags(ctx: click.Context, output_json: bool, top: int) -> None:
    """Count #tags across all notes."""
    from .commands.report_cmd import run_tags

    _exit_with(run_tags, ctx.obj["vault"], output_json=output_json, top=top)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with an error if any [[reference]] does not resolve",
)
@click.pass_context
def links(ctx: click.Context, output_json: bool, strict: bool) -> None:
    """Report [[references]] that match no note title."""
    from .commands.report_cmd import run_links

    _exit_with(run_links, ctx.obj["vault"], output_json=output_json, fail_on_unresolved=strict)


@cli.command()
@click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="File to re-render on every change",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "svg", "html"]),
    default="html",
    show_default=True,
    help="Output format",
)
@click.option("--select", type=str, default=None, metavar="TITLE", help="Highlight a note and its neighbors")
@click.option("--max-ticks", type=int, default=300, show_default=True, help="Layout iterations per rebuild")
@click.pass_context
def watch(ctx: click.Context, out: Path, fmt: str, select: str | None, max_ticks: int) -> None:
    """Re-render the graph whenever notes change.

    Notes that survive an edit keep their position in the layout.

    Examples:

        notegraph -v ./notes watch --out graph.html

        notegraph -v backup.json watch --out graph.svg --format svg
    """
    from .commands.watch_cmd import run_watch

    _exit_with(
        run_watch,
        ctx.obj["vault"],
        out=out,
        config=ctx.obj["config"],
        fmt=fmt,
        select=select,
        max_ticks=max_ticks,
    )


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
