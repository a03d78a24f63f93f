"""Command line entry point.

`arbor` opens the interactive graph, `arbor log` prints it, and
`arbor serve` exposes it over HTTP.
"""
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from arbor.config import Settings, configure_logging
from arbor.dag.builder import open_session
from arbor.dag.controller import ViewportController
from arbor.dag.errors import NoTipsFound
from arbor.dag.refs import head_label
from arbor.tui import render
from arbor.tui.theme import DEFAULT_THEME

logger = logging.getLogger(__name__)

console = Console()


def _open(settings: Settings, viewport_height: int = 1) -> ViewportController:
    git_dir = settings.resolve_git_dir()
    if git_dir is None:
        raise click.ClickException("open git repository: not a git repository (or any parent)")
    try:
        return open_session(git_dir, include_all=settings.include_all, limit=settings.limit,
                            viewport_height=viewport_height)
    except NoTipsFound as e:
        raise click.ClickException(str(e)) from e


@click.group(invoke_without_command=True)
@click.option("--all", "include_all", is_flag=True,
              help="Include all local and remote branches.")
@click.option("--limit", type=click.IntRange(min=0), default=None,
              help="Limit the number of commits to parse (0 = no limit).")
@click.option("--git-dir", type=click.Path(path_type=Path, file_okay=False), default=None,
              help="Repository to read (defaults to GIT_DIR or the current directory).")
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), default=None,
              help="Write log records to this file.")
@click.option("-v", "--verbose", count=True, help="More logging (-v info, -vv debug).")
@click.pass_context
def main(ctx: click.Context, include_all: bool, limit: Optional[int], git_dir: Optional[Path],
         log_file: Optional[Path], verbose: int):
    """Visualize Git commit history as an interactive tree."""
    settings = Settings.from_env()
    if include_all:
        settings.include_all = True
    if limit is not None:
        settings.limit = limit
    if git_dir is not None:
        settings.git_dir = git_dir
    if log_file is not None:
        settings.log_file = log_file
    if verbose:
        settings.log_level = "DEBUG" if verbose > 1 else "INFO"
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


@main.command()
@click.pass_obj
def browse(settings: Settings):
    """Open the interactive graph (the default command)."""
    # The screen belongs to the UI, so log records only go to a file
    configure_logging(settings, to_stderr=False)
    from arbor.tui.app import ArborApp

    controller = _open(settings)
    git_dir = settings.resolve_git_dir()
    ArborApp(controller, repo_path=git_dir.parent, head_name=head_label(git_dir)).run()


@main.command()
@click.option("-n", "--max-count", type=click.IntRange(min=1), default=20, show_default=True,
              help="Number of rows to print.")
@click.option("--filter", "query", default="", help="Only commits whose subject or author contains this text.")
@click.pass_obj
def log(settings: Settings, max_count: int, query: str):
    """Print the commit graph without the interactive UI."""
    configure_logging(settings)
    controller = _open(settings, viewport_height=max_count)
    controller.resize(max_count)
    if query:
        controller.apply_filter(query)

    rows = controller.visible_rows()
    if not rows:
        console.print("[dim]No commits[/dim]")
        return

    for _position, entry in rows:
        line = render.graph_text(entry.graph, DEFAULT_THEME, "default")
        line.append(f" {entry.short_oid}", style=DEFAULT_THEME.accent)
        line.append(f" {entry.subject}")
        line.append(f" - {entry.author}", style=DEFAULT_THEME.text_muted)
        console.print(line, soft_wrap=True)


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
@click.pass_obj
def serve(settings: Settings, host: str, port: int):
    """Serve the commit graph over HTTP."""
    import uvicorn

    configure_logging(settings)
    git_dir = settings.resolve_git_dir()
    if git_dir is None:
        raise click.ClickException("open git repository: not a git repository (or any parent)")

    from arbor.api.main import app, service
    service.include_all = settings.include_all
    service.limit = settings.limit
    service.reset(git_dir)

    logger.info("Serving %s on http://%s:%d", git_dir, host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
