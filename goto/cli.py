"""
CLI interface for goto.

Usage:
    goto                       # pick from all bookmarks
    goto select rust docs      # pick from bookmarks matching tags
    goto open rust docs        # open the best match
    goto add example.com news tech
"""

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .config import StoreConfig, default_store_path, load_or_create_config
from .errors import GotoError, PromptCancelled, log_exception
from .interactor import Interactor, State
from .logging_config import (
    configure_ops_log,
    configure_quiet_mode,
    enable_debug_mode,
    set_verbosity,
)
from .prompt import Prompter, TerminalPrompter
from .store import BookmarkStore
from .tag import parse_keywords

logger = logging.getLogger(__name__)


# Configure quiet mode by default
# Set GOTO_VERBOSE=1 to enable debug mode via environment
if os.environ.get("GOTO_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        typer.echo(f"goto {version('goto-bookmarks')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


def _verbosity_callback(value: Optional[int]):
    if value is not None:
        set_verbosity(value)


# Global state for CLI options
_store_override: Optional[Path] = None
_ops_handler: Optional[logging.Handler] = None


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="goto",
    help="Web bookmarks utility.",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode=None,
)


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

ScoreOption = Annotated[
    Optional[float],
    typer.Option(
        "--score", "-s",
        min=0.0, max=1.0,
        help="Minimum match score, 0.0 - 1.0 (default from config: 0.05)",
    )
]

LimitOption = Annotated[
    Optional[int],
    typer.Option(
        "--limit", "-n",
        min=1,
        help="Maximum bookmarks to list (default from config: 8192)",
    )
]

KeywordsArgument = Annotated[
    Optional[list[str]],
    typer.Argument(help="Tags to match against"),
]


# -----------------------------------------------------------------------------
# Setup
# -----------------------------------------------------------------------------


def _make_prompter() -> Prompter:
    return TerminalPrompter()


def _open_store() -> tuple[BookmarkStore, StoreConfig]:
    """Open the store and its config, exiting if the root is unusable."""
    path = _get_store_override() or default_store_path()
    try:
        store = BookmarkStore(path).ensure()
        config = load_or_create_config(store.root)
    except (GotoError, OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    global _ops_handler
    if _ops_handler is not None:
        logging.getLogger("goto").removeHandler(_ops_handler)
        _ops_handler.close()
    _ops_handler = configure_ops_log(store.root)
    return store, config


def _get_interactor() -> tuple[Interactor, StoreConfig]:
    from functools import partial
    from .title import load_title

    store, config = _open_store()
    interactor = Interactor(
        store,
        _make_prompter(),
        title_loader=partial(load_title, timeout=config.web.fetch_timeout),
        search_url=config.web.search_url,
    )
    return interactor, config


def _fail(e: Exception, command: str) -> typer.Exit:
    log_path = log_exception(e, command)
    logger.debug("Details in %s", log_path)
    typer.echo(f"Error: {e}", err=True)
    return typer.Exit(1)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    verbosity: Annotated[Optional[int], typer.Option(
        "--verbosity", "-V",
        min=0, max=5,
        help="Set verbosity level, 0 - 5",
        callback=_verbosity_callback,
        is_eager=True,
    )] = None,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-d",
        envvar="GOTO_DIR",
        help="Path to the bookmark directory (default: ~/.goto/)",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Web bookmarks utility."""
    # With no subcommand, select from every bookmark
    if ctx.invoked_subcommand is None:
        select(keywords=None, min_score=None, limit=None)


@app.command()
def add(
    url: Annotated[str, typer.Argument(help="URL to bookmark (https:// is assumed)")],
    tags: KeywordsArgument = None,
):
    """Add bookmark with URL and optionally some tags."""
    interactor, _ = _get_interactor()
    try:
        interactor.add(url, parse_keywords(tags or []))
    except PromptCancelled:
        typer.echo("Cancelled", err=True)
        raise typer.Exit(1)
    except GotoError as e:
        raise _fail(e, "add")


@app.command("open")
def open_cmd(
    keywords: KeywordsArgument = None,
    min_score: ScoreOption = None,
):
    """Open the bookmark best matching the keywords.

    If no bookmark matches, the keywords are sent to a web search
    instead.
    """
    interactor, config = _get_interactor()
    score = config.search.min_score if min_score is None else min_score
    try:
        interactor.open_best(parse_keywords(keywords or []), score)
    except GotoError as e:
        raise _fail(e, "open")


@app.command()
def select(
    keywords: KeywordsArgument = None,
    min_score: ScoreOption = None,
    limit: LimitOption = None,
):
    """Select from a list of bookmarks, then open, edit or delete it."""
    interactor, config = _get_interactor()
    score = config.search.min_score if min_score is None else min_score
    count = config.search.limit if limit is None else limit
    try:
        outcome = interactor.select(parse_keywords(keywords or []), count, score)
    except GotoError as e:
        raise _fail(e, "select")
    if outcome.state == State.FAILED:
        raise typer.Exit(1)


@app.command()
def migrate():
    """Migrate all bookmarks from JSON to YAML. Not reversible."""
    from .migrate import migrate as run_migration

    store, _ = _open_store()
    count = run_migration(
        store.root,
        progress=lambda p: typer.echo(f"Migrating {p}", err=True),
    )
    typer.echo(f"Migrated {count} bookmarks from JSON to YAML", err=True)


@app.command()
def sync():
    """Commit bookmark changes and sync with the git remote."""
    from .sync import sync as run_sync

    store, _ = _open_store()
    try:
        changes = run_sync(store.root)
    except GotoError as e:
        raise _fail(e, "sync")
    typer.echo(f"Synced {changes} changed bookmarks", err=True)


def main():
    app()


if __name__ == "__main__":
    main()
