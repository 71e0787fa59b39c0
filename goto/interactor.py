"""
Interactive flows on top of the store and matcher.

Selecting a bookmark walks a small state machine. Only the terminal
states are reported, as State:

    ranking --pick--> selected --action--> action chosen --> APPLIED
       |                  |                      |
       +---- cancel ------+------- cancel -------+--------> CANCELLED
                                                 +--error-> FAILED

All prompts for an action are answered before anything is written, so
backing out of a prompt leaves the store as it was. A store error
aborts the current action only.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

import typer

from .bookmark import Bookmark
from .browser import open_url
from .errors import BrowserOpenError, GotoError, InvalidUrlError, PromptCancelled
from .matcher import DEFAULT_MIN_SCORE, search
from .prompt import Prompter
from .store import BookmarkStore
from .tag import Tag, join_tags
from .title import TitleFuture, load_title

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 8192
DEFAULT_SEARCH_URL = "https://duckduckgo.com/?q="

_PROTOCOL_PREFIXES = ("http://", "https://")


class State(Enum):
    """Terminal state of a select session. Outcome.selected and
    Outcome.action record how far it got."""
    APPLIED = "applied"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Action(Enum):
    OPEN = "open"
    EDIT_TITLE = "edit title"
    EDIT_TAGS = "edit tags"
    EDIT_URL = "edit URL"
    DELETE = "delete"
    EXIT = "exit"


ACTIONS: tuple[Action, ...] = tuple(Action)


@dataclass
class Outcome:
    """Where a select/act session ended and what it did."""
    state: State
    selected: Optional[Bookmark] = None
    action: Optional[Action] = None
    written: Optional[Bookmark] = None
    error: Optional[GotoError] = None


def search_query(terms: Sequence[Tag], search_url: str = DEFAULT_SEARCH_URL) -> str:
    """Web search URL for keywords that matched no bookmark."""
    return search_url + "+".join(t.value for t in terms)


def with_scheme(url: str) -> str:
    """Prefix https:// unless the URL already names http or https."""
    url = url.strip()
    if url.lower().startswith(_PROTOCOL_PREFIXES):
        return url
    return f"https://{url}"


def _echo_ui(message: str) -> None:
    typer.echo(message, err=True)


class Interactor:
    """
    Select, open, add and edit bookmarks with a user in the loop.

    Collaborators are injected so the flows can run against scripted
    input and fake browsers.
    """

    def __init__(
        self,
        store: BookmarkStore,
        prompter: Prompter,
        *,
        title_loader: Callable[[str], TitleFuture] = load_title,
        opener: Callable[[str], None] = open_url,
        search_url: str = DEFAULT_SEARCH_URL,
        output: Callable[[str], None] = typer.echo,
        ui: Callable[[str], None] = _echo_ui,
    ):
        self.store = store
        self.prompter = prompter
        self._load_title = title_loader
        self._open = opener
        self.search_url = search_url
        self._output = output
        self._ui = ui

    # -------------------------------------------------------------------------
    # Select
    # -------------------------------------------------------------------------

    def select(
        self,
        keywords: Iterable[Tag] = (),
        limit: int = DEFAULT_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> Outcome:
        """Rank bookmarks, let the user pick one, then run an action on it."""
        matches = search(self.store, keywords, min_score)[:limit]
        if not matches:
            self._ui("No bookmarks found")
            return Outcome(State.CANCELLED)

        bookmarks = [m.bookmark for m in matches]
        choice = self.prompter.choose(
            "Select bookmark", [str(b) for b in bookmarks], default=0
        )
        if choice is None:
            return Outcome(State.CANCELLED)
        return self.select_action(bookmarks[choice])

    def select_action(self, bookmark: Bookmark) -> Outcome:
        """Offer the action menu for one selected bookmark."""
        choice = self.prompter.choose(
            "Select action", [a.value for a in ACTIONS], default=0
        )
        if choice is None:
            return Outcome(State.CANCELLED, selected=bookmark)
        action = ACTIONS[choice]
        logger.debug("Action %s on %s", action.value, bookmark.url)

        handlers = {
            Action.OPEN: self._do_open,
            Action.EDIT_TITLE: self._do_edit_title,
            Action.EDIT_TAGS: self._do_edit_tags,
            Action.EDIT_URL: self._do_edit_url,
            Action.DELETE: self._do_delete,
        }
        handler = handlers.get(action)
        if handler is None:
            return Outcome(State.CANCELLED, selected=bookmark, action=action)

        try:
            written = handler(bookmark)
        except PromptCancelled:
            logger.debug("Cancelled %s on %s", action.value, bookmark.url)
            return Outcome(State.CANCELLED, selected=bookmark, action=action)
        except GotoError as e:
            self._ui(f"Error: {e}")
            return Outcome(State.FAILED, selected=bookmark, action=action, error=e)
        return Outcome(State.APPLIED, selected=bookmark, action=action, written=written)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _do_open(self, bookmark: Bookmark) -> None:
        try:
            self._open(bookmark.url)
        except BrowserOpenError as e:
            logger.warning("Unable to open bookmark: %s", e)
            self._output(bookmark.url)

    def _do_edit_title(self, bookmark: Bookmark) -> Bookmark:
        current = bookmark.title
        if current is None:
            current = self._load_title(bookmark.url).result()
        title = self.prompter.read_line("Title", default=current or "")
        updated = Bookmark.new(bookmark.url, title, bookmark.tags)
        return self.store.save(updated, merge=True)

    def _do_edit_tags(self, bookmark: Bookmark) -> Bookmark:
        raw = self.prompter.read_line("Tags", default=join_tags(bookmark.tags))
        updated = Bookmark.new(bookmark.url, bookmark.title, Tag.new_set(raw))
        # The edited set replaces the stored one
        return self.store.save(updated, merge=False)

    def _do_edit_url(self, bookmark: Bookmark) -> Optional[Bookmark]:
        moved = self._read_url(bookmark)
        if moved.url == bookmark.url:
            return None
        written = self.store.save(moved, merge=True)
        self.store.delete(bookmark)
        return written

    def _do_delete(self, bookmark: Bookmark) -> None:
        self.store.delete(bookmark)
        self._ui(f"Deleted bookmark {bookmark.url}")

    def _read_url(self, bookmark: Bookmark) -> Bookmark:
        """Prompt for a URL until it parses."""
        default = bookmark.url
        while True:
            raw = self.prompter.read_line("URL", default=default, allow_empty=False)
            try:
                return Bookmark.new(raw, bookmark.title, bookmark.tags)
            except InvalidUrlError as e:
                self._ui(str(e))
                default = raw

    # -------------------------------------------------------------------------
    # Add / open
    # -------------------------------------------------------------------------

    def add(self, url: str, tags: Iterable[Tag] = ()) -> Bookmark:
        """
        Add a bookmark, asking for tags and title.

        The page title is fetched in the background while tags are
        entered, then offered as the default title.

        Raises:
            InvalidUrlError: If url cannot be parsed
            PromptCancelled: If the user backs out (nothing is written)
        """
        bookmark = Bookmark.new(with_scheme(url), None, tags)
        title_future = self._load_title(bookmark.url)

        raw_tags = self.prompter.read_line("Tags", default=join_tags(bookmark.tags))
        tags = Tag.new_set(raw_tags)
        fetched = title_future.result()
        title = self.prompter.read_line("Title", default=fetched or "")

        saved = self.store.save(Bookmark.new(bookmark.url, title, tags), merge=True)
        self._output(str(saved))
        return saved

    def open_best(
        self,
        keywords: Sequence[Tag],
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> str:
        """
        Open the best-matching bookmark, or a web search when none matches.

        Returns:
            The URL handed to the browser

        Raises:
            BrowserOpenError: If the browser could not be opened (the
                URL is printed first)
        """
        matches = search(self.store, keywords, min_score)
        if matches:
            url = matches[0].bookmark.url
        else:
            self._ui("No bookmark found for keyword(s), searching online instead")
            url = search_query(keywords, self.search_url)

        try:
            self._open(url)
        except BrowserOpenError as e:
            logger.warning("Unable to open bookmark: %s", e)
            self._output(url)
            raise
        return url
