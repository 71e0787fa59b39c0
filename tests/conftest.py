"""
Shared pytest fixtures for goto tests.

Provides scripted prompting and fake browser / title collaborators so
no test touches the terminal or the network.
"""

from pathlib import Path
from typing import Optional

import pytest

from goto.bookmark import Bookmark
from goto.errors import BrowserOpenError
from goto.interactor import Interactor
from goto.prompt import ScriptedPrompter
from goto.store import BookmarkStore
from goto.tag import Tag


class MockTitleFuture:
    """Completed title fetch."""

    def __init__(self, title: Optional[str]):
        self._title = title
        self.consumed = 0

    def result(self) -> Optional[str]:
        self.consumed += 1
        return self._title


class MockTitleLoader:
    """Records requested URLs and returns a fixed title."""

    def __init__(self, title: Optional[str] = None):
        self.title = title
        self.calls: list[str] = []
        self.futures: list[MockTitleFuture] = []

    def __call__(self, url: str) -> MockTitleFuture:
        self.calls.append(url)
        future = MockTitleFuture(self.title)
        self.futures.append(future)
        return future


class MockBrowser:
    """Collects opened URLs; optionally refuses to open."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.opened: list[str] = []

    def __call__(self, url: str) -> None:
        self.opened.append(url)
        if self.fail:
            raise BrowserOpenError(f"System did not acknowledge opening {url}")


def make_bookmark(url: str, tags: str = "", title: Optional[str] = None) -> Bookmark:
    return Bookmark.new(url, title, Tag.new_set(tags))


@pytest.fixture
def store(tmp_path: Path) -> BookmarkStore:
    """Empty store in a temp directory."""
    return BookmarkStore(tmp_path / "bookmarks").ensure()


@pytest.fixture
def title_loader() -> MockTitleLoader:
    return MockTitleLoader("Fetched Title")


@pytest.fixture
def browser() -> MockBrowser:
    return MockBrowser()


@pytest.fixture
def make_interactor(store, title_loader, browser):
    """Factory: interactor over the temp store with scripted answers.

    Returns (interactor, prompter, output_lines, ui_lines).
    """
    def _make(*answers):
        prompter = ScriptedPrompter(answers)
        output: list[str] = []
        ui: list[str] = []
        interactor = Interactor(
            store,
            prompter,
            title_loader=title_loader,
            opener=browser,
            output=output.append,
            ui=ui.append,
        )
        return interactor, prompter, output, ui
    return _make
