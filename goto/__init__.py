"""
goto: web bookmarks on the filesystem

One YAML file per bookmark, stored at a path derived from the SHA-256 of
its URL. Bookmarks are found again by tag overlap with a query.

Quick Start:
    from pathlib import Path
    from goto import Bookmark, BookmarkStore, Tag, search

    store = BookmarkStore(Path("~/.goto").expanduser()).ensure()
    store.save(Bookmark.new("https://example.com", None, Tag.new_set("news tech")))
    for match in search(store, Tag.new_set("tech")):
        print(match.score, match.bookmark)

CLI Usage:
    goto add example.com news tech
    goto open tech
    goto select tech -n 20

Environment Variables:
    GOTO_DIR      - Override default store location (~/.goto)
    GOTO_VERBOSE  - Set to 1 for debug logging
"""

from .bookmark import Bookmark
from .errors import (
    GotoError,
    EmptyTagError,
    InvalidUrlError,
    MalformedRecordError,
    NotAFileError,
    RecordNotFoundError,
)
from .matcher import Match, score, search
from .store import BookmarkStore
from .tag import Tag

__version__ = "0.2.0"
__all__ = [
    "Bookmark",
    "BookmarkStore",
    "Match",
    "Tag",
    "score",
    "search",
    "GotoError",
    "EmptyTagError",
    "InvalidUrlError",
    "MalformedRecordError",
    "NotAFileError",
    "RecordNotFoundError",
]
