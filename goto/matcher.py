"""
Tag-overlap retrieval over the whole store.

Every record is scored by the Jaccard index between its terms and the
query. There is no index; each search is a full scan.
"""

import logging
from typing import Iterable, NamedTuple

from .bookmark import Bookmark
from .errors import GotoError
from .store import BookmarkStore
from .tag import Tag

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.05


class Match(NamedTuple):
    score: float
    bookmark: Bookmark


def score(terms: frozenset[Tag], query: frozenset[Tag]) -> float:
    """Jaccard index of two tag sets. 0.0 when either set is empty."""
    if not terms or not query:
        return 0.0
    return len(terms & query) / len(terms | query)


def search(
    store: BookmarkStore,
    query: Iterable[Tag],
    min_score: float = DEFAULT_MIN_SCORE,
) -> list[Match]:
    """
    Rank every bookmark in the store against the query.

    An empty query matches everything with score 0.0. Records that fail
    to load are logged and skipped.

    Returns:
        Matches with score >= min_score, best first. Ties keep
        traversal order.
    """
    query = frozenset(query)
    if not query:
        min_score = 0.0

    matches = []
    for path in store.iter_paths():
        try:
            bookmark = store.load(path)
        except GotoError as e:
            logger.error("Unable to read %s: %s", path, e)
            continue
        s = score(bookmark.terms(), query)
        if s >= min_score:
            matches.append(Match(s, bookmark))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches
