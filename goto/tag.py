"""
Tags: normalized, comparable tokens attached to bookmarks.

A tag is lower-cased with whitespace, commas, double quotes and
backslashes removed. Normalization is idempotent, and an empty result
is never a tag.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from .errors import EmptyTagError

# Separators between tags in free-form input
_TERMINATOR_RE = re.compile(r"[,\s]+")

# Characters that never survive normalization
_DISCARD_RE = re.compile(r'[,\s"\\]+')


def normalize(raw: str) -> str:
    """Strip discarded characters, lower-case and trim."""
    return _DISCARD_RE.sub("", raw).lower().strip()


@dataclass(frozen=True, order=True)
class Tag:
    """A single normalized tag. Construct with Tag.new()."""
    value: str

    def __post_init__(self):
        if not self.value:
            raise EmptyTagError("Tag was empty or contained no valid characters")
        if normalize(self.value) != self.value:
            raise ValueError(f"Not a normalized tag: {self.value!r}")

    @classmethod
    def new(cls, raw: str) -> "Tag":
        """Normalize raw input into a Tag.

        Raises:
            EmptyTagError: If nothing is left after normalization
        """
        value = normalize(raw)
        if not value:
            raise EmptyTagError("Tag was empty or contained no valid characters")
        return cls(value)

    @classmethod
    def new_set(cls, raw: str) -> frozenset["Tag"]:
        """Split free-form input on comma/whitespace runs into a tag set.

        Tokens that normalize to nothing are dropped.
        """
        tags = set()
        for token in _TERMINATOR_RE.split(raw):
            try:
                tags.add(cls.new(token))
            except EmptyTagError:
                continue
        return frozenset(tags)

    def __str__(self) -> str:
        return self.value


def parse_one(raw: str) -> Tag:
    return Tag.new(raw)


def parse_many(raw: str) -> frozenset[Tag]:
    return Tag.new_set(raw)


def parse_keywords(words: Iterable[str]) -> list[Tag]:
    """Tags from command-line words, first occurrence order, no repeats."""
    seen: dict[Tag, None] = {}
    for word in words:
        for token in _TERMINATOR_RE.split(word):
            try:
                seen.setdefault(Tag.new(token))
            except EmptyTagError:
                continue
    return list(seen)


def join_tags(tags: Iterable[Tag], sep: str = " ") -> str:
    """Join tags in sorted order, for display and prompt pre-fill."""
    return sep.join(t.value for t in sorted(tags))
