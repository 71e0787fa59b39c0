"""
YAML encoding of bookmark records.

One record per file:

    url: https://example.com/page
    title: Example page
    tags:
    - news
    - tech

Tags are written sorted so the same bookmark always encodes to the
same bytes.
"""

from typing import Any

import yaml

from .bookmark import RECORD_EXT, Bookmark
from .errors import EmptyTagError, InvalidUrlError, MalformedRecordError, SerializeError
from .tag import Tag

__all__ = ["RECORD_EXT", "encode", "decode", "to_dict", "from_dict"]


def to_dict(bookmark: Bookmark) -> dict[str, Any]:
    """Record fields in their persisted order."""
    return {
        "url": bookmark.url,
        "title": bookmark.title,
        "tags": sorted(t.value for t in bookmark.tags),
    }


def encode(bookmark: Bookmark) -> bytes:
    """Serialize a bookmark to YAML bytes.

    Raises:
        SerializeError: If the record cannot be represented
    """
    try:
        text = yaml.safe_dump(
            to_dict(bookmark),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except yaml.YAMLError as e:
        raise SerializeError(f"Cannot serialize {bookmark.url}: {e}") from e
    return text.encode("utf-8")


def from_dict(data: Any) -> Bookmark:
    """Build a bookmark from a decoded mapping. Unknown keys are ignored."""
    if not isinstance(data, dict):
        raise MalformedRecordError("Record is not a mapping")
    if "url" not in data:
        raise MalformedRecordError("Record has no 'url' field")
    if "tags" not in data:
        raise MalformedRecordError("Record has no 'tags' field")

    url = data["url"]
    if not isinstance(url, str):
        raise InvalidUrlError(f"Invalid URL: {url!r}")

    title = data.get("title")
    if title is not None and not isinstance(title, str):
        title = str(title)

    raw_tags = data["tags"]
    if raw_tags is None:
        raw_tags = []
    if not isinstance(raw_tags, list):
        raise MalformedRecordError("'tags' is not a sequence")
    tags = set()
    for raw in raw_tags:
        try:
            tags.add(Tag.new(str(raw)))
        except EmptyTagError:
            continue

    return Bookmark.new(url, title, tags)


def decode(data: bytes) -> Bookmark:
    """Deserialize a bookmark from YAML bytes.

    Raises:
        MalformedRecordError: On a syntax error or missing field
        InvalidUrlError: If the stored URL is not an absolute URL
    """
    try:
        text = data.decode("utf-8")
        parsed = yaml.safe_load(text)
    except (UnicodeDecodeError, yaml.YAMLError) as e:
        raise MalformedRecordError(f"Cannot parse record: {e}") from e
    return from_dict(parsed)
