"""
The Bookmark record: a URL, an optional title and a set of tags.

Identity is the URL. Two bookmarks are equal when URL and tag set are
equal; the title is auxiliary and excluded from comparison.
"""

import hashlib
import ipaddress
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, Optional
from urllib.parse import urlparse, urlunparse

from .errors import EmptyTagError, InvalidUrlError
from .tag import Tag, join_tags

# Extension of current-format record files
RECORD_EXT = "yaml"


# ---------------------------------------------------------------------------
# URL canonicalization: RFC 3986 §6.2.2 syntax-based normalization
# ---------------------------------------------------------------------------

_UNRESERVED = frozenset(
    'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~'
)
_DEFAULT_PORTS = {'http': 80, 'https': 443}


def _decode_unreserved(s: str) -> str:
    """Decode percent-encoded unreserved characters (RFC 3986 §2.3).

    Reserved percent-encodings are kept with uppercase hex digits.
    """
    if '%' not in s:
        return s
    result: list[str] = []
    i = 0
    while i < len(s):
        if s[i] == '%' and i + 2 < len(s):
            hex_str = s[i + 1:i + 3]
            try:
                char = chr(int(hex_str, 16))
                if char in _UNRESERVED:
                    result.append(char)
                else:
                    result.append(f'%{hex_str.upper()}')
                i += 3
                continue
            except ValueError:
                pass
        result.append(s[i])
        i += 1
    return ''.join(result)


def _resolve_dot_segments(path: str) -> str:
    """Remove dot segments from a URI path (RFC 3986 §5.2.4)."""
    segments = path.split('/')
    output: list[str] = []
    for seg in segments:
        if seg == '.':
            continue
        elif seg == '..':
            if output and output[-1] != '':
                output.pop()
        else:
            output.append(seg)
    resolved = '/'.join(output)
    if path.startswith('/') and not resolved.startswith('/'):
        resolved = '/' + resolved
    return resolved


def _normalize_http_url(url: str) -> str:
    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    host = (parsed.hostname or '').lower()
    if ':' in host:
        host = f'[{host}]'

    port = parsed.port
    if port and port == _DEFAULT_PORTS.get(scheme):
        port = None
    netloc = f'{host}:{port}' if port else host
    if parsed.username:
        userinfo = parsed.username
        if parsed.password:
            userinfo += f':{parsed.password}'
        netloc = f'{userinfo}@{netloc}'

    path = _resolve_dot_segments(_decode_unreserved(parsed.path))
    if not path:
        path = '/'

    query = _decode_unreserved(parsed.query)
    fragment = _decode_unreserved(parsed.fragment)

    return urlunparse((scheme, netloc, path, parsed.params, query, fragment))


def _unsafe_host(host: Optional[str]) -> bool:
    """Hosts that would name a hidden or parent shard directory."""
    return bool(host) and host.startswith(".")


def canonical_url(raw: str) -> str:
    """Validate an absolute URL and return its canonical string.

    Raises:
        InvalidUrlError: If the input is not an absolute URL
    """
    if not isinstance(raw, str):
        raise InvalidUrlError(f"Invalid URL: {raw!r}")
    url = raw.strip()
    try:
        parsed = urlparse(url)
        parsed.port  # raises on a malformed port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL: {raw!r}") from e
    if not parsed.scheme or not (parsed.netloc or parsed.path) or any(c.isspace() for c in url):
        raise InvalidUrlError(f"Invalid URL: {raw!r}")
    if _unsafe_host(parsed.hostname):
        raise InvalidUrlError(f"Invalid URL (bad host): {raw!r}")
    if parsed.scheme.lower() in _DEFAULT_PORTS:
        if not parsed.hostname:
            raise InvalidUrlError(f"Invalid URL (no host): {raw!r}")
        return _normalize_http_url(url)
    return url


def url_hash(url: str) -> str:
    """Hex SHA-256 of a URL string. Content address of a record."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Bookmark
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bookmark:
    """
    A stored web bookmark.

    Construct with Bookmark.new(), which validates and canonicalizes
    the URL. Instances are immutable; edits produce new values.

    Attributes:
        url: Canonical absolute URL (the identity of the record)
        title: Optional title, excluded from equality
        tags: Set of normalized tags
    """
    url: str
    title: Optional[str] = field(default=None, compare=False)
    tags: frozenset[Tag] = frozenset()

    @classmethod
    def new(
        cls,
        url: str,
        title: Optional[str] = None,
        tags: Iterable[Tag] = (),
    ) -> "Bookmark":
        """Create a bookmark, validating the URL.

        Raises:
            InvalidUrlError: If url is not an absolute URL
        """
        return cls(url=canonical_url(url), title=title or None, tags=frozenset(tags))

    @property
    def id(self) -> str:
        """Hex SHA-256 of the URL."""
        return url_hash(self.url)

    def domain(self) -> Optional[str]:
        """Lowercase host name, or None for IP literals, host-less URLs and dot-led hosts."""
        host = urlparse(self.url).hostname
        if not host or _unsafe_host(host):
            return None
        try:
            ipaddress.ip_address(host)
            return None
        except ValueError:
            return host

    def root_domain(self) -> Optional[str]:
        """Second-to-last label of the host, e.g. 'example' for www.example.com."""
        domain = self.domain()
        if not domain:
            return None
        labels = domain.split('.')
        if len(labels) < 2:
            return None
        return labels[-2]

    def terms(self) -> frozenset[Tag]:
        """Tags plus the root-domain label. Used for matching only."""
        root = self.root_domain()
        if root is None:
            return self.tags
        try:
            return self.tags | {Tag.new(root)}
        except EmptyTagError:
            return self.tags

    def rel_path(self) -> PurePosixPath:
        """Relative record path: {host}/{sha256(url)}.{ext}."""
        return PurePosixPath(self.domain() or "", f"{self.id}.{RECORD_EXT}")

    def merge(self, other: "Bookmark") -> "Bookmark":
        """Union tags with another record of the same URL.

        A record with a different URL leaves this one unchanged.
        """
        if self.url != other.url:
            return self
        return Bookmark(url=self.url, title=self.title, tags=self.tags | other.tags)

    def __str__(self) -> str:
        tags = join_tags(self.tags)
        return f"{self.url} - {tags}"
