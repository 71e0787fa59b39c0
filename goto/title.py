"""
Page title lookup.

Fetching runs on a daemon thread so the user can type tags while the
request is in flight. The result is handed back through a TitleFuture
and read once, when the title prompt is about to be shown. A process
that exits before then simply abandons the thread.
"""

import logging
import threading
from typing import Optional, Union

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
MAX_BODY_SIZE = 2_000_000
USER_AGENT = "goto-bookmarks (+https://github.com/)"


def extract_title(html: Union[str, bytes], encoding: Optional[str] = None) -> Optional[str]:
    """Text of the first <title> element, whitespace collapsed.

    Raw bytes without an encoding are decoded by BeautifulSoup, which
    honours a <meta> charset declaration.
    """
    if isinstance(html, bytes):
        soup = BeautifulSoup(html, "html.parser", from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return None
    title = " ".join(soup.title.get_text().split())
    return title or None


def fetch_title(url: str, timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    """
    Fetch a page and return its title.

    Never raises: network errors, non-HTML responses and pages without
    a title all give None.
    """
    try:
        resp = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            stream=True,
        )
        with resp:
            resp.raise_for_status()
            content_type = resp.headers.get("content-type", "")
            if content_type and "html" not in content_type.lower():
                logger.debug("Not HTML (%s): %s", content_type, url)
                return None

            # Titles live in <head>; stop reading past the size limit
            chunks: list[bytes] = []
            downloaded = 0
            for chunk in resp.iter_content(chunk_size=65536):
                chunks.append(chunk)
                downloaded += len(chunk)
                if downloaded >= MAX_BODY_SIZE:
                    break
            # Without a declared charset requests guesses ISO-8859-1
            encoding = resp.encoding if "charset=" in content_type.lower() else None
            html = b"".join(chunks)
    except (requests.RequestException, LookupError, OSError) as e:
        logger.debug("Title fetch failed for %s: %s", url, e)
        return None
    return extract_title(html, encoding)


class TitleFuture:
    """Result of a background title fetch, consumed at most once."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self._result: Optional[str] = None
        self._consumed = False
        self._thread = threading.Thread(
            target=self._run, args=(timeout,), daemon=True, name="goto-title"
        )

    def _run(self, timeout: float) -> None:
        try:
            self._result = fetch_title(self.url, timeout)
        except Exception as e:
            logger.debug("Title fetch crashed for %s: %s", self.url, e)
            self._result = None

    def start(self) -> "TitleFuture":
        self._thread.start()
        return self

    def result(self) -> Optional[str]:
        """Block until the fetch finishes and return the title."""
        if self._consumed:
            raise RuntimeError("Title result already consumed")
        self._consumed = True
        self._thread.join()
        return self._result


def load_title(url: str, timeout: float = DEFAULT_TIMEOUT) -> TitleFuture:
    """Start fetching a page title in the background."""
    return TitleFuture(url, timeout).start()
