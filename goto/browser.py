"""Open URLs in the user's default browser."""

import logging
import webbrowser

from .errors import BrowserOpenError

logger = logging.getLogger(__name__)


def open_url(url: str) -> None:
    """
    Hand a URL to the system browser.

    Raises:
        BrowserOpenError: If no browser acknowledged the request
    """
    try:
        ok = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserOpenError(f"Unable to open {url}: {e}") from e
    if not ok:
        raise BrowserOpenError(f"System did not acknowledge opening {url}")
    logger.debug("Opened %s", url)
