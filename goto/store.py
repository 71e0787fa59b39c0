"""
Filesystem store for bookmark records.

Each bookmark lives in its own file at a content-addressed path:

    {root}/{host}/{sha256(url)}.yaml

The host directory only aids browsing. Two bookmarks with the same URL
always map to the same file, so saving is merge-on-write: the record
already on disk is loaded and its tags unioned into the new value
before the file is replaced.

There is no locking. Two processes writing the same record at once
race, and the last writer wins.
"""

import logging
import os
from pathlib import Path
from typing import Iterator

from . import codec
from .bookmark import Bookmark
from .errors import NotAFileError, RecordNotFoundError, StoreIOError

logger = logging.getLogger(__name__)


def atomic_write(path: Path, data: bytes) -> None:
    """Write to a hidden sibling, then rename over the target."""
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except OSError:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise


def is_hidden(name: str) -> bool:
    return name.startswith(".")


class BookmarkStore:
    """
    Directory of bookmark record files.

    Not safe for concurrent mutation from several processes.
    """

    def __init__(self, root: Path):
        """
        Args:
            root: Store root directory (created by ensure())
        """
        self.root = Path(root)

    def ensure(self) -> "BookmarkStore":
        """Create the root directory if needed."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(self.root, e) from e
        return self

    # -------------------------------------------------------------------------
    # Addressing
    # -------------------------------------------------------------------------

    def path_for(self, bookmark: Bookmark) -> Path:
        """Absolute path of the record file for a bookmark."""
        return self.root / bookmark.rel_path()

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def load(self, path: Path) -> Bookmark:
        """
        Load a single record file.

        Raises:
            RecordNotFoundError: If the path does not exist
            NotAFileError: If the path is not a regular file
            MalformedRecordError: If the file cannot be parsed
            InvalidUrlError: If the stored URL is invalid
        """
        path = Path(path)
        if not path.exists():
            raise RecordNotFoundError(path)
        if not path.is_file():
            raise NotAFileError(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StoreIOError(path, e) from e
        return codec.decode(data)

    def iter_paths(self) -> Iterator[Path]:
        """
        Walk the store and yield every visible regular file.
        Symlinks are not followed.

        Hidden files and directories are skipped. Order is sorted by
        name at each level so traversal is deterministic.
        """
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
            for name in sorted(filenames):
                if is_hidden(name):
                    continue
                path = Path(dirpath) / name
                if path.is_file() and not path.is_symlink():
                    yield path

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def save(self, bookmark: Bookmark, merge: bool = True) -> Bookmark:
        """
        Write a bookmark to its record file.

        When merge is true and a record already exists at the path, its
        tags are unioned into the bookmark first. Title and URL come
        from the bookmark being saved.

        Returns:
            The bookmark actually written
        """
        path = self.path_for(bookmark)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(path.parent, e) from e

        if merge and path.exists():
            prior = self.load(path)
            bookmark = bookmark.merge(prior)

        data = codec.encode(bookmark)
        try:
            atomic_write(path, data)
        except OSError as e:
            raise StoreIOError(path, e) from e
        logger.info("Saved %s -> %s", bookmark.url, path.relative_to(self.root))
        return bookmark

    def delete(self, bookmark: Bookmark) -> None:
        """
        Remove the record file for a bookmark.

        Raises:
            RecordNotFoundError: If there is no record for this URL
        """
        path = self.path_for(bookmark)
        try:
            path.unlink()
        except FileNotFoundError:
            raise RecordNotFoundError(path) from None
        except IsADirectoryError:
            raise NotAFileError(path) from None
        except OSError as e:
            raise StoreIOError(path, e) from e
        logger.info("Deleted %s (%s)", bookmark.url, path.relative_to(self.root))
