"""
One-way migration of legacy JSON records to the current YAML format.

Legacy records sit at the same content-addressed path with a .json
extension. Each one is rewritten next to itself as .yaml (tags sorted)
and the JSON file removed. Not reversible.
"""

import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

from . import codec
from .errors import GotoError, MalformedRecordError, NotAFileError, RecordNotFoundError
from .store import atomic_write, is_hidden

logger = logging.getLogger(__name__)

LEGACY_EXT = "json"


def json_to_yaml(path: Path) -> Path:
    """
    Convert one legacy record.

    Returns:
        Path of the written YAML record

    Raises:
        RecordNotFoundError, NotAFileError: If path is not a file
        MalformedRecordError, InvalidUrlError: If the JSON is unusable
        OSError: On filesystem failure
    """
    if not path.exists():
        raise RecordNotFoundError(path)
    if not path.is_file():
        raise NotAFileError(path)
    if path.suffix == f".{codec.RECORD_EXT}":
        return path

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedRecordError(f"Cannot parse {path}: {e}") from e
    bookmark = codec.from_dict(data)

    target = path.with_suffix(f".{codec.RECORD_EXT}")
    atomic_write(target, codec.encode(bookmark))
    path.unlink()
    return target


def migrate(root: Path, progress: Optional[Callable[[Path], None]] = None) -> int:
    """
    Migrate every legacy record under root.

    Files that fail to convert are logged and left in place.

    Returns:
        Number of records migrated
    """
    migrated = 0
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
        for name in sorted(filenames):
            if not name.endswith(f".{LEGACY_EXT}"):
                continue
            path = Path(dirpath) / name
            if progress:
                progress(path)
            try:
                json_to_yaml(path)
            except (GotoError, OSError) as e:
                logger.error("Unable to migrate %s: %s", path, e)
                continue
            migrated += 1
    logger.info("Migrated %d bookmarks from JSON to YAML", migrated)
    return migrated
