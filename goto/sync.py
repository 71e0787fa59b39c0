"""
Synchronize the store with a git remote.

Uses the git executable. The store is initialized as a repository on
first sync; changes are committed, and when an "origin" remote exists
the branch is pulled and pushed.
"""

import logging
import subprocess
from pathlib import Path

from .errors import SyncError

logger = logging.getLogger(__name__)

REMOTE = "origin"
BRANCH = "master"
COMMIT_MESSAGE = "Added/updated files"

# Local logs and interrupted writes stay out of history
GITIGNORE = ".goto-*.log*\n.*.tmp\n"


def _git(root: Path, *args: str, check: bool = True) -> subprocess.CompletedProcess:
    logger.debug("git %s", " ".join(args))
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise SyncError(f"Unable to run git: {e}") from e
    if check and result.returncode != 0:
        raise SyncError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result


def sync(root: Path) -> int:
    """
    Commit local changes and exchange them with the remote.

    Returns:
        Number of changed paths that were committed

    Raises:
        SyncError: If a git command fails or a path is conflicted
    """
    root = Path(root)
    if not (root / ".git").exists():
        _git(root, "init")
        logger.info("Initialized git repository in %s", root)
        gitignore = root / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(GITIGNORE, encoding="utf-8")

    status = _git(root, "status", "--porcelain", "--untracked-files=all").stdout
    changes = [line for line in status.splitlines() if line.strip()]
    conflicted = [line for line in changes if line[:2] in ("UU", "AA", "DD", "AU", "UA", "DU", "UD")]
    if conflicted:
        raise SyncError(
            "File has a conflict that needs to be resolved manually: "
            + conflicted[0][3:]
        )

    if changes:
        _git(root, "add", "--all")
        _git(root, "commit", "-m", COMMIT_MESSAGE)
        logger.info("Committed %d changed paths", len(changes))

    remotes = _git(root, "remote").stdout.split()
    if REMOTE in remotes:
        _git(root, "pull", "--no-rebase", REMOTE, BRANCH)
        _git(root, "push", REMOTE, f"refs/heads/{BRANCH}:refs/heads/{BRANCH}")
        logger.info("Exchanged %s with %s", BRANCH, REMOTE)

    return len(changes)
