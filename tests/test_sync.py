"""Tests for git sync (git itself is mocked)."""

import subprocess
from unittest.mock import patch

import pytest

from goto.errors import SyncError
from goto.sync import COMMIT_MESSAGE, sync


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class FakeGit:
    """Answers git subcommands from a table; records every call."""

    def __init__(self, status="", remotes="", fail=None):
        self.status = status
        self.remotes = remotes
        self.fail = fail
        self.calls: list[list[str]] = []

    def __call__(self, cmd, cwd=None, **kwargs):
        args = cmd[1:]
        self.calls.append(args)
        if self.fail and args[0] == self.fail:
            return completed(returncode=1, stderr=f"{self.fail} exploded")
        if args[0] == "status":
            return completed(self.status)
        if args[0] == "remote":
            return completed(self.remotes)
        return completed()

    def subcommands(self) -> list[str]:
        return [c[0] for c in self.calls]


class TestSync:
    def test_initializes_repository(self, tmp_path):
        git = FakeGit()
        with patch("goto.sync.subprocess.run", side_effect=git):
            assert sync(tmp_path) == 0
        assert git.subcommands() == ["init", "status", "remote"]
        assert (tmp_path / ".gitignore").exists()

    def test_existing_repository_not_reinitialized(self, tmp_path):
        (tmp_path / ".git").mkdir()
        git = FakeGit()
        with patch("goto.sync.subprocess.run", side_effect=git):
            sync(tmp_path)
        assert "init" not in git.subcommands()

    def test_commits_changes(self, tmp_path):
        (tmp_path / ".git").mkdir()
        git = FakeGit(status="?? example.com/abc.yaml\n M example.org/def.yaml\n")
        with patch("goto.sync.subprocess.run", side_effect=git):
            assert sync(tmp_path) == 2
        assert ["commit", "-m", COMMIT_MESSAGE] in git.calls
        assert git.subcommands() == ["status", "add", "commit", "remote"]

    def test_pull_and_push_with_origin(self, tmp_path):
        (tmp_path / ".git").mkdir()
        git = FakeGit(remotes="origin\n")
        with patch("goto.sync.subprocess.run", side_effect=git):
            sync(tmp_path)
        assert git.subcommands() == ["status", "remote", "pull", "push"]

    def test_conflict_aborts(self, tmp_path):
        (tmp_path / ".git").mkdir()
        git = FakeGit(status="UU example.com/abc.yaml\n")
        with patch("goto.sync.subprocess.run", side_effect=git):
            with pytest.raises(SyncError, match="conflict"):
                sync(tmp_path)
        assert "commit" not in git.subcommands()

    def test_git_failure(self, tmp_path):
        (tmp_path / ".git").mkdir()
        git = FakeGit(remotes="origin\n", fail="push")
        with patch("goto.sync.subprocess.run", side_effect=git):
            with pytest.raises(SyncError, match="push exploded"):
                sync(tmp_path)

    def test_git_missing(self, tmp_path):
        with patch("goto.sync.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(SyncError):
                sync(tmp_path)
