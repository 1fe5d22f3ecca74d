"""Thin wrappers around the git command line."""

from __future__ import annotations

import contextlib
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

from worktree.state import WorktreeError


class GitError(WorktreeError):
    """Raised when a git command fails."""


def _git(*args: str, action: str, cwd: str | Path | None = None) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        raise GitError(f"Failed to execute {action}") from exc


def is_git_repo() -> bool:
    """Whether the current directory is inside a git repository."""
    try:
        return _git("rev-parse", "--git-dir", action="git rev-parse").returncode == 0
    except GitError:
        return False


def get_repo_root() -> Path:
    """Top-level directory of the current repository or worktree."""
    result = _git("rev-parse", "--show-toplevel", action="git rev-parse")
    if result.returncode != 0:
        raise GitError("Not in a git repository")
    return Path(result.stdout.strip())


def get_main_repo_root() -> Path:
    """Root of the main working tree, even when run from a linked worktree."""
    result = _git("worktree", "list", "--porcelain", action="git worktree list")
    if result.returncode != 0:
        return get_repo_root()
    for line in result.stdout.splitlines():
        if line.startswith("worktree "):
            return Path(line[len("worktree "):])
    return get_repo_root()


def get_main_project_name() -> str:
    """Name of the main repository's root directory."""
    name = get_main_repo_root().name
    if not name:
        raise GitError("Could not determine project name from repository root")
    return name


def branch_exists(branch: str) -> bool:
    try:
        return _git("rev-parse", "--verify", branch, action="git rev-parse").returncode == 0
    except GitError:
        return False


def create_worktree(path: str | Path, branch: str) -> None:
    """Add a worktree at ``path`` on a new branch."""
    result = _git("worktree", "add", str(path), "-b", branch, action="git worktree add")
    if result.returncode != 0:
        raise GitError(f"git worktree add failed: {result.stderr}")


def remove_worktree(original_dir: str | Path, worktree_dir: str | Path, force: bool = False) -> None:
    """Remove a worktree; with ``force`` fall back to deleting the directory."""
    args = ["worktree", "remove", str(worktree_dir)]
    if force:
        args.append("--force")
    result = _git(*args, action="git worktree remove", cwd=original_dir)
    if result.returncode != 0:
        if not force:
            raise GitError(f"git worktree remove failed: {result.stderr}")
        try:
            shutil.rmtree(worktree_dir)
        except OSError as exc:
            raise GitError(f"Failed to remove directory {worktree_dir}") from exc

    with contextlib.suppress(GitError):
        _git("worktree", "prune", action="git worktree prune", cwd=original_dir)


def get_latest_commit_date(worktree_dir: str | Path) -> datetime:
    """Author date of the newest commit in ``worktree_dir``, in UTC."""
    result = _git("log", "-1", "--format=%aI", action="git log", cwd=worktree_dir)
    if result.returncode != 0:
        raise GitError("Failed to get latest commit date")
    text = result.stdout.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError as exc:
        raise GitError("Failed to parse commit date") from exc
    if moment.tzinfo is None:
        raise GitError("Failed to parse commit date")
    return moment.astimezone(timezone.utc)