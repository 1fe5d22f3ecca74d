"""Locations of user configuration, global state and per-project settings."""

from __future__ import annotations

from pathlib import Path

from worktree.state import WorktreeError

_HOME_ERROR = (
    "Could not determine home directory. Please ensure HOME environment variable is set."
)


def _home() -> Path:
    try:
        return Path.home()
    except (RuntimeError, KeyError) as exc:
        raise WorktreeError(_HOME_ERROR) from exc


def user_config_dir() -> Path:
    """The user configuration directory (~/.config/worktree)."""
    return _home() / ".config" / "worktree"


def user_config_file() -> Path:
    """The user configuration file (~/.config/worktree/config.json)."""
    return user_config_dir() / "config.json"


def ensure_user_config_dir() -> None:
    """Create the user configuration directory if it is missing."""
    user_config_dir().mkdir(parents=True, exist_ok=True)


def global_dir() -> Path:
    """The global worktree directory (~/.worktree)."""
    return _home() / ".worktree"


def global_worktrees_dir() -> Path:
    """Where worktrees are stored by default (~/.worktree/worktrees)."""
    return global_dir() / "worktrees"


def allocations_file() -> Path:
    """The port allocation registry (~/.worktree/port-allocations.json)."""
    return global_dir() / "port-allocations.json"


def project_config_dir_in(root: str | Path) -> Path:
    """The project configuration directory under ``root``."""
    return Path(root) / ".worktree"


def settings_file_in(root: str | Path) -> Path:
    """The shared project settings file under ``root``."""
    return project_config_dir_in(root) / "settings.json"


def local_settings_file_in(root: str | Path) -> Path:
    """The personal, git-ignored settings file under ``root``."""
    return project_config_dir_in(root) / "settings.local.json"


def ensure_global_dir() -> None:
    """Create the global worktree directory if it is missing."""
    global_dir().mkdir(parents=True, exist_ok=True)