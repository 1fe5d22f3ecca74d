from pathlib import Path
from unittest.mock import patch

import pytest

from worktree import paths
from worktree.state import WorktreeError


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_user_config_file(home):
    assert paths.user_config_dir() == home / ".config" / "worktree"
    assert paths.user_config_file() == home / ".config" / "worktree" / "config.json"


def test_global_locations(home):
    assert paths.global_dir() == home / ".worktree"
    assert paths.global_worktrees_dir() == home / ".worktree" / "worktrees"
    assert paths.allocations_file() == home / ".worktree" / "port-allocations.json"


def test_project_paths(tmp_path):
    assert paths.project_config_dir_in(tmp_path) == tmp_path / ".worktree"
    assert paths.settings_file_in(tmp_path) == tmp_path / ".worktree" / "settings.json"
    assert (
        paths.local_settings_file_in(str(tmp_path))
        == tmp_path / ".worktree" / "settings.local.json"
    )


def test_ensure_dirs_create_directories(home):
    paths.ensure_user_config_dir()
    paths.ensure_global_dir()
    assert paths.user_config_dir().is_dir()
    assert paths.global_dir().is_dir()
    # Calling again must not fail on existing directories.
    paths.ensure_global_dir()
    assert paths.global_dir().is_dir()


def test_missing_home_raises():
    with patch.object(Path, "home", side_effect=RuntimeError("no home")):
        with pytest.raises(WorktreeError, match="Could not determine home directory"):
            paths.global_dir()