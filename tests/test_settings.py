import io
import json
from pathlib import Path

import pytest

from worktree import paths
from worktree.settings import (
    LocalSettings,
    MergedSettings,
    Settings,
    UserSettings,
    save_local_settings,
    save_settings,
)
from worktree.state import WorktreeError


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    monkeypatch.delenv("TERM_PROGRAM", raising=False)
    return home_dir


def test_settings_default_values():
    settings = Settings()
    assert settings.port_count == 10
    assert settings.port_range_start == 50000
    assert settings.port_range_end == 60000
    assert settings.branch_prefix == "worktree/"
    assert settings.auto_launch_terminal is None


def test_settings_json_parsing():
    text = """{
        "portCount": 5,
        "portRangeStart": 40000,
        "portRangeEnd": 45000,
        "branchPrefix": "feature/",
        "autoLaunchTerminal": false
    }"""
    settings = Settings.from_dict(json.loads(text))
    assert settings.port_count == 5
    assert settings.port_range_start == 40000
    assert settings.port_range_end == 45000
    assert settings.branch_prefix == "feature/"
    assert settings.auto_launch_terminal is False


def test_settings_partial_json_uses_defaults():
    settings = Settings.from_dict(json.loads('{"portCount": 20}'))
    assert settings.port_count == 20
    assert settings.port_range_start == 50000
    assert settings.port_range_end == 60000
    assert settings.branch_prefix == "worktree/"
    assert settings.auto_launch_terminal is None


def test_local_settings_json_parsing():
    settings = LocalSettings.from_dict(json.loads('{"worktreeDir": "/custom/path"}'))
    assert settings.worktree_dir == Path("/custom/path")


def test_local_settings_empty_json():
    assert LocalSettings.from_dict({}).worktree_dir is None


def test_user_settings_json_parsing():
    settings = UserSettings.from_dict(
        json.loads('{"autoLaunchTerminal": true, "terminal": "iterm2"}')
    )
    assert settings.auto_launch_terminal is True
    assert settings.terminal == "iterm2"


def test_user_settings_empty_json():
    settings = UserSettings.from_dict({})
    assert settings.auto_launch_terminal is None
    assert settings.terminal is None


def test_settings_to_dict_omits_unset_options():
    data = Settings().to_dict()
    assert "autoLaunchTerminal" not in data
    assert "terminal" not in data
    assert Settings.from_dict(data) == Settings()


@pytest.mark.parametrize(
    "data",
    [{"portCount": "x"}, {"portRangeEnd": 70000}, {"branchPrefix": 3}, {"portCount": None}],
)
def test_settings_rejects_invalid_values(data):
    with pytest.raises(WorktreeError):
        Settings.from_dict(data)


def test_settings_rejects_non_object():
    with pytest.raises(WorktreeError):
        Settings.from_dict([1, 2])


def test_save_and_load_user_settings(home):
    assert UserSettings.load() is None
    assert not UserSettings.exists()
    UserSettings(auto_launch_terminal=False, terminal="tmux").save()
    assert UserSettings.exists()
    assert UserSettings.load() == UserSettings(auto_launch_terminal=False, terminal="tmux")


def test_save_settings_round_trip(tmp_path):
    (tmp_path / ".worktree").mkdir()
    original = Settings(port_count=3, branch_prefix="feat/", terminal="kitty")
    save_settings(original, tmp_path)
    loaded = Settings.from_dict(json.loads(paths.settings_file_in(tmp_path).read_text()))
    assert loaded == original


def test_save_local_settings_round_trip(tmp_path):
    (tmp_path / ".worktree").mkdir()
    original = LocalSettings(worktree_dir=tmp_path / "trees")
    save_local_settings(original, tmp_path)
    text = paths.local_settings_file_in(tmp_path).read_text()
    assert LocalSettings.from_dict(json.loads(text)) == original


def test_merged_project_overrides_user(home, tmp_path):
    UserSettings(auto_launch_terminal=True, terminal="iterm2").save()
    project = tmp_path / "project"
    (project / ".worktree").mkdir(parents=True)
    save_settings(Settings(port_count=4, auto_launch_terminal=False, terminal="tmux"), project)
    merged = MergedSettings.load_from(project)
    assert merged.port_count == 4
    assert merged.auto_launch_terminal is False
    assert merged.terminal == "tmux"
    assert merged.worktree_dir is None


def test_merged_falls_back_to_user_then_default(home, tmp_path):
    UserSettings(terminal="warp").save()
    project = tmp_path / "project"
    project.mkdir()
    merged = MergedSettings.load_from(project)
    assert merged.terminal == "warp"
    assert merged.auto_launch_terminal is True
    assert merged.port_range_start == 50000


def test_merged_uses_local_worktree_dir(home, tmp_path):
    UserSettings(auto_launch_terminal=False).save()
    project = tmp_path / "project"
    (project / ".worktree").mkdir(parents=True)
    save_local_settings(LocalSettings(worktree_dir=tmp_path / "custom"), project)
    merged = MergedSettings.load_from(project)
    assert merged.get_worktree_base_dir("proj") == tmp_path / "custom"


def test_merged_rejects_broken_settings_file(home, tmp_path):
    UserSettings().save()
    project = tmp_path / "project"
    (project / ".worktree").mkdir(parents=True)
    paths.settings_file_in(project).write_text("{not json")
    with pytest.raises(WorktreeError):
        MergedSettings.load_from(project)


def test_default_worktree_base_dir(home):
    merged = MergedSettings()
    assert merged.get_worktree_base_dir("proj") == home / ".worktree" / "worktrees" / "proj"


def test_setup_interactive_declines_auto_launch(home, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n1\n"))
    settings = UserSettings.setup_interactive()
    assert settings == UserSettings(auto_launch_terminal=False, terminal=None)
    assert UserSettings.load() == settings


def test_setup_interactive_accepts_typed_terminal(home, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("\ntmux\n"))
    settings = UserSettings.setup_interactive()
    assert settings.auto_launch_terminal is True
    assert settings.terminal == "tmux"


def test_setup_interactive_ignores_unknown_terminal(home, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("yes\nnonsense-term\n"))
    settings = UserSettings.setup_interactive()
    assert settings.terminal is None


def test_ensure_configured_runs_setup_once(home, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n\n"))
    UserSettings.ensure_configured()
    assert UserSettings.exists()
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    UserSettings.ensure_configured()
    assert UserSettings.load_or_setup().auto_launch_terminal is False