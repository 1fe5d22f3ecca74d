import io
import sys

import pytest

from worktree.commands import rename
from worktree.state import WorktreeError, WorktreeState


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.chdir(work)
    return home_dir


def make_worktree(home_dir, project, name, display_name=None):
    directory = home_dir / ".worktree" / "worktrees" / project / name
    directory.mkdir(parents=True)
    original = home_dir / "repos" / project
    original.mkdir(parents=True, exist_ok=True)
    state = WorktreeState.create(
        name,
        project,
        directory,
        original_dir=original,
        branch=f"worktree/{name}",
        ports=[50000, 50001],
        display_name=display_name,
    )
    state.save()
    return state


def reload(state):
    return WorktreeState.load(state.worktree_dir / "state.json")


@pytest.mark.parametrize("bad", ["a/b", "a\\b", "x" * 65])
def test_validate_name_rejects(bad):
    with pytest.raises(WorktreeError):
        rename.validate_name(bad)


def test_validate_name_separator_message():
    with pytest.raises(WorktreeError, match="path separators"):
        rename.validate_name("feature/login")


def test_rename_current_worktree(home, monkeypatch, capsys):
    state = make_worktree(home, "renproj", "swift-falcon")
    monkeypatch.chdir(state.worktree_dir)

    rename.execute("login-page")

    assert reload(state).display_name == "login-page"
    out = capsys.readouterr().out
    assert "Renamed worktree from 'swift-falcon' to 'login-page'" in out


def test_rename_accepts_max_length(home, monkeypatch):
    state = make_worktree(home, "renproj", "brave-lion")
    monkeypatch.chdir(state.worktree_dir)
    long_name = "n" * rename.MAX_NAME_LENGTH

    rename.execute(long_name)

    assert reload(state).display_name == long_name


def test_rename_by_identifier(home):
    state = make_worktree(home, "renproj", "calm-deer")
    other = make_worktree(home, "renproj", "epic-wolf")

    rename.execute("api-work", "calm-deer")

    assert reload(state).display_name == "api-work"
    assert reload(other).display_name is None


def test_rename_prompts_for_name(home, monkeypatch):
    state = make_worktree(home, "renproj", "vivid-moon")
    monkeypatch.chdir(state.worktree_dir)
    monkeypatch.setattr(sys, "stdin", io.StringIO("from-prompt\n"))

    rename.execute()

    assert reload(state).display_name == "from-prompt"


def test_empty_prompt_clears(home, monkeypatch):
    state = make_worktree(home, "renproj", "warm-rain", display_name="old")
    monkeypatch.chdir(state.worktree_dir)
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n"))

    rename.execute()

    assert reload(state).display_name is None


def test_clear_flag(home, monkeypatch, capsys):
    state = make_worktree(home, "renproj", "olive-oak", display_name="custom")
    monkeypatch.chdir(state.worktree_dir)

    rename.execute(clear=True)

    assert reload(state).display_name is None
    assert "Cleared custom name 'custom', reverted to 'olive-oak'" in capsys.readouterr().out


def test_clear_without_custom_name(home, monkeypatch, capsys):
    state = make_worktree(home, "renproj", "jolly-mist")
    monkeypatch.chdir(state.worktree_dir)

    rename.execute(clear=True)

    assert "has no custom name to clear" in capsys.readouterr().out
    assert reload(state).display_name is None


def test_conflict_with_other_directory_name(home):
    first = make_worktree(home, "renproj", "sharp-hawk")
    make_worktree(home, "renproj", "grand-elm")

    with pytest.raises(WorktreeError, match="conflicts with existing worktree 'grand-elm'"):
        rename.check_name_conflicts("grand-elm", first)


def test_conflict_with_other_display_name(home):
    first = make_worktree(home, "renproj", "ultra-nova")
    make_worktree(home, "renproj", "royal-swan", display_name="taken")

    with pytest.raises(WorktreeError, match="conflicts"):
        rename.execute("taken", "ultra-nova")
    assert reload(first).display_name is None


def test_own_name_is_not_a_conflict(home):
    state = make_worktree(home, "renproj", "prime-star")

    rename.execute("prime-star", "prime-star")

    assert reload(state).display_name == "prime-star"


def test_invalid_name_is_not_saved(home):
    state = make_worktree(home, "renproj", "deft-koala")

    with pytest.raises(WorktreeError):
        rename.execute("bad/name", "deft-koala")
    assert reload(state).display_name is None


def test_rename_unknown_worktree(home):
    with pytest.raises(WorktreeError, match="No worktree found with name 'ghost'"):
        rename.execute("anything", "ghost")