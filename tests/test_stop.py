import pytest

from worktree.commands import stop
from worktree.runner import ScriptError
from worktree.state import WorktreeError, WorktreeState


@pytest.fixture
def worktree_dir(tmp_path, monkeypatch):
    directory = tmp_path / "proj-wt"
    directory.mkdir()
    WorktreeState.create("swift-falcon", "proj", directory, ports=[50000, 50001]).save()
    monkeypatch.chdir(directory)
    return directory


def _write_stop_script(directory, body):
    config = directory / ".worktree"
    config.mkdir()
    script = config / "stop.sh"
    script.write_text("#!/bin/bash\n" + body)
    script.chmod(0o755)
    return script


def test_outside_worktree_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(WorktreeError, match="Not in a worktree"):
        stop.execute()


def test_missing_stop_script_raises(worktree_dir):
    with pytest.raises(WorktreeError, match="Stop script not found"):
        stop.execute()


def test_runs_stop_script_with_environment(worktree_dir, capsys):
    _write_stop_script(worktree_dir, 'echo "$WORKTREE_NAME $WORKTREE_PORT_1" > marker.txt\n')
    stop.execute()
    assert (worktree_dir / "marker.txt").read_text().strip() == "swift-falcon 50001"
    out = capsys.readouterr().out
    assert "Services stopped." in out
    assert "proj" in out


def test_failing_stop_script_raises(worktree_dir):
    _write_stop_script(worktree_dir, "exit 3\n")
    with pytest.raises(ScriptError, match="Script exited with status: 3"):
        stop.execute()