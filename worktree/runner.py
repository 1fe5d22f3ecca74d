"""Running the project's lifecycle scripts."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Mapping

from worktree.state import WorktreeError, WorktreeState


class ScriptError(WorktreeError):
    """Raised when a lifecycle script cannot be run or fails."""


def build_env_vars(state: WorktreeState) -> dict[str, str]:
    """Environment variables handed to lifecycle scripts."""
    env = {
        "WORKTREE_NAME": state.name,
        "WORKTREE_DISPLAY_NAME": state.effective_name(),
        "WORKTREE_PROJECT": state.project_name,
        "WORKTREE_DIR": str(state.worktree_dir),
        "WORKTREE_ORIGINAL_DIR": str(state.original_dir),
        "WORKTREE_ALLOCATION_KEY": state.allocation_key,
    }
    if state.param is not None:
        env["WORKTREE_PARAM"] = state.param
    env.update({f"WORKTREE_PORT_{i}": str(port) for i, port in enumerate(state.ports)})
    return env


def _run(script: Path, env: Mapping[str, str]) -> subprocess.CompletedProcess:
    # Scripts live in <worktree>/.worktree/, so they run from the worktree root.
    return subprocess.run(
        ["bash", str(script)],
        env={**os.environ, **env},
        cwd=script.parent.parent,
    )


def execute_script(script: str | Path, env: Mapping[str, str]) -> None:
    """Run ``script`` with bash, raising ScriptError if it cannot run or fails."""
    script = Path(script)
    if not script.exists():
        raise ScriptError(f"Script not found: {script}")

    if os.name == "posix" and script.stat().st_mode & 0o111 == 0:
        raise ScriptError(f"Script is not executable: {script}\nRun: chmod +x {script}")

    try:
        result = _run(script, env)
    except OSError as exc:
        raise ScriptError(f"Failed to execute {script}") from exc

    if result.returncode != 0:
        code = result.returncode if result.returncode > 0 else -1
        raise ScriptError(f"Script exited with status: {code}")


def execute_script_ignore_errors(script: str | Path, env: Mapping[str, str]) -> bool:
    """Run ``script`` and report success, never raising."""
    script = Path(script)
    if not script.exists():
        return False
    try:
        return _run(script, env).returncode == 0
    except OSError:
        return False