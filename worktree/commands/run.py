"""The ``run`` command: start the current worktree's run script."""

from __future__ import annotations

import click

from worktree.runner import build_env_vars, execute_script
from worktree.state import WorktreeError, detect_worktree


def execute() -> None:
    """Run ``.worktree/run.sh`` of the worktree containing the current directory."""
    state = detect_worktree()
    if state is None:
        raise WorktreeError(
            "Not in a worktree. Run this command from within a worktree directory."
        )

    click.echo(
        f"{click.style('Running:', bold=True)} "
        f"{click.style(state.project_name, fg='blue')}/{click.style(state.name, fg='green')}"
    )

    run_script = state.worktree_dir / ".worktree" / "run.sh"
    if not run_script.exists():
        raise WorktreeError(
            f"Run script not found at {run_script}\n"
            "Create a run.sh script to start your development environment."
        )

    env = build_env_vars(state)
    first, last = (state.ports[0], state.ports[-1]) if state.ports else (0, 0)
    click.echo(f"  Ports: {first}-{last}")
    click.echo()

    execute_script(run_script, env)