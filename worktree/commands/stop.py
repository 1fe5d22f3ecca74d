"""The ``stop`` command: run the current worktree's stop script."""

from __future__ import annotations

import click

from worktree.runner import build_env_vars, execute_script
from worktree.state import WorktreeError, detect_worktree


def execute() -> None:
    """Run ``.worktree/stop.sh`` of the worktree containing the current directory."""
    state = detect_worktree()
    if state is None:
        raise WorktreeError(
            "Not in a worktree. Run this command from within a worktree directory."
        )

    click.echo(
        f"{click.style('Stopping:', bold=True)} "
        f"{click.style(state.project_name, fg='blue')}/{click.style(state.name, fg='green')}"
    )

    stop_script = state.worktree_dir / ".worktree" / "stop.sh"
    if not stop_script.exists():
        raise WorktreeError(
            f"Stop script not found at {stop_script}\n"
            "Create a stop.sh script to stop your services."
        )

    env = build_env_vars(state)
    click.echo()
    execute_script(stop_script, env)

    click.echo()
    click.echo(click.style("Services stopped.", fg="green"))