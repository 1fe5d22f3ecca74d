"""The ``open`` command: open an existing worktree in a terminal."""

from __future__ import annotations

import click

from worktree.registry import resolve_worktree
from worktree.settings import MergedSettings
from worktree.state import WorktreeError, WorktreeState
from worktree.terminal import (
    Terminal,
    detect_terminal,
    get_manual_command,
    launch,
    launch_tmux_session,
)


def _styled_name(state: WorktreeState) -> str:
    if state.has_custom_name():
        return (
            f"{click.style(state.effective_name(), fg='green')} - "
            f"{click.style(state.name, dim=True)}"
        )
    return click.style(state.name, fg="green")


def _load_settings(state: WorktreeState) -> MergedSettings:
    try:
        return MergedSettings.load_from(state.original_dir)
    except WorktreeError:
        return MergedSettings()


def execute(name: str | None = None, interactive: bool = False) -> None:
    """Open the chosen worktree in the configured or detected terminal."""
    state = resolve_worktree(name, interactive, "open")

    click.echo(
        f"{click.style('Opening:', bold=True)} "
        f"{click.style(state.project_name, fg='blue')}/{_styled_name(state)}"
    )
    click.echo(f"  {click.style('Path:', dim=True)} {state.worktree_dir}")

    settings = _load_settings(state)
    configured = Terminal.parse(settings.terminal) if settings.terminal is not None else None
    term = configured or detect_terminal()
    manual = click.style(get_manual_command(state.worktree_dir), dim=True)

    if term is None:
        click.echo(f"\n  No terminal detected. Run manually:\n  {manual}")
        return

    click.echo()
    click.echo(f"  Launching {term.label()}...")
    try:
        if term is Terminal.TMUX:
            launch_tmux_session(state.project_name, state.name, state.worktree_dir)
        else:
            launch(term, state.worktree_dir)
    except WorktreeError as exc:
        click.echo(f"  {click.style('⚠', fg='yellow')} Failed to launch terminal: {exc}")
        click.echo(f"  Run manually: {manual}")