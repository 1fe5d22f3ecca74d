"""The ``rename`` command: set or clear a worktree's display name."""

from __future__ import annotations

import sys

import click

from worktree.registry import find_all_worktrees, resolve_worktree
from worktree.state import WorktreeError, WorktreeState
from worktree.terminal import rename_tmux_session, tmux_session_exists, tmux_session_name

MAX_NAME_LENGTH = 64


def validate_name(name: str) -> None:
    """Reject names holding path separators or longer than 64 bytes."""
    if "/" in name or "\\" in name:
        raise WorktreeError("Name cannot contain path separators (/ or \\)")
    if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise WorktreeError(f"Name is too long (max {MAX_NAME_LENGTH} characters)")


def check_name_conflicts(new_name: str, current: WorktreeState) -> None:
    """Raise if another worktree already uses ``new_name``."""
    for wt in find_all_worktrees():
        if wt.worktree_dir == current.worktree_dir:
            continue
        if wt.name == new_name or wt.display_name == new_name:
            raise WorktreeError(
                f"Name '{new_name}' conflicts with existing worktree "
                f"'{wt.effective_name()}' in project '{wt.project_name}'"
            )


def _styled_name(state: WorktreeState) -> str:
    if state.has_custom_name():
        return (
            f"{click.style(state.effective_name(), fg='green')} - "
            f"{click.style(state.name, dim=True)}"
        )
    return click.style(state.name, fg="green")


def _prompt_for_name(state: WorktreeState) -> str:
    click.echo(
        f"\n{click.style('Renaming:', bold=True)} "
        f"{click.style(state.project_name, fg='blue')}/{_styled_name(state)}"
    )
    click.echo(
        "\n" + click.style("Enter new name (empty to clear):", bold=True) + " ", nl=False
    )
    sys.stdout.flush()
    return sys.stdin.readline().strip()


def _rename_tmux_session(
    project_name: str, old_effective_name: str, new_effective_name: str, directory_name: str
) -> None:
    """Rename the session of the old effective name, else of the directory name."""
    new_session = tmux_session_name(project_name, new_effective_name)
    candidates = [tmux_session_name(project_name, old_effective_name)]
    if old_effective_name != directory_name:
        candidates.append(tmux_session_name(project_name, directory_name))

    for old_session in candidates:
        if not tmux_session_exists(old_session):
            continue
        try:
            renamed = rename_tmux_session(old_session, new_session)
        except WorktreeError as exc:
            click.echo(f"  {click.style('⚠', fg='yellow')} Failed to rename tmux session: {exc}")
            return
        if renamed:
            click.echo(
                f"  {click.style('✓', fg='green')} Renamed tmux session to '{new_session}'"
            )
        return


def _clear_display_name(state: WorktreeState) -> None:
    if state.display_name is None:
        click.echo(
            f"{click.style('ℹ', fg='blue')} Worktree "
            f"'{click.style(state.name, fg='green')}' has no custom name to clear."
        )
        return

    old_name = state.effective_name()
    state.display_name = None
    state.save()

    click.echo(
        f"{click.style('✓', fg='green')} Cleared custom name "
        f"'{click.style(old_name, fg='yellow')}', reverted to "
        f"'{click.style(state.name, fg='green')}'"
    )
    _rename_tmux_session(state.project_name, old_name, state.name, state.name)


def execute(
    new_name: str | None = None, worktree: str | None = None, clear: bool = False
) -> None:
    """Give a worktree a new display name, or clear it."""
    state = resolve_worktree(worktree, False, "rename")

    if clear:
        _clear_display_name(state)
        return

    if new_name is None:
        new_name = _prompt_for_name(state)
    if not new_name:
        _clear_display_name(state)
        return

    validate_name(new_name)
    check_name_conflicts(new_name, state)

    old_name = state.effective_name()
    state.display_name = new_name
    state.save()

    click.echo(
        f"{click.style('✓', fg='green')} Renamed worktree from "
        f"'{click.style(old_name, fg='yellow')}' to '{click.style(new_name, fg='green')}'"
    )
    click.echo(f"  {click.style('Directory:', dim=True)} {click.style(state.name, dim=True)}")

    _rename_tmux_session(state.project_name, old_name, new_name, state.name)