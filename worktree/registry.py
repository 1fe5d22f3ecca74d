"""Finding, choosing and resolving the worktrees recorded in the global directory."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from worktree import git, paths
from worktree.state import STATE_FILE, WorktreeError, WorktreeState, detect_worktree

_STATE_PATTERNS = (STATE_FILE, f"*/{STATE_FILE}", f"*/*/{STATE_FILE}")


def _try_load(path: Path) -> WorktreeState | None:
    try:
        return WorktreeState.load(path)
    except WorktreeError:
        return None


def _styled_name(state: WorktreeState) -> str:
    if state.has_custom_name():
        return (
            f"{click.style(state.effective_name(), fg='green')} - "
            f"{click.style(state.name, dim=True)}"
        )
    return click.style(state.name, fg="green")


def _read_line(prompt: str) -> str:
    click.echo(prompt, nl=False)
    sys.stdout.flush()
    return sys.stdin.readline().strip()


def find_all_worktrees() -> list[WorktreeState]:
    """Every readable worktree state, newest first."""
    base = paths.global_worktrees_dir()
    if not base.exists():
        return []
    candidates = (path for pattern in _STATE_PATTERNS for path in sorted(base.glob(pattern)))
    states = [state for state in map(_try_load, candidates) if state is not None]
    return sorted(states, key=lambda state: state.created_at, reverse=True)


def get_current_project() -> str | None:
    """The project of the current worktree or git repository, if any."""
    try:
        state = detect_worktree()
    except (WorktreeError, OSError):
        state = None
    if state is not None:
        return state.project_name

    if git.is_git_repo():
        try:
            return git.get_main_project_name()
        except WorktreeError:
            return None
    return None


def find_worktrees_for_current_project() -> list[WorktreeState]:
    """Worktrees of the current project, or all of them outside a project."""
    worktrees = find_all_worktrees()
    project = get_current_project()
    if project is None:
        return worktrees
    return [wt for wt in worktrees if wt.project_name == project]


def select_worktree(worktrees: list[WorktreeState], action: str = "select") -> WorktreeState:
    """Let the user pick one of ``worktrees`` by number."""
    click.echo()
    click.echo(click.style(f"Select worktree to {action}:", bold=True))

    for number, wt in enumerate(worktrees, start=1):
        port_range = f"{wt.ports[0]}-{wt.ports[-1]}" if wt.ports else "no ports"
        click.echo(
            f"  {click.style(str(number), fg='cyan')}) "
            f"{click.style(wt.project_name, fg='blue')}/{_styled_name(wt)} "
            f"{click.style(f'(ports {port_range})', dim=True)} "
            f"{click.style(f'[{wt.branch}]', dim=True)}"
        )

    click.echo()
    choice = _read_line(click.style("Enter number:", bold=True) + " ")
    if not choice:
        raise WorktreeError("No selection made.")
    if not (choice.isascii() and choice.isdigit()):
        raise WorktreeError(f"Invalid number: {choice}")

    index = int(choice)
    if index == 0 or index > len(worktrees):
        raise WorktreeError(f"Invalid selection: {index}. Choose 1-{len(worktrees)}")
    return worktrees[index - 1]


def _pick_match(matches: list[WorktreeState], action: str) -> WorktreeState:
    if len(matches) == 1:
        return matches[0]
    click.echo(click.style("Multiple worktrees match that name:", fg="yellow"))
    return select_worktree(matches, action)


def resolve_worktree(
    name: str | None = None, interactive: bool = False, action: str = "select"
) -> WorktreeState:
    """Choose a worktree by name, from the current directory, or by asking."""
    if interactive:
        worktrees = find_worktrees_for_current_project()
        if not worktrees:
            raise WorktreeError("No worktrees found for this project.")
        return select_worktree(worktrees, action)

    if name is not None:
        matches = [wt for wt in find_worktrees_for_current_project() if wt.matches_identifier(name)]
        if matches:
            return _pick_match(matches, action)

        matches = [wt for wt in find_all_worktrees() if wt.matches_identifier(name)]
        if not matches:
            raise WorktreeError(f"No worktree found with name '{name}'")
        return _pick_match(matches, action)

    state = detect_worktree()
    if state is not None:
        return state

    worktrees = find_worktrees_for_current_project()
    if not worktrees:
        raise WorktreeError("No worktrees found for this project.")
    return select_worktree(worktrees, action)