"""The ``status`` command: show details of one worktree."""

from __future__ import annotations

import click

from worktree import paths
from worktree.state import WorktreeError, WorktreeState, detect_worktree

_STATE_PATTERNS = ("state.json", "*/state.json", "*/*/state.json")


def _try_load(path) -> WorktreeState | None:
    try:
        return WorktreeState.load(path)
    except WorktreeError:
        return None


def _find_all_worktrees() -> list[WorktreeState]:
    base = paths.global_worktrees_dir()
    if not base.exists():
        return []
    candidates = (path for pattern in _STATE_PATTERNS for path in sorted(base.glob(pattern)))
    return [state for state in map(_try_load, candidates) if state is not None]


def _resolve_worktree(name: str | None) -> WorktreeState | None:
    if name is None:
        return detect_worktree()
    matches = [wt for wt in _find_all_worktrees() if wt.matches_identifier(name)]
    if not matches:
        raise WorktreeError(f"No worktree found with name '{name}'")
    if len(matches) > 1:
        raise WorktreeError(f"Multiple worktrees match '{name}'. Please be more specific.")
    return matches[0]


def format_status(state: WorktreeState) -> str:
    """Render the status report for ``state``."""
    bold = lambda text: click.style(text, bold=True)  # noqa: E731
    dim = lambda text: click.style(text, dim=True)  # noqa: E731

    if state.has_custom_name():
        header = (
            f"{bold('Worktree:')} {click.style(state.effective_name(), fg='green')}"
            f" ({dim(state.name)})"
        )
    else:
        header = f"{bold('Worktree:')} {click.style(state.name, fg='green')}"

    ports = ", ".join(map(str, state.ports)) if state.ports else dim("none")
    created = state.created_at.strftime("%Y-%m-%d %H:%M:%S")

    return "\n".join(
        [
            header,
            f"{bold('Branch:  ')} {click.style(state.branch, fg='cyan')}",
            f"{bold('Project: ')} {click.style(state.project_name, fg='blue')}",
            "",
            bold("Directories:"),
            f"  {dim('Original:')} {state.original_dir}",
            f"  {dim('Worktree:')} {state.worktree_dir}",
            "",
            f"{bold('Ports:')} {ports}",
            "",
            f"{bold('Created:')} {created}",
        ]
    )


def execute(name: str | None = None) -> None:
    """Print the status of the named worktree, or of the current one."""
    state = _resolve_worktree(name)
    if state is None:
        click.echo(click.style("Error: Not in a worktree directory", fg="red"), err=True)
        raise SystemExit(1)
    click.echo(format_status(state))