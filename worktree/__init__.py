"""Worktree state, settings, git helpers, lifecycle scripts and terminal launching."""

__version__ = "0.1.0"