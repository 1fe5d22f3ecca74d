"""Detecting and launching terminal emulators and tmux sessions."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from enum import Enum
from pathlib import Path

from worktree.state import WorktreeError


class TerminalError(WorktreeError):
    """Raised when a terminal or tmux session cannot be launched or managed."""


def shell_escape(text: str) -> str:
    """Single-quote ``text`` for safe use in a shell command."""
    return "'" + text.replace("'", "'\\''") + "'"


class Terminal(Enum):
    """Supported terminal emulators."""

    TMUX = "tmux"
    APPLE_TERMINAL = "terminal"
    ITERM2 = "iterm2"
    WARP = "warp"
    GHOSTTY = "ghostty"
    VSCODE = "vscode"
    GNOME_TERMINAL = "gnome-terminal"
    KONSOLE = "konsole"
    XFCE4_TERMINAL = "xfce4-terminal"
    KITTY = "kitty"
    ALACRITTY = "alacritty"

    def label(self) -> str:
        """Human-readable name of the terminal."""
        return _LABELS[self]

    @classmethod
    def parse(cls, text: str) -> "Terminal | None":
        """Parse a terminal name, case-insensitively; None if unknown."""
        return _ALIASES.get(text.lower())


_LABELS = {
    Terminal.TMUX: "tmux",
    Terminal.APPLE_TERMINAL: "Terminal.app",
    Terminal.ITERM2: "iTerm2",
    Terminal.WARP: "Warp",
    Terminal.GHOSTTY: "Ghostty",
    Terminal.VSCODE: "VS Code",
    Terminal.GNOME_TERMINAL: "GNOME Terminal",
    Terminal.KONSOLE: "Konsole",
    Terminal.XFCE4_TERMINAL: "Xfce Terminal",
    Terminal.KITTY: "Kitty",
    Terminal.ALACRITTY: "Alacritty",
}

_ALIASES = {
    "tmux": Terminal.TMUX,
    "terminal": Terminal.APPLE_TERMINAL,
    "terminal.app": Terminal.APPLE_TERMINAL,
    "apple_terminal": Terminal.APPLE_TERMINAL,
    "iterm": Terminal.ITERM2,
    "iterm2": Terminal.ITERM2,
    "warp": Terminal.WARP,
    "ghostty": Terminal.GHOSTTY,
    "vscode": Terminal.VSCODE,
    "code": Terminal.VSCODE,
    "gnome-terminal": Terminal.GNOME_TERMINAL,
    "gnome": Terminal.GNOME_TERMINAL,
    "konsole": Terminal.KONSOLE,
    "xfce4-terminal": Terminal.XFCE4_TERMINAL,
    "xfce": Terminal.XFCE4_TERMINAL,
    "kitty": Terminal.KITTY,
    "alacritty": Terminal.ALACRITTY,
}

_TERM_PROGRAMS = {
    "Apple_Terminal": Terminal.APPLE_TERMINAL,
    "iTerm.app": Terminal.ITERM2,
    "WarpTerminal": Terminal.WARP,
    "ghostty": Terminal.GHOSTTY,
    "vscode": Terminal.VSCODE,
    "tmux": Terminal.TMUX,
}

_LINUX_CANDIDATES = (
    ("gnome-terminal", Terminal.GNOME_TERMINAL),
    ("konsole", Terminal.KONSOLE),
    ("xfce4-terminal", Terminal.XFCE4_TERMINAL),
    ("kitty", Terminal.KITTY),
    ("alacritty", Terminal.ALACRITTY),
)

_MAC_APPS = (
    ("/Applications/iTerm.app", Terminal.ITERM2),
    ("/Applications/Warp.app", Terminal.WARP),
    ("/Applications/Ghostty.app", Terminal.GHOSTTY),
)


def detect_terminal() -> Terminal | None:
    """Guess the terminal in use from the environment and installed programs."""
    found = _TERM_PROGRAMS.get(os.environ.get("TERM_PROGRAM", ""))
    if found is not None:
        return found

    if sys.platform.startswith("linux"):
        return next(
            (term for program, term in _LINUX_CANDIDATES if shutil.which(program)), None
        )

    if sys.platform == "darwin":
        found = next((term for app, term in _MAC_APPS if Path(app).exists()), None)
        return found or Terminal.APPLE_TERMINAL

    return None


def _osascript(script: str, label: str) -> None:
    try:
        subprocess.run(["osascript", "-e", script], capture_output=True)
    except OSError as exc:
        raise TerminalError(f"Failed to launch {label}") from exc


def _spawn(args: list[str], label: str) -> None:
    try:
        subprocess.Popen(args)
    except OSError as exc:
        raise TerminalError(f"Failed to launch {label}") from exc


def _do_script(app: str, directory: str) -> str:
    return (
        f'tell application "{app}"\n'
        f'            do script "cd {shell_escape(directory)}"\n'
        "            activate\n"
        "        end tell"
    )


def _iterm_script(directory: str) -> str:
    return (
        'tell application "iTerm"\n'
        "            create window with default profile\n"
        "            tell current session of current window\n"
        f'                write text "cd {shell_escape(directory)}"\n'
        "            end tell\n"
        "            activate\n"
        "        end tell"
    )


def launch(terminal: Terminal, directory: str | Path) -> None:
    """Open ``terminal`` in ``directory``. Use launch_tmux_session for tmux."""
    path = str(directory)
    label = terminal.label()

    if terminal is Terminal.TMUX:
        raise TerminalError(
            "Use launch_tmux_session for tmux, which requires project and worktree names"
        )
    if terminal is Terminal.APPLE_TERMINAL:
        _osascript(_do_script("Terminal", path), label)
    elif terminal is Terminal.ITERM2:
        _osascript(_iterm_script(path), label)
    elif terminal is Terminal.WARP:
        _osascript(_do_script("Warp", path), label)
    elif terminal is Terminal.GHOSTTY:
        _spawn(["ghostty", "-e", f"cd {shell_escape(path)} && $SHELL"], label)
    elif terminal is Terminal.VSCODE:
        _spawn(["code", path], label)
    elif terminal is Terminal.GNOME_TERMINAL:
        _spawn(["gnome-terminal", "--tab", "--working-directory", path], label)
    elif terminal is Terminal.KONSOLE:
        _spawn(["konsole", "--new-tab", "--workdir", path], label)
    elif terminal is Terminal.XFCE4_TERMINAL:
        _spawn(["xfce4-terminal", "--tab", "--working-directory", path], label)
    elif terminal is Terminal.KITTY:
        _spawn(["kitty", "--directory", path], label)
    elif terminal is Terminal.ALACRITTY:
        _spawn(["alacritty", "--working-directory", path], label)


def tmux_session_name(project_name: str, worktree_name: str) -> str:
    """The tmux session name used for a worktree."""
    return f"{project_name}-{worktree_name}"


def tmux_session_exists(session_name: str) -> bool:
    try:
        result = subprocess.run(
            ["tmux", "has-session", "-t", session_name], capture_output=True
        )
    except OSError:
        return False
    return result.returncode == 0


def launch_tmux_session(project_name: str, worktree_name: str, directory: str | Path) -> None:
    """Create the worktree's tmux session if needed, then switch or attach to it."""
    session = tmux_session_name(project_name, worktree_name)

    if not tmux_session_exists(session):
        try:
            subprocess.run(
                ["tmux", "new-session", "-d", "-s", session, "-c", str(directory)],
                capture_output=True,
            )
        except OSError as exc:
            raise TerminalError("Failed to create tmux session") from exc

    if "TMUX" in os.environ:
        args, failure = ["tmux", "switch-client", "-t", session], "switch to"
    else:
        args, failure = ["tmux", "attach-session", "-t", session], "attach to"
    try:
        subprocess.run(args)
    except OSError as exc:
        raise TerminalError(f"Failed to {failure} tmux session") from exc


def kill_tmux_session(project_name: str, worktree_name: str) -> bool:
    """Kill the worktree's tmux session; False if there was none."""
    session = tmux_session_name(project_name, worktree_name)
    if not tmux_session_exists(session):
        return False
    try:
        result = subprocess.run(["tmux", "kill-session", "-t", session], capture_output=True)
    except OSError as exc:
        raise TerminalError("Failed to kill tmux session") from exc
    return result.returncode == 0


def rename_tmux_session(old_name: str, new_name: str) -> bool:
    """Rename a tmux session; False if the old session does not exist."""
    if not tmux_session_exists(old_name):
        return False
    if tmux_session_exists(new_name):
        raise TerminalError(
            f"Cannot rename tmux session: session '{new_name}' already exists"
        )
    try:
        result = subprocess.run(
            ["tmux", "rename-session", "-t", old_name, new_name], capture_output=True
        )
    except OSError as exc:
        raise TerminalError("Failed to rename tmux session") from exc
    return result.returncode == 0


def get_manual_command(directory: str | Path) -> str:
    """Shell command that opens a shell in ``directory``."""
    return f"cd {shell_escape(str(directory))} && $SHELL"