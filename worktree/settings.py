"""User, project and local settings, and how they merge at runtime."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import click

from worktree import paths
from worktree.state import WorktreeError
from worktree.terminal import Terminal, detect_terminal

DEFAULT_PORT_COUNT = 10
DEFAULT_PORT_RANGE_START = 50000
DEFAULT_PORT_RANGE_END = 60000
DEFAULT_BRANCH_PREFIX = "worktree/"

_T = TypeVar("_T")


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise WorktreeError(f"{what} must be a JSON object")
    return data


def _u16(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 65535:
        raise WorktreeError(f"invalid value for {key}: {value!r}")
    return value


def _string(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise WorktreeError(f"invalid value for {key}: {value!r}")
    return value


def _optional_bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise WorktreeError(f"invalid value for {key}: {value!r}")
    return value


def _optional_string(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise WorktreeError(f"invalid value for {key}: {value!r}")
    return value


def _read_json(path: Path, parse: Callable[[Any], _T]) -> _T:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise WorktreeError(f"Failed to read {path}") from exc
    try:
        return parse(json.loads(content))
    except (json.JSONDecodeError, WorktreeError) as exc:
        raise WorktreeError(f"Failed to parse {path}: {exc}") from exc


def _write_json(path: Path, data: dict[str, Any]) -> None:
    try:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        raise WorktreeError(f"Failed to write {path}") from exc


def _read_line(prompt: str) -> str:
    click.echo(prompt, nl=False)
    sys.stdout.flush()
    return sys.stdin.readline().strip()


def _terminal_options() -> list[tuple[str, str]]:
    options = [("auto", "Auto-detect")]
    if sys.platform == "darwin":
        options += [
            ("tmux", "tmux (creates named sessions)"),
            ("iterm2", "iTerm2"),
            ("warp", "Warp"),
            ("ghostty", "Ghostty"),
            ("terminal", "Terminal.app"),
            ("vscode", "VS Code"),
        ]
    elif sys.platform.startswith("linux"):
        options += [
            ("tmux", "tmux (creates named sessions)"),
            ("gnome-terminal", "GNOME Terminal"),
            ("konsole", "Konsole"),
            ("kitty", "Kitty"),
            ("alacritty", "Alacritty"),
            ("xfce4-terminal", "Xfce Terminal"),
        ]
    return options


def _choose_terminal(choice: str, options: list[tuple[str, str]]) -> str | None:
    if not choice or choice == "1":
        return None
    if choice.isascii() and choice.isdigit():
        number = int(choice)
        if 0 < number <= len(options):
            value = options[number - 1][0]
            return None if value == "auto" else value
        return None
    return choice if Terminal.parse(choice) is not None else None


@dataclass
class UserSettings:
    """Personal preferences in ~/.config/worktree/config.json."""

    auto_launch_terminal: bool | None = None
    terminal: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "UserSettings":
        data = _require_object(data, "user settings")
        return cls(
            auto_launch_terminal=_optional_bool(data, "autoLaunchTerminal"),
            terminal=_optional_string(data, "terminal"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.auto_launch_terminal is not None:
            data["autoLaunchTerminal"] = self.auto_launch_terminal
        if self.terminal is not None:
            data["terminal"] = self.terminal
        return data

    @classmethod
    def load(cls) -> "UserSettings | None":
        """Read the user configuration, or None if there is none yet."""
        path = paths.user_config_file()
        if not path.exists():
            return None
        return _read_json(path, cls.from_dict)

    def save(self) -> None:
        paths.ensure_user_config_dir()
        _write_json(paths.user_config_file(), self.to_dict())

    @classmethod
    def setup_interactive(cls) -> "UserSettings":
        """Ask the user for their preferences, save and return them."""
        click.echo()
        click.echo(
            f"{click.style('First-time setup:', bold=True)} "
            f"{click.style(chr(76) + 'et' + chr(39) + 's configure your preferences.', dim=True)}"
        )
        click.echo(
            click.style(
                "These settings will be saved to ~/.config/worktree/config.json", dim=True
            )
        )
        click.echo()

        answer = _read_line(
            click.style(
                "Automatically launch terminal when creating a worktree? (Y/n): ", fg="cyan"
            )
        ).lower()
        auto_launch = answer in ("", "y", "yes")

        click.echo()
        click.echo(click.style("Select your preferred terminal:", fg="cyan"))
        options = _terminal_options()

        detected = detect_terminal()
        if detected is not None:
            click.echo(
                f"  {click.style('Currently detected:', dim=True)} "
                f"{click.style(detected.label(), fg='green')}"
            )
        click.echo()

        for number, (value, label) in enumerate(options, start=1):
            click.echo(f"  {click.style(f'[{number}]', dim=True)} {label} ({value})")

        click.echo()
        choice = _read_line(click.style("Enter choice [1]: ", fg="cyan"))

        settings = cls(
            auto_launch_terminal=auto_launch,
            terminal=_choose_terminal(choice, options),
        )
        settings.save()

        click.echo()
        click.echo(click.style("User preferences saved!", fg="green", bold=True))
        click.echo(
            "  " + click.style(f"Config file: {paths.user_config_file()}", dim=True)
        )
        click.echo()
        return settings

    @classmethod
    def load_or_setup(cls) -> "UserSettings":
        settings = cls.load()
        return settings if settings is not None else cls.setup_interactive()

    @classmethod
    def exists(cls) -> bool:
        return paths.user_config_file().exists()

    @classmethod
    def ensure_configured(cls) -> None:
        """Run first-time setup if no user configuration exists."""
        if not cls.exists():
            cls.setup_interactive()


@dataclass
class Settings:
    """Team-shared project settings in .worktree/settings.json."""

    port_count: int = DEFAULT_PORT_COUNT
    port_range_start: int = DEFAULT_PORT_RANGE_START
    port_range_end: int = DEFAULT_PORT_RANGE_END
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    auto_launch_terminal: bool | None = None
    terminal: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Settings":
        data = _require_object(data, "settings")
        return cls(
            port_count=_u16(data, "portCount", DEFAULT_PORT_COUNT),
            port_range_start=_u16(data, "portRangeStart", DEFAULT_PORT_RANGE_START),
            port_range_end=_u16(data, "portRangeEnd", DEFAULT_PORT_RANGE_END),
            branch_prefix=_string(data, "branchPrefix", DEFAULT_BRANCH_PREFIX),
            auto_launch_terminal=_optional_bool(data, "autoLaunchTerminal"),
            terminal=_optional_string(data, "terminal"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "portCount": self.port_count,
            "portRangeStart": self.port_range_start,
            "portRangeEnd": self.port_range_end,
            "branchPrefix": self.branch_prefix,
        }
        if self.auto_launch_terminal is not None:
            data["autoLaunchTerminal"] = self.auto_launch_terminal
        if self.terminal is not None:
            data["terminal"] = self.terminal
        return data


@dataclass
class LocalSettings:
    """Personal, git-ignored project settings in .worktree/settings.local.json."""

    worktree_dir: Path | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "LocalSettings":
        data = _require_object(data, "local settings")
        directory = _optional_string(data, "worktreeDir")
        return cls(worktree_dir=Path(directory) if directory is not None else None)

    def to_dict(self) -> dict[str, Any]:
        if self.worktree_dir is None:
            return {}
        return {"worktreeDir": str(self.worktree_dir)}


@dataclass
class MergedSettings:
    """Settings in effect: project over user over defaults."""

    port_count: int = DEFAULT_PORT_COUNT
    port_range_start: int = DEFAULT_PORT_RANGE_START
    port_range_end: int = DEFAULT_PORT_RANGE_END
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    auto_launch_terminal: bool = True
    worktree_dir: Path | None = None
    terminal: str | None = None

    @classmethod
    def load_from(cls, root: str | Path) -> "MergedSettings":
        """Load and merge the settings of the project at ``root``."""
        settings_path = paths.settings_file_in(root)
        local_path = paths.local_settings_file_in(root)

        settings = (
            _read_json(settings_path, Settings.from_dict)
            if settings_path.exists()
            else Settings()
        )
        local = (
            _read_json(local_path, LocalSettings.from_dict)
            if local_path.exists()
            else LocalSettings()
        )
        user = UserSettings.load_or_setup()

        if settings.auto_launch_terminal is not None:
            auto_launch = settings.auto_launch_terminal
        elif user.auto_launch_terminal is not None:
            auto_launch = user.auto_launch_terminal
        else:
            auto_launch = True

        return cls(
            port_count=settings.port_count,
            port_range_start=settings.port_range_start,
            port_range_end=settings.port_range_end,
            branch_prefix=settings.branch_prefix,
            auto_launch_terminal=auto_launch,
            worktree_dir=local.worktree_dir,
            terminal=settings.terminal if settings.terminal is not None else user.terminal,
        )

    def get_worktree_base_dir(self, project_name: str) -> Path:
        """The custom worktree directory, or ~/.worktree/worktrees/<project>."""
        if self.worktree_dir is not None:
            return self.worktree_dir
        return paths.global_worktrees_dir() / project_name


def save_settings(settings: Settings, root: str | Path) -> None:
    """Write the shared project settings under ``root``."""
    _write_json(paths.settings_file_in(root), settings.to_dict())


def save_local_settings(settings: LocalSettings, root: str | Path) -> None:
    """Write the local project settings under ``root``."""
    _write_json(paths.local_settings_file_in(root), settings.to_dict())