"""Per-worktree state stored in ``state.json``."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

STATE_FILE = "state.json"

_TIMESTAMP = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})"
)


class WorktreeError(Exception):
    """Raised when a worktree operation cannot be carried out."""


def _format_timestamp(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond:06d}"
    return text + "Z"


def _parse_timestamp(text: str) -> datetime:
    match = _TIMESTAMP.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    base = match["base"].replace(" ", "T").replace("t", "T")
    fraction = (match["frac"] or "")[:6].ljust(6, "0")
    offset = "+00:00" if match["tz"].upper() == "Z" else match["tz"]
    return datetime.fromisoformat(f"{base}.{fraction}{offset}").astimezone(timezone.utc)


def _port(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 65535:
        raise ValueError(f"invalid port: {value!r}")
    return value


@dataclass
class WorktreeState:
    """Everything recorded about one worktree."""

    name: str
    project_name: str
    original_dir: Path
    worktree_dir: Path
    branch: str
    ports: list[int]
    allocation_key: str
    created_at: datetime
    param: str | None = None
    display_name: str | None = None

    @classmethod
    def create(
        cls,
        name: str,
        project_name: str,
        worktree_dir: str | Path,
        original_dir: str | Path = "",
        branch: str = "",
        ports: Iterable[int] = (),
        param: str | None = None,
        display_name: str | None = None,
    ) -> "WorktreeState":
        """Build a fresh state stamped with the current time."""
        return cls(
            name=name,
            project_name=project_name,
            original_dir=Path(original_dir),
            worktree_dir=Path(worktree_dir),
            branch=branch,
            ports=list(ports),
            allocation_key=f"{project_name}/{name}",
            created_at=datetime.now(timezone.utc),
            param=param,
            display_name=display_name,
        )

    def effective_name(self) -> str:
        """The display name if one is set, otherwise the directory name."""
        return self.display_name if self.display_name is not None else self.name

    def has_custom_name(self) -> bool:
        return self.display_name is not None

    def matches_identifier(self, identifier: str) -> bool:
        """Match against the directory name, display name or allocation key suffix."""
        return (
            self.name == identifier
            or self.display_name == identifier
            or self.allocation_key.endswith(f"/{identifier}")
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "projectName": self.project_name,
            "originalDir": str(self.original_dir),
            "worktreeDir": str(self.worktree_dir),
            "branch": self.branch,
            "ports": list(self.ports),
            "allocationKey": self.allocation_key,
            "createdAt": _format_timestamp(self.created_at),
        }
        if self.param is not None:
            data["param"] = self.param
        if self.display_name is not None:
            data["displayName"] = self.display_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorktreeState":
        if not isinstance(data, dict):
            raise WorktreeError("state must be a JSON object")
        try:
            return cls(
                name=str(data["name"]),
                project_name=str(data["projectName"]),
                original_dir=Path(data["originalDir"]),
                worktree_dir=Path(data["worktreeDir"]),
                branch=str(data["branch"]),
                ports=[_port(p) for p in data["ports"]],
                allocation_key=str(data["allocationKey"]),
                created_at=_parse_timestamp(data["createdAt"]),
                param=data.get("param"),
                display_name=data.get("displayName"),
            )
        except KeyError as exc:
            raise WorktreeError(f"missing field {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise WorktreeError(str(exc)) from exc

    def save(self) -> None:
        """Write the state to ``state.json`` in the worktree directory."""
        path = self.worktree_dir / STATE_FILE
        try:
            path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise WorktreeError(f"Failed to write {path}") from exc

    @classmethod
    def load(cls, path: str | Path) -> "WorktreeState":
        """Read a state from a ``state.json`` file."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise WorktreeError(f"Failed to read {path}") from exc
        try:
            return cls.from_dict(json.loads(content))
        except (json.JSONDecodeError, WorktreeError) as exc:
            raise WorktreeError(f"Failed to parse {path}: {exc}") from exc


def detect_worktree() -> WorktreeState | None:
    """Find the worktree containing the current directory, if any."""
    return detect_worktree_from(Path.cwd())


def detect_worktree_from(start: str | Path) -> WorktreeState | None:
    """Find the worktree containing ``start`` by walking up its ancestors."""
    start = Path(start)
    for directory in (start, *start.parents):
        candidate = directory / STATE_FILE
        if candidate.exists():
            return WorktreeState.load(candidate)
    return None