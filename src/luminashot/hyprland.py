"""Hyprland introspection via ``hyprctl -j``.

Every query is a single ``hyprctl <subcommand> -j`` invocation whose JSON
output is parsed into immutable snapshots. Nothing here retries or falls
back to defaults: a failed or malformed query raises QueryError.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import Config
from .errors import QueryError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspaceRef:
    """A compositor workspace. Equality is by id."""

    id: int
    name: str = field(default="", compare=False)


@dataclass(frozen=True)
class Geometry:
    """A capture rectangle; ``str()`` gives the ``"x,y WxH"`` form grim takes."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative size in geometry: {self.width}x{self.height}")

    def __str__(self) -> str:
        return f"{self.x},{self.y} {self.width}x{self.height}"

    @classmethod
    def parse(cls, text: str) -> "Geometry":
        """Parse ``"x,y WxH"`` as printed by slurp."""
        try:
            origin, size = text.strip().split(" ")
            x, y = origin.split(",")
            w, h = size.split("x")
            return cls(int(x), int(y), int(w), int(h))
        except ValueError:
            raise ValueError(f"Invalid geometry: {text!r}")


@dataclass(frozen=True)
class WindowInfo:
    address: str
    at: tuple[int, int]
    size: tuple[int, int]
    workspace: WorkspaceRef
    hidden: bool = False

    @property
    def geometry(self) -> Geometry:
        return Geometry(self.at[0], self.at[1], self.size[0], self.size[1])


@dataclass(frozen=True)
class MonitorInfo:
    x: int
    y: int
    width: int
    height: int
    name: str = ""

    @property
    def geometry(self) -> Geometry:
        return Geometry(self.x, self.y, self.width, self.height)

    def contains(self, cursor: "CursorPos") -> bool:
        return (
            self.x <= cursor.x < self.x + self.width
            and self.y <= cursor.y < self.y + self.height
        )


@dataclass(frozen=True)
class CursorPos:
    x: int
    y: int


# Parsing


def _require(data: Any, key: str, kind: type, what: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise QueryError(f"{what}: missing '{key}'")
    value = data[key]
    # bool is an int subclass; reject it where an int is expected
    if kind is int and isinstance(value, bool):
        raise QueryError(f"{what}: '{key}' must be an integer")
    if not isinstance(value, kind):
        raise QueryError(f"{what}: '{key}' must be {kind.__name__}")
    return value


def _pair(data: dict, key: str, what: str) -> tuple[int, int]:
    value = _require(data, key, list, what)
    if len(value) != 2 or not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise QueryError(f"{what}: '{key}' must be a pair of integers")
    return (value[0], value[1])


def parse_workspace(data: Any) -> WorkspaceRef:
    return WorkspaceRef(
        id=_require(data, "id", int, "workspace"),
        name=_require(data, "name", str, "workspace"),
    )


def parse_clients(data: Any) -> list[WindowInfo]:
    if not isinstance(data, list):
        raise QueryError("clients: expected a JSON array")

    clients = []
    for entry in data:
        clients.append(WindowInfo(
            address=_require(entry, "address", str, "client"),
            at=_pair(entry, "at", "client"),
            size=_pair(entry, "size", "client"),
            workspace=parse_workspace(_require(entry, "workspace", dict, "client")),
            hidden=_require(entry, "hidden", bool, "client"),
        ))
    return clients


def parse_monitors(data: Any) -> list[MonitorInfo]:
    if not isinstance(data, list):
        raise QueryError("monitors: expected a JSON array")

    return [
        MonitorInfo(
            x=_require(entry, "x", int, "monitor"),
            y=_require(entry, "y", int, "monitor"),
            width=_require(entry, "width", int, "monitor"),
            height=_require(entry, "height", int, "monitor"),
            name=entry.get("name", ""),
        )
        for entry in data
    ]


def parse_cursor(data: Any) -> CursorPos:
    return CursorPos(
        x=_require(data, "x", int, "cursorpos"),
        y=_require(data, "y", int, "cursorpos"),
    )


def filter_selectable(clients: list[WindowInfo], workspace_id: int) -> list[WindowInfo]:
    """Visible clients on the given workspace, in compositor order."""
    return [c for c in clients if not c.hidden and c.workspace.id == workspace_id]


class HyprlandClient:
    """Read-only queries against ``hyprctl``."""

    def __init__(self, config: Config):
        self.config = config

    async def _query(self, subcommand: str) -> Any:
        argv = [self.config.hyprctl, subcommand, "-j"]
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as e:
            raise QueryError(f"Could not run {argv[0]}: {e}") from e

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise QueryError(f"hyprctl {subcommand} exited with {proc.returncode}: {message}")

        try:
            return json.loads(stdout)
        except ValueError as e:
            raise QueryError(f"hyprctl {subcommand} returned invalid JSON: {e}") from e

    async def active_workspace(self) -> WorkspaceRef:
        return parse_workspace(await self._query("activeworkspace"))

    async def list_clients(self) -> list[WindowInfo]:
        return parse_clients(await self._query("clients"))

    async def windows_on(self, workspace_id: int) -> list[WindowInfo]:
        return filter_selectable(await self.list_clients(), workspace_id)

    async def list_monitors(self) -> list[MonitorInfo]:
        return parse_monitors(await self._query("monitors"))

    async def cursor_position(self) -> CursorPos:
        return parse_cursor(await self._query("cursorpos"))

    async def monitor_at(self, cursor: Optional[CursorPos] = None) -> MonitorInfo:
        """Return the monitor under the cursor (or under ``cursor`` if given)."""
        cursor = cursor or await self.cursor_position()
        for monitor in await self.list_monitors():
            if monitor.contains(cursor):
                return monitor
        raise QueryError(f"No monitor under the cursor at {cursor.x},{cursor.y}")
