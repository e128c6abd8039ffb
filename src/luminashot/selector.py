"""Interactive selection with slurp.

Window selection runs slurp in restricted mode, fed with the current
window list, and races it against the workspace watcher. Whichever side
finishes first wins; the other is cancelled. slurp is not cooperatively
cancellable, so a losing slurp is killed with SIGTERM.
"""

import asyncio
import enum
import logging
import os
import signal
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from .config import Config
from .errors import ResolutionError, SpawnError
from .hyprland import Geometry, HyprlandClient, WindowInfo
from .watcher import watch_for_change

log = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    SELECTED = "selected"
    CANCELLED = "cancelled"
    RESTART = "restart"


@dataclass(frozen=True)
class Outcome:
    """Result of one selection attempt."""

    kind: OutcomeKind
    geometry: Optional[Geometry] = None

    @classmethod
    def selected(cls, geometry: Geometry) -> "Outcome":
        return cls(OutcomeKind.SELECTED, geometry)

    @classmethod
    def cancelled(cls) -> "Outcome":
        return cls(OutcomeKind.CANCELLED)

    @classmethod
    def restart(cls) -> "Outcome":
        return cls(OutcomeKind.RESTART)


def format_target(window: WindowInfo) -> str:
    """One slurp target line: the window rectangle labelled with its address."""
    return f"{window.geometry} {window.address}"


def format_targets(windows: Sequence[WindowInfo]) -> str:
    return "\n".join(format_target(w) for w in windows)


def terminate_process(pid: int, sig: int = signal.SIGTERM) -> bool:
    """Best-effort signal delivery.

    Returns:
        True if the signal was sent or the process is already gone,
        False if it could not be signalled
    """
    try:
        os.kill(pid, sig)
        log.debug("Sent signal %d to PID %d", sig, pid)
        return True
    except ProcessLookupError:
        log.debug("PID %d already exited", pid)
        return True
    except OSError as e:
        log.warning("Could not signal PID %d: %s", pid, e)
        return False


async def select_region(config: Config) -> Optional[Geometry]:
    """Let the user drag a region.

    Returns:
        The selected Geometry, or None if the user cancelled

    Raises:
        SpawnError: If slurp cannot be started or prints garbage
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            config.slurp, "-b", config.selection_color,
            stdout=asyncio.subprocess.PIPE,
        )
        stdout, _ = await proc.communicate()
    except OSError as e:
        raise SpawnError(f"Failed to spawn {config.slurp}: {e}") from e

    if proc.returncode != 0:
        return None

    try:
        return Geometry.parse(stdout.decode("utf-8"))
    except ValueError as e:
        raise SpawnError(f"Unexpected selector output: {e}") from e


async def resolve_current_geometry(client: HyprlandClient, address: str) -> Geometry:
    """Look up the live geometry of the window at ``address``.

    Raises:
        ResolutionError: If no such window exists any more
    """
    for window in await client.list_clients():
        if window.address == address:
            return window.geometry
    raise ResolutionError(f"Could not find window with address {address} after selection")


WatchFn = Callable[[HyprlandClient, int, float], Awaitable[None]]


class SelectorController:
    """Runs one "pick a window unless the workspace changes" attempt."""

    def __init__(
        self,
        client: HyprlandClient,
        config: Config,
        watch: WatchFn = watch_for_change,
    ):
        self.client = client
        self.config = config
        self._watch = watch

    async def _spawn(self, targets: str) -> asyncio.subprocess.Process:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.config.slurp, "-r", "-b", self.config.selection_color, "-f", "%l",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnError(f"Failed to spawn {self.config.slurp}: {e}") from e

        try:
            proc.stdin.write(targets.encode("utf-8"))
            await proc.stdin.drain()
            proc.stdin.close()
        except (BrokenPipeError, ConnectionResetError) as e:
            terminate_process(proc.pid)
            await proc.wait()
            raise SpawnError(f"Failed to write selection targets: {e}") from e

        return proc

    async def run_attempt(self, windows: Sequence[WindowInfo], baseline_id: int) -> Outcome:
        """Race slurp against the workspace watcher.

        Args:
            windows: Selectable windows, non-empty
            baseline_id: Active workspace id when the snapshot was taken

        Returns:
            Outcome: SELECTED with live geometry, CANCELLED on escape,
            or RESTART if the workspace changed first
        """
        interval = self.config.poll_interval
        proc = await self._spawn(format_targets(windows))
        log.debug("Selector started, PID=%d, %d targets", proc.pid, len(windows))

        selector_task = asyncio.create_task(proc.communicate())
        watcher_task = None
        try:
            watcher_task = asyncio.create_task(self._watch(self.client, baseline_id, interval))
            done, _ = await asyncio.wait(
                {selector_task, watcher_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except BaseException:
            # Never leave the overlay on screen, whatever went wrong
            await self._abandon(proc, selector_task, watcher_task)
            raise

        # A finished selection wins a tie
        if selector_task in done:
            watcher_task.cancel()
            await asyncio.gather(watcher_task, return_exceptions=True)
            stdout, _ = selector_task.result()
            if proc.returncode != 0:
                log.debug("Selector exited with %d", proc.returncode)
                return Outcome.cancelled()
            try:
                address = stdout.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise ResolutionError(f"Selector returned undecodable output: {e}") from e
            return Outcome.selected(await resolve_current_geometry(self.client, address))

        await self._stop_selector(proc, selector_task)
        error = watcher_task.exception()
        if error is not None:
            log.warning("Workspace watcher failed: %s", error)
        return Outcome.restart()

    async def _stop_selector(self, proc: asyncio.subprocess.Process, selector_task: asyncio.Task) -> None:
        if selector_task.done():
            return
        if terminate_process(proc.pid) or terminate_process(proc.pid, signal.SIGKILL):
            # Reap it and drain the pipes
            await asyncio.gather(selector_task, return_exceptions=True)
            return

        log.warning("Selector PID %d could not be stopped and was left running", proc.pid)
        selector_task.cancel()
        await asyncio.gather(selector_task, return_exceptions=True)

    async def _abandon(self, proc, selector_task, watcher_task) -> None:
        if watcher_task is not None:
            watcher_task.cancel()
        await self._stop_selector(proc, selector_task)
        if watcher_task is not None:
            await asyncio.gather(watcher_task, return_exceptions=True)
