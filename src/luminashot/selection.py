"""Selection modes: region, window and monitor.

Window mode is a loop. Each pass snapshots the active workspace and its
windows, then lets the user pick one while watching for a workspace
change. A change restarts the pass from a fresh snapshot; only a
selection or an explicit cancel ends the loop.
"""

import enum
import logging
from typing import Optional

from . import selector
from .config import Config
from .emit import selection_restarted
from .hyprland import Geometry, HyprlandClient
from .selector import OutcomeKind, SelectorController
from .watcher import watch_for_change

log = logging.getLogger(__name__)


class Mode(enum.Enum):
    REGION = "region"
    WINDOW = "window"
    MONITOR = "monitor"

    @property
    def title(self) -> str:
        return self.value.capitalize()


async def select_window(
    client: HyprlandClient,
    config: Config,
    controller: Optional[SelectorController] = None,
) -> Optional[Geometry]:
    """Let the user pick a window on the active workspace.

    Returns:
        Live geometry of the picked window, or None if the user cancelled

    Raises:
        QueryError, SpawnError, ResolutionError
    """
    controller = controller or SelectorController(client, config)
    attempt = 0

    while True:
        attempt += 1
        baseline_id = (await client.active_workspace()).id
        windows = await client.windows_on(baseline_id)

        if not windows:
            log.info("No windows on workspace %d. Waiting for a workspace change...", baseline_id)
            await watch_for_change(client, baseline_id, config.poll_interval)
            continue

        log.debug("Attempt %d: %d windows on workspace %d", attempt, len(windows), baseline_id)
        outcome = await controller.run_attempt(windows, baseline_id)

        if outcome.kind is OutcomeKind.SELECTED:
            return outcome.geometry
        if outcome.kind is OutcomeKind.CANCELLED:
            return None

        log.info("Workspace changed, restarting selection...")
        selection_restarted(attempt, baseline_id)


async def select_monitor(client: HyprlandClient) -> Geometry:
    """Geometry of the monitor under the cursor."""
    monitor = await client.monitor_at()
    log.debug("Cursor is on monitor %s", monitor.name or monitor.geometry)
    return monitor.geometry


async def select_region(config: Config) -> Optional[Geometry]:
    return await selector.select_region(config)


async def run_mode(mode: Mode, client: HyprlandClient, config: Config) -> Optional[Geometry]:
    """Run one selection mode; None means the user cancelled."""
    if mode is Mode.REGION:
        return await select_region(config)
    if mode is Mode.WINDOW:
        return await select_window(client, config)
    return await select_monitor(client)
