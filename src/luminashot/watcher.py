"""Workspace change detection by polling hyprctl.

Hyprland's ``hyprctl`` is pull-only here, so a change of the active
workspace is detected by re-querying it at a fixed interval.
"""

import asyncio
import logging
from typing import Optional

from .errors import QueryError
from .hyprland import HyprlandClient

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.2


async def poll_active_workspace_id(client: HyprlandClient) -> Optional[int]:
    """Query the active workspace id, or None if the query failed."""
    try:
        workspace = await client.active_workspace()
    except QueryError as e:
        log.debug("Workspace poll failed, treating as unchanged: %s", e)
        return None
    return workspace.id


async def watch_for_change(
    client: HyprlandClient,
    baseline_id: int,
    interval: float = DEFAULT_INTERVAL,
) -> None:
    """Return once the active workspace is no longer ``baseline_id``.

    Runs until a change is seen or the task is cancelled. Query failures
    count as "no change" for that tick.
    """
    while True:
        await asyncio.sleep(interval)
        current_id = await poll_active_workspace_id(client)
        if current_id is not None and current_id != baseline_id:
            log.debug("Active workspace changed: %d -> %d", baseline_id, current_id)
            return
