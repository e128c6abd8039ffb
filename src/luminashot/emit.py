"""
Structured events for LuminaShot runs.

Each run reports what it did as JSON lines on stderr, one event per line:

    {"event_type": "...", "timestamp": "...", "source": {"tool": "..."}, "data": {...}}

A run emits ``operation.started``, any number of ``selection.restarted``
(window mode only), then either ``artifact.created`` followed by a
successful ``operation.completed``, or ``error.handled`` / a cancelled
``operation.completed``. Callers use the helpers below rather than
building payloads by hand. Extra transports register with add_handler().
"""

import json
import sys
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]

_handlers: List[EventHandler] = []
_source: str = "luminashot"
_stderr_enabled: bool = True


def configure(source: str = "luminashot", stderr: bool = True) -> None:
    """Set the event source and whether events go to stderr."""
    global _source, _stderr_enabled
    _source = source
    _stderr_enabled = stderr


def add_handler(handler: EventHandler) -> None:
    _handlers.append(handler)


def remove_handler(handler: EventHandler) -> None:
    if handler in _handlers:
        _handlers.remove(handler)


def emit(event_type: str, data: Dict[str, Any], source: Optional[str] = None) -> None:
    """Send one event to stderr and every registered handler.

    A failing handler is logged and skipped; emitting never raises.
    """
    event = {
        "event_type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": {"tool": source or _source},
        "data": data,
    }

    if _stderr_enabled:
        try:
            print(json.dumps(event, default=str), file=sys.stderr, flush=True)
        except (OSError, ValueError) as exc:
            logger.debug("Could not write event to stderr: %s", exc)

    for handler in list(_handlers):
        try:
            handler(event)
        except Exception as exc:
            logger.debug("Event handler error: %s", exc)


# Run lifecycle


def operation_started(operation_id: str, mode: str) -> None:
    emit("operation.started", {"operation_id": operation_id, "mode": mode})


def selection_restarted(attempt: int, workspace_id: int) -> None:
    emit("selection.restarted", {"attempt": attempt, "workspace_id": workspace_id})


def artifact_created(path: Path, geometry: Any, mode: str) -> None:
    emit("artifact.created", {
        "file_path": str(path),
        "file_type": "screenshot",
        "geometry": str(geometry),
        "mode": mode,
    })


def error_handled(error: BaseException, mode: str) -> None:
    emit("error.handled", {
        "error_type": type(error).__name__,
        "message": str(error),
        "mode": mode,
    })


def operation_completed(
    operation_id: str,
    mode: str,
    path: Optional[Path] = None,
    geometry: Any = None,
    error: Optional[BaseException] = None,
) -> None:
    """Close a run: success with ``path``, failure with ``error``, else cancelled."""
    data: Dict[str, Any] = {
        "operation_id": operation_id,
        "mode": mode,
        "success": path is not None,
    }
    if path is not None:
        data["geometry"] = str(geometry)
        data["outputs"] = [{"file_path": str(path), "file_type": "screenshot"}]
    elif error is not None:
        data["error_message"] = str(error)
    else:
        data["cancelled"] = True
    emit("operation.completed", data)
