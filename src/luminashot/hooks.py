"""User hook scripts run after a screenshot is saved.

Directory structure (hooks_dir from config):
    <hooks_dir>/
    └── on_save.d/
        ├── 10-upload.sh
        └── 20-backup.sh

Scripts run in sorted order, in the background. Each receives:
    path mode geometry timestamp
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config
    from .output import OutputResult

log = logging.getLogger(__name__)


def find_hooks(hooks_dir: Optional[Path], event: str) -> list[Path]:
    """Executable, non-hidden scripts in ``<hooks_dir>/<event>.d``, sorted."""
    if not hooks_dir:
        return []

    event_dir = hooks_dir / f"{event}.d"
    if not event_dir.is_dir():
        return []

    scripts = []
    for script in sorted(event_dir.iterdir()):
        if not script.is_file() or script.name.startswith("."):
            continue
        if not script.stat().st_mode & 0o111:
            log.debug("Skipping non-executable: %s", script)
            continue
        scripts.append(script)
    return scripts


def run_hooks(hooks_dir: Optional[Path], event: str, *args) -> int:
    """Launch every hook for ``event``; returns how many were started."""
    started = 0
    for script in find_hooks(hooks_dir, event):
        try:
            subprocess.Popen(
                [str(script)] + [str(a) for a in args],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            started += 1
            log.debug("Hook executed: %s", script.name)
        except OSError as e:
            log.warning("Hook %s failed: %s", script.name, e)
    return started


def notify_save(result: "OutputResult", config: "Config") -> int:
    return run_hooks(
        config.hooks_dir,
        "on_save",
        result.path,
        result.mode,
        result.geometry,
        result.timestamp,
    )
