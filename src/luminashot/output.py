"""Post-capture output handling.

Handles:
- Copying to clipboard (wl-copy)
- Desktop notifications (notify-send)
- on_save hooks and artifact events
- Path or JSON output for scripting

Clipboard and notification failures are logged, never raised.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import Config
from .emit import artifact_created
from .hooks import notify_save
from .hyprland import Geometry

log = logging.getLogger(__name__)


@dataclass
class OutputOptions:
    """Options for output handling."""

    clipboard: bool = True
    notification: bool = True

    # Output modes
    stdout: bool = False  # Print path to stdout
    json_output: bool = False  # Output JSON metadata

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "OutputOptions":
        options = cls(
            clipboard=config.enable_clipboard,
            notification=config.enable_notification,
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(options, key, value)
        return options


@dataclass
class OutputResult:
    """A saved screenshot."""

    path: Path
    mode: str
    geometry: Geometry
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "mode": self.mode,
            "geometry": str(self.geometry),
            "width": self.geometry.width,
            "height": self.geometry.height,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def copy_to_clipboard(path: Path, config: Config) -> bool:
    """Copy image to clipboard using wl-copy."""
    try:
        with open(path, "rb") as f:
            subprocess.run([config.wl_copy, "-t", "image/png"], stdin=f, check=True, timeout=5)
        log.debug("Copied to clipboard")
        return True
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("Failed to copy to clipboard: %s", e)
        return False


def show_notification(path: Path, mode_title: str, config: Config) -> bool:
    """Show a desktop notification with the screenshot as icon."""
    try:
        subprocess.run(
            [
                config.notify_send,
                f"LuminaShot - {mode_title} Mode",
                f"Screenshot saved to {path}",
                "-i", str(path),
            ],
            check=True,
            timeout=5,
        )
        return True
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("Could not show notification: %s", e)
        return False


def deliver(
    path: Path,
    geometry: Geometry,
    mode_title: str,
    config: Config,
    options: Optional[OutputOptions] = None,
) -> OutputResult:
    """Run everything that happens after the image is on disk.

    Args:
        path: Saved image
        geometry: Captured region
        mode_title: Human-readable mode ("Region", "Window", "Monitor")
        config: Configuration object
        options: Output options. If None, derived from config.

    Returns:
        OutputResult describing the saved screenshot
    """
    options = options or OutputOptions.from_config(config)

    if options.clipboard:
        copy_to_clipboard(path, config)

    if options.notification:
        show_notification(path, mode_title, config)

    result = OutputResult(
        path=path,
        mode=mode_title.lower(),
        geometry=geometry,
        timestamp=datetime.now().isoformat(),
    )

    artifact_created(path, geometry, result.mode)

    notify_save(result, config)

    if options.json_output:
        print(result.to_json(), flush=True)
    elif options.stdout:
        print(str(path), flush=True)
    else:
        log.info("Screenshot saved: %s", path)

    return result
