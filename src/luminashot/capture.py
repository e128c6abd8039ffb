"""Screen capture with grim.

grim writes the image straight to its final location; nothing here
decodes or re-encodes pixels.
"""

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import Config
from .errors import CaptureError
from .hyprland import Geometry

log = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def output_path_for(config: Config, now: Optional[datetime] = None) -> Path:
    """Build the default save path from the configured template."""
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return config.output_dir / config.filename_template.format(timestamp=timestamp)


def grab(
    geometry: Geometry,
    config: Config,
    output_path: Optional[Path] = None,
) -> Path:
    """Capture ``geometry`` to a PNG file.

    Args:
        geometry: Region in compositor coordinates
        config: Configuration object
        output_path: Explicit destination. If None, uses output_dir and
            filename_template.

    Returns:
        Path to the saved image

    Raises:
        CaptureError: If grim is missing, fails, or writes nothing
    """
    output_path = output_path or output_path_for(config)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CaptureError(f"Cannot create {output_path.parent}: {e}") from e

    log.debug("Capturing %s to %s", geometry, output_path)
    try:
        result = subprocess.run(
            [config.grim, "-g", str(geometry), str(output_path)],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except subprocess.TimeoutExpired:
        output_path.unlink(missing_ok=True)
        raise CaptureError("Screen capture timed out")
    except FileNotFoundError:
        raise CaptureError(f"grim not found: {config.grim}")

    if result.returncode != 0:
        output_path.unlink(missing_ok=True)
        raise CaptureError(f"grim command failed: {result.stderr.strip()}")

    if not output_path.exists():
        raise CaptureError(f"grim did not write {output_path}")

    return output_path
