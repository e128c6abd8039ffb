"""Configuration management for LuminaShot.

Configuration priority (highest to lowest):
1. CLI overrides (passed to load_config)
2. Environment variables (LUMINASHOT_*)
3. Config file (~/.config/luminashot/config.yaml)
4. Built-in defaults

The resolved Config is passed explicitly to every collaborator.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any

import yaml
from platformdirs import user_config_dir

ENV_PREFIX = "LUMINASHOT"
CONFIG_DIR = Path(user_config_dir("luminashot"))
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"
DEFAULT_FILENAME_TEMPLATE = "{timestamp}-luminashot.png"


def default_output_dir() -> Path:
    """``$XDG_PICTURES_DIR/Screenshots``, falling back to ``~/Pictures``."""
    pictures = os.environ.get("XDG_PICTURES_DIR")
    base = Path(pictures).expanduser() if pictures else Path.home() / "Pictures"
    return base / "Screenshots"


@dataclass
class Config:
    """LuminaShot configuration."""

    # Binary paths
    hyprctl: str = "hyprctl"
    slurp: str = "slurp"
    grim: str = "grim"
    wl_copy: str = "wl-copy"
    notify_send: str = "notify-send"

    # Output settings
    output_dir: Path = field(default_factory=default_output_dir)
    filename_template: str = DEFAULT_FILENAME_TEMPLATE

    # Selection
    selection_color: str = "#FFFFFF44"
    poll_interval_ms: int = 200

    # Behavior
    enable_clipboard: bool = True
    enable_notification: bool = True

    # Hooks
    hooks_dir: Optional[Path] = field(default_factory=lambda: CONFIG_DIR / "hooks")

    def __post_init__(self):
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if isinstance(self.hooks_dir, str):
            self.hooks_dir = Path(self.hooks_dir)

    @property
    def poll_interval(self) -> float:
        """Watcher polling interval in seconds."""
        return self.poll_interval_ms / 1000.0


PATH_KEYS = {"output_dir", "hooks_dir"}
INT_KEYS = {"poll_interval_ms"}
BOOL_KEYS = {"enable_clipboard", "enable_notification"}


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}_{name}")


def _config_path_from_env() -> Optional[Path]:
    value = _env("CONFIG")
    if value:
        return Path(value).expanduser()
    return None


def _load_config_file(path: Path, strict: bool = False) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        if strict:
            raise ValueError(f"Failed to parse config file {path}: {exc}")
        return {}

    if not isinstance(data, dict):
        if strict:
            raise ValueError(f"Config file {path} must be a mapping")
        return {}

    return data


def _expand_path(value: Any) -> Any:
    if value is None:
        return value
    return str(Path(value).expanduser())


def config_defaults() -> dict:
    return {
        "hyprctl": "hyprctl",
        "slurp": "slurp",
        "grim": "grim",
        "wl_copy": "wl-copy",
        "notify_send": "notify-send",
        "output_dir": str(default_output_dir()),
        "filename_template": DEFAULT_FILENAME_TEMPLATE,
        "selection_color": "#FFFFFF44",
        "poll_interval_ms": 200,
        "enable_clipboard": True,
        "enable_notification": True,
        "hooks_dir": str(CONFIG_DIR / "hooks"),
    }


def _load_env_overrides() -> dict:
    config: dict[str, Any] = {}

    for key in config_defaults():
        value = _env(key.upper())
        if value is None:
            continue
        if key in PATH_KEYS:
            config[key] = _expand_path(value)
        elif key in INT_KEYS:
            try:
                config[key] = int(value)
            except ValueError:
                continue
        elif key in BOOL_KEYS:
            config[key] = value.lower() in ("true", "1", "yes", "on")
        else:
            config[key] = value

    return config


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    return config_path or _config_path_from_env() or DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict] = None,
    strict: bool = False,
) -> Config:
    """Load configuration from all sources.

    Raises:
        ValueError: If the merged configuration is invalid
    """
    resolved_path = resolve_config_path(config_path)

    config_dict = config_defaults()
    file_config = _load_config_file(resolved_path, strict=strict)
    config_dict.update({k: v for k, v in file_config.items() if k in config_dict})
    config_dict.update(_load_env_overrides())

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

    for key in PATH_KEYS:
        if key in config_dict and config_dict[key] is not None:
            config_dict[key] = _expand_path(config_dict[key])

    errors = validate_config_dict(config_dict)
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    return Config(**config_dict)


def config_schema() -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "hyprctl": {"type": "string"},
            "slurp": {"type": "string"},
            "grim": {"type": "string"},
            "wl_copy": {"type": "string"},
            "notify_send": {"type": "string"},
            "output_dir": {"type": "string"},
            "filename_template": {"type": "string"},
            "selection_color": {"type": "string"},
            "poll_interval_ms": {"type": "integer", "minimum": 1},
            "enable_clipboard": {"type": "boolean"},
            "enable_notification": {"type": "boolean"},
            "hooks_dir": {"type": ["string", "null"]},
        },
        "additionalProperties": False,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    props = config_schema()["properties"]

    for key in data.keys():
        if key not in props:
            errors.append(f"Unknown config key: {key}")

    for key, value in data.items():
        if key not in props:
            continue
        expected = props[key]["type"]
        if isinstance(expected, list):
            if value is None and "null" in expected:
                continue
            if "string" in expected and isinstance(value, str):
                continue
            errors.append(f"{key} must be one of types: {', '.join(expected)}")
            continue

        if expected == "string" and not isinstance(value, str):
            errors.append(f"{key} must be a string")
        elif expected == "integer" and not _is_int(value):
            errors.append(f"{key} must be an integer")
        elif expected == "boolean" and not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")

        if key == "poll_interval_ms" and _is_int(value) and value < 1:
            errors.append("poll_interval_ms must be >= 1")
        if key == "filename_template" and isinstance(value, str) and "{timestamp}" not in value:
            errors.append("filename_template must contain {timestamp}")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    path = resolve_config_path(config_path)
    if not path.exists():
        return []
    data = _load_config_file(path, strict=True)
    return validate_config_dict(data)


def config_to_dict(config: Config) -> dict:
    result = {}
    for key in config_defaults():
        value = getattr(config, key)
        result[key] = str(value) if isinstance(value, Path) else value
    return result
