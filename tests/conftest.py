"""
Shared fixtures.

External tools are replaced by small shell scripts written into tmp_path,
or by a HyprlandClient whose hyprctl answers are scripted per subcommand.
"""

import stat
from pathlib import Path

import pytest

from luminashot import emit
from luminashot.config import Config
from luminashot.hyprland import HyprlandClient


def workspace(ws_id, name=None):
    return {"id": ws_id, "name": name or str(ws_id)}


def client(address, at=(0, 0), size=(100, 100), ws=1, hidden=False):
    return {
        "address": address,
        "at": list(at),
        "size": list(size),
        "workspace": workspace(ws),
        "hidden": hidden,
        "class": "kitty",
    }


class ScriptedHyprland(HyprlandClient):
    """Answers queries from per-subcommand queues; the last answer repeats."""

    def __init__(self, config, **responses):
        super().__init__(config)
        self.responses = {name: list(values) for name, values in responses.items()}
        self.calls = []

    async def _query(self, subcommand):
        self.calls.append(subcommand)
        queue = self.responses[subcommand]
        value = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(value, Exception):
            raise value
        return value

    def count(self, subcommand):
        return self.calls.count(subcommand)


@pytest.fixture(autouse=True)
def quiet_events():
    emit.configure("luminashot-test", stderr=False)
    yield
    emit.configure("luminashot", stderr=True)


@pytest.fixture
def make_script(tmp_path):
    """Write an executable shell script and return its path."""

    def _make(name, body):
        path = tmp_path / "bin" / name
        path.parent.mkdir(exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def config(tmp_path):
    return Config(
        output_dir=tmp_path / "shots",
        hooks_dir=tmp_path / "hooks",
        poll_interval_ms=5,
    )


@pytest.fixture
def hyprland(config):
    def _make(**responses):
        return ScriptedHyprland(config, **responses)

    return _make


@pytest.fixture
def pid_file(tmp_path) -> Path:
    return tmp_path / "selector.pid"
