"""
Tests for hyprctl parsing and queries.
"""

import pytest

from luminashot.errors import QueryError
from luminashot.hyprland import (
    CursorPos,
    Geometry,
    HyprlandClient,
    MonitorInfo,
    WorkspaceRef,
    filter_selectable,
    parse_clients,
    parse_cursor,
    parse_monitors,
    parse_workspace,
)

from conftest import client, workspace


class TestGeometry:

    @pytest.mark.parametrize("x,y,w,h,expected", [
        (0, 0, 1920, 1080, "0,0 1920x1080"),
        (1920, 0, 2560, 1440, "1920,0 2560x1440"),
        (7, 42, 0, 0, "7,42 0x0"),
    ])
    def test_format(self, x, y, w, h, expected):
        assert str(Geometry(x, y, w, h)) == expected

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Geometry(0, 0, -1, 10)

    def test_parse_slurp_output(self):
        assert Geometry.parse("10,20 300x200\n") == Geometry(10, 20, 300, 200)

    @pytest.mark.parametrize("text", ["", "10,20", "10 20 300x200", "a,b cxd"])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            Geometry.parse(text)


class TestParsing:

    def test_workspace_equality_is_by_id(self):
        assert parse_workspace(workspace(3, "web")) == WorkspaceRef(3, "other")

    def test_workspace_missing_id(self):
        with pytest.raises(QueryError):
            parse_workspace({"name": "1"})

    def test_clients(self):
        windows = parse_clients([
            client("0xa", at=(10, 20), size=(300, 200), ws=3),
            client("0xb", ws=4, hidden=True),
        ])
        assert [w.address for w in windows] == ["0xa", "0xb"]
        assert windows[0].geometry == Geometry(10, 20, 300, 200)
        assert windows[0].workspace.id == 3
        assert windows[1].hidden is True

    @pytest.mark.parametrize("payload", [
        {"address": "0xa"},
        [{"address": "0xa", "at": [1], "size": [1, 1], "workspace": workspace(1), "hidden": False}],
        [{"address": "0xa", "at": [1, 1], "size": [1, 1], "workspace": workspace(1), "hidden": "no"}],
        [{"address": "0xa", "at": [1, 1], "size": [1, 1], "workspace": 1, "hidden": False}],
    ])
    def test_malformed_clients(self, payload):
        with pytest.raises(QueryError):
            parse_clients(payload)

    def test_monitors_and_cursor(self):
        monitors = parse_monitors([
            {"name": "DP-1", "x": 0, "y": 0, "width": 1920, "height": 1080},
        ])
        assert monitors == [MonitorInfo(0, 0, 1920, 1080, "DP-1")]
        assert parse_cursor({"x": 5, "y": 6}) == CursorPos(5, 6)

    def test_monitor_contains_is_half_open(self):
        monitor = MonitorInfo(0, 0, 1920, 1080)
        assert monitor.contains(CursorPos(0, 0))
        assert monitor.contains(CursorPos(1919, 1079))
        assert not monitor.contains(CursorPos(1920, 0))
        assert not monitor.contains(CursorPos(0, 1080))


class TestFilterSelectable:

    def test_keeps_visible_windows_on_workspace_in_order(self):
        windows = parse_clients([
            client("0x1", ws=3),
            client("0x2", ws=4),
            client("0x3", ws=3, hidden=True),
            client("0x4", ws=3),
        ])
        assert [w.address for w in filter_selectable(windows, 3)] == ["0x1", "0x4"]

    def test_empty_when_nothing_matches(self):
        windows = parse_clients([client("0x1", ws=1)])
        assert filter_selectable(windows, 2) == []


class TestHyprlandClient:

    @pytest.mark.asyncio
    async def test_queries_hyprctl_json(self, config, make_script):
        config.hyprctl = make_script("hyprctl", """
case "$1 $2" in
  "activeworkspace -j") echo '{"id": 3, "name": "3", "windows": 2}' ;;
  "clients -j") echo '[{"address": "0xa", "at": [1, 2], "size": [3, 4], "workspace": {"id": 3, "name": "3"}, "hidden": false}]' ;;
  *) echo "unknown request" >&2; exit 2 ;;
esac""")
        hypr = HyprlandClient(config)

        assert (await hypr.active_workspace()).id == 3
        windows = await hypr.windows_on(3)
        assert [str(w.geometry) for w in windows] == ["1,2 3x4"]

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_query_error(self, config, make_script):
        config.hyprctl = make_script("hyprctl", "echo boom >&2; exit 1")
        with pytest.raises(QueryError, match="boom"):
            await HyprlandClient(config).active_workspace()

    @pytest.mark.asyncio
    async def test_invalid_json_is_query_error(self, config, make_script):
        config.hyprctl = make_script("hyprctl", "echo 'not json'")
        with pytest.raises(QueryError, match="invalid JSON"):
            await HyprlandClient(config).list_clients()

    @pytest.mark.asyncio
    async def test_missing_executable_is_query_error(self, config, tmp_path):
        config.hyprctl = str(tmp_path / "no-such-hyprctl")
        with pytest.raises(QueryError):
            await HyprlandClient(config).cursor_position()

    @pytest.mark.asyncio
    async def test_monitor_at_cursor(self, hyprland):
        hypr = hyprland(
            cursorpos=[{"x": 1920, "y": 10}],
            monitors=[[
                {"name": "DP-1", "x": 0, "y": 0, "width": 1920, "height": 1080},
                {"name": "DP-2", "x": 1920, "y": 0, "width": 2560, "height": 1440},
            ]],
        )
        monitor = await hypr.monitor_at()
        assert monitor.name == "DP-2"

    @pytest.mark.asyncio
    async def test_no_monitor_under_cursor(self, hyprland):
        hypr = hyprland(
            cursorpos=[{"x": -5, "y": -5}],
            monitors=[[{"name": "DP-1", "x": 0, "y": 0, "width": 1920, "height": 1080}]],
        )
        with pytest.raises(QueryError, match="No monitor"):
            await hypr.monitor_at()
