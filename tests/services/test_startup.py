from __future__ import annotations

import plistlib
from pathlib import Path

from checkup.models.analysis import StartupItem
from checkup.models.enums import StartupKind
from checkup.services.fs import FileSystem
from checkup.services.startup import disable_items, friendly_name, list_startup_items
from tests.fakes import FakeRunner, failed


def _agent(directory: Path, label: str, **extra: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{label}.plist"
    path.write_bytes(plistlib.dumps({"Label": label, "ProgramArguments": ["/bin/true"], **extra}))
    return path


def test_friendly_name() -> None:
    assert friendly_name("com.spotify.webhelper") == "Spotify Webhelper"
    assert friendly_name("org.pqrs.karabiner") == "Org Pqrs Karabiner"


class TestListStartupItems:
    def test_login_items_then_agents(self, tmp_path: Path) -> None:
        agents = tmp_path / "LaunchAgents"
        _agent(agents, "com.spotify.webhelper")
        _agent(agents, "com.apple.something")
        _agent(agents, "com.example.off", Disabled=True)
        (agents / "notes.txt").write_text("ignore me", encoding="utf-8")

        items = list_startup_items(["Dropbox", " ", "Rectangle "], str(agents), FileSystem())

        assert [(i.name, i.kind) for i in items] == [
            ("Dropbox", StartupKind.LOGIN_ITEM),
            ("Rectangle", StartupKind.LOGIN_ITEM),
            ("Spotify Webhelper", StartupKind.LAUNCH_AGENT),
        ]

    def test_unparseable_plist_still_listed(self, tmp_path: Path) -> None:
        agents = tmp_path / "LaunchAgents"
        agents.mkdir()
        (agents / "com.broken.thing.plist").write_bytes(b"\x00not a plist")
        items = list_startup_items(None, str(agents), FileSystem())
        assert [i.name for i in items] == ["Broken Thing"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert list_startup_items(None, str(tmp_path / "nope"), FileSystem()) == []


class TestDisableItems:
    def test_each_kind_uses_its_own_command(self, tmp_path: Path) -> None:
        plist = _agent(tmp_path, "com.example.helper")
        login_argv = ("osascript", "-e", 'tell application "System Events" to delete login item "Dropbox"')
        agent_argv = ("launchctl", "unload", "-w", str(plist))
        runner = FakeRunner({login_argv: "", agent_argv: ""})
        items = [
            StartupItem("Dropbox", StartupKind.LOGIN_ITEM, "Dropbox"),
            StartupItem("Example Helper", StartupKind.LAUNCH_AGENT, str(plist)),
        ]

        results = disable_items(items, runner, FileSystem())

        assert runner.calls == [login_argv, agent_argv]
        assert [r.message for r in results] == ["removed login item", "disabled"]

    def test_failure_does_not_stop_batch(self, tmp_path: Path) -> None:
        plist = _agent(tmp_path, "com.example.helper")
        agent_argv = ("launchctl", "unload", "-w", str(plist))
        runner = FakeRunner({agent_argv: failed(agent_argv, "Operation not permitted")})
        items = [
            StartupItem("Gone", StartupKind.LAUNCH_AGENT, str(tmp_path / "gone.plist")),
            StartupItem("Helper", StartupKind.LAUNCH_AGENT, str(plist)),
        ]
        results = disable_items(items, runner, FileSystem())
        assert [(r.ok, r.message) for r in results] == [
            (False, "already gone"),
            (False, "Operation not permitted"),
        ]
