from __future__ import annotations

import asyncio
import subprocess

import pytest

import soundidle.autostart as autostart_module
from soundidle.autostart import (
    LaunchCommand,
    WindowsAutostart,
    _ps_single_quoted,
    build_query_task_script,
    build_register_task_script,
    build_remove_task_script,
    parse_task_status,
)
from soundidle.errors import AutostartError

COMMAND = LaunchCommand(
    executable="C:/Program Files/Python312/pythonw.exe",
    arguments=("-m", "soundidle", "gui", "--minimized"),
)


def test_ps_single_quoted_escapes_single_quote() -> None:
    assert _ps_single_quoted("a'b") == "'a''b'"


def test_argument_string_quotes_only_when_needed() -> None:
    command = LaunchCommand(executable="pythonw.exe", arguments=("-m", "soundidle", "C:/My Config"))

    assert command.argument_string() == '-m soundidle "C:/My Config"'


def test_launch_command_prefers_windowless_interpreter(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(autostart_module.sys, "executable", "C:\\Python312\\python.exe")

    command = LaunchCommand.for_current_interpreter(["gui", "--minimized"])

    assert command.executable == "C:\\Python312\\pythonw.exe"
    assert command.arguments == ("-m", "soundidle", "gui", "--minimized")


def test_build_register_task_script_contains_expected_values() -> None:
    script = build_register_task_script(command=COMMAND, task_name="SoundIdle Test Task")

    assert "SoundIdle Test Task" in script
    assert "'C:/Program Files/Python312/pythonw.exe'" in script
    assert "-m soundidle gui --minimized" in script
    assert "-AtLogOn" in script
    assert "-RunLevel Limited" in script


def test_build_remove_task_script_contains_unregister() -> None:
    script = build_remove_task_script("SoundIdle Test Task")

    assert "SoundIdle Test Task" in script
    assert "Unregister-ScheduledTask" in script


def test_build_query_task_script_reports_state() -> None:
    script = build_query_task_script("SoundIdle Test Task")

    assert "Get-ScheduledTask -TaskName 'SoundIdle Test Task'" in script
    assert "Not configured" in script


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("Configured (Ready)", True),
        ("Configured (Running)", True),
        ("Configured (Disabled)", False),
        ("Not configured", False),
    ],
)
def test_parse_task_status(output: str, expected: bool) -> None:
    assert parse_task_status(output) is expected


def test_parse_task_status_rejects_unexpected_output() -> None:
    with pytest.raises(AutostartError):
        parse_task_status("")


def test_run_task_script_requires_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(autostart_module.sys, "platform", "linux")

    with pytest.raises(AutostartError, match="only supported on Windows"):
        autostart_module.run_task_script("Write-Output 'x'")


def test_run_task_script_surfaces_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(autostart_module.sys, "platform", "win32")

    def fake_run(command: str) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(
            args=["powershell"], returncode=1, stdout="", stderr="Access is denied."
        )

    monkeypatch.setattr(autostart_module, "_run_powershell", fake_run)

    with pytest.raises(AutostartError, match="Access is denied."):
        autostart_module.run_task_script("Register-ScheduledTask")


def test_windows_autostart_round_trip_through_task_scripts(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    registered = {"value": False}
    scripts: list[str] = []

    def fake_run_task_script(script: str) -> str:
        scripts.append(script)
        if "Unregister-ScheduledTask" in script:
            registered["value"] = False
            return "Autostart task removed: SoundIdle"
        if "Register-ScheduledTask" in script:
            registered["value"] = True
            return "Autostart task configured: SoundIdle"
        return "Configured (Ready)" if registered["value"] else "Not configured"

    monkeypatch.setattr(autostart_module, "run_task_script", fake_run_task_script)
    autostart = WindowsAutostart(COMMAND)

    async def scenario() -> list[bool]:
        states = [await autostart.is_enabled()]
        await autostart.enable()
        states.append(await autostart.is_enabled())
        await autostart.disable()
        states.append(await autostart.is_enabled())
        return states

    assert asyncio.run(scenario()) == [False, True, False]
    assert len(scripts) == 5
