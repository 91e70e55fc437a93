from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import AutostartError

logger = logging.getLogger(__name__)

TASK_NAME = "SoundIdle"


@dataclass(frozen=True)
class LaunchCommand:
    executable: str
    arguments: tuple[str, ...]

    @classmethod
    def for_current_interpreter(cls, launch_args: Sequence[str]) -> LaunchCommand:
        executable = sys.executable
        # pythonw.exe avoids a console window flashing up at logon.
        if executable.lower().endswith("python.exe"):
            executable = executable[: -len("python.exe")] + "pythonw.exe"
        return cls(executable=executable, arguments=("-m", "soundidle", *launch_args))

    def argument_string(self) -> str:
        return " ".join(_quote_argument(arg) for arg in self.arguments)


def _ps_single_quoted(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _quote_argument(value: str) -> str:
    if value and not any(ch in value for ch in ' \t"'):
        return value
    return '"' + value.replace('"', '\\"') + '"'


def build_register_task_script(*, command: LaunchCommand, task_name: str = TASK_NAME) -> str:
    task_literal = _ps_single_quoted(task_name)
    execute_literal = _ps_single_quoted(command.executable)
    args_literal = _ps_single_quoted(command.argument_string())
    description_literal = _ps_single_quoted("Starts SoundIdle at logon.")

    return f"""
$ErrorActionPreference = 'Stop'
$taskName = {task_literal}
$currentUser = [System.Security.Principal.WindowsIdentity]::GetCurrent().Name

$action = New-ScheduledTaskAction -Execute {execute_literal} -Argument {args_literal}
$trigger = New-ScheduledTaskTrigger -AtLogOn -User $currentUser
$principal = New-ScheduledTaskPrincipal -UserId $currentUser -LogonType Interactive -RunLevel Limited
$settings = New-ScheduledTaskSettingsSet -StartWhenAvailable -AllowStartIfOnBatteries -DontStopIfGoingOnBatteries -ExecutionTimeLimit ([TimeSpan]::Zero)

Register-ScheduledTask -TaskName $taskName -Action $action -Trigger $trigger -Principal $principal -Settings $settings -Description {description_literal} -Force | Out-Null
Write-Output "Autostart task configured: $taskName"
""".strip()


def build_remove_task_script(task_name: str = TASK_NAME) -> str:
    task_literal = _ps_single_quoted(task_name)
    return f"""
$ErrorActionPreference = 'Stop'
$taskName = {task_literal}
$task = Get-ScheduledTask -TaskName $taskName -ErrorAction SilentlyContinue
if ($null -eq $task) {{
    Write-Output "Autostart task not found: $taskName"
    exit 0
}}
Unregister-ScheduledTask -TaskName $taskName -Confirm:$false
Write-Output "Autostart task removed: $taskName"
""".strip()


def build_query_task_script(task_name: str = TASK_NAME) -> str:
    task_literal = _ps_single_quoted(task_name)
    return f"""
$task = Get-ScheduledTask -TaskName {task_literal} -ErrorAction SilentlyContinue
if ($null -eq $task) {{
    Write-Output "Not configured"
    exit 0
}}
Write-Output ("Configured (" + $task.State + ")")
""".strip()


def _run_powershell(command: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [
            "powershell",
            "-NoProfile",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            command,
        ],
        capture_output=True,
        text=True,
        check=False,
    )


def run_task_script(script: str) -> str:
    """Run a Task Scheduler script and return its output, raising on failure."""
    if sys.platform != "win32":
        raise AutostartError("Autostart is only supported on Windows.")

    try:
        completed = _run_powershell(script)
    except OSError as exc:
        raise AutostartError(f"Unable to start PowerShell: {exc}") from exc

    output = (completed.stdout or "").strip()
    errors = (completed.stderr or "").strip()
    if completed.returncode == 0:
        return output

    detail = errors or output or f"PowerShell exited with code {completed.returncode}."
    raise AutostartError(detail)


def parse_task_status(output: str) -> bool:
    text = output.strip()
    if text.startswith("Configured"):
        # A task the user disabled in Task Scheduler will not run at logon.
        return "(Disabled)" not in text
    if text == "Not configured":
        return False
    raise AutostartError(f"Unexpected autostart status: {text or '<empty>'}")


class WindowsAutostart:
    """Autostart registration backed by a per-user logon task."""

    def __init__(self, command: LaunchCommand, task_name: str = TASK_NAME) -> None:
        self.command = command
        self.task_name = task_name

    async def is_enabled(self) -> bool:
        output = await asyncio.to_thread(run_task_script, build_query_task_script(self.task_name))
        return parse_task_status(output)

    async def enable(self) -> None:
        script = build_register_task_script(command=self.command, task_name=self.task_name)
        message = await asyncio.to_thread(run_task_script, script)
        logger.info("%s", message or f"Autostart task configured: {self.task_name}")

    async def disable(self) -> None:
        script = build_remove_task_script(self.task_name)
        message = await asyncio.to_thread(run_task_script, script)
        logger.info("%s", message or f"Autostart task removed: {self.task_name}")
