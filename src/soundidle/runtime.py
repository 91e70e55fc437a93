from __future__ import annotations

from dataclasses import dataclass

from .autostart import LaunchCommand, WindowsAutostart
from .bridge import SettingsBridge, TimeoutPolicy
from .config import AppConfig
from .kv_store import SqliteKeyValueStore
from .settings_store import SettingsStore
from .timeout_service import InactivityTimeoutService


@dataclass
class Runtime:
    bridge: SettingsBridge
    store: SettingsStore
    kv: SqliteKeyValueStore

    def close(self) -> None:
        self.kv.close()


def open_runtime(cfg: AppConfig) -> Runtime:
    """Wire the bridge to the on-disk store and the real OS adapters."""
    kv = SqliteKeyValueStore(cfg.state_db_path)
    store = SettingsStore(kv)
    timeout_service = InactivityTimeoutService(
        allow_unsupported_platform=cfg.service.allow_unsupported_platform
    )
    autostart = WindowsAutostart(
        LaunchCommand.for_current_interpreter(cfg.autostart.launch_args),
        task_name=cfg.autostart.task_name,
    )
    bridge = SettingsBridge(
        store=store,
        autostart=autostart,
        timeout_service=timeout_service,
        policy=TimeoutPolicy.from_config(cfg.timeout),
    )
    return Runtime(bridge=bridge, store=store, kv=kv)
