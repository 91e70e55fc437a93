from __future__ import annotations

import asyncio

import pytest

from soundidle.bridge import SettingsBridge, TimeoutPolicy
from soundidle.errors import StorageError
from soundidle.kv_store import MemoryKeyValueStore
from soundidle.settings_store import SettingsStore


class RecordingKeyValueStore(MemoryKeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False
        self.fail_reads = False

    def kv_get(self, k: str) -> str | None:
        if self.fail_reads:
            raise StorageError("database is locked")
        return super().kv_get(k)

    def kv_set(self, k: str, v: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.writes.append((k, v))
        super().kv_set(k, v)


class FakeAutostart:
    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self.calls: list[str] = []
        self.query_error: Exception | None = None
        self.enable_error: Exception | None = None
        self.disable_error: Exception | None = None

    async def is_enabled(self) -> bool:
        self.calls.append("is_enabled")
        await asyncio.sleep(0)
        if self.query_error is not None:
            raise self.query_error
        return self.enabled

    async def enable(self) -> None:
        self.calls.append("enable")
        await asyncio.sleep(0)
        if self.enable_error is not None:
            raise self.enable_error
        self.enabled = True

    async def disable(self) -> None:
        self.calls.append("disable")
        await asyncio.sleep(0)
        if self.disable_error is not None:
            raise self.disable_error
        self.enabled = False


class FakeTimeoutService:
    def __init__(self) -> None:
        self.pushed: list[int] = []
        self.error: Exception | None = None

    async def set_inactivity_timeout(self, minutes: int) -> None:
        self.pushed.append(minutes)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error


@pytest.fixture
def kv() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture
def autostart() -> FakeAutostart:
    return FakeAutostart()


@pytest.fixture
def service() -> FakeTimeoutService:
    return FakeTimeoutService()


@pytest.fixture
def make_bridge(kv: RecordingKeyValueStore, autostart: FakeAutostart, service: FakeTimeoutService):
    def factory(policy: TimeoutPolicy | None = None) -> SettingsBridge:
        return SettingsBridge(
            store=SettingsStore(kv),
            autostart=autostart,
            timeout_service=service,
            policy=policy,
        )

    return factory
