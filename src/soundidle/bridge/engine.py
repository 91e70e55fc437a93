from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Protocol

from ..errors import StorageError
from ..settings_store import SettingsStore
from .models import (
    AutostartChanged,
    AutostartQueried,
    Effect,
    Err,
    Event,
    Ok,
    OperationResult,
    Outcome,
    PushTimeout,
    SaveRequested,
    SetAutostart,
    SettingsState,
    StoredTimeoutLoaded,
    TimeoutEdited,
    TimeoutPolicy,
    TimeoutPushed,
    ToggleRequested,
    WriteStoredTimeout,
)
from .transitions import initial_state, reduce

logger = logging.getLogger(__name__)

StateListener = Callable[[SettingsState], None]


class AutostartPort(Protocol):
    async def is_enabled(self) -> bool: ...

    async def enable(self) -> None: ...

    async def disable(self) -> None: ...


class TimeoutServicePort(Protocol):
    async def set_inactivity_timeout(self, minutes: int) -> None:
        """Hand the timeout to the native service; raise on rejection."""
        ...


class SettingsBridge:
    """Keeps UI state, stored settings and the external services consistent.

    All methods are meant to run on a single asyncio loop. The autostart flag
    and the timeout each have their own lock, so two toggles (or two saves)
    run one after the other while a toggle and a save may overlap.
    """

    def __init__(
        self,
        store: SettingsStore,
        autostart: AutostartPort,
        timeout_service: TimeoutServicePort,
        policy: TimeoutPolicy | None = None,
    ) -> None:
        self.store = store
        self.autostart = autostart
        self.timeout_service = timeout_service
        self.policy = policy or TimeoutPolicy()
        self._state = initial_state(self.policy)
        self._listeners: list[StateListener] = []
        self._autostart_lock = asyncio.Lock()
        self._timeout_lock = asyncio.Lock()

    @property
    def state(self) -> SettingsState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def initialize(self, *, push_timeout: bool = True) -> SettingsState:
        """Load both settings; with `push_timeout=False` nothing is handed to the service."""
        await asyncio.gather(self._load_autostart(), self._load_timeout(push_timeout))
        self._set_state(replace(self._state, initialized=True))
        logger.info(
            "settings initialized timeout_minutes=%s autostart_enabled=%s",
            self._state.timeout_minutes,
            self._state.autostart_enabled,
        )
        return self._state

    def edit_timeout(self, minutes: int) -> SettingsState:
        self._dispatch(TimeoutEdited(minutes))
        return self._state

    async def save(self, minutes: int) -> OperationResult:
        async with self._timeout_lock:
            for effect in self._dispatch(SaveRequested(minutes)):
                outcome = await self._execute(effect)
                if isinstance(effect, PushTimeout):
                    self._dispatch(TimeoutPushed(effect.minutes, outcome))
                if isinstance(outcome, Err):
                    return self._save_failed(effect, outcome)

            saved = self._state.timeout_minutes
            logger.info("timeout saved minutes=%s", saved)
            return OperationResult(
                ok=True, message=f"Timeout set to {saved} minute(s).", state=self._state
            )

    async def toggle_autostart(self) -> OperationResult:
        async with self._autostart_lock:
            effects = self._dispatch(ToggleRequested())
            for effect in effects:
                if not isinstance(effect, SetAutostart):
                    continue
                outcome = await self._execute(effect)
                self._dispatch(AutostartChanged(effect.enabled, outcome))
                action = "enable" if effect.enabled else "disable"
                if isinstance(outcome, Err):
                    logger.error("autostart %s failed: %s", action, outcome.message)
                    return OperationResult(
                        ok=False,
                        message=f"Unable to {action} autostart: {outcome.message}",
                        state=self._state,
                    )
                logger.info("autostart %sd", action)
            label = "enabled" if self._state.autostart_enabled else "disabled"
            return OperationResult(ok=True, message=f"Autostart {label}.", state=self._state)

    async def _load_autostart(self) -> None:
        async with self._autostart_lock:
            outcome = await _capture(self.autostart.is_enabled())
            if isinstance(outcome, Err):
                # Platforms without autostart support land here; keep the default silently.
                logger.warning("autostart state unavailable: %s", outcome.message)
            self._dispatch(AutostartQueried(outcome))

    async def _load_timeout(self, push_timeout: bool) -> None:
        async with self._timeout_lock:
            try:
                stored = self.store.read()
            except StorageError as exc:
                logger.warning("stored timeout unreadable, using default: %s", exc)
                stored = None
            if stored is not None and stored < 0:
                logger.info("ignoring negative stored timeout minutes=%s", stored)

            for effect in self._dispatch(StoredTimeoutLoaded(stored)):
                if isinstance(effect, PushTimeout) and not push_timeout:
                    continue
                outcome = await self._execute(effect)
                if isinstance(effect, PushTimeout):
                    self._dispatch(TimeoutPushed(effect.minutes, outcome))
                if isinstance(outcome, Err):
                    # Startup push is best-effort: the stored value stays authoritative
                    # and is pushed again on the next initialize or save.
                    logger.warning("startup timeout push discarded: %s", outcome.message)

    async def _execute(self, effect: Effect) -> Outcome[object]:
        if isinstance(effect, WriteStoredTimeout):
            try:
                self.store.write(effect.minutes)
            except StorageError as exc:
                return Err(exc)
            return Ok(None)
        if isinstance(effect, PushTimeout):
            return await _capture(self.timeout_service.set_inactivity_timeout(effect.minutes))
        if isinstance(effect, SetAutostart):
            if effect.enabled:
                return await _capture(self.autostart.enable())
            return await _capture(self.autostart.disable())
        raise TypeError(f"Unsupported settings effect: {effect!r}")

    def _save_failed(self, effect: Effect, outcome: Err) -> OperationResult:
        if isinstance(effect, WriteStoredTimeout):
            logger.error("timeout storage write failed: %s", outcome.message)
            message = f"Unable to store timeout: {outcome.message}"
        else:
            logger.error("timeout push failed: %s", outcome.message)
            message = f"Unable to apply timeout: {outcome.message}"
        return OperationResult(ok=False, message=message, state=self._state)

    def _dispatch(self, event: Event) -> tuple[Effect, ...]:
        transition = reduce(self._state, event, self.policy)
        self._set_state(transition.state)
        return transition.effects

    def _set_state(self, state: SettingsState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)


async def _capture(call: Awaitable[object]) -> Outcome[object]:
    try:
        value = await call
    except Exception as exc:
        return Err(exc)
    return Ok(value)
