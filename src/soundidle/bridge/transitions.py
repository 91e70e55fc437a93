from __future__ import annotations

from dataclasses import replace

from .models import (
    AutostartChanged,
    AutostartQueried,
    Event,
    Ok,
    PushTimeout,
    SaveRequested,
    SetAutostart,
    SettingsState,
    StoredTimeoutLoaded,
    TimeoutEdited,
    TimeoutPolicy,
    TimeoutPushed,
    ToggleRequested,
    Transition,
    WriteStoredTimeout,
)


def initial_state(policy: TimeoutPolicy) -> SettingsState:
    return SettingsState(timeout_minutes=policy.default_minutes)


def reduce(state: SettingsState, event: Event, policy: TimeoutPolicy) -> Transition:
    """Compute the next state and the side effects an event calls for.

    Each event touches one field only: autostart events never modify the
    timeout and timeout events never modify the autostart flag.
    """
    if isinstance(event, AutostartQueried):
        if isinstance(event.outcome, Ok):
            return Transition(replace(state, autostart_enabled=bool(event.outcome.value)))
        return Transition(state)

    if isinstance(event, StoredTimeoutLoaded):
        if event.minutes is None or event.minutes < 0:
            return Transition(state)
        return Transition(
            replace(state, timeout_minutes=event.minutes, timeout_dirty=False),
            (PushTimeout(event.minutes, best_effort=True),),
        )

    if isinstance(event, TimeoutEdited):
        return Transition(replace(state, timeout_minutes=event.minutes, timeout_dirty=True))

    if isinstance(event, SaveRequested):
        minutes = policy.clamp(event.minutes)
        return Transition(
            replace(state, timeout_minutes=minutes, timeout_dirty=True),
            (WriteStoredTimeout(minutes), PushTimeout(minutes)),
        )

    if isinstance(event, TimeoutPushed):
        if isinstance(event.outcome, Ok) and state.timeout_minutes == event.minutes:
            return Transition(replace(state, timeout_dirty=False))
        return Transition(state)

    if isinstance(event, ToggleRequested):
        return Transition(state, (SetAutostart(not state.autostart_enabled),))

    if isinstance(event, AutostartChanged):
        if isinstance(event.outcome, Ok):
            return Transition(replace(state, autostart_enabled=event.enabled))
        return Transition(state)

    raise TypeError(f"Unsupported settings event: {event!r}")
