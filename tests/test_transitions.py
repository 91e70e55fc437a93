from __future__ import annotations

import pytest

from soundidle.bridge.models import (
    AutostartChanged,
    AutostartQueried,
    Err,
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
    WriteStoredTimeout,
    coerce_minutes,
)
from soundidle.bridge.transitions import initial_state, reduce

POLICY = TimeoutPolicy()


def test_initial_state_uses_policy_default() -> None:
    assert initial_state(TimeoutPolicy(default_minutes=9)).timeout_minutes == 9


def test_stored_value_updates_state_and_requests_best_effort_push() -> None:
    transition = reduce(SettingsState(), StoredTimeoutLoaded(17), POLICY)

    assert transition.state.timeout_minutes == 17
    assert transition.effects == (PushTimeout(17, best_effort=True),)


@pytest.mark.parametrize("stored", [None, -1])
def test_missing_or_negative_stored_value_changes_nothing(stored: int | None) -> None:
    state = SettingsState()

    transition = reduce(state, StoredTimeoutLoaded(stored), POLICY)

    assert transition.state == state
    assert transition.effects == ()


def test_failed_autostart_query_keeps_cached_value() -> None:
    state = SettingsState(autostart_enabled=False)

    transition = reduce(state, AutostartQueried(Err(RuntimeError("no registry"))), POLICY)

    assert transition.state.autostart_enabled is False


def test_save_requests_write_then_push_with_clamped_value() -> None:
    transition = reduce(SettingsState(), SaveRequested(-3), POLICY)

    assert transition.state.timeout_minutes == 1
    assert transition.effects == (WriteStoredTimeout(1), PushTimeout(1))


def test_successful_push_clears_unsaved_flag_for_matching_value_only() -> None:
    state = SettingsState(timeout_minutes=12, timeout_dirty=True)

    matched = reduce(state, TimeoutPushed(12, Ok(None)), POLICY)
    stale = reduce(state, TimeoutPushed(11, Ok(None)), POLICY)

    assert matched.state.timeout_dirty is False
    assert stale.state.timeout_dirty is True


def test_toggle_requests_opposite_of_cached_flag_without_changing_it() -> None:
    state = SettingsState(autostart_enabled=True)

    transition = reduce(state, ToggleRequested(), POLICY)

    assert transition.state.autostart_enabled is True
    assert transition.effects == (SetAutostart(False),)


def test_autostart_flag_moves_only_on_confirmed_change() -> None:
    state = SettingsState(autostart_enabled=False)

    failed = reduce(state, AutostartChanged(True, Err(RuntimeError("denied"))), POLICY)
    confirmed = reduce(state, AutostartChanged(True, Ok(None)), POLICY)

    assert failed.state.autostart_enabled is False
    assert confirmed.state.autostart_enabled is True


def test_timeout_events_leave_autostart_alone() -> None:
    state = SettingsState(autostart_enabled=True)

    edited = reduce(state, TimeoutEdited(40), POLICY)

    assert edited.state.autostart_enabled is True
    assert edited.state.timeout_minutes == 40
    assert edited.effects == ()


def test_unknown_event_is_rejected() -> None:
    with pytest.raises(TypeError):
        reduce(SettingsState(), object(), POLICY)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("text", "expected"),
    [("12", 12), ("", 0), ("abc", 0), ("7min", 7), (" 30", 30), ("9" * 5000, 0)],
)
def test_coerce_minutes(text: str, expected: int) -> None:
    assert coerce_minutes(text) == expected
