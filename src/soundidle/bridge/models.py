from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..config import DEFAULT_TIMEOUT_MINUTES, TimeoutConfig

T = TypeVar("T")

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class SettingsState:
    """UI-facing view of the two settings."""

    timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES
    autostart_enabled: bool = False
    initialized: bool = False
    # True while the UI holds an edit that has not been saved yet.
    timeout_dirty: bool = False


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error) or self.error.__class__.__name__


Outcome = Ok[T] | Err


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    message: str
    state: SettingsState


@dataclass(frozen=True)
class TimeoutPolicy:
    default_minutes: int = DEFAULT_TIMEOUT_MINUTES
    min_minutes: int = 1
    max_minutes: int = 24 * 60

    @classmethod
    def from_config(cls, cfg: TimeoutConfig) -> TimeoutPolicy:
        return cls(
            default_minutes=cfg.default_minutes,
            min_minutes=cfg.min_minutes,
            max_minutes=cfg.max_minutes,
        )

    def clamp(self, minutes: int) -> int:
        return max(self.min_minutes, min(self.max_minutes, int(minutes)))


def coerce_minutes(text: str) -> int:
    """Turn raw input text into minutes; anything non-numeric becomes 0."""
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        return 0


# Events


@dataclass(frozen=True)
class AutostartQueried:
    outcome: Outcome[bool]


@dataclass(frozen=True)
class StoredTimeoutLoaded:
    minutes: int | None


@dataclass(frozen=True)
class TimeoutEdited:
    minutes: int


@dataclass(frozen=True)
class SaveRequested:
    minutes: int


@dataclass(frozen=True)
class TimeoutPushed:
    minutes: int
    outcome: Outcome[None]


@dataclass(frozen=True)
class ToggleRequested:
    pass


@dataclass(frozen=True)
class AutostartChanged:
    enabled: bool
    outcome: Outcome[None]


Event = (
    AutostartQueried
    | StoredTimeoutLoaded
    | TimeoutEdited
    | SaveRequested
    | TimeoutPushed
    | ToggleRequested
    | AutostartChanged
)


# Effects


@dataclass(frozen=True)
class WriteStoredTimeout:
    minutes: int


@dataclass(frozen=True)
class PushTimeout:
    minutes: int
    best_effort: bool = False


@dataclass(frozen=True)
class SetAutostart:
    enabled: bool


Effect = WriteStoredTimeout | PushTimeout | SetAutostart


@dataclass(frozen=True)
class Transition:
    state: SettingsState
    effects: tuple[Effect, ...] = ()
