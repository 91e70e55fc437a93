from __future__ import annotations

import logging
import sys
from threading import Lock

from .config import DEFAULT_TIMEOUT_MINUTES
from .errors import TimeoutServiceError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_SECONDS = DEFAULT_TIMEOUT_MINUTES * 60


class InactivityTimeoutService:
    """Configuration entry point of the background audio-inactivity monitor.

    The monitor itself lives outside this package and polls
    `threshold_seconds`; this class only validates and records the value it
    should use.
    """

    def __init__(self, *, allow_unsupported_platform: bool = False) -> None:
        self._allow_unsupported_platform = allow_unsupported_platform
        self._lock = Lock()
        self._threshold_seconds = DEFAULT_THRESHOLD_SECONDS

    @property
    def threshold_seconds(self) -> int:
        with self._lock:
            return self._threshold_seconds

    def apply_minutes(self, minutes: int | None) -> int:
        if minutes is None:
            minutes = DEFAULT_TIMEOUT_MINUTES
        if minutes < 0:
            raise TimeoutServiceError("The inactivity timeout cannot be negative.")
        if minutes == 0:
            raise TimeoutServiceError("The inactivity timeout must be greater than zero.")
        if sys.platform != "win32" and not self._allow_unsupported_platform:
            raise TimeoutServiceError("Sound inactivity monitoring is only available on Windows.")

        seconds = max(1, int(minutes) * 60)
        with self._lock:
            self._threshold_seconds = seconds
        logger.info("inactivity threshold updated seconds=%s", seconds)
        return seconds

    async def set_inactivity_timeout(self, minutes: int) -> None:
        self.apply_minutes(minutes)
