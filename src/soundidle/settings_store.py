from __future__ import annotations

import logging
import re

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

TIMEOUT_KEY = "sound_inactivity_timeout"

_INTEGER_RE = re.compile(r"[+-]?\d+")


class SettingsStore:
    """Reads and writes the persisted inactivity timeout.

    Malformed stored text is reported as absent so that callers fall back to
    the default. Backend failures surface as `StorageError`.
    """

    def __init__(self, backend: KeyValueStore, key: str = TIMEOUT_KEY) -> None:
        self.backend = backend
        self.key = key

    def read(self) -> int | None:
        raw = self.backend.kv_get(self.key)
        if raw is None:
            return None
        return parse_stored_minutes(raw)

    def write(self, minutes: int) -> None:
        self.backend.kv_set(self.key, str(int(minutes)))
        logger.debug("stored timeout key=%s minutes=%s", self.key, minutes)


def parse_stored_minutes(raw: str) -> int | None:
    text = raw.strip()
    if not _INTEGER_RE.fullmatch(text):
        logger.info("Ignoring malformed stored timeout value=%r", raw)
        return None
    try:
        return int(text)
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        logger.info("Ignoring oversized stored timeout length=%s", len(text))
        return None
