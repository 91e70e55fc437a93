from __future__ import annotations


class SoundIdleError(Exception):
    """Base class for SoundIdle failures."""


class StorageError(SoundIdleError, OSError):
    """The durable settings backend could not be read or written."""


class AutostartError(SoundIdleError):
    """The OS autostart registration could not be queried or changed."""


class TimeoutServiceError(SoundIdleError):
    """The native inactivity service rejected or did not receive a timeout."""
