"""Runs the settings bridge on one asyncio loop owned by a background thread."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopThread:
    """Owns an asyncio event loop running in a daemon thread.

    The GUI thread never touches bridge state directly; it hands coroutines
    and plain callables to this loop so every bridge operation runs on the
    same loop, in submission order.
    """

    def __init__(self, name: str = "soundidle-bridge") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name=self._name)
        self._thread.start()
        self._ready.wait()
        logger.debug("bridge loop started thread=%s", self._name)

    def _run_loop(self) -> None:
        assert self._loop is not None
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._ready.set)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()
            logger.debug("bridge loop closed")

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        if self._loop is None:
            coro.close()
            raise RuntimeError("Bridge loop is not running.")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call(self, callback: Callable[[], object]) -> None:
        if self._loop is None:
            raise RuntimeError("Bridge loop is not running.")
        self._loop.call_soon_threadsafe(callback)

    def stop(self, timeout: float = 5.0) -> None:
        loop = self._loop
        thread = self._thread
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("bridge loop did not stop within %.1fs", timeout)
        self._loop = None
        self._thread = None
        self._ready.clear()
