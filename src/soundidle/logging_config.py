from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

NOISY_LOGGERS = ("asyncio", "PyQt6")

_installed_handlers: list[logging.Handler] = []


def configure_logging(log_path: Path, level: str = "INFO") -> None:
    """Attach console and rotating-file handlers to the root logger.

    Calling it again replaces the handlers installed by the previous call, so
    a process never logs the same record twice.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    _remove_installed_handlers(root)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)

    file_handler = RotatingFileHandler(
        log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)

    for handler in (console, file_handler):
        root.addHandler(handler)
        _installed_handlers.append(handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def _remove_installed_handlers(root: logging.Logger) -> None:
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
