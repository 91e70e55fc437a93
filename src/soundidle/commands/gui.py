from __future__ import annotations

import logging
from pathlib import Path

import typer

from ..config import load_config
from ..errors import StorageError
from ..logging_config import configure_logging

logger = logging.getLogger(__name__)
CONFIG_OPTION = typer.Option(None, "--config", help="Path to config.toml")
MINIMIZED_OPTION = typer.Option(False, "--minimized", help="Start hidden in the tray.")


def gui(
    config: Path | None = CONFIG_OPTION,
    minimized: bool = MINIMIZED_OPTION,
) -> None:
    """Open the SoundIdle settings window."""
    try:
        cfg = load_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    configure_logging(cfg.log_path, level=cfg.logging.level)

    try:
        from ..gui_app import launch_gui
    except ModuleNotFoundError as exc:
        typer.echo(
            "PyQt6 is required to launch the GUI. Install dependencies with `uv sync`.",
            err=True,
        )
        raise typer.Exit(code=2) from exc

    try:
        exit_code = launch_gui(config_path=config, minimized=minimized)
    except StorageError as exc:
        logger.exception("Settings database unavailable")
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from None
    raise typer.Exit(code=exit_code)
