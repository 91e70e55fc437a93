from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer

from ..bridge import OperationResult, SettingsState
from ..config import AppConfig, load_config
from ..errors import StorageError
from ..logging_config import configure_logging
from ..runtime import Runtime, open_runtime

logger = logging.getLogger(__name__)
CONFIG_OPTION = typer.Option(None, "--config", help="Path to config.toml")
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging.")
MINUTES_OPTION = typer.Option(..., "--minutes", help="Inactivity timeout in minutes.")


def status(
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Load the stored timeout and autostart state and print them."""
    runtime = _open(config, debug=debug)
    try:
        state = asyncio.run(runtime.bridge.initialize(push_timeout=False))
    finally:
        runtime.close()

    typer.echo(_format_state(state))
    raise typer.Exit(code=0)


def save(
    minutes: int = MINUTES_OPTION,
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Store the timeout; the inactivity monitor picks it up when SoundIdle next starts."""
    runtime = _open(config, debug=debug)
    stored = runtime.bridge.policy.clamp(minutes)
    try:
        runtime.store.write(stored)
    except StorageError as exc:
        logger.error("timeout storage write failed: %s", exc)
        typer.echo(f"[fail] Unable to store timeout: {exc}", err=True)
        raise typer.Exit(code=4) from None
    finally:
        runtime.close()

    logger.info("timeout stored from cli minutes=%s", stored)
    typer.echo(f"[ok] Timeout stored as {stored} minute(s); applied when SoundIdle next starts.")
    raise typer.Exit(code=0)


def autostart(
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Toggle launching SoundIdle at logon."""
    runtime = _open(config, debug=debug)
    try:
        result = asyncio.run(_toggle(runtime))
    finally:
        runtime.close()

    _report(result)


async def _toggle(runtime: Runtime) -> OperationResult:
    # The toggle direction depends on the registry's current state.
    await runtime.bridge.initialize(push_timeout=False)
    return await runtime.bridge.toggle_autostart()


def _open(config: Path | None, *, debug: bool) -> Runtime:
    cfg = _load(config)
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    configure_logging(cfg.log_path, level="DEBUG" if debug else cfg.logging.level)
    try:
        return open_runtime(cfg)
    except StorageError as exc:
        logger.exception("Settings database unavailable")
        typer.echo(f"[fail] {exc}", err=True)
        raise typer.Exit(code=2) from None


def _load(config: Path | None) -> AppConfig:
    try:
        return load_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _report(result: OperationResult) -> None:
    if result.ok:
        typer.echo(f"[ok] {result.message}")
        typer.echo(_format_state(result.state))
        raise typer.Exit(code=0)
    typer.echo(f"[fail] {result.message}", err=True)
    raise typer.Exit(code=4)


def _format_state(state: SettingsState) -> str:
    return (
        "settings: "
        f"timeout_minutes={state.timeout_minutes} "
        f"autostart={'on' if state.autostart_enabled else 'off'}"
    )
