from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(no_args_is_help=True, add_completion=False)

CONFIG_OPTION = typer.Option(None, "--config", help="Path to config.toml")
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging.")
MINIMIZED_OPTION = typer.Option(False, "--minimized", help="Start hidden in the tray.")
MINUTES_OPTION = typer.Option(..., "--minutes", help="Inactivity timeout in minutes.")


@app.command()
def gui(
    config: Path | None = CONFIG_OPTION,
    minimized: bool = MINIMIZED_OPTION,
) -> None:
    """Open the SoundIdle settings window."""
    from .commands.gui import gui as gui_command

    gui_command(config=config, minimized=minimized)


@app.command()
def status(
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Load the stored timeout and autostart state and print them."""
    from .commands.settings import status as status_command

    status_command(config=config, debug=debug)


@app.command()
def save(
    minutes: int = MINUTES_OPTION,
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Store the timeout; it takes effect when SoundIdle next starts."""
    from .commands.settings import save as save_command

    save_command(minutes=minutes, config=config, debug=debug)


@app.command()
def autostart(
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Toggle launching SoundIdle at logon."""
    from .commands.settings import autostart as autostart_command

    autostart_command(config=config, debug=debug)
