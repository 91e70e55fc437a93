from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .paths import default_config_path, default_data_dir

DEFAULT_TIMEOUT_MINUTES = 5
DEFAULT_LAUNCH_ARGS = ("gui", "--minimized")


@dataclass(frozen=True)
class TimeoutConfig:
    default_minutes: int = DEFAULT_TIMEOUT_MINUTES
    min_minutes: int = 1
    max_minutes: int = 24 * 60


@dataclass(frozen=True)
class AutostartConfig:
    task_name: str = "SoundIdle"
    launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS


@dataclass(frozen=True)
class ServiceConfig:
    # Lets the timeout service accept values on non-Windows hosts (tests, dev boxes).
    allow_unsupported_platform: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    autostart: AutostartConfig = field(default_factory=AutostartConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def state_db_path(self) -> Path:
        return self.data_dir / "state.db"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "soundidle.log"


def load_config(path: Path | None = None) -> AppConfig:
    """Load config.toml.

    If `path` is None, load from the default data dir. A missing file is not
    an error: every setting has a default.
    """
    data_dir = default_data_dir()
    cfg_path = path or default_config_path()
    raw: dict[str, object] = {}
    if cfg_path.exists():
        raw = tomllib.loads(cfg_path.read_text(encoding="utf-8-sig"))

    data_dir = Path(str(raw.get("data_dir", str(data_dir))))

    timeout_raw = _section(raw, "timeout")
    timeout = TimeoutConfig(
        default_minutes=int(timeout_raw.get("default_minutes", DEFAULT_TIMEOUT_MINUTES)),
        min_minutes=int(timeout_raw.get("min_minutes", 1)),
        max_minutes=int(timeout_raw.get("max_minutes", 24 * 60)),
    )
    if timeout.min_minutes < 1:
        raise ValueError("[timeout] min_minutes must be at least 1.")
    if timeout.max_minutes < timeout.min_minutes:
        raise ValueError("[timeout] max_minutes must not be lower than min_minutes.")
    if not timeout.min_minutes <= timeout.default_minutes <= timeout.max_minutes:
        raise ValueError("[timeout] default_minutes must lie between min_minutes and max_minutes.")

    autostart_raw = _section(raw, "autostart")
    launch_args = autostart_raw.get("launch_args", list(DEFAULT_LAUNCH_ARGS))
    if not isinstance(launch_args, list):
        raise ValueError("[autostart] launch_args must be a list of strings.")
    autostart = AutostartConfig(
        task_name=str(autostart_raw.get("task_name", "SoundIdle")),
        launch_args=tuple(str(arg) for arg in launch_args),
    )

    service_raw = _section(raw, "service")
    service = ServiceConfig(
        allow_unsupported_platform=_parse_bool(
            service_raw.get("allow_unsupported_platform"), default=False
        ),
    )

    logging_raw = _section(raw, "logging")
    logging_cfg = LoggingConfig(level=str(logging_raw.get("level", "INFO")).upper())

    return AppConfig(
        data_dir=data_dir,
        timeout=timeout,
        autostart=autostart,
        service=service,
        logging=logging_cfg,
    )


def _section(raw: dict[str, object], name: str) -> dict[str, object]:
    value = raw.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{name}] must be a table.")
    return value


def _parse_bool(value: object, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
