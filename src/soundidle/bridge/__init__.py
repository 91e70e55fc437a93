from .engine import AutostartPort, SettingsBridge, TimeoutServicePort
from .models import OperationResult, SettingsState, TimeoutPolicy, coerce_minutes

__all__ = [
    "AutostartPort",
    "OperationResult",
    "SettingsBridge",
    "SettingsState",
    "TimeoutPolicy",
    "TimeoutServicePort",
    "coerce_minutes",
]
