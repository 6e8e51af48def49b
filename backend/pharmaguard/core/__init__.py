from .config import Settings, get_settings, reload_settings, update_settings

__all__ = [
    "Settings",
    "get_settings",
    "update_settings",
    "reload_settings",
]
