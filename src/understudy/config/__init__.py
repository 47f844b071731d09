"""Toolkit configuration."""

from understudy.config.settings import RestoreOrder, Settings, get_settings

__all__ = [
    "RestoreOrder",
    "Settings",
    "get_settings",
]
