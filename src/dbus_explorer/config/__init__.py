"""Configuration management for dbus-explorer."""

from dbus_explorer.config.loader import ConfigLoadError, load_config
from dbus_explorer.config.settings import ExplorerConfig

__all__ = [
    "ExplorerConfig",
    "ConfigLoadError",
    "load_config",
]
