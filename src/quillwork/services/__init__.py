"""Service layer (configuration)."""

from .settings import Settings, SettingsStore, load_settings

__all__ = ["Settings", "SettingsStore", "load_settings"]
