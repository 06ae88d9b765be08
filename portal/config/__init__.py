"""Configuration package for portal settings, environment endpoints, and startup validation."""

from .settings import AppSettings, SettingsLoadError, config_load_database_url, config_load_settings

__all__ = ["AppSettings", "SettingsLoadError", "config_load_database_url", "config_load_settings"]
