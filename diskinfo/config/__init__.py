"""Configuration loading for diskinfo."""

from .settings import LOG_LEVELS, Settings, load_settings, split_types

__all__ = ["LOG_LEVELS", "Settings", "load_settings", "split_types"]
