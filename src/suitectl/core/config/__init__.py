"""
Configuration for suitectl.

Usage::

    from suitectl.core.config import get_settings

    settings = get_settings()
    print(settings.batch_threads)
"""

from .settings import (
    DEFAULT_CONFIG_FILE,
    SuiteSettings,
    clear_settings_cache,
    get_settings,
    read_config_file,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "SuiteSettings",
    "clear_settings_cache",
    "get_settings",
    "read_config_file",
]
