"""
Configuration package for lyrictype

Settings are read from YAML (config.yaml in the user config directory or
the working directory) with environment overrides for secrets. The usual
access pattern is:

    from lyrictype.config import get_settings

    settings = get_settings()
    prefetch = settings.queue.prefetch_count
"""

from .settings import (
    get_settings,
    reload_settings,
    Settings,
    GameConfig,
    QueueConfig,
    LyricsConfig,
    SearchConfig,
    NetworkConfig,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings',
    'GameConfig',
    'QueueConfig',
    'LyricsConfig',
    'SearchConfig',
    'NetworkConfig',
    'LoggingConfig',
    'StorageConfig',
]
