"""
Core package: exceptions and local state persistence

The state store lives in ``lyrictype.core.state``; it is not re-exported
here because the settings module imports these exceptions.
"""

from .exceptions import (
    LyricTypeError,
    ConfigError,
    LyricsAPIError,
    ArtistLoadError,
    StateFileError,
)

__all__ = [
    'LyricTypeError',
    'ConfigError',
    'LyricsAPIError',
    'ArtistLoadError',
    'StateFileError',
]
