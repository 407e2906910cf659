"""
Utilities package
Logging, lyric helpers and polling/debounce utilities
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
)
from .helpers import (
    clean_lyrics_text,
    validate_lyrics_content,
    select_excerpt,
    rebuild_excerpt,
    sanitize_filename,
    format_duration,
)
from .timing import poll_until, Debouncer

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',

    # Helper exports
    'clean_lyrics_text',
    'validate_lyrics_content',
    'select_excerpt',
    'rebuild_excerpt',
    'sanitize_filename',
    'format_duration',

    # Timing exports
    'poll_until',
    'Debouncer',
]
