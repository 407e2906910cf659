"""
Lyrics providers
"""

from .base import LyricsAPI, ImageRecolorer, recolor_or_original
from .genius import GeniusLyricsAPI, extract_artist_image_url, strip_page_artifacts

__all__ = [
    'LyricsAPI',
    'ImageRecolorer',
    'recolor_or_original',
    'GeniusLyricsAPI',
    'extract_artist_image_url',
    'strip_page_artifacts',
]
