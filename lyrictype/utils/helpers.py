"""
Utility functions and helpers for lyrictype
Common functions for lyric cleanup, excerpt selection and string formatting
"""

import random
import re
import unicodedata
from typing import Optional, Sequence, Tuple, Union


# Bare section labels left behind once the brackets are gone
_SECTION_LABEL = re.compile(
    r'^(Intro|Verse|Chorus|Bridge|Outro|Pre-Chorus|Post-Chorus|Hook|Refrain)(\s|\d|:|$)',
    re.IGNORECASE
)
_BRACKETED_LINE = re.compile(r'^\[.*\]$')
# Lines are already split on newlines, so \s here only matches the spaces
# scraped pages leave between words (tabs, NBSP, U+2000-U+200A, U+205F...)
_INLINE_WHITESPACE = re.compile(r'\s+')
_ZERO_WIDTH = re.compile('[\u200b\ufeff]')


def clean_lyrics_text(lyrics: str) -> str:
    """
    Clean lyrics text by removing section headers and blank lines

    Every run of whitespace inside a line becomes a single ASCII space so
    the text can be typed on a normal keyboard.

    Args:
        lyrics: Raw lyrics text

    Returns:
        Cleaned lyrics text, one non-empty trimmed line per lyric line
    """
    if not lyrics:
        return ""

    lines = []
    for line in lyrics.replace('\r\n', '\n').split('\n'):
        line = _INLINE_WHITESPACE.sub(' ', _ZERO_WIDTH.sub('', line)).strip()
        if not line:
            continue
        if _BRACKETED_LINE.match(line):
            continue
        if _SECTION_LABEL.match(line):
            continue
        # Inline headers such as "[Chorus: Artist] first words"
        line = re.sub(r'\[[^\]]*\]', '', line)
        line = _INLINE_WHITESPACE.sub(' ', line).strip()
        if line:
            lines.append(line)

    return '\n'.join(lines)


def validate_lyrics_content(lyrics: Optional[str], min_length: int = 10) -> bool:
    """
    Validate if lyrics content is usable for a typing test

    Args:
        lyrics: Lyrics text to validate
        min_length: Minimum length for valid lyrics

    Returns:
        True if lyrics are valid
    """
    if not lyrics or len(lyrics.strip()) < min_length:
        return False

    no_lyrics_indicators = [
        'instrumental',
        'lyrics not available',
        'lyrics for this song have yet to be released',
        'sorry, no lyrics',
    ]

    lyrics_lower = lyrics.lower()
    if len(lyrics_lower) < 200:
        for indicator in no_lyrics_indicators:
            if indicator in lyrics_lower:
                return False

    return True


def select_excerpt(
    lyrics: str,
    line_count: int = 4,
    rng: Optional[random.Random] = None
) -> Tuple[str, Tuple[int, ...]]:
    """
    Pick a random window of consecutive non-empty lines

    Args:
        lyrics: Full lyrics text
        line_count: Number of consecutive lines to keep
        rng: Random source, module-level random when None

    Returns:
        Tuple of (excerpt text, indices of the chosen lines among the
        non-empty lines). Lyrics with no content give ("", ()).
    """
    lines = [line for line in lyrics.split('\n') if line.strip()]
    if not lines:
        return "", ()

    if len(lines) <= line_count:
        indices = tuple(range(len(lines)))
    else:
        start = (rng or random).randint(0, len(lines) - line_count)
        indices = tuple(range(start, start + line_count))

    return rebuild_excerpt(lyrics, indices), indices


def rebuild_excerpt(lyrics: str, indices: Sequence[int]) -> str:
    """Rebuild an excerpt from line indices chosen by select_excerpt"""
    lines = [line for line in lyrics.split('\n') if line.strip()]
    return '\n'.join(lines[i] for i in indices if 0 <= i < len(lines))


def sanitize_filename(filename: str, max_length: int = 200) -> str:
    """
    Sanitize filename for cross-platform compatibility

    Args:
        filename: Original filename
        max_length: Maximum filename length

    Returns:
        Sanitized filename, "unknown" when nothing usable is left
    """
    if not filename:
        return "unknown"

    filename = unicodedata.normalize('NFC', filename.strip())

    # Characters not allowed in Windows filenames
    filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '_', filename)
    filename = re.sub(r'\s+', ' ', filename).strip(' .')

    if len(filename) > max_length:
        if '.' in filename:
            name, ext = filename.rsplit('.', 1)
            filename = f"{name[:max_length - len(ext) - 1]}.{ext}"
        else:
            filename = filename[:max_length]

    return filename or "unknown"


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds as M:SS or H:MM:SS

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0:
        seconds = 0

    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
