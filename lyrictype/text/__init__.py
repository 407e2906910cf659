"""
Lyric text processing: normalization, tokenization and cursor tracking
"""

from .normalizer import normalize_for_display, normalize_for_comparison, COMPARISON_SUBSTITUTIONS
from .tokens import CharState, Character, WordToken, SpaceToken, NewlineToken, Token
from .tokenizer import tokenize, total_length, tokens_to_text, SEPARATORS
from .cursor import CursorPosition, locate

__all__ = [
    'normalize_for_display',
    'normalize_for_comparison',
    'COMPARISON_SUBSTITUTIONS',
    'CharState',
    'Character',
    'WordToken',
    'SpaceToken',
    'NewlineToken',
    'Token',
    'tokenize',
    'total_length',
    'tokens_to_text',
    'SEPARATORS',
    'CursorPosition',
    'locate',
]
