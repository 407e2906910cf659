"""
Lyric tokenizer.

Splits display lyrics into words, spaces and newlines. Concatenating the
text of the returned tokens reproduces the input exactly.
"""

from typing import List

from .tokens import Character, NewlineToken, SpaceToken, Token, WordToken

SEPARATORS = (' ', '\n')


def tokenize(display_text: str) -> List[Token]:
    """
    Tokenize display lyrics

    Args:
        display_text: Lyrics after display normalization

    Returns:
        Ordered tokens; every separator is its own token and every other
        character belongs to exactly one WordToken
    """
    tokens: List[Token] = []
    word: List[Character] = []

    for ch in display_text or "":
        if ch in SEPARATORS:
            if word:
                tokens.append(WordToken(word))
                word = []
            tokens.append(SpaceToken() if ch == ' ' else NewlineToken())
        else:
            word.append(Character(ch))

    if word:
        tokens.append(WordToken(word))

    return tokens


def total_length(tokens: List[Token]) -> int:
    """Number of typeable characters across all tokens"""
    return sum(token.length for token in tokens)


def tokens_to_text(tokens: List[Token]) -> str:
    """Inverse of tokenize"""
    return ''.join(token.text for token in tokens)
