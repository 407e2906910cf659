"""
Cursor tracking over tokenized lyrics.

The only source of truth for the cursor is the length of the typed input;
the (token, character) position is recomputed from it on demand.
"""

from dataclasses import dataclass
from typing import List

from .tokens import Token


@dataclass(frozen=True)
class CursorPosition:
    """
    Position of the typing cursor

    Attributes:
        token_index: Token the cursor is in
        char_index: Characters of that token already consumed
                    (0 = before its first character)
        at_end: True for the end sentinel, after the last character
    """
    token_index: int
    char_index: int
    at_end: bool = False


def locate(tokens: List[Token], input_length: int) -> CursorPosition:
    """
    Map a typed-input length onto the token structure

    Args:
        tokens: Tokenized lyrics
        input_length: Number of characters typed so far; clamped to
                      [0, total length]

    Returns:
        CursorPosition; the end sentinel (last token, its full length)
        once every character has been typed
    """
    if not tokens:
        return CursorPosition(0, 0, at_end=True)

    remaining = max(0, input_length)
    for index, token in enumerate(tokens):
        if remaining < token.length:
            return CursorPosition(index, remaining)
        remaining -= token.length

    last = len(tokens) - 1
    return CursorPosition(last, tokens[last].length, at_end=True)
