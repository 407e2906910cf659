"""
WPM and accuracy scoring.

A "word" is five typed characters. The penalized WPM subtracts a fixed
number of words per incorrect character and is floored at zero.
"""

import math

from .models import TypingResult

CHARS_PER_WORD = 5
DEFAULT_ERROR_PENALTY = 3


def raw_wpm(characters_typed: int, active_seconds: float) -> float:
    """Unpenalized words per minute; 0 when nothing was typed or no time passed"""
    if characters_typed <= 0 or active_seconds <= 0:
        return 0.0
    value = (characters_typed / CHARS_PER_WORD) / (active_seconds / 60)
    return value if math.isfinite(value) else 0.0


def penalized_wpm(raw: float, incorrect_count: int, penalty: float = DEFAULT_ERROR_PENALTY) -> float:
    return max(raw - incorrect_count * penalty, 0.0)


def accuracy(characters_typed: int, incorrect_count: int) -> float:
    """Share of typed characters that are correct, as a percentage"""
    if characters_typed <= 0:
        return 0.0
    value = (characters_typed - incorrect_count) / characters_typed * 100
    return min(max(value, 0.0), 100.0)


def score(
    characters_typed: int,
    incorrect_count: int,
    active_seconds: float,
    penalty: float = DEFAULT_ERROR_PENALTY,
    ended_early: bool = False
) -> TypingResult:
    """
    Compute the final result of a typing test

    Zero characters or zero elapsed time both score 0 WPM and 0% accuracy.
    """
    active_seconds = max(active_seconds, 0.0)

    if characters_typed <= 0 or active_seconds <= 0:
        return TypingResult(
            wpm=0.0,
            raw_wpm=0.0,
            accuracy=0.0,
            characters_typed=max(characters_typed, 0),
            incorrect_count=incorrect_count,
            active_seconds=active_seconds,
            ended_early=ended_early,
        )

    raw = raw_wpm(characters_typed, active_seconds)
    return TypingResult(
        wpm=penalized_wpm(raw, incorrect_count, penalty),
        raw_wpm=raw,
        accuracy=accuracy(characters_typed, incorrect_count),
        characters_typed=characters_typed,
        incorrect_count=incorrect_count,
        active_seconds=active_seconds,
        ended_early=ended_early,
    )
