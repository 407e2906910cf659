"""
Typing test sessions: state machine, scoring and live WPM
"""

from .models import SessionState, EventKind, SessionEvent, TypingResult
from .scoring import raw_wpm, penalized_wpm, accuracy, score, CHARS_PER_WORD, DEFAULT_ERROR_PENALTY
from .typing_session import TypingSession, END_TEST_CHAR
from .live import LiveWpmMonitor

__all__ = [
    'SessionState',
    'EventKind',
    'SessionEvent',
    'TypingResult',
    'raw_wpm',
    'penalized_wpm',
    'accuracy',
    'score',
    'CHARS_PER_WORD',
    'DEFAULT_ERROR_PENALTY',
    'TypingSession',
    'END_TEST_CHAR',
    'LiveWpmMonitor',
]
