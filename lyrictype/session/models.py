"""
Data models for typing sessions
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .typing_session import TypingSession


class SessionState(Enum):
    """Lifecycle of a typing test"""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class EventKind(Enum):
    """Kinds of notifications a TypingSession emits to its subscribers"""
    STARTED = "started"
    INPUT = "input"
    REJECTED = "rejected"
    PAUSED = "paused"
    RESUMED = "resumed"
    COMPLETED = "completed"
    RESET = "reset"


@dataclass(frozen=True)
class SessionEvent:
    """
    Notification emitted after a session changed

    Attributes:
        kind: What happened
        session: The session, already in its new state
        data: Extra event payload (the rejected value for REJECTED)
    """
    kind: EventKind
    session: "TypingSession"
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TypingResult:
    """
    Final score of a typing test

    Attributes:
        wpm: Words per minute after the error penalty, never negative
        raw_wpm: Words per minute before the penalty
        accuracy: Percentage of typed characters that were correct, 0-100
        characters_typed: Length of the typed input at completion
        incorrect_count: Characters tagged incorrect at completion
        active_seconds: Elapsed time excluding pauses
        ended_early: True when the test was ended before the last character
    """
    wpm: float
    raw_wpm: float
    accuracy: float
    characters_typed: int
    incorrect_count: int
    active_seconds: float
    ended_early: bool = False

    @property
    def duration_minutes(self) -> float:
        return self.active_seconds / 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            'wpm': round(self.wpm, 2),
            'raw_wpm': round(self.raw_wpm, 2),
            'accuracy': round(self.accuracy, 2),
            'characters_typed': self.characters_typed,
            'incorrect_count': self.incorrect_count,
            'active_seconds': round(self.active_seconds, 2),
            'ended_early': self.ended_early,
        }
