"""
Typing test state machine.

A TypingSession owns one lyric excerpt, the player's input and the timing
of the test. All methods are synchronous; time comes from an injectable
clock so the session can be driven deterministically.
"""

import time
from typing import Callable, List, Optional

from ..text.cursor import CursorPosition, locate
from ..text.normalizer import normalize_for_comparison, normalize_for_display
from ..text.tokenizer import tokenize
from ..text.tokens import CharState, Token
from ..utils.logger import get_logger
from .models import EventKind, SessionEvent, SessionState, TypingResult
from .scoring import DEFAULT_ERROR_PENALTY, penalized_wpm, raw_wpm, score

logger = get_logger(__name__)

# Typing this anywhere ends the test on the spot
END_TEST_CHAR = '~'

Listener = Callable[[SessionEvent], None]


class TypingSession:
    """
    Typing test over a single lyric text

    Lifecycle: NOT_STARTED -> RUNNING <-> PAUSED -> COMPLETED. The first
    accepted keystroke starts the clock; typing the last character, or the
    end-test character, completes the test and computes the result.

    Example:
        session = TypingSession("hello world")
        session.handle_keystroke("h")
        session.cursor  # CursorPosition(token_index=0, char_index=1)
    """

    def __init__(
        self,
        lyrics: str,
        capitalization: bool = True,
        punctuation: bool = True,
        clock: Callable[[], float] = time.monotonic,
        error_penalty: float = DEFAULT_ERROR_PENALTY
    ):
        """
        Initialize typing session

        Args:
            lyrics: Raw lyric text to type
            capitalization: Keep original casing
            punctuation: Keep punctuation
            clock: Returns the current time in seconds
            error_penalty: Words per minute subtracted per incorrect character
        """
        self.raw_lyrics = lyrics or ""
        self.capitalization = capitalization
        self.punctuation = punctuation
        self.error_penalty = error_penalty
        self._clock = clock
        self._listeners: List[Listener] = []

        self._build()

    def _build(self) -> None:
        """(Re)build display text, tokens and timing from the raw lyrics"""
        self.display_lyrics = normalize_for_display(self.raw_lyrics, self.capitalization, self.punctuation)
        self.comparison_lyrics = normalize_for_comparison(self.display_lyrics)
        self.tokens: List[Token] = tokenize(self.display_lyrics)
        self._cells = [cell for token in self.tokens for cell in token.cells]

        self.user_input = ""
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None
        self.paused_seconds = 0.0
        self.pause_started_at: Optional[float] = None
        self.state = SessionState.NOT_STARTED
        self.result: Optional[TypingResult] = None

    # Observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a SessionEvent after each change

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: EventKind, **data) -> None:
        event = SessionEvent(kind=kind, session=self, data=data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Session listener failed on {kind.value} event")

    # Derived views

    @property
    def cursor(self) -> CursorPosition:
        return locate(self.tokens, len(self.user_input))

    @property
    def characters_typed(self) -> int:
        return len(self.user_input)

    @property
    def incorrect_count(self) -> int:
        return sum(1 for cell in self._cells if cell.state is CharState.INCORRECT)

    @property
    def correct_count(self) -> int:
        return sum(1 for cell in self._cells if cell.state is CharState.CORRECT)

    @property
    def total_length(self) -> int:
        return len(self.display_lyrics)

    @property
    def is_completed(self) -> bool:
        return self.state is SessionState.COMPLETED

    @property
    def progress(self) -> float:
        """Fraction of the lyrics typed, 0.0 to 1.0"""
        if not self.display_lyrics:
            return 0.0
        return len(self.user_input) / len(self.display_lyrics)

    def elapsed_seconds(self) -> float:
        """
        Active time so far, excluding pauses

        Uses the end time once the test is completed.
        """
        if self.started_at is None:
            return 0.0

        end = self.ended_at if self.ended_at is not None else self._clock()
        open_pause = end - self.pause_started_at if self.pause_started_at is not None else 0.0
        return max(end - self.started_at - self.paused_seconds - open_pause, 0.0)

    def live_wpm(self) -> float:
        """Penalized WPM on the time elapsed so far"""
        if self.result is not None:
            return self.result.wpm
        if self.started_at is None:
            return 0.0

        raw = raw_wpm(len(self.user_input), self.elapsed_seconds())
        return penalized_wpm(raw, self.incorrect_count, self.error_penalty)

    # Input

    def handle_keystroke(self, new_value: str) -> bool:
        """
        Process the full new content of the input field

        Args:
            new_value: Input value after the keystroke

        Returns:
            True if the value was accepted, False if it was rejected,
            ignored after completion, or ended the test
        """
        if self.state is SessionState.COMPLETED:
            return False

        new_value = new_value or ""

        if END_TEST_CHAR in new_value:
            self.end_test()
            return False

        if new_value == self.user_input:
            return True

        if not self._is_allowed(new_value):
            logger.debug(f"Rejected input of length {len(new_value)}")
            self._emit(EventKind.REJECTED, value=new_value)
            return False

        self.user_input = new_value

        if self.state is SessionState.NOT_STARTED:
            self.started_at = self._clock()
            self.state = SessionState.RUNNING
            self._emit(EventKind.STARTED)
        elif self.state is SessionState.PAUSED:
            self.set_paused(False)

        self._update_correctness()
        self._emit(EventKind.INPUT)

        if len(self.user_input) == len(self.display_lyrics):
            self._complete(ended_early=False)

        return True

    def _is_allowed(self, new_value: str) -> bool:
        """
        Check the separator rule on every appended character

        A space must be typed exactly where the lyrics have a space or a
        line break, and nowhere else.
        """
        if len(new_value) > len(self.comparison_lyrics):
            return False

        prefix = 0
        for old_char, new_char in zip(self.user_input, new_value):
            if old_char != new_char:
                break
            prefix += 1

        typed = normalize_for_comparison(new_value)
        for position in range(prefix, len(typed)):
            required_is_separator = self.comparison_lyrics[position] == ' '
            typed_is_space = typed[position] == ' '
            if required_is_separator != typed_is_space:
                return False

        return True

    def _update_correctness(self) -> None:
        typed = normalize_for_comparison(self.user_input)
        for position, cell in enumerate(self._cells):
            if position < len(typed):
                matches = typed[position] == self.comparison_lyrics[position]
                cell.state = CharState.CORRECT if matches else CharState.INCORRECT
            else:
                cell.state = CharState.UNSET

    # Timing

    def set_paused(self, paused: bool) -> None:
        """
        Pause or resume the test clock

        Pausing only takes effect while running; resuming folds the pause
        into the accumulated pause time.
        """
        now = self._clock()

        if paused:
            if self.state is SessionState.RUNNING:
                self.pause_started_at = now
                self.state = SessionState.PAUSED
                self._emit(EventKind.PAUSED)
            return

        if self.pause_started_at is not None:
            self.paused_seconds += now - self.pause_started_at
            self.pause_started_at = None

        if self.state is SessionState.PAUSED:
            self.state = SessionState.RUNNING
            self._emit(EventKind.RESUMED)

    def end_test(self) -> Optional[TypingResult]:
        """End the test before the last character; scores what was typed"""
        if self.state is SessionState.COMPLETED:
            return self.result
        return self._complete(ended_early=True)

    def _complete(self, ended_early: bool) -> TypingResult:
        now = self._clock()

        if self.pause_started_at is not None:
            self.paused_seconds += now - self.pause_started_at
            self.pause_started_at = None

        self.ended_at = now
        self.state = SessionState.COMPLETED
        self.result = score(
            characters_typed=len(self.user_input),
            incorrect_count=self.incorrect_count,
            active_seconds=self.elapsed_seconds(),
            penalty=self.error_penalty,
            ended_early=ended_early,
        )

        logger.debug(
            f"Test completed: {self.result.wpm:.1f} wpm, {self.result.accuracy:.1f}% accuracy"
        )
        self._emit(EventKind.COMPLETED, result=self.result)
        return self.result

    # Resets

    def apply_display_options(
        self,
        capitalization: Optional[bool] = None,
        punctuation: Optional[bool] = None
    ) -> bool:
        """
        Change the display toggles

        Any actual change rebuilds the session from the raw lyrics and
        discards input and timing.

        Returns:
            True if the session was rebuilt
        """
        new_capitalization = self.capitalization if capitalization is None else capitalization
        new_punctuation = self.punctuation if punctuation is None else punctuation

        if (new_capitalization, new_punctuation) == (self.capitalization, self.punctuation):
            return False

        self.capitalization = new_capitalization
        self.punctuation = new_punctuation
        self._build()
        self._emit(EventKind.RESET)
        return True

    def restart(self) -> None:
        """Start the same lyrics over"""
        self._build()
        self._emit(EventKind.RESET)

    def __repr__(self) -> str:
        return (
            f"TypingSession(state={self.state.value}, "
            f"typed={len(self.user_input)}/{len(self.display_lyrics)})"
        )
