"""Test the typing session state machine and scoring"""

import asyncio

import pytest

from lyrictype.session import (
    EventKind,
    LiveWpmMonitor,
    SessionState,
    TypingSession,
    accuracy,
    raw_wpm,
    score,
)
from lyrictype.text import CharState
from lyrictype.utils.helpers import clean_lyrics_text


def type_progressively(session, text):
    """Type ``text`` one character at a time; returns the accept flags"""
    return [session.handle_keystroke(text[:n]) for n in range(1, len(text) + 1)]


class TestScoring:
    """Test WPM and accuracy formulas"""

    def test_raw_wpm(self):
        """Test five characters are one word"""
        assert raw_wpm(10, 60) == pytest.approx(2.0)
        assert raw_wpm(0, 60) == 0.0
        assert raw_wpm(10, 0) == 0.0

    def test_accuracy(self):
        """Test accuracy is relative to characters typed"""
        assert accuracy(4, 1) == pytest.approx(75.0)
        assert accuracy(0, 0) == 0.0
        assert accuracy(3, 5) == 0.0

    def test_penalty_floors_at_zero(self):
        """Test WPM never goes negative"""
        result = score(characters_typed=5, incorrect_count=5, active_seconds=60)

        assert result.raw_wpm == pytest.approx(1.0)
        assert result.wpm == 0.0

    def test_degenerate_cases(self):
        """Test zero time or zero characters score zero"""
        assert score(0, 0, 10).wpm == 0.0
        assert score(0, 0, 10).accuracy == 0.0
        assert score(10, 0, 0).wpm == 0.0
        assert score(10, 0, 0).accuracy == 0.0


class TestTypingScenarios:
    """End-to-end typing scenarios"""

    def test_perfect_run(self, clock):
        """Test 'I am' typed without errors in two seconds"""
        session = TypingSession("I am", clock=clock)

        assert session.handle_keystroke("I")
        session.handle_keystroke("I ")
        session.handle_keystroke("I a")
        clock.advance(2)
        session.handle_keystroke("I am")

        assert session.state is SessionState.COMPLETED
        assert session.result.characters_typed == 4
        assert session.result.wpm == pytest.approx(24.0)
        assert session.result.accuracy == pytest.approx(100.0)
        assert not session.result.ended_early

    def test_one_wrong_character(self, clock):
        """Test 'cat' typed as 'cbt' in six seconds"""
        session = TypingSession("cat", clock=clock)

        session.handle_keystroke("c")
        session.handle_keystroke("cb")
        clock.advance(6)
        session.handle_keystroke("cbt")

        result = session.result
        assert result.incorrect_count == 1
        assert result.accuracy == pytest.approx(200 / 3)
        assert result.raw_wpm == pytest.approx(6.0)
        assert result.wpm == pytest.approx(3.0)

    def test_space_where_letter_required_is_rejected(self, clock):
        """Test a space is rejected while a letter is expected"""
        session = TypingSession("ab", clock=clock)

        assert not session.handle_keystroke(" ")
        assert session.user_input == ""
        assert session.state is SessionState.NOT_STARTED

    def test_letter_where_space_required_is_rejected(self, clock):
        """Test a letter is rejected while a separator is expected"""
        session = TypingSession("a b", clock=clock)
        session.handle_keystroke("a")

        assert not session.handle_keystroke("ax")
        assert session.user_input == "a"

    def test_scraped_lyrics_with_unicode_spaces(self, clock):
        """Test cleaned lyrics with NBSP between words can be typed with plain spaces"""
        lyrics = clean_lyrics_text("[Verse 1]\nHello\xa0world again\nSecond line")
        session = TypingSession(lyrics, clock=clock)
        typed = "Hello world again Second line"

        assert session.handle_keystroke(typed[0])
        clock.advance(6)
        accepted = [session.handle_keystroke(typed[:n]) for n in range(2, len(typed) + 1)]

        assert all(accepted)
        assert session.user_input == typed
        assert session.state is SessionState.COMPLETED
        assert session.result.incorrect_count == 0
        assert session.result.accuracy == pytest.approx(100.0)

    def test_end_test_character(self, clock):
        """Test typing ~ ends the test with the time so far"""
        session = TypingSession("hello world", clock=clock)
        type_progressively(session, "hel")
        clock.advance(3)

        assert not session.handle_keystroke("hel~")

        assert session.state is SessionState.COMPLETED
        assert session.user_input == "hel"
        assert session.result.ended_early
        assert session.result.characters_typed == 3
        assert session.result.active_seconds == pytest.approx(3.0)
        assert session.result.raw_wpm == pytest.approx(12.0)

    def test_toggle_resets_session(self, clock):
        """Test switching capitalization off mid-test rebuilds the session"""
        session = TypingSession("Hello World", clock=clock)
        type_progressively(session, "Hel")

        assert session.apply_display_options(capitalization=False)

        assert session.user_input == ""
        assert session.state is SessionState.NOT_STARTED
        assert session.started_at is None
        assert session.display_lyrics == "hello world"
        assert session.tokens[0].text == "hello"

    def test_unchanged_toggle_is_noop(self, clock):
        """Test applying the current options keeps the input"""
        session = TypingSession("Hello World", clock=clock)
        session.handle_keystroke("H")

        assert not session.apply_display_options(capitalization=True, punctuation=True)
        assert session.user_input == "H"

    def test_complete_without_input(self, clock):
        """Test ending an untouched test scores zero"""
        session = TypingSession("hello", clock=clock)

        result = session.end_test()

        assert result.wpm == 0.0
        assert result.accuracy == 0.0
        assert result.characters_typed == 0
        assert session.state is SessionState.COMPLETED


class TestKeystrokes:
    """Test keystroke handling details"""

    def test_first_keystroke_starts_clock(self, clock):
        """Test the session starts on the first accepted keystroke"""
        session = TypingSession("abc", clock=clock)
        clock.advance(5)

        session.handle_keystroke("a")

        assert session.state is SessionState.RUNNING
        assert session.started_at == clock.now

    def test_correctness_tags(self, clock):
        """Test cells are tagged up to the input length"""
        session = TypingSession("ab cd", clock=clock)

        session.handle_keystroke("ax")

        states = [cell.state for token in session.tokens for cell in token.cells]
        assert states == [
            CharState.CORRECT, CharState.INCORRECT,
            CharState.UNSET, CharState.UNSET, CharState.UNSET,
        ]
        assert session.incorrect_count == 1
        assert session.correct_count == 1
        assert session.progress == pytest.approx(0.4)

    def test_deletion_always_accepted(self, clock):
        """Test backspace resets tags after the cursor"""
        session = TypingSession("ab cd", clock=clock)
        session.handle_keystroke("ax")

        assert session.handle_keystroke("a")

        assert session.incorrect_count == 0
        assert session.tokens[0].chars[1].state is CharState.UNSET

    def test_input_longer_than_lyrics_rejected(self, clock):
        """Test pasting past the end is rejected"""
        session = TypingSession("ab", clock=clock)

        assert not session.handle_keystroke("abc")
        assert session.user_input == ""

    def test_pasted_value_checked_per_position(self, clock):
        """Test every appended character obeys the separator rule"""
        session = TypingSession("ab cd", clock=clock)

        assert not session.handle_keystroke("abxcd")
        assert session.handle_keystroke("ab cd")
        assert session.is_completed

    def test_newline_typed_as_space(self, clock):
        """Test a line break is typed with the space bar"""
        session = TypingSession("ab\ncd", clock=clock)

        assert session.handle_keystroke("ab ")
        assert session.tokens[1].state is CharState.CORRECT

    def test_enter_key_matches_line_break(self, clock):
        """Test a typed newline also matches a line break"""
        session = TypingSession("ab\ncd", clock=clock)

        assert session.handle_keystroke("ab\n")
        assert session.tokens[1].state is CharState.CORRECT

    def test_curly_quotes_and_accents(self, clock):
        """Test plain keyboard characters match typographic ones"""
        session = TypingSession("don’t café", clock=clock)

        session.handle_keystroke("don't cafe")

        assert session.is_completed
        assert session.result.incorrect_count == 0

    def test_case_matters_with_capitalization(self, clock):
        """Test wrong case counts as an error"""
        session = TypingSession("Hi", clock=clock)

        session.handle_keystroke("hi")

        assert session.result.incorrect_count == 1

    def test_case_ignored_without_capitalization(self, clock):
        """Test lowercase display accepts lowercase typing"""
        session = TypingSession("Hi", capitalization=False, clock=clock)

        session.handle_keystroke("hi")

        assert session.result.incorrect_count == 0

    def test_ignored_after_completion(self, clock):
        """Test keystrokes after completion change nothing"""
        session = TypingSession("ab", clock=clock)
        session.handle_keystroke("ab")

        assert not session.handle_keystroke("a")
        assert session.user_input == "ab"

    def test_empty_lyrics(self, clock):
        """Test a session without lyrics rejects input and can be ended"""
        session = TypingSession("", clock=clock)

        assert not session.handle_keystroke("a")
        assert session.cursor.token_index == 0
        assert session.end_test().wpm == 0.0

    def test_all_punctuation_lyrics(self, clock):
        """Test lyrics that strip to nothing do not crash"""
        session = TypingSession("?!...", punctuation=False, clock=clock)

        assert session.display_lyrics == ""
        assert session.tokens == []

    def test_cursor_follows_input(self, clock):
        """Test the cursor is derived from the input length"""
        session = TypingSession("ab cd", clock=clock)

        session.handle_keystroke("ab ")

        assert (session.cursor.token_index, session.cursor.char_index) == (2, 0)

    def test_restart(self, clock):
        """Test restart clears input and timing"""
        session = TypingSession("abc", clock=clock)
        session.handle_keystroke("ab")

        session.restart()

        assert session.user_input == ""
        assert session.state is SessionState.NOT_STARTED
        assert session.incorrect_count == 0


class TestPausing:
    """Test pause accounting"""

    def test_pause_excluded_from_time(self, clock):
        """Test paused time does not count"""
        session = TypingSession("abcde", clock=clock)
        session.handle_keystroke("a")
        clock.advance(5)
        session.set_paused(True)
        clock.advance(10)
        session.set_paused(False)
        clock.advance(5)

        session.handle_keystroke("abcde")

        assert session.result.active_seconds == pytest.approx(10.0)
        assert session.paused_seconds == pytest.approx(10.0)

    def test_open_pause_excluded_from_live_time(self, clock):
        """Test elapsed time stops while paused"""
        session = TypingSession("abcde", clock=clock)
        session.handle_keystroke("a")
        clock.advance(4)
        session.set_paused(True)
        clock.advance(100)

        assert session.state is SessionState.PAUSED
        assert session.elapsed_seconds() == pytest.approx(4.0)

    def test_end_while_paused(self, clock):
        """Test ending during a pause excludes the open pause"""
        session = TypingSession("abcde", clock=clock)
        session.handle_keystroke("a")
        clock.advance(6)
        session.set_paused(True)
        clock.advance(30)

        result = session.end_test()

        assert result.active_seconds == pytest.approx(6.0)
        assert session.pause_started_at is None

    def test_pause_before_start_ignored(self, clock):
        """Test pausing only acts while running"""
        session = TypingSession("abc", clock=clock)

        session.set_paused(True)

        assert session.state is SessionState.NOT_STARTED
        assert session.pause_started_at is None

    def test_typing_resumes(self, clock):
        """Test an accepted keystroke resumes a paused test"""
        session = TypingSession("abc", clock=clock)
        session.handle_keystroke("a")
        session.set_paused(True)
        clock.advance(3)

        session.handle_keystroke("ab")

        assert session.state is SessionState.RUNNING
        assert session.paused_seconds == pytest.approx(3.0)


class TestLiveWpm:
    """Test live WPM"""

    def test_zero_before_start(self, clock):
        """Test live WPM is zero before typing"""
        assert TypingSession("abc", clock=clock).live_wpm() == 0.0

    def test_penalized(self, clock):
        """Test live WPM applies the error penalty"""
        session = TypingSession("abcdefghijklmno", clock=clock)
        session.handle_keystroke("abcdefghix")
        clock.advance(6)

        # raw (10 / 5) / (6 / 60) = 20, minus 3 for one error
        assert session.live_wpm() == pytest.approx(17.0)

    @pytest.mark.asyncio
    async def test_monitor_reports_until_completion(self, clock, fake_sleep):
        """Test the monitor reports while running and stops on completion"""
        session = TypingSession("abcdefghij", clock=clock)
        session.handle_keystroke("abcde")
        reports = []

        def on_wpm(wpm):
            reports.append(wpm)
            if len(reports) == 3:
                session.end_test()

        monitor = LiveWpmMonitor(session, on_wpm, interval=0.5, sleep=fake_sleep)
        count = await asyncio.wait_for(monitor.run(), timeout=1)

        assert count == 3
        assert fake_sleep.calls == [0.5, 0.5, 0.5]
        assert reports[0] == 0.0
        assert reports[1] == pytest.approx(120.0)

    @pytest.mark.asyncio
    async def test_monitor_silent_while_paused(self, clock, fake_sleep):
        """Test nothing is reported during a pause"""
        session = TypingSession("abcdefghij", clock=clock)
        session.handle_keystroke("a")
        session.set_paused(True)
        reports = []

        async def sleep_then_finish(delay):
            await fake_sleep(delay)
            if len(fake_sleep.calls) == 2:
                session.end_test()

        monitor = LiveWpmMonitor(session, reports.append, sleep=sleep_then_finish)
        await asyncio.wait_for(monitor.run(), timeout=1)

        assert reports == []

    @pytest.mark.asyncio
    async def test_monitor_start_and_stop(self, clock, fake_sleep):
        """Test the background task can be started once and stopped"""
        session = TypingSession("abcdefghij", clock=clock)
        session.handle_keystroke("a")
        monitor = LiveWpmMonitor(session, lambda wpm: None, sleep=fake_sleep)

        task = monitor.start()
        assert monitor.start() is task
        assert monitor.is_running

        monitor.stop()
        assert not monitor.is_running
        with pytest.raises(asyncio.CancelledError):
            await task


class TestObservers:
    """Test session events"""

    def test_event_sequence(self, clock):
        """Test events are emitted after each change"""
        session = TypingSession("ab", clock=clock)
        kinds = []
        session.subscribe(lambda event: kinds.append(event.kind))

        session.handle_keystroke(" ")
        session.handle_keystroke("a")
        session.set_paused(True)
        session.set_paused(False)
        session.handle_keystroke("ab")
        session.restart()

        assert kinds == [
            EventKind.REJECTED,
            EventKind.STARTED,
            EventKind.INPUT,
            EventKind.PAUSED,
            EventKind.RESUMED,
            EventKind.INPUT,
            EventKind.COMPLETED,
            EventKind.RESET,
        ]

    def test_unsubscribe(self, clock):
        """Test a removed listener gets nothing"""
        session = TypingSession("ab", clock=clock)
        events = []
        unsubscribe = session.subscribe(events.append)

        unsubscribe()
        session.handle_keystroke("a")

        assert events == []

    def test_failing_listener_does_not_break_input(self, clock):
        """Test a listener error is contained"""
        session = TypingSession("ab", clock=clock)

        def broken(event):
            raise RuntimeError("listener bug")

        session.subscribe(broken)

        assert session.handle_keystroke("a")
        assert session.user_input == "a"
