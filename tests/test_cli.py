"""Test the command line interface and the terminal game loop"""

import asyncio
import logging

import pytest
import yaml
from click.testing import CliRunner

from lyrictype import __version__
from lyrictype.config.settings import get_settings
from lyrictype.core.state import StateStore
from lyrictype.main import cli, current_line_bounds, feed_text, format_result, resolve_artist, run_game
from lyrictype.session import TypingSession
from lyrictype.songs import ArtistRef, CompletedSongsLog, QueueManager, RecentArtistsCache

from conftest import FakeLyricsAPI, make_song


class TickingClock:
    """Clock that moves one second forward on every reading"""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        self.now += 1.0
        return self.now


class ScriptedInput:
    """Answers prompts from a fixed list of lines"""

    def __init__(self, *lines):
        self.lines = list(lines)
        self.prompts = []

    async def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            return ":quit"
        return self.lines.pop(0)


class StalledSleep:
    """Sleep that never returns until cancelled"""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)
        await asyncio.Event().wait()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures logging; put pytest's handlers back afterwards"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def short_api():
    songs = [make_song(i, lyrics="hello world") for i in range(2)]
    return FakeLyricsAPI(catalogs={1: songs})


class TestCommands:
    """Test CLI commands"""

    def test_version(self, runner):
        """Test --version"""
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert f"LyricType v{__version__}" in result.output

    def test_help_without_command(self, runner):
        """Test the bare command prints help"""
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "play" in result.output
        assert "search" in result.output

    def test_config_show(self, runner):
        """Test configuration display"""
        result = runner.invoke(cli, ['config', 'show'])

        assert result.exit_code == 0
        assert "Capitalization: True" in result.output
        assert "Genius API key: missing" in result.output
        assert "Problems" not in result.output

    def test_config_set(self, runner, isolated_settings):
        """Test updating and saving configuration"""
        result = runner.invoke(cli, ['config', 'set', '--no-punctuation', '--excerpt-lines', '6'])

        assert result.exit_code == 0
        assert "Punctuation: False" in result.output
        saved = yaml.safe_load((isolated_settings / "config.yaml").read_text(encoding='utf-8'))
        assert saved['game']['punctuation'] is False
        assert saved['game']['excerpt_lines'] == 6

    def test_config_set_invalid(self, runner, isolated_settings):
        """Test invalid values are refused and not saved"""
        result = runner.invoke(cli, ['config', 'set', '--prefetch-count', '0'])

        assert result.exit_code == 1
        assert "prefetch_count" in result.output
        assert not (isolated_settings / "config.yaml").exists()

    def test_config_set_nothing(self, runner):
        """Test no options is a no-op"""
        result = runner.invoke(cli, ['config', 'set'])

        assert result.exit_code == 0
        assert "No changes specified" in result.output

    def test_history_empty(self, runner):
        """Test history without completions"""
        result = runner.invoke(cli, ['history'])

        assert result.exit_code == 0
        assert "No completed songs yet" in result.output

    def test_history_and_recent(self, runner):
        """Test saved state is listed"""
        store = StateStore(get_settings().get_state_path())
        store.save({
            'recent_artists': [{'id': 563, 'name': "Queen"}],
            'completed_songs': [{
                'song_id': "1", 'title': "Bohemian Rhapsody", 'artist': "Queen",
                'wpm': 72.5, 'accuracy': 98.0, 'completed_at': "2026-03-01T20:15:00+00:00",
            }],
        })

        history = runner.invoke(cli, ['history'])
        recent = runner.invoke(cli, ['recent'])

        assert history.exit_code == 0
        assert "Queen - Bohemian Rhapsody" in history.output
        assert "72.5 wpm" in history.output
        assert "2026-03-01 20:15" in history.output
        assert recent.exit_code == 0
        assert "Queen" in recent.output

    def test_corrupt_state_file(self, runner):
        """Test a broken state file is reported as an error"""
        path = get_settings().get_state_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("recent_artists: [unclosed", encoding='utf-8')

        result = runner.invoke(cli, ['recent'])

        assert result.exit_code == 1
        assert "not valid YAML" in result.output


class TestTerminalInput:
    """Test turning typed lines into keystrokes"""

    def test_feed_text_completes(self):
        """Test typing the whole text completes the session"""
        session = TypingSession("ab cd", clock=TickingClock())

        assert feed_text(session, "ab cd") == 0
        assert session.is_completed
        assert session.result.accuracy == 100.0

    def test_feed_text_counts_rejections(self):
        """Test misplaced spaces are rejected and counted"""
        session = TypingSession("ab cd", clock=TickingClock())

        assert feed_text(session, "a b") == 1
        assert session.user_input == "ab"

    def test_feed_text_end_character(self):
        """Test the end-test character finishes early without a rejection"""
        session = TypingSession("ab cd", clock=TickingClock())

        assert feed_text(session, "ab~") == 0
        assert session.result.ended_early
        assert session.result.characters_typed == 2

    def test_line_bounds(self):
        """Test the cursor line is found across line breaks"""
        session = TypingSession("one two\nthree four")
        assert current_line_bounds(session) == (0, 7)

        feed_text(session, "one two ")

        assert current_line_bounds(session) == (8, 18)

    def test_format_result(self):
        """Test the result summary"""
        session = TypingSession("ab cd", clock=TickingClock())
        feed_text(session, "ab~")

        text = format_result(session.result)

        assert "Accuracy: 100.0%" in text
        assert "Ended early" in text


class TestGameLoop:
    """Test the terminal game loop against an in-memory API"""

    @pytest.mark.asyncio
    async def test_play_through_catalogue(self, short_api, artist):
        """Test completing every song until the artist runs out"""
        manager = QueueManager(short_api, prefetch_count=0)
        history = CompletedSongsLog()
        changes = []
        read_line = ScriptedInput("hello world", "", "hello world", "")

        completed = await run_game(manager, artist, history, lambda: changes.append(1), read_line)

        assert completed == 2
        assert [entry.title for entry in history] == ["Song 1", "Song 0"]
        assert len(changes) == 3
        assert read_line.lines == []

    @pytest.mark.asyncio
    async def test_quit(self, short_api, artist):
        """Test :quit stops without recording anything"""
        manager = QueueManager(short_api, prefetch_count=0)
        history = CompletedSongsLog()

        completed = await run_game(manager, artist, history, lambda: None, ScriptedInput(":quit"))

        assert completed == 0
        assert len(history) == 0

    @pytest.mark.asyncio
    async def test_skip_and_back(self, short_api, artist):
        """Test :next skips a song and :prev returns to it"""
        manager = QueueManager(short_api, prefetch_count=0)
        read_line = ScriptedInput(":prev", ":next", ":prev", ":quit")

        completed = await run_game(manager, artist, CompletedSongsLog(), lambda: None, read_line)

        assert completed == 0
        assert manager.queue.current_index == 0
        assert len(manager.queue) == 2

    @pytest.mark.asyncio
    async def test_end_early(self, short_api, artist):
        """Test ~ ends a test early and still records it"""
        manager = QueueManager(short_api, prefetch_count=0)
        history = CompletedSongsLog()

        completed = await run_game(manager, artist, history, lambda: None, ScriptedInput("hel~", ":quit"))

        assert completed == 1
        assert list(history)[0].characters_typed == 3

    @pytest.mark.asyncio
    async def test_toggles_from_settings(self, artist):
        """Test display toggles apply to the typed text"""
        settings = get_settings()
        settings.game.capitalization = False
        settings.game.punctuation = False
        api = FakeLyricsAPI(catalogs={1: [make_song(0, lyrics="Hello, World!")]})
        manager = QueueManager(api, prefetch_count=0)
        history = CompletedSongsLog()

        completed = await run_game(manager, artist, history, lambda: None, ScriptedInput("hello world", ":quit"))

        assert completed == 1
        assert list(history)[0].characters_typed == len("hello world")

    @pytest.mark.asyncio
    async def test_pending_image_poll_cancelled(self, short_api):
        """Test an unfinished artist image poll is cancelled when the game ends"""
        manager = QueueManager(short_api, prefetch_count=0, sleep=StalledSleep())
        changes = []
        artist = ArtistRef(id=1, name="Artist 1")

        await run_game(manager, artist, CompletedSongsLog(), lambda: changes.append(1), ScriptedInput(":quit"))
        for _ in range(3):
            await asyncio.sleep(0)

        pending = [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]
        assert pending == []
        assert len(changes) == 1


class TestResolveArtist:
    """Test choosing the artist to play"""

    @pytest.mark.asyncio
    async def test_by_id_from_recent(self):
        """Test a cached artist is used without a lookup"""
        api = FakeLyricsAPI()
        recent = RecentArtistsCache(entries=[ArtistRef(id=5, name="Cached")])

        artist = await resolve_artist(api, recent, None, 5)

        assert artist.name == "Cached"
        assert api.info_calls == []

    @pytest.mark.asyncio
    async def test_by_id_lookup(self):
        """Test an unknown ID is looked up"""
        api = FakeLyricsAPI()

        artist = await resolve_artist(api, RecentArtistsCache(), None, 42)

        assert artist.id == 42
        assert artist.name == "42"
        assert api.info_calls == [(42, False)]

    @pytest.mark.asyncio
    async def test_without_query(self):
        """Test the most recent artist is replayed"""
        recent = RecentArtistsCache(entries=[ArtistRef(id=1, name="Newest"), ArtistRef(id=2, name="Older")])

        assert (await resolve_artist(FakeLyricsAPI(), recent, None, None)).name == "Newest"
        assert await resolve_artist(FakeLyricsAPI(), RecentArtistsCache(), "", None) is None

    @pytest.mark.asyncio
    async def test_query_matches_recent(self):
        """Test a recent artist name skips the search"""
        api = FakeLyricsAPI()
        recent = RecentArtistsCache(entries=[ArtistRef(id=563, name="Queen")])

        artist = await resolve_artist(api, recent, " QUEEN ", None)

        assert artist.id == 563
        assert api.search_calls == []

    @pytest.mark.asyncio
    async def test_query_searched(self):
        """Test other queries take the best search result"""
        api = FakeLyricsAPI(search_results=[ArtistRef(id=2, name="Queens of the Stone Age"), ArtistRef(id=1, name="Queen")])

        artist = await resolve_artist(api, RecentArtistsCache(), "queen", None)

        assert artist.id == 1
        assert api.search_calls == ["queen"]
