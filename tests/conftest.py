"""Test configuration and fixtures"""

import asyncio
import random
import tempfile
from pathlib import Path

import pytest

from lyrictype.config import settings as settings_module
from lyrictype.core.exceptions import LyricsAPIError
from lyrictype.lyrics.base import LyricsAPI
from lyrictype.songs.models import ArtistInfo, ArtistRef, SongRecord


class FakeClock:
    """Manually advanced clock, in seconds"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested delays and advances a FakeClock instead of waiting"""

    def __init__(self, clock: FakeClock = None):
        self.calls = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)
        if self.clock is not None:
            self.clock.advance(delay)
        await asyncio.sleep(0)


class FakeLyricsAPI(LyricsAPI):
    """
    In-memory LyricsAPI

    Returns the first song of the catalogue whose index is not excluded.
    Every fetch yields to the event loop once, like a real network call.
    """

    def __init__(self, catalogs=None, search_results=None, artist_infos=None):
        self.catalogs = catalogs or {}
        self.search_results = search_results or []
        self.artist_infos = artist_infos or {}
        self.fetch_calls = []
        self.search_calls = []
        self.info_calls = []
        self.fail_on_calls = {}
        self.gates = {}

    async def fetch_artist_song(self, artist_id, exclude_indices):
        self.fetch_calls.append((artist_id, frozenset(exclude_indices)))
        call_number = len(self.fetch_calls)

        await asyncio.sleep(0)
        gate = self.gates.get(artist_id)
        if gate is not None:
            await gate.wait()

        if call_number in self.fail_on_calls:
            raise self.fail_on_calls[call_number]

        for song in self.catalogs.get(artist_id, []):
            if song.song_index not in exclude_indices:
                return song
        return None

    async def search_artists(self, query, limit=10):
        self.search_calls.append(query)
        return list(self.search_results)

    async def get_artist_info(self, artist_id, bypass_cache=False):
        self.info_calls.append((artist_id, bypass_cache))
        infos = self.artist_infos.get(artist_id) or [ArtistInfo(name=str(artist_id))]
        if len(infos) > 1:
            return infos.pop(0)
        return infos[0]


def make_song(index: int, artist_id=1, lyrics: str = None, title: str = None) -> SongRecord:
    """Song with five short lyric lines"""
    if lyrics is None:
        lyrics = '\n'.join(f"line {n} of song {index}" for n in range(5))
    return SongRecord(
        title=title or f"Song {index}",
        artist=f"Artist {artist_id}",
        lyrics=lyrics,
        artist_id=artist_id,
        song_id=f"{artist_id}-{index}",
        song_index=index,
        full_lyrics=lyrics,
    )


def make_catalog(count: int, artist_id=1):
    return [make_song(i, artist_id) for i in range(count)]


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the user's config directory and env"""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("LYRICTYPE_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("GENIUS_API_KEY", raising=False)
    monkeypatch.delenv("LYRICTYPE_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield config_dir
    settings_module._settings = None


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sleep(clock):
    return FakeSleep(clock)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def artist():
    return ArtistRef(id=1, name="Artist 1", image_url="https://images.genius.com/artist1.jpg")


@pytest.fixture
def other_artist():
    return ArtistRef(id=2, name="Artist 2", image_url="https://images.genius.com/artist2.jpg")


@pytest.fixture
def fake_api():
    return FakeLyricsAPI(catalogs={1: make_catalog(8, 1), 2: make_catalog(8, 2)})


@pytest.fixture
def api_error():
    return LyricsAPIError("Genius request failed: boom")


@pytest.fixture
def sample_genius_song():
    """Song object as returned by the Genius artist songs endpoint"""
    return {
        'id': 378195,
        'title': 'Get Lucky',
        'artist_names': 'Daft Punk (Ft. Nile Rodgers & Pharrell Williams)',
        'url': 'https://genius.com/Daft-punk-get-lucky-lyrics',
        'song_art_image_url': 'https://images.genius.com/get-lucky.jpg',
        'primary_artist': {
            'id': 13585,
            'name': 'Daft Punk',
            'image_url': 'https://images.genius.com/daft-punk.jpg',
        },
        'featured_artists': [
            {'id': 1523, 'name': 'Pharrell Williams', 'image_url': 'https://images.genius.com/pharrell.jpg'},
        ],
    }
