"""
Genius API integration for artist catalogues, lyrics and artist search

This module implements LyricsAPI on top of the lyricsgenius client. The
client is synchronous, so every request runs in a worker thread and goes
through a shared throttler to stay within the Genius rate limits.

Key features:
- Artist catalogues fetched page by page (50 songs, sorted by popularity)
  and cached per artist
- Random pick of an unseen catalogue song on each fetch
- Lyrics cleaning and validation; songs without usable lyrics are skipped
  and remembered so they are not tried again
- Artist image extraction from the catalogue when the artist record has
  only the default avatar
- Errors wrapped in LyricsAPIError with rate limit / not found flags

Catalogue indices:
    A song's index is its position in the cached catalogue. Indices are
    stable for the lifetime of the cache, which is what lets QueueManager
    exclude songs it has already seen.
"""

import asyncio
import random
import re
from typing import AbstractSet, Any, Dict, List, Optional, Set

import lyricsgenius
from asyncio_throttle import Throttler

from ..config.settings import get_settings
from ..core.exceptions import LyricsAPIError
from ..songs.models import ArtistInfo, ArtistRef, SongRecord
from ..utils.helpers import clean_lyrics_text, validate_lyrics_content
from ..utils.logger import get_logger
from .base import LyricsAPI

logger = get_logger(__name__)

# Songs checked when looking for an artist image
IMAGE_SCAN_SONGS = 11

# Genius serves this for artists without a picture
DEFAULT_AVATAR_MARKER = "default_avatar"

_CONTRIBUTORS_HEADER = re.compile(r'^\d*\s*Contributors?.*?Lyrics', re.IGNORECASE)
_EMBED_FOOTER = re.compile(r'\d*\s*Embed$')


def _is_real_image(url: Optional[str]) -> bool:
    return bool(url) and DEFAULT_AVATAR_MARKER not in url


def extract_artist_image_url(songs: List[Dict[str, Any]], artist_id: Any, max_songs: int = IMAGE_SCAN_SONGS) -> str:
    """
    Find an image of an artist among the first songs of its catalogue

    The artist may appear as primary artist or as a featured artist.

    Args:
        songs: Catalogue song objects
        artist_id: Artist to look for
        max_songs: Number of songs to scan

    Returns:
        Image URL, or "" when none was found
    """
    wanted = str(artist_id)
    for song in songs[:max_songs]:
        candidates = [song.get('primary_artist') or {}] + list(song.get('featured_artists') or [])
        for artist in candidates:
            if str(artist.get('id')) == wanted and _is_real_image(artist.get('image_url')):
                return artist['image_url']
    return ""


def strip_page_artifacts(lyrics: str) -> str:
    """Remove the contributor header and embed footer the scraper leaves in"""
    if not lyrics:
        return ""

    lines = lyrics.strip().split('\n')
    header = _CONTRIBUTORS_HEADER.match(lines[0])
    if header:
        rest = lines[0][header.end():].strip()
        lines = ([rest] if rest else []) + lines[1:]

    if lines:
        lines[-1] = _EMBED_FOOTER.sub('', lines[-1]).rstrip()

    lines = [line for line in lines if line.strip() != 'You might also like']
    return '\n'.join(lines)


def _parse_artist_hits(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Artist objects from a search response, in either section or hit form"""
    hits: List[Dict[str, Any]] = []
    if not response:
        return hits

    if 'sections' in response:
        for section in response.get('sections') or []:
            if section.get('type') in ('artist', 'top_hit'):
                hits.extend(section.get('hits') or [])
    else:
        hits.extend(response.get('hits') or [])

    artists = []
    for hit in hits:
        if hit.get('type', 'artist') != 'artist':
            continue
        result = hit.get('result') or {}
        if 'id' in result and 'name' in result:
            artists.append(result)
    return artists


class GeniusLyricsAPI(LyricsAPI):
    """
    LyricsAPI backed by Genius

    Configuration comes from application settings unless overridden in the
    constructor. The lyricsgenius client is created on first use.

    Example:
        api = GeniusLyricsAPI()
        artists = await api.search_artists("queen")
        song = await api.fetch_artist_song(artists[0].id, set())
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        max_attempts: Optional[int] = None,
        songs_per_page: Optional[int] = None,
        max_catalog_pages: Optional[int] = None,
        rate_limit: Optional[int] = None,
        rate_period: Optional[float] = None,
        rng: Optional[random.Random] = None,
        client: Optional[lyricsgenius.Genius] = None
    ):
        """
        Initialize Genius lyrics API

        Args:
            api_key: Genius access token
            timeout: Request timeout in seconds
            max_attempts: Retries of the underlying client
            songs_per_page: Catalogue page size (Genius allows up to 50)
            max_catalog_pages: Catalogue pages fetched per artist
            rate_limit: Requests allowed per ``rate_period``
            rate_period: Throttle window in seconds
            rng: Random source for song selection
            client: Preconfigured lyricsgenius client
        """
        settings = get_settings()

        self.api_key = api_key if api_key is not None else settings.lyrics.genius_api_key
        self.timeout = timeout if timeout is not None else settings.lyrics.timeout
        self.max_attempts = max_attempts if max_attempts is not None else settings.lyrics.max_attempts
        self.songs_per_page = songs_per_page or settings.lyrics.songs_per_page
        self.max_catalog_pages = max_catalog_pages or settings.lyrics.max_catalog_pages

        self._throttler = Throttler(
            rate_limit=rate_limit or settings.network.rate_limit,
            period=rate_period or settings.network.rate_period,
        )
        self._rng = rng or random.Random()
        self._genius_client = client

        self._catalogs: Dict[str, List[Dict[str, Any]]] = {}
        self._unusable: Dict[str, Set[int]] = {}
        self._artist_cache: Dict[str, ArtistInfo] = {}

    @property
    def genius_client(self) -> lyricsgenius.Genius:
        """
        Get authenticated Genius client with lazy initialization

        Raises:
            LyricsAPIError: If no API key is configured
        """
        if self._genius_client is None:
            if not self.api_key:
                raise LyricsAPIError(
                    "Genius API key not configured",
                    details={'hint': 'set GENIUS_API_KEY or lyrics.genius_api_key in config.yaml'}
                )

            self._genius_client = lyricsgenius.Genius(
                access_token=self.api_key,
                timeout=self.timeout,
                retries=self.max_attempts,
                remove_section_headers=False,  # cleaned by clean_lyrics_text
                skip_non_songs=True,
                verbose=False
            )
            logger.info("Genius API client initialized successfully")

        return self._genius_client

    async def _call(self, method_name: str, *args, **kwargs) -> Any:
        """Run one client method in a worker thread, throttled"""
        method = getattr(self.genius_client, method_name)

        async with self._throttler:
            try:
                return await asyncio.to_thread(method, *args, **kwargs)
            except Exception as e:
                status = e.args[0] if e.args and isinstance(e.args[0], int) else None
                raise LyricsAPIError(
                    f"Genius request failed: {e}",
                    details={'method': method_name, 'original_error': repr(e)},
                    is_rate_limit=status == 429,
                    is_not_found=status == 404,
                ) from e

    # Catalogue

    async def _catalog(self, artist_id: Any) -> List[Dict[str, Any]]:
        """Songs of an artist, most popular first, cached per artist"""
        key = str(artist_id)
        if key in self._catalogs:
            return self._catalogs[key]

        songs: List[Dict[str, Any]] = []
        page: Optional[int] = 1
        pages_fetched = 0

        while page and pages_fetched < self.max_catalog_pages:
            response = await self._call(
                'artist_songs', artist_id,
                per_page=self.songs_per_page, page=page, sort='popularity'
            )
            pages_fetched += 1
            songs.extend((response or {}).get('songs') or [])
            page = (response or {}).get('next_page')

        logger.debug(f"Catalogue for artist {artist_id}: {len(songs)} songs in {pages_fetched} pages")
        self._catalogs[key] = songs
        return songs

    async def _fetch_lyrics(self, song: Dict[str, Any]) -> str:
        url = song.get('url')
        if url:
            raw = await self._call('lyrics', song_url=url)
        else:
            raw = await self._call('lyrics', song_id=song.get('id'))
        return clean_lyrics_text(strip_page_artifacts(raw or ""))

    async def fetch_artist_song(self, artist_id: Any, exclude_indices: AbstractSet[int]) -> Optional[SongRecord]:
        catalog = await self._catalog(artist_id)
        unusable = self._unusable.setdefault(str(artist_id), set())

        candidates = [
            index for index in range(len(catalog))
            if index not in exclude_indices and index not in unusable
        ]
        self._rng.shuffle(candidates)

        for index in candidates:
            song = catalog[index]
            try:
                lyrics = await self._fetch_lyrics(song)
            except LyricsAPIError as e:
                if e.is_rate_limit:
                    raise
                logger.debug(f"Lyrics fetch failed for '{song.get('title')}': {e}")
                unusable.add(index)
                continue

            if not validate_lyrics_content(lyrics):
                logger.debug(f"Skipping '{song.get('title')}': no usable lyrics")
                unusable.add(index)
                continue

            return SongRecord.from_genius_api(song, lyrics, index=index, artist_id=artist_id)

        logger.debug(f"No unseen songs left for artist {artist_id}")
        return None

    # Artists

    async def search_artists(self, query: str, limit: int = 10) -> List[ArtistRef]:
        query = (query or "").strip()
        if not query:
            return []

        response = await self._call('search_artists', query, per_page=max(limit, 1))

        artists = []
        seen = set()
        for result in _parse_artist_hits(response):
            if result['id'] in seen:
                continue
            seen.add(result['id'])
            image = result.get('image_url')
            artists.append(ArtistRef(
                id=result['id'],
                name=result['name'],
                image_url=image if _is_real_image(image) else "",
                url_key=(result.get('url') or '').rstrip('/').rsplit('/', 1)[-1],
                is_popular=bool(result.get('is_verified', False)),
            ))
        return artists[:limit]

    async def get_artist_info(self, artist_id: Any, bypass_cache: bool = False) -> ArtistInfo:
        key = str(artist_id)
        if not bypass_cache and key in self._artist_cache:
            return self._artist_cache[key]

        response = await self._call('artist', artist_id) or {}
        artist = response.get('artist', response)

        image_url = artist.get('image_url')
        if not _is_real_image(image_url):
            catalog = await self._catalog(artist_id)
            image_url = extract_artist_image_url(catalog, artist_id)

        info = ArtistInfo(name=artist.get('name', ''), image_url=image_url or "")
        self._artist_cache[key] = info
        return info

    def clear_cache(self) -> None:
        """Forget cached catalogues and artist info"""
        self._catalogs.clear()
        self._unusable.clear()
        self._artist_cache.clear()
