"""
Queue manager: populates the song queue from a lyrics API.

QueueManager is the only writer of its SongQueue. It loads the first song
of an artist, prefetches more in the background, fetches on demand when
the player runs past the end of the queue, and discards results that
arrive after the player has switched to another artist.

Concurrency model:
    Everything runs on one asyncio event loop. Each artist selection bumps
    a generation counter; any fetch that completes under an older
    generation is dropped without touching the queue. Fetches for the
    current artist are serialized by a per-artist lock so two fetches never
    race for the same unseen song. Prefetch completion only touches queue
    state, never a TypingSession.
"""

import asyncio
import random
from typing import Any, List, Optional, Set

from ..core.exceptions import ArtistLoadError, LyricsAPIError
from ..lyrics.base import LyricsAPI
from ..utils.logger import get_logger
from ..utils.timing import SleepFunc, poll_until
from .models import ArtistRef, QueueStatus, SongRecord
from .recent import RecentArtistsCache
from .song_queue import SongQueue

logger = get_logger(__name__)

# Duplicate songs returned by the API are skipped; give up after this many
MAX_FETCH_ATTEMPTS = 3


class QueueManager:
    """
    Owns a SongQueue and keeps it filled with songs of the selected artist

    Example:
        manager = QueueManager(GeniusLyricsAPI())
        first = await manager.initialize_with_artist(ArtistRef(id=16775, name="Queen"))
        second = await manager.go_to_next()
    """

    def __init__(
        self,
        api: LyricsAPI,
        queue: Optional[SongQueue] = None,
        recent: Optional[RecentArtistsCache] = None,
        prefetch_count: int = 5,
        lookahead_threshold: int = 2,
        excerpt_lines: int = 4,
        poll_attempts: int = 3,
        retry_delay: float = 1.0,
        retry_backoff: float = 2.0,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize queue manager

        Args:
            api: Lyrics API to fetch songs from
            queue: Queue to manage, a new one when None
            recent: Recent artists cache updated on artist selection
            prefetch_count: Songs fetched per background prefetch
            lookahead_threshold: Prefetch once fewer songs than this remain ahead
            excerpt_lines: Lines per lyric excerpt
            poll_attempts: Attempts when polling for an artist image
            retry_delay: Initial delay between polling attempts, seconds
            retry_backoff: Delay multiplier between polling attempts
            sleep: Sleep coroutine for polling, asyncio.sleep when None
            rng: Random source for excerpt selection
        """
        self.api = api
        self.queue = queue if queue is not None else SongQueue()
        self.recent = recent if recent is not None else RecentArtistsCache()
        self.prefetch_count = prefetch_count
        self.lookahead_threshold = lookahead_threshold
        self.excerpt_lines = excerpt_lines
        self.poll_attempts = poll_attempts
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._rng = rng

        self.artist: Optional[ArtistRef] = None
        self.artist_id: Any = None
        self.artist_url_key = ""
        self.seen_song_indices: Set[int] = set()
        self.prefetch_in_flight = False
        self.generation = 0

        self._exhausted = False
        self._fetch_lock = asyncio.Lock()
        self._prefetch_task: Optional[asyncio.Task] = None

    # Read-only views

    @property
    def current_song(self) -> Optional[SongRecord]:
        return self.queue.current

    @property
    def is_exhausted(self) -> bool:
        """True once the API reported the artist catalogue has nothing left"""
        return self._exhausted

    def upcoming(self, count: int = 5) -> List[SongRecord]:
        return self.queue.upcoming(count)

    def get_queue_status(self) -> QueueStatus:
        can_fetch = self.artist is not None and not self._exhausted
        return QueueStatus(
            current_index=self.queue.current_index,
            total_songs=len(self.queue),
            can_go_previous=self.queue.can_go_previous,
            can_go_next=self.queue.remaining > 0 or can_fetch,
        )

    # Artist selection

    async def initialize_with_artist(self, artist: ArtistRef) -> Optional[SongRecord]:
        """
        Switch to a new artist and load its first song

        Any queue and fetch state of the previous artist is dropped. A
        background prefetch is scheduled once the first song is in.

        Returns:
            The first song, or None if another artist was selected while
            this one was still loading

        Raises:
            ArtistLoadError: If no song of the artist could be loaded
        """
        self.generation += 1
        generation = self.generation

        self.artist = artist
        self.artist_id = artist.id
        self.artist_url_key = artist.url_key or artist.name
        self.seen_song_indices = set()
        self.prefetch_in_flight = False
        self._exhausted = False
        self._fetch_lock = asyncio.Lock()
        self._prefetch_task = None
        self.queue.clear()
        self.recent.upsert(artist)

        logger.info(f"Loading artist: {artist.name}")

        try:
            song = await self.api.fetch_artist_song(artist.id, frozenset(self.seen_song_indices))
        except LyricsAPIError as e:
            if generation != self.generation:
                logger.debug(f"Ignoring failure for superseded artist {artist.name}: {e}")
                return None
            raise ArtistLoadError(
                f"Could not load artist {artist.name}",
                details={'artist_id': artist.id, 'original_error': str(e)}
            ) from e

        if generation != self.generation:
            logger.debug(f"Discarding first song of superseded artist {artist.name}")
            return None

        if song is None:
            self._exhausted = True
            raise ArtistLoadError(
                f"Could not load artist {artist.name}: no songs with lyrics found",
                details={'artist_id': artist.id}
            )

        song = self._accept(song)
        self.queue.add_song(song)
        logger.debug(f"First song for {artist.name}: {song.title}")

        self._schedule_prefetch(self.prefetch_count)
        return song

    # Navigation

    async def go_to_next(self) -> Optional[SongRecord]:
        """
        Advance to the next song, fetching one when the queue has run out

        Returns:
            The new current song, or None when there are no more songs or
            the fetch failed
        """
        start_index = self.queue.current_index
        song = self.queue.go_to_next()

        if song is None and self.artist is not None and not self._exhausted:
            song = await self._advance_with_fetch(start_index)

        if song is not None:
            self._maybe_prefetch()
        return song

    def go_to_previous(self) -> Optional[SongRecord]:
        return self.queue.go_to_previous()

    def go_to_index(self, index: int) -> Optional[SongRecord]:
        return self.queue.jump_to_song(index)

    async def _advance_with_fetch(self, start_index: int) -> Optional[SongRecord]:
        generation = self.generation

        async with self._fetch_lock:
            if generation != self.generation:
                return None
            # Another caller may have advanced or filled the queue while we waited
            if self.queue.current_index != start_index:
                return self.queue.current

            was_empty = self.queue.is_empty()
            song = self.queue.go_to_next()
            attempts = 0
            while song is None and not self._exhausted and attempts < MAX_FETCH_ATTEMPTS:
                attempts += 1
                try:
                    await self._fetch_locked(generation)
                except LyricsAPIError as e:
                    logger.warning(f"Could not fetch next song: {e}")
                    return None

                if generation != self.generation:
                    return None
                # The first song of an empty queue is already current
                song = self.queue.current if was_empty else self.queue.go_to_next()

        if song is None:
            logger.info("No more songs for this artist")
        return song

    # Fetching

    def _accept(self, song: SongRecord) -> Optional[SongRecord]:
        """Record a fetched song as seen; None if it is a duplicate"""
        if song.song_index is not None:
            if song.song_index in self.seen_song_indices:
                logger.debug(f"Skipping duplicate song index {song.song_index}")
                return None
            self.seen_song_indices.add(song.song_index)
        elif song.song_id and any(s.song_id == song.song_id for s in self.queue.songs):
            logger.debug(f"Skipping duplicate song {song.song_id}")
            return None

        return song.with_excerpt(self.excerpt_lines, self._rng)

    async def _fetch_locked(self, generation: int) -> Optional[SongRecord]:
        """Fetch one unseen song and append it; caller holds the fetch lock"""
        song = await self.api.fetch_artist_song(self.artist_id, frozenset(self.seen_song_indices))

        if generation != self.generation:
            logger.debug("Discarding song fetched for a superseded artist")
            return None

        if song is None:
            self._exhausted = True
            logger.debug(f"Catalogue exhausted after {len(self.seen_song_indices)} songs")
            return None

        accepted = self._accept(song)
        if accepted is not None:
            self.queue.add_song(accepted)
        return accepted

    def _maybe_prefetch(self) -> None:
        if self.artist is None or self._exhausted:
            return
        if self.queue.remaining < self.lookahead_threshold:
            self._schedule_prefetch(self.prefetch_count)

    def _schedule_prefetch(self, count: int) -> None:
        if count <= 0 or self.prefetch_in_flight or self._exhausted:
            return
        self.prefetch_in_flight = True
        self._prefetch_task = asyncio.create_task(self._prefetch(count, self.generation))

    async def _prefetch(self, count: int, generation: int) -> int:
        """
        Background fetch of up to ``count`` songs

        Failures are logged and leave the queue as it is.

        Returns:
            Number of songs appended
        """
        appended = 0
        try:
            for _ in range(count):
                if generation != self.generation or self._exhausted:
                    break
                async with self._fetch_lock:
                    if generation != self.generation or self._exhausted:
                        break
                    try:
                        song = await self._fetch_locked(generation)
                    except LyricsAPIError as e:
                        logger.warning(f"Background prefetch failed: {e}")
                        if e.is_rate_limit:
                            break
                        continue
                if song is not None:
                    appended += 1
        except Exception:
            logger.exception("Background prefetch crashed")
        finally:
            if generation == self.generation:
                self.prefetch_in_flight = False

        if appended:
            logger.debug(f"Prefetched {appended} songs")
        return appended

    async def wait_for_prefetch(self) -> None:
        """Wait for the background prefetch of the current artist, if any"""
        task = self._prefetch_task
        if task is not None and not task.done():
            await task

    # Artist metadata

    async def poll_artist_image(self, artist_id: Any = None) -> Optional[str]:
        """
        Poll the API until the artist has an image, then cache it

        Gives up quietly after ``poll_attempts`` attempts.

        Returns:
            The image URL, or None if none appeared
        """
        if artist_id is None:
            artist_id = self.artist_id
        if artist_id is None:
            return None

        info = await poll_until(
            lambda: self.api.get_artist_info(artist_id, bypass_cache=True),
            lambda result: bool(result and result.image_url),
            attempts=self.poll_attempts,
            delay=self.retry_delay,
            backoff=self.retry_backoff,
            sleep=self._sleep,
        )

        if info is None:
            logger.debug(f"No image for artist {artist_id} after {self.poll_attempts} attempts")
            return None

        self.recent.update_image(artist_id, info.image_url)
        return info.image_url
