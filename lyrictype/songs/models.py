"""
Data models for songs, artists and queue snapshots.

All records are frozen dataclasses: a song or artist is never modified in
place once it has been fetched. Derived copies (for example a song with its
excerpt chosen) are produced with ``dataclasses.replace``.

Usage:
    from lyrictype.songs.models import SongRecord, ArtistRef

    artist = ArtistRef(id=16775, name="Queen")
    song = SongRecord.from_genius_api(song_data, lyrics, index=3, artist_id=artist.id)
"""

import random
from dataclasses import dataclass, replace
from typing import Any

from ..utils.helpers import select_excerpt


@dataclass(frozen=True)
class ArtistRef:
    """
    An artist as returned by search and kept in the recent-artists cache.

    Attributes:
        id: Lyrics provider artist ID.
            Example: 16775
        name: Display name.
              Example: "Queen"
        image_url: Artist image, empty until known.
        url_key: Provider URL slug used to build artist links.
                 Example: "Queen"
        is_popular: Promoted artists sort first in search results.
    """

    id: int | str
    name: str
    image_url: str = ""
    url_key: str = ""
    is_popular: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArtistRef":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            image_url=data.get("image_url") or "",
            url_key=data.get("url_key") or "",
            is_popular=bool(data.get("is_popular", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "image_url": self.image_url,
            "url_key": self.url_key,
            "is_popular": self.is_popular,
        }

    def with_image(self, image_url: str) -> "ArtistRef":
        return replace(self, image_url=image_url)


@dataclass(frozen=True)
class ArtistInfo:
    """Late-arriving artist metadata used for image polling."""

    name: str
    image_url: str = ""


@dataclass(frozen=True)
class SongRecord:
    """
    One song as it sits in the queue.

    Attributes:
        title: Song title.
        artist: Credited artist string, may include features.
                Example: "Daft Punk (Ft. Pharrell Williams)"
        lyrics: Lyrics the player types; the chosen excerpt once
                ``with_excerpt`` has been applied.
        image_url: Song artwork.
        artist_id: ID of the artist whose catalogue this came from.
        song_id: Provider song ID, as a string.
        source_url: Provider page of the song.
        primary_artist: Name of the primary artist.
        artist_image_url: Image of the primary artist.
        song_index: Position in the artist catalogue; used to avoid
                    fetching the same song twice.
        full_lyrics: Complete cleaned lyrics the excerpt was taken from.
        excerpt_lines: Indices of the excerpt lines among the non-empty
                       lines of ``full_lyrics``; empty until chosen.
    """

    title: str
    artist: str
    lyrics: str
    image_url: str = ""
    artist_id: int | str | None = None
    song_id: str = ""
    source_url: str = ""
    primary_artist: str = ""
    artist_image_url: str = ""
    song_index: int | None = None
    full_lyrics: str = ""
    excerpt_lines: tuple[int, ...] = ()

    @classmethod
    def from_genius_api(
        cls,
        song_data: dict[str, Any],
        lyrics: str,
        index: int | None = None,
        artist_id: int | str | None = None
    ) -> "SongRecord":
        """
        Create a SongRecord from a Genius song object.

        Args:
            song_data: Song object from the artist songs endpoint.
            lyrics: Cleaned lyrics for the song.
            index: Position of the song in the artist catalogue.
            artist_id: Artist the catalogue belongs to.

        Returns:
            SongRecord with ``full_lyrics`` set and no excerpt chosen yet.
        """
        primary = song_data.get("primary_artist") or {}
        artist_name = song_data.get("artist_names") or primary.get("name") or "Unknown Artist"
        song_id = song_data.get("id")

        return cls(
            title=song_data.get("title") or "Unknown Title",
            artist=artist_name,
            lyrics=lyrics,
            image_url=song_data.get("song_art_image_url") or song_data.get("header_image_url") or "",
            artist_id=artist_id if artist_id is not None else primary.get("id"),
            song_id=str(song_id) if song_id is not None else "",
            source_url=song_data.get("url") or "",
            primary_artist=primary.get("name") or artist_name,
            artist_image_url=primary.get("image_url") or "",
            song_index=index,
            full_lyrics=lyrics,
        )

    @property
    def has_excerpt(self) -> bool:
        return bool(self.excerpt_lines)

    def with_excerpt(self, line_count: int = 4, rng: random.Random | None = None) -> "SongRecord":
        """
        Return a copy whose ``lyrics`` is a random window of ``line_count``
        consecutive lines.

        The window is chosen once: a record that already has an excerpt is
        returned unchanged, so going back to a song shows the same lines.
        """
        if self.has_excerpt:
            return self

        source = self.full_lyrics or self.lyrics
        excerpt, indices = select_excerpt(source, line_count, rng)
        if not indices:
            return replace(self, full_lyrics=source)

        return replace(self, lyrics=excerpt, full_lyrics=source, excerpt_lines=indices)

    @property
    def display_name(self) -> str:
        return f"{self.artist} - {self.title}"


@dataclass(frozen=True)
class QueueStatus:
    """
    Read-only snapshot of the queue for enabling navigation controls.

    ``can_go_next`` stays true while more songs can still be fetched, even
    when none are materialized yet; ``can_go_previous`` is exact.
    """

    current_index: int
    total_songs: int
    can_go_previous: bool
    can_go_next: bool
