"""
Most-recently-used cache of selected artists.

Display metadata only (name and image); nothing depends on it for
correctness, so malformed persisted entries are skipped rather than
reported.
"""

from typing import Any, Iterable, Iterator, List, Optional

from ..utils.logger import get_logger
from .models import ArtistRef

logger = get_logger(__name__)

DEFAULT_CAPACITY = 7


def _same_id(left: Any, right: Any) -> bool:
    # IDs may come back from YAML or the API as int or str
    return str(left) == str(right)


class RecentArtistsCache:
    """MRU list of artists, newest first, capped at ``capacity`` entries"""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, entries: Optional[Iterable[ArtistRef]] = None):
        self.capacity = capacity
        self._entries: List[ArtistRef] = []
        for artist in reversed(list(entries or [])):
            self.upsert(artist)

    def upsert(self, artist: ArtistRef) -> None:
        """Move ``artist`` to the front, replacing any entry with the same ID"""
        self._entries = [a for a in self._entries if not _same_id(a.id, artist.id)]
        self._entries.insert(0, artist)
        del self._entries[self.capacity:]

    def get(self, artist_id: Any) -> Optional[ArtistRef]:
        for artist in self._entries:
            if _same_id(artist.id, artist_id):
                return artist
        return None

    def update_image(self, artist_id: Any, image_url: str) -> bool:
        """
        Set the image of a cached artist without changing its position

        Returns:
            True if the artist was in the cache
        """
        for position, artist in enumerate(self._entries):
            if _same_id(artist.id, artist_id):
                self._entries[position] = artist.with_image(image_url)
                return True
        return False

    def __iter__(self) -> Iterator[ArtistRef]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self) -> List[dict]:
        return [artist.to_dict() for artist in self._entries]

    @classmethod
    def from_list(cls, data: Optional[Iterable[dict]], capacity: int = DEFAULT_CAPACITY) -> "RecentArtistsCache":
        """Rebuild a cache from ``to_list`` output, newest first"""
        artists = []
        for item in data or []:
            try:
                artists.append(ArtistRef.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                logger.debug(f"Skipping malformed recent artist entry {item!r}: {e}")
        return cls(capacity=capacity, entries=artists)
