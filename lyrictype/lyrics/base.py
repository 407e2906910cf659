"""
Interfaces of the external services the core consumes.

LyricsAPI is implemented by GeniusLyricsAPI in production and by in-memory
fakes in tests. ImageRecolorer is opaque: the core only knows it is
asynchronous and may fail.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, AbstractSet, Any, List, Optional

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..songs.models import ArtistInfo, ArtistRef, SongRecord

logger = get_logger(__name__)


class LyricsAPI(ABC):
    """Source of artists, songs and lyrics"""

    @abstractmethod
    async def fetch_artist_song(self, artist_id: Any, exclude_indices: AbstractSet[int]) -> Optional["SongRecord"]:
        """
        Fetch one song of an artist with usable lyrics

        Args:
            artist_id: Artist whose catalogue to draw from
            exclude_indices: Catalogue positions already fetched

        Returns:
            A song whose ``song_index`` is not in ``exclude_indices``, or
            None when the catalogue has nothing left

        Raises:
            LyricsAPIError: If the provider could not be reached
        """

    @abstractmethod
    async def search_artists(self, query: str, limit: int = 10) -> List["ArtistRef"]:
        """Typeahead artist search"""

    @abstractmethod
    async def get_artist_info(self, artist_id: Any, bypass_cache: bool = False) -> "ArtistInfo":
        """Artist name and image; ``bypass_cache`` forces a fresh lookup"""


class ImageRecolorer(ABC):
    """Service that recolors artwork into a two-color palette"""

    @abstractmethod
    async def recolor(self, image_bytes: bytes, primary_color: str, secondary_color: str) -> bytes:
        """Return the recolored image"""


async def recolor_or_original(
    recolorer: Optional[ImageRecolorer],
    image_bytes: bytes,
    primary_color: str,
    secondary_color: str
) -> bytes:
    """
    Recolor an image, falling back to the original on any failure

    Args:
        recolorer: Recolor service, or None to skip recoloring
        image_bytes: Original image
        primary_color: Foreground color, e.g. "#ffffff"
        secondary_color: Background color

    Returns:
        Recolored image bytes, or ``image_bytes`` unchanged
    """
    if recolorer is None or not image_bytes:
        return image_bytes

    try:
        recolored = await recolorer.recolor(image_bytes, primary_color, secondary_color)
    except Exception as e:
        logger.warning(f"Image recolor failed, using original: {e}")
        return image_bytes

    return recolored or image_bytes
