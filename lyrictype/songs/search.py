"""
Artist typeahead search with ranking and debouncing
"""

from typing import Iterable, List, Optional

from ..core.exceptions import LyricsAPIError
from ..lyrics.base import LyricsAPI
from ..utils.logger import get_logger
from ..utils.timing import Debouncer, SleepFunc
from .models import ArtistRef

logger = get_logger(__name__)


def rank_artists(results: Iterable[ArtistRef], query: str, limit: int = 10) -> List[ArtistRef]:
    """
    Order search results for display

    Popular artists come first, then exact name matches, then names
    starting with the query, then shorter names, then alphabetical order.
    Matching is case-insensitive.

    Args:
        results: Raw search results
        query: The search query
        limit: Maximum number of results to return

    Returns:
        Ranked results, at most ``limit``
    """
    needle = query.strip().casefold()

    def sort_key(artist: ArtistRef):
        name = artist.name.casefold()
        return (
            not artist.is_popular,
            name != needle,
            not name.startswith(needle),
            len(name),
            name,
        )

    return sorted(results, key=sort_key)[:max(limit, 0)]


class ArtistSearch:
    """
    Debounced artist search

    Only the last query of a burst reaches the API; superseded calls
    return None.

    Example:
        search = ArtistSearch(api)
        results = await search.search("daft")
    """

    def __init__(
        self,
        api: LyricsAPI,
        debounce_ms: int = 300,
        max_results: int = 10,
        sleep: Optional[SleepFunc] = None
    ):
        self.api = api
        self.max_results = max_results
        self._debouncer = Debouncer(debounce_ms / 1000, sleep=sleep)

    async def search(self, query: str) -> Optional[List[ArtistRef]]:
        """
        Search artists after the debounce delay

        Returns:
            Ranked results; [] for an empty query or a failed lookup; None
            if a newer query superseded this one
        """
        query = (query or "").strip()
        if not query:
            self._debouncer.cancel()
            return []

        return await self._debouncer.call(self._search_now, query)

    async def _search_now(self, query: str) -> List[ArtistRef]:
        try:
            results = await self.api.search_artists(query, self.max_results)
        except LyricsAPIError as e:
            logger.warning(f"Artist search failed for '{query}': {e}")
            return []

        ranked = rank_artists(results, query, self.max_results)
        logger.debug(f"Search '{query}': {len(ranked)} artists")
        return ranked
