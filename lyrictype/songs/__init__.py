"""
Song queue, queue manager and artist bookkeeping
"""

from .models import ArtistRef, ArtistInfo, SongRecord, QueueStatus
from .song_queue import SongQueue
from .recent import RecentArtistsCache
from .manager import QueueManager
from .search import ArtistSearch, rank_artists
from .history import CompletedSong, CompletedSongsLog

__all__ = [
    'ArtistRef',
    'ArtistInfo',
    'SongRecord',
    'QueueStatus',
    'SongQueue',
    'RecentArtistsCache',
    'QueueManager',
    'ArtistSearch',
    'rank_artists',
    'CompletedSong',
    'CompletedSongsLog',
]
