"""
Ordered song queue with a current-song pointer
"""

from typing import Iterable, List, Optional, Tuple

from .models import SongRecord


class SongQueue:
    """
    Ordered list of songs with a pointer to the current one

    The pointer only moves through explicit navigation. Failed moves return
    None and leave the queue untouched. Outside code should go through
    QueueManager rather than mutate a queue directly.
    """

    def __init__(self):
        self._songs: List[SongRecord] = []
        self._current_index = 0

    @property
    def songs(self) -> Tuple[SongRecord, ...]:
        return tuple(self._songs)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current(self) -> Optional[SongRecord]:
        if not self._songs:
            return None
        return self._songs[self._current_index]

    @property
    def remaining(self) -> int:
        """Songs after the current one"""
        if not self._songs:
            return 0
        return len(self._songs) - self._current_index - 1

    @property
    def can_go_previous(self) -> bool:
        return bool(self._songs) and self._current_index > 0

    def __len__(self) -> int:
        return len(self._songs)

    def is_empty(self) -> bool:
        return not self._songs

    def add_song(self, record: SongRecord) -> None:
        """Append a song; the first song of an empty queue becomes current"""
        self._songs.append(record)
        if len(self._songs) == 1:
            self._current_index = 0

    def add_multiple_songs(self, records: Iterable[SongRecord]) -> None:
        """Append songs in the given order, without deduplication"""
        for record in records:
            self.add_song(record)

    def go_to_next(self) -> Optional[SongRecord]:
        if self._current_index + 1 < len(self._songs):
            self._current_index += 1
            return self._songs[self._current_index]
        return None

    def go_to_previous(self) -> Optional[SongRecord]:
        if self._songs and self._current_index > 0:
            self._current_index -= 1
            return self._songs[self._current_index]
        return None

    def jump_to_song(self, index: int) -> Optional[SongRecord]:
        if 0 <= index < len(self._songs):
            self._current_index = index
            return self._songs[index]
        return None

    def upcoming(self, count: int = 5) -> List[SongRecord]:
        """Up to ``count`` songs strictly after the current one"""
        if not self._songs or count <= 0:
            return []
        start = self._current_index + 1
        return self._songs[start:start + count]

    def clear(self) -> None:
        self._songs.clear()
        self._current_index = 0

    def __repr__(self) -> str:
        return f"SongQueue(current={self._current_index}, total={len(self._songs)})"
