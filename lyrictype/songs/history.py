"""
Log of completed typing tests.

Keeps the most recent completions, newest first, in a form that can be
written to the local state file.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator

from ..session.models import TypingResult
from ..utils.helpers import sanitize_filename
from ..utils.logger import get_logger
from .models import SongRecord

logger = get_logger(__name__)

DEFAULT_CAPACITY = 25


@dataclass(frozen=True)
class CompletedSong:
    """
    One finished typing test.

    Attributes:
        song_id: Provider song ID.
        title: Song title.
        artist: Credited artist string.
        image_url: Song artwork.
        source_url: Provider page of the song.
        wpm: Final WPM, rounded to 2 decimals.
        accuracy: Accuracy percentage, rounded to 2 decimals.
        characters_typed: Characters typed at completion.
        incorrect_chars: Characters wrong at completion.
        duration_minutes: Active test time in minutes, rounded to 2 decimals.
        lyrics_length: Length of the typed excerpt.
        completed_at: ISO 8601 UTC timestamp.
        file_name: "Artist - Title.mp3", sanitized for file systems.
    """

    song_id: str
    title: str
    artist: str
    wpm: float
    accuracy: float
    characters_typed: int
    incorrect_chars: int
    duration_minutes: float
    lyrics_length: int
    completed_at: str
    image_url: str = ""
    source_url: str = ""
    file_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletedSong":
        return cls(
            song_id=str(data.get("song_id", "")),
            title=data.get("title", ""),
            artist=data.get("artist", ""),
            wpm=float(data.get("wpm", 0.0)),
            accuracy=float(data.get("accuracy", 0.0)),
            characters_typed=int(data.get("characters_typed", 0)),
            incorrect_chars=int(data.get("incorrect_chars", 0)),
            duration_minutes=float(data.get("duration_minutes", 0.0)),
            lyrics_length=int(data.get("lyrics_length", 0)),
            completed_at=data.get("completed_at", ""),
            image_url=data.get("image_url", ""),
            source_url=data.get("source_url", ""),
            file_name=data.get("file_name", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CompletedSongsLog:
    """Most recent completed tests, newest first, capped at ``capacity``"""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, entries: Iterable[CompletedSong] | None = None):
        self.capacity = capacity
        self._entries: list[CompletedSong] = list(entries or [])[:capacity]

    def add(self, song: SongRecord, result: TypingResult, now: datetime | None = None) -> CompletedSong:
        """
        Record a finished test

        Args:
            song: The song that was typed
            result: Its final score
            now: Completion time, current UTC time when None

        Returns:
            The stored entry
        """
        completed_at = (now or datetime.now(timezone.utc)).isoformat()
        entry = CompletedSong(
            song_id=song.song_id,
            title=song.title,
            artist=song.artist,
            wpm=round(result.wpm, 2),
            accuracy=round(result.accuracy, 2),
            characters_typed=result.characters_typed,
            incorrect_chars=result.incorrect_count,
            duration_minutes=round(result.duration_minutes, 2),
            lyrics_length=len(song.lyrics),
            completed_at=completed_at,
            image_url=song.image_url,
            source_url=song.source_url,
            file_name=sanitize_filename(f"{song.artist} - {song.title}.mp3"),
        )

        self._entries.insert(0, entry)
        del self._entries[self.capacity:]
        logger.debug(f"Recorded completion: {entry.file_name} at {entry.wpm} wpm")
        return entry

    def best_wpm(self) -> float:
        return max((entry.wpm for entry in self._entries), default=0.0)

    def average_accuracy(self) -> float:
        if not self._entries:
            return 0.0
        return round(sum(entry.accuracy for entry in self._entries) / len(self._entries), 2)

    def __iter__(self) -> Iterator[CompletedSong]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_list(cls, data: Iterable[dict] | None, capacity: int = DEFAULT_CAPACITY) -> "CompletedSongsLog":
        entries = []
        for item in data or []:
            try:
                entries.append(CompletedSong.from_dict(item))
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Skipping malformed history entry: {e}")
        return cls(capacity=capacity, entries=entries)
