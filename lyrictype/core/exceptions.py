"""
Exception classes for lyrictype.

This module defines the custom exceptions used throughout the package.
Each exception carries a human-readable message plus an optional
dictionary of details for logging.

Exception Hierarchy:
    LyricTypeError (base)
        ConfigError - Configuration file issues
        LyricsAPIError - Lyrics/artist lookups that failed
        ArtistLoadError - An artist could not be loaded into the queue
        StateFileError - Local state file could not be read or written

Rejected keystrokes, exhausted queues and stale prefetch results are NOT
exceptions: they are ordinary outcomes reported through return values.
"""


class LyricTypeError(Exception):
    """
    Base exception for all lyrictype errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (artist id, query...).

    Example:
        try:
            await manager.initialize_with_artist(artist)
        except LyricTypeError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'artist_id': Artist involved in the error
                     - 'query': Search query that failed
                     - 'original_error': The wrapped exception, as a string
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricTypeError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - config.yaml has invalid YAML syntax
        - A section is not a mapping
        - Invalid field values (e.g., negative prefetch count)

    Example:
        raise ConfigError(
            "'queue.prefetch_count' must be a positive integer",
            details={'field': 'queue.prefetch_count', 'value': -1}
        )
    """
    pass


class LyricsAPIError(LyricTypeError):
    """
    Raised when a lyrics or artist lookup fails.

    Attributes:
        is_rate_limit: True if the provider refused the request for quota reasons.
        is_not_found: True if the artist or song does not exist upstream.

    Example:
        raise LyricsAPIError(
            "Genius request failed: timeout",
            details={'artist_id': 1421, 'original_error': 'ReadTimeout'}
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_rate_limit: bool = False,
        is_not_found: bool = False
    ) -> None:
        super().__init__(message, details)
        self.is_rate_limit = is_rate_limit
        self.is_not_found = is_not_found


class ArtistLoadError(LyricTypeError):
    """
    Raised by QueueManager.initialize_with_artist when the first song of an
    artist could not be loaded. Callers present it as "could not load artist".
    """
    pass


class StateFileError(LyricTypeError):
    """
    Raised when the local state file (recent artists, history) is unreadable
    or cannot be written.
    """
    pass
