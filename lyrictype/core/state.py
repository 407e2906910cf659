"""
Local state file.

Persists the recent artists, the completed songs log and the display
toggles between runs as a small YAML document:

    version: 1
    recent_artists: [...]
    completed_songs: [...]
    game:
      capitalization: true
      punctuation: true

Writes go to a temporary file first and replace the state file in one
step, so an interrupted write never leaves a truncated file behind.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..utils.logger import get_logger
from .exceptions import StateFileError

logger = get_logger(__name__)

STATE_VERSION = 1

_SECTIONS = ('recent_artists', 'completed_songs')


def _empty_state() -> Dict[str, Any]:
    return {
        'version': STATE_VERSION,
        'recent_artists': [],
        'completed_songs': [],
        'game': {},
    }


class StateStore:
    """
    YAML-backed store for data that survives restarts

    Example:
        store = StateStore(settings.get_state_path())
        state = store.load()
        recent = RecentArtistsCache.from_list(state['recent_artists'])
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Dict[str, Any]:
        """
        Read the state file

        Returns:
            State dictionary; a fresh empty state when the file does not exist

        Raises:
            StateFileError: If the file cannot be read or is not valid state
        """
        if not self.path.exists():
            return _empty_state()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise StateFileError(
                f"State file is not valid YAML: {self.path}",
                details={'path': str(self.path), 'original_error': str(e)}
            ) from e
        except OSError as e:
            raise StateFileError(
                f"Cannot read state file: {self.path}",
                details={'path': str(self.path), 'original_error': str(e)}
            ) from e

        if data is None:
            return _empty_state()
        if not isinstance(data, dict):
            raise StateFileError(
                f"State file must contain a mapping: {self.path}",
                details={'path': str(self.path), 'type': type(data).__name__}
            )

        state = _empty_state()
        for section in _SECTIONS:
            value = data.get(section)
            if isinstance(value, list):
                state[section] = value
            elif value is not None:
                logger.warning(f"Ignoring malformed '{section}' in {self.path}")

        if isinstance(data.get('game'), dict):
            state['game'] = data['game']

        return state

    def save(self, state: Dict[str, Any]) -> Path:
        """
        Write the state file

        Args:
            state: Dictionary with any of recent_artists, completed_songs, game

        Returns:
            Path of the written file

        Raises:
            StateFileError: If the file cannot be written
        """
        document = _empty_state()
        document.update({key: value for key, value in state.items() if key in document})
        document['version'] = STATE_VERSION

        temp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(document, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            temp_path.replace(self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StateFileError(
                f"Cannot write state file: {self.path}",
                details={'path': str(self.path), 'original_error': str(e)}
            ) from e

        logger.debug(f"State saved to {self.path}")
        return self.path

    def update(self, **sections: Any) -> Dict[str, Any]:
        """Load, replace the given sections, save; returns the new state"""
        state = self.load()
        state.update(sections)
        self.save(state)
        return state
