"""
Configuration management for lyrictype

This module handles loading, validation, and management of application settings
from YAML files and environment variables. It provides a centralized
configuration system shared by the typing engine, the song queue and the CLI.

The configuration is organized into logical sections using dataclasses:
- Game settings (display toggles, excerpt size, scoring penalty)
- Queue behaviour (prefetch size, lookahead)
- Lyrics provider settings (Genius credentials, timeouts)
- Artist search (debounce, result count)
- Network, logging and storage options

Sensitive data (the Genius API key) is loaded from environment variables,
never written back to disk.
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from ..core.exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class GameConfig:
    """
    Typing test configuration

    capitalization/punctuation are the two display toggles; turning either
    off lower-cases the lyrics or strips punctuation before a test starts.
    """
    capitalization: bool = True
    punctuation: bool = True
    excerpt_lines: int = 4
    error_penalty: int = 3
    live_wpm_interval: float = 0.5


@dataclass
class QueueConfig:
    """
    Song queue configuration

    prefetch_count songs are fetched in the background after an artist is
    selected; another background fetch starts once fewer than
    lookahead_threshold songs remain ahead of the current one.
    """
    prefetch_count: int = 5
    lookahead_threshold: int = 2
    upcoming_count: int = 5


@dataclass
class LyricsConfig:
    """Genius lyrics provider configuration"""
    genius_api_key: str = ""
    timeout: int = 15
    max_attempts: int = 3
    songs_per_page: int = 50
    max_catalog_pages: int = 4


@dataclass
class SearchConfig:
    """Artist typeahead search configuration"""
    debounce_ms: int = 300
    max_results: int = 10


@dataclass
class NetworkConfig:
    """
    Network configuration settings

    rate_limit requests are allowed per rate_period seconds. Metadata
    polling gives up after poll_attempts tries.
    """
    rate_limit: int = 2
    rate_period: float = 1.0
    retry_delay: float = 1.0
    retry_backoff: float = 2.0
    poll_attempts: int = 3


@dataclass
class LoggingConfig:
    """Logging configuration and output settings"""
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class StorageConfig:
    """Where local state (recent artists, history, config) is kept"""
    config_directory: str = "~/.lyrictype/"
    state_file: str = "state.yaml"


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies
    environment variable overrides. Unknown keys are ignored so old config
    files keep working.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path

        self.game = GameConfig()
        self.queue = QueueConfig()
        self.lyrics = LyricsConfig()
        self.search = SearchConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()
        self.storage = StorageConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'game': self.game,
            'queue': self.queue,
            'lyrics': self.lyrics,
            'search': self.search,
            'network': self.network,
            'logging': self.logging,
            'storage': self.storage,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in order of precedence; the first
        file found is used.

        Raises:
            ConfigError: If the file exists but is not valid YAML
        """
        config_paths = [
            self.config_path,
            Path(os.getenv('LYRICTYPE_CONFIG_DIR', '~/.lyrictype')).expanduser() / "config.yaml",
            Path("config.yaml"),
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(
                        f"Invalid YAML syntax in configuration file: {e}",
                        details={'file_path': str(path), 'original_error': str(e)}
                    ) from e
                break

        if not isinstance(config_data, dict):
            raise ConfigError(
                "Configuration file must contain a YAML dictionary",
                details={'file_path': str(path)}
            )

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Args:
            config_data: Dictionary containing configuration sections
        """
        sections = self._sections()

        for section_name, section_data in config_data.items():
            if section_name not in sections:
                continue
            if not isinstance(section_data, dict):
                raise ConfigError(
                    f"Section '{section_name}' must be a dictionary",
                    details={'section': section_name}
                )
            config_obj = sections[section_name]
            for key, value in section_data.items():
                if hasattr(config_obj, key):
                    setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Environment variables take precedence over file-based configuration"""
        env_mappings = {
            'GENIUS_API_KEY': lambda v: setattr(self.lyrics, 'genius_api_key', v),
            'LYRICTYPE_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
            'LYRICTYPE_CONFIG_DIR': lambda v: setattr(self.storage, 'config_directory', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_config_directory(self) -> Path:
        """Expanded configuration directory"""
        return Path(self.storage.config_directory).expanduser()

    def get_state_path(self) -> Path:
        """Expanded path of the local state file"""
        state = Path(self.storage.state_file).expanduser()
        if state.is_absolute():
            return state
        return self.get_config_directory() / state

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file

        The Genius API key is blanked before writing.

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = {name: asdict(section) for name, section in self._sections().items()}
        config_data['lyrics']['genius_api_key'] = ""

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(
                f"Failed to save config to {target}: {e}",
                details={'file_path': str(target), 'original_error': str(e)}
            ) from e

        return target

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is valid
        """
        errors = []

        if self.game.excerpt_lines < 1:
            errors.append(f"game.excerpt_lines must be >= 1, got {self.game.excerpt_lines}")

        if self.game.error_penalty < 0:
            errors.append(f"game.error_penalty must be >= 0, got {self.game.error_penalty}")

        if self.game.live_wpm_interval <= 0:
            errors.append("game.live_wpm_interval must be positive")

        if self.queue.prefetch_count < 1:
            errors.append(f"queue.prefetch_count must be >= 1, got {self.queue.prefetch_count}")

        if self.queue.lookahead_threshold < 0:
            errors.append("queue.lookahead_threshold must be >= 0")

        if self.search.debounce_ms < 0:
            errors.append("search.debounce_ms must be >= 0")

        if self.network.poll_attempts < 1:
            errors.append("network.poll_attempts must be >= 1")

        if self.logging.level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Invalid logging level: {self.logging.level}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Capitalization: {'on' if self.game.capitalization else 'off'}",
            f"Punctuation: {'on' if self.game.punctuation else 'off'}",
            f"Prefetch: {self.queue.prefetch_count}",
            f"Genius key: {'set' if self.lyrics.genius_api_key else 'missing'}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance, created on first access
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The shared Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
